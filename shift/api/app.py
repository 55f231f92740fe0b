"""
FastAPI Application - REST and realtime API for game clients.

Endpoints:
    POST   /api/v1/rooms                         Create room (board + rules)
    GET    /api/v1/rooms                         List rooms
    GET    /api/v1/rooms/{id}                    Get room status
    DELETE /api/v1/rooms/{id}                    Remove room
    POST   /api/v1/rooms/{id}/players            Join room
    DELETE /api/v1/rooms/{id}/players/{player}   Leave room
    POST   /api/v1/rooms/{id}/roll               Roll dice
    POST   /api/v1/rooms/{id}/reset              Reset room
    WS     /api/v1/rooms/{id}/ws?player_id=...   Realtime room channel

WebSocket messages are JSON objects {"type": ..., "payload": {...}}.

From client:
- ping_test: Connectivity check, answered with pong_response
- send_shout {message}: Broadcast incoming_shout to the whole room
- roll_dice {diceValue?}: Roll for the connected player

From server:
- room_joined: Sent to the joining connection
- player_joined_room: Sent to the other connections
- game_state_sync: Full state, sent to every connection after any change
- dice_rolled: Roll outcome and rule log
- error: Rejected message (sent to the sender only)
"""

from typing import Optional, Union
import json
import logging
import os
import time
import uuid

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .service import APIService
from .schemas import (
    # Request models
    CreateRoomRequest,
    JoinRoomRequest,
    RollDiceRequest,
    # Response models
    RoomResponse,
    RoomListResponse,
    RollDiceResponse,
    EndRoomResponse,
    ErrorResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)
from ..session import RoomManager


logger = logging.getLogger(__name__)


# Environment configuration
SHIFT_ENV = os.getenv("SHIFT_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
SHIFT_BOARD_LENGTH = int(os.getenv("SHIFT_BOARD_LENGTH", "20"))
SHIFT_MAX_PLAYERS = int(os.getenv("SHIFT_MAX_PLAYERS", "2"))

API_VERSION = "1.0.0"

HTTP_STATUS_BY_CODE = {
    ErrorCode.ROOM_NOT_FOUND: 404,
    ErrorCode.PLAYER_NOT_FOUND: 404,
    ErrorCode.ROOM_EXISTS: 409,
    ErrorCode.ROOM_FULL: 409,
    ErrorCode.NOT_YOUR_TURN: 409,
    ErrorCode.GAME_FINISHED: 409,
    ErrorCode.INVALID_DICE: 400,
    ErrorCode.INVALID_RULE: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="SHIFT Engine API",
        description="""
Rules engine for a turn-based board game.

Rolling the dice moves the player, then resolves the rules declared for
the room: rules bound to the start tile fire before the move, rules bound
to the landing tile fire after it, and landing rules can cascade.

## Error Codes

| Code | Description |
|------|-------------|
| `ROOM_NOT_FOUND` | Room does not exist |
| `ROOM_FULL` | Room is at capacity |
| `NOT_YOUR_TURN` | Another player holds the turn |
| `GAME_FINISHED` | The game was already won |
| `INVALID_RULE` | Rule set failed validation |
        """,
        version=API_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    api_service = service or APIService(
        rooms=RoomManager(
            default_board_length=SHIFT_BOARD_LENGTH,
            default_max_players=SHIFT_MAX_PLAYERS,
        )
    )
    app.state.service = api_service

    # WebSocket connections per room
    ws_connections: dict[str, list[WebSocket]] = {}
    app.state.ws_connections = ws_connections

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=HTTP_STATUS_BY_CODE.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    async def broadcast_to_room(room_id: str, message: dict, exclude: Optional[WebSocket] = None):
        """Broadcast a message to all WebSocket connections of a room."""
        dead_connections = []
        for ws in list(ws_connections.get(room_id, [])):
            if ws is exclude:
                continue
            try:
                await ws.send_json(message)
            except Exception:
                logger.info("Dropping dead connection in room %s", room_id)
                dead_connections.append(ws)
        for ws in dead_connections:
            drop_connection(room_id, ws)

    def drop_connection(room_id: str, websocket: WebSocket):
        connections = ws_connections.get(room_id)
        if connections and websocket in connections:
            connections.remove(websocket)
        if room_id in ws_connections and not ws_connections[room_id]:
            del ws_connections[room_id]

    async def broadcast_state(room_id: str):
        payload = api_service.game_state_payload(room_id)
        if payload is not None:
            await broadcast_to_room(room_id, {"type": "game_state_sync", "payload": payload})

    # =========================================================================
    # Room Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms",
        response_model=RoomResponse,
        status_code=201,
        responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Create a room with its board and rules",
    )
    async def create_room(request: CreateRoomRequest) -> Union[RoomResponse, JSONResponse]:
        response = api_service.create_room(request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/rooms",
        response_model=RoomListResponse,
        tags=["Rooms"],
        summary="List rooms",
    )
    async def list_rooms() -> RoomListResponse:
        return api_service.list_rooms()

    @app.get(
        "/api/v1/rooms/{room_id}",
        response_model=RoomResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Get room status",
    )
    async def get_room(room_id: str) -> Union[RoomResponse, JSONResponse]:
        response = api_service.get_room(room_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.delete(
        "/api/v1/rooms/{room_id}",
        response_model=EndRoomResponse,
        tags=["Rooms"],
        summary="Remove a room",
    )
    async def end_room(room_id: str) -> EndRoomResponse:
        return api_service.end_room(room_id)

    @app.post(
        "/api/v1/rooms/{room_id}/reset",
        response_model=RoomResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Reset players to the start",
    )
    async def reset_room(room_id: str) -> Union[RoomResponse, JSONResponse]:
        response = api_service.reset_room(room_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        await broadcast_state(room_id)
        return response

    # =========================================================================
    # Player Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms/{room_id}/players",
        response_model=RoomResponse,
        responses={409: {"model": ErrorResponse}},
        tags=["Players"],
        summary="Join a room (created on first join)",
    )
    async def join_room(room_id: str, request: JoinRoomRequest) -> Union[RoomResponse, JSONResponse]:
        response = api_service.join_room(room_id, request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        await broadcast_state(room_id)
        return response

    @app.delete(
        "/api/v1/rooms/{room_id}/players/{player_id}",
        response_model=Union[RoomResponse, EndRoomResponse],
        responses={404: {"model": ErrorResponse}},
        tags=["Players"],
        summary="Leave a room",
    )
    async def leave_room(room_id: str, player_id: str):
        response = api_service.leave_room(room_id, player_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        await broadcast_state(room_id)
        return response

    # =========================================================================
    # Turn Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms/{room_id}/roll",
        response_model=RollDiceResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Turns"],
        summary="Roll the dice for the player holding the turn",
    )
    async def roll_dice(room_id: str, request: RollDiceRequest) -> Union[RollDiceResponse, JSONResponse]:
        response = api_service.roll_dice(room_id, request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        await broadcast_to_room(room_id, {"type": "dice_rolled", "payload": response.model_dump(mode="json")})
        await broadcast_state(room_id)
        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/rooms/{room_id}/ws")
    async def room_websocket(
        websocket: WebSocket,
        room_id: str,
        player_id: Optional[str] = Query(default=None),
    ):
        """Realtime room channel; connecting joins the room."""
        await websocket.accept()
        player_id = player_id or str(uuid.uuid4())

        joined = api_service.join_room(room_id, JoinRoomRequest(player_id=player_id))
        if isinstance(joined, ErrorResponse):
            await websocket.send_json({"type": "error", "payload": joined.model_dump(mode="json")})
            await websocket.close()
            return

        ws_connections.setdefault(room_id, []).append(websocket)
        logger.info("Player %s connected to room %s", player_id, room_id)

        await websocket.send_json({"type": "room_joined", "payload": {"roomId": room_id, "playerId": player_id}})
        await broadcast_state(room_id)
        await broadcast_to_room(
            room_id,
            {"type": "player_joined_room", "payload": {"id": player_id, "message": "A new player has arrived!"}},
            exclude=websocket,
        )

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({"type": "error", "payload": {"message": "Invalid JSON"}})
                    continue
                if not isinstance(message, dict):
                    await websocket.send_json({"type": "error", "payload": {"message": "Expected a JSON object"}})
                    continue
                await handle_message(websocket, room_id, player_id, message)
        except WebSocketDisconnect:
            logger.info("Player %s disconnected from room %s", player_id, room_id)
        finally:
            drop_connection(room_id, websocket)

    async def handle_message(websocket: WebSocket, room_id: str, player_id: str, message: dict):
        message_type = message.get("type")
        payload = message.get("payload")
        if not isinstance(payload, dict):
            payload = {}

        if message_type == "ping_test":
            await websocket.send_json({
                "type": "pong_response",
                "payload": {"message": "Pong!", "serverTime": time.strftime("%H:%M:%S")},
            })

        elif message_type == "send_shout":
            await broadcast_to_room(room_id, {
                "type": "incoming_shout",
                "payload": {
                    "senderId": player_id,
                    "message": str(payload.get("message", "")),
                    "timestamp": int(time.time() * 1000),
                },
            })

        elif message_type == "roll_dice":
            try:
                request = RollDiceRequest(player_id=player_id, dice_value=payload.get("diceValue"))
            except ValidationError:
                await websocket.send_json({"type": "error", "payload": {
                    "error": "diceValue must be an integer",
                    "error_code": ErrorCode.INVALID_DICE.value,
                }})
                return
            response = api_service.roll_dice(room_id, request)
            if isinstance(response, ErrorResponse):
                await websocket.send_json({"type": "error", "payload": response.model_dump(mode="json")})
                return
            await broadcast_to_room(room_id, {"type": "dice_rolled", "payload": response.model_dump(mode="json")})
            await broadcast_state(room_id)

        else:
            await websocket.send_json({
                "type": "error",
                "payload": {"message": f"Unknown message type: {message_type}"},
            })

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(status="healthy", service="shift-engine", version=API_VERSION)

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "SHIFT Engine API",
            "version": API_VERSION,
            "environment": SHIFT_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn shift.api.app:app
app = create_app()
