"""
API Service - Business logic layer between transport and session layer.

The service:
1. Translates API requests to room/turn manager calls
2. Converts engine values to response models
3. Turns room/turn/rule errors into ErrorResponse values

This layer is framework-agnostic (used by the FastAPI app and the CLI).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Union
import logging

from .schemas import (
    # Requests
    CreateRoomRequest,
    JoinRoomRequest,
    RollDiceRequest,
    # Responses
    RoomResponse,
    RoomListResponse,
    RollDiceResponse,
    GameStateResponse,
    EndRoomResponse,
    ErrorResponse,
    # Shared
    TileInfo,
    PlayerInfo,
    RuleInfo,
    EffectModel,
    LogEntryInfo,
    # Enums
    ErrorCode,
    GameStatusName,
)
from ..engine_core.state import GameState
from ..engine_core.rules import Rule, RuleLogEntry
from ..rules_schema import RuleValidationError, rules_from_list, validate_rules
from ..session import Room, RoomError, RoomManager, TurnError, TurnManager, TurnResult


logger = logging.getLogger(__name__)


def _error(code: str | ErrorCode, message: str, details: dict | None = None) -> ErrorResponse:
    try:
        error_code = ErrorCode(code)
    except ValueError:
        error_code = ErrorCode.INTERNAL_ERROR
    return ErrorResponse(error=message, error_code=error_code, details=details)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        room = service.create_room(CreateRoomRequest(room_id="r1"))
        service.join_room("r1", JoinRoomRequest(player_id="alice"))
        outcome = service.roll_dice("r1", RollDiceRequest(player_id="alice"))
    """
    rooms: RoomManager = field(default_factory=RoomManager)
    turns: TurnManager | None = None

    def __post_init__(self):
        if self.turns is None:
            self.turns = TurnManager(self.rooms)

    # -------------------------------------------------------------------------
    # Rooms
    # -------------------------------------------------------------------------

    def create_room(self, request: CreateRoomRequest) -> Union[RoomResponse, ErrorResponse]:
        """Create a room, loading and validating its rule set."""
        try:
            rules = rules_from_list(r.model_dump(by_alias=True) for r in request.rules)
            room = self.rooms.create_room(
                room_id=request.room_id,
                board_length=request.board_length,
                rules=rules,
                max_players=request.max_players,
            )
        except RuleValidationError as e:
            return _error(ErrorCode.INVALID_RULE, str(e), details={"errors": e.errors})
        except RoomError as e:
            return _error(e.error_code, e.message)

        warnings = validate_rules(rules, board_length=room.state.board_length).warnings
        return self._room_response(room, warnings=warnings)

    def get_room(self, room_id: str) -> Union[RoomResponse, ErrorResponse]:
        room = self.rooms.get_room(room_id)
        if room is None:
            return _error(ErrorCode.ROOM_NOT_FOUND, f"Room {room_id} not found")
        return self._room_response(room)

    def list_rooms(self) -> RoomListResponse:
        room_ids = self.rooms.list_room_ids()
        return RoomListResponse(room_ids=room_ids, count=len(room_ids))

    def end_room(self, room_id: str) -> EndRoomResponse:
        removed = self.rooms.remove_room(room_id)
        return EndRoomResponse(
            success=removed,
            room_id=room_id,
            message="Room removed" if removed else "Room not found",
        )

    def reset_room(self, room_id: str) -> Union[RoomResponse, ErrorResponse]:
        try:
            room = self.rooms.reset_room(room_id)
        except RoomError as e:
            return _error(e.error_code, e.message)
        return self._room_response(room)

    # -------------------------------------------------------------------------
    # Players
    # -------------------------------------------------------------------------

    def join_room(self, room_id: str, request: JoinRoomRequest) -> Union[RoomResponse, ErrorResponse]:
        """Join a room, creating it with defaults if it does not exist."""
        try:
            room = self.rooms.join_room(room_id, request.player_id)
        except RoomError as e:
            return _error(e.error_code, e.message)
        return self._room_response(room)

    def leave_room(self, room_id: str, player_id: str) -> Union[RoomResponse, EndRoomResponse, ErrorResponse]:
        try:
            room = self.rooms.leave_room(room_id, player_id)
        except RoomError as e:
            return _error(e.error_code, e.message)
        if room is None:
            return EndRoomResponse(success=True, room_id=room_id, message="Last player left, room removed")
        return self._room_response(room)

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    def roll_dice(self, room_id: str, request: RollDiceRequest) -> Union[RollDiceResponse, ErrorResponse]:
        """Resolve a dice roll. Illegal rolls come back as ErrorResponse."""
        try:
            result = self.turns.roll_dice(room_id, request.player_id, request.dice_value)
        except TurnError as e:
            logger.info("Rejected roll in room %s: %s", room_id, e.message)
            return _error(e.error_code, e.message)
        return self._roll_response(result)

    def game_state_payload(self, room_id: str) -> dict[str, Any] | None:
        """Wire-shape state for realtime broadcast (camelCase keys)."""
        room = self.rooms.get_room(room_id)
        return room.state.to_dict() if room else None

    # -------------------------------------------------------------------------
    # Conversion Helpers
    # -------------------------------------------------------------------------

    def _room_response(self, room: Room, warnings: list[str] | None = None) -> RoomResponse:
        return RoomResponse(
            room_id=room.room_id,
            max_players=room.max_players,
            player_count=room.player_count,
            turn_number=room.turn_number,
            winner=room.winner,
            created_at=room.created_at,
            game_state=game_state_response(room.state),
            warnings=warnings or [],
        )

    def _roll_response(self, result: TurnResult) -> RollDiceResponse:
        return RollDiceResponse(
            room_id=result.room_id,
            player_id=result.player_id,
            dice_value=result.dice_value,
            logs=[log_entry_info(entry) for entry in result.logs],
            next_player=result.next_player,
            winner=result.winner,
            game_over=result.game_over,
            extra_turn=result.extra_turn,
            skipped_players=result.skipped_players,
            turn_number=result.turn_number,
            game_state=game_state_response(result.state),
        )


def log_entry_info(entry: RuleLogEntry) -> LogEntryInfo:
    return LogEntryInfo(
        rule_id=entry.rule_id,
        message=entry.message,
        severity=entry.severity.value,
    )


def rule_info(rule: Rule) -> RuleInfo:
    return RuleInfo(
        id=rule.id,
        title=rule.title,
        trigger=rule.trigger.value,
        tile_index=rule.tile_index,
        priority=rule.priority,
        effects=[
            EffectModel(
                type=e.type_name,
                value=e.value if isinstance(e.value, (int, float, str)) else str(e.value),
                target=e.target.value,
            )
            for e in rule.effects
        ],
    )


def game_state_response(state: GameState) -> GameStateResponse:
    """Convert a GameState to its response model."""
    return GameStateResponse(
        room_id=state.room_id,
        status=GameStatusName(state.status.value),
        current_turn=state.current_turn,
        board_length=state.board_length,
        tiles=[TileInfo(**tile.to_dict()) for tile in state.tiles],
        players=[
            PlayerInfo(
                id=p.id,
                position=p.position,
                score=p.score,
                color=p.color,
                is_current_turn=p.id == state.current_turn,
            )
            for p in state.players
        ],
        active_rules=[rule_info(rule) for rule in state.active_rules],
    )
