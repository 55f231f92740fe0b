"""
API Module - Client interface.

Exposes rooms and dice rolls over REST and a per-room WebSocket.
Clients:
1. Create a room with its rule set (or just join one)
2. Join as a player
3. Roll the dice when holding the turn
4. Receive the new state and the rule log

All state is room-scoped and in-memory. No user accounts.
"""

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
    HealthResponse,
    # Shared
    EffectModel,
    RuleModel,
    PlayerInfo,
    TileInfo,
    RuleInfo,
    LogEntryInfo,
    ErrorCode,
)
from .service import APIService

__all__ = [
    # Requests
    "CreateRoomRequest",
    "JoinRoomRequest",
    "RollDiceRequest",
    # Responses
    "RoomResponse",
    "RoomListResponse",
    "RollDiceResponse",
    "GameStateResponse",
    "EndRoomResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "EffectModel",
    "RuleModel",
    "PlayerInfo",
    "TileInfo",
    "RuleInfo",
    "LogEntryInfo",
    "ErrorCode",
    # Service
    "APIService",
]
