"""
Session Module - Rooms, players and turns around the engine core.

A room represents one game:
- Created explicitly or when the first player joins
- Holds the canonical game state between rolls
- Enforces turn order and detects the winner
- Removed when empty or stale

Rooms are EPHEMERAL: in-memory only, nothing is persisted.
"""

from .manager import RoomManager, Room, RoomError, next_player_id
from .turns import TurnManager, TurnResult, TurnError

__all__ = [
    "RoomManager",
    "Room",
    "RoomError",
    "next_player_id",
    "TurnManager",
    "TurnResult",
    "TurnError",
]
