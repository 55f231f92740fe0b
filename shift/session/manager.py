"""
Room Manager - Creates and tracks game rooms.

LIFECYCLE:
1. A room is created explicitly (with its board and rule set) or lazily
   when the first player joins
2. Players join up to the room's capacity; the first joiner moves first
3. Dice rolls are resolved by the TurnManager against the room's state
4. A room can be reset (same rules, players back to the start)
5. The room is removed when its last player leaves or it goes stale

PERSISTENCE RULES:
- In-memory only: the registry is an explicit keyed store owned by
  whoever serves the rooms, never module-level state
- The engine core receives a room's state per call and keeps nothing
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable
import logging
import time
import uuid

from ..engine_core.state import (
    DEFAULT_BOARD_LENGTH, GameState, GameStatus, Player, create_game_state, player_color,
)
from ..engine_core.rules import Rule
from ..rules_schema import validate_rules


logger = logging.getLogger(__name__)


DEFAULT_MAX_PLAYERS = 2


class RoomError(Exception):
    """Room lifecycle failure with a structured error code."""

    def __init__(self, message: str, error_code: str = "ROOM_ERROR"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


@dataclass
class Room:
    """
    One game room.

    Holds the current canonical GameState plus the bookkeeping the engine
    does not care about (capacity, winner, pending skipped turns).
    """
    room_id: str
    state: GameState
    created_at: float
    max_players: int = DEFAULT_MAX_PLAYERS
    winner: str | None = None
    turn_number: int = 0
    pending_skips: set[str] = field(default_factory=set)
    last_activity: float = 0.0

    @property
    def player_count(self) -> int:
        return len(self.state.players)

    @property
    def is_full(self) -> bool:
        return self.player_count >= self.max_players

    @property
    def is_empty(self) -> bool:
        return self.player_count == 0

    @property
    def is_finished(self) -> bool:
        return self.state.is_finished

    def touch(self) -> None:
        self.last_activity = time.time()


class RoomManager:
    """
    Keyed store of rooms: room_id -> Room.

    Not thread-safe; the serving layer serializes access per room.
    """

    def __init__(
        self,
        default_board_length: int = DEFAULT_BOARD_LENGTH,
        default_max_players: int = DEFAULT_MAX_PLAYERS,
    ):
        self.default_board_length = default_board_length
        self.default_max_players = default_max_players
        self._rooms: dict[str, Room] = {}

    def create_room(
        self,
        room_id: str | None = None,
        board_length: int | None = None,
        rules: Iterable[Rule] = (),
        max_players: int | None = None,
    ) -> Room:
        """
        Create a new room with a fresh board and rule set.

        Raises:
            RoomError: room id already in use, or bad board/capacity
            RuleValidationError: the rule set does not validate
        """
        room_id = room_id or str(uuid.uuid4())
        if room_id in self._rooms:
            raise RoomError(f"Room {room_id} already exists", error_code="ROOM_EXISTS")

        board_length = board_length or self.default_board_length
        max_players = max_players or self.default_max_players
        if board_length < 2:
            raise RoomError("Board needs at least 2 tiles", error_code="VALIDATION_ERROR")
        if max_players < 1:
            raise RoomError("Room needs room for at least 1 player", error_code="VALIDATION_ERROR")

        rules = list(rules)
        validation = validate_rules(rules, board_length=board_length)
        validation.raise_if_invalid()
        for warning in validation.warnings:
            logger.warning("Room %s: %s", room_id, warning)

        now = time.time()
        room = Room(
            room_id=room_id,
            state=create_game_state(room_id, board_length=board_length, rules=rules),
            created_at=now,
            max_players=max_players,
            last_activity=now,
        )
        self._rooms[room_id] = room
        logger.info("Created room %s (%d tiles, %d rules)", room_id, board_length, len(rules))
        return room

    def get_room(self, room_id: str) -> Room | None:
        """Get a room by ID."""
        return self._rooms.get(room_id)

    def require_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomError(f"Room {room_id} not found", error_code="ROOM_NOT_FOUND")
        return room

    def get_or_create_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            room = self.create_room(room_id)
        return room

    def list_room_ids(self) -> list[str]:
        return list(self._rooms)

    def list_rooms(self) -> list[Room]:
        return list(self._rooms.values())

    def remove_room(self, room_id: str) -> bool:
        room = self._rooms.pop(room_id, None)
        if room:
            logger.info("Removed room %s", room_id)
        return room is not None

    def join_room(self, room_id: str, player_id: str) -> Room:
        """
        Add a player to a room, creating the room if needed.

        Joining twice is a no-op. The first player to join holds the turn.
        """
        room = self.get_or_create_room(room_id)
        state = room.state

        if state.has_player(player_id):
            return room
        if room.is_full:
            raise RoomError(f"Room {room_id} is full", error_code="ROOM_FULL")

        player = Player(id=player_id, color=player_color(room.player_count))
        state = state.with_players(state.players + (player,))
        if state.current_turn is None:
            state = state._copy_with(current_turn=player_id)

        room.state = state
        room.touch()
        logger.info("Player %s joined room %s (colour %s)", player_id, room_id, player.color)
        return room

    def leave_room(self, room_id: str, player_id: str) -> Room | None:
        """
        Remove a player from a room.

        The turn passes on if the leaver held it. Returns None when the room
        was removed because it became empty.
        """
        room = self.require_room(room_id)
        state = room.state
        if not state.has_player(player_id):
            raise RoomError(f"Player {player_id} is not in room {room_id}", error_code="PLAYER_NOT_FOUND")

        current_turn = state.current_turn
        if current_turn == player_id:
            current_turn = next_player_id(state, player_id)

        remaining = tuple(p for p in state.players if p.id != player_id)
        if current_turn == player_id or not remaining:
            current_turn = remaining[0].id if remaining else None

        room.state = state._copy_with(players=remaining, current_turn=current_turn)
        room.pending_skips.discard(player_id)
        room.touch()
        logger.info("Player %s left room %s", player_id, room_id)

        if room.is_empty:
            self.remove_room(room_id)
            return None
        return room

    def reset_room(self, room_id: str) -> Room:
        """Reset players to the start, keeping roster, board and rules."""
        room = self.require_room(room_id)
        state = room.state
        players = tuple(
            Player(id=p.id, color=p.color)
            for p in state.players
        )
        room.state = state._copy_with(
            players=players,
            current_turn=players[0].id if players else None,
            status=GameStatus.PLAYING,
        )
        room.winner = None
        room.turn_number = 0
        room.pending_skips.clear()
        room.touch()
        logger.info("Reset room %s", room_id)
        return room

    def cleanup_stale_rooms(self, max_age_seconds: int = 3600) -> list[str]:
        """Remove rooms with no activity for `max_age_seconds`."""
        cutoff = time.time() - max_age_seconds
        stale = [rid for rid, room in self._rooms.items() if room.last_activity < cutoff]
        for room_id in stale:
            self.remove_room(room_id)
        return stale


def next_player_id(state: GameState, after_player_id: str) -> str | None:
    """Next player in circular roster order after `after_player_id`."""
    ids = state.player_ids
    if not ids:
        return None
    if after_player_id not in ids:
        return ids[0]
    return ids[(ids.index(after_player_id) + 1) % len(ids)]
