"""
Turn Manager - Legality, win detection and turn rotation around the engine.

The turn:
1. Reject illegal rolls (unknown room, finished game, wrong player,
   bad dice value) before the engine is called
2. Roll the die if the client did not send a value
3. Resolve the roll through the engine core
4. Detect the win (a player reaches the last tile) and finish the game
5. Otherwise pass the turn on, honouring EXTRA_TURN / SKIP_TURN markers
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from ..engine_core.state import GameState, GameStatus
from ..engine_core.rules import ActionType, RuleLogEntry
from ..engine_core.processor import process_dice_roll
from .manager import Room, RoomManager, next_player_id


logger = logging.getLogger(__name__)


DEFAULT_DICE_SIDES = 6


class TurnError(Exception):
    """A roll was rejected before reaching the engine."""

    def __init__(self, message: str, error_code: str):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


@dataclass
class TurnResult:
    """
    Result of one dice roll.

    `state` is the room's new canonical state, already stored.
    """
    room_id: str
    player_id: str
    dice_value: int
    state: GameState
    logs: list[RuleLogEntry] = field(default_factory=list)
    next_player: str | None = None
    winner: str | None = None
    extra_turn: bool = False
    skipped_players: list[str] = field(default_factory=list)
    turn_number: int = 0

    @property
    def game_over(self) -> bool:
        return self.winner is not None


class TurnManager:
    """
    Serializes dice rolls against rooms held by a RoomManager.

    Usage:
        turns = TurnManager(rooms, rng=random.Random(42))
        result = turns.roll_dice("room-1", "alice")
    """

    def __init__(
        self,
        rooms: RoomManager,
        dice_sides: int = DEFAULT_DICE_SIDES,
        rng: random.Random | None = None,
    ):
        self.rooms = rooms
        self.dice_sides = dice_sides
        self.rng = rng or random.Random()

    def roll_die(self) -> int:
        return self.rng.randint(1, self.dice_sides)

    def roll_dice(self, room_id: str, player_id: str, dice_value: int | None = None) -> TurnResult:
        """
        Resolve one roll for `player_id` in `room_id`.

        Raises:
            TurnError: the roll is not legal right now
        """
        room = self.rooms.get_room(room_id)
        if room is None:
            raise TurnError(f"Room {room_id} not found", "ROOM_NOT_FOUND")

        state = room.state
        if state.is_finished:
            raise TurnError("Game is finished - no more rolls allowed", "GAME_FINISHED")
        if not state.has_player(player_id):
            raise TurnError(f"Player {player_id} is not in room {room_id}", "PLAYER_NOT_FOUND")
        if state.current_turn != player_id:
            raise TurnError(f"Not {player_id}'s turn", "NOT_YOUR_TURN")

        if dice_value is None:
            dice_value = self.roll_die()
        elif isinstance(dice_value, bool) or not isinstance(dice_value, int) \
                or not 1 <= dice_value <= self.dice_sides:
            raise TurnError(
                f"Dice value must be between 1 and {self.dice_sides}", "INVALID_DICE"
            )

        result = process_dice_roll(state, player_id, dice_value)
        new_state = result.state
        room.turn_number += 1

        turn = TurnResult(
            room_id=room_id,
            player_id=player_id,
            dice_value=dice_value,
            state=new_state,
            logs=list(result.logs),
            turn_number=room.turn_number,
        )

        winner = self._find_winner(new_state, player_id)
        if winner is not None:
            new_state = new_state._copy_with(status=GameStatus.FINISHED)
            room.winner = winner
            turn.winner = winner
            logger.info("Room %s: %s wins on turn %d", room_id, winner, room.turn_number)
        else:
            new_state = self._advance_turn(room, new_state, player_id, result.flow_markers, turn)

        room.state = new_state
        room.touch()
        turn.state = new_state
        turn.next_player = new_state.current_turn if winner is None else None

        logger.info(
            "Room %s: %s rolled %d, %s -> %s, next %s",
            room_id, player_id, dice_value, result.start_position,
            result.end_position, turn.next_player,
        )
        return turn

    def _find_winner(self, state: GameState, roller_id: str) -> str | None:
        """First player on (or past) the last tile, the roller checked first."""
        ordered = sorted(state.players, key=lambda p: p.id != roller_id)
        for player in ordered:
            if player.position >= state.last_tile_index:
                return player.id
        return None

    def _advance_turn(
        self,
        room: Room,
        state: GameState,
        roller_id: str,
        flow_markers: tuple[ActionType, ...],
        turn: TurnResult,
    ) -> GameState:
        if ActionType.SKIP_TURN in flow_markers:
            room.pending_skips.add(roller_id)

        if ActionType.EXTRA_TURN in flow_markers:
            turn.extra_turn = True
            return state._copy_with(current_turn=roller_id)

        candidate = roller_id
        for _ in range(len(state.players)):
            candidate = next_player_id(state, candidate)
            if candidate != roller_id and candidate in room.pending_skips:
                room.pending_skips.discard(candidate)
                turn.skipped_players.append(candidate)
                continue
            break
        else:
            candidate = roller_id

        return state._copy_with(current_turn=candidate)
