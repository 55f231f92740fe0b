"""
Pytest fixtures for SHIFT tests.
"""

import random

import pytest

from ..engine_core.state import GameState, create_game_state
from ..engine_core.rules import Effect, Rule, TriggerType
from ..session import RoomManager, TurnManager


@pytest.fixture
def two_player_state() -> GameState:
    """20-tile board, alice and bob on the start tile, alice to move."""
    return create_game_state(
        "test_room",
        board_length=20,
        player_ids=["alice", "bob"],
    )


@pytest.fixture
def make_rule():
    """Factory for rules: make_rule("id", (ActionType.X, value), ...)."""

    def _make(
        rule_id: str,
        *effects: tuple,
        trigger: TriggerType = TriggerType.ON_LAND,
        tile_index: int | None = None,
        **kwargs,
    ) -> Rule:
        return Rule(
            id=rule_id,
            trigger=trigger,
            tile_index=tile_index,
            effects=tuple(Effect(action, value) for action, value in effects),
            **kwargs,
        )

    return _make


@pytest.fixture
def place():
    """Return a state with one player moved to a position."""

    def _place(state: GameState, player_id: str, position: int) -> GameState:
        return state.with_player(state.get_player(player_id).moved_to(position))

    return _place


@pytest.fixture
def rooms() -> RoomManager:
    return RoomManager()


@pytest.fixture
def turns(rooms: RoomManager) -> TurnManager:
    return TurnManager(rooms, rng=random.Random(7))


@pytest.fixture
def playing_room(rooms: RoomManager):
    """Room "r1" with alice and bob joined, alice to move."""
    rooms.create_room("r1")
    rooms.join_room("r1", "alice")
    rooms.join_room("r1", "bob")
    return rooms.get_room("r1")

