"""
Dice-Roll Processor - Resolves one turn's dice roll.

Strictly ordered pipeline, no branching back:
    PRE (ON_MOVE_START at the current tile)
    MOVE (base move by the dice value, clamped to the board)
    LAND (ON_LAND at the new tile, with cascades)

Each phase adopts the previous phase's state. Logs are concatenated in
call order. Legality (whose turn it is, finished games) is checked by the
caller before calling in.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .state import GameState
from .rules import (
    ActionType, Effect, RuleLogEntry, TriggerContext, TriggerType, DICE_LOG_ID,
)
from .actions import apply_effect
from .chain import ChainResult, execute_rule_chain, player_not_found_entry
from .matcher import match_rules


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiceRollResult:
    """Final state and full log of one dice-roll resolution."""
    state: GameState
    logs: tuple[RuleLogEntry, ...] = ()
    start_position: int | None = None
    end_position: int | None = None
    flow_markers: tuple[ActionType, ...] = field(default_factory=tuple)
    truncated: bool = False
    player_found: bool = True

    @property
    def messages(self) -> list[str]:
        return [entry.message for entry in self.logs]


def process_dice_roll(state: GameState, player_id: str, dice_value: int) -> DiceRollResult:
    """
    Run the PRE -> MOVE -> LAND pipeline for `player_id`.

    The input state is never modified; an unknown player gets the input
    state back with a single error entry.
    """
    player = state.get_player(player_id)
    if player is None:
        return DiceRollResult(
            state=state,
            logs=(player_not_found_entry(player_id),),
            player_found=False,
        )

    logs: list[RuleLogEntry] = []
    flow_markers: list[ActionType] = []
    truncated = False
    start_position = player.position

    # PRE: rules that fire before moving
    start_rules = match_rules(
        state, TriggerType.ON_MOVE_START, TriggerContext(position=start_position, dice_value=dice_value)
    )
    if start_rules:
        result = execute_rule_chain(state, player_id, start_rules)
        state = _adopt(result, logs, flow_markers)
        truncated = truncated or result.truncated

    # MOVE: unconditional base move, reread position after PRE
    current_position = state.get_player(player_id).position
    state = apply_effect(state, player_id, Effect(ActionType.MOVE_RELATIVE, dice_value))
    new_position = state.get_player(player_id).position
    logs.append(RuleLogEntry(
        DICE_LOG_ID,
        f"Dice roll: {dice_value}. Moved {current_position} -> {new_position}",
    ))

    # LAND: rules on the destination tile, cascading on further landings
    land_rules = match_rules(
        state, TriggerType.ON_LAND, TriggerContext(position=new_position, dice_value=dice_value)
    )
    if land_rules:
        result = execute_rule_chain(state, player_id, land_rules, cascade_trigger=TriggerType.ON_LAND)
        state = _adopt(result, logs, flow_markers)
        truncated = truncated or result.truncated

    end_position = state.get_player(player_id).position
    logger.debug(
        "Dice roll resolved for %s in room %s: %s -> %s (%d log entries)",
        player_id, state.room_id, start_position, end_position, len(logs),
    )

    return DiceRollResult(
        state=state,
        logs=tuple(logs),
        start_position=start_position,
        end_position=end_position,
        flow_markers=tuple(flow_markers),
        truncated=truncated,
    )


def _adopt(result: ChainResult, logs: list[RuleLogEntry], flow_markers: list[ActionType]) -> GameState:
    logs.extend(result.logs)
    flow_markers.extend(result.flow_markers)
    return result.state


def resolve_dice_roll(
    state: GameState,
    player_id: str,
    dice_value: int,
) -> tuple[GameState, list[RuleLogEntry]]:
    """
    Sole mutation entry point for the transport/session layer.

    Returns (new_state, logs).
    """
    result = process_dice_roll(state, player_id, dice_value)
    return result.state, list(result.logs)
