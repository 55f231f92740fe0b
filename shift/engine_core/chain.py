"""
Rule Chain Executor - Runs matched rules against a sandboxed state.

The executor:
1. Orders the rules via the prioritizer
2. Takes an exclusive working copy of the state
3. Applies every effect of every rule, in order, logging each one
4. Optionally cascades: when a rule moves the player onto another tile,
   the tile-bound rules of that tile run next
5. Stops at MAX_CHAIN_ITERATIONS rule applications

The result is always well-defined. An unknown player returns the input
state untouched with a single error entry; hitting the cap returns the
state accumulated so far with a warning entry.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable
import logging

from .state import GameState
from .rules import (
    ActionType, FLOW_ACTIONS, Rule, RuleLogEntry, LogSeverity,
    TriggerContext, TriggerType, ENGINE_LOG_ID,
)
from .actions import apply_effect, describe_effect, is_target_supported
from .matcher import match_rules
from .prioritizer import prioritize_rules


logger = logging.getLogger(__name__)


MAX_CHAIN_ITERATIONS = 10


@dataclass(frozen=True)
class ChainResult:
    """
    Outcome of one rule chain.

    `flow_markers` lists the SKIP_TURN / EXTRA_TURN effects that fired, in
    order, for the turn manager to consume.
    """
    state: GameState
    logs: tuple[RuleLogEntry, ...] = ()
    applications: int = 0
    truncated: bool = False
    player_found: bool = True
    flow_markers: tuple[ActionType, ...] = field(default_factory=tuple)


def player_not_found_entry(player_id: str) -> RuleLogEntry:
    return RuleLogEntry(
        rule_id=ENGINE_LOG_ID,
        message=f"Player {player_id} not found",
        severity=LogSeverity.ERROR,
    )


def execute_rule_chain(
    state: GameState,
    player_id: str,
    rules: Iterable[Rule],
    cascade_trigger: TriggerType | None = None,
    max_iterations: int = MAX_CHAIN_ITERATIONS,
) -> ChainResult:
    """
    Execute a rule chain for `player_id`.

    Args:
        state: Caller's state, never modified
        player_id: Acting player
        rules: Matched rules in any order
        cascade_trigger: Trigger re-matched on the player's new tile after a
            rule moves them (tile-bound rules only); None disables cascades
        max_iterations: Cap on rule applications

    Returns:
        ChainResult with the new state and the ordered log
    """
    pending = deque(prioritize_rules(rules))
    working = state.sandbox()

    if working.get_player(player_id) is None:
        logger.warning("Rule chain aborted: player %s not found in room %s", player_id, state.room_id)
        return ChainResult(
            state=state,
            logs=(player_not_found_entry(player_id),),
            player_found=False,
        )

    logs: list[RuleLogEntry] = []
    flow_markers: list[ActionType] = []
    applications = 0
    truncated = False

    while pending:
        if applications >= max_iterations:
            truncated = True
            message = (
                f"Rule chain stopped after {applications} applications, "
                f"{len(pending)} pending rule(s) skipped"
            )
            logger.warning("%s (room %s, player %s)", message, state.room_id, player_id)
            logs.append(RuleLogEntry(ENGINE_LOG_ID, message, LogSeverity.WARNING))
            break

        rule = pending.popleft()
        position_before = working.get_player(player_id).position
        working = _apply_rule(working, player_id, rule, logs, flow_markers)
        applications += 1

        if cascade_trigger is None:
            continue
        position_after = working.get_player(player_id).position
        if position_after == position_before:
            continue

        cascaded = match_rules(
            working,
            cascade_trigger,
            TriggerContext(position=position_after),
            tile_bound_only=True,
        )
        if cascaded:
            logger.debug(
                "Cascade on tile %s: %s", position_after, [r.id for r in cascaded]
            )
            pending.extendleft(reversed(prioritize_rules(cascaded)))

    return ChainResult(
        state=working,
        logs=tuple(logs),
        applications=applications,
        truncated=truncated,
        flow_markers=tuple(flow_markers),
    )


def _apply_rule(
    state: GameState,
    player_id: str,
    rule: Rule,
    logs: list[RuleLogEntry],
    flow_markers: list[ActionType],
) -> GameState:
    """Apply every effect of one rule in declared order."""
    logger.debug("Applying rule %s (%s)", rule.id, rule.trigger.value)

    for effect in rule.effects:
        if not effect.is_known:
            logs.append(RuleLogEntry(
                rule.id,
                f"{rule.label}: unknown effect type '{effect.type_name}' ignored",
                LogSeverity.WARNING,
            ))
            continue

        if not is_target_supported(effect.target):
            logs.append(RuleLogEntry(
                rule.id,
                f"{rule.label}: target '{effect.target.value}' not supported, "
                f"applied to acting player",
                LogSeverity.WARNING,
            ))

        before = state.get_player(player_id)
        state = apply_effect(state, player_id, effect)
        after = state.get_player(player_id)

        if effect.type in FLOW_ACTIONS:
            flow_markers.append(effect.type)

        logs.append(RuleLogEntry(rule.id, f"{rule.label}: {describe_effect(effect, before, after)}"))

    return state
