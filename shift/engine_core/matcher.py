"""
Rule Matcher - Finds the active rules that fire for a game event.

Pure filter over `state.active_rules`; never mutates state and never
raises. The result order is storage order and carries no meaning, the
prioritizer decides execution order.
"""

from __future__ import annotations

from .state import GameState
from .rules import Rule, TriggerContext, TriggerType


def rule_matches(
    rule: Rule,
    state: GameState,
    trigger: TriggerType,
    context: TriggerContext,
) -> bool:
    """
    Check a single rule against an event.

    A tile-bound rule needs the event to carry a position equal to its
    tile. All conditions must hold.
    """
    if rule.trigger != trigger:
        return False
    if rule.tile_index is not None and rule.tile_index != context.position:
        return False
    return all(condition.evaluate(state, context) for condition in rule.conditions)


def match_rules(
    state: GameState,
    trigger: TriggerType,
    context: TriggerContext | None = None,
    tile_bound_only: bool = False,
) -> tuple[Rule, ...]:
    """
    Return the active rules whose trigger and tile binding match.

    Args:
        state: Game state holding the active rules
        trigger: Event class being raised
        context: Event data (position, dice value)
        tile_bound_only: Skip global rules (used for cascaded landings)

    Returns:
        Matching rules, empty when nothing matches
    """
    context = context or TriggerContext()
    return tuple(
        rule for rule in state.active_rules
        if not (tile_bound_only and rule.is_global)
        and rule_matches(rule, state, trigger, context)
    )
