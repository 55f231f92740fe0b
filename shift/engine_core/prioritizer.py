"""
Rule Prioritizer - Deterministic execution order for a rule set.

A rule's priority is the most urgent (lowest) priority among its effects.
Ties break by declaration order: creation timestamp when present, then
id. The same rule set always resolves in the same order whatever order it
was stored in. A rule's own `priority` field plays no part.
"""

from __future__ import annotations
from typing import Iterable

from .rules import ActionType, Effect, Rule


DEFAULT_PRIORITY = 5

# Lower number = earlier execution
EFFECT_PRIORITY: dict[ActionType, int] = {
    ActionType.MODIFY_DICE: 1,
    ActionType.MOVE_RELATIVE: 2,
    ActionType.TELEPORT: 3,
    ActionType.MOVE_TO_TILE: 3,
    ActionType.MODIFY_SCORE: 4,
    ActionType.MODIFY_STAT: 4,
}


def effect_priority(effect: Effect) -> int:
    return EFFECT_PRIORITY.get(effect.type, DEFAULT_PRIORITY)


def rule_priority(rule: Rule) -> int:
    """Priority of a rule's most urgent effect; DEFAULT_PRIORITY without effects."""
    return min((effect_priority(e) for e in rule.effects), default=DEFAULT_PRIORITY)


def rule_sort_key(rule: Rule) -> tuple:
    """
    Total ordering key.

    Timestamped rules sort before untimestamped ones inside a tie so the
    key never compares a float with None.
    """
    has_timestamp = rule.created_at is not None
    return (
        rule_priority(rule),
        0 if has_timestamp else 1,
        rule.created_at if has_timestamp else 0.0,
        rule.id,
    )


def prioritize_rules(rules: Iterable[Rule]) -> list[Rule]:
    """Return rules in execution order. Does not modify the input."""
    return sorted(rules, key=rule_sort_key)
