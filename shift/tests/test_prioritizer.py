"""
Tests for rule ordering.
"""

import itertools

import pytest

from ..engine_core.prioritizer import (
    DEFAULT_PRIORITY, effect_priority, prioritize_rules, rule_priority,
)
from ..engine_core.rules import ActionType, Effect, Rule, TriggerType


class TestRulePriority:

    @pytest.mark.parametrize("action,expected", [
        (ActionType.MODIFY_DICE, 1),
        (ActionType.MOVE_RELATIVE, 2),
        (ActionType.TELEPORT, 3),
        (ActionType.MOVE_TO_TILE, 3),
        (ActionType.MODIFY_SCORE, 4),
        (ActionType.MODIFY_STAT, 4),
        (ActionType.BACK_TO_START, DEFAULT_PRIORITY),
        (ActionType.SKIP_TURN, DEFAULT_PRIORITY),
        ("NOT_A_THING", DEFAULT_PRIORITY),
    ])
    def test_effect_priority(self, action, expected):
        """Each action maps to its fixed priority class."""
        assert effect_priority(Effect(action, 1)) == expected

    def test_rule_takes_most_urgent_effect(self, make_rule):
        """A rule ranks by its lowest-numbered effect."""
        rule = make_rule("mixed", (ActionType.MODIFY_SCORE, 1), (ActionType.MOVE_RELATIVE, 1))
        assert rule_priority(rule) == 2

    def test_rule_without_effects(self):
        """A rule with no effects gets the default priority."""
        assert rule_priority(Rule(id="empty", trigger=TriggerType.ON_LAND)) == DEFAULT_PRIORITY


class TestPrioritizeRules:

    def test_orders_by_effect_priority(self, make_rule):
        """Moves run before teleports, teleports before score changes."""
        score = make_rule("a_score", (ActionType.MODIFY_SCORE, 1))
        teleport = make_rule("b_teleport", (ActionType.TELEPORT, 4))
        move = make_rule("c_move", (ActionType.MOVE_RELATIVE, 1))

        ordered = prioritize_rules([score, teleport, move])

        assert [r.id for r in ordered] == ["c_move", "b_teleport", "a_score"]

    def test_timestamp_wins_over_declared_priority(self, make_rule):
        """Inside an effect class the earlier declaration runs first."""
        earlier = make_rule("a", (ActionType.MOVE_RELATIVE, 1), priority=9, created_at=1.0)
        later = make_rule("b", (ActionType.MOVE_RELATIVE, 1), priority=1, created_at=2.0)

        assert [r.id for r in prioritize_rules([later, earlier])] == ["a", "b"]

    def test_declared_priority_does_not_reorder_by_id(self, make_rule):
        """Without timestamps the id decides, whatever the declared priority."""
        low = make_rule("a", (ActionType.MOVE_RELATIVE, 1), priority=9)
        high = make_rule("b", (ActionType.MOVE_RELATIVE, 1), priority=1)

        assert [r.id for r in prioritize_rules([high, low])] == ["a", "b"]

    def test_timestamp_breaks_ties(self, make_rule):
        """Timestamped rules come first, oldest first."""
        later = make_rule("a", (ActionType.MOVE_RELATIVE, 1), created_at=200.0)
        earlier = make_rule("b", (ActionType.MOVE_RELATIVE, 1), created_at=100.0)
        untimed = make_rule("0", (ActionType.MOVE_RELATIVE, 1))

        assert [r.id for r in prioritize_rules([untimed, later, earlier])] == ["b", "a", "0"]

    def test_id_breaks_remaining_ties(self, make_rule):
        """Untimed rules of one class sort by id."""
        rules = [make_rule(rule_id, (ActionType.MODIFY_SCORE, 1)) for rule_id in ("c", "a", "b")]
        assert [r.id for r in prioritize_rules(rules)] == ["a", "b", "c"]

    def test_same_order_for_every_permutation(self, make_rule):
        """Storage order never changes the result."""
        rules = [
            make_rule("s1", (ActionType.MODIFY_SCORE, 1)),
            make_rule("m1", (ActionType.MOVE_RELATIVE, 1), created_at=5.0),
            make_rule("m2", (ActionType.MOVE_RELATIVE, 1)),
            make_rule("t1", (ActionType.TELEPORT, 3), priority=2),
            make_rule("x1", (ActionType.SKIP_TURN, 0)),
        ]
        expected = [r.id for r in prioritize_rules(rules)]

        for permutation in itertools.permutations(rules):
            assert [r.id for r in prioritize_rules(permutation)] == expected

    def test_input_not_modified(self, make_rule):
        """Sorting returns a new list."""
        rules = [
            make_rule("b", (ActionType.MODIFY_SCORE, 1)),
            make_rule("a", (ActionType.MOVE_RELATIVE, 1)),
        ]
        snapshot = list(rules)

        prioritize_rules(rules)

        assert rules == snapshot

    def test_empty(self):
        """No rules, no order."""
        assert prioritize_rules([]) == []
