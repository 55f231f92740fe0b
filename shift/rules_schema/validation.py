"""
Rule Validation - Sanity checks for a room's rule set.

Validates that:
1. Rule ids are present and unique
2. Tile bindings are on the board
3. Effects name known actions with numeric values

Errors block room creation. Warnings are informational: the engine
tolerates them (unknown effects are skipped, bad values become 0).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable

from ..engine_core.rules import ActionType, Rule, TriggerType
from ..engine_core.actions import is_target_supported


# Triggers the dice-roll processor actually raises
RAISED_TRIGGERS = frozenset({TriggerType.ON_MOVE_START, TriggerType.ON_LAND})


class RuleValidationError(Exception):
    """Raised when rule loading or validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Rule validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def raise_if_invalid(self) -> None:
        if not self.valid:
            raise RuleValidationError(self.errors)


def _is_numeric(value) -> bool:
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value.strip())
            return True
        except ValueError:
            return False
    return False


def validate_rule(rule: Rule, board_length: int | None = None) -> ValidationResult:
    """Validate a single rule."""
    errors: list[str] = []
    warnings: list[str] = []

    if not rule.id:
        errors.append("Rule id is required")

    if rule.tile_index is not None:
        if rule.tile_index < 0:
            errors.append(f"Rule {rule.id}: tileIndex must be >= 0")
        elif board_length is not None and rule.tile_index >= board_length:
            errors.append(
                f"Rule {rule.id}: tileIndex {rule.tile_index} is outside the board (0-{board_length - 1})"
            )

    if rule.trigger not in RAISED_TRIGGERS:
        warnings.append(f"Rule {rule.id}: trigger {rule.trigger.value} is never raised during a dice roll")

    if not rule.effects:
        warnings.append(f"Rule {rule.id}: has no effects")

    for i, effect in enumerate(rule.effects):
        where = f"Rule {rule.id} effect {i}"
        if not effect.is_known:
            warnings.append(f"{where}: unknown effect type '{effect.type_name}' will be ignored")
            continue
        if not _is_numeric(effect.value):
            warnings.append(f"{where}: value {effect.value!r} is not numeric and counts as 0")
        if not is_target_supported(effect.target):
            warnings.append(f"{where}: target '{effect.target.value}' applies to the acting player only")
        if (
            effect.type in (ActionType.TELEPORT, ActionType.MOVE_TO_TILE)
            and board_length is not None
            and not 0 <= effect.amount < board_length
        ):
            warnings.append(f"{where}: teleport destination {effect.amount} is off the board")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def validate_rules(rules: Iterable[Rule], board_length: int | None = None) -> ValidationResult:
    """Validate a rule set, including id uniqueness."""
    errors: list[str] = []
    warnings: list[str] = []
    seen: set[str] = set()

    for rule in rules:
        result = validate_rule(rule, board_length)
        errors.extend(result.errors)
        warnings.extend(result.warnings)
        if rule.id in seen:
            errors.append(f"Duplicate rule id: {rule.id}")
        seen.add(rule.id)

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
