"""
Rule Loader - Builds Rule values from plain data.

Accepts the JSON shape clients send (camelCase) as well as snake_case:

    {
        "id": "trap-5",
        "title": "Trap",
        "trigger": "ON_LAND",
        "tileIndex": 5,
        "priority": 1,
        "effects": [{"type": "MOVE_RELATIVE", "value": -3, "target": "self"}]
    }

Unknown action types are kept as raw strings; the engine logs and skips
them. Unknown triggers and targets are rejected.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Iterable
import json
import logging

from ..engine_core.rules import (
    Effect, EffectTarget, Rule, TriggerType, parse_action_type,
)
from .validation import RuleValidationError


logger = logging.getLogger(__name__)


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _optional_int(value: Any, field_name: str, rule_id: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise RuleValidationError([f"Rule {rule_id}: {field_name} must be an integer"])
    try:
        return int(value)
    except (TypeError, ValueError):
        raise RuleValidationError([f"Rule {rule_id}: {field_name} must be an integer"])


def parse_trigger(value: Any, rule_id: str) -> TriggerType:
    if isinstance(value, TriggerType):
        return value
    try:
        return TriggerType(str(value).strip().upper())
    except ValueError:
        raise RuleValidationError([f"Rule {rule_id}: unknown trigger '{value}'"])


def parse_target(value: Any, rule_id: str) -> EffectTarget:
    if value is None:
        return EffectTarget.SELF
    if isinstance(value, EffectTarget):
        return value
    try:
        return EffectTarget(str(value).strip().lower())
    except ValueError:
        raise RuleValidationError([f"Rule {rule_id}: unknown effect target '{value}'"])


def effect_from_dict(data: dict[str, Any], rule_id: str = "?") -> Effect:
    """Build an Effect from a dict."""
    if not isinstance(data, dict):
        raise RuleValidationError([f"Rule {rule_id}: effect must be an object"])
    if "type" not in data:
        raise RuleValidationError([f"Rule {rule_id}: effect is missing 'type'"])
    return Effect(
        type=parse_action_type(data["type"]),
        value=data.get("value", 0),
        target=parse_target(data.get("target"), rule_id),
    )


def rule_from_dict(data: dict[str, Any]) -> Rule:
    """
    Build a Rule from a dict.

    Raises:
        RuleValidationError: missing id/trigger, unknown trigger or target,
            malformed integers
    """
    rule_id = _pick(data, "id")
    if not rule_id:
        raise RuleValidationError(["Rule is missing 'id'"])
    rule_id = str(rule_id)

    if _pick(data, "trigger") is None:
        raise RuleValidationError([f"Rule {rule_id}: missing 'trigger'"])

    raw_effects = data.get("effects") or []
    if not isinstance(raw_effects, list):
        raise RuleValidationError([f"Rule {rule_id}: 'effects' must be a list"])

    if data.get("conditions"):
        # Serialized conditions have no agreed schema yet
        logger.warning("Rule %s: serialized conditions are not supported and were dropped", rule_id)

    created_at = _pick(data, "createdAt", "created_at")
    try:
        created_at = float(created_at) if created_at is not None else None
    except (TypeError, ValueError):
        raise RuleValidationError([f"Rule {rule_id}: createdAt must be a number"])

    return Rule(
        id=rule_id,
        trigger=parse_trigger(data["trigger"], rule_id),
        effects=tuple(effect_from_dict(e, rule_id) for e in raw_effects),
        title=_pick(data, "title"),
        tile_index=_optional_int(_pick(data, "tileIndex", "tile_index"), "tileIndex", rule_id),
        priority=_optional_int(_pick(data, "priority"), "priority", rule_id),
        created_at=created_at,
    )


def rules_from_list(items: Iterable[dict[str, Any]]) -> list[Rule]:
    """
    Build many rules, collecting every error before raising.
    """
    rules: list[Rule] = []
    errors: list[str] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            errors.append(f"Rule #{i}: expected an object")
            continue
        try:
            rules.append(rule_from_dict(item))
        except RuleValidationError as e:
            errors.extend(e.errors)
    if errors:
        raise RuleValidationError(errors)
    return rules


def load_rules_file(path: str | Path) -> list[Rule]:
    """
    Load rules from a JSON file.

    The file holds either a list of rules or an object with a "rules" list.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("rules", [])
    if not isinstance(data, list):
        raise RuleValidationError([f"{path}: expected a list of rules"])
    return rules_from_list(data)
