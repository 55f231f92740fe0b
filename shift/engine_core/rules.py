"""
Rules - Triggers, actions, effects and rule declarations.

A rule listens for one trigger (a class of game event) and carries an
ordered list of effects. Rules are plain values: they are declared when a
room is created and never change during a turn.

Design principles:
- Immutable: every type here is a frozen dataclass
- Total: effect values coerce to a number, never to an error
- Open: unknown action types are representable so they can be logged
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, TYPE_CHECKING
import math

if TYPE_CHECKING:
    from .state import GameState


class TriggerType(Enum):
    """Classes of game events a rule can listen for."""
    # Movement
    ON_MOVE_START = "ON_MOVE_START"
    ON_PASS_OVER = "ON_PASS_OVER"
    ON_LAND = "ON_LAND"
    ON_BACKWARD_MOVE = "ON_BACKWARD_MOVE"
    ON_TELEPORT = "ON_TELEPORT"

    # Turn
    ON_TURN_START = "ON_TURN_START"
    ON_TURN_END = "ON_TURN_END"
    ON_DICE_ROLL = "ON_DICE_ROLL"

    # Interaction
    ON_PLAYER_BYPASS = "ON_PLAYER_BYPASS"
    ON_SAME_TILE = "ON_SAME_TILE"


class ActionType(Enum):
    """Atomic state mutations an effect can request."""
    # Movement
    MOVE_RELATIVE = "MOVE_RELATIVE"
    TELEPORT = "TELEPORT"
    MOVE_TO_TILE = "MOVE_TO_TILE"
    SWAP_POSITIONS = "SWAP_POSITIONS"
    BACK_TO_START = "BACK_TO_START"

    # Flow (consumed by the turn manager)
    SKIP_TURN = "SKIP_TURN"
    EXTRA_TURN = "EXTRA_TURN"

    # Stats
    MODIFY_SCORE = "MODIFY_SCORE"
    MODIFY_STAT = "MODIFY_STAT"

    # Dice (reserved, not applied yet)
    MODIFY_DICE = "MODIFY_DICE"


FLOW_ACTIONS = frozenset({ActionType.SKIP_TURN, ActionType.EXTRA_TURN})


class EffectTarget(Enum):
    """Who an effect applies to."""
    SELF = "self"
    ALL = "all"
    OTHERS = "others"


class LogSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def parse_action_type(value: ActionType | str) -> ActionType | str:
    """Return the matching ActionType, or the raw string if none matches."""
    if isinstance(value, ActionType):
        return value
    try:
        return ActionType(str(value).strip().upper())
    except ValueError:
        return str(value)


def coerce_value(value: Any) -> int:
    """
    Coerce an effect value to an integer.

    Accepts numbers and numeric strings. Anything that cannot be read as a
    finite number becomes 0, so resolution never fails on bad input.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0
    else:
        return 0

    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


@dataclass(frozen=True)
class Effect:
    """
    One atomic state mutation instruction carried by a rule.

    `value` is kept as declared (number or numeric string) and coerced at
    application time.
    """
    type: ActionType | str
    value: Any = 0
    target: EffectTarget = EffectTarget.SELF

    @property
    def amount(self) -> int:
        return coerce_value(self.value)

    @property
    def is_known(self) -> bool:
        return isinstance(self.type, ActionType)

    @property
    def type_name(self) -> str:
        return self.type.value if isinstance(self.type, ActionType) else str(self.type)


class Condition(ABC):
    """
    Predicate a rule must satisfy before it can be matched.

    Subclass and implement `evaluate`. A rule with no conditions always
    passes this check.
    """

    @abstractmethod
    def evaluate(self, state: GameState, context: TriggerContext) -> bool:
        ...


@dataclass(frozen=True)
class Rule:
    """
    A declared game rule.

    A rule with `tile_index` unset is global for its trigger. With
    `tile_index` set it fires only when the event position equals it.
    """
    id: str
    trigger: TriggerType
    effects: tuple[Effect, ...] = ()
    title: str | None = None
    tile_index: int | None = None
    priority: int | None = None
    created_at: float | None = None
    conditions: tuple[Condition, ...] = ()

    @property
    def is_global(self) -> bool:
        return self.tile_index is None

    @property
    def label(self) -> str:
        """Human-readable name for logs."""
        return self.title or self.id


@dataclass(frozen=True)
class TriggerContext:
    """Event data handed to the matcher alongside the trigger."""
    position: int | None = None
    dice_value: int | None = None


@dataclass(frozen=True)
class RuleLogEntry:
    """One line of the resolution audit trail."""
    rule_id: str
    message: str
    severity: LogSeverity = LogSeverity.INFO

    def to_dict(self) -> dict[str, str]:
        return {
            "ruleId": self.rule_id,
            "message": self.message,
            "severity": self.severity.value,
        }


# Reserved rule ids for entries the engine itself emits
DICE_LOG_ID = "dice"
ENGINE_LOG_ID = "engine"
