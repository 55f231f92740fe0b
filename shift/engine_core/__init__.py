"""
Engine Core - Deterministic rules resolution for the board game.

The engine is stateless. Per dice roll it:
1. Matches the rules declared for the event
2. Orders them by effect priority
3. Applies their effects on a sandboxed state
4. Returns the new state and an ordered log

Entry points for collaborators: `resolve_dice_roll` and `apply_effect`.
"""

from .state import (
    GameState, GameStatus, Player, Tile, TileKind,
    create_board, create_game_state, DEFAULT_BOARD_LENGTH,
)
from .rules import (
    ActionType, TriggerType, EffectTarget, Effect, Rule, Condition,
    TriggerContext, RuleLogEntry, LogSeverity, coerce_value,
)
from .actions import apply_effect, register_target_resolver
from .matcher import match_rules
from .prioritizer import prioritize_rules, rule_priority
from .chain import ChainResult, execute_rule_chain, MAX_CHAIN_ITERATIONS
from .processor import DiceRollResult, process_dice_roll, resolve_dice_roll

__all__ = [
    "GameState",
    "GameStatus",
    "Player",
    "Tile",
    "TileKind",
    "create_board",
    "create_game_state",
    "DEFAULT_BOARD_LENGTH",
    "ActionType",
    "TriggerType",
    "EffectTarget",
    "Effect",
    "Rule",
    "Condition",
    "TriggerContext",
    "RuleLogEntry",
    "LogSeverity",
    "coerce_value",
    "apply_effect",
    "register_target_resolver",
    "match_rules",
    "prioritize_rules",
    "rule_priority",
    "ChainResult",
    "execute_rule_chain",
    "MAX_CHAIN_ITERATIONS",
    "DiceRollResult",
    "process_dice_roll",
    "resolve_dice_roll",
]
