"""
Effect Applier - Applies a single effect to a single player.

Pure function: (state, player_id, effect) -> new state. Knows action
semantics and board bounds, nothing about rules or triggers.

Never raises:
- Unknown player: the input state is returned as-is
- Unknown action type: the input state is returned as-is
- Non-numeric value: treated as 0
"""

from __future__ import annotations
from typing import Callable
import logging

from .state import GameState, Player
from .rules import ActionType, Effect, EffectTarget


logger = logging.getLogger(__name__)


TargetResolver = Callable[[GameState, str], tuple[str, ...]]


def _resolve_self(state: GameState, player_id: str) -> tuple[str, ...]:
    return (player_id,)


# Only `self` is registered. Unregistered targets (`all`, `others`) fall
# back to the acting player.
TARGET_RESOLVERS: dict[EffectTarget, TargetResolver] = {
    EffectTarget.SELF: _resolve_self,
}


def register_target_resolver(target: EffectTarget, resolver: TargetResolver) -> None:
    """Plug in resolution for an effect target."""
    TARGET_RESOLVERS[target] = resolver


def is_target_supported(target: EffectTarget) -> bool:
    return target in TARGET_RESOLVERS


def resolve_targets(state: GameState, player_id: str, target: EffectTarget) -> tuple[str, ...]:
    """
    Resolve which player ids an effect applies to.

    Unregistered targets fall back to the acting player.
    """
    resolver = TARGET_RESOLVERS.get(target)
    if resolver is None:
        logger.warning(
            "Effect target %r is not supported; applying to acting player %s",
            target.value, player_id,
        )
        return (player_id,)
    return resolver(state, player_id)


def clamp_position(position: int, board_length: int) -> int:
    """Clamp a position to [0, board_length - 1]."""
    return max(0, min(board_length - 1, position))


def apply_effect(
    state: GameState,
    player_id: str,
    effect: Effect,
    partner_id: str | None = None,
) -> GameState:
    """
    Apply one effect on behalf of `player_id`.

    Only the targeted players' fields change. `partner_id` designates the
    other side of a SWAP_POSITIONS; without a resolvable partner the swap
    is a no-op.
    """
    if state.get_player(player_id) is None:
        return state

    new_state = state
    for target_id in resolve_targets(state, player_id, effect.target):
        new_state = _apply_to_player(new_state, target_id, effect, partner_id)
    return new_state


def _apply_to_player(
    state: GameState,
    player_id: str,
    effect: Effect,
    partner_id: str | None,
) -> GameState:
    player = state.get_player(player_id)
    if player is None:
        return state

    if effect.type == ActionType.SWAP_POSITIONS:
        return _swap_positions(state, player, partner_id)

    handler = _HANDLERS.get(effect.type)
    if handler is None:
        return state
    return handler(state, player, effect.amount)


def _move_relative(state: GameState, player: Player, amount: int) -> GameState:
    new_position = clamp_position(player.position + amount, state.board_length)
    return state.with_player(player.moved_to(new_position))


def _teleport(state: GameState, player: Player, amount: int) -> GameState:
    # Trusted input: no bounds check
    return state.with_player(player.moved_to(amount))


def _modify_score(state: GameState, player: Player, amount: int) -> GameState:
    return state.with_player(player.with_score(player.score + amount))


def _back_to_start(state: GameState, player: Player, amount: int) -> GameState:
    return state.with_player(player.moved_to(0))


def _no_mutation(state: GameState, player: Player, amount: int) -> GameState:
    return state


def _swap_positions(state: GameState, player: Player, partner_id: str | None) -> GameState:
    if partner_id is None or partner_id == player.id:
        return state
    partner = state.get_player(partner_id)
    if partner is None:
        return state
    return (
        state
        .with_player(player.moved_to(partner.position))
        .with_player(partner.moved_to(player.position))
    )


_HANDLERS: dict[ActionType, Callable[[GameState, Player, int], GameState]] = {
    ActionType.MOVE_RELATIVE: _move_relative,
    ActionType.TELEPORT: _teleport,
    ActionType.MOVE_TO_TILE: _teleport,
    ActionType.MODIFY_SCORE: _modify_score,
    ActionType.MODIFY_STAT: _modify_score,
    ActionType.BACK_TO_START: _back_to_start,
    ActionType.SKIP_TURN: _no_mutation,
    ActionType.EXTRA_TURN: _no_mutation,
    ActionType.MODIFY_DICE: _no_mutation,
}


def describe_effect(effect: Effect, before: Player, after: Player) -> str:
    """Human-readable description of what an applied effect did."""
    action = effect.type

    if action == ActionType.MOVE_RELATIVE:
        delta = after.position - before.position
        text = f"moved {delta:+d} ({before.position} -> {after.position})"
        if delta != effect.amount:
            text += f", clamped from {effect.amount:+d}"
        return text
    if action in (ActionType.TELEPORT, ActionType.MOVE_TO_TILE):
        return f"teleported {before.position} -> {after.position}"
    if action in (ActionType.MODIFY_SCORE, ActionType.MODIFY_STAT):
        delta = after.score - before.score
        return f"score {delta:+d} ({before.score} -> {after.score})"
    if action == ActionType.BACK_TO_START:
        return f"sent back to start ({before.position} -> {after.position})"
    if action == ActionType.SWAP_POSITIONS:
        if before.position == after.position:
            return "swap skipped, no partner designated"
        return f"swapped positions ({before.position} -> {after.position})"
    if action == ActionType.SKIP_TURN:
        return "will skip the next turn"
    if action == ActionType.EXTRA_TURN:
        return "earns an extra turn"
    if action == ActionType.MODIFY_DICE:
        return f"dice modifier {effect.amount:+d} reserved, not applied"
    return f"unknown effect type '{effect.type_name}' ignored"
