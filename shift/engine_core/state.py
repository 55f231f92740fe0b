"""
Game State - Immutable board, player and game containers.

Design principles:
- Immutable: frozen dataclasses, tuples for sequences; every change
  returns a new value
- Cheap sandboxing: a working copy shares its (immutable) children
- Serializable: `to_dict` gives the wire shape broadcast to clients
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable

from .rules import Rule


DEFAULT_BOARD_LENGTH = 20
SPECIAL_TILE_INTERVAL = 5
PLAYER_COLORS = ("cyan", "violet")


class TileKind(Enum):
    START = "start"
    END = "end"
    SPECIAL = "special"
    NORMAL = "normal"


class GameStatus(Enum):
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass(frozen=True)
class Tile:
    """
    A board tile.

    Purely descriptive: rules carry their own tile binding, so the engine
    never consults `kind`.
    """
    index: int
    kind: TileKind = TileKind.NORMAL
    tile_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.tile_id or f"tile-{self.index}",
            "index": self.index,
            "type": self.kind.value,
        }


@dataclass(frozen=True)
class Player:
    """A participant's token on the board."""
    id: str
    position: int = 0
    score: int = 0
    color: str | None = None

    def moved_to(self, position: int) -> Player:
        return replace(self, position=position)

    def with_score(self, score: int) -> Player:
        return replace(self, score=score)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "position": self.position,
            "score": self.score,
            "color": self.color,
        }


def create_board(length: int = DEFAULT_BOARD_LENGTH) -> tuple[Tile, ...]:
    """
    Generate a linear board of `length` tiles.

    Tile 0 is the start, the last tile is the end, every fifth tile in
    between is special.
    """
    tiles = []
    for i in range(length):
        if i == 0:
            kind = TileKind.START
        elif i == length - 1:
            kind = TileKind.END
        elif i % SPECIAL_TILE_INTERVAL == 0:
            kind = TileKind.SPECIAL
        else:
            kind = TileKind.NORMAL
        tiles.append(Tile(index=i, kind=kind, tile_id=f"tile-{i}"))
    return tuple(tiles)


def player_color(slot: int) -> str:
    """Colour for the player joining at `slot` (0-based)."""
    return PLAYER_COLORS[slot % len(PLAYER_COLORS)]


@dataclass(frozen=True)
class GameState:
    """
    Complete game state for one room at a point in time.

    Aggregate root for tiles, players and the active rule set.
    """
    room_id: str
    tiles: tuple[Tile, ...] = ()
    players: tuple[Player, ...] = ()
    current_turn: str | None = None
    status: GameStatus = GameStatus.PLAYING
    active_rules: tuple[Rule, ...] = field(default_factory=tuple)

    @property
    def board_length(self) -> int:
        return len(self.tiles) or DEFAULT_BOARD_LENGTH

    @property
    def last_tile_index(self) -> int:
        return self.board_length - 1

    @property
    def is_finished(self) -> bool:
        return self.status == GameStatus.FINISHED

    @property
    def player_ids(self) -> list[str]:
        return [p.id for p in self.players]

    def get_player(self, player_id: str) -> Player | None:
        """Get player by ID."""
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def has_player(self, player_id: str) -> bool:
        return self.get_player(player_id) is not None

    def with_player(self, player: Player) -> GameState:
        """Return new state with the matching player replaced."""
        new_players = tuple(
            player if p.id == player.id else p
            for p in self.players
        )
        return self._copy_with(players=new_players)

    def with_players(self, players: Iterable[Player]) -> GameState:
        return self._copy_with(players=tuple(players))

    def with_rules(self, rules: Iterable[Rule]) -> GameState:
        return self._copy_with(active_rules=tuple(rules))

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)

    def sandbox(self) -> GameState:
        """
        Exclusive working copy for rule chain execution.

        A new root object; children are immutable so sharing them is safe.
        """
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape broadcast to clients."""
        return {
            "roomId": self.room_id,
            "tiles": [t.to_dict() for t in self.tiles],
            "players": [p.to_dict() for p in self.players],
            "currentTurn": self.current_turn,
            "status": self.status.value,
            "activeRules": [r.id for r in self.active_rules],
        }


def create_game_state(
    room_id: str,
    board_length: int = DEFAULT_BOARD_LENGTH,
    rules: Iterable[Rule] = (),
    player_ids: Iterable[str] = (),
) -> GameState:
    """Build a fresh game: new board, players at the start, first player to move."""
    players = tuple(
        Player(id=pid, color=player_color(slot))
        for slot, pid in enumerate(player_ids)
    )
    return GameState(
        room_id=room_id,
        tiles=create_board(board_length),
        players=players,
        current_turn=players[0].id if players else None,
        status=GameStatus.PLAYING,
        active_rules=tuple(rules),
    )
