"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between game clients and the engine.
Rule payloads accept the camelCase names clients send (`tileIndex`,
`createdAt`) as well as snake_case.

Error Codes:
- ROOM_NOT_FOUND: Room does not exist or was removed
- ROOM_EXISTS: Room id already in use
- ROOM_FULL: Room reached its player capacity
- PLAYER_NOT_FOUND: Player is not in the room
- NOT_YOUR_TURN: Roll from a player who does not hold the turn
- GAME_FINISHED: Roll after the game was won
- INVALID_DICE: Dice value outside the die's faces
- INVALID_RULE: Rule set failed to load or validate
"""

from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_EXISTS = "ROOM_EXISTS"
    ROOM_FULL = "ROOM_FULL"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    GAME_FINISHED = "GAME_FINISHED"
    INVALID_DICE = "INVALID_DICE"
    INVALID_RULE = "INVALID_RULE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GameStatusName(str, Enum):
    PLAYING = "playing"
    FINISHED = "finished"


# =============================================================================
# Rule Models
# =============================================================================

class EffectModel(BaseModel):
    """One effect of a rule."""
    type: str = Field(description="Action type, e.g. MOVE_RELATIVE")
    value: Union[int, float, str] = 0
    target: str = Field(default="self", description="self, all or others")


class RuleModel(BaseModel):
    """A rule as declared by the room creator."""
    id: str = Field(min_length=1)
    title: Optional[str] = None
    trigger: str = Field(description="Trigger type, e.g. ON_LAND")
    tile_index: Optional[int] = Field(default=None, alias="tileIndex")
    priority: Optional[int] = None
    created_at: Optional[float] = Field(default=None, alias="createdAt")
    effects: list[EffectModel] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


# =============================================================================
# Requests
# =============================================================================

class CreateRoomRequest(BaseModel):
    """Create a room with its board and rule set."""
    room_id: Optional[str] = None
    board_length: Optional[int] = Field(default=None, ge=2, le=500)
    max_players: Optional[int] = Field(default=None, ge=1, le=16)
    rules: list[RuleModel] = Field(default_factory=list)


class JoinRoomRequest(BaseModel):
    player_id: str = Field(min_length=1)


class RollDiceRequest(BaseModel):
    """Roll for a player. Omit dice_value to let the server roll."""
    player_id: str = Field(min_length=1)
    dice_value: Optional[int] = None


# =============================================================================
# Shared Models
# =============================================================================

class TileInfo(BaseModel):
    id: str
    index: int
    type: str

    model_config = {"from_attributes": True}


class PlayerInfo(BaseModel):
    """Player information for display."""
    id: str
    position: int
    score: int
    color: Optional[str] = None
    is_current_turn: bool = False

    model_config = {"from_attributes": True}


class RuleInfo(BaseModel):
    """Summary of an active rule."""
    id: str
    title: Optional[str] = None
    trigger: str
    tile_index: Optional[int] = None
    priority: Optional[int] = None
    effects: list[EffectModel] = Field(default_factory=list)


class LogEntryInfo(BaseModel):
    """One line of a resolution log."""
    rule_id: str
    message: str
    severity: str = "info"


# =============================================================================
# Responses
# =============================================================================

class GameStateResponse(BaseModel):
    """Full game state of a room."""
    room_id: str
    status: GameStatusName
    current_turn: Optional[str] = None
    board_length: int
    tiles: list[TileInfo] = Field(default_factory=list)
    players: list[PlayerInfo] = Field(default_factory=list)
    active_rules: list[RuleInfo] = Field(default_factory=list)


class RoomResponse(BaseModel):
    """Room status."""
    room_id: str
    max_players: int
    player_count: int
    turn_number: int = 0
    winner: Optional[str] = None
    created_at: float
    game_state: GameStateResponse
    warnings: list[str] = Field(default_factory=list)


class RoomListResponse(BaseModel):
    room_ids: list[str]
    count: int


class RollDiceResponse(BaseModel):
    """Outcome of one dice roll."""
    room_id: str
    player_id: str
    dice_value: int
    logs: list[LogEntryInfo] = Field(default_factory=list)
    next_player: Optional[str] = None
    winner: Optional[str] = None
    game_over: bool = False
    extra_turn: bool = False
    skipped_players: list[str] = Field(default_factory=list)
    turn_number: int = 0
    game_state: GameStateResponse


class EndRoomResponse(BaseModel):
    success: bool
    room_id: str
    message: str


class ErrorResponse(BaseModel):
    """Error response with structured code."""
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
