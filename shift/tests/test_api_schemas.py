"""
Tests for API schemas.

Verifies:
- Rule payloads accept camelCase and snake_case
- Request validation bounds
- Error codes
- OpenAPI schema generation
"""

import pytest
from pydantic import ValidationError

from ..api.schemas import (
    CreateRoomRequest,
    ErrorCode,
    ErrorResponse,
    JoinRoomRequest,
    RollDiceRequest,
    RuleModel,
)


class TestPydanticSchemas:
    """Tests for request/response models."""

    def test_rule_model_camel_case(self):
        rule = RuleModel.model_validate({
            "id": "r1",
            "trigger": "ON_LAND",
            "tileIndex": 5,
            "createdAt": 12.5,
            "effects": [{"type": "MOVE_RELATIVE", "value": "3"}],
        })

        assert rule.tile_index == 5
        assert rule.created_at == 12.5
        assert rule.effects[0].value == "3"
        assert rule.effects[0].target == "self"

    def test_rule_model_dumps_camel_case(self):
        data = RuleModel(id="r1", trigger="ON_LAND", tile_index=2).model_dump(by_alias=True)

        assert data["tileIndex"] == 2
        assert "tile_index" not in data

    def test_rule_model_requires_id(self):
        with pytest.raises(ValidationError):
            RuleModel(id="", trigger="ON_LAND")

    def test_create_room_defaults(self):
        request = CreateRoomRequest()

        assert request.room_id is None
        assert request.board_length is None
        assert request.rules == []

    @pytest.mark.parametrize("field,value", [
        ("board_length", 1),
        ("board_length", 501),
        ("max_players", 0),
    ])
    def test_create_room_bounds(self, field, value):
        with pytest.raises(ValidationError):
            CreateRoomRequest(**{field: value})

    def test_join_requires_player(self):
        with pytest.raises(ValidationError):
            JoinRoomRequest(player_id="")

    def test_roll_request_optional_dice(self):
        assert RollDiceRequest(player_id="alice").dice_value is None
        assert RollDiceRequest(player_id="alice", dice_value=4).dice_value == 4

    def test_error_response_schema(self):
        error = ErrorResponse(error="Room r1 is full", error_code=ErrorCode.ROOM_FULL)

        data = error.model_dump(mode="json")

        assert data["error_code"] == "ROOM_FULL"
        assert data["details"] is None


class TestErrorCodes:
    """Tests for error code coverage."""

    def test_all_error_codes_defined(self):
        required_codes = [
            "ROOM_NOT_FOUND",
            "ROOM_FULL",
            "PLAYER_NOT_FOUND",
            "NOT_YOUR_TURN",
            "GAME_FINISHED",
            "INVALID_DICE",
            "INVALID_RULE",
        ]

        for code in required_codes:
            assert hasattr(ErrorCode, code), f"Missing error code: {code}"
            assert ErrorCode[code].value == code

    def test_error_code_values_are_strings(self):
        for code in ErrorCode:
            assert isinstance(code.value, str)
            assert code.value == code.value.upper()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    @pytest.fixture
    def schema(self):
        from fastapi.openapi.utils import get_openapi
        from ..api.app import create_app

        app = create_app()
        return get_openapi(title=app.title, version=app.version, routes=app.routes)

    def test_openapi_schema_generates(self, schema):
        assert "paths" in schema
        assert "schemas" in schema["components"]

    def test_response_models_in_schema(self, schema):
        schemas = schema["components"]["schemas"]

        for name in ["RoomResponse", "RollDiceResponse", "GameStateResponse", "ErrorResponse"]:
            assert name in schemas, f"Missing schema: {name}"

    def test_endpoints_present(self, schema):
        paths = schema["paths"]

        assert "post" in paths["/api/v1/rooms"]
        assert "201" in paths["/api/v1/rooms"]["post"]["responses"]
        assert "post" in paths["/api/v1/rooms/{room_id}/roll"]
        assert "post" in paths["/api/v1/rooms/{room_id}/players"]
