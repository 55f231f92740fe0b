"""
Tests for the FastAPI app over HTTP and WebSocket.
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.service import APIService


@pytest.fixture
def client():
    with TestClient(create_app(APIService())) as test_client:
        yield test_client


@pytest.fixture
def room(client):
    """Room "r1" with a +2 boost on tile 3, alice and bob joined."""
    client.post("/api/v1/rooms", json={
        "room_id": "r1",
        "rules": [{
            "id": "boost",
            "trigger": "ON_LAND",
            "tileIndex": 3,
            "effects": [{"type": "MOVE_RELATIVE", "value": 2}],
        }],
    })
    client.post("/api/v1/rooms/r1/players", json={"player_id": "alice"})
    client.post("/api/v1/rooms/r1/players", json={"player_id": "bob"})
    return "r1"


class TestRest:

    def test_health(self, client):
        """Health endpoint reports healthy."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_create_room(self, client):
        """Can create a room with a custom board."""
        response = client.post("/api/v1/rooms", json={"room_id": "x", "board_length": 12})

        assert response.status_code == 201
        assert response.json()["game_state"]["board_length"] == 12

    def test_create_room_conflict(self, client, room):
        """Creating an existing room is a conflict."""
        response = client.post("/api/v1/rooms", json={"room_id": "r1"})

        assert response.status_code == 409
        assert response.json()["error_code"] == "ROOM_EXISTS"

    def test_create_room_invalid_rule(self, client):
        """Invalid rules are rejected with a 400."""
        response = client.post("/api/v1/rooms", json={
            "room_id": "bad",
            "rules": [{"id": "r", "trigger": "ON_LAND", "tileIndex": 99}],
        })

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_RULE"

    def test_request_validation(self, client):
        """Malformed bodies fail request validation."""
        response = client.post("/api/v1/rooms", json={"board_length": 1})
        assert response.status_code == 422

    def test_get_room(self, client, room):
        """Can get room status."""
        response = client.get("/api/v1/rooms/r1")

        assert response.status_code == 200
        assert response.json()["player_count"] == 2

    def test_missing_room(self, client):
        """Unknown rooms return 404."""
        response = client.get("/api/v1/rooms/missing")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ROOM_NOT_FOUND"

    def test_roll(self, client, room):
        """Rolling applies rules and passes the turn."""
        response = client.post("/api/v1/rooms/r1/roll", json={"player_id": "alice", "dice_value": 3})

        assert response.status_code == 200
        data = response.json()
        assert [entry["rule_id"] for entry in data["logs"]] == ["dice", "boost"]
        assert data["next_player"] == "bob"
        alice = next(p for p in data["game_state"]["players"] if p["id"] == "alice")
        assert alice["position"] == 5

    def test_roll_out_of_turn(self, client, room):
        """Rolling out of turn is refused."""
        response = client.post("/api/v1/rooms/r1/roll", json={"player_id": "bob", "dice_value": 3})

        assert response.status_code == 409
        assert response.json()["error_code"] == "NOT_YOUR_TURN"

    def test_roll_bad_dice(self, client, room):
        """Dice values outside 1-6 are refused."""
        response = client.post("/api/v1/rooms/r1/roll", json={"player_id": "alice", "dice_value": 0})

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_DICE"

    def test_leave_and_delete(self, client, room):
        """Can leave and then delete a room."""
        response = client.delete("/api/v1/rooms/r1/players/alice")
        assert response.status_code == 200

        response = client.delete("/api/v1/rooms/r1")
        assert response.json()["success"] is True
        assert client.get("/api/v1/rooms").json()["count"] == 0

    def test_reset(self, client, room):
        """Reset puts the room back to turn zero."""
        client.post("/api/v1/rooms/r1/roll", json={"player_id": "alice", "dice_value": 1})

        response = client.post("/api/v1/rooms/r1/reset")

        assert response.status_code == 200
        assert response.json()["turn_number"] == 0


class RecordingSocket:
    """Stand-in connection that keeps what it was sent."""

    def __init__(self):
        self.sent = []

    async def send_json(self, message):
        self.sent.append(message)


class ClosingSocket:
    """Stand-in connection whose handler tears down the room while a send fails."""

    def __init__(self, connections, room_id):
        self.connections = connections
        self.room_id = room_id

    async def send_json(self, message):
        self.connections.pop(self.room_id, None)
        raise ConnectionResetError("connection closed")


class TestBroadcast:

    def test_dead_socket_is_dropped(self, client, room):
        """A failing connection is removed and the others still get the roll."""
        connections = client.app.state.ws_connections
        healthy = RecordingSocket()
        broken = ClosingSocket({}, "r1")
        connections["r1"] = [broken, healthy]

        response = client.post("/api/v1/rooms/r1/roll", json={"player_id": "alice", "dice_value": 1})

        assert response.status_code == 200
        assert connections["r1"] == [healthy]
        assert [m["type"] for m in healthy.sent] == ["dice_rolled", "game_state_sync"]

    def test_room_removed_during_broadcast(self, client, room):
        """The roll still succeeds when the room's connection list vanishes mid-send."""
        connections = client.app.state.ws_connections
        connections["r1"] = [ClosingSocket(connections, "r1")]

        response = client.post("/api/v1/rooms/r1/roll", json={"player_id": "alice", "dice_value": 2})

        assert response.status_code == 200
        assert "r1" not in connections
        assert response.json()["dice_value"] == 2


class TestWebSocket:

    def test_join_ping_and_roll(self, client):
        """Joining syncs state, ping answers, and a roll is broadcast."""
        with client.websocket_connect("/api/v1/rooms/live/ws?player_id=alice") as ws:
            joined = ws.receive_json()
            assert joined == {"type": "room_joined", "payload": {"roomId": "live", "playerId": "alice"}}

            sync = ws.receive_json()
            assert sync["type"] == "game_state_sync"
            assert sync["payload"]["currentTurn"] == "alice"

            ws.send_json({"type": "ping_test"})
            pong = ws.receive_json()
            assert pong["type"] == "pong_response"
            assert pong["payload"]["message"] == "Pong!"

            ws.send_json({"type": "roll_dice", "payload": {"diceValue": 2}})
            rolled = ws.receive_json()
            assert rolled["type"] == "dice_rolled"
            assert rolled["payload"]["dice_value"] == 2
            assert rolled["payload"]["logs"][0]["message"] == "Dice roll: 2. Moved 0 -> 2"

            sync = ws.receive_json()
            assert sync["type"] == "game_state_sync"
            assert sync["payload"]["players"][0]["position"] == 2

    def test_second_player_and_shout(self, client):
        """A second join is announced and shouts reach everyone."""
        with client.websocket_connect("/api/v1/rooms/live/ws?player_id=alice") as ws_alice:
            ws_alice.receive_json()  # room_joined
            ws_alice.receive_json()  # game_state_sync

            with client.websocket_connect("/api/v1/rooms/live/ws?player_id=bob") as ws_bob:
                assert ws_bob.receive_json()["type"] == "room_joined"
                assert ws_bob.receive_json()["type"] == "game_state_sync"

                assert ws_alice.receive_json()["type"] == "game_state_sync"
                arrived = ws_alice.receive_json()
                assert arrived["type"] == "player_joined_room"
                assert arrived["payload"]["id"] == "bob"

                ws_bob.send_json({"type": "send_shout", "payload": {"message": "hi"}})
                for ws in (ws_alice, ws_bob):
                    shout = ws.receive_json()
                    assert shout["type"] == "incoming_shout"
                    assert shout["payload"]["senderId"] == "bob"
                    assert shout["payload"]["message"] == "hi"

    def test_errors_go_to_sender(self, client):
        """Bad messages get an error frame back."""
        with client.websocket_connect("/api/v1/rooms/live/ws?player_id=alice") as ws:
            ws.receive_json()
            ws.receive_json()

            ws.send_text("not json")
            assert ws.receive_json()["payload"]["message"] == "Invalid JSON"

            ws.send_json({"type": "roll_dice", "payload": {"diceValue": 9}})
            error = ws.receive_json()
            assert error["type"] == "error"
            assert error["payload"]["error_code"] == "INVALID_DICE"

            ws.send_json({"type": "dance"})
            assert ws.receive_json()["type"] == "error"
