"""
Tests for the command-line interface.
"""

import json

from ..cli import main


def _write_rules(tmp_path, rules):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(rules))
    return str(path)


class TestValidateCommand:

    def test_valid_file(self, tmp_path, capsys):
        """A well-formed rules file is accepted."""
        path = _write_rules(tmp_path, [
            {"id": "boost", "trigger": "ON_LAND", "tileIndex": 3, "effects": [{"type": "MOVE_RELATIVE", "value": 2}]},
        ])

        assert main(["validate", path]) == 0
        assert "OK" in capsys.readouterr().out

    def test_invalid_file(self, tmp_path, capsys):
        """Rule errors are listed and the exit code is 1."""
        path = _write_rules(tmp_path, [{"id": "far", "trigger": "ON_LAND", "tileIndex": 40}])

        assert main(["validate", path, "--board-length", "20"]) == 1
        assert "outside the board" in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        """A missing file exits with 1."""
        assert main(["validate", str(tmp_path / "missing.json")]) == 1


class TestSimulateCommand:

    def test_game_finishes(self, capsys):
        """A seeded game runs to a winner."""
        assert main(["simulate", "--seed", "1", "--board-length", "10"]) == 0

        out = capsys.readouterr().out
        assert "wins after" in out

    def test_with_rules(self, tmp_path, capsys):
        """Rules from a file show up in the turn log."""
        path = _write_rules(tmp_path, {"rules": [
            {"id": "bonus", "trigger": "ON_LAND", "effects": [{"type": "MODIFY_SCORE", "value": 1}]},
        ]})

        assert main(["simulate", "--seed", "5", "--rules", path]) == 0
        assert "[bonus]" in capsys.readouterr().out

    def test_needs_players(self):
        """Zero players is refused."""
        assert main(["simulate", "--players", "0"]) == 1

    def test_rules_rejected_by_room(self, tmp_path, capsys):
        """Rules that load but fail room validation are reported, not raised."""
        path = _write_rules(tmp_path, [{"id": "x", "trigger": "ON_LAND", "tileIndex": 50, "effects": []}])

        assert main(["simulate", "--rules", path]) == 1

        out = capsys.readouterr().out
        assert "Error: invalid rules" in out
        assert "outside the board" in out

    def test_duplicate_rule_ids(self, tmp_path, capsys):
        """Duplicate ids are caught before the game starts."""
        path = _write_rules(tmp_path, [
            {"id": "same", "trigger": "ON_LAND"},
            {"id": "same", "trigger": "ON_LAND"},
        ])

        assert main(["simulate", "--rules", path]) == 1
        assert "Duplicate rule id: same" in capsys.readouterr().out

    def test_board_too_small(self, capsys):
        """A one-tile board is refused with a message."""
        assert main(["simulate", "--board-length", "1"]) == 1
        assert "at least 2 tiles" in capsys.readouterr().out


def test_no_command_prints_help():
    """No subcommand prints help and exits with 1."""
    assert main([]) == 1
