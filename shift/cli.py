"""
SHIFT CLI - Command-line interface for the engine.

Usage:
    shift serve [--host HOST] [--port PORT]         Run the API server
    shift simulate [--players N] [--rules FILE]     Play a local game to the end
    shift validate <rules_file>                     Validate a rules file
"""

import argparse
import os
import random
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="SHIFT - Board Game Rules Engine",
        prog="shift",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("SHIFT_LOG_LEVEL", "INFO"),
        help="Logging level (default: $SHIFT_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "3001")))

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a local game to the end")
    simulate_parser.add_argument("--players", type=int, default=2, help="Number of players")
    simulate_parser.add_argument("--board-length", type=int, default=20, help="Number of tiles")
    simulate_parser.add_argument("--rules", help="Path to a JSON rules file")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Dice seed")
    simulate_parser.add_argument("--max-turns", type=int, default=200, help="Stop after this many rolls")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a rules file")
    validate_parser.add_argument("rules_file", help="Path to a JSON rules file")
    validate_parser.add_argument("--board-length", type=int, default=20, help="Number of tiles")

    args = parser.parse_args(argv)

    from .logging_config import setup_logging
    setup_logging(args.log_level)

    if args.command == "serve":
        return cmd_serve(args)
    elif args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "validate":
        return cmd_validate(args)
    else:
        parser.print_help()
        return 1


def cmd_serve(args):
    """Run the FastAPI app with uvicorn."""
    import uvicorn

    print("-----------------------------------------")
    print(f"SHIFT Engine: http://localhost:{args.port}")
    print(f"API docs:     http://localhost:{args.port}/api/docs")
    print("-----------------------------------------")
    uvicorn.run("shift.api.app:app", host=args.host, port=args.port)
    return 0


def cmd_simulate(args):
    """Play a local game with random dice until someone wins."""
    from .rules_schema import RuleValidationError, load_rules_file
    from .session import RoomError, RoomManager, TurnManager

    if args.players < 1:
        print("Error: need at least one player")
        return 1

    rooms = RoomManager(default_max_players=args.players)
    turns = TurnManager(rooms, rng=random.Random(args.seed))

    rules = []
    try:
        if args.rules:
            rules = load_rules_file(args.rules)
        room = rooms.create_room("simulation", board_length=args.board_length, rules=rules)
    except FileNotFoundError:
        print(f"Error: File not found: {args.rules}")
        return 1
    except RuleValidationError as e:
        print("Error: invalid rules")
        for error in e.errors:
            print(f"  - {error}")
        return 1
    except RoomError as e:
        print(f"Error: {e.message}")
        return 1
    for i in range(args.players):
        rooms.join_room(room.room_id, f"player_{i + 1}")

    print(f"Simulating {args.players} player(s) on {room.state.board_length} tiles with {len(rules)} rule(s)")

    for _ in range(args.max_turns):
        player_id = room.state.current_turn
        result = turns.roll_dice(room.room_id, player_id)
        print(f"\nTurn {result.turn_number}: {player_id}")
        for entry in result.logs:
            print(f"  [{entry.rule_id}] {entry.message}")
        if result.game_over:
            print(f"\n{result.winner} wins after {result.turn_number} turns")
            return 0

    print(f"\nNo winner after {args.max_turns} turns")
    return 0


def cmd_validate(args):
    """Validate a rules file."""
    from .rules_schema import RuleValidationError, load_rules_file, validate_rules

    print(f"Validating: {args.rules_file}")
    try:
        rules = load_rules_file(args.rules_file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.rules_file}")
        return 1
    except RuleValidationError as e:
        errors, warnings = e.errors, []
    else:
        result = validate_rules(rules, board_length=args.board_length)
        errors, warnings = result.errors, result.warnings
        print(f"Rules: {len(rules)}")

    if warnings:
        print("\nWarnings:")
        for w in warnings:
            print(f"  - {w}")
    if errors:
        print("\nErrors:")
        for e in errors:
            print(f"  - {e}")
        return 1

    print("OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
