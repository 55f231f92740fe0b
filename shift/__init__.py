"""
SHIFT - Board Game Rules Engine

A deterministic rules-resolution core for a turn-based board game.
Given a player's dice roll the engine provides:
- Rule matching for game events (start of move, landing)
- Deterministic rule ordering by effect priority
- Sandboxed effect application with cascade protection
- An ordered log of everything that happened
"""

__version__ = "0.1.0"
