"""
Divinim - Board Slicing Game Engine

A deterministic engine for Divinim, where players take turns slicing
rectangular boards into smaller boards until no cut is left. The engine provides:
- Immutable board and game state values
- The slice algorithm and board identity retention
- Pluggable win and score conditions
- An async turn loop driving random, interactive and network players
"""

__version__ = "0.1.0"
