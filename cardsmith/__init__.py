"""
Cardsmith - Card Game State Engine

A deterministic, immutable engine for designing and simulating card games.
The engine provides:
- Entity primitives (cards, zones, players, games)
- An action library of validated, atomic state transitions
- A reactive event system with priority-ordered listeners
- Declarative rules compiled into listeners
"""

__version__ = "0.1.0"
