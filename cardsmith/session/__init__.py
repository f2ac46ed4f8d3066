"""
Session - Driving a game through actions, events and rules.
"""

from .game_loop import GameLoop, TurnResult, dispatch_action, dispatch_events

__all__ = [
    "GameLoop",
    "TurnResult",
    "dispatch_action",
    "dispatch_events",
]
