"""
Primitives - Immutable game entities.

Cards, zones, players and the game aggregate. Every operation returns a
new value; nothing is mutated in place.
"""

from .ids import (
    Identifier,
    GameId,
    PlayerId,
    CardId,
    ZoneId,
    ListenerId,
    EventId,
    create_game_id,
    create_player_id,
    create_card_id,
    create_zone_id,
    create_listener_id,
    create_event_id,
    is_valid_id,
)
from .counters import Counter
from .card import Card, create_card
from .zone import (
    Zone,
    ZoneType,
    Visibility,
    CardOrder,
    create_zone,
    create_deck,
    create_hand,
    create_discard_pile,
    create_play_area,
    create_stack,
)
from .player import Player, create_player
from .game import Game, create_game

__all__ = [
    "Identifier",
    "GameId",
    "PlayerId",
    "CardId",
    "ZoneId",
    "ListenerId",
    "EventId",
    "create_game_id",
    "create_player_id",
    "create_card_id",
    "create_zone_id",
    "create_listener_id",
    "create_event_id",
    "is_valid_id",
    "Counter",
    "Card",
    "create_card",
    "Zone",
    "ZoneType",
    "Visibility",
    "CardOrder",
    "create_zone",
    "create_deck",
    "create_hand",
    "create_discard_pile",
    "create_play_area",
    "create_stack",
    "Player",
    "create_player",
    "Game",
    "create_game",
]
