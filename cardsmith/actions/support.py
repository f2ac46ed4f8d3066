"""Shared lookups for the action handlers."""

from __future__ import annotations
from typing import Any

from ..events.event import GameEvent, create_game_event
from ..primitives.card import Card
from ..primitives.game import Game, get_game_card, get_game_player, get_game_zone
from ..primitives.ids import CardId, Identifier, PlayerId, ZoneId
from ..primitives.player import Player
from ..primitives.zone import Zone


def is_count(value: Any) -> bool:
    """Non-negative int, bools excluded."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_target(game: Game, target: Any) -> Card | Player | None:
    """A stat/counter holder: the card or player named by target."""
    if isinstance(target, CardId):
        return get_game_card(game, target)
    if isinstance(target, PlayerId):
        return get_game_player(game, target)
    return None


def entity_exists(game: Game, identifier: Identifier) -> bool:
    if isinstance(identifier, CardId):
        return get_game_card(game, identifier) is not None
    if isinstance(identifier, PlayerId):
        return get_game_player(game, identifier) is not None
    if isinstance(identifier, ZoneId):
        return get_game_zone(game, identifier) is not None
    return False


def raise_event(event_type: str, triggered_by: PlayerId | None = None, **payload: Any) -> GameEvent:
    return create_game_event(event_type, payload, triggered_by)


def zone_label(zone: Zone) -> str:
    return f"{zone.name} ({zone.id})"
