"""
Player Primitive - Resources, counters, and owned zones.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any

from ..errors import EntityValidationError
from .counters import (
    Counter,
    add_counter,
    remove_counter,
    get_counter_count,
    total_counters,
    validate_counters,
)
from .ids import PlayerId, ZoneId, is_valid_id


@dataclass(frozen=True)
class Player:
    """
    A participant in the game.

    resources is a named integer bag (life, mana, ...).
    zones lists the ids of zones this player owns.
    """
    id: PlayerId
    name: str
    resources: dict[str, int] = field(default_factory=dict)
    zones: tuple[ZoneId, ...] = ()
    counters: tuple[Counter, ...] = ()


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def create_player(
    id: PlayerId,
    name: str,
    resources: dict[str, int] | None = None,
    zones: list[ZoneId] | tuple[ZoneId, ...] | None = None,
    counters: list[Counter] | tuple[Counter, ...] | None = None,
) -> Player:
    """Create a player, validating every field."""
    player = Player(
        id=id,
        name=name,
        resources=dict(resources) if resources is not None else {},
        zones=tuple(zones) if zones is not None else (),
        counters=tuple(counters) if counters is not None else (),
    )
    validate_player(player)
    return player


def validate_player(player: Any) -> None:
    """Raise EntityValidationError unless player is a well-formed Player."""
    if not isinstance(player, Player):
        raise EntityValidationError("Player must be a Player")
    if not is_valid_id(player.id, PlayerId):
        raise EntityValidationError("Invalid player ID")
    if not isinstance(player.name, str) or not player.name.strip():
        raise EntityValidationError("Player name cannot be empty")
    if not isinstance(player.resources, dict):
        raise EntityValidationError("Resources must be a dict")
    for key, value in player.resources.items():
        if not isinstance(key, str) or not key:
            raise EntityValidationError("Resource names must be non-empty strings")
        if not _is_int(value):
            raise EntityValidationError("Resource values must be integers")
    if not isinstance(player.zones, tuple):
        raise EntityValidationError("Zones must be a sequence")
    for index, zone_id in enumerate(player.zones):
        if not is_valid_id(zone_id, ZoneId):
            raise EntityValidationError(f"Invalid zone ID in player at index {index}")
    validate_counters(player.counters)


def update_player(player: Player, **changes: Any) -> Player:
    if "id" in changes:
        raise EntityValidationError("Player ID cannot be changed")
    return replace(player, **changes)


# Resources

def set_player_resource(player: Player, resource: str, value: int) -> Player:
    if not _is_int(value):
        raise EntityValidationError("Resource value must be an integer")
    return update_player(player, resources={**player.resources, resource: value})


def get_player_resource(player: Player, resource: str, default: int | None = None) -> int | None:
    return player.resources.get(resource, default)


def modify_player_resource(player: Player, resource: str, delta: int) -> Player:
    """Add a signed delta to a resource (missing resources start at 0)."""
    current = get_player_resource(player, resource, 0)
    return set_player_resource(player, resource, current + delta)


def has_player_resource(player: Player, resource: str) -> bool:
    return resource in player.resources


def spend_player_mana(player: Player, amount: int) -> Player:
    if get_player_resource(player, "mana", 0) < amount:
        raise EntityValidationError("Insufficient mana")
    return modify_player_resource(player, "mana", -amount)


def damage_player(player: Player, amount: int) -> Player:
    return modify_player_resource(player, "life", -abs(amount))


def heal_player(player: Player, amount: int) -> Player:
    return modify_player_resource(player, "life", abs(amount))


def is_player_alive(player: Player) -> bool:
    """Players without a life resource never die."""
    life = get_player_resource(player, "life")
    return life is None or life > 0


# Counters

def add_player_counter(player: Player, counter: Counter) -> Player:
    return update_player(player, counters=add_counter(player.counters, counter))


def remove_player_counter(player: Player, counter: Counter) -> Player:
    return update_player(player, counters=remove_counter(player.counters, counter))


def get_player_counter_count(player: Player, counter_type: str) -> int:
    return get_counter_count(player.counters, counter_type)


# Zones

def has_player_zone(player: Player, zone_id: ZoneId) -> bool:
    return zone_id in player.zones


def add_player_zone(player: Player, zone_id: ZoneId) -> Player:
    if not is_valid_id(zone_id, ZoneId):
        raise EntityValidationError("Invalid zone ID")
    if has_player_zone(player, zone_id):
        raise EntityValidationError("Zone already belongs to player")
    return update_player(player, zones=player.zones + (zone_id,))


def remove_player_zone(player: Player, zone_id: ZoneId) -> Player:
    if not has_player_zone(player, zone_id):
        raise EntityValidationError("Zone does not belong to player")
    return update_player(player, zones=tuple(z for z in player.zones if z != zone_id))


def player_summary(player: Player) -> dict[str, Any]:
    return {
        "name": player.name,
        "life": get_player_resource(player, "life", 0),
        "mana": get_player_resource(player, "mana", 0),
        "zone_count": len(player.zones),
        "counter_count": total_counters(player.counters),
    }
