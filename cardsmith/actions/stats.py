"""
Stat Handlers - stats, tapping, counters and the turn phase.

Same check/apply pairing as the movement handlers.
"""

from __future__ import annotations
import random

from ..events.event import EventTypes
from ..primitives.card import (
    Card,
    add_card_counter,
    get_card_counter_count,
    remove_card_counter,
    set_card_property,
    tap_card,
    untap_card,
)
from ..primitives.counters import Counter
from ..primitives.game import Game, get_game_card, get_game_player, replace_card, replace_player, set_game_phase
from ..primitives.ids import CardId, PlayerId, is_valid_id
from ..primitives.player import (
    add_player_counter,
    get_player_counter_count,
    get_player_resource,
    modify_player_resource,
    remove_player_counter,
)
from .action import Action, ActionPayload, Transition
from .support import is_count, is_int, raise_event, resolve_target


def _replace_holder(game: Game, holder) -> Game:
    if isinstance(holder, Card):
        return replace_card(game, holder)
    return replace_player(game, holder)


# =============================================================================
# Modify stat
# =============================================================================

def _check_modify_stat(game: Game, payload: ActionPayload) -> str | None:
    if not (is_valid_id(payload.target, CardId) or is_valid_id(payload.target, PlayerId)):
        return "Invalid target ID"
    if not isinstance(payload.stat, str) or not payload.stat.strip():
        return "Stat name cannot be empty"
    if not is_int(payload.value):
        return "Stat value must be an integer"

    holder = resolve_target(game, payload.target)
    if holder is None:
        return "Target not found"
    if isinstance(holder, Card):
        current = holder.properties.get(payload.stat, 0)
        if isinstance(current, bool) or not isinstance(current, (int, float)):
            return "Stat is not numeric"
    return None


def _apply_modify_stat(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    p = action.payload
    holder = resolve_target(game, p.target)

    if isinstance(holder, Card):
        previous = holder.properties.get(p.stat, 0)
        holder = set_card_property(holder, p.stat, previous + p.value)
        current = holder.properties[p.stat]
    else:
        previous = get_player_resource(holder, p.stat, 0)
        holder = modify_player_resource(holder, p.stat, p.value)
        current = holder.resources[p.stat]
    game = _replace_holder(game, holder)

    event = raise_event(
        EventTypes.STAT_MODIFIED,
        target=p.target,
        stat=p.stat,
        value=p.value,
        previous=previous,
        current=current,
    )
    return Transition(game, [event], [f"{holder.name} {p.stat}: {previous} -> {current}"])


# =============================================================================
# Tap / untap
# =============================================================================

def _check_tap(game: Game, payload: ActionPayload) -> str | None:
    if not is_valid_id(payload.card_id, CardId):
        return "Invalid card ID"
    card = get_game_card(game, payload.card_id)
    if card is None:
        return "Card not found"
    if payload.player_id is not None:
        if get_game_player(game, payload.player_id) is None:
            return "Player not found"
        if card.owner != payload.player_id:
            return "Player does not own this card"
    return None


def _apply_tap_card(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    card = tap_card(get_game_card(game, action.payload.card_id))
    event = raise_event(EventTypes.CARD_TAPPED, triggered_by=action.payload.player_id, card_id=card.id)
    return Transition(replace_card(game, card), [event], [f"Tapped {card.name}"])


def _apply_untap_card(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    card = untap_card(get_game_card(game, action.payload.card_id))
    event = raise_event(EventTypes.CARD_UNTAPPED, triggered_by=action.payload.player_id, card_id=card.id)
    return Transition(replace_card(game, card), [event], [f"Untapped {card.name}"])


# =============================================================================
# Counters
# =============================================================================

def _check_counter_change(game: Game, payload: ActionPayload) -> str | None:
    if not (is_valid_id(payload.target, CardId) or is_valid_id(payload.target, PlayerId)):
        return "Invalid target ID"
    if not isinstance(payload.counter_type, str) or not payload.counter_type.strip():
        return "Counter type cannot be empty"
    count = 1 if payload.count is None else payload.count
    if not is_count(count):
        return "Counter count must be a non-negative integer"
    if resolve_target(game, payload.target) is None:
        return "Target not found"
    return None


def _held_count(holder, counter_type: str) -> int:
    if isinstance(holder, Card):
        return get_card_counter_count(holder, counter_type)
    return get_player_counter_count(holder, counter_type)


def _check_remove_counter(game: Game, payload: ActionPayload) -> str | None:
    error = _check_counter_change(game, payload)
    if error:
        return error

    holder = resolve_target(game, payload.target)
    held = _held_count(holder, payload.counter_type)
    count = 1 if payload.count is None else payload.count
    if not any(c.type == payload.counter_type for c in holder.counters):
        return "Cannot remove counters that do not exist"
    if held < count:
        return "Cannot remove more counters than exist"
    return None


def _apply_add_counter(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    p = action.payload
    counter = Counter(type=p.counter_type, count=1 if p.count is None else p.count)
    holder = resolve_target(game, p.target)
    if isinstance(holder, Card):
        holder = add_card_counter(holder, counter)
    else:
        holder = add_player_counter(holder, counter)

    event = raise_event(
        EventTypes.COUNTER_ADDED,
        target=p.target,
        counter_type=counter.type,
        count=counter.count,
        total=_held_count(holder, counter.type),
    )
    return Transition(
        _replace_holder(game, holder),
        [event],
        [f"Added {counter.count} {counter.type} counter(s) to {holder.name}"],
    )


def _apply_remove_counter(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    p = action.payload
    counter = Counter(type=p.counter_type, count=1 if p.count is None else p.count)
    holder = resolve_target(game, p.target)
    if isinstance(holder, Card):
        holder = remove_card_counter(holder, counter)
    else:
        holder = remove_player_counter(holder, counter)

    event = raise_event(
        EventTypes.COUNTER_REMOVED,
        target=p.target,
        counter_type=counter.type,
        count=counter.count,
        total=_held_count(holder, counter.type),
    )
    return Transition(
        _replace_holder(game, holder),
        [event],
        [f"Removed {counter.count} {counter.type} counter(s) from {holder.name}"],
    )


# =============================================================================
# Turn phase
# =============================================================================

def _check_set_turn_phase(game: Game, payload: ActionPayload) -> str | None:
    if not isinstance(payload.phase, str) or not payload.phase.strip():
        return "Phase must be a non-empty string"
    return None


def _apply_set_turn_phase(game: Game, action: Action, rng: random.Random | None = None) -> Transition:
    previous = game.phase
    game = set_game_phase(game, action.payload.phase)
    event = raise_event(EventTypes.PHASE_CHANGED, previous=previous, phase=game.phase)
    return Transition(game, [event], [f"Phase {previous} -> {game.phase}"])
