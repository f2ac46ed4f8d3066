"""
Action System - Actions, payloads, and results.

An action is a tagged payload describing one state transition:
moving, drawing, playing, discarding cards; tapping; shuffling;
changing stats, counters and the turn phase.

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..primitives.ids import CardId, Identifier, PlayerId, ZoneId


class ActionType(Enum):
    """Types of actions in the library."""
    MOVE_CARD = "MOVE_CARD"
    DRAW_CARDS = "DRAW_CARDS"
    PLAY_CARD = "PLAY_CARD"
    MODIFY_STAT = "MODIFY_STAT"
    TAP_CARD = "TAP_CARD"
    UNTAP_CARD = "UNTAP_CARD"
    DISCARD_CARD = "DISCARD_CARD"
    SHUFFLE_ZONE = "SHUFFLE_ZONE"
    ADD_COUNTER = "ADD_COUNTER"
    REMOVE_COUNTER = "REMOVE_COUNTER"
    SET_TURN_PHASE = "SET_TURN_PHASE"
    VIEW_ZONE = "VIEW_ZONE"


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    This is a generic container; validation happens in the reducer.
    """
    player_id: PlayerId | None = None
    card_id: CardId | None = None
    zone_id: ZoneId | None = None

    # For movement
    from_zone: ZoneId | None = None
    to_zone: ZoneId | None = None
    position: int | None = None
    count: int | None = None

    # For stats and counters (target is a CardId or PlayerId)
    target: CardId | PlayerId | None = None
    stat: str | None = None
    value: int | None = None
    counter_type: str | None = None

    # For play
    targets: tuple[Identifier, ...] = ()

    # For phase changes
    phase: str | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to a game.

    Actions are:
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def move_card(
        cls, card_id: CardId, from_zone: ZoneId, to_zone: ZoneId, position: int | None = None
    ) -> Action:
        return cls(
            action_type=ActionType.MOVE_CARD,
            payload=ActionPayload(card_id=card_id, from_zone=from_zone, to_zone=to_zone, position=position),
        )

    @classmethod
    def draw_cards(cls, player_id: PlayerId, count: int = 1) -> Action:
        return cls(
            action_type=ActionType.DRAW_CARDS,
            payload=ActionPayload(player_id=player_id, count=count),
        )

    @classmethod
    def play_card(
        cls, card_id: CardId, player_id: PlayerId, targets: list[Identifier] | tuple[Identifier, ...] = ()
    ) -> Action:
        return cls(
            action_type=ActionType.PLAY_CARD,
            payload=ActionPayload(card_id=card_id, player_id=player_id, targets=tuple(targets)),
        )

    @classmethod
    def modify_stat(cls, target: CardId | PlayerId, stat: str, value: int) -> Action:
        return cls(
            action_type=ActionType.MODIFY_STAT,
            payload=ActionPayload(target=target, stat=stat, value=value),
        )

    @classmethod
    def tap_card(cls, card_id: CardId, player_id: PlayerId | None = None) -> Action:
        return cls(
            action_type=ActionType.TAP_CARD,
            payload=ActionPayload(card_id=card_id, player_id=player_id),
        )

    @classmethod
    def untap_card(cls, card_id: CardId, player_id: PlayerId | None = None) -> Action:
        return cls(
            action_type=ActionType.UNTAP_CARD,
            payload=ActionPayload(card_id=card_id, player_id=player_id),
        )

    @classmethod
    def discard_card(cls, player_id: PlayerId, card_id: CardId) -> Action:
        return cls(
            action_type=ActionType.DISCARD_CARD,
            payload=ActionPayload(player_id=player_id, card_id=card_id),
        )

    @classmethod
    def shuffle_zone(cls, zone_id: ZoneId, player_id: PlayerId | None = None) -> Action:
        return cls(
            action_type=ActionType.SHUFFLE_ZONE,
            payload=ActionPayload(zone_id=zone_id, player_id=player_id),
        )

    @classmethod
    def add_counter(cls, target: CardId | PlayerId, counter_type: str, count: int = 1) -> Action:
        return cls(
            action_type=ActionType.ADD_COUNTER,
            payload=ActionPayload(target=target, counter_type=counter_type, count=count),
        )

    @classmethod
    def remove_counter(cls, target: CardId | PlayerId, counter_type: str, count: int = 1) -> Action:
        return cls(
            action_type=ActionType.REMOVE_COUNTER,
            payload=ActionPayload(target=target, counter_type=counter_type, count=count),
        )

    @classmethod
    def set_turn_phase(cls, phase: str) -> Action:
        return cls(
            action_type=ActionType.SET_TURN_PHASE,
            payload=ActionPayload(phase=phase),
        )

    @classmethod
    def view_zone(cls, player_id: PlayerId, zone_id: ZoneId, count: int | None = None) -> Action:
        return cls(
            action_type=ActionType.VIEW_ZONE,
            payload=ActionPayload(player_id=player_id, zone_id=zone_id, count=count),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New game (if succeeded)
    - Error message (if failed)
    - Events raised by the transition
    - Human-readable changes for logs
    """
    success: bool
    game: Any | None = None  # Game
    error: str | None = None
    events: list[Any] = field(default_factory=list)  # GameEvent
    changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str) -> ActionResult:
        return cls(success=False, error=error)

    @classmethod
    def success_with_game(
        cls,
        game: Any,
        events: list[Any] | None = None,
        changes: list[str] | None = None,
    ) -> ActionResult:
        return cls(success=True, game=game, events=events or [], changes=changes or [])


@dataclass
class Transition:
    """What a handler produced: the next game plus the events it raised."""
    game: Any  # Game
    events: list[Any] = field(default_factory=list)  # GameEvent
    changes: list[str] = field(default_factory=list)
