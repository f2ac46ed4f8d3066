"""
Pytest fixtures for Cardsmith tests.
"""

import random

import pytest

from ..primitives.card import create_card
from ..primitives.game import Game, create_game
from ..primitives.ids import CardId, GameId, PlayerId, ZoneId
from ..primitives.player import create_player
from ..primitives.zone import create_deck, create_hand, create_play_area


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible shuffles."""
    return random.Random(42)


@pytest.fixture
def draw_game() -> Game:
    """One player with deck [A, B] (B on top) and an empty hand."""
    player_id = PlayerId("p1")
    deck = create_deck(ZoneId("deck"), player_id, cards=[CardId("A"), CardId("B")])
    hand = create_hand(ZoneId("hand"), player_id)
    cards = [
        create_card(CardId("A"), "Card A", "", "Creature", player_id, deck.id),
        create_card(CardId("B"), "Card B", "", "Creature", player_id, deck.id),
    ]
    player = create_player(player_id, "Player One", zones=[deck.id, hand.id])
    return create_game(
        GameId("g-draw"),
        players=[player],
        zones=[deck, hand],
        cards=cards,
        current_player=player_id,
        phase="main",
        turn_number=1,
    )


@pytest.fixture
def game() -> Game:
    """
    A two-player game in the main phase.

    p1: deck [c1, c2, c3], hand [h1 (Fire Drake, manaCost 2), h2 (Lightning Bolt, free)],
        empty play area, no discard pile, 20 life and 3 mana.
    p2: deck [d1], empty hand with room for one card, 20 life.
    """
    p1, p2 = PlayerId("p1"), PlayerId("p2")

    deck1 = create_deck(ZoneId("deck-p1"), p1, cards=[CardId("c1"), CardId("c2"), CardId("c3")])
    hand1 = create_hand(ZoneId("hand-p1"), p1, cards=[CardId("h1"), CardId("h2")])
    play1 = create_play_area(ZoneId("play-p1"), p1)
    deck2 = create_deck(ZoneId("deck-p2"), p2, cards=[CardId("d1")])
    hand2 = create_hand(ZoneId("hand-p2"), p2, max_size=1)

    cards = [
        create_card(CardId(f"c{i}"), f"Forest {i}", "", "Land", p1, deck1.id) for i in (1, 2, 3)
    ]
    cards += [
        create_card(
            CardId("h1"), "Fire Drake", "Flying", "Creature", p1, hand1.id,
            properties={"manaCost": 2, "power": 2, "toughness": 3},
        ),
        create_card(CardId("h2"), "Lightning Bolt", "Deal 3 damage", "Instant", p1, hand1.id),
        create_card(CardId("d1"), "Island", "", "Land", p2, deck2.id),
    ]

    players = [
        create_player(p1, "Player One", {"life": 20, "mana": 3}, zones=[deck1.id, hand1.id, play1.id]),
        create_player(p2, "Player Two", {"life": 20}, zones=[deck2.id, hand2.id]),
    ]
    return create_game(
        GameId("g1"),
        players=players,
        zones=[deck1, hand1, play1, deck2, hand2],
        cards=cards,
        current_player=p1,
        phase="main",
        turn_number=1,
    )


@pytest.fixture
def project_data() -> dict:
    """A saved project in its camelCase wire form."""
    return {
        "id": "proj-1",
        "name": "Elemental Clash",
        "description": "Two-player starter",
        "cards": [
            {"id": "fire-drake", "name": "Fire Drake", "type": "Creature", "cost": 2, "power": 2, "toughness": 3},
            {"id": "bolt", "name": "Lightning Bolt", "type": "Instant", "cost": 1},
            {"id": "forest", "name": "Forest", "type": "Land"},
            {"id": "island", "name": "Island", "type": "Land"},
            {"id": "forest", "name": "Forest", "type": "Land"},
            {"id": "island", "name": "Island", "type": "Land"},
        ],
        "zones": [
            {"id": "deck", "name": "Library", "type": "deck", "owner": "each", "maxSize": 40},
            {"id": "hand", "name": "Hand", "type": "hand", "owner": "each", "maxSize": 7},
            {"id": "field", "name": "Battlefield", "type": "playarea", "owner": "each"},
            {"id": "graveyard", "name": "Graveyard", "type": "discard", "owner": "each"},
            {"id": "the-stack", "name": "Stack", "type": "stack", "owner": "shared"},
        ],
        "gameConfig": {
            "playerCount": {"min": 2, "max": 2},
            "initialSetup": {
                "dealingRules": {"enabled": True, "handSize": 2, "shuffleDeck": False},
                "playerResources": {"life": 20, "mana": 0},
            },
        },
        "rules": [
            {
                "nodes": [
                    {
                        "id": "t1",
                        "type": "trigger",
                        "data": {"label": "On creature", "eventType": "CARD_PLAYED",
                                 "condition": "payload.card_type == 'Creature'"},
                    },
                    {
                        "id": "a1",
                        "type": "action",
                        "data": {"label": "Draw a card", "actionType": "drawCards",
                                 "parameters": {"playerId": "$event.payload.playerId", "count": 1}},
                    },
                ],
                "edges": [{"id": "e1", "source": "t1", "target": "a1"}],
            }
        ],
    }
