"""
Tests for the immutable game entities.

Tests:
- Typed identifiers
- Counter tallies
- Card, zone and player operations
- Game construction and referential integrity
"""

from dataclasses import FrozenInstanceError, replace

import pytest

from ..errors import EntityValidationError
from ..primitives.card import (
    add_card_counter,
    card_power,
    card_toughness,
    copy_card,
    create_card,
    get_card_counter_count,
    get_card_property,
    has_counter,
    is_card_type,
    remove_card_counter,
    remove_card_property,
    set_card_property,
    tap_card,
    untap_card,
    update_card,
    validate_card,
)
from ..primitives.counters import (
    Counter,
    add_counter,
    get_counter_count,
    remove_counter,
    total_counters,
    validate_counter,
)
from ..primitives.game import (
    GAME_PHASES,
    add_card_to_game,
    add_player_to_game,
    add_zone_to_game,
    advance_game_phase,
    create_game,
    find_player_zone,
    find_zones_containing,
    game_summary,
    get_current_player,
    get_game_card,
    get_game_zone,
    get_global_property,
    increment_turn_number,
    is_game_active,
    next_player,
    players_in_turn_order,
    remove_card_from_game,
    remove_global_property,
    remove_player_from_game,
    remove_zone_from_game,
    reset_game,
    set_current_player,
    set_game_phase,
    set_global_property,
    start_game,
    update_game,
    validate_references,
)
from ..primitives.ids import (
    CardId,
    GameId,
    PlayerId,
    ZoneId,
    create_card_id,
    create_zone_id,
    is_valid_id,
)
from ..primitives.player import (
    add_player_counter,
    add_player_zone,
    create_player,
    damage_player,
    get_player_counter_count,
    get_player_resource,
    has_player_resource,
    has_player_zone,
    heal_player,
    is_player_alive,
    modify_player_resource,
    player_summary,
    remove_player_counter,
    remove_player_zone,
    spend_player_mana,
    validate_player,
)
from ..primitives.zone import (
    CardOrder,
    Visibility,
    ZoneType,
    add_card_to_zone,
    bottom_card,
    create_deck,
    create_discard_pile,
    create_hand,
    create_play_area,
    create_stack,
    create_zone,
    draw_cards_from_zone,
    find_card_in_zone,
    has_card,
    insert_card_at_bottom,
    insert_card_at_top,
    is_deck,
    is_discard_pile,
    is_hand,
    is_play_area,
    is_stack,
    is_zone_full,
    move_card_in_zone,
    peek_at_cards,
    remaining_capacity,
    remove_card_from_zone,
    shuffle_zone,
    top_card,
    validate_zone,
)


class TestIdentifiers:
    """Tests for typed identifiers."""

    def test_same_value_different_kind_not_equal(self):
        """A CardId never equals a ZoneId with the same value."""
        assert CardId("x") != ZoneId("x")
        assert CardId("x") == CardId("x")

    def test_str_is_value(self):
        """Identifiers print as their raw value."""
        assert str(PlayerId("p1")) == "p1"

    def test_generated_ids_are_unique(self):
        """Factories produce distinct values."""
        assert create_card_id() != create_card_id()

    def test_is_valid_id(self):
        """Validity checks kind and non-empty value."""
        assert is_valid_id(CardId("a"))
        assert is_valid_id(CardId("a"), CardId)
        assert not is_valid_id(CardId("a"), ZoneId)
        assert not is_valid_id(CardId(""))
        assert not is_valid_id("a")


class TestCounters:
    """Tests for counter tallies."""

    def test_add_merges_same_type(self):
        """Adding an existing type sums the counts."""
        counters = add_counter((), Counter("poison", 2))
        counters = add_counter(counters, Counter("poison", 3))
        assert counters == (Counter("poison", 5),)

    def test_remove_to_zero_deletes_entry(self):
        """Removing every counter of a type drops the entry."""
        counters = (Counter("+1/+1", 2), Counter("poison", 1))
        assert remove_counter(counters, Counter("+1/+1", 2)) == (Counter("poison", 1),)

    def test_remove_more_than_held(self):
        """Cannot remove more counters than exist."""
        with pytest.raises(EntityValidationError, match="more counters than exist"):
            remove_counter((Counter("poison", 1),), Counter("poison", 2))

    def test_remove_missing_type(self):
        """Cannot remove counters of an absent type."""
        with pytest.raises(EntityValidationError, match="do not exist"):
            remove_counter((), Counter("poison", 1))

    def test_negative_count_rejected(self):
        """Counts must be non-negative."""
        with pytest.raises(EntityValidationError):
            add_counter((), Counter("poison", -1))

    def test_counts(self):
        """Lookup returns 0 for missing types."""
        counters = (Counter("a", 2), Counter("b", 3))
        assert get_counter_count(counters, "a") == 2
        assert get_counter_count(counters, "z") == 0
        assert total_counters(counters) == 5

    def test_validate_counter(self):
        """Counters need a type and a non-negative int count."""
        validate_counter(Counter("charge", 0))
        with pytest.raises(EntityValidationError):
            validate_counter(Counter(" ", 1))
        with pytest.raises(EntityValidationError):
            validate_counter(Counter("charge", True))
        with pytest.raises(EntityValidationError):
            validate_counter(("charge", 1))


class TestCard:
    """Tests for card operations."""

    @pytest.fixture
    def card(self):
        """A plain creature card."""
        return create_card(
            CardId("drake"), "Fire Drake", "Flying", "Legendary Creature - Dragon",
            PlayerId("p1"), ZoneId("hand"), properties={"power": 2, "toughness": 3},
        )

    def test_empty_name_rejected(self):
        """Cards need a name."""
        with pytest.raises(EntityValidationError, match="name"):
            create_card(CardId("x"), " ", "", "Creature", PlayerId("p1"), ZoneId("z"))

    def test_wrong_id_kind_rejected(self):
        """The card id must be a CardId."""
        with pytest.raises(EntityValidationError, match="Invalid card ID"):
            create_card(ZoneId("x"), "X", "", "Creature", PlayerId("p1"), ZoneId("z"))

    def test_frozen(self, card):
        """Cards cannot be mutated in place."""
        with pytest.raises(FrozenInstanceError):
            card.name = "Other"

    def test_tap_untap(self, card):
        """Tapping returns a new card and leaves the original alone."""
        tapped = tap_card(card)
        assert tapped.is_tapped
        assert not card.is_tapped
        assert not untap_card(tapped).is_tapped

    def test_properties(self, card):
        """Property updates copy the dict."""
        updated = set_card_property(card, "manaCost", 4)
        assert get_card_property(updated, "manaCost") == 4
        assert "manaCost" not in card.properties
        assert "power" not in remove_card_property(updated, "power").properties

    def test_counters_boost_power(self, card):
        """+1/+1 counters add to power and toughness."""
        boosted = add_card_counter(card, Counter("+1/+1", 2))
        assert card_power(boosted) == 4
        assert card_toughness(boosted) == 5
        assert get_card_counter_count(remove_card_counter(boosted, Counter("+1/+1", 2)), "+1/+1") == 0
        assert has_counter(boosted, "+1/+1")
        assert not has_counter(card, "+1/+1")

    def test_update_keeps_id(self, card):
        """update_card replaces fields but never the id."""
        assert update_card(card, text="Haste").text == "Haste"
        with pytest.raises(EntityValidationError, match="cannot be changed"):
            update_card(card, id=CardId("other"))

    def test_validate_card(self, card):
        """Untrusted objects are checked field by field."""
        validate_card(card)
        with pytest.raises(EntityValidationError, match="name"):
            validate_card(replace(card, name=""))
        with pytest.raises(EntityValidationError):
            validate_card({"id": "drake"})

    def test_type_line_match(self, card):
        """Type matching is a case-insensitive substring test."""
        assert is_card_type(card, "dragon")
        assert not is_card_type(card, "Instant")

    def test_copy_card(self, card):
        """Copies get a new id and their own properties dict."""
        copy = copy_card(card, CardId("drake-2"))
        assert copy.id == CardId("drake-2")
        assert copy.properties == card.properties
        assert copy.properties is not card.properties


class TestZone:
    """Tests for zone operations."""

    @pytest.fixture
    def deck(self):
        return create_deck(ZoneId("deck"), PlayerId("p1"), cards=[CardId("a"), CardId("b"), CardId("c")])

    def test_specialised_defaults(self):
        """Each zone kind has its own visibility and order."""
        hand = create_hand(ZoneId("h"), PlayerId("p1"))
        discard = create_discard_pile(ZoneId("d"), PlayerId("p1"))
        stack = create_stack(ZoneId("s"))
        assert hand.visibility is Visibility.PRIVATE and hand.order is CardOrder.UNORDERED
        assert discard.visibility is Visibility.PUBLIC and discard.order is CardOrder.ORDERED
        assert stack.owner is None and stack.zone_type is ZoneType.STACK

    def test_string_enum_values_accepted(self):
        """create_zone accepts enum values as strings."""
        zone = create_zone(ZoneId("z"), "Zone", None, "public", "ordered")
        assert zone.visibility is Visibility.PUBLIC
        with pytest.raises(EntityValidationError, match="visibility"):
            create_zone(ZoneId("z"), "Zone", None, "hidden", "ordered")

    def test_duplicate_card_rejected(self):
        """A zone lists each card once."""
        with pytest.raises(EntityValidationError, match="Duplicate"):
            create_deck(ZoneId("d"), PlayerId("p1"), cards=[CardId("a"), CardId("a")])

    def test_capacity(self):
        """Adding to a full zone fails."""
        hand = create_hand(ZoneId("h"), PlayerId("p1"), cards=[CardId("a")], max_size=1)
        assert remaining_capacity(hand) == 0
        assert is_zone_full(hand)
        assert not is_zone_full(create_hand(ZoneId("h2"), PlayerId("p1")))
        with pytest.raises(EntityValidationError, match="maximum capacity"):
            add_card_to_zone(hand, CardId("b"))

    def test_top_is_end(self, deck):
        """The top of a zone is the end of its list."""
        assert top_card(deck) == CardId("c")
        assert bottom_card(deck) == CardId("a")
        assert insert_card_at_bottom(deck, CardId("z")).cards[0] == CardId("z")
        assert top_card(insert_card_at_top(deck, CardId("z"))) == CardId("z")

    def test_lookup(self, deck):
        """Cards are found by position; absent cards give -1."""
        assert has_card(deck, CardId("b"))
        assert find_card_in_zone(deck, CardId("b")) == 1
        assert find_card_in_zone(deck, CardId("zz")) == -1
        assert not has_card(deck, CardId("zz"))

    def test_kind_predicates(self, deck):
        """Each specialised factory answers its own predicate."""
        hand = create_hand(ZoneId("h"), PlayerId("p1"))
        play = create_play_area(ZoneId("p"), PlayerId("p1"))
        assert is_deck(deck) and not is_hand(deck)
        assert is_hand(hand)
        assert is_play_area(play)
        assert is_discard_pile(create_discard_pile(ZoneId("d"), PlayerId("p1")))
        assert is_stack(create_stack(ZoneId("s")))
        assert not is_stack(play)

    def test_validate_zone(self, deck):
        validate_zone(deck)
        with pytest.raises(EntityValidationError, match="Invalid owner ID"):
            validate_zone(replace(deck, owner=CardId("p1")))

    def test_draw_from_top(self, deck):
        """Drawing takes from the end and keeps relative order."""
        drawn, rest = draw_cards_from_zone(deck, 2)
        assert drawn == (CardId("b"), CardId("c"))
        assert rest.cards == (CardId("a"),)
        assert deck.count == 3

    def test_draw_from_bottom(self, deck):
        """Drawing from the bottom takes from the start."""
        drawn, rest = draw_cards_from_zone(deck, 1, from_top=False)
        assert drawn == (CardId("a"),)
        assert rest.cards == (CardId("b"), CardId("c"))

    def test_draw_too_many(self, deck):
        """Cannot draw more cards than the zone holds."""
        with pytest.raises(EntityValidationError):
            draw_cards_from_zone(deck, 4)

    def test_peek(self, deck):
        """Peeking never removes cards."""
        assert peek_at_cards(deck, 1) == (CardId("c"),)
        assert peek_at_cards(deck, 1, from_top=False) == (CardId("a"),)
        assert peek_at_cards(deck, 10) == deck.cards
        assert peek_at_cards(deck, 0) == ()

    def test_remove_and_move(self, deck):
        """Cards can be removed or repositioned."""
        assert remove_card_from_zone(deck, CardId("b")).cards == (CardId("a"), CardId("c"))
        assert move_card_in_zone(deck, CardId("a"), 2).cards == (CardId("b"), CardId("c"), CardId("a"))
        with pytest.raises(EntityValidationError):
            remove_card_from_zone(deck, CardId("zz"))

    def test_shuffle_is_permutation(self, deck, rng):
        """Shuffling keeps the same cards."""
        shuffled = shuffle_zone(deck, rng)
        assert sorted(c.value for c in shuffled.cards) == ["a", "b", "c"]

    def test_shuffle_unordered_rejected(self):
        """Unordered zones cannot be shuffled."""
        hand = create_hand(ZoneId("h"), PlayerId("p1"), cards=[CardId("a")])
        with pytest.raises(EntityValidationError, match="unordered"):
            shuffle_zone(hand)


class TestPlayer:
    """Tests for player operations."""

    @pytest.fixture
    def player(self):
        return create_player(PlayerId("p1"), "Player One", {"life": 20, "mana": 3})

    def test_resources(self, player):
        """Resources change by signed deltas; missing ones start at 0."""
        assert get_player_resource(modify_player_resource(player, "life", -5), "life") == 15
        assert get_player_resource(modify_player_resource(player, "gold", 2), "gold") == 2
        assert get_player_resource(player, "gold") is None
        assert has_player_resource(player, "life")
        assert not has_player_resource(player, "gold")

    def test_counters(self, player):
        """Player counters merge by type like card counters."""
        poisoned = add_player_counter(add_player_counter(player, Counter("poison", 2)), Counter("poison", 1))
        assert get_player_counter_count(poisoned, "poison") == 3
        assert get_player_counter_count(remove_player_counter(poisoned, Counter("poison", 3)), "poison") == 0
        with pytest.raises(EntityValidationError):
            remove_player_counter(player, Counter("poison", 1))

    def test_spend_mana(self, player):
        """Spending more mana than available fails."""
        assert get_player_resource(spend_player_mana(player, 2), "mana") == 1
        with pytest.raises(EntityValidationError, match="Insufficient mana"):
            spend_player_mana(player, 4)

    def test_damage_and_heal(self, player):
        """Damage and healing move life in the right direction."""
        hurt = damage_player(player, 20)
        assert not is_player_alive(hurt)
        assert get_player_resource(heal_player(hurt, 3), "life") == 3
        assert is_player_alive(create_player(PlayerId("p2"), "No Life"))

    def test_zones(self, player):
        """A player's zone list cannot hold duplicates."""
        owned = add_player_zone(player, ZoneId("deck"))
        assert has_player_zone(owned, ZoneId("deck"))
        assert not has_player_zone(player, ZoneId("deck"))
        with pytest.raises(EntityValidationError):
            add_player_zone(owned, ZoneId("deck"))
        assert remove_player_zone(owned, ZoneId("deck")).zones == ()

    def test_non_int_resource_rejected(self):
        """Resource values must be integers."""
        with pytest.raises(EntityValidationError):
            create_player(PlayerId("p1"), "P", {"life": "20"})

    def test_validate_player(self, player):
        validate_player(player)
        with pytest.raises(EntityValidationError, match="Invalid player ID"):
            validate_player(replace(player, id="p1"))

    def test_summary(self, player):
        """Summary reports life, mana and counts."""
        summary = player_summary(player)
        assert summary["life"] == 20
        assert summary["mana"] == 3
        assert summary["zone_count"] == 0


class TestGame:
    """Tests for the game aggregate."""

    def test_dangling_zone_reference_rejected(self):
        """A player referencing an unknown zone is invalid."""
        player = create_player(PlayerId("p1"), "P", zones=[ZoneId("nowhere")])
        with pytest.raises(EntityValidationError, match="not found"):
            create_game(GameId("g"), players=[player])

    def test_card_must_be_listed_by_its_zone(self):
        """A card's current zone must list it."""
        p1 = PlayerId("p1")
        deck = create_deck(ZoneId("deck"), p1)
        card = create_card(CardId("a"), "A", "", "Land", p1, deck.id)
        player = create_player(p1, "P", zones=[deck.id])
        with pytest.raises(EntityValidationError, match="not listed"):
            create_game(GameId("g"), players=[player], zones=[deck], cards=[card])

    def test_duplicate_ids_rejected(self):
        """Player ids are unique."""
        player = create_player(PlayerId("p1"), "P")
        with pytest.raises(EntityValidationError, match="Duplicate player ID"):
            create_game(GameId("g"), players=[player, player])

    def test_fresh_stack_created(self):
        """A game always has a stack."""
        game = create_game(GameId("g"))
        assert game.stack.zone_type is ZoneType.STACK
        assert get_game_zone(game, game.stack.id) == game.stack

    def test_fixture_is_consistent(self, game):
        """The shared fixture has no dangling references."""
        assert validate_references(game) == []

    def test_lookups(self, game):
        """Zones are found by owner and kind."""
        hand = find_player_zone(game, PlayerId("p1"), ZoneType.HAND)
        assert hand.id == ZoneId("hand-p1")
        assert find_player_zone(game, PlayerId("p2"), ZoneType.DISCARD) is None
        assert [z.id for z in find_zones_containing(game, CardId("h1"))] == [ZoneId("hand-p1")]

    def test_turn_order(self, game):
        """next_player wraps around in seating order."""
        game = next_player(game)
        assert game.current_player == PlayerId("p2")
        assert [p.id for p in players_in_turn_order(game)] == [PlayerId("p2"), PlayerId("p1")]
        assert next_player(game).current_player == PlayerId("p1")
        assert get_current_player(game).name == "Player Two"

    def test_phases(self, game):
        """Phases cycle through the standard sequence."""
        assert advance_game_phase(game).phase == "combat"
        assert advance_game_phase(set_game_phase(game, "end")).phase == GAME_PHASES[0]
        assert advance_game_phase(set_game_phase(game, "mulligan")).phase == GAME_PHASES[0]
        with pytest.raises(EntityValidationError):
            set_game_phase(game, "")

    def test_start_game(self):
        """Starting moves to main phase, turn 1, first player."""
        players = [create_player(PlayerId("a"), "A"), create_player(PlayerId("b"), "B")]
        game = create_game(GameId("g"), players=players)
        assert not is_game_active(game)
        started = start_game(game)
        assert (started.phase, started.turn_number, started.current_player) == ("main", 1, PlayerId("a"))
        assert is_game_active(started)
        assert increment_turn_number(started).turn_number == 2
        with pytest.raises(EntityValidationError):
            start_game(create_game(GameId("empty")))

    def test_current_player_must_exist(self, game):
        """The current player must be seated."""
        with pytest.raises(EntityValidationError):
            set_current_player(game, PlayerId("ghost"))
        with pytest.raises(EntityValidationError):
            update_game(game, current_player=PlayerId("ghost"))
        with pytest.raises(EntityValidationError):
            update_game(game, id=GameId("other"))

    def test_collections(self, game):
        """Entities can be added and removed."""
        zone = create_discard_pile(create_zone_id(), PlayerId("p2"))
        game2 = add_zone_to_game(game, zone)
        assert len(game2.zones) == len(game.zones) + 1
        with pytest.raises(EntityValidationError):
            add_zone_to_game(game2, zone)
        assert len(remove_zone_from_game(game2, zone.id).zones) == len(game.zones)
        with pytest.raises(EntityValidationError, match="stack"):
            remove_zone_from_game(game, game.stack.id)

        extra = create_card(CardId("x"), "X", "", "Token", PlayerId("p1"), ZoneId("play-p1"))
        assert get_game_card(add_card_to_game(game, extra), CardId("x")) == extra
        assert get_game_card(remove_card_from_game(game, CardId("h1")), CardId("h1")) is None

        newcomer = create_player(PlayerId("p3"), "Player Three")
        assert len(add_player_to_game(game, newcomer).players) == 3
        assert remove_player_from_game(game, PlayerId("p1")).current_player is None

    def test_removal_leaves_references(self, game):
        """Removing an entity does not touch what points at it."""
        without_p2 = remove_player_from_game(game, PlayerId("p2"))
        assert validate_references(without_p2) == [
            "Zone deck-p2 owner not found in game",
            "Zone hand-p2 owner not found in game",
            "Card d1 owner not found in game",
        ]
        assert validate_references(remove_card_from_game(game, CardId("h1"))) == [
            "Zone hand-p1 lists unknown card h1",
        ]
        assert validate_references(remove_zone_from_game(game, ZoneId("deck-p1"))) == [
            "Card c1 zone not found in game",
            "Card c2 zone not found in game",
            "Card c3 zone not found in game",
            "Player p1 zone deck-p1 not found in game",
        ]

    def test_global_properties(self, game):
        """Global properties are a copied dict."""
        game2 = set_global_property(game, "weather", "storm")
        assert get_global_property(game2, "weather") == "storm"
        assert get_global_property(game, "weather") is None
        assert get_global_property(remove_global_property(game2, "weather"), "weather", "clear") == "clear"

    def test_reset_keeps_id(self, game):
        """Reset empties the table but keeps the id."""
        reset = reset_game(game)
        assert reset.id == game.id
        assert reset.players == () and reset.phase == "setup"

    def test_summary(self, game):
        """Summary reports the table's size and status."""
        summary = game_summary(game)
        assert summary == {
            "player_count": 2,
            "card_count": 6,
            "zone_count": 5,
            "current_phase": "main",
            "turn_number": 1,
            "is_active": True,
        }

    def test_frozen_game(self, game):
        """Games are immutable."""
        with pytest.raises(FrozenInstanceError):
            game.phase = "end"
        assert replace(game, phase="end").phase == "end"
        assert game.phase == "main"
