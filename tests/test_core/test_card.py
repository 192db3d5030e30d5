"""
Tests for Card, Deck and the seeded shuffle.
"""

import copy

import pytest
from cardpt.core.card import Card, Deck, Rank, Suit, ordered_cards, parse_cards, shuffle_cards
from cardpt.core.errors import DeckExhaustedError
from cardpt.core.rng import XorShift32, create_rng, fnv1a32, hand_seed, ZERO_STATE_REPLACEMENT


class TestCard:
    """Tests for Card."""

    def test_enum_values_are_normalized(self):
        card = Card(14, 3)
        assert card.rank is Rank.ACE
        assert card.suit is Suit.SPADES

    @pytest.mark.parametrize("text, rank, suit", [
        ("As", Rank.ACE, Suit.SPADES),
        ("kH", Rank.KING, Suit.HEARTS),
        ("K♥", Rank.KING, Suit.HEARTS),
        ("10d", Rank.TEN, Suit.DIAMONDS),
        (" 2c ", Rank.TWO, Suit.CLUBS),
    ])
    def test_from_string(self, text, rank, suit):
        assert Card.from_string(text) == Card(rank, suit)

    @pytest.mark.parametrize("text", ["Zz", "Ax", "Ahh", "", "1s"])
    def test_from_string_rejects(self, text):
        with pytest.raises(ValueError):
            Card.from_string(text)

    def test_value_semantics(self):
        """Equal cards hash alike; order looks at rank only."""
        spade_ace = Card.from_string("As")
        assert spade_ace == Card(Rank.ACE, Suit.SPADES)
        assert spade_ace != Card.from_string("Ks")
        assert len({spade_ace, Card.from_string("As"), Card.from_string("Ah")}) == 2
        assert Card.from_string("2c") < Card.from_string("Kh") < spade_ace

    def test_text_forms(self):
        nine = Card.from_string("9d")
        assert str(nine) == "9♦"
        assert nine.short_str == "9d"
        assert repr(nine) == "Card(9d)"

    def test_card_is_immutable(self):
        card = Card.from_string("Qs")
        with pytest.raises(AttributeError):
            card.rank = Rank.KING
        assert copy.deepcopy(card) is card

    def test_card_dict_round_trip(self):
        card = Card(Rank.TEN, Suit.CLUBS)
        assert card.to_dict() == {"rank": "T", "suit": "c"}
        assert Card.from_dict(card.to_dict()) == card

    def test_parse_cards(self):
        """Spaced and packed forms read the same cards."""
        assert parse_cards("As Kh") == parse_cards("AsKh")
        assert parse_cards("As Kh") == [Card(Rank.ACE, Suit.SPADES), Card(Rank.KING, Suit.HEARTS)]
        assert parse_cards("") == []
        with pytest.raises(ValueError):
            parse_cards("AsK")


class TestRng:
    """Tests for the FNV-1a / xorshift32 stream."""

    def test_fnv1a32_known_values(self):
        assert fnv1a32("") == 0x811C9DC5
        assert fnv1a32("a") == 0xE40C292C

    def test_xorshift32_first_output(self):
        """xorshift32 seeded with 1 yields 270369 first."""
        assert XorShift32(1).next_uint32() == 270369

    def test_zero_seed_is_replaced(self):
        assert XorShift32(0).state == ZERO_STATE_REPLACEMENT

    def test_next_int_bounds(self):
        rng = create_rng("bounds")
        values = [rng.next_int(7) for _ in range(500)]
        assert all(0 <= v < 7 for v in values)
        with pytest.raises(ValueError):
            rng.next_int(0)

    def test_same_seed_same_stream(self):
        a = create_rng("table-1:1")
        b = create_rng("table-1:1")
        assert [a.next_uint32() for _ in range(20)] == [b.next_uint32() for _ in range(20)]

    def test_hand_seed(self):
        assert hand_seed("table-1", 3) == "table-1:3"


class TestDeck:
    """Tests for Deck."""

    def test_deck_has_52_cards(self, unshuffled_deck):
        """52 distinct cards."""
        assert len(unshuffled_deck) == 52
        assert len(set(unshuffled_deck.cards)) == 52

    def test_unshuffled_order_is_suit_major(self, unshuffled_deck):
        cards = unshuffled_deck.cards
        assert cards[0] == Card(Rank.TWO, Suit.CLUBS)
        assert cards[12] == Card(Rank.ACE, Suit.CLUBS)
        assert cards[13] == Card(Rank.TWO, Suit.DIAMONDS)
        assert cards[51] == Card(Rank.ACE, Suit.SPADES)

    def test_seeded_deck_is_deterministic(self):
        """The same seed always yields the same order."""
        assert Deck(seed="table-1:1").cards == Deck(seed="table-1:1").cards

    def test_seeded_deck_is_a_permutation(self, deck):
        assert sorted(deck.cards, key=lambda c: (c.suit, c.rank)) == ordered_cards()

    def test_different_seeds_differ(self):
        assert Deck(seed="table-1:1").cards != Deck(seed="table-1:2").cards

    def test_shuffle_does_not_touch_input(self):
        cards = ordered_cards()
        shuffled = shuffle_cards(cards, create_rng("x"))
        assert cards == ordered_cards()
        assert set(shuffled) == set(cards)

    def test_deal_cards(self, deck):
        """Cards come off the top."""
        top = deck.cards[:2]
        cards = deck.deal(2)
        assert cards == top
        assert deck.remaining == 50

    def test_burn(self, deck):
        top = deck.cards[0]
        assert deck.burn() == top
        assert deck.burned == [top]
        assert deck.remaining == 51

    def test_explicit_order(self):
        order = parse_cards("As Kd 2c")
        deck = Deck(cards=order)
        assert deck.deal(3) == order

    def test_deal_too_many(self, deck):
        """Test dealing more cards than available."""
        deck.deal(50)
        with pytest.raises(DeckExhaustedError):
            deck.deal(3)
        assert deck.remaining == 2
