"""
Tests for hand evaluation.
"""

import pytest
from cardpt.core.card import Card, Rank, Suit, parse_cards
from cardpt.core.hand import (
    evaluate_hand, evaluate7, compare_hands, compare_ranks, HandCategory, HandRank,
    get_hand_description,
)


class TestHandRanking:
    """Tests for hand ranking."""

    def test_royal_flush(self, royal_flush):
        """Test royal flush recognition."""
        rank, best = evaluate_hand(royal_flush)
        assert rank.category == HandCategory.STRAIGHT_FLUSH
        assert rank.ranks == (Rank.ACE,)
        assert set(best) == set(royal_flush)

    def test_straight_flush(self, straight_flush):
        """Test straight flush recognition."""
        rank, _ = evaluate_hand(straight_flush)
        assert rank == HandRank(HandCategory.STRAIGHT_FLUSH, (Rank.NINE,))

    def test_four_of_a_kind(self):
        """Test four of a kind recognition."""
        rank, _ = evaluate_hand(parse_cards("As Ah Ad Ac Ks"))
        assert rank == HandRank(HandCategory.FOUR_OF_A_KIND, (Rank.ACE, Rank.KING))

    def test_full_house(self):
        """Test full house recognition."""
        rank, _ = evaluate_hand(parse_cards("As Ah Ad Kc Ks"))
        assert rank == HandRank(HandCategory.FULL_HOUSE, (Rank.ACE, Rank.KING))

    def test_flush(self):
        """Test flush recognition."""
        rank, _ = evaluate_hand(parse_cards("As Js 9s 6s 2s"))
        assert rank.category == HandCategory.FLUSH
        assert rank.ranks == (Rank.ACE, Rank.JACK, Rank.NINE, Rank.SIX, Rank.TWO)

    def test_straight(self):
        """Test straight recognition."""
        rank, _ = evaluate_hand(parse_cards("9s 8h 7d 6c 5s"))
        assert rank == HandRank(HandCategory.STRAIGHT, (Rank.NINE,))

    def test_wheel_straight(self, wheel_straight):
        """A-2-3-4-5 is a five-high straight with the ace played low."""
        rank, best = evaluate_hand(wheel_straight)
        assert rank == HandRank(HandCategory.STRAIGHT, (Rank.FIVE,))
        assert best[0].rank == Rank.FIVE
        assert best[-1].rank == Rank.ACE

    def test_wheel_is_lowest_straight(self, wheel_straight):
        six_high = parse_cards("6s 5h 4d 3c 2s")
        assert compare_hands(six_high, wheel_straight) == 1

    def test_no_wraparound_straight(self):
        rank, _ = evaluate_hand(parse_cards("Qs Kh Ad 2c 3s"))
        assert rank.category == HandCategory.HIGH_CARD

    def test_three_of_a_kind(self):
        """Test three of a kind recognition."""
        rank, _ = evaluate_hand(parse_cards("7s 7h 7d Kc 2s"))
        assert rank == HandRank(HandCategory.THREE_OF_A_KIND, (Rank.SEVEN, Rank.KING, Rank.TWO))

    def test_two_pair(self):
        """Test two pair recognition."""
        rank, _ = evaluate_hand(parse_cards("Ks Kh 4d 4c As"))
        assert rank == HandRank(HandCategory.TWO_PAIR, (Rank.KING, Rank.FOUR, Rank.ACE))

    def test_one_pair(self, sample_hand):
        """Test one pair recognition."""
        rank, _ = evaluate_hand(sample_hand)
        assert rank.category == HandCategory.ONE_PAIR
        assert rank.ranks[0] == Rank.ACE

    def test_high_card(self):
        """Test high card recognition."""
        rank, _ = evaluate_hand(parse_cards("As Jh 9d 6c 2s"))
        assert rank.category == HandCategory.HIGH_CARD


class TestSevenCards:
    """Best five of seven."""

    def test_evaluate7_picks_best_five(self):
        cards = parse_cards("Ah Kh 2c 7d Qh Jh Th")
        assert evaluate7(cards) == HandRank(HandCategory.STRAIGHT_FLUSH, (Rank.ACE,))

    def test_evaluate7_needs_seven(self):
        with pytest.raises(ValueError):
            evaluate7(parse_cards("Ah Kh Qh Jh Th"))

    def test_duplicate_cards_rejected(self):
        with pytest.raises(ValueError):
            evaluate_hand(parse_cards("Ah Ah Qh Jh Th"))

    def test_board_plays(self):
        """Both players play the board: a tie."""
        board = parse_cards("Ah Kh Qh Jh Th")
        a = evaluate7(parse_cards("2c 3d") + board)
        b = evaluate7(parse_cards("4s 5s") + board)
        assert compare_ranks(a, b) == 0

    def test_kicker_decides(self):
        board = parse_cards("Ah Ad 9c 5s 2h")
        strong = parse_cards("Kc 3d") + board
        weak = parse_cards("Qc 3h") + board
        assert compare_hands(strong, weak) == 1
        assert compare_hands(weak, strong) == -1


class TestHandComparison:
    """Tests for comparing hands."""

    def test_category_order(self, royal_flush, straight_flush, sample_hand):
        assert compare_hands(royal_flush, straight_flush) == 1
        assert compare_hands(straight_flush, sample_hand) == 1

    def test_flush_beats_straight(self):
        flush = parse_cards("2s 5s 8s Js Ks")
        straight = parse_cards("Ts Jh Qd Kc Ah")
        assert compare_hands(flush, straight) == 1

    def test_higher_pair_wins(self):
        assert compare_hands(parse_cards("Ks Kh 7d 5c 2s"), parse_cards("Qs Qh Ad 5c 2d")) == 1


class TestHandDescription:
    """Tests for hand descriptions."""

    @pytest.mark.parametrize("cards,expected", [
        ("As Ks Qs Js Ts", "Royal Flush"),
        ("9h 8h 7h 6h 5h", "Straight Flush, Nine high"),
        ("As Ah Ad Ac Ks", "Four of a Kind, Aces"),
        ("6s 6h 6d Kc Ks", "Full House, Sixes full of Kings"),
        ("As 2h 3d 4c 5s", "Straight, Five high (Wheel)"),
        ("Ks Kh 4d 4c As", "Two Pair, Kings and Fours"),
        ("As Ah Kd Qc Js", "Pair of Aces"),
        ("As Jh 9d 6c 2s", "High Card, Ace"),
    ])
    def test_descriptions(self, cards, expected):
        assert get_hand_description(parse_cards(cards)) == expected

    def test_incomplete_hand(self):
        assert get_hand_description(parse_cards("As Kd")) == "Incomplete hand"
