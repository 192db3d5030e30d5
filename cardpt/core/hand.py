"""
Hand Evaluation for Texas Hold'em.

This module evaluates 5-7 cards and returns the best 5-card hand as a
HandRank: a category plus a list of tiebreak ranks. HandRank values are
totally ordered (category first, then tiebreak ranks left to right), so
the best hand is simply ``max()`` over candidates.

Hand Categories (best to worst):
8. Straight Flush: 5 consecutive cards of same suit (A-high is a royal flush)
7. Four of a Kind: 4 cards of same rank
6. Full House: 3 of a kind + pair
5. Flush: 5 cards of same suit
4. Straight: 5 consecutive cards
3. Three of a Kind: 3 cards of same rank
2. Two Pair: 2 different pairs
1. One Pair: 2 cards of same rank
0. High Card: No made hand

Note: Ace can be low in A-2-3-4-5 straight (wheel), which ranks as 5-high.
"""

from __future__ import annotations
from typing import List, Tuple, Sequence
from itertools import combinations
from enum import IntEnum
from collections import Counter
from dataclasses import dataclass

from cardpt.core.card import Card, Rank


class HandCategory(IntEnum):
    """Hand categories from worst (0) to best (8)."""
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8


HAND_CATEGORY_NAMES = {
    HandCategory.STRAIGHT_FLUSH: "Straight Flush",
    HandCategory.FOUR_OF_A_KIND: "Four of a Kind",
    HandCategory.FULL_HOUSE: "Full House",
    HandCategory.FLUSH: "Flush",
    HandCategory.STRAIGHT: "Straight",
    HandCategory.THREE_OF_A_KIND: "Three of a Kind",
    HandCategory.TWO_PAIR: "Two Pair",
    HandCategory.ONE_PAIR: "One Pair",
    HandCategory.HIGH_CARD: "High Card",
}

WHEEL = (Rank.ACE, Rank.FIVE, Rank.FOUR, Rank.THREE, Rank.TWO)


@dataclass(frozen=True, order=True)
class HandRank:
    """
    Comparable strength of a 5-card hand.

    Attributes:
        category: Hand category
        ranks: Tiebreak ranks, most significant first
    """
    category: HandCategory
    ranks: Tuple[Rank, ...]

    @property
    def name(self) -> str:
        return HAND_CATEGORY_NAMES[self.category]

    def to_dict(self) -> dict:
        return {
            "category": int(self.category),
            "name": self.name,
            "ranks": [int(r) for r in self.ranks],
        }


def evaluate_hand(cards: Sequence[Card]) -> Tuple[HandRank, List[Card]]:
    """
    Evaluate a poker hand (5-7 cards).

    Args:
        cards: 5-7 distinct cards

    Returns:
        Tuple of the best HandRank and the 5 cards that make it

    Raises:
        ValueError: If not 5-7 cards provided, or a card is repeated
    """
    if len(cards) < 5 or len(cards) > 7:
        raise ValueError(f"Need 5-7 cards, got {len(cards)}")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards in hand")

    best_rank = None
    best_cards: List[Card] = []
    for combo in combinations(cards, 5):
        rank = _evaluate_5_cards(combo)
        if best_rank is None or rank > best_rank:
            best_rank = rank
            best_cards = list(combo)

    return best_rank, _order_best_cards(best_cards, best_rank)


def evaluate7(cards: Sequence[Card]) -> HandRank:
    """Best 5-card rank from exactly 7 cards (2 hole + 5 board)."""
    if len(cards) != 7:
        raise ValueError(f"Need exactly 7 cards, got {len(cards)}")
    return evaluate_hand(cards)[0]


def _evaluate_5_cards(cards: Sequence[Card]) -> HandRank:
    """Evaluate exactly 5 cards."""
    ranks = sorted((c.rank for c in cards), reverse=True)
    is_flush = len({c.suit for c in cards}) == 1
    straight_high = _straight_high(ranks)

    rank_counts = Counter(ranks)
    # Group ranks by (count, rank) so the most significant group comes first
    groups = sorted(rank_counts.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
    counts = [count for _, count in groups]
    grouped = tuple(rank for rank, _ in groups)

    if straight_high is not None and is_flush:
        return HandRank(HandCategory.STRAIGHT_FLUSH, (straight_high,))

    if counts == [4, 1]:
        return HandRank(HandCategory.FOUR_OF_A_KIND, grouped)

    if counts == [3, 2]:
        return HandRank(HandCategory.FULL_HOUSE, grouped)

    if is_flush:
        return HandRank(HandCategory.FLUSH, tuple(ranks))

    if straight_high is not None:
        return HandRank(HandCategory.STRAIGHT, (straight_high,))

    if counts == [3, 1, 1]:
        return HandRank(HandCategory.THREE_OF_A_KIND, grouped)

    if counts == [2, 2, 1]:
        return HandRank(HandCategory.TWO_PAIR, grouped)

    if counts == [2, 1, 1, 1]:
        return HandRank(HandCategory.ONE_PAIR, grouped)

    return HandRank(HandCategory.HIGH_CARD, tuple(ranks))


def _straight_high(ranks: List[Rank]):
    """High card of the straight formed by 5 ranks sorted descending, else None."""
    if len(set(ranks)) != 5:
        return None
    if ranks[0] - ranks[4] == 4:
        return ranks[0]
    if tuple(ranks) == WHEEL:
        return Rank.FIVE
    return None


def _order_best_cards(cards: List[Card], rank: HandRank) -> List[Card]:
    """Order the winning five for display: groups first, wheel ace last."""
    if rank.category in (HandCategory.STRAIGHT, HandCategory.STRAIGHT_FLUSH) \
            and rank.ranks[0] == Rank.FIVE:
        return sorted(cards, key=lambda c: 14 if c.rank == Rank.ACE else 15 - c.rank)
    counts = Counter(c.rank for c in cards)
    return sorted(cards, key=lambda c: (counts[c.rank], c.rank, c.suit), reverse=True)


def compare_ranks(a: HandRank, b: HandRank) -> int:
    """Return 1 if ``a`` is stronger, -1 if ``b`` is stronger, 0 on a tie."""
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def compare_hands(cards1: Sequence[Card], cards2: Sequence[Card]) -> int:
    """
    Compare two hands.

    Returns:
        1 if cards1 wins, -1 if cards2 wins, 0 if tie
    """
    return compare_ranks(evaluate_hand(cards1)[0], evaluate_hand(cards2)[0])


def describe_rank(rank: HandRank) -> str:
    """Human-readable description of an evaluated hand."""
    category = rank.category
    r = rank.ranks

    if category == HandCategory.STRAIGHT_FLUSH:
        if r[0] == Rank.ACE:
            return "Royal Flush"
        return f"Straight Flush, {_rank_name(r[0])} high"
    if category == HandCategory.FOUR_OF_A_KIND:
        return f"Four of a Kind, {_rank_plural(r[0])}"
    if category == HandCategory.FULL_HOUSE:
        return f"Full House, {_rank_plural(r[0])} full of {_rank_plural(r[1])}"
    if category == HandCategory.FLUSH:
        return f"Flush, {_rank_name(r[0])} high"
    if category == HandCategory.STRAIGHT:
        if r[0] == Rank.FIVE:
            return "Straight, Five high (Wheel)"
        return f"Straight, {_rank_name(r[0])} high"
    if category == HandCategory.THREE_OF_A_KIND:
        return f"Three of a Kind, {_rank_plural(r[0])}"
    if category == HandCategory.TWO_PAIR:
        return f"Two Pair, {_rank_plural(r[0])} and {_rank_plural(r[1])}"
    if category == HandCategory.ONE_PAIR:
        return f"Pair of {_rank_plural(r[0])}"
    return f"High Card, {_rank_name(r[0])}"


def get_hand_description(cards: Sequence[Card]) -> str:
    """Get a human-readable description of the best hand in ``cards``."""
    if len(cards) < 5:
        return "Incomplete hand"
    return describe_rank(evaluate_hand(cards)[0])


_RANK_NAMES = {
    Rank.TWO: "Two", Rank.THREE: "Three", Rank.FOUR: "Four",
    Rank.FIVE: "Five", Rank.SIX: "Six", Rank.SEVEN: "Seven",
    Rank.EIGHT: "Eight", Rank.NINE: "Nine", Rank.TEN: "Ten",
    Rank.JACK: "Jack", Rank.QUEEN: "Queen", Rank.KING: "King",
    Rank.ACE: "Ace",
}


def _rank_name(rank: Rank) -> str:
    return _RANK_NAMES[rank]


def _rank_plural(rank: Rank) -> str:
    return "Sixes" if rank == Rank.SIX else f"{_RANK_NAMES[rank]}s"
