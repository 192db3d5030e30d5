"""
Cards and the seeded deck.

Cards are immutable (rank, suit) values. The deck is built in suit-major
order (clubs, diamonds, hearts, spades; ranks 2..A within each suit) and
shuffled with a Fisher-Yates pass driven by the seeded xorshift32 stream,
so a seed string fully determines the card order.
"""

from __future__ import annotations
from typing import Iterable, List, Optional
from enum import IntEnum

from cardpt.core.errors import DeckExhaustedError
from cardpt.core.rng import XorShift32, create_rng


class Suit(IntEnum):
    """Card suits in deck-building order."""
    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3


class Rank(IntEnum):
    """Ranks, deuce low and ace high."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


SUIT_SYMBOLS = dict(zip(Suit, "♣♦♥♠"))
SUIT_CHARS = dict(zip(Suit, "cdhs"))
RANK_CHARS = dict(zip(Rank, "23456789TJQKA"))

# Text -> enum lookups used by the parsers.
_RANK_BY_CHAR = {char: rank for rank, char in RANK_CHARS.items()}
_SUIT_BY_TEXT = {char: suit for suit, char in SUIT_CHARS.items()}
_SUIT_BY_TEXT.update({symbol: suit for suit, symbol in SUIT_SYMBOLS.items()})


class Card:
    """
    One card of the 52-card deck.

    Build one directly, ``Card(Rank.ACE, Suit.SPADES)``, or from text with
    ``Card.from_string("As")`` / ``Card.from_string("A♠")``.

    Instances never change after construction and hash by value, which
    lets snapshots share them without copying.
    """

    __slots__ = ("rank", "suit")

    def __init__(self, rank: Rank, suit: Suit):
        object.__setattr__(self, "rank", Rank(rank))
        object.__setattr__(self, "suit", Suit(suit))

    def __setattr__(self, name, value):
        raise AttributeError("Card is immutable")

    def __delattr__(self, name):
        raise AttributeError("Card is immutable")

    @classmethod
    def from_string(cls, text: str) -> Card:
        """
        Parse a two-character card such as "Td" or "K♥".

        The suit may be a letter (cdhs, any case) or a suit symbol, and a
        leading "10" is read as a ten.
        """
        token = text.strip()
        if token[:2] == "10":
            token = "T" + token[2:]
        if len(token) != 2:
            raise ValueError(f"Card must be rank + suit, got {text!r}")

        rank = _RANK_BY_CHAR.get(token[0].upper())
        suit = _SUIT_BY_TEXT.get(token[1]) or _SUIT_BY_TEXT.get(token[1].lower())
        if rank is None:
            raise ValueError(f"Unknown rank in {text!r}")
        if suit is None:
            raise ValueError(f"Unknown suit in {text!r}")
        return cls(rank, suit)

    @classmethod
    def from_dict(cls, data: dict) -> Card:
        return cls.from_string(f"{data['rank']}{data['suit']}")

    def _key(self):
        return int(self.rank), int(self.suit)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __lt__(self, other: Card) -> bool:
        # Rank only; suits never break ties in Hold'em.
        return self.rank < other.rank

    def __copy__(self) -> Card:
        return self

    def __deepcopy__(self, memo) -> Card:
        return self

    def __reduce__(self):
        return (Card, self._key())

    @property
    def short_str(self) -> str:
        """ASCII form, e.g. 'As' or 'Td'."""
        return RANK_CHARS[self.rank] + SUIT_CHARS[self.suit]

    def __str__(self) -> str:
        return RANK_CHARS[self.rank] + SUIT_SYMBOLS[self.suit]

    def __repr__(self) -> str:
        return f"Card({self.short_str})"

    def to_dict(self) -> dict:
        return {"rank": RANK_CHARS[self.rank], "suit": SUIT_CHARS[self.suit]}


def ordered_cards() -> List[Card]:
    """All 52 cards in suit-major order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


def shuffle_cards(cards: List[Card], rng: XorShift32) -> List[Card]:
    """
    Fisher-Yates shuffle driven by ``rng``.

    Returns a new list; the input is left untouched.
    """
    result = list(cards)
    for i in range(len(result) - 1, 0, -1):
        j = rng.next_int(i + 1)
        result[i], result[j] = result[j], result[i]
    return result


class Deck:
    """
    A 52-card deck consumed front to back.

    Usage:
        deck = Deck(seed="table-1:1")
        hole = deck.deal(2)
        deck.burn()
        flop = deck.deal(3)
    """

    def __init__(self, seed: Optional[str] = None, cards: Optional[Iterable[Card]] = None):
        """
        Build a deck.

        Args:
            seed: If given, the deck is shuffled with the stream seeded by
                this string. Otherwise it stays in suit-major order.
            cards: Explicit card order (top first). Overrides ``seed``.
        """
        if cards is not None:
            order = list(cards)
        elif seed is not None:
            order = shuffle_cards(ordered_cards(), create_rng(seed))
        else:
            order = ordered_cards()
        self._order: List[Card] = order
        self._next = 0
        self._burned: List[Card] = []

    def deal(self, n: int = 1) -> List[Card]:
        """
        Take ``n`` cards off the top.

        Raises:
            DeckExhaustedError: If fewer than ``n`` cards are left. Nothing
                is dealt in that case.
        """
        left = self.remaining
        if n > left:
            raise DeckExhaustedError(f"Cannot deal {n} cards, only {left} remain")
        start, self._next = self._next, self._next + n
        return self._order[start:self._next]

    def deal_one(self) -> Card:
        return self.deal(1)[0]

    def burn(self) -> Card:
        """Move the top card to the burn pile."""
        card = self.deal_one()
        self._burned.append(card)
        return card

    @property
    def remaining(self) -> int:
        return len(self._order) - self._next

    @property
    def cards(self) -> List[Card]:
        """Undealt cards, top first."""
        return self._order[self._next:]

    @property
    def burned(self) -> List[Card]:
        return list(self._burned)

    def __len__(self) -> int:
        return self.remaining

    def __repr__(self) -> str:
        return f"Deck(remaining={self.remaining}, burned={len(self._burned)})"


def parse_cards(text: str) -> List[Card]:
    """
    Read a run of cards: "As Kh Td" or the packed form "AsKhTd".
    """
    if any(ch.isspace() for ch in text.strip()):
        return [Card.from_string(token) for token in text.split()]
    packed = text.strip()
    if len(packed) % 2:
        raise ValueError(f"Cannot split {text!r} into two-character cards")
    return [Card.from_string(packed[i:i + 2]) for i in range(0, len(packed), 2)]
