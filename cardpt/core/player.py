"""
Player record for a six-seat Texas Hold'em table.

A seat's identity is permanent. Everything except ``seat`` and ``stack`` is
reset at the start of every hand:
- Stack (chip count, carries over between hands)
- Hole cards
- Chips committed this hand / this street
- Status (active, folded, all_in, out)
"""

from __future__ import annotations
from typing import List, Dict, Any
from dataclasses import dataclass, field
from enum import Enum

from cardpt.core.card import Card


class PlayerStatus(str, Enum):
    """Player statuses during a hand."""
    ACTIVE = "active"    # In the hand, can act
    FOLDED = "folded"    # Has folded
    ALL_IN = "all_in"    # Whole stack committed, no more actions
    OUT = "out"          # No chips at hand start, sits the hand out


@dataclass
class Player:
    """
    A seat at the table.

    Attributes:
        seat: Seat index (0-5), fixed for the life of the engine
        stack: Chips not yet committed
        total_committed: Chips committed this hand
        street_committed: Chips committed on the current street
        status: Current player status
        hole_cards: The player's private cards (0 or 2)
    """
    seat: int
    stack: int
    total_committed: int = 0
    street_committed: int = 0
    status: PlayerStatus = PlayerStatus.ACTIVE
    hole_cards: List[Card] = field(default_factory=list)

    def reset_for_new_hand(self) -> None:
        """Reset per-hand fields. Seats without chips sit the hand out."""
        self.hole_cards = []
        self.total_committed = 0
        self.street_committed = 0
        self.status = PlayerStatus.ACTIVE if self.stack > 0 else PlayerStatus.OUT

    def reset_for_new_street(self) -> None:
        self.street_committed = 0

    def commit(self, amount: int) -> int:
        """
        Move chips from the stack into the pot.

        Args:
            amount: Chips requested

        Returns:
            Chips actually committed (capped at the stack). Committing the
            last chip puts the player all-in.
        """
        actual = max(0, min(amount, self.stack))
        self.stack -= actual
        self.total_committed += actual
        self.street_committed += actual
        if self.stack == 0 and self.status == PlayerStatus.ACTIVE:
            self.status = PlayerStatus.ALL_IN
        return actual

    def fold(self) -> None:
        self.status = PlayerStatus.FOLDED

    @property
    def is_active(self) -> bool:
        return self.status == PlayerStatus.ACTIVE

    @property
    def is_in_hand(self) -> bool:
        """Still contesting the pot (not folded, not out)."""
        return self.status in (PlayerStatus.ACTIVE, PlayerStatus.ALL_IN)

    @property
    def can_act(self) -> bool:
        return self.status == PlayerStatus.ACTIVE and self.stack > 0

    def to_dict(self, hide_cards: bool = False) -> Dict[str, Any]:
        """
        JSON-ready view of the seat.

        Args:
            hide_cards: Leave out ``hole_cards`` (for views of other seats)
        """
        result = {
            "seat": self.seat,
            "stack": self.stack,
            "total_committed": self.total_committed,
            "street_committed": self.street_committed,
            "status": self.status.value,
        }
        if not hide_cards:
            result["hole_cards"] = [card.to_dict() for card in self.hole_cards]
        return result

    def __repr__(self) -> str:
        return (
            f"Player(seat={self.seat}, stack={self.stack}, "
            f"committed={self.total_committed}, status={self.status.value})"
        )
