"""
Engine data model: configuration, actions, events, pots and the GameState
aggregate, plus side-pot computation.
"""

from __future__ import annotations
import copy
from typing import List, Dict, Optional, Any
from dataclasses import dataclass, field

from cardpt.core.card import Card, Deck
from cardpt.core.errors import ConfigError
from cardpt.core.player import Player, PlayerStatus
from cardpt.core.rules import (
    GamePhase, ActionType, EventType,
    DEFAULT_SMALL_BLIND, DEFAULT_BIG_BLIND, DEFAULT_BUY_IN, SEAT_COUNT,
    parse_action_type,
)


@dataclass(frozen=True)
class GameConfig:
    """
    Table configuration.

    Attributes:
        seed: Seed string; together with the hand id it fixes the deck order
        starting_stacks: Stack of each of the six seats
        small_blind: Small blind amount
        big_blind: Big blind amount
    """
    seed: str
    starting_stacks: List[int] = field(
        default_factory=lambda: [DEFAULT_BUY_IN] * SEAT_COUNT
    )
    small_blind: int = DEFAULT_SMALL_BLIND
    big_blind: int = DEFAULT_BIG_BLIND

    def validate(self) -> None:
        if not isinstance(self.seed, str):
            raise ConfigError("seed must be a string")
        if len(self.starting_stacks) != SEAT_COUNT:
            raise ConfigError(f"starting_stacks must have {SEAT_COUNT} entries")
        for stack in self.starting_stacks:
            if not _is_chip_count(stack):
                raise ConfigError(f"Invalid starting stack: {stack!r}")
        if not _is_chip_count(self.small_blind) or not _is_chip_count(self.big_blind):
            raise ConfigError("Blinds must be non-negative integers")
        if self.small_blind <= 0 or self.small_blind > self.big_blind:
            raise ConfigError("Blinds must satisfy 0 < small_blind <= big_blind")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "starting_stacks": list(self.starting_stacks),
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
        }


def _is_chip_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass
class Pot:
    """A main pot or side pot."""
    amount: int = 0
    eligible_seats: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "eligible_seats": list(self.eligible_seats)}


@dataclass(frozen=True)
class Action:
    """
    A player action as submitted to the engine.

    ``amount`` is the street total the player bets or raises to. It is
    ignored for fold, check and call.
    """
    actor: int
    type: ActionType
    amount: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Action:
        return cls(
            actor=data["actor"],
            type=parse_action_type(data["type"]),
            amount=data.get("amount"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"actor": self.actor, "type": self.type.value, "amount": self.amount}


@dataclass(frozen=True)
class LegalAction:
    """An action the acting seat may take, with bounds for bet and raise."""
    type: ActionType
    min_amount: Optional[int] = None
    max_amount: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "min_amount": self.min_amount,
            "max_amount": self.max_amount,
        }


@dataclass
class Event:
    """Entry in the append-only engine event log."""
    type: EventType
    hand_id: int
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "hand_id": self.hand_id, "data": _jsonable(self.data)}


@dataclass
class GameState:
    """
    Aggregate root owned by one engine.

    Per-seat street bookkeeping is kept in three parallel lists indexed by
    seat: ``bet_this_round``, ``has_acted_this_round`` and ``can_raise``.
    ``action_seat`` is None once the hand has ended.
    """
    hand_id: int
    players: List[Player]
    dealer_seat: int
    small_blind_seat: int = 0
    big_blind_seat: int = 0
    action_seat: Optional[int] = None
    phase: GamePhase = GamePhase.ENDED
    board: List[Card] = field(default_factory=list)
    deck: Deck = field(default_factory=Deck)
    pots: List[Pot] = field(default_factory=list)
    current_bet: int = 0
    min_raise_to: int = 0
    last_raise_size: int = 0
    bet_this_round: List[int] = field(default_factory=lambda: [0] * SEAT_COUNT)
    has_acted_this_round: List[bool] = field(default_factory=lambda: [False] * SEAT_COUNT)
    can_raise: List[bool] = field(default_factory=lambda: [False] * SEAT_COUNT)
    hand_start_total: int = 0

    @property
    def burn(self) -> List[Card]:
        return self.deck.burned

    @property
    def pot_total(self) -> int:
        """Chips committed this hand by all seats."""
        return sum(p.total_committed for p in self.players)

    def to_dict(self) -> Dict[str, Any]:
        """Public view of the hand; the undealt cards are never included."""
        return {
            "hand_id": self.hand_id,
            "dealer_seat": self.dealer_seat,
            "small_blind_seat": self.small_blind_seat,
            "big_blind_seat": self.big_blind_seat,
            "action_seat": self.action_seat,
            "phase": self.phase.value,
            "board": [c.to_dict() for c in self.board],
            "players": [p.to_dict() for p in self.players],
            "pots": [pot.to_dict() for pot in self.pots],
            "current_bet": self.current_bet,
            "min_raise_to": self.min_raise_to,
            "last_raise_size": self.last_raise_size,
            "bet_this_round": list(self.bet_this_round),
            "has_acted_this_round": list(self.has_acted_this_round),
            "can_raise": list(self.can_raise),
            "deck_remaining": self.deck.remaining,
            "burn": [c.to_dict() for c in self.burn],
        }


@dataclass
class EngineSnapshot:
    """Defensive copy of everything an engine knows."""
    config: GameConfig
    state: GameState
    events: List[Event]
    action_history: List[Action]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "state": self.state.to_dict(),
            "events": [e.to_dict() for e in self.events],
            "action_history": [a.to_dict() for a in self.action_history],
        }


def create_initial_state(config: GameConfig) -> GameState:
    """
    Build the pre-deal state for a validated config.

    The button starts on the last seat so that advancing it for the first
    hand puts it on seat 0.
    """
    config.validate()
    players = [Player(seat=seat, stack=stack) for seat, stack in enumerate(config.starting_stacks)]
    return GameState(
        hand_id=1,
        players=players,
        dealer_seat=SEAT_COUNT - 1,
        min_raise_to=config.big_blind,
        last_raise_size=config.big_blind,
    )


def compute_pots(players: List[Player]) -> List[Pot]:
    """
    Split committed chips into a main pot and side pots.

    For each distinct commitment level (ascending) the pot holds
    ``(level - previous_level) * contributors`` chips, and is contested by
    the contributors still in the hand. Every level with a live contender is
    its own pot, even one contested by the same seats as the pot below. A
    level nobody in the hand reached holds only dead chips and is merged
    into the pot below it.
    """
    levels = sorted({p.total_committed for p in players if p.total_committed > 0})

    pots: List[Pot] = []
    previous = 0
    dead = 0
    for level in levels:
        contributors = [p for p in players if p.total_committed >= level]
        amount = (level - previous) * len(contributors)
        eligible = [p.seat for p in contributors if p.is_in_hand]
        previous = level
        if not eligible:
            if pots:
                pots[-1].amount += amount
            else:
                dead += amount
            continue
        pots.append(Pot(amount=amount + dead, eligible_seats=eligible))
        dead = 0
    return pots


def snapshot_copy(obj):
    """Deep copy used for every value handed out of the engine."""
    return copy.deepcopy(obj)


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (GamePhase, ActionType, PlayerStatus)):
        return value.value
    return value
