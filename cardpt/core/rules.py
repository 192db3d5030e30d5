"""
Texas Hold'em Rules and Constants.

Table-level rules used by the engine:

1. Six fixed seats. The dealer button advances one seat per hand, linearly,
   whether or not the seat it lands on still has chips.

2. Blinds: the small blind is the first seat with chips clockwise from the
   button, the big blind the next seat with chips after it. Seats without
   chips are skipped, and the scan may wrap onto the button itself.

3. Minimum raise: a raise must increase the bet by at least the size of the
   previous full bet or raise (the big blind if there was none).

4. All-in less than a minimum raise: a short all-in does not reopen raising
   for players who have already acted; they may only call or fold.

5. Odd chips: when a pot splits unevenly, leftover chips go one at a time
   to the winners in seat order starting left of the button.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from cardpt.core.errors import NotEnoughPlayersError


class GamePhase(str, Enum):
    """Phases of a Texas Hold'em hand."""
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"
    ENDED = "ended"


class ActionType(str, Enum):
    """Engine action vocabulary."""
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"


class EventType(str, Enum):
    """Events appended to the engine log."""
    HAND_STARTED = "hand_started"
    BLIND_POSTED = "blind_posted"
    ACTION_TAKEN = "action_taken"
    STREET_DEALT = "street_dealt"
    POT_AWARDED = "pot_awarded"
    HAND_SUMMARY = "hand_summary"
    HAND_ENDED = "hand_ended"


# Default game settings
DEFAULT_SMALL_BLIND = 10
DEFAULT_BIG_BLIND = 20
DEFAULT_BUY_IN = 1000
SEAT_COUNT = 6
MIN_PLAYERS = 2

# Cards per phase
HOLE_CARDS = 2
FLOP_CARDS = 3
TURN_CARDS = 1
RIVER_CARDS = 1
TOTAL_COMMUNITY_CARDS = 5

# Community cards revealed when entering each street
STREET_CARDS: Dict[GamePhase, int] = {
    GamePhase.FLOP: FLOP_CARDS,
    GamePhase.TURN: TURN_CARDS,
    GamePhase.RIVER: RIVER_CARDS,
}

NEXT_PHASE: Dict[GamePhase, GamePhase] = {
    GamePhase.PREFLOP: GamePhase.FLOP,
    GamePhase.FLOP: GamePhase.TURN,
    GamePhase.TURN: GamePhase.RIVER,
    GamePhase.RIVER: GamePhase.SHOWDOWN,
}


def next_seat(seat: int, seat_count: int = SEAT_COUNT) -> int:
    """Seat immediately clockwise."""
    return (seat + 1) % seat_count


def seats_clockwise(start: int, seat_count: int = SEAT_COUNT) -> List[int]:
    """All seats in clockwise order beginning with ``start``."""
    return [(start + i) % seat_count for i in range(seat_count)]


def find_seat(
    start: int,
    predicate: Callable[[int], bool],
    seat_count: int = SEAT_COUNT,
) -> Optional[int]:
    """First seat clockwise from ``start`` (inclusive) matching ``predicate``."""
    for seat in seats_clockwise(start, seat_count):
        if predicate(seat):
            return seat
    return None


def get_blind_positions(stacks: Sequence[int], dealer_seat: int) -> Tuple[int, int]:
    """
    Calculate small blind and big blind seats.

    Seats with an empty stack are skipped. The button itself is scanned
    last, so with two funded seats the button can post the big blind.

    Args:
        stacks: Stack of every seat at hand start
        dealer_seat: Seat holding the button for this hand

    Returns:
        Tuple of (small_blind_seat, big_blind_seat)

    Raises:
        NotEnoughPlayersError: If fewer than two seats have chips
    """
    seat_count = len(stacks)
    funded = sum(1 for s in stacks if s > 0)
    if funded < MIN_PLAYERS:
        raise NotEnoughPlayersError(
            f"Need at least {MIN_PLAYERS} seats with chips, found {funded}"
        )

    sb = find_seat(next_seat(dealer_seat, seat_count), lambda s: stacks[s] > 0, seat_count)
    bb = find_seat(next_seat(sb, seat_count), lambda s: stacks[s] > 0 and s != sb, seat_count)
    return sb, bb


def distribute_odd_chips(
    total: int,
    winners: Sequence[int],
    dealer_seat: int,
    seat_count: int = SEAT_COUNT,
) -> Dict[int, int]:
    """
    Split ``total`` chips among ``winners``.

    Every winner gets an equal share; the remainder is handed out one chip
    at a time to winners in clockwise order starting left of the button.

    Returns:
        Mapping of seat to chips won
    """
    if not winners:
        raise ValueError("Cannot split a pot with no winners")

    share, remainder = divmod(total, len(winners))
    payouts = {seat: share for seat in winners}
    for seat in seats_clockwise(next_seat(dealer_seat, seat_count), seat_count):
        if remainder == 0:
            break
        if seat in payouts:
            payouts[seat] += 1
            remainder -= 1
    return payouts


def parse_action_type(value) -> ActionType:
    """Accept an ActionType or its name in any case ("fold", "FOLD")."""
    if isinstance(value, ActionType):
        return value
    return ActionType(str(value).strip().lower())
