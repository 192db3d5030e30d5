"""
Six-seat no-limit Hold'em engine.

The authoritative betting state machine. It handles:
- Hand setup (button rotation, blind assignment, blind posting, dealing)
- Legal-action derivation for the acting seat
- Action application (fold, check, call, bet, raise) with min-raise and
  short all-in rules
- Street progression and run-outs when nobody is left to bet
- Side pots, showdown and odd-chip distribution

Every public operation validates before it mutates: when an EngineError is
raised the state is unchanged. The deck of each hand is a pure function of
``(config.seed, hand_id)``.
"""

from __future__ import annotations
from typing import List, Dict, Optional, Any
import logging

from cardpt.core.card import Deck
from cardpt.core.errors import (
    InvalidActionError, HandInProgressError, HandOverError,
)
from cardpt.core.hand import evaluate7, describe_rank, HandRank
from cardpt.core.player import Player, PlayerStatus
from cardpt.core.rng import hand_seed
from cardpt.core.rules import (
    GamePhase, ActionType, EventType,
    HOLE_CARDS, STREET_CARDS, NEXT_PHASE, TOTAL_COMMUNITY_CARDS, SEAT_COUNT,
    next_seat, seats_clockwise, find_seat, get_blind_positions, distribute_odd_chips,
    parse_action_type,
)
from cardpt.core.state import (
    GameConfig, GameState, Action, LegalAction, Event, EngineSnapshot, Pot,
    create_initial_state, compute_pots, snapshot_copy,
)


logger = logging.getLogger(__name__)


class HoldemEngine:
    """
    Six-seat no-limit Hold'em engine.

    Usage:
        engine = create_engine(GameConfig(seed="table-1"))

        while engine.get_legal_actions():
            state = engine.get_snapshot().state
            action = choose(state, engine.get_legal_actions())  # From UI or AI
            engine.apply_action(action)

        engine.start_next_hand()

    The engine assumes a single caller and provides no locking.
    """

    def __init__(self, config: GameConfig):
        """
        Create the engine and deal the first hand.

        Raises:
            ConfigError: If the configuration is malformed
            NotEnoughPlayersError: If fewer than two seats have chips
        """
        self.config = config
        self.state: GameState = create_initial_state(config)
        self.events: List[Event] = []
        self.action_history: List[Action] = []
        self._setup_hand()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def get_snapshot(self) -> EngineSnapshot:
        """Read-only view of the engine. Mutating it never affects the engine."""
        return EngineSnapshot(
            config=snapshot_copy(self.config),
            state=snapshot_copy(self.state),
            events=snapshot_copy(self.events),
            action_history=list(self.action_history),
        )

    def get_legal_actions(self) -> List[LegalAction]:
        """Legal actions for the acting seat; empty once the hand has ended."""
        if self.state.phase == GamePhase.ENDED or self.state.action_seat is None:
            return []
        return self._legal_actions_for(self.state.players[self.state.action_seat])

    def apply_action(self, action: Action) -> None:
        """
        Apply an action for the acting seat.

        Raises:
            HandOverError: If the hand has ended
            InvalidActionError: If the actor, type or amount is not legal
        """
        if self.state.phase == GamePhase.ENDED:
            raise HandOverError("Hand is over")

        action = self._validate_action(action)
        self._execute_action(self.state.players[action.actor], action)

        self.action_history.append(action)
        self._emit(EventType.ACTION_TAKEN, {"action": action.to_dict()})
        logger.debug(f"Hand #{self.state.hand_id}: seat {action.actor} {action.type.value} {action.amount or ''}")

        self._advance_after_action()

    def start_next_hand(self) -> None:
        """
        Deal the next hand.

        Raises:
            HandInProgressError: If the current hand has not ended
            NotEnoughPlayersError: If fewer than two seats have chips
        """
        if self.state.phase != GamePhase.ENDED:
            raise HandInProgressError("Current hand is not finished")

        stacks = [p.stack for p in self.state.players]
        get_blind_positions(stacks, next_seat(self.state.dealer_seat))

        self.state.hand_id += 1
        self._setup_hand()

    # ------------------------------------------------------------------
    # Hand setup
    # ------------------------------------------------------------------

    def _setup_hand(self) -> None:
        """Rotate the button, post blinds and deal hole cards."""
        state = self.state
        stacks = [p.stack for p in state.players]
        dealer = next_seat(state.dealer_seat)
        sb_seat, bb_seat = get_blind_positions(stacks, dealer)

        state.dealer_seat = dealer
        state.small_blind_seat = sb_seat
        state.big_blind_seat = bb_seat
        state.deck = Deck(seed=hand_seed(self.config.seed, state.hand_id))
        state.board = []
        state.pots = []
        state.hand_start_total = sum(stacks)
        for player in state.players:
            player.reset_for_new_hand()

        state.phase = GamePhase.PREFLOP
        self._reset_street()

        logger.info(
            f"Starting hand #{state.hand_id}: dealer={dealer} sb={sb_seat} bb={bb_seat}"
        )
        self._emit(EventType.HAND_STARTED, {
            "dealer_seat": dealer,
            "small_blind_seat": sb_seat,
            "big_blind_seat": bb_seat,
        })

        sb_posted = self._post_blind(sb_seat, self.config.small_blind, "small")
        bb_posted = self._post_blind(bb_seat, self.config.big_blind, "big")

        state.current_bet = max(sb_posted, bb_posted)
        state.last_raise_size = self.config.big_blind
        state.min_raise_to = state.current_bet + state.last_raise_size
        state.can_raise = [p.can_act for p in state.players]

        self._deal_hole_cards()

        if self._is_betting_round_complete():
            self._finish_street()
            return
        state.action_seat = self._find_next_actor(next_seat(bb_seat))
        if state.action_seat is None:
            self._finish_street()

    def _post_blind(self, seat: int, amount: int, blind: str) -> int:
        """Post a blind, capped at the stack. Posting the whole stack is all-in."""
        player = self.state.players[seat]
        posted = self._commit(player, amount)
        if player.status == PlayerStatus.ALL_IN:
            self.state.has_acted_this_round[seat] = True
        self._emit(EventType.BLIND_POSTED, {"seat": seat, "amount": posted, "blind": blind})
        logger.debug(f"Seat {seat} posts {blind} blind {posted}")
        return posted

    def _deal_hole_cards(self) -> None:
        """Two passes, one card per seat still in the hand, starting at the small blind."""
        state = self.state
        order = [s for s in seats_clockwise(state.small_blind_seat) if state.players[s].is_in_hand]
        for _ in range(HOLE_CARDS):
            for seat in order:
                state.players[seat].hole_cards.extend(state.deck.deal(1))

    def _reset_street(self) -> None:
        state = self.state
        for player in state.players:
            player.reset_for_new_street()
        state.bet_this_round = [0] * SEAT_COUNT
        state.has_acted_this_round = [not p.is_active for p in state.players]
        state.can_raise = [p.can_act for p in state.players]
        state.current_bet = 0
        state.last_raise_size = self.config.big_blind
        state.min_raise_to = self.config.big_blind

    # ------------------------------------------------------------------
    # Legal actions and validation
    # ------------------------------------------------------------------

    def _legal_actions_for(self, player: Player) -> List[LegalAction]:
        state = self.state
        already = state.bet_this_round[player.seat]
        to_call = max(0, state.current_bet - already)
        max_total = already + player.stack
        actions: List[LegalAction] = []

        if to_call > 0:
            actions.append(LegalAction(ActionType.FOLD))
            actions.append(LegalAction(ActionType.CALL))
            if max_total > state.current_bet and state.can_raise[player.seat]:
                actions.append(LegalAction(
                    ActionType.RAISE,
                    min_amount=min(state.min_raise_to, max_total),
                    max_amount=max_total,
                ))
        else:
            actions.append(LegalAction(ActionType.CHECK))
            if player.stack > 0:
                # min_raise_to equals the big blind on a fresh street and
                # covers the big blind's option preflop
                actions.append(LegalAction(
                    ActionType.BET,
                    min_amount=min(state.min_raise_to, max_total),
                    max_amount=max_total,
                ))
        return actions

    def _validate_action(self, action: Action) -> Action:
        """Check an action against the legal list and return it normalized."""
        state = self.state
        if not isinstance(action, Action):
            raise InvalidActionError(f"Expected an Action, got {type(action).__name__}")
        try:
            action_type = parse_action_type(action.type)
        except ValueError:
            raise InvalidActionError(f"Unknown action type: {action.type}")

        if action.actor != state.action_seat:
            raise InvalidActionError(
                f"Seat {action.actor} cannot act, action is on seat {state.action_seat}"
            )

        legal = {la.type: la for la in self.get_legal_actions()}
        if action_type not in legal:
            allowed = ", ".join(t.value for t in legal)
            raise InvalidActionError(
                f"{action_type.value} is not legal for seat {action.actor} (legal: {allowed})"
            )

        if action_type in (ActionType.BET, ActionType.RAISE):
            amount = action.amount
            if isinstance(amount, float) and amount.is_integer():
                amount = int(amount)
            if not isinstance(amount, int) or isinstance(amount, bool):
                raise InvalidActionError(f"{action_type.value} requires an integer amount")
            bounds = legal[action_type]
            if amount < bounds.min_amount or amount > bounds.max_amount:
                raise InvalidActionError(
                    f"{action_type.value} amount {amount} outside "
                    f"[{bounds.min_amount}, {bounds.max_amount}]"
                )
            return Action(actor=action.actor, type=action_type, amount=amount)

        return Action(actor=action.actor, type=action_type, amount=None)

    # ------------------------------------------------------------------
    # Action execution
    # ------------------------------------------------------------------

    def _execute_action(self, player: Player, action: Action) -> None:
        """Apply a validated action."""
        state = self.state
        seat = player.seat
        to_call = max(0, state.current_bet - state.bet_this_round[seat])

        if action.type == ActionType.FOLD:
            player.fold()
            state.can_raise[seat] = False
            state.has_acted_this_round[seat] = True

        elif action.type == ActionType.CHECK:
            state.can_raise[seat] = False
            state.has_acted_this_round[seat] = True

        elif action.type == ActionType.CALL:
            self._commit(player, to_call)
            state.can_raise[seat] = False
            state.has_acted_this_round[seat] = True

        else:
            self._execute_aggression(player, action.amount)

    def _execute_aggression(self, player: Player, total: int) -> None:
        """
        Bet or raise to ``total`` for the street.

        A full bet or raise (reaching ``min_raise_to``) sets the new raise
        size and reopens action for everyone still active. A short all-in
        only requires others to respond; it does not give raising rights
        back to players who already acted.
        """
        state = self.state
        seat = player.seat
        is_full = total >= state.min_raise_to
        self._commit(player, total - state.bet_this_round[seat])

        if is_full:
            state.last_raise_size = total - state.current_bet
            state.min_raise_to = total + state.last_raise_size
            state.current_bet = total
            state.can_raise = [p.can_act for p in state.players]
            self._mark_acted_after_aggression(seat)
        else:
            state.current_bet = max(state.current_bet, total)
            state.has_acted_this_round[seat] = True

        # The aggressor may raise again only if someone else reopens the action
        state.can_raise[seat] = False

    def _mark_acted_after_aggression(self, actor_seat: int) -> None:
        """Everyone still active must act again, except the aggressor."""
        self.state.has_acted_this_round = [
            p.seat == actor_seat or not p.is_active for p in self.state.players
        ]

    def _commit(self, player: Player, amount: int) -> int:
        posted = player.commit(amount)
        self.state.bet_this_round[player.seat] = player.street_committed
        return posted

    # ------------------------------------------------------------------
    # Progression
    # ------------------------------------------------------------------

    def _advance_after_action(self) -> None:
        state = self.state
        if self._players_in_hand() <= 1:
            self._resolve_hand()
            return

        if self._is_betting_round_complete():
            self._finish_street()
            return

        next_actor = self._find_next_actor(next_seat(state.action_seat))
        if next_actor is None:
            self._finish_street()
            return
        state.action_seat = next_actor

    def _find_next_actor(self, start: int) -> Optional[int]:
        """
        First active, funded seat from ``start`` that still owes action.

        A lone seat that can still bet only owes action when it is behind
        the current bet; with nobody left to bet against it has no option.
        """
        state = self.state
        contested = sum(1 for p in state.players if p.can_act) >= 2

        def owes_action(seat: int) -> bool:
            player = state.players[seat]
            if not player.can_act:
                return False
            if state.bet_this_round[seat] < state.current_bet:
                return True
            return contested and not state.has_acted_this_round[seat]

        return find_seat(start, owes_action)

    def _is_betting_round_complete(self) -> bool:
        state = self.state
        for player in state.players:
            if not player.is_in_hand:
                continue
            if not state.has_acted_this_round[player.seat]:
                return False
            if player.status == PlayerStatus.ACTIVE and \
                    state.bet_this_round[player.seat] != state.current_bet:
                return False
        return True

    def _finish_street(self) -> None:
        """
        Close the betting round and move on.

        When fewer than two players can still bet, the remaining board is
        dealt street by street and the hand goes to showdown.
        """
        state = self.state
        if self._players_in_hand() <= 1:
            self._resolve_hand()
            return

        while True:
            phase = NEXT_PHASE.get(state.phase)
            if phase is None or phase == GamePhase.SHOWDOWN:
                state.phase = GamePhase.SHOWDOWN
                self._resolve_hand()
                return

            self._deal_street(phase)
            self._reset_street()

            if sum(1 for p in state.players if p.can_act) >= 2:
                state.action_seat = self._find_next_actor(state.small_blind_seat)
                if state.action_seat is not None:
                    return

    def _deal_street(self, phase: GamePhase) -> None:
        state = self.state
        state.deck.burn()
        state.board.extend(state.deck.deal(STREET_CARDS[phase]))
        state.phase = phase
        self._emit(EventType.STREET_DEALT, {
            "phase": phase.value,
            "board": [c.to_dict() for c in state.board],
        })
        logger.debug(f"Hand #{state.hand_id}: {phase.value} {' '.join(c.short_str for c in state.board)}")

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _players_in_hand(self) -> int:
        return sum(1 for p in self.state.players if p.is_in_hand)

    def _resolve_hand(self) -> None:
        state = self.state
        remaining = [p for p in state.players if p.is_in_hand]
        if len(remaining) == 1:
            self._award_uncontested(remaining[0])
        else:
            self._award_showdown()

        state.phase = GamePhase.ENDED
        state.action_seat = None
        self._emit(EventType.HAND_ENDED, {"stacks": [p.stack for p in state.players]})
        logger.info(f"Hand #{state.hand_id} ended, stacks={[p.stack for p in state.players]}")

    def _award_uncontested(self, winner: Player) -> None:
        """The last player standing takes every committed chip without a showdown."""
        state = self.state
        total = state.pot_total
        winner.stack += total
        state.pots = [Pot(amount=total, eligible_seats=[winner.seat])]
        self._emit(EventType.POT_AWARDED, {"seat": winner.seat, "amount": total, "pot_index": 0})

    def _award_showdown(self) -> None:
        state = self.state
        if len(state.board) != TOTAL_COMMUNITY_CARDS:
            raise RuntimeError("Showdown reached before the board was complete")

        pots = compute_pots(state.players)
        ranks: Dict[int, HandRank] = {}
        pot_summaries: List[Dict[str, Any]] = []

        for index, pot in enumerate(pots):
            for seat in pot.eligible_seats:
                if seat not in ranks:
                    ranks[seat] = evaluate7(state.players[seat].hole_cards + state.board)

            best = max(ranks[seat] for seat in pot.eligible_seats)
            winners = [seat for seat in pot.eligible_seats if ranks[seat] == best]
            payouts = distribute_odd_chips(pot.amount, winners, state.dealer_seat)

            for seat in seats_clockwise(next_seat(state.dealer_seat)):
                if seat in payouts:
                    state.players[seat].stack += payouts[seat]
                    self._emit(EventType.POT_AWARDED, {
                        "seat": seat, "amount": payouts[seat], "pot_index": index,
                    })

            pot_summaries.append({
                "pot_index": index,
                "amount": pot.amount,
                "eligible_seats": list(pot.eligible_seats),
                "winners": [
                    {"seat": seat, "amount": payouts[seat]}
                    for seat in seats_clockwise(next_seat(state.dealer_seat)) if seat in payouts
                ],
            })

        state.pots = pots
        self._emit(EventType.HAND_SUMMARY, {
            "showdown": [
                {
                    "seat": seat,
                    "hand_rank": ranks[seat].to_dict(),
                    "description": describe_rank(ranks[seat]),
                }
                for seat in sorted(ranks)
            ],
            "pots": pot_summaries,
        })

    def _emit(self, event_type: EventType, data: Dict[str, Any]) -> None:
        self.events.append(Event(type=event_type, hand_id=self.state.hand_id, data=data))


def create_engine(config: GameConfig) -> HoldemEngine:
    """Create an engine and deal its first hand."""
    return HoldemEngine(config)
