"""
Pytest configuration and shared fixtures for cardpt tests.
"""

import pytest
from cardpt.core import game as game_module
from cardpt.core.card import Deck, ordered_cards, parse_cards
from cardpt.core.game import HoldemEngine, create_engine
from cardpt.core.rules import ActionType
from cardpt.core.state import Action, GameConfig


@pytest.fixture
def deck():
    """Deck shuffled from a fixed seed."""
    return Deck(seed="fixture:1")


@pytest.fixture
def unshuffled_deck():
    """Deck left in suit-major order."""
    return Deck()


@pytest.fixture
def config():
    """Six seats of 1000 chips, blinds 10/20."""
    return GameConfig(seed="table-1")


@pytest.fixture
def engine(config) -> HoldemEngine:
    """Engine with hand 1 dealt (dealer 0, SB 1, BB 2)."""
    return create_engine(config)


@pytest.fixture
def stack_deck(monkeypatch):
    """
    Make the next hands deal from a fixed card order.

    Usage:
        stack_deck("2c 4d ...")   # listed cards first, the rest after
    """
    def _stack(cards_str: str):
        top = parse_cards(cards_str)
        rest = [c for c in ordered_cards() if c not in top]
        monkeypatch.setattr(game_module, "Deck", lambda seed=None: Deck(cards=top + rest))
    return _stack


def _act(engine: HoldemEngine, action_type: str, amount=None) -> None:
    engine.apply_action(Action(
        actor=engine.state.action_seat,
        type=ActionType(action_type),
        amount=amount,
    ))


def _check_down(engine: HoldemEngine) -> None:
    while engine.get_legal_actions():
        types = {a.type for a in engine.get_legal_actions()}
        _act(engine, "check" if ActionType.CHECK in types else "call")


@pytest.fixture
def act():
    """act(engine, "raise", 60) applies an action for whoever is to act."""
    return _act


@pytest.fixture
def check_down():
    """check_down(engine) checks or calls until the hand ends."""
    return _check_down


@pytest.fixture
def chips_in_play():
    """Stacks plus chips committed this hand."""
    return lambda engine: sum(p.stack + p.total_committed for p in engine.state.players)


@pytest.fixture
def sample_hand():
    """Pair of aces, K-Q-J kickers."""
    return parse_cards("As Ah Kd Qc Js")


@pytest.fixture
def royal_flush():
    return parse_cards("As Ks Qs Js Ts")


@pytest.fixture
def straight_flush():
    """Nine-high straight flush in hearts."""
    return parse_cards("9h 8h 7h 6h 5h")


@pytest.fixture
def wheel_straight():
    """A-2-3-4-5, the ace playing low."""
    return parse_cards("As 2h 3d 4c 5s")
