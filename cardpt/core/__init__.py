"""
cardpt Core - Pure Python Texas Hold'em engine

Deterministic deck, hand evaluator and betting state machine. No network
dependencies.
"""

from cardpt.core.card import Card, Deck, Rank, Suit
from cardpt.core.errors import (
    EngineError, ConfigError, InvalidActionError, HandInProgressError,
    HandOverError, NotEnoughPlayersError, DeckExhaustedError,
)
from cardpt.core.game import HoldemEngine, create_engine
from cardpt.core.hand import HandCategory, HandRank, evaluate_hand, evaluate7
from cardpt.core.player import Player, PlayerStatus
from cardpt.core.rules import GamePhase, ActionType, EventType
from cardpt.core.state import (
    GameConfig, GameState, Action, LegalAction, Event, EngineSnapshot, Pot,
)

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "EngineError",
    "ConfigError",
    "InvalidActionError",
    "HandInProgressError",
    "HandOverError",
    "NotEnoughPlayersError",
    "DeckExhaustedError",
    "HoldemEngine",
    "create_engine",
    "HandCategory",
    "HandRank",
    "evaluate_hand",
    "evaluate7",
    "Player",
    "PlayerStatus",
    "GamePhase",
    "ActionType",
    "EventType",
    "GameConfig",
    "GameState",
    "Action",
    "LegalAction",
    "Event",
    "EngineSnapshot",
    "Pot",
]
