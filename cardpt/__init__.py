"""
cardpt - Deterministic Hold'em engine with a gated decision gateway

A six-seat no-limit Texas Hold'em engine paired with a pipeline that
validates externally proposed actions before anyone may apply them:
- Pure Python game core (seeded deck, evaluator, betting state machine)
- Decision gateway (schema validation, authority and legality gating)
- FastAPI server layer

Usage:
    from cardpt.core import GameConfig, create_engine
    from cardpt.gateway import propose_decision
"""

__version__ = "0.2.0"

from cardpt.core.game import HoldemEngine, create_engine
from cardpt.core.state import GameConfig, Action

__all__ = [
    "HoldemEngine",
    "create_engine",
    "GameConfig",
    "Action",
    "__version__",
]
