"""
Engine fault types.

Every engine operation validates before it mutates, so when one of these is
raised the engine state is exactly as it was before the call.
"""


class EngineError(ValueError):
    """Base class for caller errors reported by the engine."""


class ConfigError(EngineError):
    """The table configuration is malformed."""


class InvalidActionError(EngineError):
    """An action is not legal for the current state (wrong actor, type or amount)."""


class HandInProgressError(EngineError):
    """A new hand was requested before the current one ended."""


class HandOverError(EngineError):
    """An action was submitted after the hand ended."""


class NotEnoughPlayersError(EngineError):
    """Fewer than two seats have chips, so no hand can be dealt."""


class DeckExhaustedError(EngineError):
    """More cards were requested than the deck holds. Unreachable in a 6-seat hand."""
