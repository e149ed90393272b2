"""
Exception hierarchy for the decision engine.

"No legal moves" is not an error: rules and the selector report it by
returning an empty list or None.
"""
from __future__ import annotations


class VersusError(Exception):
    """Base class for engine errors."""


class IllegalMove(VersusError, ValueError):
    """A move violates the rules of the game it was applied to."""


class InvalidBoard(VersusError, ValueError):
    """A board or player does not satisfy the selector's preconditions."""


class InternalSearchFailure(VersusError, RuntimeError):
    """An unexpected exception escaped the ladder or the search."""
