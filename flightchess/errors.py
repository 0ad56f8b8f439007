"""Engine error types raised by rule validation."""

from __future__ import annotations


class EngineError(ValueError):
    """Base class for rule violations; message is a stable error code."""


class NotYourTurnError(EngineError):
    """Raised when a player acts while another player holds the turn."""


class IllegalActionError(EngineError):
    """Raised when an action is not legal in the current phase."""


class InvalidStateError(EngineError):
    """Raised when a loaded state does not have the canonical shape."""
