"""Exceptions raised by the session engine."""


class SessionError(Exception):
    """Base exception for all session engine errors."""


class InvalidConfiguration(SessionError, ValueError):
    """Raised when a plan cannot be generated from the supplied configuration."""


class IllegalStateTransition(SessionError):
    """Raised when an operation is not allowed in the engine's current phase."""


class InvalidItem(SessionError, ValueError):
    """Raised when an item cannot be created or reassigned."""


class UnknownSlot(SessionError, LookupError):
    """Raised when a slot id does not belong to the plan."""
