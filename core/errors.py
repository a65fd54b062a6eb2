"""Exceptions shared by the Hansa engine packages."""


class InvariantViolation(RuntimeError):
    """Raised when a handler meets a state its preconditions rule out.

    This signals a corrupted game state or a bypassed validator and is
    never recoverable.
    """


class ActionParamsError(ValueError):
    """Raised when an action payload has the wrong shape."""
