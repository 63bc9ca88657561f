"""Typed failures raised by dispatch operations.

All of them are scoped to the single operation that raised them; none is
retried automatically.  The API layer maps each class to an HTTP status.
"""


class DispatchError(Exception):
    """Base class; ``str(err)`` is surfaced verbatim to the requester."""


class ValidationError(DispatchError):
    """Malformed or incomplete request."""


class NotFound(DispatchError):
    """A referenced booking, driver or client does not exist."""


class InvalidTransition(DispatchError):
    """Requested status change violates the booking state machine."""


class PreconditionFailed(DispatchError):
    """Operation requires prior state that has not been reached yet."""
