"""Error taxonomy shared by every component."""


class RealtimeError(Exception):
    """Base class for errors raised by the realtime core.

    Each subclass carries a short machine-readable ``code`` that the web
    adapter forwards to clients unchanged.
    """

    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RealtimeError):
    """Input was malformed: bad coordinates, self-pairing, empty content."""

    code = "validation"


class UnauthenticatedError(RealtimeError):
    """The connection or request carried no valid credentials."""

    code = "unauthenticated"


class UnauthorizedError(RealtimeError):
    """The caller is authenticated but not allowed to do this."""

    code = "unauthorized"


class NotFoundError(RealtimeError):
    """A room or message id is unknown."""

    code = "not_found"


class ConflictError(RealtimeError):
    """A storage constraint rejected a write."""

    code = "conflict"


class DuplicateRoomError(ConflictError):
    """A room for this participant pair already exists in the store."""


class TransientDeliveryFailure(RealtimeError):
    """A recipient's channel could not take an event.

    Only ever raised and handled inside the delivery layer; senders never see it.
    """

    code = "delivery"
