"""Domain layer - core models, errors and ports."""

from area_realtime.domain.errors import (
    ConflictError,
    DuplicateRoomError,
    NotFoundError,
    RealtimeError,
    TransientDeliveryFailure,
    UnauthenticatedError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "ConflictError",
    "DuplicateRoomError",
    "NotFoundError",
    "RealtimeError",
    "TransientDeliveryFailure",
    "UnauthenticatedError",
    "UnauthorizedError",
    "ValidationError",
]
