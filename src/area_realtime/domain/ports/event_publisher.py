"""Event publisher port."""

from typing import Protocol

from area_realtime.domain.models.events import OutboundEvent


class EventPublisher(Protocol):
    """Port for handing events to every live connection of a user.

    Implementations only enqueue; they must never wait for the recipient.
    """

    async def publish(self, user_id: str, event: OutboundEvent) -> None:
        """Queue ``event`` for all sessions of ``user_id``."""
        ...
