"""Presence tracker contract (protocol)."""

from typing import Protocol

from area_realtime.domain.models.presence import PresenceRecord


class PresenceTrackerProtocol(Protocol):
    """Protocol for reading presence state."""

    def record(self, user_id: str) -> PresenceRecord:
        """Get the presence record of a user (offline if never seen)."""
        ...

    def is_online(self, user_id: str) -> bool:
        """Check whether a user currently has a live session."""
        ...

    async def friend_statuses(self, user_id: str) -> list[PresenceRecord]:
        """Get the presence of every known mutual friend of a user.

        Args:
            user_id: The user asking.

        Returns:
            Presence records of mutual friends, sorted by user id.
        """
        ...
