"""Chat query contract (protocol)."""

from typing import Protocol

from area_realtime.domain.models.chat import MessagePage, RoomSummary


class ChatQueryProtocol(Protocol):
    """Read-only views over chat state for the REST surface."""

    async def room_summaries(self, user_id: str) -> list[RoomSummary]:
        """Rooms of a user with their last message and unread count."""
        ...

    async def history_page(
        self, room_id: str, requester_id: str, cursor: int | None = None, limit: int | None = None
    ) -> MessagePage:
        """One page of a room's history, checked against the requester."""
        ...

    async def total_unread_count(self, user_id: str) -> int:
        """Unread messages across all of a user's rooms."""
        ...
