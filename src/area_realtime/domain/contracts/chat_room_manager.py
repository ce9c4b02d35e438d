"""Chat room manager contract (protocol)."""

from datetime import datetime
from typing import Protocol

from area_realtime.domain.models.chat import ChatRoom


class ChatRoomManagerProtocol(Protocol):
    """Protocol for creating and looking up chat rooms."""

    async def get_or_create_room(self, user_a: str, user_b: str) -> ChatRoom:
        """Return the single room for the pair, creating it if needed.

        Raises:
            ValidationError: On self-pairing or blank ids.
        """
        ...

    async def list_rooms_for(self, user_id: str) -> list[ChatRoom]:
        """List a user's rooms, most recently active first."""
        ...

    async def get_room(self, room_id: str) -> ChatRoom:
        """Get a room.

        Raises:
            NotFoundError: If the room does not exist.
        """
        ...

    async def require_participant(self, room_id: str, user_id: str) -> ChatRoom:
        """Get a room, checking that the user takes part in it.

        Raises:
            NotFoundError: If the room does not exist.
            UnauthorizedError: If the user is not a participant.
        """
        ...

    async def touch(self, room_id: str, at: datetime) -> ChatRoom:
        """Advance the room's ``updated_at`` to ``at`` unless it is already later."""
        ...
