"""Durable chat storage ports.

The storage engine lives outside the core. Whatever backs these ports must
uphold two constraints: at most one room per unordered participant pair, and
strictly increasing message sequences within a room.
"""

from typing import Protocol

from area_realtime.domain.models.chat import ChatRoom, Message


class ChatRoomStore(Protocol):
    """Port for persisting chat rooms."""

    async def find_by_pair(self, participant_a: str, participant_b: str) -> ChatRoom | None:
        """Find the room for a canonical (sorted) participant pair."""
        ...

    async def insert(self, room: ChatRoom) -> None:
        """Insert a new room.

        Raises:
            DuplicateRoomError: If a room for the same pair already exists.
        """
        ...

    async def get(self, room_id: str) -> ChatRoom | None:
        """Get a room by id."""
        ...

    async def update(self, room: ChatRoom) -> None:
        """Replace a stored room."""
        ...

    async def list_for_user(self, user_id: str) -> list[ChatRoom]:
        """List every room the user participates in, in no particular order."""
        ...


class MessageStore(Protocol):
    """Port for persisting chat messages."""

    async def append(self, message: Message) -> None:
        """Append a message to its room.

        Raises:
            ConflictError: If the sequence does not follow the room's last one.
        """
        ...

    async def get(self, message_id: str) -> Message | None:
        """Get a message by id."""
        ...

    async def replace(self, message: Message) -> None:
        """Replace a stored message (read state only)."""
        ...

    async def last_in_room(self, room_id: str) -> Message | None:
        """Get the message with the highest sequence in a room."""
        ...

    async def list_after(
        self, room_id: str, after_sequence: int = 0, limit: int | None = None
    ) -> list[Message]:
        """List messages with sequence > ``after_sequence`` in ascending order."""
        ...

    async def count_unread(self, room_id: str, user_id: str) -> int:
        """Count messages in a room not sent by and not read by ``user_id``."""
        ...
