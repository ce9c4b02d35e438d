"""Message sequencer contract (protocol)."""

from typing import Protocol

from area_realtime.domain.models.chat import Message, MessageKind


class MessageSequencerProtocol(Protocol):
    """Protocol for ordering messages and tracking read state."""

    async def append(
        self, room_id: str, sender_id: str, content: str, kind: MessageKind | str = MessageKind.TEXT
    ) -> Message:
        """Append a message to a room and queue it to both participants.

        Raises:
            ValidationError: If the content is blank or the kind is unknown.
            NotFoundError: If the room does not exist.
            UnauthorizedError: If the sender is not a participant.
        """
        ...

    async def mark_read(self, message_id: str, reader_id: str) -> Message:
        """Record that the reader has read the message. Idempotent."""
        ...

    async def history(
        self, room_id: str, cursor: int | None = None, limit: int | None = None
    ) -> list[Message]:
        """List messages after ``cursor`` in ascending sequence order."""
        ...

    async def unread_count(self, room_id: str, user_id: str) -> int:
        """Count messages in the room the user has not read."""
        ...

    async def last_message(self, room_id: str) -> Message | None:
        """Get the most recent message of a room."""
        ...
