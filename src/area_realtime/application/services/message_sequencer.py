"""Message sequencer: total order and read state within each room."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from area_realtime.application.services.keyed_lock import KeyedLock
from area_realtime.domain.errors import NotFoundError, ValidationError
from area_realtime.domain.models.base import utc_now
from area_realtime.domain.models.chat import Message, MessageKind
from area_realtime.domain.models.events import MessageCreated, MessageRead

if TYPE_CHECKING:
    from area_realtime.application.services.chat_room_manager import ChatRoomManager
    from area_realtime.domain.ports import EventPublisher, MessageStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


class MessageSequencer:
    """Single ordering authority per room.

    Appends to one room run under that room's lock: the next sequence number
    is derived from the last stored message, and ``created_at`` is clamped so
    it never precedes the previous message even if the wall clock steps back.
    Delivery only enqueues, so holding the lock never waits on recipients,
    and events leave in sequence order.
    """

    def __init__(
        self,
        rooms: ChatRoomManager,
        store: MessageStore,
        publisher: EventPublisher,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._rooms = rooms
        self._store = store
        self._publisher = publisher
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size
        self._locks = KeyedLock()

    async def append(
        self, room_id: str, sender_id: str, content: str, kind: MessageKind | str = MessageKind.TEXT
    ) -> Message:
        """Append a message to a room and queue it to both participants.

        Args:
            room_id: Target room.
            sender_id: Author; must be a participant.
            content: Message body; must not be blank.
            kind: Message kind.

        Returns:
            The stored message with its sequence number.

        Raises:
            ValidationError: If the content is blank or the kind is unknown.
            NotFoundError: If the room does not exist.
            UnauthorizedError: If the sender is not a participant.
        """
        if not content or not content.strip():
            raise ValidationError("message content must not be empty")
        message_kind = MessageKind.parse(kind)
        room = await self._rooms.require_participant(room_id, sender_id)

        async with self._locks.hold(room_id):
            last = await self._store.last_in_room(room_id)
            created_at = utc_now()
            if last is not None and created_at < last.created_at:
                created_at = last.created_at

            message = Message(
                id=f"msg_{uuid.uuid4().hex}",
                room_id=room_id,
                sender_id=sender_id,
                content=content,
                kind=message_kind,
                sequence=last.sequence + 1 if last is not None else 1,
                created_at=created_at,
            )
            await self._store.append(message)
            await self._rooms.touch(room_id, created_at)

            event = MessageCreated(message=message)
            for participant_id in room.participants:
                await self._publisher.publish(participant_id, event)

        logger.info(f"Message {message.id} #{message.sequence} appended to room {room_id}")
        return message

    async def mark_read(self, message_id: str, reader_id: str) -> Message:
        """Record that the reader has read the message.

        Idempotent: re-marking is a no-op, and a sender marking their own
        message changes nothing.

        Raises:
            NotFoundError: If the message does not exist.
            UnauthorizedError: If the reader is not a participant of the room.
        """
        message = await self._get_message(message_id)
        room = await self._rooms.require_participant(message.room_id, reader_id)
        if not message.is_unread_by(reader_id):
            return message

        async with self._locks.hold(message.room_id):
            current = await self._get_message(message_id)
            if not current.is_unread_by(reader_id):
                return current
            updated = current.model_copy(update={"read_by": current.read_by | {reader_id}})
            await self._store.replace(updated)

            event = MessageRead(message_id=message_id, room_id=room.id, reader_id=reader_id)
            for participant_id in room.participants:
                await self._publisher.publish(participant_id, event)

        logger.debug(f"Message {message_id} read by {reader_id}")
        return updated

    async def history(
        self, room_id: str, cursor: int | None = None, limit: int | None = None
    ) -> list[Message]:
        """List messages after ``cursor`` in ascending sequence order.

        The cursor is the last sequence the caller has already seen; messages
        with a sequence at or below it are never returned again.
        """
        if cursor is not None and cursor < 0:
            raise ValidationError("cursor must not be negative")
        await self._rooms.get_room(room_id)
        return await self._store.list_after(room_id, cursor or 0, self.clamp_limit(limit))

    async def unread_count(self, room_id: str, user_id: str) -> int:
        await self._rooms.require_participant(room_id, user_id)
        return await self._store.count_unread(room_id, user_id)

    async def last_message(self, room_id: str) -> Message | None:
        return await self._store.last_in_room(room_id)

    def clamp_limit(self, limit: int | None) -> int:
        """Clamp a requested page size to [1, max_page_size]."""
        if limit is None:
            return self._default_page_size
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        return min(limit, self._max_page_size)

    async def _get_message(self, message_id: str) -> Message:
        message = await self._store.get(message_id)
        if message is None:
            raise NotFoundError(f"message {message_id} not found")
        return message
