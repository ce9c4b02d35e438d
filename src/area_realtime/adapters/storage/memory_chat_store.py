"""In-memory chat storage honouring the storage contract.

Used for development and tests in place of the external durable store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from area_realtime.domain.errors import ConflictError, DuplicateRoomError

if TYPE_CHECKING:
    from area_realtime.domain.models.chat import ChatRoom, Message

logger = logging.getLogger(__name__)


class InMemoryChatRoomStore:
    """Chat rooms keyed by id, with a unique index on the participant pair."""

    def __init__(self) -> None:
        self._rooms: dict[str, ChatRoom] = {}
        self._by_pair: dict[tuple[str, str], str] = {}

    async def find_by_pair(self, participant_a: str, participant_b: str) -> ChatRoom | None:
        room_id = self._by_pair.get((participant_a, participant_b))
        return self._rooms.get(room_id) if room_id is not None else None

    async def insert(self, room: ChatRoom) -> None:
        pair = (room.participant_a, room.participant_b)
        if pair in self._by_pair:
            raise DuplicateRoomError(f"a room for {pair[0]}/{pair[1]} already exists")
        if room.id in self._rooms:
            raise ConflictError(f"room id {room.id} already exists")
        self._by_pair[pair] = room.id
        self._rooms[room.id] = room

    async def get(self, room_id: str) -> ChatRoom | None:
        return self._rooms.get(room_id)

    async def update(self, room: ChatRoom) -> None:
        if room.id not in self._rooms:
            raise ConflictError(f"room {room.id} does not exist")
        self._rooms[room.id] = room

    async def list_for_user(self, user_id: str) -> list[ChatRoom]:
        return [room for room in self._rooms.values() if room.has_participant(user_id)]


class InMemoryMessageStore:
    """Append-only message log per room."""

    def __init__(self) -> None:
        self._rooms: dict[str, list[Message]] = {}
        self._by_id: dict[str, Message] = {}

    async def append(self, message: Message) -> None:
        log = self._rooms.setdefault(message.room_id, [])
        expected = log[-1].sequence + 1 if log else 1
        if message.sequence != expected:
            raise ConflictError(
                f"room {message.room_id} expects sequence {expected}, got {message.sequence}"
            )
        if message.id in self._by_id:
            raise ConflictError(f"message id {message.id} already exists")
        log.append(message)
        self._by_id[message.id] = message

    async def get(self, message_id: str) -> Message | None:
        return self._by_id.get(message_id)

    async def replace(self, message: Message) -> None:
        current = self._by_id.get(message.id)
        if current is None:
            raise ConflictError(f"message {message.id} does not exist")
        log = self._rooms[current.room_id]
        # Sequences start at 1 and have no gaps, so the sequence is the list position
        log[current.sequence - 1] = message
        self._by_id[message.id] = message

    async def last_in_room(self, room_id: str) -> Message | None:
        log = self._rooms.get(room_id)
        return log[-1] if log else None

    async def list_after(
        self, room_id: str, after_sequence: int = 0, limit: int | None = None
    ) -> list[Message]:
        log = self._rooms.get(room_id, [])
        # Position after_sequence holds the message with sequence after_sequence + 1
        page = log[after_sequence:]
        return page[:limit] if limit is not None else list(page)

    async def count_unread(self, room_id: str, user_id: str) -> int:
        return sum(1 for message in self._rooms.get(room_id, []) if message.is_unread_by(user_id))
