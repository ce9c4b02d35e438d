"""Chat room manager: one room per pair of users."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from area_realtime.application.services.keyed_lock import KeyedLock
from area_realtime.domain.errors import DuplicateRoomError, NotFoundError, UnauthorizedError
from area_realtime.domain.models.base import as_utc, utc_now
from area_realtime.domain.models.chat import ChatRoom, canonical_pair

if TYPE_CHECKING:
    from datetime import datetime

    from area_realtime.domain.ports import ChatRoomStore

logger = logging.getLogger(__name__)


class ChatRoomManager:
    """Creates and looks up chat rooms.

    Find-or-create runs under a lock for the canonical pair, so concurrent
    calls from both participants inside this process converge on one room.
    The store's unique pair constraint covers writers outside this process: a
    duplicate insert is resolved by reading back the winner.
    """

    def __init__(self, store: ChatRoomStore) -> None:
        self._store = store
        self._pair_locks = KeyedLock()
        self._room_locks = KeyedLock()

    async def get_or_create_room(self, user_a: str, user_b: str) -> ChatRoom:
        """Return the single room for the pair, creating it if needed.

        Raises:
            ValidationError: On self-pairing or blank ids.
        """
        participant_a, participant_b = canonical_pair(user_a, user_b)

        async with self._pair_locks.hold((participant_a, participant_b)):
            existing = await self._store.find_by_pair(participant_a, participant_b)
            if existing is not None:
                return existing

            now = utc_now()
            room = ChatRoom(
                id=f"room_{uuid.uuid4().hex}",
                participant_a=participant_a,
                participant_b=participant_b,
                created_at=now,
                updated_at=now,
            )
            try:
                await self._store.insert(room)
            except DuplicateRoomError:
                winner = await self._store.find_by_pair(participant_a, participant_b)
                if winner is None:
                    raise
                logger.info(
                    f"Room for {participant_a}/{participant_b} created concurrently: {winner.id}"
                )
                return winner

        logger.info(f"Created room {room.id} for {participant_a}/{participant_b}")
        return room

    async def list_rooms_for(self, user_id: str) -> list[ChatRoom]:
        """List a user's rooms, most recently active first."""
        rooms = await self._store.list_for_user(user_id)
        return sorted(rooms, key=lambda room: (room.updated_at, room.id), reverse=True)

    async def get_room(self, room_id: str) -> ChatRoom:
        room = await self._store.get(room_id)
        if room is None:
            raise NotFoundError(f"chat room {room_id} not found")
        return room

    async def require_participant(self, room_id: str, user_id: str) -> ChatRoom:
        """Get a room, checking that the user takes part in it.

        Raises:
            NotFoundError: If the room does not exist.
            UnauthorizedError: If the user is not a participant.
        """
        room = await self.get_room(room_id)
        if not room.has_participant(user_id):
            raise UnauthorizedError(f"user {user_id} is not a participant of room {room_id}")
        return room

    async def touch(self, room_id: str, at: datetime) -> ChatRoom:
        """Advance the room's ``updated_at`` to ``at`` unless it is already later."""
        at = as_utc(at)
        async with self._room_locks.hold(room_id):
            room = await self.get_room(room_id)
            if at <= room.updated_at:
                return room
            updated = room.model_copy(update={"updated_at": at})
            await self._store.update(updated)
            return updated
