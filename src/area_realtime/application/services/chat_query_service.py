"""Read-only chat views for the REST surface."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from area_realtime.domain.models.chat import MessagePage, RoomSummary

if TYPE_CHECKING:
    from area_realtime.application.services.chat_room_manager import ChatRoomManager
    from area_realtime.application.services.message_sequencer import MessageSequencer

logger = logging.getLogger(__name__)


class ChatQueryService:
    """Derives room lists, history pages and unread counts."""

    def __init__(self, rooms: ChatRoomManager, sequencer: MessageSequencer) -> None:
        self._rooms = rooms
        self._sequencer = sequencer

    async def room_summaries(self, user_id: str) -> list[RoomSummary]:
        """Rooms of a user, most recently active first, with last message and unread count."""
        summaries = []
        for room in await self._rooms.list_rooms_for(user_id):
            summaries.append(
                RoomSummary(
                    room=room,
                    last_message=await self._sequencer.last_message(room.id),
                    unread_count=await self._sequencer.unread_count(room.id, user_id),
                )
            )
        return summaries

    async def history_page(
        self, room_id: str, requester_id: str, cursor: int | None = None, limit: int | None = None
    ) -> MessagePage:
        """One page of a room's history.

        Raises:
            NotFoundError: If the room does not exist.
            UnauthorizedError: If the requester is not a participant.
        """
        await self._rooms.require_participant(room_id, requester_id)
        page_size = self._sequencer.clamp_limit(limit)
        messages = await self._sequencer.history(room_id, cursor, page_size)
        next_cursor = messages[-1].sequence if len(messages) == page_size else None
        return MessagePage(messages=messages, next_cursor=next_cursor)

    async def total_unread_count(self, user_id: str) -> int:
        total = 0
        for room in await self._rooms.list_rooms_for(user_id):
            total += await self._sequencer.unread_count(room.id, user_id)
        logger.debug(f"Unread count for {user_id}: {total}")
        return total
