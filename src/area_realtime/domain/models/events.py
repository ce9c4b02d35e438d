"""Outbound events published by the core components."""

from datetime import datetime
from typing import ClassVar

from area_realtime.domain.models.base import DomainModel
from area_realtime.domain.models.chat import ChatRoom, Message


class OutboundEvent(DomainModel):
    """Base class for events delivered to users.

    ``droppable`` events may be discarded under backpressure in favour of
    newer ones.
    """

    event_name: ClassVar[str] = "event"
    droppable: ClassVar[bool] = False

    def coalesce_key(self) -> str | None:
        """Queued droppable events with the same key replace each other."""
        return None


class LocationUpdate(OutboundEvent):
    event_name: ClassVar[str] = "locationUpdate"
    droppable: ClassVar[bool] = True

    user_id: str
    latitude: float
    longitude: float
    captured_at: datetime
    replay: bool = False

    def coalesce_key(self) -> str | None:
        return self.user_id


class FriendStatusUpdate(OutboundEvent):
    event_name: ClassVar[str] = "friendStatusUpdate"

    user_id: str
    is_online: bool
    last_seen_at: datetime | None = None


class MessageCreated(OutboundEvent):
    event_name: ClassVar[str] = "messageCreated"

    message: Message


class MessageRead(OutboundEvent):
    event_name: ClassVar[str] = "messageRead"

    message_id: str
    room_id: str
    reader_id: str


class RoomOpened(OutboundEvent):
    event_name: ClassVar[str] = "roomOpened"

    room: ChatRoom
