"""Domain models for the realtime core."""

from area_realtime.domain.models.base import as_utc, utc_now
from area_realtime.domain.models.chat import (
    ChatRoom,
    Message,
    MessageKind,
    MessagePage,
    RoomSummary,
    canonical_pair,
)
from area_realtime.domain.models.events import (
    FriendStatusUpdate,
    LocationUpdate,
    MessageCreated,
    MessageRead,
    OutboundEvent,
    RoomOpened,
)
from area_realtime.domain.models.location import LocationSample
from area_realtime.domain.models.presence import PresenceRecord
from area_realtime.domain.models.session import Session

__all__ = [
    "ChatRoom",
    "FriendStatusUpdate",
    "LocationSample",
    "LocationUpdate",
    "Message",
    "MessageCreated",
    "MessageKind",
    "MessagePage",
    "MessageRead",
    "OutboundEvent",
    "PresenceRecord",
    "RoomOpened",
    "RoomSummary",
    "Session",
    "as_utc",
    "canonical_pair",
    "utc_now",
]
