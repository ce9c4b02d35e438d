"""Ports (interfaces) for the ports-and-adapters architecture."""

from area_realtime.domain.ports.chat_store import ChatRoomStore, MessageStore
from area_realtime.domain.ports.event_publisher import EventPublisher
from area_realtime.domain.ports.friendship_directory import FriendshipDirectory
from area_realtime.domain.ports.token_validator import TokenValidator

__all__ = [
    "ChatRoomStore",
    "EventPublisher",
    "FriendshipDirectory",
    "MessageStore",
    "TokenValidator",
]
