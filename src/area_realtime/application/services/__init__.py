"""Core components of the realtime service."""

from area_realtime.application.services.chat_query_service import ChatQueryService
from area_realtime.application.services.chat_room_manager import ChatRoomManager
from area_realtime.application.services.keyed_lock import KeyedLock
from area_realtime.application.services.location_broadcaster import LocationBroadcaster
from area_realtime.application.services.message_sequencer import MessageSequencer
from area_realtime.application.services.presence_tracker import PresenceTracker
from area_realtime.application.services.session_registry import SessionRegistry

__all__ = [
    "ChatQueryService",
    "ChatRoomManager",
    "KeyedLock",
    "LocationBroadcaster",
    "MessageSequencer",
    "PresenceTracker",
    "SessionRegistry",
]
