"""Contracts (protocols) of the core components."""

from area_realtime.domain.contracts.chat_query import ChatQueryProtocol
from area_realtime.domain.contracts.chat_room_manager import ChatRoomManagerProtocol
from area_realtime.domain.contracts.connection import ConnectionProtocol
from area_realtime.domain.contracts.location_broadcaster import LocationBroadcasterProtocol
from area_realtime.domain.contracts.message_sequencer import MessageSequencerProtocol
from area_realtime.domain.contracts.presence_tracker import PresenceTrackerProtocol
from area_realtime.domain.contracts.session_listener import SessionListenerProtocol
from area_realtime.domain.contracts.session_registry import SessionRegistryProtocol

__all__ = [
    "ChatQueryProtocol",
    "ChatRoomManagerProtocol",
    "ConnectionProtocol",
    "LocationBroadcasterProtocol",
    "MessageSequencerProtocol",
    "PresenceTrackerProtocol",
    "SessionListenerProtocol",
    "SessionRegistryProtocol",
]
