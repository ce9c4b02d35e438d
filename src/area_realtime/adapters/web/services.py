"""Bundle of the components the web surface talks to."""

from dataclasses import dataclass

from area_realtime.adapters.web.gateway import EventGateway
from area_realtime.domain.contracts import (
    ChatQueryProtocol,
    ChatRoomManagerProtocol,
    LocationBroadcasterProtocol,
    MessageSequencerProtocol,
    SessionRegistryProtocol,
)
from area_realtime.domain.ports import TokenValidator


@dataclass(frozen=True)
class RealtimeServices:
    """Everything the HTTP and WebSocket handlers need, built once at startup."""

    validator: TokenValidator
    gateway: EventGateway
    registry: SessionRegistryProtocol
    locations: LocationBroadcasterProtocol
    rooms: ChatRoomManagerProtocol
    sequencer: MessageSequencerProtocol
    chat_query: ChatQueryProtocol
