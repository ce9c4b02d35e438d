"""Wires the core components to their collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING

from area_realtime.adapters.storage import InMemoryChatRoomStore, InMemoryMessageStore
from area_realtime.adapters.web.gateway import EventGateway
from area_realtime.adapters.web.outbox import OutboundRouter
from area_realtime.adapters.web.services import RealtimeServices
from area_realtime.application.services import (
    ChatQueryService,
    ChatRoomManager,
    LocationBroadcaster,
    MessageSequencer,
    PresenceTracker,
    SessionRegistry,
)

if TYPE_CHECKING:
    from area_realtime.adapters.config import AppConfig
    from area_realtime.domain.ports import (
        ChatRoomStore,
        FriendshipDirectory,
        MessageStore,
        TokenValidator,
    )


def build_services(
    config: AppConfig,
    validator: TokenValidator,
    directory: FriendshipDirectory,
    room_store: ChatRoomStore | None = None,
    message_store: MessageStore | None = None,
) -> RealtimeServices:
    """Build every component, sharing one registry and one outbound router.

    Args:
        config: Application configuration.
        validator: Token validation collaborator.
        directory: Friendship and location authorization collaborator.
        room_store: Room storage (in memory when None).
        message_store: Message storage (in memory when None).
    """
    registry = SessionRegistry()
    router = OutboundRouter(registry)
    presence = PresenceTracker(registry, directory, router)
    locations = LocationBroadcaster(
        registry,
        directory,
        router,
        authorization_ttl_seconds=config.location_authorization_ttl_seconds,
    )
    rooms = ChatRoomManager(room_store if room_store is not None else InMemoryChatRoomStore())
    sequencer = MessageSequencer(
        rooms,
        message_store if message_store is not None else InMemoryMessageStore(),
        router,
        default_page_size=config.history_page_size,
        max_page_size=config.max_history_page_size,
    )
    gateway = EventGateway(
        validator,
        registry,
        presence,
        locations,
        rooms,
        sequencer,
        router,
        location_buffer_size=config.location_buffer_size,
        outbox_max_events=config.outbox_max_events,
    )
    return RealtimeServices(
        validator=validator,
        gateway=gateway,
        registry=registry,
        locations=locations,
        rooms=rooms,
        sequencer=sequencer,
        chat_query=ChatQueryService(rooms, sequencer),
    )
