"""Event gateway: the single ingress and egress point for client connections."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from area_realtime.adapters.web.outbox import ConnectionOutbox, OutboundRouter
from area_realtime.adapters.web.schemas import (
    ErrorReply,
    JoinCommand,
    Joined,
    MarkReadCommand,
    OpenRoomCommand,
    SendMessageCommand,
    SubscribeLocationCommand,
    UpdateLocationCommand,
    UpdateStatusCommand,
    decode_frame,
    parse_command,
)
from area_realtime.domain.errors import (
    RealtimeError,
    UnauthenticatedError,
    UnauthorizedError,
)
from area_realtime.domain.models.base import utc_now
from area_realtime.domain.models.events import FriendStatusUpdate, RoomOpened

if TYPE_CHECKING:
    from area_realtime.domain.contracts import (
        ChatRoomManagerProtocol,
        ConnectionProtocol,
        LocationBroadcasterProtocol,
        MessageSequencerProtocol,
        PresenceTrackerProtocol,
        SessionRegistryProtocol,
    )
    from area_realtime.domain.models.events import OutboundEvent
    from area_realtime.domain.ports import TokenValidator

logger = logging.getLogger(__name__)

# WebSocket close codes (4000-4999 are reserved for applications)
CLOSE_UNAUTHENTICATED = 4401
CLOSE_FORBIDDEN = 4403
CLOSE_DELIVERY_FAILED = 4408
CLOSE_RESET = 4000


class ConnectionRejected(Exception):
    """Raised when a connection must be closed after handling an event."""

    def __init__(self, code: int, reason: str) -> None:
        super().__init__(reason)
        self.code = code
        self.reason = reason


@dataclass
class ConnectionContext:
    """State the gateway keeps per client connection."""

    handle: str
    connection: ConnectionProtocol
    user_id: str
    outbox: ConnectionOutbox
    session_id: str | None = None

    @property
    def joined(self) -> bool:
        return self.session_id is not None


class EventGateway:
    """Multiplexes client connections onto the realtime components.

    Authenticates each connection, requires a ``join`` for the token's user
    and then routes inbound events by name. Replies and pushed events go
    through the connection's outbox; the gateway itself holds no business
    logic.
    """

    def __init__(
        self,
        validator: TokenValidator,
        registry: SessionRegistryProtocol,
        presence: PresenceTrackerProtocol,
        locations: LocationBroadcasterProtocol,
        rooms: ChatRoomManagerProtocol,
        sequencer: MessageSequencerProtocol,
        router: OutboundRouter,
        location_buffer_size: int = 16,
        outbox_max_events: int = 1000,
    ) -> None:
        self._validator = validator
        self._registry = registry
        self._presence = presence
        self._locations = locations
        self._rooms = rooms
        self._sequencer = sequencer
        self._router = router
        self._location_buffer_size = location_buffer_size
        self._outbox_max_events = outbox_max_events
        self._connections: dict[str, ConnectionContext] = {}
        self._handlers: dict[str, Callable[[ConnectionContext, Any], Awaitable[None]]] = {
            "join": self._on_join,
            "updateLocation": self._on_update_location,
            "subscribeLocation": self._on_subscribe_location,
            "updateStatus": self._on_update_status,
            "openRoom": self._on_open_room,
            "sendMessage": self._on_send_message,
            "markRead": self._on_mark_read,
        }
        router.set_failure_handler(self._drop_connection)

    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, connection: ConnectionProtocol, token: str | None) -> ConnectionContext:
        """Authenticate a new connection and start its outbox.

        Raises:
            UnauthenticatedError: If the token is missing or invalid.
        """
        if not token:
            raise UnauthenticatedError("missing access token")
        user_id = await self._validator.validate_token(token)

        handle = f"conn_{uuid.uuid4().hex}"
        outbox = ConnectionOutbox(
            handle,
            connection,
            location_buffer_size=self._location_buffer_size,
            max_events=self._outbox_max_events,
            on_failure=self._drop_connection,
        )
        ctx = ConnectionContext(
            handle=handle, connection=connection, user_id=user_id, outbox=outbox
        )
        self._connections[handle] = ctx
        self._router.attach(outbox)
        outbox.start()
        logger.info(f"Connection {handle} authenticated as {user_id}")
        return ctx

    async def handle_text(self, ctx: ConnectionContext, text: str) -> None:
        """Handle one inbound frame.

        Errors are answered with an ``error`` event on the same connection.

        Raises:
            ConnectionRejected: If the connection must be closed.
        """
        name: str | None = None
        try:
            name, data = decode_frame(text)
            if name != "join" and not ctx.joined:
                raise UnauthorizedError("send join before other events")
            await self._handlers[name](ctx, parse_command(name, data))
        except ConnectionRejected:
            raise
        except RealtimeError as e:
            logger.debug(f"Event {name} from {ctx.handle} rejected: {e.code}: {e.message}")
            self._reply(ctx, ErrorReply(code=e.code, message=e.message, ref=name))
        except Exception:
            logger.exception(f"Unexpected error handling event {name} from {ctx.handle}")
            self._reply(ctx, ErrorReply(code="internal", message="internal error", ref=name))

    async def disconnect(self, ctx: ConnectionContext) -> None:
        """Release everything held for a connection. Safe to call twice."""
        if self._connections.pop(ctx.handle, None) is None:
            return
        await self._end_session(ctx)
        self._router.detach(ctx.handle)
        await ctx.outbox.close()
        logger.info(f"Connection {ctx.handle} of {ctx.user_id} closed")

    async def disconnect_all(self) -> int:
        """Close every connection and drop its session. Returns how many were closed."""
        contexts = list(self._connections.values())
        for ctx in contexts:
            await self.disconnect(ctx)
            await self._close_quietly(ctx, CLOSE_RESET, "connections reset")
        return len(contexts)

    async def _drop_connection(self, handle: str) -> None:
        ctx = self._connections.get(handle)
        if ctx is None:
            return
        logger.warning(f"Dropping connection {handle} of {ctx.user_id} after delivery failure")
        await self.disconnect(ctx)
        await self._close_quietly(ctx, CLOSE_DELIVERY_FAILED, "delivery failed")

    async def _close_quietly(self, ctx: ConnectionContext, code: int, reason: str) -> None:
        try:
            await ctx.connection.close(code=code, reason=reason)
        except Exception as e:
            logger.debug(f"Closing {ctx.handle} failed: {e}")

    async def _end_session(self, ctx: ConnectionContext) -> None:
        session_id, ctx.session_id = ctx.session_id, None
        if session_id is not None:
            await self._registry.unregister(session_id)

    def _reply(self, ctx: ConnectionContext, event: OutboundEvent) -> None:
        try:
            ctx.outbox.enqueue(event)
        except RealtimeError as e:
            logger.warning(f"Could not reply to {ctx.handle}: {e}")

    async def _on_join(self, ctx: ConnectionContext, command: JoinCommand) -> None:
        if command.user_id != ctx.user_id:
            logger.warning(
                f"Connection {ctx.handle} authenticated as {ctx.user_id} tried to join as "
                f"{command.user_id}"
            )
            self._reply(
                ctx, ErrorReply(code="unauthorized", message="join must match token", ref="join")
            )
            raise ConnectionRejected(CLOSE_FORBIDDEN, "join must match token")

        if ctx.joined:
            self._reply(ctx, Joined(user_id=ctx.user_id, session_id=ctx.session_id or ""))
            return

        session_id = await self._registry.register(ctx.user_id, ctx.handle)
        if ctx.handle not in self._connections:
            # Dropped while registering
            await self._registry.unregister(session_id)
            return
        ctx.session_id = session_id
        self._reply(ctx, Joined(user_id=ctx.user_id, session_id=ctx.session_id))
        await self._send_friend_statuses(ctx)
        replayed = await self._locations.replay_all(ctx.user_id)
        logger.debug(f"Replayed {replayed} location(s) to {ctx.user_id}")

    async def _send_friend_statuses(self, ctx: ConnectionContext) -> None:
        for record in await self._presence.friend_statuses(ctx.user_id):
            self._reply(
                ctx,
                FriendStatusUpdate(
                    user_id=record.user_id,
                    is_online=record.is_online,
                    last_seen_at=record.last_seen_at,
                ),
            )

    async def _on_update_location(
        self, ctx: ConnectionContext, command: UpdateLocationCommand
    ) -> None:
        captured_at = command.captured_at or utc_now()
        await self._locations.submit(ctx.user_id, command.latitude, command.longitude, captured_at)

    async def _on_subscribe_location(
        self, ctx: ConnectionContext, command: SubscribeLocationCommand
    ) -> None:
        await self._locations.subscribe(ctx.user_id, command.target_id)

    async def _on_update_status(self, ctx: ConnectionContext, command: UpdateStatusCommand) -> None:
        if command.is_online:
            await self._send_friend_statuses(ctx)
            return
        # Explicit logout of this session; the connection stays open
        await self._end_session(ctx)
        logger.info(f"Connection {ctx.handle} of {ctx.user_id} logged out")

    async def _on_open_room(self, ctx: ConnectionContext, command: OpenRoomCommand) -> None:
        room = await self._rooms.get_or_create_room(ctx.user_id, command.peer_id)
        self._reply(ctx, RoomOpened(room=room))

    async def _on_send_message(self, ctx: ConnectionContext, command: SendMessageCommand) -> None:
        await self._sequencer.append(command.room_id, ctx.user_id, command.content, command.kind)

    async def _on_mark_read(self, ctx: ConnectionContext, command: MarkReadCommand) -> None:
        await self._sequencer.mark_read(command.message_id, ctx.user_id)
