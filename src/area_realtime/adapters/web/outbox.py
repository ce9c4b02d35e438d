"""Per-connection delivery queues and the router that feeds them."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict, deque
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from area_realtime.adapters.web.schemas import encode_event
from area_realtime.domain.errors import TransientDeliveryFailure

if TYPE_CHECKING:
    from area_realtime.domain.contracts.connection import ConnectionProtocol
    from area_realtime.domain.contracts.session_registry import SessionRegistryProtocol
    from area_realtime.domain.models.events import OutboundEvent

logger = logging.getLogger(__name__)

FailureCallback = Callable[[str], Awaitable[None]]


class ConnectionOutbox:
    """Queues outbound frames for one connection and writes them in a background task.

    Two lanes feed the writer. Reliable events (presence, chat, replies) go
    into a bounded FIFO; overflowing it means the client has stalled and the
    connection is given up. Location updates keep at most one queued frame
    per tracked user: a newer sample replaces the queued one, and when
    ``location_buffer_size`` users are queued the longest waiting is dropped.
    A slow viewer loses stale positions instead of holding up the sender.
    Reliable events are written first.
    """

    def __init__(
        self,
        handle: str,
        connection: ConnectionProtocol,
        location_buffer_size: int = 16,
        max_events: int = 1000,
        on_failure: FailureCallback | None = None,
    ) -> None:
        self.handle = handle
        self._connection = connection
        self._events: deque[dict[str, Any]] = deque()
        self._locations: OrderedDict[str, dict[str, Any]] = OrderedDict()
        self._location_buffer_size = location_buffer_size
        self._unkeyed = 0
        self._max_events = max_events
        self._on_failure = on_failure
        self._wakeup = asyncio.Event()
        self._idle = asyncio.Event()
        self._idle.set()
        self._task: asyncio.Task | None = None
        self._closed = False
        self.dropped_locations = 0
        self.sent = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self) -> int:
        return len(self._events) + len(self._locations)

    def start(self) -> None:
        """Start the writer task."""
        if self._task is not None and not self._task.done():
            logger.warning(f"Outbox writer for {self.handle} already running")
            return
        self._task = asyncio.create_task(self._write_loop(), name=f"outbox:{self.handle}")

    def enqueue(self, event: OutboundEvent) -> None:
        """Queue an event without waiting for the client.

        Raises:
            TransientDeliveryFailure: If the outbox is closed or its reliable
                lane is full.
        """
        if self._closed:
            raise TransientDeliveryFailure(f"connection {self.handle} is closed")

        frame = encode_event(event)
        if event.droppable:
            self._queue_location(event.coalesce_key(), frame)
        else:
            if len(self._events) >= self._max_events:
                raise TransientDeliveryFailure(
                    f"connection {self.handle} has {len(self._events)} undelivered events"
                )
            self._events.append(frame)

        self._idle.clear()
        self._wakeup.set()

    async def flush(self) -> None:
        """Wait until every queued frame has been written or the writer stopped."""
        if self._task is None or self._task.done():
            return
        idle_wait = asyncio.ensure_future(self._idle.wait())
        try:
            await asyncio.wait({idle_wait, self._task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            idle_wait.cancel()

    async def close(self) -> None:
        """Stop the writer. Frames still queued are discarded."""
        self._closed = True
        task = self._task
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug(f"Outbox writer for {self.handle} cancelled")

    def _queue_location(self, key: str | None, frame: dict[str, Any]) -> None:
        if key is None:
            self._unkeyed += 1
            key = f"#{self._unkeyed}"
        if self._locations.pop(key, None) is not None:
            self.dropped_locations += 1
            logger.debug(f"Replaced queued location of {key} for {self.handle}")
        elif len(self._locations) >= self._location_buffer_size:
            dropped_key, _ = self._locations.popitem(last=False)
            self.dropped_locations += 1
            logger.debug(f"Dropped queued location of {dropped_key} for {self.handle}")
        self._locations[key] = frame

    def _next_frame(self) -> dict[str, Any]:
        if self._events:
            return self._events.popleft()
        _, frame = self._locations.popitem(last=False)
        return frame

    async def _write_loop(self) -> None:
        try:
            while True:
                await self._wakeup.wait()
                self._wakeup.clear()
                while self._events or self._locations:
                    await self._connection.send_json(self._next_frame())
                    self.sent += 1
                self._idle.set()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Delivery to {self.handle} failed: {e}", exc_info=True)
            self._closed = True
            if self._on_failure is not None:
                await self._on_failure(self.handle)
        finally:
            self._idle.set()


class OutboundRouter:
    """Routes events for a user to the outboxes of that user's sessions.

    Implements the ``EventPublisher`` port. Publishing only enqueues; a
    connection that cannot take an event is given up without affecting the
    publisher or other recipients.
    """

    def __init__(self, registry: SessionRegistryProtocol) -> None:
        self._registry = registry
        self._outboxes: dict[str, ConnectionOutbox] = {}
        self._on_failure: FailureCallback | None = None
        self._background: set[asyncio.Task] = set()

    def set_failure_handler(self, handler: FailureCallback) -> None:
        """Set the callback invoked with the handle of a connection to give up."""
        self._on_failure = handler

    def attach(self, outbox: ConnectionOutbox) -> None:
        self._outboxes[outbox.handle] = outbox

    def detach(self, handle: str) -> ConnectionOutbox | None:
        return self._outboxes.pop(handle, None)

    def outbox(self, handle: str) -> ConnectionOutbox | None:
        return self._outboxes.get(handle)

    async def publish(self, user_id: str, event: OutboundEvent) -> None:
        """Queue ``event`` for all sessions of ``user_id``."""
        for handle in sorted(self._registry.sessions_for(user_id)):
            outbox = self._outboxes.get(handle)
            if outbox is None:
                continue
            try:
                outbox.enqueue(event)
            except TransientDeliveryFailure as e:
                logger.warning(f"Giving up connection {handle} of {user_id}: {e}")
                self._give_up(handle)

    def _give_up(self, handle: str) -> None:
        if self._on_failure is None:
            return
        task = asyncio.create_task(self._on_failure(handle), name=f"give-up:{handle}")
        self._background.add(task)
        task.add_done_callback(self._background.discard)
