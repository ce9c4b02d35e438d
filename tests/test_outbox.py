"""Tests for ConnectionOutbox and OutboundRouter."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from conftest import FakeConnection

from area_realtime.adapters.web.outbox import ConnectionOutbox, OutboundRouter
from area_realtime.application.services import SessionRegistry
from area_realtime.domain.errors import TransientDeliveryFailure
from area_realtime.domain.models.events import FriendStatusUpdate, LocationUpdate

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _location(latitude: float, user_id: str = "alice") -> LocationUpdate:
    return LocationUpdate(user_id=user_id, latitude=latitude, longitude=0.0, captured_at=NOW)


def _status(user_id: str = "alice") -> FriendStatusUpdate:
    return FriendStatusUpdate(user_id=user_id, is_online=True)


@pytest.mark.asyncio
async def test_frames_are_written_as_event_envelopes() -> None:
    """Given a started outbox, when an event is queued and flushed, then a camelCase frame is sent."""
    connection = FakeConnection()
    outbox = ConnectionOutbox("conn-1", connection)
    outbox.start()

    outbox.enqueue(_status())
    await outbox.flush()

    assert connection.sent == [
        {
            "event": "friendStatusUpdate",
            "data": {"userId": "alice", "isOnline": True, "lastSeenAt": None},
        }
    ]
    await outbox.close()


@pytest.mark.asyncio
async def test_slow_viewer_keeps_only_latest_location_per_user() -> None:
    """Given a slow viewer, when one user moves repeatedly, then only the newest sample is queued."""
    connection = FakeConnection()
    outbox = ConnectionOutbox("conn-1", connection, location_buffer_size=2)

    for latitude in (1.0, 2.0, 3.0, 4.0):
        outbox.enqueue(_location(latitude))
    outbox.start()
    await outbox.flush()

    assert [frame["data"]["latitude"] for frame in connection.sent] == [4.0]
    assert outbox.dropped_locations == 3
    await outbox.close()


@pytest.mark.asyncio
async def test_fast_mover_does_not_push_out_another_users_sample() -> None:
    """Given bob queued once and alice moving a lot, when flushed, then both latest samples arrive."""
    connection = FakeConnection()
    outbox = ConnectionOutbox("conn-1", connection, location_buffer_size=2)

    outbox.enqueue(_location(10.0, "bob"))
    for latitude in (1.0, 2.0, 3.0):
        outbox.enqueue(_location(latitude, "alice"))
    outbox.start()
    await outbox.flush()

    assert [(frame["data"]["userId"], frame["data"]["latitude"]) for frame in connection.sent] == [
        ("bob", 10.0),
        ("alice", 3.0),
    ]
    await outbox.close()


@pytest.mark.asyncio
async def test_full_location_buffer_drops_longest_waiting_user() -> None:
    """Given the buffer holds two users, when a third user moves, then the oldest queued user is dropped."""
    connection = FakeConnection()
    outbox = ConnectionOutbox("conn-1", connection, location_buffer_size=2)

    for user_id in ("alice", "bob", "carol"):
        outbox.enqueue(_location(1.0, user_id))
    outbox.start()
    await outbox.flush()

    assert [frame["data"]["userId"] for frame in connection.sent] == ["bob", "carol"]
    assert outbox.dropped_locations == 1
    await outbox.close()


@pytest.mark.asyncio
async def test_reliable_events_are_never_dropped_and_go_first() -> None:
    """Given queued locations and statuses, when flushed, then statuses come first and all arrive."""
    connection = FakeConnection()
    outbox = ConnectionOutbox("conn-1", connection, location_buffer_size=1)

    outbox.enqueue(_location(1.0))
    outbox.enqueue(_status("bob"))
    outbox.enqueue(_status("carol"))
    outbox.start()
    await outbox.flush()

    assert [frame["event"] for frame in connection.sent] == [
        "friendStatusUpdate",
        "friendStatusUpdate",
        "locationUpdate",
    ]
    await outbox.close()


@pytest.mark.asyncio
async def test_overflowing_reliable_lane_raises() -> None:
    """Given a stalled client, when too many events queue up, then TransientDeliveryFailure is raised."""
    outbox = ConnectionOutbox("conn-1", FakeConnection(), max_events=2)
    outbox.enqueue(_status())
    outbox.enqueue(_status())

    with pytest.raises(TransientDeliveryFailure):
        outbox.enqueue(_status())


@pytest.mark.asyncio
async def test_closed_outbox_rejects_events() -> None:
    """Given a closed outbox, when enqueueing, then TransientDeliveryFailure is raised."""
    outbox = ConnectionOutbox("conn-1", FakeConnection())
    outbox.start()
    await outbox.close()

    with pytest.raises(TransientDeliveryFailure):
        outbox.enqueue(_status())


@pytest.mark.asyncio
async def test_send_failure_reports_the_connection() -> None:
    """Given a broken connection, when writing fails, then the failure callback gets its handle."""
    on_failure = AsyncMock()
    outbox = ConnectionOutbox("conn-1", FakeConnection(fail_on_send=True), on_failure=on_failure)
    outbox.start()

    outbox.enqueue(_status())
    await outbox.flush()

    on_failure.assert_awaited_once_with("conn-1")
    assert outbox.closed


@pytest.mark.asyncio
async def test_router_publishes_to_every_session_of_a_user() -> None:
    """Given alice on two devices, when publishing to her, then both outboxes receive the event."""
    registry = SessionRegistry()
    router = OutboundRouter(registry)
    phone, tablet = FakeConnection(), FakeConnection()
    for handle, connection in (("phone", phone), ("tablet", tablet)):
        outbox = ConnectionOutbox(handle, connection)
        router.attach(outbox)
        outbox.start()
        await registry.register("alice", handle)

    await router.publish("alice", _status("bob"))
    await router.publish("nobody", _status("bob"))
    for handle in ("phone", "tablet"):
        await router.outbox(handle).flush()

    assert len(phone.events("friendStatusUpdate")) == 1
    assert len(tablet.events("friendStatusUpdate")) == 1
    for handle in ("phone", "tablet"):
        await router.detach(handle).close()


@pytest.mark.asyncio
async def test_router_gives_up_stalled_connection_without_raising() -> None:
    """Given a full outbox, when publishing, then the publisher succeeds and the handle is given up."""
    registry = SessionRegistry()
    router = OutboundRouter(registry)
    given_up: list[str] = []

    async def give_up(handle: str) -> None:
        given_up.append(handle)

    router.set_failure_handler(give_up)
    router.attach(ConnectionOutbox("stalled", FakeConnection(), max_events=1))
    await registry.register("alice", "stalled")

    await router.publish("alice", _status("bob"))
    await router.publish("alice", _status("carol"))
    await asyncio.sleep(0)

    assert given_up == ["stalled"]
