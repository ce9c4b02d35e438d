"""Tests for LocationBroadcaster."""

import math
from datetime import UTC, datetime, timedelta

import pytest
from conftest import RecordingPublisher

from area_realtime.adapters.directory import InMemoryFriendshipDirectory
from area_realtime.application.services import LocationBroadcaster, SessionRegistry
from area_realtime.domain.errors import ValidationError
from area_realtime.domain.models.events import LocationUpdate

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _broadcaster(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> tuple[SessionRegistry, LocationBroadcaster]:
    registry = SessionRegistry()
    return registry, LocationBroadcaster(registry, directory, publisher)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("latitude", "longitude"),
    [(90.5, 0.0), (-91.0, 0.0), (0.0, 180.1), (0.0, -181.0), (math.nan, 0.0), (0.0, math.inf)],
)
async def test_submit_rejects_invalid_coordinates(
    directory: InMemoryFriendshipDirectory,
    publisher: RecordingPublisher,
    latitude: float,
    longitude: float,
) -> None:
    """Given out-of-range coordinates, when submitting, then ValidationError is raised."""
    _, broadcaster = _broadcaster(directory, publisher)

    with pytest.raises(ValidationError):
        await broadcaster.submit("alice", latitude, longitude, NOW)

    assert broadcaster.latest("alice") is None


@pytest.mark.asyncio
async def test_submit_accepts_boundary_coordinates(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> None:
    """Given coordinates on the range limits, when submitting, then the sample is stored."""
    _, broadcaster = _broadcaster(directory, publisher)

    sample = await broadcaster.submit("alice", -90.0, 180.0, NOW)

    assert broadcaster.latest("alice") == sample


@pytest.mark.asyncio
async def test_submit_fans_out_to_online_authorized_viewers_only(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> None:
    """Given bob authorized and carol not, when alice submits, then only bob receives it."""
    registry, broadcaster = _broadcaster(directory, publisher)
    for user in ("alice", "bob", "carol"):
        await registry.register(user, f"conn-{user}")

    await broadcaster.submit("alice", 48.1, 11.5, NOW)

    assert publisher.recipients(LocationUpdate) == ["bob"]
    update = publisher.events_for("bob", LocationUpdate)[0]
    assert (update.user_id, update.latitude, update.longitude) == ("alice", 48.1, 11.5)
    assert update.replay is False


@pytest.mark.asyncio
async def test_samples_are_delivered_in_arrival_order(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> None:
    """Given an older capture time arriving second, when submitted, then order is not changed."""
    registry, broadcaster = _broadcaster(directory, publisher)
    await registry.register("bob", "conn-bob")

    await broadcaster.submit("alice", 1.0, 1.0, NOW)
    await broadcaster.submit("alice", 2.0, 2.0, NOW - timedelta(minutes=5))

    updates = publisher.events_for("bob", LocationUpdate)
    assert [u.latitude for u in updates] == [1.0, 2.0]
    assert broadcaster.latest("alice").latitude == 2.0


@pytest.mark.asyncio
async def test_subscribe_replays_latest_sample(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> None:
    """Given a stored sample, when an authorized viewer subscribes, then it is replayed."""
    _, broadcaster = _broadcaster(directory, publisher)
    await broadcaster.submit("alice", 48.1, 11.5, NOW)

    replayed = await broadcaster.subscribe("bob", "alice")

    assert replayed is not None
    update = publisher.events_for("bob", LocationUpdate)[0]
    assert update.replay is True
    assert update.captured_at == NOW


@pytest.mark.asyncio
async def test_subscribe_denies_unauthorized_viewer(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> None:
    """Given carol shares no area with alice, when subscribing, then nothing is delivered."""
    _, broadcaster = _broadcaster(directory, publisher)
    await broadcaster.submit("alice", 48.1, 11.5, NOW)

    assert await broadcaster.subscribe("carol", "alice") is None
    assert await broadcaster.subscribe("alice", "alice") is None
    assert await broadcaster.subscribe("bob", "nobody") is None
    assert publisher.published == []


@pytest.mark.asyncio
async def test_revoked_authorization_stops_delivery(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> None:
    """Given bob leaves the shared area, when alice submits, then bob receives nothing."""
    registry, broadcaster = _broadcaster(directory, publisher)
    await registry.register("bob", "conn-bob")
    directory.leave_area("campus", "bob")

    await broadcaster.submit("alice", 48.1, 11.5, NOW)

    assert publisher.published == []


@pytest.mark.asyncio
async def test_replay_all_and_visible_to(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> None:
    """Given alice and carol positions, when bob asks, then both are visible and replayed."""
    _, broadcaster = _broadcaster(directory, publisher)
    await broadcaster.submit("alice", 1.0, 1.0, NOW)
    await broadcaster.submit("carol", 2.0, 2.0, NOW)
    await broadcaster.submit("dave", 3.0, 3.0, NOW)

    visible = await broadcaster.visible_to("bob")
    replayed = await broadcaster.replay_all("bob")

    assert [sample.user_id for sample in visible] == ["alice", "carol"]
    assert replayed == 2
    assert [u.user_id for u in publisher.events_for("bob", LocationUpdate)] == ["alice", "carol"]


@pytest.mark.asyncio
async def test_naive_capture_time_is_treated_as_utc(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> None:
    """Given a naive timestamp, when submitting, then it is stored as UTC."""
    _, broadcaster = _broadcaster(directory, publisher)

    sample = await broadcaster.submit("alice", 1.0, 1.0, datetime(2024, 5, 1, 12, 0))

    assert sample.captured_at == NOW


class CountingDirectory:
    """Wraps a directory and counts location authorization lookups."""

    def __init__(self, inner: InMemoryFriendshipDirectory) -> None:
        self.inner = inner
        self.lookups = 0

    async def is_friend(self, user_id: str, other_id: str) -> bool:
        return await self.inner.is_friend(user_id, other_id)

    async def is_authorized_to_view_location(self, viewer_id: str, target_id: str) -> bool:
        self.lookups += 1
        return await self.inner.is_authorized_to_view_location(viewer_id, target_id)


@pytest.mark.asyncio
async def test_burst_of_samples_reuses_authorization_decisions(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> None:
    """Given bob and carol online, when alice sends a burst, then the directory is asked once per viewer."""
    counting = CountingDirectory(directory)
    now = [100.0]
    registry = SessionRegistry()
    broadcaster = LocationBroadcaster(
        registry, counting, publisher, authorization_ttl_seconds=5.0, clock=lambda: now[0]
    )
    await registry.register("bob", "conn-bob")
    await registry.register("carol", "conn-carol")

    for latitude in (1.0, 2.0, 3.0):
        await broadcaster.submit("alice", latitude, 0.0, NOW)

    assert counting.lookups == 2
    assert [u.latitude for u in publisher.events_for("bob", LocationUpdate)] == [1.0, 2.0, 3.0]
    assert publisher.events_for("carol", LocationUpdate) == []

    now[0] += 6.0
    directory.leave_area("campus", "bob")
    await broadcaster.submit("alice", 4.0, 0.0, NOW)

    assert counting.lookups == 4
    assert len(publisher.events_for("bob", LocationUpdate)) == 3


@pytest.mark.asyncio
async def test_without_ttl_every_sample_asks_the_directory(
    directory: InMemoryFriendshipDirectory, publisher: RecordingPublisher
) -> None:
    """Given no authorization TTL, when alice sends two samples, then each asks about bob."""
    counting = CountingDirectory(directory)
    registry = SessionRegistry()
    broadcaster = LocationBroadcaster(registry, counting, publisher)
    await registry.register("bob", "conn-bob")

    await broadcaster.submit("alice", 1.0, 0.0, NOW)
    await broadcaster.submit("alice", 2.0, 0.0, NOW)

    assert counting.lookups == 2
