"""Location broadcaster: fans location samples out to authorized viewers."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from area_realtime.application.services.keyed_lock import KeyedLock
from area_realtime.domain.models.events import LocationUpdate
from area_realtime.domain.models.location import LocationSample

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from area_realtime.application.services.session_registry import SessionRegistry
    from area_realtime.domain.ports import EventPublisher, FriendshipDirectory

logger = logging.getLogger(__name__)


def _to_event(sample: LocationSample, replay: bool = False) -> LocationUpdate:
    return LocationUpdate(
        user_id=sample.user_id,
        latitude=sample.latitude,
        longitude=sample.longitude,
        captured_at=sample.captured_at,
        replay=replay,
    )


class LocationBroadcaster:
    """Pass-through multiplexer for location samples.

    Only the latest sample per user is kept, in memory, for replay to viewers
    that subscribe later. Samples for one target are delivered in arrival
    order; they are never reordered by ``captured_at``. Submit and subscribe
    for the same target share a lock so a replay is always queued ahead of
    later live updates.

    Fan-out decisions may be reused for ``authorization_ttl_seconds`` so a
    burst of samples does not ask the directory about every online user each
    time. Replays always ask the directory.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        directory: FriendshipDirectory,
        publisher: EventPublisher,
        authorization_ttl_seconds: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._registry = registry
        self._directory = directory
        self._publisher = publisher
        self._latest: dict[str, LocationSample] = {}
        self._locks = KeyedLock()
        self._authorization_ttl = authorization_ttl_seconds
        self._clock = clock
        # target -> viewer -> (expires at, authorized)
        self._decisions: dict[str, dict[str, tuple[float, bool]]] = {}

    async def submit(
        self, user_id: str, latitude: float, longitude: float, captured_at: datetime
    ) -> LocationSample:
        """Store a sample as the user's latest and fan it out to authorized viewers.

        Args:
            user_id: Whose position this is.
            latitude: Degrees, within [-90, 90].
            longitude: Degrees, within [-180, 180].
            captured_at: When the device captured the position.

        Returns:
            The stored sample.

        Raises:
            ValidationError: If a coordinate is out of range.
        """
        sample = LocationSample.create(user_id, latitude, longitude, captured_at)

        async with self._locks.hold(user_id):
            self._latest[user_id] = sample
            viewers = await self._authorized_viewers(user_id)
            event = _to_event(sample)
            for viewer_id in viewers:
                await self._publisher.publish(viewer_id, event)

        logger.debug(f"Location from {user_id} fanned out to {len(viewers)} viewer(s)")
        return sample

    async def subscribe(self, viewer_id: str, target_id: str) -> LocationSample | None:
        """Replay the target's latest sample to the viewer if authorized.

        Returns:
            The replayed sample, or None if nothing was delivered.
        """
        if viewer_id == target_id:
            return None

        async with self._locks.hold(target_id):
            sample = self._latest.get(target_id)
            if sample is None:
                return None
            if not await self._directory.is_authorized_to_view_location(viewer_id, target_id):
                logger.debug(f"Viewer {viewer_id} may not see location of {target_id}")
                return None
            await self._publisher.publish(viewer_id, _to_event(sample, replay=True))
            return sample

    async def replay_all(self, viewer_id: str) -> int:
        """Replay every sample the viewer may see. Returns how many were sent."""
        replayed = 0
        for target_id in sorted(self._latest):
            if await self.subscribe(viewer_id, target_id) is not None:
                replayed += 1
        if replayed:
            logger.info(f"Replayed {replayed} location(s) to {viewer_id}")
        return replayed

    async def visible_to(self, viewer_id: str) -> list[LocationSample]:
        """Return the latest samples the viewer may see, ordered by user id."""
        targets = sorted(target for target in self._latest if target != viewer_id)
        allowed = await asyncio.gather(
            *(
                self._directory.is_authorized_to_view_location(viewer_id, target)
                for target in targets
            )
        )
        return [
            self._latest[target] for target, ok in zip(targets, allowed, strict=True) if ok
        ]

    def latest(self, user_id: str) -> LocationSample | None:
        return self._latest.get(user_id)

    async def _authorized_viewers(self, target_id: str) -> list[str]:
        candidates = sorted(self._registry.online_users() - {target_id})
        now = self._clock()
        cached = self._decisions.get(target_id, {})
        decisions = {
            viewer: cached[viewer]
            for viewer in candidates
            if viewer in cached and cached[viewer][0] > now
        }
        misses = [viewer for viewer in candidates if viewer not in decisions]
        answers = await asyncio.gather(
            *(
                self._directory.is_authorized_to_view_location(viewer, target_id)
                for viewer in misses
            )
        )
        expires_at = now + self._authorization_ttl
        for viewer, ok in zip(misses, answers, strict=True):
            decisions[viewer] = (expires_at, ok)
        # Offline viewers fall out of the cache here
        self._decisions[target_id] = decisions
        if misses:
            logger.debug(f"Asked directory about {len(misses)} viewer(s) of {target_id}")
        return [viewer for viewer in candidates if decisions[viewer][1]]
