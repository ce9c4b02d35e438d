"""Location broadcaster contract (protocol)."""

from datetime import datetime
from typing import Protocol

from area_realtime.domain.models.location import LocationSample


class LocationBroadcasterProtocol(Protocol):
    """Protocol for distributing location samples."""

    async def submit(
        self, user_id: str, latitude: float, longitude: float, captured_at: datetime
    ) -> LocationSample:
        """Store a sample as the user's latest and fan it out to authorized viewers.

        Raises:
            ValidationError: If a coordinate is out of range.
        """
        ...

    async def subscribe(self, viewer_id: str, target_id: str) -> LocationSample | None:
        """Replay the target's latest sample to the viewer if authorized.

        Returns:
            The replayed sample, or None if nothing was delivered.
        """
        ...

    async def replay_all(self, viewer_id: str) -> int:
        """Replay every sample the viewer may see. Returns how many were sent."""
        ...

    async def visible_to(self, viewer_id: str) -> list[LocationSample]:
        """Return the latest samples the viewer may see."""
        ...
