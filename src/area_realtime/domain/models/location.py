"""Location sample domain model."""

import math
from datetime import datetime

from area_realtime.domain.errors import ValidationError
from area_realtime.domain.models.base import DomainModel, as_utc

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0


class LocationSample(DomainModel):
    """A user's position at one instant. Never persisted."""

    user_id: str
    latitude: float
    longitude: float
    captured_at: datetime

    @classmethod
    def create(
        cls, user_id: str, latitude: float, longitude: float, captured_at: datetime
    ) -> "LocationSample":
        """Build a sample, rejecting coordinates outside the WGS84 ranges.

        Raises:
            ValidationError: If a coordinate is out of range or not finite.
        """
        if not user_id:
            raise ValidationError("user id is required")
        if not math.isfinite(latitude) or not MIN_LATITUDE <= latitude <= MAX_LATITUDE:
            raise ValidationError(f"latitude must be within [-90, 90], got {latitude}")
        if not math.isfinite(longitude) or not MIN_LONGITUDE <= longitude <= MAX_LONGITUDE:
            raise ValidationError(f"longitude must be within [-180, 180], got {longitude}")
        return cls(
            user_id=user_id,
            latitude=float(latitude),
            longitude=float(longitude),
            captured_at=as_utc(captured_at),
        )
