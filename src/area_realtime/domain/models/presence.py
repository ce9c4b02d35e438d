"""Presence domain model."""

from datetime import datetime

from area_realtime.domain.models.base import DomainModel


class PresenceRecord(DomainModel):
    """Aggregate online state of a user.

    ``last_seen_at`` is stamped when the user's last session goes away and is
    None for a user that has not gone offline yet.
    """

    user_id: str
    is_online: bool
    last_seen_at: datetime | None = None
