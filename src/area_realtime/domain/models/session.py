"""Session domain model."""

from datetime import datetime

from area_realtime.domain.models.base import DomainModel


class Session(DomainModel):
    """One live connection belonging to a user."""

    session_id: str
    user_id: str
    connection_handle: str
    connected_at: datetime
