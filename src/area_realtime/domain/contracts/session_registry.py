"""Session registry contract (protocol)."""

from typing import Protocol

from area_realtime.domain.models.session import Session


class SessionRegistryProtocol(Protocol):
    """Protocol for tracking which connections belong to which user."""

    async def register(self, user_id: str, connection_handle: str) -> str:
        """Register a connection for a user.

        Args:
            user_id: The authenticated user.
            connection_handle: Opaque handle of the connection.

        Returns:
            The new session id.
        """
        ...

    async def unregister(self, session_id: str) -> None:
        """Remove a session. Unknown ids are ignored."""
        ...

    def sessions_for(self, user_id: str) -> set[str]:
        """Return the connection handles of all live sessions of a user."""
        ...

    def session(self, session_id: str) -> Session | None:
        """Look up a live session."""
        ...

    def online_users(self) -> set[str]:
        """Return every user with at least one live session."""
        ...

    def session_ids(self) -> list[str]:
        """Return the ids of all live sessions."""
        ...
