"""Session registry: which connections belong to which user."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from area_realtime.application.services.keyed_lock import KeyedLock
from area_realtime.domain.errors import ValidationError
from area_realtime.domain.models.base import utc_now
from area_realtime.domain.models.session import Session

if TYPE_CHECKING:
    from area_realtime.domain.contracts.session_listener import SessionListenerProtocol

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Tracks live sessions per user.

    A user may hold any number of sessions at once (one per device). The
    registry reports a user's first registration and last unregistration to
    its listeners; those are the only presence-affecting events.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._sessions: dict[str, Session] = {}
        self._user_sessions: dict[str, set[str]] = {}
        self._listeners: list[SessionListenerProtocol] = []
        self._locks = KeyedLock()

    def add_listener(self, listener: SessionListenerProtocol) -> None:
        """Add a listener for online/offline transitions."""
        self._listeners.append(listener)

    async def register(self, user_id: str, connection_handle: str) -> str:
        """Register a connection for a user.

        Args:
            user_id: The authenticated user.
            connection_handle: Opaque handle of the connection.

        Returns:
            The new session id.
        """
        if not user_id:
            raise ValidationError("user id is required")

        session = Session(
            session_id=f"sess_{uuid.uuid4().hex}",
            user_id=user_id,
            connection_handle=connection_handle,
            connected_at=utc_now(),
        )

        async with self._locks.hold(user_id):
            user_sessions = self._user_sessions.setdefault(user_id, set())
            is_first = not user_sessions
            user_sessions.add(session.session_id)
            self._sessions[session.session_id] = session

            logger.info(
                f"Session registered: {session.session_id} for user {user_id}. "
                f"User sessions: {len(user_sessions)}, total sessions: {len(self._sessions)}"
            )

            if is_first:
                for listener in self._listeners:
                    await listener.on_user_online(user_id)

        return session.session_id

    async def unregister(self, session_id: str) -> None:
        """Remove a session. Unknown or already removed ids are ignored."""
        session = self._sessions.get(session_id)
        if session is None:
            return

        user_id = session.user_id
        async with self._locks.hold(user_id):
            # A concurrent unregister may have won while we waited for the lock
            if self._sessions.pop(session_id, None) is None:
                return

            user_sessions = self._user_sessions.get(user_id, set())
            user_sessions.discard(session_id)
            is_last = not user_sessions
            if is_last:
                self._user_sessions.pop(user_id, None)

            logger.info(
                f"Session unregistered: {session_id} for user {user_id}. "
                f"User sessions: {len(user_sessions)}, total sessions: {len(self._sessions)}"
            )

            if is_last:
                for listener in self._listeners:
                    await listener.on_user_offline(user_id)

    def sessions_for(self, user_id: str) -> set[str]:
        """Return the connection handles of all live sessions of a user."""
        return {
            self._sessions[session_id].connection_handle
            for session_id in self._user_sessions.get(user_id, set())
        }

    def session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def has_sessions(self, user_id: str) -> bool:
        return bool(self._user_sessions.get(user_id))

    def online_users(self) -> set[str]:
        return set(self._user_sessions)

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    def session_count(self) -> int:
        return len(self._sessions)
