"""Presence tracking for connected users."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from area_realtime.domain.models.base import utc_now
from area_realtime.domain.models.events import FriendStatusUpdate
from area_realtime.domain.models.presence import PresenceRecord

if TYPE_CHECKING:
    from area_realtime.application.services.session_registry import SessionRegistry
    from area_realtime.domain.ports import EventPublisher, FriendshipDirectory

logger = logging.getLogger(__name__)


class PresenceTracker:
    """Online/offline state per user, derived from the session registry.

    Registered as a session listener, so ``on_user_online`` and
    ``on_user_offline`` run exactly once per transition of a user's session
    set between empty and non-empty. Every transition is published to the
    user's online mutual friends; nothing is debounced.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        directory: FriendshipDirectory,
        publisher: EventPublisher,
    ) -> None:
        """Initialize the tracker and subscribe it to the registry.

        Args:
            registry: Source of live sessions.
            directory: Friendship collaborator.
            publisher: Where friend status updates are queued.
        """
        self._registry = registry
        self._directory = directory
        self._publisher = publisher
        self._records: dict[str, PresenceRecord] = {}
        self._transitions = 0
        registry.add_listener(self)

    def record(self, user_id: str) -> PresenceRecord:
        """Get the presence record of a user (offline if never seen)."""
        return self._records.get(user_id) or PresenceRecord(user_id=user_id, is_online=False)

    def is_online(self, user_id: str) -> bool:
        return self.record(user_id).is_online

    @property
    def transition_count(self) -> int:
        """Number of transitions since start."""
        return self._transitions

    async def on_user_online(self, user_id: str) -> None:
        previous = self._records.get(user_id)
        record = PresenceRecord(
            user_id=user_id,
            is_online=True,
            last_seen_at=previous.last_seen_at if previous else None,
        )
        self._records[user_id] = record
        self._transitions += 1
        logger.info(f"Presence: user {user_id} is online")
        await self._broadcast(record)

    async def on_user_offline(self, user_id: str) -> None:
        record = PresenceRecord(user_id=user_id, is_online=False, last_seen_at=utc_now())
        self._records[user_id] = record
        self._transitions += 1
        logger.info(f"Presence: user {user_id} is offline, last seen {record.last_seen_at}")
        await self._broadcast(record)

    async def friend_statuses(self, user_id: str) -> list[PresenceRecord]:
        """Get the presence of every known mutual friend of a user.

        Args:
            user_id: The user asking.

        Returns:
            Presence records of mutual friends, sorted by user id.
        """
        candidates = sorted(other for other in self._records if other != user_id)
        friends = await self._mutual_friends(user_id, candidates)
        return [self._records[friend_id] for friend_id in friends]

    async def _mutual_friends(self, user_id: str, candidates: list[str]) -> list[str]:
        checks = await asyncio.gather(
            *(self._are_mutual_friends(user_id, other) for other in candidates)
        )
        return [other for other, is_mutual in zip(candidates, checks, strict=True) if is_mutual]

    async def _are_mutual_friends(self, user_id: str, other_id: str) -> bool:
        return await self._directory.is_friend(user_id, other_id) and (
            await self._directory.is_friend(other_id, user_id)
        )

    async def _broadcast(self, record: PresenceRecord) -> None:
        """Publish a status change to the user's online mutual friends."""
        event = FriendStatusUpdate(
            user_id=record.user_id,
            is_online=record.is_online,
            last_seen_at=record.last_seen_at,
        )
        try:
            viewers = sorted(self._registry.online_users() - {record.user_id})
            friends = await self._mutual_friends(record.user_id, viewers)
            for friend_id in friends:
                await self._publisher.publish(friend_id, event)
            logger.debug(
                f"Presence update for {record.user_id} sent to {len(friends)} friend(s)"
            )
        except Exception as e:
            logger.error(
                f"Failed to broadcast presence update for {record.user_id}: {e}", exc_info=True
            )
