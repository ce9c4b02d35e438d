"""Friendship directory held in memory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class InMemoryFriendshipDirectory:
    """Directed friend lists plus area memberships.

    A viewer may see a target's location when the two are friends in both
    directions and share at least one area.
    """

    def __init__(self) -> None:
        self._friends: dict[str, set[str]] = {}
        self._areas: dict[str, set[str]] = {}

    @classmethod
    def from_settings(
        cls, friendships: Iterable[tuple[str, str]], areas: dict[str, Iterable[str]]
    ) -> InMemoryFriendshipDirectory:
        """Build a directory from mutual friendships and area members."""
        directory = cls()
        for user_a, user_b in friendships:
            directory.add_friendship(user_a, user_b)
        for area_id, members in areas.items():
            for member in members:
                directory.join_area(area_id, member)
        return directory

    def add_friend(self, user_id: str, friend_id: str) -> None:
        """Add ``friend_id`` to ``user_id``'s friend list (one direction)."""
        self._friends.setdefault(user_id, set()).add(friend_id)

    def add_friendship(self, user_a: str, user_b: str) -> None:
        """Make two users friends in both directions."""
        self.add_friend(user_a, user_b)
        self.add_friend(user_b, user_a)

    def remove_friend(self, user_id: str, friend_id: str) -> None:
        self._friends.get(user_id, set()).discard(friend_id)

    def join_area(self, area_id: str, user_id: str) -> None:
        self._areas.setdefault(area_id, set()).add(user_id)

    def leave_area(self, area_id: str, user_id: str) -> None:
        self._areas.get(area_id, set()).discard(user_id)

    def shares_area(self, user_a: str, user_b: str) -> bool:
        return any(user_a in members and user_b in members for members in self._areas.values())

    async def is_friend(self, user_id: str, other_id: str) -> bool:
        return other_id in self._friends.get(user_id, set())

    async def is_authorized_to_view_location(self, viewer_id: str, target_id: str) -> bool:
        if viewer_id == target_id:
            return False
        return (
            await self.is_friend(viewer_id, target_id)
            and await self.is_friend(target_id, viewer_id)
            and self.shares_area(viewer_id, target_id)
        )
