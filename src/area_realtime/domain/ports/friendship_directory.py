"""Friendship and location authorization port."""

from typing import Protocol


class FriendshipDirectory(Protocol):
    """Port answering who may see whom.

    Friendship is directed; presence is shared between users who are friends
    in both directions.
    """

    async def is_friend(self, user_id: str, other_id: str) -> bool:
        """Return True if ``user_id`` has ``other_id`` in their friend list."""
        ...

    async def is_authorized_to_view_location(self, viewer_id: str, target_id: str) -> bool:
        """Return True if ``viewer_id`` may receive ``target_id``'s location."""
        ...
