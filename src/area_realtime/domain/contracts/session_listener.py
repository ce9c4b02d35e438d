"""Session listener contract (protocol)."""

from typing import Protocol


class SessionListenerProtocol(Protocol):
    """Receives the two presence-affecting session transitions.

    Called while the registry still holds the user's lock, so calls for one
    user never overlap or reorder.
    """

    async def on_user_online(self, user_id: str) -> None:
        """The user's session set became non-empty."""
        ...

    async def on_user_offline(self, user_id: str) -> None:
        """The user's session set became empty."""
        ...
