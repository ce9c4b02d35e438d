"""Client connection contract (protocol)."""

from typing import Any, Protocol


class ConnectionProtocol(Protocol):
    """The transport side of one client connection.

    Starlette's ``WebSocket`` satisfies this protocol.
    """

    async def send_json(self, data: Any, mode: str = "text") -> None:
        """Send one JSON document to the client."""
        ...

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        """Close the connection."""
        ...
