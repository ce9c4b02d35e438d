"""Token validator backed by a fixed token table."""

import logging

from area_realtime.domain.errors import UnauthenticatedError

logger = logging.getLogger(__name__)


class StaticTokenValidator:
    """Resolves tokens from an in-memory mapping (development and tests)."""

    def __init__(self, tokens: dict[str, str]) -> None:
        """Initialize with a mapping of token to user id."""
        self._tokens = dict(tokens)

    async def validate_token(self, token: str) -> str:
        user_id = self._tokens.get(token) if token else None
        if user_id is None:
            logger.warning("Rejected unknown access token")
            raise UnauthenticatedError("invalid or missing access token")
        return user_id
