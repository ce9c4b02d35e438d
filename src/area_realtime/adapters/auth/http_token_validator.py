"""Token validator that asks an external authentication service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import aiohttp

from area_realtime.adapters.api_request_logger import log_api_request
from area_realtime.domain.errors import UnauthenticatedError

if TYPE_CHECKING:
    from aiohttp import ClientSession

logger = logging.getLogger(__name__)


class HttpTokenValidator:
    """Validates bearer tokens with ``GET {base_url}/validate``.

    The service answers 200 with ``{"userId": ...}`` for a valid token and
    401/403 otherwise. Any other outcome is treated as a failed
    authentication, never as success.
    """

    def __init__(self, session: ClientSession, base_url: str, timeout_seconds: float = 5.0) -> None:
        self._session = session
        self._url = base_url.rstrip("/") + "/validate"
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def validate_token(self, token: str) -> str:
        if not token:
            raise UnauthenticatedError("missing access token")

        headers = {"Authorization": f"Bearer {token}", "accept": "application/json"}
        try:
            async with self._session.get(
                self._url, headers=headers, timeout=self._timeout
            ) as response:
                log_api_request("GET", self._url, headers=headers, status=response.status)
                if response.status in (401, 403):
                    raise UnauthenticatedError("access token rejected")
                if response.status != 200:
                    logger.error(f"Auth service returned unexpected status {response.status}")
                    raise UnauthenticatedError("authentication service unavailable")
                data = await response.json()
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(f"Auth service request failed: {e}", exc_info=True)
            raise UnauthenticatedError("authentication service unavailable") from e

        user_id = data.get("userId") if isinstance(data, dict) else None
        if not user_id:
            raise UnauthenticatedError("authentication service returned no user")
        return str(user_id)
