"""Friendship directory that asks an external friendship service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import quote

import aiohttp

from area_realtime.adapters.api_request_logger import log_api_request

if TYPE_CHECKING:
    from aiohttp import ClientSession

logger = logging.getLogger(__name__)


class HttpFriendshipDirectory:
    """Answers friendship questions with the friendship service.

    Endpoints:
        ``GET {base_url}/friends/{user}/{other}`` -> ``{"isFriend": bool}``
        ``GET {base_url}/locations/{viewer}/{target}/authorized`` -> ``{"authorized": bool}``

    Failures deny: an unreachable service never grants access.
    """

    def __init__(self, session: ClientSession, base_url: str, timeout_seconds: float = 5.0) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def is_friend(self, user_id: str, other_id: str) -> bool:
        url = f"{self._base_url}/friends/{quote(user_id, safe='')}/{quote(other_id, safe='')}"
        return await self._get_flag(url, "isFriend")

    async def is_authorized_to_view_location(self, viewer_id: str, target_id: str) -> bool:
        if viewer_id == target_id:
            return False
        url = (
            f"{self._base_url}/locations/{quote(viewer_id, safe='')}/"
            f"{quote(target_id, safe='')}/authorized"
        )
        return await self._get_flag(url, "authorized")

    async def _get_flag(self, url: str, key: str) -> bool:
        headers = {"accept": "application/json"}
        try:
            async with self._session.get(url, headers=headers, timeout=self._timeout) as response:
                log_api_request("GET", url, headers=headers, status=response.status)
                if response.status == 404:
                    return False
                if response.status != 200:
                    logger.warning(
                        f"Friendship service returned status {response.status} for {url}"
                    )
                    return False
                data = await response.json()
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(f"Friendship service request failed: {e}", exc_info=True)
            return False

        return isinstance(data, dict) and data.get(key) is True
