"""Uvicorn server running the realtime web application."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import uvicorn

from area_realtime.adapters.config import AppConfig
from area_realtime.adapters.web.app import create_app
from area_realtime.adapters.web.rate_limit_middleware import RateLimitMiddleware

if TYPE_CHECKING:
    from area_realtime.adapters.web.services import RealtimeServices

logger = logging.getLogger(__name__)


class RealtimeWebAdapter:
    """Serves the WebSocket gateway and REST surface."""

    def __init__(self, services: RealtimeServices, config: AppConfig) -> None:
        """Initialize the web adapter.

        Args:
            services: Wired realtime components.
            config: Application configuration.
        """
        if not isinstance(config, AppConfig):
            raise TypeError("config must be an AppConfig instance")

        self.services = services
        self.config = config
        self._server: uvicorn.Server | None = None

    def build_app(self) -> Any:
        """Create the ASGI application wrapped with rate limiting."""
        app = create_app(self.services, admin_command_token=self.config.admin_command_token)
        return RateLimitMiddleware(app, requests_per_minute=self.config.rate_limit_per_minute)

    async def start(self) -> None:
        """Start serving; returns when the server exits."""
        config = uvicorn.Config(
            self.build_app(),
            host=self.config.host,
            port=self.config.port,
            log_level="info",
            reload=self.config.reload,
        )
        self._server = uvicorn.Server(config)
        logger.info(f"Serving realtime gateway on ws://{self.config.host}:{self.config.port}/ws")
        await self._server.serve()

    async def stop(self) -> None:
        """Close client connections and stop the web server."""
        closed = await self.services.gateway.disconnect_all()
        if closed:
            logger.info(f"Closed {closed} connection(s) on shutdown")
        if self._server:
            self._server.should_exit = True
