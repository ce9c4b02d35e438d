"""Web adapters: WebSocket gateway, REST surface and server."""

from area_realtime.adapters.web.app import create_app
from area_realtime.adapters.web.gateway import EventGateway
from area_realtime.adapters.web.outbox import ConnectionOutbox, OutboundRouter
from area_realtime.adapters.web.server import RealtimeWebAdapter
from area_realtime.adapters.web.services import RealtimeServices

__all__ = [
    "ConnectionOutbox",
    "EventGateway",
    "OutboundRouter",
    "RealtimeServices",
    "RealtimeWebAdapter",
    "create_app",
]
