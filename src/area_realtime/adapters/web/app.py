"""Starlette application exposing the WebSocket gateway and the REST surface."""

import logging
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from area_realtime.adapters.web.gateway import (
    CLOSE_UNAUTHENTICATED,
    ConnectionContext,
    ConnectionRejected,
)
from area_realtime.adapters.web.rest import extract_bearer_token, rest_routes
from area_realtime.adapters.web.schemas import ErrorReply, encode_event
from area_realtime.adapters.web.services import RealtimeServices
from area_realtime.domain.errors import (
    ConflictError,
    NotFoundError,
    RealtimeError,
    TransientDeliveryFailure,
    UnauthenticatedError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[RealtimeError], int] = {
    ValidationError: 400,
    UnauthenticatedError: 401,
    UnauthorizedError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    TransientDeliveryFailure: 503,
}


def status_for(error: RealtimeError) -> int:
    """HTTP status for a domain error, using the closest mapped base class."""
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 500


async def realtime_error_handler(_request: Request, exc: Exception) -> Response:
    if not isinstance(exc, RealtimeError):
        raise exc
    status = status_for(exc)
    if status >= 500:
        logger.error(f"Request failed: {exc.code}: {exc.message}")
    return JSONResponse({"error": {"code": exc.code, "message": exc.message}}, status_code=status)


def _token_from(websocket: WebSocket) -> str | None:
    return websocket.query_params.get("token") or extract_bearer_token(
        websocket.headers.get("Authorization")
    )


async def websocket_endpoint(websocket: WebSocket) -> None:
    """Serve one client connection until it closes."""
    services: RealtimeServices = websocket.app.state.services
    gateway = services.gateway

    await websocket.accept()
    try:
        ctx = await gateway.connect(websocket, _token_from(websocket))
    except UnauthenticatedError as e:
        logger.warning(f"Rejected unauthenticated connection: {e.message}")
        await websocket.send_json(encode_event(ErrorReply(code=e.code, message=e.message)))
        await websocket.close(code=CLOSE_UNAUTHENTICATED, reason=e.message)
        return

    try:
        await _receive_loop(websocket, ctx, services)
    except ConnectionRejected as e:
        logger.warning(f"Closing connection {ctx.handle}: {e.reason}")
        await ctx.outbox.flush()
        await gateway.disconnect(ctx)
        try:
            await websocket.close(code=e.code, reason=e.reason)
        except RuntimeError as close_error:
            logger.debug(f"Connection {ctx.handle} already closed: {close_error}")
    finally:
        await gateway.disconnect(ctx)


async def _receive_loop(
    websocket: WebSocket, ctx: ConnectionContext, services: RealtimeServices
) -> None:
    while True:
        try:
            message = await websocket.receive()
        except WebSocketDisconnect:
            return
        if message["type"] == "websocket.disconnect":
            logger.debug(f"Client {ctx.handle} disconnected with code {message.get('code')}")
            return
        text = message.get("text")
        if text is None:
            text = (message.get("bytes") or b"").decode("utf-8", errors="replace")
        await services.gateway.handle_text(ctx, text)


async def healthz(_request: Request) -> Response:
    """Health check endpoint for load balancers and monitoring."""
    return Response(content="Ok", media_type="text/plain")


def _reset_connections_handler(admin_command_token: str | None) -> Any:
    async def reset_connections(request: Request) -> Response:
        """Close every client connection and drop all sessions.

        Guarded by the X-Admin-Token header; disabled when no admin token is
        configured. Typical usage:
            curl -X POST http://localhost:8000/admin/reset-connections \\
                 -H "X-Admin-Token: $ADMIN_COMMAND_TOKEN"
        """
        if not admin_command_token:
            return JSONResponse(
                {"error": "admin endpoint disabled - ADMIN_COMMAND_TOKEN not configured"},
                status_code=503,
            )

        provided_token = request.headers.get("X-Admin-Token", "")
        if provided_token != admin_command_token:
            logger.warning("Unauthorized attempt to call reset_connections admin endpoint")
            return JSONResponse({"error": "forbidden"}, status_code=403)

        services: RealtimeServices = request.app.state.services
        disconnected = await services.gateway.disconnect_all()
        remaining = len(services.registry.session_ids())
        logger.info(
            "Admin reset_connections completed: "
            f"disconnected_connections={disconnected}, remaining_sessions={remaining}"
        )
        return JSONResponse(
            {
                "status": "ok",
                "disconnected_connections": disconnected,
                "remaining_sessions": remaining,
            }
        )

    return reset_connections


def create_app(services: RealtimeServices, admin_command_token: str | None = None) -> Starlette:
    """Build the Starlette application.

    Args:
        services: Wired realtime components.
        admin_command_token: Shared secret for /admin endpoints (disabled when None).
    """
    routes = [
        WebSocketRoute("/ws", websocket_endpoint),
        Route("/healthz", healthz, methods=["GET"]),
        Route(
            "/admin/reset-connections",
            _reset_connections_handler(admin_command_token),
            methods=["POST"],
        ),
        *rest_routes(),
    ]
    app = Starlette(
        routes=routes,
        exception_handlers={RealtimeError: realtime_error_handler},
    )
    app.state.services = services
    return app
