"""REST handlers for chat and location queries."""

import logging
from typing import Any

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from area_realtime.adapters.web.schemas import (
    CreateRoomRequest,
    SendMessageRequest,
    SubmitLocationRequest,
    dump,
    parse_model,
)
from area_realtime.adapters.web.services import RealtimeServices
from area_realtime.domain.errors import UnauthenticatedError, ValidationError
from area_realtime.domain.models.base import utc_now

logger = logging.getLogger(__name__)


def _services(request: Request) -> RealtimeServices:
    services: RealtimeServices = request.app.state.services
    return services


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token of an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def _authenticate(request: Request) -> str:
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise UnauthenticatedError("missing bearer token")
    return await _services(request).validator.validate_token(token)


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        raise ValidationError("request body must be JSON") from e


def _optional_int(request: Request, name: str) -> int | None:
    raw = request.query_params.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationError(f"query parameter '{name}' must be an integer") from e


async def list_rooms(request: Request) -> JSONResponse:
    user_id = await _authenticate(request)
    summaries = await _services(request).chat_query.room_summaries(user_id)
    return JSONResponse({"rooms": [dump(summary) for summary in summaries]})


async def create_room(request: Request) -> JSONResponse:
    user_id = await _authenticate(request)
    body = parse_model(CreateRoomRequest, await _json_body(request), "room request")
    room = await _services(request).rooms.get_or_create_room(user_id, body.resolve_peer())
    return JSONResponse(dump(room))


async def list_messages(request: Request) -> JSONResponse:
    """Return one page of room history.

    ``after`` is the last sequence the client already has; ``nextCursor`` in
    the response is the value to pass for the following page.
    """
    user_id = await _authenticate(request)
    room_id = request.path_params["room_id"]
    page = await _services(request).chat_query.history_page(
        room_id,
        user_id,
        cursor=_optional_int(request, "after"),
        limit=_optional_int(request, "limit"),
    )
    return JSONResponse(dump(page))


async def send_message(request: Request) -> JSONResponse:
    user_id = await _authenticate(request)
    body = parse_model(SendMessageRequest, await _json_body(request), "message")
    message = await _services(request).sequencer.append(
        request.path_params["room_id"], user_id, body.content, body.kind
    )
    return JSONResponse(dump(message), status_code=201)


async def mark_message_read(request: Request) -> JSONResponse:
    user_id = await _authenticate(request)
    message = await _services(request).sequencer.mark_read(
        request.path_params["message_id"], user_id
    )
    return JSONResponse(dump(message))


async def unread_count(request: Request) -> JSONResponse:
    user_id = await _authenticate(request)
    total = await _services(request).chat_query.total_unread_count(user_id)
    return JSONResponse({"unreadCount": total})


async def friend_locations(request: Request) -> JSONResponse:
    user_id = await _authenticate(request)
    samples = await _services(request).locations.visible_to(user_id)
    return JSONResponse({"locations": [dump(sample) for sample in samples]})


async def submit_location(request: Request) -> JSONResponse:
    """Store the caller's position and fan it out like an updateLocation event."""
    user_id = await _authenticate(request)
    body = parse_model(SubmitLocationRequest, await _json_body(request), "location")
    sample = await _services(request).locations.submit(
        user_id, body.latitude, body.longitude, body.captured_at or utc_now()
    )
    return JSONResponse(dump(sample), status_code=201)


def rest_routes() -> list[Route]:
    """Routes of the REST surface."""
    return [
        Route("/chat/rooms", list_rooms, methods=["GET"]),
        Route("/chat/rooms", create_room, methods=["POST"]),
        Route("/chat/rooms/{room_id}/messages", list_messages, methods=["GET"]),
        Route("/chat/rooms/{room_id}/messages", send_message, methods=["POST"]),
        Route("/chat/messages/{message_id}/read", mark_message_read, methods=["PATCH"]),
        Route("/chat/unread-count", unread_count, methods=["GET"]),
        Route("/locations", submit_location, methods=["POST"]),
        Route("/locations/friends", friend_locations, methods=["GET"]),
    ]
