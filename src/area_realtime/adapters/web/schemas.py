"""Wire format of the WebSocket and REST surfaces.

Every WebSocket frame is a JSON object ``{"event": <name>, "data": {...}}``
with camelCase field names in both directions.
"""

import json
from datetime import datetime
from typing import Any, ClassVar, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaValidationError
from pydantic.alias_generators import to_camel

from area_realtime.domain.errors import ValidationError
from area_realtime.domain.models.events import OutboundEvent

ModelT = TypeVar("ModelT", bound=BaseModel)


class WireModel(BaseModel):
    """Inbound payload; unknown fields are ignored."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class JoinCommand(WireModel):
    user_id: str = Field(min_length=1)


class UpdateLocationCommand(WireModel):
    latitude: float
    longitude: float
    # Older clients send the capture time as "timestamp"
    captured_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("capturedAt", "captured_at", "timestamp")
    )


class SubscribeLocationCommand(WireModel):
    target_id: str = Field(min_length=1)


class UpdateStatusCommand(WireModel):
    is_online: bool


class OpenRoomCommand(WireModel):
    peer_id: str = Field(min_length=1)


class SendMessageCommand(WireModel):
    room_id: str = Field(min_length=1)
    content: str
    kind: str = Field(
        default="text", validation_alias=AliasChoices("kind", "messageType", "message_type")
    )


class MarkReadCommand(WireModel):
    message_id: str = Field(min_length=1)


COMMANDS: dict[str, type[WireModel]] = {
    "join": JoinCommand,
    "updateLocation": UpdateLocationCommand,
    "subscribeLocation": SubscribeLocationCommand,
    "updateStatus": UpdateStatusCommand,
    "openRoom": OpenRoomCommand,
    "sendMessage": SendMessageCommand,
    "markRead": MarkReadCommand,
}


class CreateRoomRequest(WireModel):
    peer_id: str | None = None
    participant_ids: list[str] = []

    def resolve_peer(self) -> str:
        """Return the other participant, accepting either request shape."""
        peer = self.peer_id or (self.participant_ids[0] if self.participant_ids else None)
        if not peer:
            raise ValidationError("peerId is required")
        return peer


class SendMessageRequest(WireModel):
    content: str
    kind: str = Field(
        default="text", validation_alias=AliasChoices("kind", "messageType", "message_type")
    )


class SubmitLocationRequest(UpdateLocationCommand):
    """Body of a location submitted over REST; same shape as the updateLocation event."""


class Joined(OutboundEvent):
    """Reply to a successful ``join``."""

    event_name: ClassVar[str] = "joined"

    user_id: str
    session_id: str


class ErrorReply(OutboundEvent):
    """Reply to an event that could not be handled."""

    event_name: ClassVar[str] = "error"

    code: str
    message: str
    ref: str | None = None


def _first_error(error: SchemaValidationError) -> str:
    details = error.errors()
    if not details:
        return "invalid payload"
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def parse_model(model: type[ModelT], data: Any, what: str) -> ModelT:
    """Validate ``data`` against ``model``, raising the domain ValidationError."""
    try:
        return model.model_validate(data)
    except SchemaValidationError as e:
        raise ValidationError(f"invalid {what}: {_first_error(e)}") from e


def decode_frame(text: str) -> tuple[str, Any]:
    """Split one inbound WebSocket frame into event name and raw payload.

    Raises:
        ValidationError: If the frame is not a JSON object or names an unknown
            event.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError("frames must be JSON objects") from e
    if not isinstance(raw, dict):
        raise ValidationError("frames must be JSON objects")

    name = raw.get("event")
    if not isinstance(name, str) or name not in COMMANDS:
        raise ValidationError(f"unknown event: {name}")
    return name, raw.get("data", {})


def parse_command(name: str, data: Any) -> WireModel:
    """Validate the payload of a known inbound event."""
    model = COMMANDS[name]
    # join(userId) may carry the bare id instead of an object
    if model is JoinCommand and isinstance(data, str):
        data = {"userId": data}
    return parse_model(model, data, f"{name} event")


def encode_event(event: OutboundEvent) -> dict[str, Any]:
    """Encode an outbound event as a WebSocket frame."""
    return {"event": event.event_name, "data": event.model_dump(mode="json", by_alias=True)}


def dump(model: BaseModel) -> dict[str, Any]:
    """Encode a model for a JSON response body."""
    return model.model_dump(mode="json", by_alias=True)
