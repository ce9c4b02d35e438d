"""Chat room and message domain models."""

from datetime import datetime
from enum import StrEnum

from pydantic import field_serializer

from area_realtime.domain.errors import ValidationError
from area_realtime.domain.models.base import DomainModel


class MessageKind(StrEnum):
    """Kinds of chat message a client can send."""

    TEXT = "text"
    IMAGE = "image"
    LOCATION = "location"
    AREA = "area"

    @classmethod
    def parse(cls, value: "str | MessageKind") -> "MessageKind":
        """Parse a kind case-insensitively.

        Raises:
            ValidationError: If the value names no known kind.
        """
        try:
            return cls(str(value).lower())
        except ValueError as e:
            allowed = ", ".join(kind.value for kind in cls)
            raise ValidationError(f"message kind must be one of: {allowed}") from e


def canonical_pair(user_a: str, user_b: str) -> tuple[str, str]:
    """Order a participant pair so that the smaller id comes first.

    Raises:
        ValidationError: If an id is blank or both ids are the same user.
    """
    if not user_a or not user_b:
        raise ValidationError("both participant ids are required")
    if user_a == user_b:
        raise ValidationError("a chat room needs two different participants")
    return (user_a, user_b) if user_a < user_b else (user_b, user_a)


class ChatRoom(DomainModel):
    """The unique chat channel between two users."""

    id: str
    participant_a: str
    participant_b: str
    created_at: datetime
    updated_at: datetime

    @property
    def participants(self) -> tuple[str, str]:
        return (self.participant_a, self.participant_b)

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.participant_a, self.participant_b)

    def other_participant(self, user_id: str) -> str:
        return self.participant_b if user_id == self.participant_a else self.participant_a


class Message(DomainModel):
    """A chat message.

    Immutable apart from ``read_by``, which only ever grows. ``sequence`` is
    the per-room position assigned by the ordering authority and starts at 1.
    """

    id: str
    room_id: str
    sender_id: str
    content: str
    kind: MessageKind
    sequence: int
    created_at: datetime
    read_by: frozenset[str] = frozenset()

    @field_serializer("read_by")
    def _serialize_read_by(self, read_by: frozenset[str]) -> list[str]:
        return sorted(read_by)

    def is_unread_by(self, user_id: str) -> bool:
        return self.sender_id != user_id and user_id not in self.read_by


class RoomSummary(DomainModel):
    """Room list entry: the room, its latest message and the caller's unread count."""

    room: ChatRoom
    last_message: Message | None = None
    unread_count: int = 0


class MessagePage(DomainModel):
    """One page of room history.

    ``next_cursor`` is the sequence to pass as cursor for the following page,
    or None when the page was not full.
    """

    messages: list[Message]
    next_cursor: int | None = None
