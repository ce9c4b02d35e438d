"""Shared fixtures and fakes for the realtime tests."""

import asyncio
from typing import Any

import pytest

from area_realtime.adapters.config import AppConfig
from area_realtime.adapters.directory import InMemoryFriendshipDirectory
from area_realtime.adapters.storage import InMemoryChatRoomStore, InMemoryMessageStore
from area_realtime.domain.models.chat import ChatRoom, Message
from area_realtime.domain.models.events import OutboundEvent


class RecordingPublisher:
    """EventPublisher that remembers what it was asked to deliver."""

    def __init__(self) -> None:
        self.published: list[tuple[str, OutboundEvent]] = []

    async def publish(self, user_id: str, event: OutboundEvent) -> None:
        self.published.append((user_id, event))

    def events_for(self, user_id: str, event_type: type | None = None) -> list[Any]:
        return [
            event
            for recipient, event in self.published
            if recipient == user_id and (event_type is None or isinstance(event, event_type))
        ]

    def recipients(self, event_type: type) -> list[str]:
        return [recipient for recipient, event in self.published if isinstance(event, event_type)]

    def clear(self) -> None:
        self.published.clear()


class FakeConnection:
    """Connection that records frames instead of writing to a socket."""

    def __init__(self, fail_on_send: bool = False) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed_with: int | None = None
        self.fail_on_send = fail_on_send

    async def send_json(self, data: Any, mode: str = "text") -> None:  # noqa: ARG002
        if self.fail_on_send:
            raise ConnectionResetError("peer went away")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:  # noqa: ARG002
        self.closed_with = code

    def events(self, name: str) -> list[dict[str, Any]]:
        return [frame["data"] for frame in self.sent if frame["event"] == name]


class YieldingChatRoomStore(InMemoryChatRoomStore):
    """Room store that suspends like a database would, so concurrent callers interleave."""

    def __init__(self) -> None:
        super().__init__()
        self.inserts = 0

    async def find_by_pair(self, participant_a: str, participant_b: str) -> ChatRoom | None:
        await asyncio.sleep(0)
        return await super().find_by_pair(participant_a, participant_b)

    async def insert(self, room: ChatRoom) -> None:
        self.inserts += 1
        await asyncio.sleep(0)
        await super().insert(room)


class YieldingMessageStore(InMemoryMessageStore):
    """Message store that suspends between reading the tail and appending."""

    async def last_in_room(self, room_id: str) -> Message | None:
        await asyncio.sleep(0)
        return await super().last_in_room(room_id)

    async def append(self, message: Message) -> None:
        await asyncio.sleep(0)
        await super().append(message)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def directory() -> InMemoryFriendshipDirectory:
    """alice and bob are friends in a shared area; carol is bob's friend elsewhere."""
    return InMemoryFriendshipDirectory.from_settings(
        friendships=[("alice", "bob"), ("bob", "carol")],
        areas={"campus": ["alice", "bob"], "old-town": ["bob", "carol"], "harbour": ["dave"]},
    )


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        config_file=None, _env_file=None, location_buffer_size=4, outbox_max_events=50
    )


TOKENS = {"token-alice": "alice", "token-bob": "bob", "token-carol": "carol"}
