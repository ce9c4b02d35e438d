"""Storage adapters."""

from area_realtime.adapters.storage.memory_chat_store import (
    InMemoryChatRoomStore,
    InMemoryMessageStore,
)

__all__ = ["InMemoryChatRoomStore", "InMemoryMessageStore"]
