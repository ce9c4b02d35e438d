"""Friendship directory adapters."""

from area_realtime.adapters.directory.http_directory import HttpFriendshipDirectory
from area_realtime.adapters.directory.in_memory_directory import InMemoryFriendshipDirectory

__all__ = ["HttpFriendshipDirectory", "InMemoryFriendshipDirectory"]
