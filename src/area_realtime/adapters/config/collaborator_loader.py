"""Loads development collaborator data (tokens, friendships, areas) from TOML."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from area_realtime.adapters.config.app_config import AppConfig

logger = logging.getLogger(__name__)


class CollaboratorSettings(BaseModel):
    """Tokens, friendships and areas for the in-memory collaborators."""

    model_config = ConfigDict(frozen=True)

    tokens: dict[str, str] = {}
    friendships: list[tuple[str, str]] = []
    areas: dict[str, frozenset[str]] = {}


class CollaboratorConfigurationLoader:
    """Loads collaborator settings from app config."""

    @staticmethod
    def load_tokens(data: Any) -> dict[str, str]:
        """Parse ``[tokens]``: a table mapping token to user id."""
        if not isinstance(data, dict):
            raise ValueError("TOML config 'tokens' must be a table of token = user id")
        return {str(token): str(user_id) for token, user_id in data.items() if user_id}

    @staticmethod
    def load_friendships(data: Any) -> list[tuple[str, str]]:
        """Parse ``[[friendships]]`` entries with a two-element ``users`` list."""
        if not isinstance(data, list):
            raise ValueError("TOML config 'friendships' must be a list")

        friendships: list[tuple[str, str]] = []
        for entry in data:
            users = entry.get("users") if isinstance(entry, dict) else None
            if not isinstance(users, list) or len(users) != 2:
                raise ValueError("Each friendship needs 'users' with exactly two user ids")
            user_a, user_b = (str(user) for user in users)
            if user_a == user_b:
                raise ValueError(f"A user cannot befriend themselves: {user_a}")
            friendships.append((user_a, user_b))
        return friendships

    @staticmethod
    def load_areas(data: Any) -> dict[str, frozenset[str]]:
        """Parse ``[[areas]]`` entries with an ``id`` and a ``members`` list."""
        if not isinstance(data, list):
            raise ValueError("TOML config 'areas' must be a list")

        areas: dict[str, frozenset[str]] = {}
        for entry in data:
            if not isinstance(entry, dict) or "id" not in entry:
                raise ValueError("All areas must have an 'id' field")
            area_id = str(entry["id"])
            if area_id in areas:
                raise ValueError(f"Area ids must be unique. Duplicate id found: {area_id}")
            members = entry.get("members", [])
            if not isinstance(members, list):
                raise ValueError(f"Members of area '{area_id}' must be a list")
            areas[area_id] = frozenset(str(member) for member in members)
        return areas

    @staticmethod
    def load(config: AppConfig) -> CollaboratorSettings:
        """Load collaborator settings from the configured TOML file."""
        toml_data = config.load_toml_data()

        settings = CollaboratorSettings(
            tokens=CollaboratorConfigurationLoader.load_tokens(toml_data.get("tokens", {})),
            friendships=CollaboratorConfigurationLoader.load_friendships(
                toml_data.get("friendships", [])
            ),
            areas=CollaboratorConfigurationLoader.load_areas(toml_data.get("areas", [])),
        )
        logger.info(
            f"Loaded {len(settings.tokens)} token(s), {len(settings.friendships)} friendship(s) "
            f"and {len(settings.areas)} area(s) from {config.config_file}"
        )
        return settings
