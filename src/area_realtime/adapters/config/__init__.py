"""Configuration adapters."""

from area_realtime.adapters.config.app_config import AppConfig
from area_realtime.adapters.config.collaborator_loader import (
    CollaboratorConfigurationLoader,
    CollaboratorSettings,
)

__all__ = ["AppConfig", "CollaboratorConfigurationLoader", "CollaboratorSettings"]
