"""Token validation adapters."""

from area_realtime.adapters.auth.http_token_validator import HttpTokenValidator
from area_realtime.adapters.auth.static_token_validator import StaticTokenValidator

__all__ = ["HttpTokenValidator", "StaticTokenValidator"]
