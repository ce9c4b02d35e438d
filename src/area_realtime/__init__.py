"""Real-time presence, location sharing and chat core for Area."""

__version__ = "0.1.0"
