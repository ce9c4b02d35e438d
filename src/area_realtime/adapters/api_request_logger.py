"""Utility for logging collaborator requests when AREA_LOG_REQUESTS is enabled."""

import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)


def should_log_requests() -> bool:
    """Check if request logging is enabled via AREA_LOG_REQUESTS environment variable."""
    return os.getenv("AREA_LOG_REQUESTS", "").lower() == "true"


def _redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers from logging."""
    sensitive_keys = {"authorization", "cookie", "x-api-key", "x-admin-token"}
    return {k: "***REDACTED***" if k.lower() in sensitive_keys else v for k, v in headers.items()}


def log_api_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    status: int | None = None,
) -> None:
    """Log an outgoing collaborator request if AREA_LOG_REQUESTS is enabled.

    Args:
        method: HTTP method (GET, POST, etc.).
        url: Request URL.
        headers: Request headers (sensitive headers are redacted).
        status: Response status, if the response has arrived.
    """
    if not should_log_requests():
        return

    log_parts = [f"{method} {url}"]
    if headers:
        safe_headers = _redact_sensitive_headers(headers)
        log_parts.append(f"Headers: {json.dumps(safe_headers, indent=2)}")
    if status is not None:
        log_parts.append(f"Status: {status}")

    logger.info("API Request:\n" + "\n".join(log_parts))
