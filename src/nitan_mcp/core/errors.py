from __future__ import annotations

from typing import Any


class ForumClientError(Exception):
    """Base error for forum client failures."""


class ForumHTTPError(ForumClientError):
    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        body: Any = None,
    ):
        super().__init__(f"{status_code} {method} {url}: {message}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.message = message
        self.body = body


class ForumTimeoutError(ForumClientError):
    def __init__(self, *, method: str, url: str, timeout_seconds: float):
        super().__init__(
            f"Request timeout after {timeout_seconds:g}s for {method} {url}"
        )
        self.method = method
        self.url = url
        self.timeout_seconds = timeout_seconds


NETWORK_HINT = (
    "Possible causes: DNS resolution failure, network connectivity issue, "
    "SSL/TLS error, or server unreachable."
)


class ForumNetworkError(ForumClientError):
    def __init__(self, *, method: str, url: str, detail: str):
        super().__init__(f"Network error for {method} {url}: {detail}. {NETWORK_HINT}")
        self.method = method
        self.url = url
        self.detail = detail


class ForumUnclassifiedError(ForumClientError):
    def __init__(self, *, error_type: str, message: str):
        super().__init__(f"{error_type}: {message}")
        self.error_type = error_type
        self.detail = message


class ForumConfigurationError(ForumClientError, ValueError):
    """Raised when a site selection or configuration value is missing/invalid."""


class ToolFailure(Exception):
    """User-facing tool error; transports render it as an error result."""


__all__ = [
    "ForumClientError",
    "ForumHTTPError",
    "ForumTimeoutError",
    "ForumNetworkError",
    "ForumUnclassifiedError",
    "ForumConfigurationError",
    "ToolFailure",
    "NETWORK_HINT",
]
