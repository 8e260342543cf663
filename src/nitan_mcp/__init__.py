"""nitan_mcp package exports."""

from .core.auth import (
    ApiKeyAuth,
    AuthMode,
    LoginCredentials,
    NoAuth,
    SiteOverride,
    UserApiKeyAuth,
)
from .core.client import ForumClient, RetryConfig
from .core.errors import (
    ForumClientError,
    ForumConfigurationError,
    ForumHTTPError,
    ForumNetworkError,
    ForumTimeoutError,
    ForumUnclassifiedError,
    ToolFailure,
)
from .core.site_state import SiteSelection, SiteState, normalize_origin

__all__ = [
    # Client
    "ForumClient",
    "RetryConfig",
    # Sites
    "SiteState",
    "SiteSelection",
    "normalize_origin",
    # Auth
    "AuthMode",
    "NoAuth",
    "ApiKeyAuth",
    "UserApiKeyAuth",
    "LoginCredentials",
    "SiteOverride",
    # Exceptions
    "ForumClientError",
    "ForumHTTPError",
    "ForumTimeoutError",
    "ForumNetworkError",
    "ForumUnclassifiedError",
    "ForumConfigurationError",
    "ToolFailure",
]
