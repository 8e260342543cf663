"""Core domain surface for nitan-mcp (transport-agnostic)."""

from .auth import (
    ApiKeyAuth,
    AuthMode,
    LoginCredentials,
    NoAuth,
    SiteOverride,
    UserApiKeyAuth,
    auth_headers,
)
from .client import ForumClient, RetryConfig, parse_set_cookie
from .config import ForumSettings, build_site_state
from .errors import (
    ForumClientError,
    ForumConfigurationError,
    ForumHTTPError,
    ForumNetworkError,
    ForumTimeoutError,
    ForumUnclassifiedError,
    ToolFailure,
)
from .registry import (
    discover_tool_modules,
    iter_tool_functions,
    register_discovered_tools,
)
from .site_state import SiteSelection, SiteState, normalize_origin

__all__ = [
    # Client
    "ForumClient",
    "RetryConfig",
    "parse_set_cookie",
    # Auth
    "AuthMode",
    "NoAuth",
    "ApiKeyAuth",
    "UserApiKeyAuth",
    "LoginCredentials",
    "SiteOverride",
    "auth_headers",
    # Sites
    "SiteState",
    "SiteSelection",
    "normalize_origin",
    # Config helpers
    "ForumSettings",
    "build_site_state",
    # Exceptions
    "ForumClientError",
    "ForumHTTPError",
    "ForumTimeoutError",
    "ForumNetworkError",
    "ForumUnclassifiedError",
    "ForumConfigurationError",
    "ToolFailure",
    # Registry helpers
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
]
