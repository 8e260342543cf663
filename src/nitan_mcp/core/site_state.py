"""Per-site client registry and active-site selection."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, NamedTuple, Optional, Tuple
from urllib.parse import urlsplit

from .auth import AuthMode, LoginCredentials, NoAuth, SiteOverride, describe_auth
from .client import ForumClient, RetryConfig
from .errors import ForumConfigurationError

NO_SITE_SELECTED = "No site selected. Call discourse_select_site first."

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _split_origin(url: str) -> Tuple[str, str, Optional[int]]:
    raw = (url or "").strip()
    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError as exc:
        raise ForumConfigurationError(f"Invalid site URL: {url!r}") from exc
    if not parts.scheme or not parts.hostname:
        raise ForumConfigurationError(f"Invalid site URL: {url!r}")

    scheme = parts.scheme.lower()
    if port == _DEFAULT_PORTS.get(scheme):
        port = None
    return scheme, parts.hostname.lower(), port


def normalize_origin(url: str) -> str:
    """Reduce a URL to scheme://host[:port] (no path, query, fragment or slash)."""
    scheme, host, port = _split_origin(url)
    if ":" in host:
        host = f"[{host}]"
    if port is None:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


class SiteSelection(NamedTuple):
    origin: str
    client: ForumClient


class SiteState:
    """
    Registry of one ForumClient per origin plus the currently selected site.
    - Clients are memoized by origin and never evicted
    - Auth: matching override's user_api_key > api_key > default_auth
    - The active site only changes through select_site()
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 15.0,
        default_auth: Optional[AuthMode] = None,
        overrides: Optional[Iterable[SiteOverride]] = None,
        retry: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self.default_auth: AuthMode = (
            default_auth if default_auth is not None else NoAuth()
        )
        self.overrides: Tuple[SiteOverride, ...] = tuple(overrides or ())
        self.retry = retry
        self.log = logger or logging.getLogger("nitan_mcp")

        self._clients: Dict[str, ForumClient] = {}
        self._current: Optional[SiteSelection] = None

    @property
    def current_origin(self) -> Optional[str]:
        return self._current.origin if self._current else None

    @property
    def clients(self) -> Dict[str, ForumClient]:
        return dict(self._clients)

    def select_site(self, url: str) -> SiteSelection:
        selection = self.build_client_for_site(url)
        self._current = selection
        self.log.info("site.selected", extra={"origin": selection.origin})
        return selection

    def ensure_selected_site(self) -> SiteSelection:
        if self._current is None:
            raise ForumConfigurationError(NO_SITE_SELECTED)
        return self._current

    def build_client_for_site(self, url: str) -> SiteSelection:
        origin = normalize_origin(url)
        cached = self._clients.get(origin)
        if cached is not None:
            return SiteSelection(origin, cached)

        auth = self.resolve_auth(origin)
        client = ForumClient(
            base_url=origin,
            timeout_seconds=self.timeout_seconds,
            auth=auth,
            login=self.resolve_login(origin),
            retry=self.retry,
            logger=self.log,
        )
        self._clients[origin] = client
        self.log.debug(
            "site.client_built", extra={"origin": origin, "auth": describe_auth(auth)}
        )
        return SiteSelection(origin, client)

    def resolve_auth(self, origin: str) -> AuthMode:
        match = self._find_override(origin)
        if match is not None:
            auth = match.auth_mode()
            if auth is not None:
                return auth
        return self.default_auth

    def resolve_login(self, origin: str) -> Optional[LoginCredentials]:
        match = self._find_override(origin)
        return match.login_credentials() if match is not None else None

    def _find_override(self, origin: str) -> Optional[SiteOverride]:
        # Overrides are compared at origin level, so "https://x.com/sub" matches
        # "https://x.com". First match wins.
        for override in self.overrides:
            try:
                candidate = normalize_origin(override.site)
            except ForumConfigurationError:
                continue
            if candidate == origin:
                return override
        return None

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.aclose()


__all__ = [
    "SiteState",
    "SiteSelection",
    "normalize_origin",
    "NO_SITE_SELECTED",
]
