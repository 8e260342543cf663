from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError

from .auth import ApiKeyAuth, AuthMode, NoAuth, SiteOverride, UserApiKeyAuth
from .errors import ForumConfigurationError
from .site_state import SiteState

DEFAULT_SITE_URL = "https://www.uscardforum.com/"
DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_LOG_LEVEL = "info"

_OVERRIDES_ADAPTER = TypeAdapter(List[SiteOverride])


def _env(name: str) -> Optional[str]:
    val = os.getenv(name, "").strip()
    return val or None


def parse_overrides(raw: Optional[str]) -> Tuple[SiteOverride, ...]:
    """Parse the NITAN_AUTH_OVERRIDES JSON array."""
    if not raw or not raw.strip():
        return ()
    try:
        return tuple(_OVERRIDES_ADAPTER.validate_json(raw))
    except ValidationError as exc:
        raise ForumConfigurationError(
            f"NITAN_AUTH_OVERRIDES must be a JSON array of site overrides: {exc}"
        ) from exc


def default_auth_from_env() -> AuthMode:
    user_api_key = _env("NITAN_USER_API_KEY")
    if user_api_key:
        return UserApiKeyAuth(
            key=user_api_key, client_id=_env("NITAN_USER_API_CLIENT_ID")
        )
    api_key = _env("NITAN_API_KEY")
    if api_key:
        return ApiKeyAuth(key=api_key, username=_env("NITAN_API_USERNAME"))
    return NoAuth()


@dataclass(frozen=True)
class ForumSettings:
    """Process-level settings shared by all transports."""

    site_url: str = DEFAULT_SITE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL
    default_auth: AuthMode = NoAuth()
    overrides: Tuple[SiteOverride, ...] = ()

    @classmethod
    def from_env(cls, *, use_dotenv: bool = True) -> "ForumSettings":
        if use_dotenv:
            load_dotenv()

        raw_timeout = _env("NITAN_TIMEOUT_S")
        try:
            timeout_seconds = (
                float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
            )
        except ValueError as exc:
            raise ForumConfigurationError(
                f"NITAN_TIMEOUT_S must be a number, got {raw_timeout!r}"
            ) from exc
        if timeout_seconds <= 0:
            raise ForumConfigurationError("NITAN_TIMEOUT_S must be greater than zero")

        return cls(
            site_url=_env("NITAN_SITE_URL") or DEFAULT_SITE_URL,
            timeout_seconds=timeout_seconds,
            log_level=_env("NITAN_LOG_LEVEL") or DEFAULT_LOG_LEVEL,
            default_auth=default_auth_from_env(),
            overrides=parse_overrides(os.getenv("NITAN_AUTH_OVERRIDES")),
        )


def build_site_state(settings: Optional[ForumSettings] = None) -> SiteState:
    """Create the SiteState for a process and pre-select the default site."""
    settings = settings or ForumSettings.from_env()
    state = SiteState(
        timeout_seconds=settings.timeout_seconds,
        default_auth=settings.default_auth,
        overrides=settings.overrides,
    )
    state.select_site(settings.site_url)
    return state


__all__ = [
    "ForumSettings",
    "build_site_state",
    "parse_overrides",
    "default_auth_from_env",
    "DEFAULT_SITE_URL",
    "DEFAULT_TIMEOUT_SECONDS",
]
