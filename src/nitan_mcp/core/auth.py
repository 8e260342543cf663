"""Authentication modes, login credentials and per-site overrides."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class NoAuth:
    pass


@dataclass(frozen=True)
class ApiKeyAuth:
    """Administrative API key, optionally acting as a named user."""

    key: str
    username: Optional[str] = None


@dataclass(frozen=True)
class UserApiKeyAuth:
    """API key scoped to a single end user."""

    key: str
    client_id: Optional[str] = None


AuthMode = Union[NoAuth, ApiKeyAuth, UserApiKeyAuth]


@dataclass(frozen=True)
class LoginCredentials:
    username: str
    password: str
    second_factor_token: Optional[str] = None

    def __repr__(self) -> str:
        return f"LoginCredentials(username={self.username!r}, password='***')"


class SiteOverride(BaseModel):
    """Credentials configured for one site; matched by origin at resolution time."""

    site: str
    api_key: Optional[str] = None
    api_username: Optional[str] = None
    user_api_key: Optional[str] = None
    user_api_client_id: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    second_factor_token: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    def auth_mode(self) -> Optional[AuthMode]:
        if self.user_api_key:
            return UserApiKeyAuth(key=self.user_api_key, client_id=self.user_api_client_id)
        if self.api_key:
            return ApiKeyAuth(key=self.api_key, username=self.api_username)
        return None

    def login_credentials(self) -> Optional[LoginCredentials]:
        if self.username and self.password:
            return LoginCredentials(
                username=self.username,
                password=self.password,
                second_factor_token=self.second_factor_token,
            )
        return None


def auth_headers(auth: AuthMode) -> Dict[str, str]:
    """Render the request headers for an auth mode."""
    if isinstance(auth, NoAuth):
        return {}
    if isinstance(auth, ApiKeyAuth):
        headers = {"Api-Key": auth.key}
        if auth.username:
            headers["Api-Username"] = auth.username
        return headers
    if isinstance(auth, UserApiKeyAuth):
        headers = {"User-Api-Key": auth.key}
        if auth.client_id:
            headers["User-Api-Client-Id"] = auth.client_id
        return headers
    raise TypeError(f"Unsupported auth mode: {type(auth).__name__}")


def describe_auth(auth: AuthMode) -> str:
    if isinstance(auth, ApiKeyAuth):
        return "api_key"
    if isinstance(auth, UserApiKeyAuth):
        return "user_api_key"
    return "none"


__all__ = [
    "AuthMode",
    "NoAuth",
    "ApiKeyAuth",
    "UserApiKeyAuth",
    "LoginCredentials",
    "SiteOverride",
    "auth_headers",
    "describe_auth",
]
