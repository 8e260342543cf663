from __future__ import annotations

import os
from dataclasses import dataclass


def _get_bool_env(name: str, default: bool) -> bool:
    """Parse a boolean environment variable with a safe default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw.replace("_", ""))


@dataclass(frozen=True)
class HttpConfig:
    """Minimal configuration for the HTTP transport runner."""

    host: str = "127.0.0.1"
    port: int = 8000
    path: str = "/mcp"
    json_response: bool = True
    stateless_http: bool = True
    enable_sse: bool = False

    @classmethod
    def from_env(cls) -> "HttpConfig":
        port = _read_int_env("FASTMCP_PORT", cls.port)
        if not 0 < port < 65536:
            raise ValueError("FASTMCP_PORT must be between 1 and 65535")

        path = os.getenv("FASTMCP_STREAMABLE_HTTP_PATH", cls.path).strip() or cls.path
        if not path.startswith("/"):
            raise ValueError("FASTMCP_STREAMABLE_HTTP_PATH must start with '/'")

        return cls(
            host=os.getenv("FASTMCP_HOST", cls.host),
            port=port,
            path=path,
            json_response=_get_bool_env("FASTMCP_JSON_RESPONSE", cls.json_response),
            stateless_http=_get_bool_env("FASTMCP_STATELESS_HTTP", cls.stateless_http),
            enable_sse=_get_bool_env("MCP_ENABLE_SSE", cls.enable_sse),
        )


__all__ = ["HttpConfig"]
