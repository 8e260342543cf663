from __future__ import annotations

import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from starlette.responses import Response

from nitan_mcp.core.config import ForumSettings, build_site_state
from nitan_mcp.core.registry import register_discovered_tools
from nitan_mcp.core.site_state import SiteState
from nitan_mcp.transports.http.config import HttpConfig
from nitan_mcp.transports.http.ops import build_ops_app, is_ops_path

log = logging.getLogger(__name__)


def build_fastmcp(
    cfg: HttpConfig | None = None,
    *,
    settings: Optional[ForumSettings] = None,
    site: Optional[SiteState] = None,
) -> FastMCP:
    """Create and configure a FastMCP instance with registered tools."""
    cfg = cfg or HttpConfig.from_env()
    site = site or build_site_state(settings or ForumSettings.from_env(use_dotenv=False))

    allowed_hosts = [cfg.host, f"{cfg.host}:*", "testserver"]
    transport_security = TransportSecuritySettings(
        enable_dns_rebinding_protection=True,
        allowed_hosts=allowed_hosts,
    )

    fastmcp = FastMCP(
        "nitan-mcp",
        json_response=cfg.json_response,
        stateless_http=cfg.stateless_http,
        streamable_http_path=cfg.path,
        host=cfg.host,
        port=cfg.port,
        transport_security=transport_security,
    )

    register_discovered_tools(fastmcp, site)

    log.info(
        "Built FastMCP (json_response=%s, stateless_http=%s, path=%s, host=%s, port=%s)",  # noqa: E501
        cfg.json_response,
        cfg.stateless_http,
        cfg.path,
        cfg.host,
        cfg.port,
    )
    return fastmcp


class OpsDispatcher:
    """
    ASGI wrapper that routes ops endpoints to a minimal app and everything else to the main app.
    Exposes router/state so callers using lifespan_context keep working.
    """  # noqa: E501

    def __init__(self, ops_app, main_app):
        self.ops_app = ops_app
        self.main_app = main_app
        self.router = main_app.router
        self.state = main_app.state

    async def __call__(self, scope, receive, send):
        path = scope.get("path", "")
        if is_ops_path(path):
            await self.ops_app(scope, receive, send)
            return
        await self.main_app(scope, receive, send)


def build_http_app(
    cfg: HttpConfig | None = None,
    *,
    settings: Optional[ForumSettings] = None,
):
    """Return an ASGI app that dispatches ops endpoints before the main FastMCP app."""
    cfg = cfg or HttpConfig.from_env()
    site = build_site_state(settings or ForumSettings.from_env(use_dotenv=False))
    fastmcp = build_fastmcp(cfg, site=site)
    main_app = fastmcp.streamable_http_app()
    main_app.mount("/mcp-sse", _build_sse_app(fastmcp, cfg), name="mcp-sse")

    main_app.state.site = site

    return OpsDispatcher(build_ops_app(site), main_app)


def _build_sse_app(fastmcp: FastMCP, cfg: HttpConfig):
    if not cfg.enable_sse:

        async def disabled_app(scope, receive, send):
            if scope.get("type") == "http":
                resp = Response(
                    json.dumps({"error": "sse_disabled", "message": "SSE not enabled"}),
                    status_code=405,
                    media_type="application/json",
                )
                await resp(scope, receive, send)

        return disabled_app

    return fastmcp.sse_app(mount_path="/mcp-sse")


__all__ = ["HttpConfig", "build_http_app", "build_fastmcp"]
