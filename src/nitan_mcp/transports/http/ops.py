from __future__ import annotations

from typing import Dict

from starlette.applications import Starlette
from starlette.responses import JSONResponse

from nitan_mcp.core.site_state import SiteState

OPS_PATHS = {"/health", "/healthz", "/readyz"}

_NO_STORE = {"Cache-Control": "no-store"}


def is_ops_path(path: str | None) -> bool:
    return bool(path) and path in OPS_PATHS


def readiness_checks(site: SiteState) -> Dict[str, bool]:
    """Evaluated per request; select_site() may change the answer at runtime."""
    return {
        "config_loaded": True,
        "site_selected": site.current_origin is not None,
    }


def build_readiness_status(
    checks: Dict[str, bool], site: SiteState | None = None
) -> Dict[str, object]:
    failed = [k for k, v in checks.items() if not v]
    payload: Dict[str, object] = {
        "status": "fail" if failed else "ok",
        "checks": checks,
        "failed": failed,
    }
    if site is not None:
        payload["site"] = site.current_origin
        payload["clients"] = len(site.clients)
    return payload


def build_ops_app(site: SiteState) -> Starlette:
    """Minimal app for liveness and readiness probes, served ahead of MCP routing."""

    async def healthz(_request):
        return JSONResponse({"status": "ok"}, headers=_NO_STORE)

    async def readyz(_request):
        payload = build_readiness_status(readiness_checks(site), site)
        return JSONResponse(
            payload,
            status_code=200 if payload["status"] == "ok" else 503,
            headers=_NO_STORE,
        )

    ops_app = Starlette()
    ops_app.add_route("/health", healthz, methods=["GET"])
    ops_app.add_route("/healthz", healthz, methods=["GET"])
    ops_app.add_route("/readyz", readyz, methods=["GET"])
    return ops_app


__all__ = [
    "OPS_PATHS",
    "build_ops_app",
    "build_readiness_status",
    "is_ops_path",
    "readiness_checks",
]
