from __future__ import annotations

import asyncio

import uvicorn

from nitan_mcp.core.config import ForumSettings
from nitan_mcp.core.logging import resolve_level, setup_logging

from .app import build_http_app
from .config import HttpConfig


async def main() -> None:
    settings = ForumSettings.from_env(use_dotenv=True)
    setup_logging(settings.log_level)
    cfg = HttpConfig.from_env()
    app = build_http_app(cfg, settings=settings)

    # Same server setup FastMCP uses, but with the ops endpoints in front.
    config = uvicorn.Config(
        app,
        host=cfg.host,
        port=cfg.port,
        log_level=resolve_level(settings.log_level),
        lifespan="on",
    )
    try:
        await uvicorn.Server(config).serve()
    finally:
        await app.state.site.aclose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
