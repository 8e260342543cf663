from __future__ import annotations

import asyncio

from mcp.server.fastmcp import FastMCP

from nitan_mcp.core.config import ForumSettings, build_site_state
from nitan_mcp.core.logging import setup_logging
from nitan_mcp.core.registry import register_discovered_tools


async def main() -> None:
    settings = ForumSettings.from_env(use_dotenv=True)
    setup_logging(settings.log_level)
    site = build_site_state(settings)

    app = FastMCP("nitan-mcp")
    register_discovered_tools(app, site)

    try:
        await app.run_stdio_async()
    finally:
        await site.aclose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
