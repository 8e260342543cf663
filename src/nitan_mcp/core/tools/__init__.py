"""
Tool modules for nitan-mcp.

Every public coroutine function whose first parameter is `site` is discovered
and registered by nitan_mcp.core.registry.
"""
