"""
Tool discovery for the forum tools package.

A tool is any public coroutine defined in a module under
``nitan_mcp.core.tools`` whose first parameter is ``site``. The registry binds
that parameter to the process SiteState so MCP clients only see the remaining
arguments.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import Callable, Iterable, List, Set, Union, get_type_hints

from .site_state import SiteState

log = logging.getLogger("nitan_mcp.core.registry")

INJECTED_PARAM = "site"
TOOLS_PACKAGE = "nitan_mcp.core.tools"

SiteProvider = Callable[[], SiteState]


def discover_tool_modules(package_name: str = TOOLS_PACKAGE) -> List[ModuleType]:
    """Import every submodule of the tools package; a broken module is logged and left out."""
    package = importlib.import_module(package_name)
    found: List[ModuleType] = []

    for info in pkgutil.iter_modules(package.__path__, package.__name__ + "."):
        try:
            found.append(importlib.import_module(info.name))
        except Exception as exc:  # pragma: no cover - logged, not fatal
            log.error("Failed importing tool module %s: %s", info.name, exc)

    return found


def _takes_site(func: Callable) -> bool:
    params = list(inspect.signature(func).parameters)
    return bool(params) and params[0] == INJECTED_PARAM


def iter_tool_functions(module: ModuleType) -> Iterable[Callable]:
    """Coroutines defined in `module` (not imported into it) that take `site` first."""
    for name, func in inspect.getmembers(module, inspect.iscoroutinefunction):
        if name.startswith("_") or func.__module__ != module.__name__:
            continue
        if not _takes_site(func):
            log.debug("Not a tool, no leading site parameter: %s.%s", module.__name__, name)
            continue
        yield func


def _bind_site(func: Callable, provider: SiteProvider) -> Callable:
    """
    Wrap `func` so `site` comes from `provider` at call time.

    The wrapper advertises the tool's signature minus `site`, with string
    annotations resolved, because FastMCP builds the input schema from it.
    """
    sig = inspect.signature(func)
    hints = get_type_hints(func)
    visible = [
        p.replace(annotation=hints.get(p.name, p.annotation))
        for p in list(sig.parameters.values())[1:]
    ]

    async def bound(*args, **kwargs):
        return await func(provider(), *args, **kwargs)

    bound.__name__ = func.__name__
    bound.__doc__ = func.__doc__
    bound.__module__ = func.__module__
    bound.__signature__ = sig.replace(  # type: ignore[attr-defined]
        parameters=visible,
        return_annotation=hints.get("return", sig.return_annotation),
    )
    return bound


def register_discovered_tools(
    app,
    site: Union[SiteProvider, SiteState],
    modules: List[ModuleType] | None = None,
) -> List[str]:
    """
    Register every discovered tool on `app` (anything with a FastMCP-style
    ``tool(name=...)`` decorator) and return the sorted tool names.

    `site` is either the SiteState shared by all calls or a zero-argument
    callable returning one per call. Two tools with one name is an error.
    """
    if not hasattr(app, "tool"):
        raise TypeError("app must expose a 'tool' decorator")

    provider: SiteProvider = (lambda: site) if isinstance(site, SiteState) else site
    names: Set[str] = set()

    if modules is None:
        modules = discover_tool_modules()

    for module in modules:
        for func in iter_tool_functions(module):
            if func.__name__ in names:
                raise ValueError(f"Duplicate tool name detected: {func.__name__}")
            app.tool(name=func.__name__)(_bind_site(func, provider))
            names.add(func.__name__)
            log.info("tool.registered", extra={"tool": func.__name__})

    return sorted(names)


__all__ = [
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
]
