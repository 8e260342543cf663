#!/usr/bin/env python3
"""
Keep nitan_mcp.core transport-agnostic.
Fails when any module under src/nitan_mcp/core/ imports the MCP SDK, an ASGI
stack or nitan_mcp.transports.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path
from typing import Iterator, Tuple

REPO_ROOT = Path(__file__).resolve().parent.parent
CORE_DIR = REPO_ROOT / "src" / "nitan_mcp" / "core"

FORBIDDEN_PREFIXES = (
    "mcp",
    "starlette",
    "uvicorn",
    "nitan_mcp.transports",
)


def is_forbidden(module: str) -> bool:
    return any(
        module == prefix or module.startswith(prefix + ".")
        for prefix in FORBIDDEN_PREFIXES
    )


def _imported_modules(tree: ast.AST) -> Iterator[Tuple[int, str]]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
            yield node.lineno, node.module


def scan_file(path: Path) -> list[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    return [
        f"{path.relative_to(REPO_ROOT)}:{lineno}: forbidden import '{module}'"
        for lineno, module in _imported_modules(tree)
        if is_forbidden(module)
    ]


def main() -> int:
    violations: list[str] = []
    for py_file in sorted(CORE_DIR.rglob("*.py")):
        violations.extend(scan_file(py_file))

    for v in violations:
        print(v, file=sys.stderr)
    return 1 if violations else 0


if __name__ == "__main__":
    sys.exit(main())
