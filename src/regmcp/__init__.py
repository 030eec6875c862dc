"""regmcp — registry-backed Model Context Protocol server engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from regmcp.server import McpServer as McpServer

_LAZY_EXPORTS = {
    "McpServer": "regmcp.server",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'regmcp' has no attribute {name!r}")
