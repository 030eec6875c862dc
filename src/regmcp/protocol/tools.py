"""Tool dispatch — ``tools/list`` and ``tools/call`` handlers.

Tool execution failures are an MCP-domain error: they produce a *successful*
JSON-RPC response whose result carries ``isError: true``.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from regmcp.protocol import jsonrpc
from regmcp.protocol.discovery import ToolDiscovery
from regmcp.protocol.errors import InvocationError, RegistryError
from regmcp.protocol.results import (
    ContentResult,
    EmptyResult,
    InvocationResult,
    MessagesResult,
    TextResult,
    coerce_result,
)
from regmcp.utils.telemetry import ATTR_ENTRY_ID, ATTR_TOOL_IS_ERROR, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from regmcp.protocol.models import Message
    from regmcp.protocol.provider import Invoker, Registry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class ToolHandler:
    """Answers tool methods using a registry for discovery and an invoker."""

    def __init__(self, registry: Registry, invoker: Invoker) -> None:
        self._discovery = ToolDiscovery(registry)
        self._invoker = invoker

    def handle(self, msg: Message) -> str | None:
        if msg.kind != "request":
            return None
        if msg.method == "tools/list":
            return self.handle_list(msg.id, msg.params)
        if msg.method == "tools/call":
            return self.handle_call(msg.id, msg.params)
        return None

    def handle_list(self, id: Any, params: dict[str, Any]) -> str:
        try:
            tools = self._discovery.discover()
        except RegistryError as exc:
            logger.warning("Tool discovery failed: %s", exc)
            return jsonrpc.internal_error(id, f"Failed to discover tools: {exc}")

        listing = [tools[name].to_listing() for name in sorted(tools)]
        return jsonrpc.encode_response(id, {"tools": listing})

    def handle_call(self, id: Any, params: dict[str, Any]) -> str:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            return jsonrpc.invalid_params(id, "Missing tool name")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            return jsonrpc.invalid_params(id, "Tool arguments must be an object")

        try:
            tools = self._discovery.discover()
        except RegistryError as exc:
            logger.warning("Tool discovery failed: %s", exc)
            return jsonrpc.internal_error(id, f"Failed to discover tools: {exc}")

        tool = tools.get(name)
        if tool is None:
            return jsonrpc.invalid_params(id, f"Unknown tool: {name}")

        with _tracer.start_as_current_span("regmcp.tool.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            span.set_attribute(ATTR_ENTRY_ID, tool.entry_id)
            try:
                result = coerce_result(self._invoker.call(tool.entry_id, arguments))
            except InvocationError as exc:
                logger.warning("Tool %s failed: %s", name, exc)
                span.set_attribute(ATTR_TOOL_IS_ERROR, True)
                text = exc.detail or str(exc)
                return jsonrpc.encode_response(
                    id, {"content": [{"type": "text", "text": text}], "isError": True}
                )
            span.set_attribute(ATTR_TOOL_IS_ERROR, False)

        return jsonrpc.encode_response(id, {"content": to_content(result), "isError": False})


def to_content(result: InvocationResult) -> list[Any]:
    """Normalize an invocation result into an MCP content list."""
    if isinstance(result, TextResult):
        return [{"type": "text", "text": result.text}]
    if isinstance(result, ContentResult):
        return result.content
    return [{"type": "text", "text": _as_text(result)}]


def _as_text(result: MessagesResult | EmptyResult) -> str:
    value = {"messages": result.messages} if isinstance(result, MessagesResult) else result.value
    if value is None:
        return ""
    if isinstance(value, dict | list):
        return json.dumps(value, default=str)
    return str(value)
