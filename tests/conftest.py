"""Shared fixtures: an in-memory registry with sample tools and prompts."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest

from regmcp.config import ServerConfig
from regmcp.protocol.dispatcher import Dispatcher
from regmcp.registry import HandlerInvoker, InMemoryRegistry
from regmcp.server import McpServer

_WEATHER = {"London": "Cloudy, 15C", "Lisbon": "Sunny, 24C"}
DEFAULT_FORECAST = "No data for this location. Default forecast: clear skies, 20C"


def get_weather(arguments: dict[str, Any]) -> str:
    return _WEATHER.get(arguments.get("location", ""), DEFAULT_FORECAST)


def explode(arguments: dict[str, Any]) -> str:
    raise RuntimeError("disk on fire")


def report(arguments: dict[str, Any]) -> dict[str, Any]:
    return {
        "content": [
            {"type": "text", "text": "part one"},
            {"type": "text", "text": "part two"},
        ]
    }


def count(arguments: dict[str, Any]) -> int:
    return 42


def daily(arguments: dict[str, Any]) -> str:
    return f"Plan the day for {arguments.get('who', 'me')}"


def conversation(arguments: dict[str, Any]) -> dict[str, Any]:
    return {
        "messages": [
            {"role": "user", "content": {"type": "text", "text": "hello"}},
            {"role": "assistant", "content": {"type": "text", "text": "hi"}},
        ]
    }


def broken(arguments: dict[str, Any]) -> str:
    raise ValueError("template store unavailable")


HANDLERS: dict[str, Callable[[dict[str, Any]], Any]] = {
    "weather:get_weather": get_weather,
    "ops:explode": explode,
    "ops:report": report,
    "ops:count": count,
    "prompts:daily": daily,
    "prompts:conversation": conversation,
    "prompts:broken": broken,
}


def build_registry() -> InMemoryRegistry:
    registry = InMemoryRegistry()
    registry.add(
        "weather:get_weather",
        meta={
            "mcp.tool": True,
            "mcp.name": "get_weather",
            "mcp.description": "Current weather for a city.",
            "mcp.inputSchema": {
                "type": "object",
                "properties": {"location": {"type": "string"}},
                "required": ["location"],
            },
            "mcp.annotations": {"readOnlyHint": True},
        },
    )
    registry.add("ops:explode", meta={"mcp.tool": True, "mcp.name": "explode"})
    registry.add("ops:report", meta={"mcp.tool": True, "mcp.name": "report"})
    registry.add("ops:count", meta={"mcp.tool": True})
    registry.add("ops:internal", meta={"description": "not exposed"})
    registry.add(
        "prompts:greeting",
        meta={
            "mcp.prompt": True,
            "mcp.prompt.name": "greeting",
            "mcp.prompt.description": "Greets someone.",
            "mcp.prompt.arguments": [
                {"name": "name", "description": "Who to greet", "required": True},
                {"name": "style"},
            ],
            "mcp.prompt.messages": [
                {"role": "user", "content": "Hi {{name}}, style {{style}}"},
            ],
        },
    )
    registry.add(
        "prompts:persona",
        meta={
            "mcp.prompt": True,
            "mcp.prompt.name": "persona",
            "mcp.prompt.type": "template",
            "mcp.prompt.messages": [
                {"role": "assistant", "content": "You are a {{tone}} assistant."},
            ],
        },
    )
    registry.add(
        "prompts:review",
        meta={
            "mcp.prompt": True,
            "mcp.prompt.name": "review",
            "mcp.prompt.description": "Code review.",
            "mcp.prompt.extend": [
                {"id": "persona", "arguments": {"tone": "{{style}} reviewer"}},
            ],
            "mcp.prompt.messages": [
                {"content": {"type": "text", "text": "Review {{file}}."}},
            ],
        },
    )
    registry.add("prompts:daily", meta={"mcp.prompt": True, "mcp.prompt.name": "daily"})
    registry.add(
        "prompts:conversation", meta={"mcp.prompt": True, "mcp.prompt.name": "conversation"}
    )
    registry.add("prompts:broken", meta={"mcp.prompt": True, "mcp.prompt.name": "broken"})
    return registry


@pytest.fixture
def registry() -> InMemoryRegistry:
    return build_registry()


@pytest.fixture
def invoker() -> HandlerInvoker:
    return HandlerInvoker(handlers=HANDLERS, timeout=5.0)


@pytest.fixture
def server(registry: InMemoryRegistry, invoker: HandlerInvoker) -> McpServer:
    return McpServer(ServerConfig(name="test-server", version="9.9.9"), registry, invoker)


@pytest.fixture
def dispatcher(server: McpServer) -> Dispatcher:
    return server.connect()


RpcCall = Callable[..., dict[str, Any] | None]


@pytest.fixture
def rpc(dispatcher: Dispatcher) -> RpcCall:
    """Send a request (or a notification when ``id`` is omitted) and parse the reply."""

    def _call(method: str, params: dict[str, Any] | None = None, *, id: Any = ...) -> Any:
        payload: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            payload["params"] = params
        if id is not ...:
            payload["id"] = id
        out = dispatcher.handle_line(json.dumps(payload))
        return None if out is None else json.loads(out)

    return _call


@pytest.fixture
def ready_rpc(rpc: RpcCall) -> RpcCall:
    """Like ``rpc``, but the connection has already completed the handshake."""
    rpc("initialize", {"clientInfo": {"name": "pytest", "version": "1"}}, id=0)
    rpc("notifications/initialized")
    return rpc
