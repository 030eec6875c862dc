"""McpServer — builds isolated per-connection dispatchers.

Usage::

    registry = ManifestRegistry("registry.yaml")
    server = McpServer(ServerConfig(), registry, HandlerInvoker(registry))
    server.serve_stdio()            # blocks until stdin closes

Every call to :meth:`McpServer.connect` creates a fresh
:class:`~regmcp.protocol.lifecycle.Lifecycle`, so connections never share
handshake state.  The registry and invoker are shared, read-only collaborators.
"""

from __future__ import annotations

import logging
from typing import IO, TYPE_CHECKING, Any, TextIO

from regmcp.config import ServerConfig
from regmcp.protocol.dispatcher import Dispatcher, Stage
from regmcp.protocol.lifecycle import Lifecycle
from regmcp.protocol.prompts import PromptHandler
from regmcp.protocol.tools import ToolHandler
from regmcp.protocol.transport import StdioTransport

if TYPE_CHECKING:
    from regmcp.protocol.provider import Invoker, Registry

logger = logging.getLogger(__name__)


class McpServer:
    """Server factory wiring config, registry, and invoker into dispatchers."""

    def __init__(
        self,
        config: ServerConfig | None,
        registry: Registry,
        invoker: Invoker,
    ) -> None:
        self._config = config or ServerConfig()
        self._registry = registry
        self._invoker = invoker

    @property
    def config(self) -> ServerConfig:
        return self._config

    def connect(self) -> Dispatcher:
        """Return a new dispatcher with its own lifecycle state."""
        lifecycle = Lifecycle(
            self._config.server_info,
            capabilities=self._config.capabilities.model_copy(),
            instructions=self._config.instructions,
            protocol_version=self._config.protocol_version,
        )
        stages: list[Stage] = []
        if self._config.capabilities.tools:
            stages.append(ToolHandler(self._registry, self._invoker))
        if self._config.capabilities.prompts:
            stages.append(PromptHandler(self._registry, self._invoker))
        return Dispatcher(lifecycle, stages)

    def serve_stdio(self, reader: IO[Any] | None = None, writer: TextIO | None = None) -> int:
        """Serve a single connection over stdio; return the exit code."""
        logger.info("Starting %s %s", self._config.name, self._config.version)
        return StdioTransport(reader, writer).serve(self.connect())
