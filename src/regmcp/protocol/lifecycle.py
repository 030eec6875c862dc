"""Lifecycle — the per-connection handshake state machine.

Gates which methods are reachable.  Until ``initialize`` succeeds every
request other than ``initialize`` is answered with ``invalid_request``, so no
tool or prompt method can execute before the handshake completes.
"""

from __future__ import annotations

import logging
from typing import Any

from regmcp.protocol import jsonrpc
from regmcp.protocol.models import CapabilitySettings, Message, Phase, ServerInfo, ServerState

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-06-18"

INITIALIZED_NOTIFICATION = "notifications/initialized"


class Lifecycle:
    """Owns a connection's :class:`ServerState` and answers handshake methods.

    :meth:`handle` returns an encoded response line, or ``None`` when the
    message should be passed on to later dispatch stages (or, for
    notifications, dropped).
    """

    def __init__(
        self,
        server_info: ServerInfo,
        *,
        capabilities: CapabilitySettings | None = None,
        instructions: str | None = None,
        protocol_version: str = PROTOCOL_VERSION,
    ) -> None:
        self._protocol_version = protocol_version
        self._state = ServerState(
            server_info=server_info,
            capabilities=capabilities or CapabilitySettings(),
            instructions=instructions,
        )

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state.phase == Phase.READY

    def handle(self, msg: Message) -> str | None:
        if msg.kind == "notification":
            if msg.method == INITIALIZED_NOTIFICATION:
                logger.debug("Client confirmed initialization")
            return None

        if msg.kind != "request":
            return None

        if msg.method == "initialize":
            return self._handle_initialize(msg)

        if not self.ready:
            return jsonrpc.invalid_request(msg.id, "Server not initialized")

        if msg.method == "ping":
            return jsonrpc.encode_response(msg.id, {})

        return None

    def _handle_initialize(self, msg: Message) -> str:
        if self._state.phase != Phase.DISCONNECTED:
            return jsonrpc.invalid_request(msg.id, "Server already initialized")

        client_info = msg.params.get("clientInfo")
        self._state.client_info = client_info if isinstance(client_info, dict) else None
        requested = msg.params.get("protocolVersion")
        self._state.client_protocol_version = requested if isinstance(requested, str) else None
        self._state.phase = Phase.READY

        logger.info(
            "Initialized for client %s (requested protocol %s)",
            (self._state.client_info or {}).get("name", "<unknown>"),
            self._state.client_protocol_version,
        )
        return jsonrpc.encode_response(msg.id, self._build_init_result())

    def _build_init_result(self) -> dict[str, Any]:
        capabilities = {name: {"listChanged": False} for name in self._state.capabilities.enabled()}
        result: dict[str, Any] = {
            "protocolVersion": self._protocol_version,
            "capabilities": capabilities,
            "serverInfo": self._state.server_info.model_dump(),
        }
        if self._state.instructions is not None:
            result["instructions"] = self._state.instructions
        return result
