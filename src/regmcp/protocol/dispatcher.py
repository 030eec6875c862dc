"""Dispatcher — routes classified messages through the ordered stage chain.

Order: Lifecycle → tool dispatch → prompt dispatch.  The first stage that
returns output wins.  Requests no stage claims get ``method_not_found``;
notifications never get a fallback error.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from regmcp.protocol import jsonrpc
from regmcp.utils.telemetry import ATTR_MESSAGE_KIND, ATTR_METHOD, get_tracer

if TYPE_CHECKING:
    from regmcp.protocol.lifecycle import Lifecycle
    from regmcp.protocol.models import Message

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class Stage(Protocol):
    """A dispatch stage: returns an encoded response or ``None`` to decline."""

    def handle(self, msg: Message) -> str | None: ...


class Dispatcher:
    """One connection's message router.

    Usage::

        dispatcher = Dispatcher(lifecycle, [ToolHandler(reg, inv), PromptHandler(reg, inv)])
        out = dispatcher.handle_line('{"jsonrpc": "2.0", "id": 1, "method": "ping"}')
    """

    def __init__(self, lifecycle: Lifecycle, stages: list[Stage] | None = None) -> None:
        self._lifecycle = lifecycle
        self._stages: list[Stage] = list(stages or [])

    @property
    def lifecycle(self) -> Lifecycle:
        return self._lifecycle

    def handle_line(self, line: str | bytes) -> str | None:
        """Decode *line* and dispatch it; return the output line, if any."""
        return self.handle(jsonrpc.decode(line))

    def handle(self, msg: Message) -> str | None:
        """Dispatch an already-decoded message."""
        if msg.kind == "invalid":
            logger.debug("Rejecting invalid message: %s", msg.error)
            return jsonrpc.parse_error(None, msg.error or "Invalid message")

        with _tracer.start_as_current_span("regmcp.dispatch") as span:
            span.set_attribute(ATTR_METHOD, msg.method or "")
            span.set_attribute(ATTR_MESSAGE_KIND, msg.kind)

            for stage in [self._lifecycle, *self._stages]:
                try:
                    response = stage.handle(msg)
                except Exception as exc:
                    logger.exception("Stage %s failed on %s", type(stage).__name__, msg.method)
                    if msg.is_request:
                        return jsonrpc.internal_error(msg.id, f"Internal error: {exc}")
                    return None
                if response is not None:
                    logger.debug("%s handled by %s", msg.method, type(stage).__name__)
                    return response

        if msg.is_request:
            return jsonrpc.method_not_found(msg.id, f"Unknown method: {msg.method}")
        return None
