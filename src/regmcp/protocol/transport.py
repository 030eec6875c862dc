"""Stdio transport — newline-delimited JSON-RPC over a pair of streams.

Strictly one-in-one-out: each line's output (if any) is written and flushed
before the next line is read.  End of stream is a graceful shutdown.

Input is read as raw bytes so that a line which is not valid UTF-8 reaches
the codec (and is answered with ``parse_error``) instead of breaking the
read loop.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, TYPE_CHECKING, Any, TextIO

if TYPE_CHECKING:
    from regmcp.protocol.dispatcher import Dispatcher

logger = logging.getLogger(__name__)


class StdioTransport:
    """Reads requests from *reader* and writes responses to *writer*.

    *reader* may yield ``bytes`` or ``str`` lines; it defaults to the binary
    buffer behind ``sys.stdin``.
    """

    def __init__(self, reader: IO[Any] | None = None, writer: TextIO | None = None) -> None:
        self._reader = reader if reader is not None else sys.stdin.buffer
        self._writer = writer if writer is not None else sys.stdout

    def send(self, line: str) -> None:
        """Write a single output line and flush it."""
        self._writer.write(line + "\n")
        self._writer.flush()

    def serve(self, dispatcher: Dispatcher) -> int:
        """Process lines until end of stream; return the exit code (always 0)."""
        logger.info("Serving on stdio")
        handled = 0
        for raw in self._reader:
            line = raw.strip()
            if not line:
                continue
            response = dispatcher.handle_line(line)
            handled += 1
            if response is not None:
                self.send(response)
        logger.info("End of input after %d message(s); shutting down", handled)
        return 0
