"""HandlerInvoker — runs Python callables attached to registry entries.

Handlers are looked up in an explicit ``handlers`` mapping first, then
imported from the entry's ``handler`` path (``package.module:attribute``).
A handler receives the arguments mapping as its single positional argument
and may return text, a mapping with ``content`` or ``messages``, or anything
else (see :func:`~regmcp.protocol.results.coerce_result`).

Each call runs on a daemon worker thread bounded by ``timeout``.  A timed-out
handler cannot be interrupted; its thread is abandoned and the caller gets
an :class:`~regmcp.protocol.errors.InvocationTimeoutError`.
"""

from __future__ import annotations

import importlib
import logging
import threading
from typing import TYPE_CHECKING, Any, Protocol

from regmcp.protocol.errors import InvocationError, InvocationTimeoutError, RegistryError
from regmcp.protocol.results import InvocationResult, coerce_result

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from regmcp.protocol.models import RegistryEntry

logger = logging.getLogger(__name__)


class EntryLookup(Protocol):
    """Resolves a single registry entry by id."""

    def get(self, entry_id: str) -> RegistryEntry | None: ...


class HandlerInvoker:
    """Satisfies the :class:`~regmcp.protocol.provider.Invoker` protocol."""

    def __init__(
        self,
        lookup: EntryLookup | None = None,
        *,
        handlers: Mapping[str, Callable[[dict[str, Any]], Any]] | None = None,
        timeout: float | None = 30.0,
    ) -> None:
        self._lookup = lookup
        self._handlers: dict[str, Callable[[dict[str, Any]], Any]] = dict(handlers or {})
        self._timeout = timeout

    @property
    def timeout(self) -> float | None:
        return self._timeout

    def register(self, entry_id: str, handler: Callable[[dict[str, Any]], Any]) -> None:
        """Attach *handler* to *entry_id*, overriding any import path."""
        self._handlers[entry_id] = handler

    def call(self, entry_id: str, arguments: dict[str, Any]) -> InvocationResult:
        handler = self._resolve(entry_id)
        logger.debug("Invoking %s", entry_id)
        return coerce_result(self._run(entry_id, handler, dict(arguments)))

    def _resolve(self, entry_id: str) -> Callable[[dict[str, Any]], Any]:
        handler = self._handlers.get(entry_id)
        if handler is not None:
            return handler

        if self._lookup is None:
            raise InvocationError(entry_id, "no handler registered")
        try:
            entry = self._lookup.get(entry_id)
        except RegistryError as exc:
            raise InvocationError(entry_id, str(exc)) from exc
        if entry is None:
            raise InvocationError(entry_id, "no such registry entry")
        if not entry.handler:
            raise InvocationError(entry_id, "entry has no handler")
        return _import_handler(entry_id, entry.handler)

    def _run(
        self, entry_id: str, handler: Callable[[dict[str, Any]], Any], arguments: dict[str, Any]
    ) -> Any:
        outcome: dict[str, Any] = {}

        def _target() -> None:
            try:
                outcome["value"] = handler(arguments)
            except Exception as exc:
                outcome["error"] = exc

        worker = threading.Thread(target=_target, name=f"regmcp-invoke:{entry_id}", daemon=True)
        worker.start()
        worker.join(self._timeout)

        if self._timeout is not None and worker.is_alive():
            raise InvocationTimeoutError(entry_id, self._timeout)
        if "error" in outcome:
            exc = outcome["error"]
            raise InvocationError(entry_id, str(exc) or type(exc).__name__) from exc
        return outcome.get("value")


def _import_handler(entry_id: str, path: str) -> Callable[[dict[str, Any]], Any]:
    """Import ``module:attribute`` and return the callable it names."""
    module_path, sep, attr_path = path.partition(":")
    if not sep or not module_path or not attr_path:
        raise InvocationError(entry_id, f"invalid handler path {path!r} (expected 'module:attr')")
    try:
        target: Any = importlib.import_module(module_path)
        for attr in attr_path.split("."):
            target = getattr(target, attr)
    except (ImportError, AttributeError) as exc:
        raise InvocationError(entry_id, f"cannot load handler {path!r}: {exc}") from exc
    if not callable(target):
        raise InvocationError(entry_id, f"handler {path!r} is not callable")
    return target  # type: ignore[no-any-return]
