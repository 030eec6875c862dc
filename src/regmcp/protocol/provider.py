"""Collaborator protocols consumed by the protocol core.

The core never hard-wires a lookup or execution mechanism.  Anything that
satisfies :class:`Registry` and :class:`Invoker` can be injected, e.g. the
bundled :mod:`regmcp.registry` implementations or a mock in tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from regmcp.protocol.models import RegistryEntry
    from regmcp.protocol.results import InvocationResult


@runtime_checkable
class Registry(Protocol):
    """Returns registry entries of a given kind."""

    def find(self, kind: str) -> list[RegistryEntry]:
        """Return all entries of *kind*.

        Raises:
            RegistryError: If the registry cannot be queried.
        """
        ...


@runtime_checkable
class Invoker(Protocol):
    """Executes the handler attached to a registry entry."""

    def call(self, entry_id: str, arguments: dict[str, Any]) -> InvocationResult | Any:
        """Invoke *entry_id* synchronously with *arguments*.

        May return a tagged result or the handler's raw value (a string, a
        mapping with ``content`` or ``messages``, anything else); callers
        classify it with :func:`~regmcp.protocol.results.coerce_result`.

        Raises:
            InvocationError: If the handler is missing, fails, or times out.
        """
        ...
