"""InMemoryRegistry — a mutable, process-local registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from regmcp.protocol.models import RegistryEntry

if TYPE_CHECKING:
    from collections.abc import Iterable


class InMemoryRegistry:
    """Holds registry entries in a list.

    Satisfies the :class:`~regmcp.protocol.provider.Registry` protocol.
    Entries added or removed are visible to the very next discovery call.
    """

    def __init__(self, entries: Iterable[RegistryEntry] = ()) -> None:
        self._entries: list[RegistryEntry] = list(entries)

    def add(
        self,
        entry_id: str,
        *,
        kind: str = "function",
        meta: dict[str, Any] | None = None,
        handler: str | None = None,
    ) -> RegistryEntry:
        """Create and store an entry, replacing any entry with the same id."""
        entry = RegistryEntry(id=entry_id, kind=kind, meta=meta or {}, handler=handler)
        self.remove(entry_id)
        self._entries.append(entry)
        return entry

    def remove(self, entry_id: str) -> None:
        self._entries = [e for e in self._entries if e.id != entry_id]

    def get(self, entry_id: str) -> RegistryEntry | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    def find(self, kind: str) -> list[RegistryEntry]:
        return [e for e in self._entries if e.kind == kind]
