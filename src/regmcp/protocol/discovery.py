"""Capability discovery — build descriptor maps from registry metadata.

Every call re-queries the registry; nothing is cached, so registry changes
are visible on the next ``*/list``, ``*/call`` or ``*/get`` request.

Name collisions are resolved deterministically: entries are processed in
ascending entry-id order and the first entry claiming a public name wins.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import ValidationError

from regmcp.protocol.models import PromptDescriptor, ToolDescriptor

if TYPE_CHECKING:
    from regmcp.protocol.models import RegistryEntry
    from regmcp.protocol.provider import Registry

logger = logging.getLogger(__name__)

FUNCTION_KIND = "function"

D = TypeVar("D", ToolDescriptor, PromptDescriptor)


class Discovery(Generic[D]):
    """Discover one capability kind from a :class:`Registry`.

    Subclasses set :attr:`marker` (the boolean metadata flag selecting
    entries) and implement :meth:`build`.
    """

    marker: str = ""
    label: str = "capability"

    def __init__(self, registry: Registry, *, kind: str = FUNCTION_KIND) -> None:
        self._registry = registry
        self._kind = kind

    def discover(self) -> dict[str, D]:
        """Return descriptors keyed by public name.

        Raises:
            RegistryError: If the registry lookup fails.
        """
        entries = self._registry.find(self._kind)
        found: dict[str, D] = {}
        for entry in sorted(entries, key=lambda e: e.id):
            if entry.meta.get(self.marker) is not True:
                continue
            try:
                descriptor = self.build(entry)
            except ValidationError as exc:
                logger.warning("Skipping %s %s: invalid metadata: %s", self.label, entry.id, exc)
                continue
            name = descriptor.name
            if name in found:
                logger.warning(
                    "Duplicate %s name %r: keeping %s, ignoring %s",
                    self.label,
                    name,
                    found[name].entry_id,
                    entry.id,
                )
                continue
            found[name] = descriptor
        return found

    def build(self, entry: RegistryEntry) -> D:
        raise NotImplementedError


class ToolDiscovery(Discovery[ToolDescriptor]):
    """Discover entries flagged with ``mcp.tool``."""

    marker = "mcp.tool"
    label = "tool"

    def build(self, entry: RegistryEntry) -> ToolDescriptor:
        meta = entry.meta
        return ToolDescriptor(
            entry_id=entry.id,
            name=meta.get("mcp.name") or entry.id,
            description=meta.get("mcp.description"),
            input_schema=meta.get("mcp.inputSchema"),
            annotations=meta.get("mcp.annotations"),
        )


class PromptDiscovery(Discovery[PromptDescriptor]):
    """Discover entries flagged with ``mcp.prompt``."""

    marker = "mcp.prompt"
    label = "prompt"

    def build(self, entry: RegistryEntry) -> PromptDescriptor:
        meta = entry.meta
        fields: dict[str, Any] = {
            "entry_id": entry.id,
            "name": meta.get("mcp.prompt.name") or entry.id,
            "description": meta.get("mcp.prompt.description"),
            "type": str(meta.get("mcp.prompt.type") or "prompt"),
            "tags": meta.get("mcp.prompt.tags"),
            "arguments": meta.get("mcp.prompt.arguments"),
            "messages": meta.get("mcp.prompt.messages"),
            "extend": meta.get("mcp.prompt.extend"),
        }
        return PromptDescriptor.model_validate(fields)
