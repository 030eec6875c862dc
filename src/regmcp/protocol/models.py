"""Protocol models — classified messages, connection state, and descriptors.

Descriptors are built from registry metadata on every discovery call and are
never persisted.  Serialization helpers (``to_listing``) emit the camelCase
MCP wire shape and omit absent optional fields instead of emitting nulls.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Classified JSON-RPC message
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A decoded and classified JSON-RPC message.

    - ``request``: always has an ``id`` (which may be JSON ``null``).
    - ``notification``: never has an ``id``; never answered.
    - ``invalid``: carries a diagnostic ``error`` and no method.
    """

    kind: Literal["request", "notification", "invalid"]
    id: Any = None
    method: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None

    @classmethod
    def request(cls, id: Any, method: str, params: dict[str, Any] | None = None) -> Message:
        return cls(kind="request", id=id, method=method, params=params or {})

    @classmethod
    def notification(cls, method: str, params: dict[str, Any] | None = None) -> Message:
        return cls(kind="notification", method=method, params=params or {})

    @classmethod
    def invalid(cls, error: str) -> Message:
        return cls(kind="invalid", error=error)

    @property
    def is_request(self) -> bool:
        return self.kind == "request"


# ---------------------------------------------------------------------------
# Connection state
# ---------------------------------------------------------------------------


class Phase(str, Enum):
    """Lifecycle phase of a single connection."""

    DISCONNECTED = "disconnected"
    READY = "ready"


class ServerInfo(BaseModel):
    name: str
    version: str


class CapabilitySettings(BaseModel):
    """Optional capability groups a server advertises during the handshake."""

    tools: bool = True
    prompts: bool = True

    def enabled(self) -> list[str]:
        """Return the names of enabled groups in declaration order."""
        return [name for name, on in self.model_dump().items() if on]


class ServerState(BaseModel):
    """Per-connection server state, owned and mutated only by the Lifecycle."""

    phase: Phase = Phase.DISCONNECTED
    server_info: ServerInfo
    client_info: dict[str, Any] | None = None
    client_protocol_version: str | None = None
    capabilities: CapabilitySettings = Field(default_factory=CapabilitySettings)
    instructions: str | None = None


# ---------------------------------------------------------------------------
# Registry entries
# ---------------------------------------------------------------------------


class RegistryEntry(BaseModel):
    """A single entry returned by a registry lookup.

    ``meta`` is read-only to the protocol core.  ``handler`` is an optional
    ``module:attribute`` import path used by :class:`~regmcp.registry.invoker.HandlerInvoker`.
    """

    id: str
    kind: str = "function"
    meta: dict[str, Any] = Field(default_factory=dict)
    handler: str | None = None


# ---------------------------------------------------------------------------
# Tool descriptors
# ---------------------------------------------------------------------------


class ToolDescriptor(BaseModel):
    """A tool discovered from registry metadata."""

    model_config = {"populate_by_name": True}

    entry_id: str
    name: str
    description: str | None = None
    input_schema: dict[str, Any] | None = Field(default=None, alias="inputSchema")
    annotations: dict[str, Any] | None = None

    def to_listing(self) -> dict[str, Any]:
        """Return the ``tools/list`` entry for this tool."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"entry_id"})


# ---------------------------------------------------------------------------
# Prompt descriptors
# ---------------------------------------------------------------------------


class PromptArgument(BaseModel):
    """A declared prompt argument."""

    name: str
    description: str | None = None
    required: bool | None = None


class PromptMessageTemplate(BaseModel):
    """A static prompt message; ``content`` is text or a ``{type, text}`` block."""

    role: str | None = None
    content: Any = None


class ExtendRef(BaseModel):
    """A reference from a prompt to a parent prompt or template."""

    id: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class PromptDescriptor(BaseModel):
    """A prompt or template discovered from registry metadata.

    A descriptor is *dynamic* when it declares neither ``messages`` nor
    ``extend``; its messages come from invoking the entry's handler.

    Only ``type == "template"`` changes behaviour; any other type value is a
    regular prompt.  ``tags`` is informational and kept as declared.
    """

    entry_id: str
    name: str
    description: str | None = None
    type: str = "prompt"
    tags: Any = None
    arguments: list[PromptArgument] | None = None
    messages: list[PromptMessageTemplate] | None = None
    extend: list[ExtendRef] | None = None

    @property
    def is_template(self) -> bool:
        return self.type == "template"

    @property
    def is_dynamic(self) -> bool:
        return self.messages is None and self.extend is None

    def to_listing(self) -> dict[str, Any]:
        """Return the ``prompts/list`` entry for this prompt."""
        entry: dict[str, Any] = {"name": self.name}
        if self.description is not None:
            entry["description"] = self.description
        if self.arguments is not None:
            entry["arguments"] = [arg.model_dump(exclude_none=True) for arg in self.arguments]
        return entry
