"""Protocol layer — JSON-RPC codec, lifecycle, and capability dispatch."""

from regmcp.protocol.dispatcher import Dispatcher
from regmcp.protocol.errors import (
    InvocationError,
    InvocationTimeoutError,
    ProtocolError,
    RegistryError,
    TemplateCycleError,
)
from regmcp.protocol.lifecycle import PROTOCOL_VERSION, Lifecycle
from regmcp.protocol.models import (
    CapabilitySettings,
    Message,
    Phase,
    PromptDescriptor,
    RegistryEntry,
    ServerInfo,
    ServerState,
    ToolDescriptor,
)
from regmcp.protocol.prompts import PromptHandler, resolve_messages
from regmcp.protocol.provider import Invoker, Registry
from regmcp.protocol.results import (
    ContentResult,
    EmptyResult,
    InvocationResult,
    MessagesResult,
    TextResult,
    coerce_result,
)
from regmcp.protocol.tools import ToolHandler
from regmcp.protocol.transport import StdioTransport

__all__ = [
    "PROTOCOL_VERSION",
    "CapabilitySettings",
    "ContentResult",
    "Dispatcher",
    "EmptyResult",
    "InvocationError",
    "InvocationResult",
    "InvocationTimeoutError",
    "Invoker",
    "Lifecycle",
    "Message",
    "MessagesResult",
    "Phase",
    "PromptDescriptor",
    "PromptHandler",
    "ProtocolError",
    "Registry",
    "RegistryEntry",
    "RegistryError",
    "ServerInfo",
    "ServerState",
    "StdioTransport",
    "TemplateCycleError",
    "TextResult",
    "ToolDescriptor",
    "ToolHandler",
    "coerce_result",
    "resolve_messages",
]
