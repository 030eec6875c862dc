"""Registry and invoker implementations for the protocol core's collaborator seams."""

from regmcp.registry.invoker import HandlerInvoker
from regmcp.registry.manifest import ManifestRegistry, RegistryManifest
from regmcp.registry.memory import InMemoryRegistry

__all__ = [
    "HandlerInvoker",
    "InMemoryRegistry",
    "ManifestRegistry",
    "RegistryManifest",
]
