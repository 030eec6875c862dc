"""Shared error types for the protocol layer."""


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


class RegistryError(ProtocolError):
    """The capability registry could not be queried."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Registry error" + (f": {detail}" if detail else ""))


class InvocationError(ProtocolError):
    """A handler invocation failed."""

    def __init__(self, entry_id: str, detail: str = "") -> None:
        self.entry_id = entry_id
        self.detail = detail
        super().__init__(f"Invocation failed: {entry_id}" + (f": {detail}" if detail else ""))


class InvocationTimeoutError(InvocationError):
    """A handler exceeded its invocation deadline."""

    def __init__(self, entry_id: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(entry_id, f"timed out after {timeout}s")


class TemplateCycleError(ProtocolError):
    """A prompt's ``extend`` chain refers back to itself."""

    def __init__(self, path: list[str]) -> None:
        self.path = list(path)
        super().__init__("Template cycle detected: " + " -> ".join(self.path))
