"""Server configuration — pydantic models and the YAML loader.

Example ``regmcp.yaml``::

    name: weather-mcp
    instructions: Use get_weather for current conditions.
    capabilities:
      tools: true
      prompts: true
    registry: ./registry.yaml
    invoke_timeout: 10
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from regmcp import __version__
from regmcp.protocol.lifecycle import PROTOCOL_VERSION
from regmcp.protocol.models import CapabilitySettings, ServerInfo

if TYPE_CHECKING:
    from pathlib import Path


class ConfigError(Exception):
    """Raised when a configuration file fails parsing or validation."""


class ServerConfig(BaseModel):
    """Top-level server configuration."""

    name: str = "regmcp"
    version: str = __version__
    protocol_version: str = PROTOCOL_VERSION
    instructions: str | None = None
    capabilities: CapabilitySettings = Field(default_factory=CapabilitySettings)
    registry: str | None = Field(default=None, description="Path to a registry manifest.")
    invoke_timeout: float | None = Field(
        default=30.0,
        gt=0,
        description="Seconds a handler may run before the call fails; null disables the limit.",
    )

    @property
    def server_info(self) -> ServerInfo:
        return ServerInfo(name=self.name, version=self.version)


class ConfigLoader:
    """Load and validate a YAML configuration file into a :class:`ServerConfig`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> ServerConfig:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.  A relative
        ``registry`` path is resolved against the config file's directory.

        Raises:
            ConfigError: On read, YAML parse, or schema validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Config YAML must be a mapping")

        try:
            config = ServerConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

        if config.registry and not os.path.isabs(config.registry):
            config.registry = str(self._path.parent / config.registry)
        return config
