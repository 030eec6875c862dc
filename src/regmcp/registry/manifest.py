"""ManifestRegistry — registry entries declared in a YAML or JSON file.

The manifest is re-read on every lookup, so edits are picked up by the next
``*/list`` or ``*/call`` request without restarting the server.

Example manifest::

    entries:
      - id: weather:get_weather
        handler: weather.handlers:get_weather
        meta:
          mcp.tool: true
          mcp.name: get_weather
          mcp.description: Current weather for a city.
          mcp.inputSchema:
            type: object
            properties:
              location: { type: string }
            required: [location]
      - id: prompts:greeting
        meta:
          mcp.prompt: true
          mcp.prompt.name: greeting
          mcp.prompt.messages:
            - role: user
              content: "Hi {{name}}, style {{style}}"
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from regmcp.protocol.errors import RegistryError
from regmcp.protocol.models import RegistryEntry

logger = logging.getLogger(__name__)


class RegistryManifest(BaseModel):
    """Validated contents of a registry manifest file."""

    entries: list[RegistryEntry] = Field(default_factory=list)


class ManifestRegistry:
    """File-backed registry.

    Satisfies the :class:`~regmcp.protocol.provider.Registry` protocol.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> RegistryManifest:
        """Read and validate the manifest.

        Raises:
            RegistryError: On read, parse, or validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise RegistryError(f"Cannot read {self._path}: {exc}") from exc

        try:
            data: Any = json.loads(raw) if self._path.suffix == ".json" else yaml.safe_load(raw)
        except (yaml.YAMLError, ValueError) as exc:
            raise RegistryError(f"Cannot parse {self._path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise RegistryError(f"{self._path}: manifest must be a mapping")

        try:
            manifest = RegistryManifest.model_validate(data)
        except ValidationError as exc:
            raise RegistryError(f"{self._path}: {exc}") from exc

        logger.debug("Loaded %d registry entries from %s", len(manifest.entries), self._path)
        return manifest

    def find(self, kind: str) -> list[RegistryEntry]:
        return [e for e in self.load().entries if e.kind == kind]

    def get(self, entry_id: str) -> RegistryEntry | None:
        return next((e for e in self.load().entries if e.id == entry_id), None)
