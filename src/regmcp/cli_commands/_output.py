"""Shared CLI output formatters and logging setup.

Everything diagnostic goes to stderr: ``regmcp serve`` owns stdout for the
protocol stream.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from regmcp.protocol.models import PromptDescriptor, ToolDescriptor  # noqa: TC001

console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str = "WARNING") -> None:
    """Route all log records to a stderr :class:`RichHandler`."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def print_tools_table(tools: dict[str, ToolDescriptor]) -> None:
    """Pretty-print discovered tools as a table."""
    table = Table(title="Discovered Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Entry")
    table.add_column("Description")
    table.add_column("Parameters")

    for name in sorted(tools):
        tool = tools[name]
        props = (tool.input_schema or {}).get("properties", {})
        table.add_row(
            tool.name,
            tool.entry_id,
            _truncate(tool.description or ""),
            ", ".join(props) or "-",
        )

    console.print(table)


def print_prompts_table(prompts: dict[str, PromptDescriptor]) -> None:
    """Pretty-print discovered prompts as a table."""
    table = Table(title="Discovered Prompts")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Arguments")
    table.add_column("Extends")
    table.add_column("Description")

    for name in sorted(prompts):
        prompt = prompts[name]
        args = ", ".join(
            a.name + ("*" if a.required else "") for a in prompt.arguments or []
        )
        table.add_row(
            prompt.name,
            "dynamic" if prompt.is_dynamic else prompt.type,
            args or "-",
            ", ".join(ext.id for ext in prompt.extend or []) or "-",
            _truncate(prompt.description or ""),
        )

    console.print(table)


def print_messages(messages: list[Any], *, as_json: bool = False) -> None:
    """Print resolved prompt messages."""
    if as_json:
        console.print_json(json.dumps(messages, default=str))
        return

    for msg in messages:
        role = msg.get("role", "?") if isinstance(msg, dict) else "?"
        content = msg.get("content") if isinstance(msg, dict) else msg
        text = content.get("text", content) if isinstance(content, dict) else content
        console.print(f"[bold]{escape(str(role))}[/bold]: {escape(str(text))}", highlight=False)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
