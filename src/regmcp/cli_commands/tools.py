"""``regmcp tools`` — inspect tools declared in a registry manifest."""

from __future__ import annotations

from pathlib import Path

import click

from regmcp.cli_commands._output import console, print_tools_table


@click.group()
def tools() -> None:
    """Discover and inspect tools."""


@tools.command("list")
@click.option(
    "--registry",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="REGMCP_REGISTRY",
    required=True,
    help="Registry manifest (YAML or JSON).",
)
def list_tools(registry: Path) -> None:
    """List the tools a server would expose from REGISTRY."""
    from regmcp.protocol.discovery import ToolDiscovery
    from regmcp.protocol.errors import RegistryError
    from regmcp.registry import ManifestRegistry

    try:
        found = ToolDiscovery(ManifestRegistry(registry)).discover()
    except RegistryError as exc:
        console.print(f"[red]Discovery error:[/red] {exc}")
        raise SystemExit(1) from exc

    if not found:
        console.print("[yellow]No tools discovered.[/yellow]")
        return

    print_tools_table(found)
