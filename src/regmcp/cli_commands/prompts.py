"""``regmcp prompts`` — inspect and render prompts declared in a registry manifest."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from regmcp.cli_commands._output import console, print_messages, print_prompts_table

_registry_option = click.option(
    "--registry",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="REGMCP_REGISTRY",
    required=True,
    help="Registry manifest (YAML or JSON).",
)


@click.group()
def prompts() -> None:
    """Discover, inspect, and render prompts."""


@prompts.command("list")
@_registry_option
@click.option("--all", "show_all", is_flag=True, help="Include templates.")
def list_prompts(registry: Path, show_all: bool) -> None:
    """List the prompts a server would expose from REGISTRY."""
    from regmcp.protocol.discovery import PromptDiscovery
    from regmcp.protocol.errors import RegistryError
    from regmcp.registry import ManifestRegistry

    try:
        found = PromptDiscovery(ManifestRegistry(registry)).discover()
    except RegistryError as exc:
        console.print(f"[red]Discovery error:[/red] {exc}")
        raise SystemExit(1) from exc

    if not show_all:
        found = {name: p for name, p in found.items() if not p.is_template}

    if not found:
        console.print("[yellow]No prompts discovered.[/yellow]")
        return

    print_prompts_table(found)


@prompts.command("render")
@click.argument("name")
@_registry_option
@click.option(
    "-a",
    "--arg",
    "args",
    multiple=True,
    metavar="KEY=VALUE",
    help="Prompt argument (repeatable).",
)
@click.option("--timeout", type=float, default=30.0, show_default=True, help="Handler deadline.")
@click.option("--json", "as_json", is_flag=True, help="Print messages as JSON.")
def render(name: str, registry: Path, args: tuple[str, ...], timeout: float, as_json: bool) -> None:
    """Resolve prompt NAME locally and print its messages.

    Templates can be rendered too, which helps when debugging an extend chain.
    """
    from regmcp.protocol.discovery import PromptDiscovery
    from regmcp.protocol.errors import ProtocolError
    from regmcp.protocol.prompts import messages_from_result, resolve_messages
    from regmcp.registry import HandlerInvoker, ManifestRegistry

    arguments = _parse_args(args)
    manifest = ManifestRegistry(registry)

    try:
        found = PromptDiscovery(manifest).discover()
        prompt = found.get(name)
        if prompt is None:
            console.print(f"[red]Unknown prompt:[/red] {name}")
            raise SystemExit(1)
        if prompt.is_dynamic:
            invoker = HandlerInvoker(manifest, timeout=timeout if timeout > 0 else None)
            messages = messages_from_result(invoker.call(prompt.entry_id, arguments))
        else:
            messages = resolve_messages(prompt, found, arguments)
    except ProtocolError as exc:
        console.print(f"[red]Render error:[/red] {exc}")
        raise SystemExit(1) from exc

    print_messages(messages, as_json=as_json)


def _parse_args(pairs: tuple[str, ...]) -> dict[str, Any]:
    arguments: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--arg")
        arguments[key] = value
    return arguments
