"""``regmcp serve`` — run the MCP server over stdio."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from regmcp.cli_commands._output import configure_logging, err_console


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Server config YAML.",
)
@click.option(
    "--registry",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="REGMCP_REGISTRY",
    default=None,
    help="Registry manifest (YAML or JSON). Overrides the config file.",
)
@click.option("--name", default=None, help="Server name reported during the handshake.")
@click.option("--instructions", default=None, help="Instructions text sent to clients.")
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Per-invocation deadline in seconds (0 disables the limit).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log level (logs go to stderr).",
)
@click.option("--trace", is_flag=True, help="Export OpenTelemetry spans to stderr.")
@click.option("--otlp-endpoint", default=None, help="Export OpenTelemetry spans via OTLP/gRPC.")
def serve(
    config_path: Path | None,
    registry: Path | None,
    name: str | None,
    instructions: str | None,
    timeout: float | None,
    log_level: str,
    trace: bool,
    otlp_endpoint: str | None,
) -> None:
    """Serve tools and prompts from a registry manifest over stdin/stdout."""
    from regmcp.config import ConfigError, ConfigLoader, ServerConfig
    from regmcp.registry import HandlerInvoker, ManifestRegistry
    from regmcp.server import McpServer

    configure_logging(log_level)

    try:
        config = ConfigLoader(config_path).load() if config_path else ServerConfig()
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {exc}")
        raise SystemExit(1) from exc

    overrides: dict[str, Any] = {}
    if registry is not None:
        overrides["registry"] = str(registry)
    if name is not None:
        overrides["name"] = name
    if instructions is not None:
        overrides["instructions"] = instructions
    if timeout is not None:
        overrides["invoke_timeout"] = timeout if timeout > 0 else None
    config = config.model_copy(update=overrides)

    if not config.registry:
        raise click.UsageError("No registry manifest configured (use --registry or a config file).")

    if trace or otlp_endpoint:
        from regmcp.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(
                service_name=config.name,
                export_to_console=trace,
                otlp_endpoint=otlp_endpoint,
            )
        except ImportError as exc:
            err_console.print(f"[red]Telemetry error:[/red] {exc}")
            raise SystemExit(1) from exc

    manifest = ManifestRegistry(config.registry)
    invoker = HandlerInvoker(manifest, timeout=config.invoke_timeout)
    code = McpServer(config, manifest, invoker).serve_stdio()
    raise SystemExit(code)
