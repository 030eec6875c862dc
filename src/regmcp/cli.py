"""regmcp CLI entrypoint."""

from __future__ import annotations

import click

from regmcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="regmcp")
def main() -> None:
    """regmcp — registry-backed MCP server."""


# Register subcommands
from regmcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
