"""MCP command: run the stdio server or print its client configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from memx.utils.output import error


def register_mcp_commands(app: typer.Typer) -> None:
    """Register the top-level `mcp` command."""

    @app.command("mcp")
    def mcp_cmd(
        action: str = typer.Argument("serve", help="serve or config"),
        directory: Optional[Path] = typer.Option(None, "--dir", "-d", help="Directory the tools run in"),
    ) -> None:
        """Serve mem over MCP (stdio), or print the mcpServers config snippet."""
        from memx.mcp.server import main as serve
        from memx.mcp.server import mcp_config

        if action == "serve":
            serve(directory)
        elif action == "config":
            print(json.dumps(mcp_config(directory or Path.cwd()), indent=2))
        else:
            error(f"Unknown mcp action: {action}. Use serve or config.")
            raise typer.Exit(1)
