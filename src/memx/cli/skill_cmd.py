"""Skill command: view or install the agent SKILL.md."""

from __future__ import annotations

from typing import Optional

import typer

from memx.cli._shared import FORMAT_OPTION
from memx.skill import PROVIDER_DIRS, SKILL_MD, install_skill, installed_providers, skill_path
from memx.utils.output import error, info, output, plain, success


def register_skill_commands(app: typer.Typer) -> None:
    """Register the top-level `skill` command."""

    @app.command("skill")
    def skill_cmd(
        action: str = typer.Argument("view", help="view or install"),
        target: str = typer.Argument("all", help="claude, gemini or all"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Show the mem skill for LLM agents, or install it."""
        if action in ("view", "show"):
            installed = installed_providers()
            if fmt == "json":
                output(
                    {"content": SKILL_MD, "installed": [str(skill_path(p)) for p in installed]},
                    fmt="json",
                )
                return
            for provider in installed:
                info(f"Installed: {skill_path(provider)}")
            plain(SKILL_MD)
            if not installed:
                info("Install with: mem skill install")
            return

        if action not in ("install", "add"):
            error(f"Unknown skill action: {action}. Use view or install.")
            raise typer.Exit(1)

        if target == "all":
            providers = list(PROVIDER_DIRS)
        elif target in PROVIDER_DIRS:
            providers = [target]
        else:
            error(f"Unknown target: {target}. Use claude, gemini or all.")
            raise typer.Exit(1)

        written = [install_skill(provider) for provider in providers]
        if fmt == "json":
            output({"installed": [str(p) for p in written]}, fmt="json")
        else:
            for path in written:
                success(f"Installed to {path}")
