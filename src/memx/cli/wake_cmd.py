"""Wake schedules: store a pattern in state.md, export it as a crontab line."""

from __future__ import annotations

from typing import Optional

import typer

from memx.cli._shared import FORMAT_OPTION, get_store, handle_errors, join_words
from memx.core.wake import EXAMPLES, wake_to_cron
from memx.utils.output import info, output, plain, success

cron_app = typer.Typer(no_args_is_help=True)


def register_wake_commands(app: typer.Typer) -> None:
    """Register the top-level `wake` command."""

    @app.command("wake")
    def wake_cmd(
        pattern: Optional[list[str]] = typer.Argument(None, help="Pattern (e.g. 'every 15m'), or 'clear'"),
        run: Optional[str] = typer.Option(None, "--run", help="Command to run on wake"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Show, set, or clear when the agent should wake up on this task."""
        store = get_store()
        text = join_words(pattern)
        with handle_errors():
            if text == "clear":
                store.clear_wake()
                success("Wake cleared")
                return
            if text:
                cron = store.set_wake(text, run)
                if fmt == "json":
                    output({"wake": text, "cron": cron, "command": run}, fmt="json")
                else:
                    success(f"Wake: {text} ({cron})")
                    info("Run `mem cron export` to get a crontab line.")
                return
            wake = store.wake()

        if fmt == "json":
            output(
                {"wake": wake[0], "cron": wake_to_cron(wake[0]), "command": wake[1]} if wake else {"wake": None},
                fmt="json",
            )
        elif wake is None:
            info("No wake set. Examples: " + ", ".join(EXAMPLES))
        else:
            plain(f"Wake: {wake[0]} ({wake_to_cron(wake[0])})")
            if wake[1]:
                plain(f"Command: {wake[1]}")


@cron_app.command("export")
def cron_export(fmt: Optional[str] = FORMAT_OPTION) -> None:
    """Print the crontab line for this task's wake schedule."""
    store = get_store()
    project_dir = store.handle.project_dir if store.handle and store.handle.project_dir else None
    with handle_errors():
        line = store.cron_entry(project_dir or store.store_dir.parent)
    if fmt == "json":
        output({"cron": line}, fmt="json")
    else:
        plain(line)
