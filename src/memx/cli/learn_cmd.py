"""Learnings: per-task memory.md and the global playbook."""

from __future__ import annotations

from typing import Optional

import typer

from memx.cli._shared import FORMAT_OPTION, get_store, handle_errors, require_text
from memx.utils.output import info, output, output_table, plain, success


def register_learn_commands(app: typer.Typer) -> None:
    """Register learn/learnings/playbook/promote."""

    @app.command("learn")
    def learn_cmd(
        insight: list[str] = typer.Argument(..., help="What you learned"),
        global_: bool = typer.Option(False, "--global", "-g", help="Write straight to the playbook"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Record a learning for this task (or globally with -g)."""
        store = get_store()
        with handle_errors():
            text = require_text(insight, "Insight")
            filename = store.learn(text, global_=global_)
        if fmt == "json":
            output({"file": filename, "learning": text}, fmt="json")
        else:
            success(f"Learned{' (global)' if global_ else ''}: {text}")

    @app.command("learnings")
    def learnings_cmd(
        global_: bool = typer.Option(False, "--global", "-g", help="List playbook learnings"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """List learnings, numbered for `mem promote`."""
        store = get_store()
        with handle_errors():
            learnings = store.learnings(global_=global_)
        if fmt == "json":
            output([learning.model_dump() for learning in learnings], fmt="json")
            return
        if not learnings:
            info("No learnings yet. Use `mem learn \"<insight>\"` to add one.")
            return
        output_table(
            [{"#": str(l.number), "date": l.date, "learning": l.text} for l in learnings],
            columns=["#", "date", "learning"],
        )

    @app.command("playbook")
    def playbook_cmd(fmt: Optional[str] = FORMAT_OPTION) -> None:
        """Show the global playbook."""
        store = get_store()
        with handle_errors():
            content = store.playbook()
        if fmt == "json":
            output({"content": content}, fmt="json")
        elif content is None:
            info("No playbook yet")
        else:
            plain(content)

    @app.command("promote")
    def promote_cmd(
        number: int = typer.Argument(..., help="Learning number (see `mem learnings`)"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Copy a task learning into the playbook."""
        store = get_store()
        with handle_errors():
            learning = store.promote(number)
        if fmt == "json":
            output(learning, fmt="json")
        else:
            success(f"Promoted to playbook: {learning.text}")
