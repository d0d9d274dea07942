"""Task branches, git shortcuts, and read-only views (context, query, history)."""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

import typer
from rich.markup import escape

from memx.cli._shared import (
    FORMAT_OPTION,
    get_store,
    handle_errors,
    join_words,
    map_cwd,
    require_text,
)
from memx.sync.git_sync import GitSync
from memx.utils.output import console, info, output, output_table, plain, success


def register_task_commands(app: typer.Typer) -> None:
    """Register tasks/switch/branch/commit/sync/log/history/context/query."""

    @app.command("tasks")
    def tasks_cmd(fmt: Optional[str] = FORMAT_OPTION) -> None:
        """List task branches, marking the current one."""
        store = get_store()
        with handle_errors():
            tasks = store.tasks()
        if fmt == "json":
            output([t.model_dump() for t in tasks], fmt="json")
        elif not tasks:
            info('No tasks yet. Use `mem new "<goal>"` to start one.')
        else:
            for task in tasks:
                marker = "[green]*[/green]" if task.current else " "
                console.print(f"{marker} {escape(task.name)}", highlight=False)

    @app.command("switch")
    def switch_cmd(
        name: str = typer.Argument(..., help="Task name (task/ prefix optional) or branch"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Switch to another task; in the central store this directory follows it."""
        store = get_store()
        with handle_errors():
            branch = store.switch(name)
            map_cwd(store, branch)
        if fmt == "json":
            output({"branch": branch}, fmt="json")
        else:
            success(f"Switched to {branch}")

    @app.command("branch")
    def branch_cmd(
        name: Optional[str] = typer.Argument(None, help="Task to switch to or create"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """List branches, or switch to task/<name>, creating it when missing."""
        store = get_store()
        with handle_errors():
            if name is None:
                branches = store.runner.branches()
            else:
                branch, created = store.switch_or_create(name)
                map_cwd(store, branch)

        if name is None:
            if fmt == "json":
                output([{"branch": b, "current": current} for b, current in branches], fmt="json")
            else:
                for branch_name, current in branches:
                    plain(f"{'*' if current else ' '} {branch_name}")
            return
        if fmt == "json":
            output({"branch": branch, "created": created}, fmt="json")
        else:
            success(f"{'Created' if created else 'Switched to'} {branch}")

    @app.command("commit")
    def commit_cmd(
        message: Optional[list[str]] = typer.Argument(None, help="Commit message"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Commit every pending change in the store."""
        store = get_store()
        text = join_words(message) or "checkpoint"
        with handle_errors():
            committed = store.commit_all(text)
        if fmt == "json":
            output({"committed": committed, "message": text}, fmt="json")
        elif committed:
            success(f"Committed: {text}")
        else:
            info("No changes to commit")

    @app.command("sync")
    def sync_cmd(fmt: Optional[str] = FORMAT_OPTION) -> None:
        """Pull (rebase) and push the current branch against origin."""
        store = get_store()
        with handle_errors():
            result = GitSync(store.runner).sync()
        if fmt == "json":
            output(result, fmt="json")
        elif result["status"] == "no_remote":
            info("No remote configured. Add one with `git -C <store> remote add origin <url>`.")
        else:
            success(f"Synced {result['branch']}")

    def _history(count: int, fmt: Optional[str]) -> None:
        store = get_store()
        with handle_errors():
            log = store.history(count)
        if fmt == "json":
            output(log.splitlines(), fmt="json")
        else:
            plain(log or "No history")

    @app.command("log")
    def log_cmd(
        count: int = typer.Option(30, "-n", help="Number of commits"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Show the store's commit log."""
        _history(count, fmt)

    @app.command("history")
    def history_cmd(
        count: int = typer.Option(20, "-n", help="Number of commits"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Show recent memory changes."""
        _history(count, fmt)

    @app.command("context")
    def context_cmd(fmt: Optional[str] = FORMAT_OPTION) -> None:
        """Print everything an agent needs to resume this task."""
        store = get_store()
        with handle_errors():
            text = store.context()
        if fmt == "json":
            output({"context": text}, fmt="json")
        else:
            plain(text)

    @app.command("query")
    def query_cmd(
        search: list[str] = typer.Argument(..., help="Search terms"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Search the memory documents."""
        store = get_store()
        with handle_errors():
            results = store.query(require_text(search, "Search text"))
        if fmt == "json":
            output([asdict(r) for r in results], fmt="json")
        elif not results:
            info("No matches")
        else:
            output_table(
                [
                    {"file": r.file, "line": str(r.line_number), "text": r.line.strip()[:80]}
                    for r in results
                ],
                columns=["file", "line", "text"],
            )
