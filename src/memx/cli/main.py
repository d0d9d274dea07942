"""Typer app: root callback and task lifecycle commands (init, new, status, done)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from memx.cli._shared import (
    FORMAT_OPTION,
    get_store,
    handle_errors,
    join_words,
    map_cwd,
    parse_numbers,
)
from memx.core.central import central_index, new_task
from memx.core.index import unassign_branch
from memx.core.resolver import resolve
from memx.core.store import MemoryStore
from memx.utils.config import default_branch, load_global_config
from memx.utils.output import console, error_console, info, output, success
from memx.utils.paths import MEM_DIR

app = typer.Typer(
    name="mem",
    help="mem: git-backed memory for AI coding agents.",
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log git calls and store resolution"),
) -> None:
    """Show the current task, or start one interactively when none is mapped here."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=error_console, show_path=False)],
        )
    if ctx.invoked_subcommand is not None:
        return

    handle = resolve(Path.cwd())
    if handle is None or handle.unmapped:
        from memx.cli.interactive import onboard

        with handle_errors():
            onboard()
        return
    status(fmt=None)


@app.command()
def init(
    name: str = typer.Argument(..., help="Task name (becomes task/<name>)"),
    goal: Optional[list[str]] = typer.Argument(None, help="Goal statement"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Start a task: in the store governing this directory, or a new local .mem."""
    goal_text = join_words(goal)
    with handle_errors():
        handle = resolve(Path.cwd())
        if handle is None:
            store = MemoryStore(Path.cwd() / MEM_DIR, default_branch=default_branch())
            store.init_repo()
        else:
            store = MemoryStore.open(handle, default_branch=default_branch())
        branch = store.create_task(name, goal_text)
        map_cwd(store, branch)

    if fmt == "json":
        output({"branch": branch, "store": str(store.store_dir)}, fmt="json")
    else:
        success(f"Created {branch} in {store.store_dir}")


@app.command()
def new(
    goal: list[str] = typer.Argument(..., help="Goal statement; the task name is derived from it"),
    directory: Optional[Path] = typer.Option(None, "--dir", "-d", help="Project directory to map (default: cwd)"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Agent provider recorded in state.md"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Create a task in the central store and map a directory to it."""
    goal_text = join_words(goal)
    config = load_global_config()
    with handle_errors():
        store, branch = new_task(
            goal_text,
            directory or Path.cwd(),
            provider=provider or config["provider"],
            default_branch=config["default_branch"],
        )

    project = (directory or Path.cwd()).resolve()
    if fmt == "json":
        output({"branch": branch, "store": str(store.store_dir), "dir": str(project)}, fmt="json")
    else:
        success(f"Created {branch}")
        info(f"Mapped {project} -> {branch}")


@app.command()
def status(fmt: Optional[str] = FORMAT_OPTION) -> None:
    """Show the current task: goal, status, next step, recent checkpoints, progress."""
    store = get_store()
    with handle_errors():
        data = store.summary()
    if store.handle is not None and store.handle.unmapped:
        data["mapped"] = False

    if fmt == "json":
        output(data, fmt="json")
        return

    if data.get("mapped") is False:
        info('No task mapped to this directory. Run `mem new "<goal>"` or `mem switch <task>`.')
    console.print(Panel(escape(data["goal"] or "No goal set"), title=escape(data["branch"])))
    console.print(f"  Store: {escape(data['store'])}")
    console.print(f"  Status: {data['status']}")
    if data["blocker"]:
        console.print(f"  [red]Blocked:[/red] {escape(data['blocker'])}")
    if data["progress"] is not None:
        console.print(f"  Progress: {data['progress']}%")
    console.print(f"  Next: {escape(data['next'] or 'Not set')}")
    if data["checkpoints"]:
        console.print("  Recent checkpoints:")
        for checkpoint in data["checkpoints"]:
            console.print(f"    {escape(checkpoint)}", highlight=False)


@app.command()
def done(
    promote: Optional[str] = typer.Option(
        None, "--promote", help="Learnings to promote to the playbook (e.g. 1,3 or none)"
    ),
    delete: Optional[bool] = typer.Option(
        None, "--delete/--keep", help="Delete the task branch after merging"
    ),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Finish the task: mark done, promote learnings, merge into the default branch."""
    store = get_store()
    with handle_errors():
        numbers = parse_numbers(promote) if promote is not None else None
        if numbers is None or delete is None:
            from memx.cli.interactive import reflect

            asked_numbers, asked_delete = reflect(
                store.learnings(), ask_promote=numbers is None, ask_delete=delete is None
            )
            if numbers is None:
                numbers = asked_numbers
            if delete is None:
                delete = asked_delete

        result = store.complete(promote=numbers, delete_branch=delete)
        if result["deleted"] and store.handle is not None and not store.handle.is_local:
            result["unmapped"] = unassign_branch(central_index(store.store_dir), result["branch"])

    if fmt == "json":
        output(result, fmt="json")
        return
    for text in result["promoted"]:
        info(f"Promoted: {text}")
    success(f"Merged {result['branch']} into {result['merged_into']}")
    if result["deleted"]:
        info(f"Deleted {result['branch']}")


# Register the remaining top-level commands
from memx.cli.config_cmd import config_app
from memx.cli.goal_cmd import register_goal_commands
from memx.cli.learn_cmd import register_learn_commands
from memx.cli.mcp_cmd import register_mcp_commands
from memx.cli.skill_cmd import register_skill_commands
from memx.cli.state_cmd import register_state_commands
from memx.cli.task_cmd import register_task_commands
from memx.cli.wake_cmd import cron_app, register_wake_commands

app.add_typer(config_app, name="config", help="Manage global configuration")
app.add_typer(cron_app, name="cron", help="Export wake schedules as crontab lines")

register_goal_commands(app)
register_learn_commands(app)
register_task_commands(app)
register_state_commands(app)
register_wake_commands(app)
register_skill_commands(app)
register_mcp_commands(app)
