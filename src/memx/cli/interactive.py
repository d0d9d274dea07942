"""Interactive prompts: first-run onboarding and the reflection step of `mem done`."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from memx.cli._shared import parse_numbers
from memx.core.central import new_task
from memx.core.schema import Learning
from memx.sync.git_sync import GitSync
from memx.utils.config import load_global_config
from memx.utils.output import console as default_console
from memx.utils.output import is_piped


def onboard(
    start_dir: Path | None = None,
    console: Console | None = None,
    prompt_fn: Callable[..., str] | None = None,
) -> str | None:
    """Ask for a goal, its criteria and an optional remote, then create the task.

    Args:
        start_dir: Project directory to map to the new task (defaults to cwd).
        console: Rich console for output (injectable for tests).
        prompt_fn: Callable matching Prompt.ask signature (injectable for tests).

    Returns:
        The new task branch, or None when nothing was created.
    """
    console = console or default_console
    prompt_fn = prompt_fn or Prompt.ask

    if is_piped():
        console.print('[dim]No task here. Run `mem new "<goal>"` to start one.[/dim]')
        return None

    console.print(Panel("[bold]Let's set up memory for this directory[/bold]", title="mem"))
    goal = prompt_fn("What are you working on?", default="").strip()
    if not goal:
        console.print("[dim]No goal given, nothing created[/dim]")
        return None

    criteria: list[str] = []
    console.print("[dim]How will you know it's done? One criterion per line, empty to finish.[/dim]")
    while True:
        criterion = prompt_fn(f"  Criterion {len(criteria) + 1}", default="").strip()
        if not criterion:
            break
        criteria.append(criterion)

    remote = prompt_fn("Git remote URL for syncing (optional)", default="").strip()

    config = load_global_config()
    store, branch = new_task(
        goal,
        (start_dir or Path.cwd()),
        provider=config["provider"],
        criteria=criteria,
        default_branch=config["default_branch"],
    )
    console.print(f"[green]✓[/green] Created {escape(branch)}")

    if remote:
        GitSync(store.runner).add_remote(remote, [store.default_branch, branch])
        console.print(f"[green]✓[/green] Connected to {escape(remote)}")

    return branch


def reflect(
    learnings: list[Learning],
    ask_promote: bool = True,
    ask_delete: bool = True,
    console: Console | None = None,
    prompt_fn: Callable[..., str] | None = None,
) -> tuple[list[int], bool]:
    """Ask which learnings to promote and whether to delete the task branch.

    Returns:
        (learning numbers to promote, delete branch). Questions not asked,
        and every question in a non-interactive session, answer "none" / keep.
    """
    console = console or default_console
    prompt_fn = prompt_fn or Prompt.ask

    if is_piped():
        return [], False

    promote: list[int] = []
    if ask_promote and learnings:
        console.print(Panel("[bold]What did this task teach you?[/bold]", title="Reflection"))
        for learning in learnings:
            console.print(f"  {learning.number}. {escape(learning.text)}")
        answer = prompt_fn("Promote to playbook (e.g. 1,3 or none)", default="none")
        promote = parse_numbers(answer)

    if not ask_delete:
        return promote, False
    delete = prompt_fn("Delete the task branch after merging?", choices=["y", "n"], default="n")
    return promote, delete == "y"
