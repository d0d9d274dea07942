"""Goal, next step, checkpoints, blockers, criteria and constraints."""

from __future__ import annotations

from typing import Optional

import typer

from memx.cli._shared import (
    FORMAT_OPTION,
    get_store,
    handle_errors,
    join_words,
    parse_number,
    require_text,
)
from memx.core.errors import UsageError
from memx.core.schema import Progress
from memx.utils.output import info, output, plain, success


def _progress_line(progress: Progress | None) -> str:
    if progress is None or not progress.has_criteria:
        return "No criteria defined"
    return f"Progress: {progress.percent}% ({progress.checked}/{progress.total} criteria)"


def register_goal_commands(app: typer.Typer) -> None:
    """Register goal/next/checkpoint/stuck/progress/criteria/constraint commands."""

    @app.command("goal")
    def goal_cmd(
        goal: Optional[list[str]] = typer.Argument(None, help="New goal statement"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Show goal.md, or replace the goal statement."""
        store = get_store()
        text = join_words(goal)
        with handle_errors():
            if text:
                store.set_goal(text)
                success(f"Goal: {text}")
                return
            content = store.goal()
        if fmt == "json":
            output({"goal": store.goal_line(), "content": content}, fmt="json")
        elif content is None:
            info("No goal set")
        else:
            plain(content)

    @app.command("next")
    def next_cmd(
        step: Optional[list[str]] = typer.Argument(None, help="New next step"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Show or set the next step."""
        store = get_store()
        text = join_words(step)
        with handle_errors():
            if text:
                store.set_next_step(text)
                success(f"Next: {text}")
                return
            current = store.next_step()
        if fmt == "json":
            output({"next": current}, fmt="json")
        else:
            plain(current or "No next step set")

    def checkpoint_cmd(
        message: list[str] = typer.Argument(..., help="What was just accomplished"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Record a checkpoint in state.md."""
        store = get_store()
        with handle_errors():
            entry = store.checkpoint(require_text(message, "Checkpoint message"))
        if fmt == "json":
            output({"checkpoint": entry}, fmt="json")
        else:
            success(f"Checkpoint: {join_words(message)}")

    app.command("checkpoint")(checkpoint_cmd)
    app.command("cp", hidden=True)(checkpoint_cmd)

    @app.command("stuck")
    def stuck_cmd(
        reason: Optional[list[str]] = typer.Argument(None, help="Blocker, or 'clear' to remove it"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Show, set, or clear the blocker."""
        store = get_store()
        text = join_words(reason)
        with handle_errors():
            if text == "clear":
                store.clear_blocker()
                success("Blocker cleared")
                return
            if text:
                store.set_blocker(text)
                success(f"Blocked: {text}")
                return
            blocker = store.blocker()
        if fmt == "json":
            output({"blocker": blocker}, fmt="json")
        else:
            plain(f"Blocked: {blocker}" if blocker else "Not blocked")

    @app.command("progress")
    def progress_cmd(fmt: Optional[str] = FORMAT_OPTION) -> None:
        """Show Definition of Done progress and refresh the Progress marker."""
        store = get_store()
        with handle_errors():
            progress = store.progress()
        if fmt == "json":
            output(progress.model_dump() if progress else {"checked": 0, "total": 0, "percent": None}, fmt="json")
            return
        if progress is None:
            info("No goal.md found")
            return
        plain(_progress_line(progress))
        for checked, text in progress.criteria:
            plain(f"  [{'x' if checked else ' '}] {text}")

    @app.command("criteria")
    def criteria_cmd(
        args: Optional[list[str]] = typer.Argument(None, help="add <text> | check <n> | <n>"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """List, add, or check off Definition of Done criteria."""
        store = get_store()
        words = list(args or [])
        action = words[0] if words else ""
        with handle_errors():
            if action == "add":
                text = require_text(words[1:], "Criterion")
                store.add_criterion(text)
                success(f"Added criterion: {text}")
                return
            if action == "check" or action.isdigit():
                raw = words[1] if action == "check" and len(words) > 1 else action
                if raw == "check":
                    raise UsageError("Usage: mem criteria check <n>")
                criterion = store.check_criterion(parse_number(raw, "criterion number"))
                progress = store.progress()
                if fmt == "json":
                    output({"checked": criterion, "progress": progress.percent if progress else None}, fmt="json")
                else:
                    success(f"Checked: {criterion}")
                    plain(_progress_line(progress))
                return
            if action:
                raise UsageError(f"Unknown criteria action: {action}")
            progress = store.progress(write_marker=False)

        criteria = progress.criteria if progress else []
        if fmt == "json":
            output([{"done": done, "text": text} for done, text in criteria], fmt="json")
            return
        if not criteria:
            info('No criteria yet. Use `mem criteria add "<text>"` to add one.')
            return
        open_number = 0
        for checked, text in criteria:
            if checked:
                plain(f"  [x] {text}")
            else:
                open_number += 1
                plain(f"  {open_number}. [ ] {text}")

    def constraint_cmd(
        args: Optional[list[str]] = typer.Argument(None, help="add <text> | remove <n> | list"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """List, add, or remove constraints in goal.md."""
        store = get_store()
        words = list(args or [])
        action = words[0] if words else "list"
        with handle_errors():
            if action == "add":
                text = require_text(words[1:], "Constraint")
                store.add_constraint(text)
                success(f"Constraint: {text}")
                return
            if action in ("remove", "rm"):
                if len(words) < 2:
                    raise UsageError("Usage: mem constraint remove <n>")
                removed = store.remove_constraint(parse_number(words[1], "constraint number"))
                success(f"Removed: {removed}")
                return
            if action != "list":
                raise UsageError(f"Unknown constraint action: {action}")
            constraints = store.constraints()

        if fmt == "json":
            output(constraints, fmt="json")
        elif not constraints:
            info('No constraints yet. Use `mem constraint add "<text>"` to add one.')
        else:
            for i, constraint in enumerate(constraints, 1):
                plain(f"  {i}. {constraint}")

    app.command("constraint")(constraint_cmd)
    app.command("constraints", hidden=True)(constraint_cmd)
