"""Key/value primitives on state.md and list appends."""

from __future__ import annotations

from typing import Optional

import typer

from memx.cli._shared import FORMAT_OPTION, get_store, handle_errors, require_text
from memx.utils.output import info, output, plain, success


def register_state_commands(app: typer.Typer) -> None:
    """Register set/get/append."""

    @app.command("set")
    def set_cmd(
        key: str = typer.Argument(..., help="Frontmatter key in state.md"),
        value: list[str] = typer.Argument(..., help="Value"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Set a key in state.md frontmatter."""
        store = get_store()
        with handle_errors():
            text = require_text(value, "Value")
            store.set_value(key, text)
        if fmt == "json":
            output({"key": key, "value": text}, fmt="json")
        else:
            success(f"{key} = {text}")

    @app.command("get")
    def get_cmd(
        key: str = typer.Argument(..., help="Frontmatter key in state.md"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Get a key from state.md frontmatter."""
        store = get_store()
        with handle_errors():
            value = store.get_value(key)
        if fmt == "json":
            output({"key": key, "value": value}, fmt="json")
        elif value is None:
            info(f"{key}: (not set)")
        else:
            plain(value)

    @app.command("append")
    def append_cmd(
        list_name: str = typer.Argument(..., help="learnings, playbook or checkpoints"),
        item: list[str] = typer.Argument(..., help="Item to append"),
        fmt: Optional[str] = FORMAT_OPTION,
    ) -> None:
        """Append a dated item to a list."""
        store = get_store()
        with handle_errors():
            line = store.append(list_name, require_text(item, "Item"))
        if fmt == "json":
            output({"list": list_name, "line": line}, fmt="json")
        else:
            success(f"Appended to {list_name}")
