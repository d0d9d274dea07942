"""Output formatting utilities: text vs JSON, rich consoles."""

from __future__ import annotations

import json
import sys
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()
error_console = Console(stderr=True)


def is_piped() -> bool:
    return not sys.stdout.isatty()


def output(data: Any, fmt: str | None = None) -> None:
    """Output data as JSON (``fmt == "json"``) or as readable text."""
    if fmt == "json":
        if isinstance(data, str):
            print(json.dumps({"value": data}))
        elif hasattr(data, "model_dump"):
            print(data.model_dump_json(indent=2))
        elif isinstance(data, (dict, list)):
            print(json.dumps(data, indent=2, default=str))
        else:
            print(json.dumps({"value": str(data)}, default=str))
    else:
        if isinstance(data, str):
            plain(data)
        elif hasattr(data, "model_dump"):
            console.print_json(data.model_dump_json(indent=2))
        elif isinstance(data, (dict, list)):
            console.print_json(json.dumps(data, default=str))
        else:
            plain(str(data))


def output_table(rows: list[dict[str, str]], columns: list[str], fmt: str | None = None) -> None:
    if fmt == "json":
        print(json.dumps(rows, indent=2, default=str))
    else:
        table = Table()
        for col in columns:
            table.add_column(col.title())
        for row in rows:
            table.add_row(*[escape(str(row.get(col, ""))) for col in columns])
        console.print(table)


def plain(text: str) -> None:
    """Print document text verbatim: no markup, no highlighting, no wrapping."""
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def error(msg: str) -> None:
    error_console.print(f"[red]Error:[/red] {escape(msg)}", soft_wrap=True)


def warn(msg: str) -> None:
    console.print(f"[yellow]{escape(msg)}[/yellow]", soft_wrap=True)


def success(msg: str) -> None:
    console.print(f"[green]✓[/green] {escape(msg)}", soft_wrap=True)


def info(msg: str) -> None:
    console.print(f"[dim]{escape(msg)}[/dim]", soft_wrap=True)
