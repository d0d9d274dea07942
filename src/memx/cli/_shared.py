"""Shared CLI utilities to avoid circular imports."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer

from memx.core.central import central_index
from memx.core.errors import StoreError, UsageError
from memx.core.index import assign
from memx.core.resolver import resolve
from memx.core.schema import StoreHandle
from memx.core.store import MemoryStore
from memx.sync.git_sync import GitError
from memx.utils.config import default_branch
from memx.utils.output import error

FORMAT_OPTION = typer.Option(None, "--format", "-F", help="Output format: json or text")

NO_STORE_MESSAGE = 'No memory store found. Run `mem init <name>` or `mem new "<goal>"` first.'


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn store, usage and git failures into ``Error: ...`` and exit code 1."""
    try:
        yield
    except (StoreError, GitError) as e:
        error(str(e))
        raise typer.Exit(1)


def resolve_handle() -> StoreHandle:
    handle = resolve(Path.cwd())
    if handle is None:
        error(NO_STORE_MESSAGE)
        raise typer.Exit(1)
    return handle


def get_store() -> MemoryStore:
    """Resolve the store for the cwd and check out its task branch."""
    handle = resolve_handle()
    with handle_errors():
        return MemoryStore.open(handle, default_branch=default_branch())


def map_cwd(store: MemoryStore, branch: str) -> None:
    """Point the cwd at branch in the path index (central store only)."""
    if store.handle is not None and not store.handle.is_local:
        assign(central_index(store.store_dir), Path.cwd().resolve(), branch)


def join_words(words: list[str] | None) -> str:
    return " ".join(words or []).strip()


def require_text(words: list[str] | None, what: str) -> str:
    text = join_words(words)
    if not text:
        raise UsageError(f"{what} is required")
    return text


def parse_number(value: str, what: str = "number") -> int:
    try:
        return int(value)
    except ValueError:
        raise UsageError(f"Invalid {what}: {value}") from None


def parse_numbers(value: str) -> list[int]:
    """Parse ``1,3`` style selections. ``none`` or empty selects nothing."""
    value = value.strip().lower()
    if value in ("", "none"):
        return []
    return [parse_number(part.strip()) for part in value.split(",") if part.strip()]
