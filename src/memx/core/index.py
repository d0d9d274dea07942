"""Path index: maps project directories to task branches in the central store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

INDEX_FILE = "index.json"


@runtime_checkable
class IndexStore(Protocol):
    """Persistence for the {project path: task branch} mapping."""

    def load(self) -> dict[str, str]:
        ...

    def save(self, index: dict[str, str]) -> None:
        ...


class JsonIndexStore:
    """index.json inside the central store. A corrupt file reads as empty."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.debug("Ignoring unreadable index %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def save(self, index: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(index, indent=2, sort_keys=True) + "\n")


def lookup(index: dict[str, str], start: Path) -> tuple[Path, str] | None:
    """Find the nearest exact-match ancestor of start (inclusive) in the index."""
    for candidate in [start, *start.parents]:
        branch = index.get(str(candidate))
        if branch:
            return candidate, branch
    return None


def assign(store: IndexStore, project_dir: Path, branch: str) -> None:
    index = store.load()
    index[str(project_dir)] = branch
    store.save(index)
    logger.debug("Mapped %s -> %s", project_dir, branch)


def unassign_branch(store: IndexStore, branch: str) -> list[str]:
    """Drop every mapping that points at branch. Returns the removed paths."""
    index = store.load()
    removed = [path for path, mapped in index.items() if mapped == branch]
    if removed:
        for path in removed:
            del index[path]
        store.save(index)
    return removed
