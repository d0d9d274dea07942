"""Path utilities: store locations, task branch naming."""

from __future__ import annotations

import os
import re
from pathlib import Path


MEM_DIR = ".mem"
TASK_PREFIX = "task/"


def central_store_dir() -> Path:
    """Return the central store directory (~/.mem, or $MEM_HOME when set)."""
    override = os.environ.get("MEM_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / MEM_DIR


def is_store(path: Path) -> bool:
    return (path / ".git").is_dir()


def find_local_store(start: Path | None = None, exclude: Path | None = None) -> Path | None:
    """Walk up from start to find a directory containing .mem/.git.

    ``exclude`` skips one candidate, so the central store living in the home
    directory is never mistaken for a project-local store.
    """
    current = (start or Path.cwd()).resolve()
    skip = exclude.resolve() if exclude is not None else None
    for parent in [current, *current.parents]:
        candidate = parent / MEM_DIR
        if skip is not None and candidate == skip:
            continue
        if is_store(candidate):
            return candidate
    return None


def task_slug(text: str, max_words: int = 3) -> str:
    """Derive a branch slug from free text: first few lowercase words joined by '-'."""
    cleaned = re.sub(r"[^a-z0-9\s-]", "", text.lower())
    words = [w for w in re.split(r"[\s-]+", cleaned) if w]
    slug = "-".join(words[:max_words])
    if not slug:
        raise ValueError("Cannot derive a task name from empty text")
    return slug


def task_branch(name: str) -> str:
    """Return the task branch for a name, without doubling the prefix."""
    return name if name.startswith(TASK_PREFIX) else f"{TASK_PREFIX}{name}"


def task_name(branch: str) -> str:
    return branch[len(TASK_PREFIX):] if branch.startswith(TASK_PREFIX) else branch
