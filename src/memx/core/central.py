"""The central store (~/.mem): lazy creation and directory-mapped tasks."""

from __future__ import annotations

import logging
from pathlib import Path

from memx.core.errors import UsageError
from memx.core.index import INDEX_FILE, IndexStore, JsonIndexStore, assign
from memx.core.store import MemoryStore
from memx.utils.config import CONFIG_FILE
from memx.utils.paths import central_store_dir, task_slug

logger = logging.getLogger(__name__)

# Both files must survive branch switches, so git never tracks them.
CENTRAL_GITIGNORE = f"{INDEX_FILE}\n{CONFIG_FILE}\n"


def central_index(central_dir: Path | None = None) -> IndexStore:
    return JsonIndexStore((central_dir or central_store_dir()) / INDEX_FILE)


def open_central(default_branch: str = "main", central_dir: Path | None = None) -> MemoryStore:
    """Return the central store, creating the repository on first use."""
    store = MemoryStore(central_dir or central_store_dir(), default_branch=default_branch)
    if not store.initialized:
        logger.debug("Creating central store at %s", store.store_dir)
        store.init_repo(gitignore=CENTRAL_GITIGNORE)
    return store


def new_task(
    goal: str,
    project_dir: Path,
    provider: str | None = None,
    criteria: list[str] | None = None,
    default_branch: str = "main",
    central_dir: Path | None = None,
) -> tuple[MemoryStore, str]:
    """Create task/<slug-of-goal> in the central store and map project_dir to it."""
    try:
        name = task_slug(goal)
    except ValueError as e:
        raise UsageError(str(e)) from None
    store = open_central(default_branch, central_dir)
    branch = store.create_task(name, goal, criteria=criteria, provider=provider)
    assign(central_index(store.store_dir), project_dir.resolve(), branch)
    return store, branch
