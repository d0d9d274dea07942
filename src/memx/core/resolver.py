"""Resolve which memory store (and task branch) governs a directory."""

from __future__ import annotations

import logging
from pathlib import Path

from memx.core.index import INDEX_FILE, IndexStore, JsonIndexStore, lookup
from memx.core.schema import StoreHandle
from memx.utils.paths import central_store_dir, find_local_store, is_store

logger = logging.getLogger(__name__)


def resolve(
    start_dir: Path | None = None,
    index_store: IndexStore | None = None,
    central_dir: Path | None = None,
) -> StoreHandle | None:
    """Locate the store for start_dir.

    A project-local ``.mem`` found walking upward always wins. Otherwise the
    central store is used, with the task branch taken from the path index
    (nearest mapped ancestor). Returns None when neither exists.
    """
    start = (start_dir or Path.cwd()).resolve()
    central = central_dir or central_store_dir()

    local = find_local_store(start, exclude=central)
    if local is not None:
        logger.debug("Resolved %s to local store %s", start, local)
        return StoreHandle(store_dir=local, is_local=True, project_dir=local.parent)

    if not is_store(central):
        logger.debug("No local store above %s and no central store at %s", start, central)
        return None

    index = (index_store or JsonIndexStore(central / INDEX_FILE)).load()
    match = lookup(index, start)
    if match is None:
        logger.debug("Central store has no mapping for %s", start)
        return StoreHandle(store_dir=central, is_local=False)

    project_dir, branch = match
    logger.debug("Resolved %s to %s via %s", start, branch, project_dir)
    return StoreHandle(
        store_dir=central, is_local=False, task_branch=branch, project_dir=project_dir
    )
