"""Keep a store's working tree on the task branch before touching files."""

from __future__ import annotations

import logging
from pathlib import Path

from memx.sync.git_sync import GitRunner

logger = logging.getLogger(__name__)


def ensure_branch(store_dir: Path, task_branch: str | None, runner: GitRunner | None = None) -> None:
    """Check out task_branch in store_dir unless it is already checked out.

    A null branch is a no-op. Checkout failures propagate as GitError.
    """
    if not task_branch:
        return
    runner = runner or GitRunner(store_dir)
    current = runner.current_branch()
    if current == task_branch:
        return
    logger.debug("Switching %s from %s to %s", store_dir, current, task_branch)
    runner.run("checkout", task_branch)
