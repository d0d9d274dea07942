"""Pydantic v2 models for resolved stores and document views."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

GOAL_FILE = "goal.md"
STATE_FILE = "state.md"
MEMORY_FILE = "memory.md"
PLAYBOOK_FILE = "playbook.md"

PLAYBOOK_HEADER = "# Playbook\n\nGlobal learnings that transfer across tasks.\n"
LEARNINGS_HEADER = "# Learnings\n\n"


def today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


class Status(str, Enum):
    active = "active"
    blocked = "blocked"
    done = "done"


class StoreHandle(BaseModel):
    """Where the memory for a directory lives.

    ``task_branch`` is None for local stores (whatever is checked out wins)
    and for central stores with no index entry for the directory.
    """

    store_dir: Path
    is_local: bool
    task_branch: str | None = None
    project_dir: Path | None = None

    @property
    def unmapped(self) -> bool:
        return not self.is_local and self.task_branch is None


class Progress(BaseModel):
    checked: int
    total: int
    percent: int | None = None
    criteria: list[tuple[bool, str]] = []

    @property
    def has_criteria(self) -> bool:
        return self.total > 0


class Learning(BaseModel):
    number: int
    date: str = ""
    text: str
    line: str


class TaskInfo(BaseModel):
    name: str
    branch: str
    current: bool = False
