"""Shared fixtures: isolated HOME/MEM_HOME, git identity, stores, fakes."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from memx.core.store import MemoryStore
from memx.utils.paths import MEM_DIR


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory, monkeypatch) -> Path:
    """Point HOME and MEM_HOME at a scratch directory and give git an identity."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("MEM_HOME", str(home / ".mem"))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    return home


@pytest.fixture
def central_dir(isolated_env: Path) -> Path:
    return isolated_env / ".mem"


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A plain project directory, chdir'd into for the duration of the test."""
    project = tmp_path / "project"
    project.mkdir()
    original = os.getcwd()
    os.chdir(project)
    yield project
    os.chdir(original)


@pytest.fixture
def store(tmp_path: Path) -> MemoryStore:
    """A local store with one task, task/demo, checked out."""
    project = tmp_path / "work"
    project.mkdir()
    s = MemoryStore(project / MEM_DIR)
    s.init_repo()
    s.create_task("demo", "Ship the demo", criteria=["Write the code", "Write the tests"])
    return s


class MemoryIndex:
    """In-memory IndexStore."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data = dict(data or {})
        self.saves = 0

    def load(self) -> dict[str, str]:
        return dict(self.data)

    def save(self, index: dict[str, str]) -> None:
        self.data = dict(index)
        self.saves += 1


class RecordingRunner:
    """Stands in for GitRunner: answers current_branch and records every call."""

    def __init__(self, current: str = "main") -> None:
        self.current = current
        self.calls: list[tuple[str, ...]] = []

    def current_branch(self) -> str:
        self.calls.append(("rev-parse", "--abbrev-ref", "HEAD"))
        return self.current

    def run(self, *args: str) -> str:
        self.calls.append(args)
        if args[:1] == ("checkout",):
            self.current = args[-1]
        return ""


@pytest.fixture
def memory_index() -> MemoryIndex:
    return MemoryIndex()


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()
