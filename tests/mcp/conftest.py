"""MCP fixtures: a project with a local store, and tool subprocesses that can import memx."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from memx.core.store import MemoryStore
from memx.mcp import server
from memx.utils.paths import MEM_DIR

SRC_DIR = str(Path(__file__).resolve().parents[2] / "src")


@pytest.fixture(autouse=True)
def src_on_pythonpath(monkeypatch):
    """Make `python -m memx` work in tool subprocesses without an install."""
    existing = os.environ.get("PYTHONPATH")
    monkeypatch.setenv("PYTHONPATH", f"{SRC_DIR}{os.pathsep}{existing}" if existing else SRC_DIR)


@pytest.fixture
def mcp_project(tmp_path: Path) -> Path:
    """Project with a local store on task/demo; tools run in it."""
    project = tmp_path / "project"
    project.mkdir()
    store = MemoryStore(project / MEM_DIR)
    store.init_repo()
    store.create_task("demo", "Ship the demo", criteria=["Write the code"])
    server.set_work_dir(project)
    yield project
    server.set_work_dir(None)
