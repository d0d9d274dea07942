"""MCP server exposing mem commands as tools over stdio.

Every tool runs the matching CLI command in a subprocess, in the server's
working directory, so tool calls and terminal use share one code path.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from memx.core.errors import StoreError
from memx.core.resolver import resolve
from memx.core.store import MemoryStore
from memx.sync.git_sync import GitError
from memx.utils.config import default_branch

logger = logging.getLogger(__name__)

_FALLBACK_INSTRUCTIONS = (
    "mem keeps persistent, git-backed memory for the current task. "
    "Call mem_context at the start of a session, mem_checkpoint after progress, "
    "and mem_learn for anything worth remembering."
)

mcp = FastMCP("mem", instructions=_FALLBACK_INSTRUCTIONS)

_work_dir: Path | None = None


def set_work_dir(path: Path | None) -> None:
    """Override the directory tools run in (used by `--dir` and tests)."""
    global _work_dir
    _work_dir = Path(path).resolve() if path is not None else None


def _get_work_dir() -> Path:
    return _work_dir or Path.cwd()


def _generate_instructions() -> str:
    """Project-aware instructions, or the generic text when no task resolves."""
    handle = resolve(_get_work_dir())
    if handle is None or handle.unmapped:
        return _FALLBACK_INSTRUCTIONS
    try:
        store = MemoryStore.open(handle, default_branch=default_branch())
        goal = store.goal_line()
        branch = store.current_branch()
    except (StoreError, GitError) as e:
        logger.debug("Falling back to generic instructions: %s", e)
        return _FALLBACK_INSTRUCTIONS
    lines = [f"mem is tracking {branch}."]
    if goal:
        lines.append(f"Goal: {goal}")
    lines.append(_FALLBACK_INSTRUCTIONS)
    return "\n".join(lines)


def run_mem(*args: str) -> str:
    """Run one mem command and return its stdout. A non-zero exit raises ToolError."""
    cwd = _get_work_dir()
    logger.debug("mem %s (in %s)", " ".join(args), cwd)
    proc = subprocess.run(
        [sys.executable, "-m", "memx", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        stdin=subprocess.DEVNULL,
    )
    if proc.returncode != 0:
        raise ToolError(proc.stderr.strip() or proc.stdout.strip() or f"mem {args[0]} failed")
    return proc.stdout.strip()


# -- Tools --


@mcp.tool()
def mem_context() -> str:
    """Get the full memory context (goal, state, learnings, playbook). Use on wake to hydrate."""
    return run_mem("context")


@mcp.tool()
def mem_status() -> str:
    """Get the current task status summary."""
    return run_mem("status")


@mcp.tool()
def mem_checkpoint(message: str) -> str:
    """Save a progress checkpoint describing what was accomplished."""
    return run_mem("checkpoint", message)


@mcp.tool()
def mem_learn(insight: str, global_: bool = False) -> str:
    """Record a learning. With global_=True it goes to the shared playbook."""
    if global_:
        return run_mem("learn", "-g", insight)
    return run_mem("learn", insight)


@mcp.tool()
def mem_next(step: str) -> str:
    """Set the next step to work on."""
    return run_mem("next", step)


@mcp.tool()
def mem_stuck(reason: str) -> str:
    """Mark the task as blocked, or pass "clear" to remove the blocker."""
    return run_mem("stuck", reason)


@mcp.tool()
def mem_goal(goal: str = "") -> str:
    """Get the current goal, or replace it when goal is given."""
    if goal:
        return run_mem("goal", goal)
    return run_mem("goal")


@mcp.tool()
def mem_tasks() -> str:
    """List all tasks (branches)."""
    return run_mem("tasks")


@mcp.tool()
def mem_switch(task: str) -> str:
    """Switch to a different task."""
    return run_mem("switch", task)


@mcp.tool()
def mem_progress() -> str:
    """Show progress against the Definition of Done criteria."""
    return run_mem("progress")


@mcp.tool()
def mem_criteria(action: str = "list", value: str = "") -> str:
    """Manage criteria: action "add" with the criterion text, "check" with its number, or "list"."""
    if action == "list":
        return run_mem("criteria")
    if action not in ("add", "check"):
        raise ToolError(f"Unknown criteria action: {action}. Use add, check or list.")
    if not value:
        raise ToolError(f"criteria {action} needs a value")
    return run_mem("criteria", action, value)


def mcp_config(work_dir: Path | None = None) -> dict:
    """The mcpServers snippet that registers this server with an MCP client."""
    args = ["mcp", "serve"]
    if work_dir is not None:
        args += ["--dir", str(Path(work_dir).resolve())]
    return {"mcpServers": {"mem": {"command": "mem", "args": args}}}


def main(work_dir: Path | None = None) -> None:
    """Run the MCP server on stdio."""
    if work_dir is not None:
        set_work_dir(work_dir)
    mcp._mcp_server.instructions = _generate_instructions()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
