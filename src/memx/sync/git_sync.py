"""Git plumbing for a memory store: argv-level runner plus push/pull sync."""

from __future__ import annotations

import logging
from pathlib import Path

import git

logger = logging.getLogger(__name__)


class GitError(Exception):
    """A git command exited non-zero. The message is git's stderr."""


class GitRunner:
    """Runs git with an explicit argument vector inside one working tree."""

    def __init__(self, cwd: Path) -> None:
        self.cwd = Path(cwd)
        self._git = git.Git(str(self.cwd))

    def run(self, *args: str) -> str:
        logger.debug("git %s (in %s)", " ".join(args), self.cwd)
        status, stdout, stderr = self._git.execute(
            ["git", *args],
            with_extended_output=True,
            with_exceptions=False,
        )
        if status != 0:
            raise GitError((stderr or "").strip() or "Git command failed")
        return (stdout or "").strip()

    # -- Porcelain helpers --

    def current_branch(self) -> str:
        return self.run("rev-parse", "--abbrev-ref", "HEAD")

    def checkout(self, branch: str, create: bool = False, start_point: str | None = None) -> None:
        args = ["checkout", "-b", branch] if create else ["checkout", branch]
        if start_point:
            args.append(start_point)
        self.run(*args)

    def branches(self) -> list[tuple[str, bool]]:
        """Return (name, is_current) for every local branch."""
        result = []
        for line in self.run("branch", "--list").splitlines():
            if not line.strip():
                continue
            result.append((line.replace("*", "", 1).strip(), line.lstrip().startswith("*")))
        return result

    def has_branch(self, branch: str) -> bool:
        return any(name == branch for name, _ in self.branches())

    def add(self, *paths: str) -> None:
        self.run("add", *(paths or ("-A",)))

    def commit(self, message: str) -> None:
        self.run("commit", "-m", message)

    def is_dirty(self) -> bool:
        return bool(self.run("status", "--porcelain"))

    def in_merge(self) -> bool:
        return (self.cwd / ".git" / "MERGE_HEAD").exists()

    def log(self, count: int) -> str:
        return self.run("log", "--oneline", f"-{count}")

    def remotes(self) -> list[str]:
        return [r for r in self.run("remote").splitlines() if r.strip()]


class GitSync:
    """Push/pull a store's current branch against ``origin``."""

    def __init__(self, runner: GitRunner) -> None:
        self.runner = runner

    def sync(self) -> dict:
        if "origin" not in self.runner.remotes():
            return {"status": "no_remote"}

        branch = self.runner.current_branch()
        pulled = False
        # A branch that was never pushed has nothing to pull yet.
        if self.runner.run("ls-remote", "--heads", "origin", branch):
            self.runner.run("pull", "--rebase", "origin", branch)
            pulled = True
        self.runner.run("push", "-u", "origin", branch)
        return {"status": "pushed", "branch": branch, "pulled": pulled}

    def add_remote(self, url: str, branches: list[str]) -> dict:
        self.runner.run("remote", "add", "origin", url)
        for branch in branches:
            self.runner.run("push", "-u", "origin", branch)
        return {"status": "connected", "url": url, "branches": branches}
