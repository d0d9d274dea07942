"""MemoryStore: read/modify/commit operations on one git-backed memory store."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from memx.core import documents
from memx.core.branch_guard import ensure_branch
from memx.core.errors import StoreError, UsageError
from memx.core.frontmatter import build_frontmatter, parse_frontmatter
from memx.core.schema import (
    GOAL_FILE,
    LEARNINGS_HEADER,
    MEMORY_FILE,
    PLAYBOOK_FILE,
    PLAYBOOK_HEADER,
    STATE_FILE,
    Learning,
    Progress,
    Status,
    StoreHandle,
    TaskInfo,
    today,
)
from memx.core.search import SearchResult, search_files
from memx.core.wake import cron_line, wake_to_cron
from memx.sync.git_sync import GitError, GitRunner
from memx.utils.paths import TASK_PREFIX, is_store, task_branch, task_name

logger = logging.getLogger(__name__)

APPEND_TARGETS = {
    "learnings": MEMORY_FILE,
    "playbook": PLAYBOOK_FILE,
    "checkpoints": STATE_FILE,
}


def _clip(text: str, limit: int = 50) -> str:
    return text[:limit]


class MemoryStore:
    """Manages the memory documents of one store directory.

    Every mutating method writes the file it changed and commits it
    immediately: one commit per operation.
    """

    def __init__(
        self,
        store_dir: Path,
        runner: GitRunner | None = None,
        default_branch: str = "main",
    ) -> None:
        self.store_dir = Path(store_dir)
        self.runner = runner or GitRunner(self.store_dir)
        self.default_branch = default_branch
        self.handle: StoreHandle | None = None

    @classmethod
    def open(cls, handle: StoreHandle, default_branch: str = "main") -> MemoryStore:
        """Open a resolved store, checking out its task branch first."""
        store = cls(handle.store_dir, default_branch=default_branch)
        store.handle = handle
        ensure_branch(handle.store_dir, handle.task_branch, store.runner)
        return store

    @property
    def initialized(self) -> bool:
        return is_store(self.store_dir)

    # -- File primitives --

    def read(self, filename: str) -> str | None:
        path = self.store_dir / filename
        if not path.is_file():
            return None
        return path.read_text()

    def write(self, filename: str, content: str) -> None:
        (self.store_dir / filename).write_text(content)

    def commit(self, paths: list[str], message: str) -> None:
        self.runner.add(*paths)
        self.runner.commit(message)

    def read_doc(self, filename: str) -> tuple[dict[str, str], str]:
        return parse_frontmatter(self.read(filename))

    def _save(self, filename: str, content: str, message: str) -> None:
        self.write(filename, content)
        self.commit([filename], message)

    def _save_doc(self, filename: str, meta: dict[str, str], body: str, message: str) -> None:
        self._save(filename, build_frontmatter(meta, body), message)

    # -- Initialization --

    def init_repo(self, gitignore: str = "") -> None:
        """Create the repository with the playbook committed on the default branch."""
        if self.initialized:
            raise StoreError(f"Memory store already exists at {self.store_dir}")
        created = not self.store_dir.exists()
        self.store_dir.mkdir(parents=True, exist_ok=True)
        try:
            self.runner.run("init")
            self.runner.run("symbolic-ref", "HEAD", f"refs/heads/{self.default_branch}")
            self.write(PLAYBOOK_FILE, PLAYBOOK_HEADER)
            self.write(".gitignore", gitignore)
            self.runner.add()
            self.runner.commit("init: memory repo")
        except (GitError, OSError):
            # A repository without a commit would still resolve as a store
            if created:
                shutil.rmtree(self.store_dir, ignore_errors=True)
            else:
                shutil.rmtree(self.store_dir / ".git", ignore_errors=True)
            raise
        logger.debug("Initialized memory store at %s", self.store_dir)

    def create_task(
        self,
        name: str,
        goal: str = "",
        criteria: list[str] | None = None,
        provider: str | None = None,
    ) -> str:
        """Branch task/<name> off the default branch and write fresh documents."""
        branch = task_branch(name)
        if self.runner.has_branch(branch):
            raise StoreError(f"Task already exists: {branch}")
        self.runner.checkout(branch, create=True, start_point=self.default_branch)

        slug = task_name(branch)
        self.write(
            GOAL_FILE,
            build_frontmatter(
                {"task": slug, "created": today()},
                documents.goal_body(goal or "Define your goal here", criteria),
            ),
        )
        state = {"status": Status.active.value}
        if provider:
            state["provider"] = provider
        self.write(STATE_FILE, build_frontmatter(state, documents.state_body()))
        self.write(MEMORY_FILE, documents.memory_document())
        self.runner.add()
        self.runner.commit(f"init: {slug}")
        return branch

    def current_branch(self) -> str:
        return self.runner.current_branch()

    # -- Goal --

    def goal(self) -> str | None:
        return self.read(GOAL_FILE)

    def goal_line(self) -> str | None:
        _, body = self.read_doc(GOAL_FILE)
        return documents.goal_statement(body)

    def set_goal(self, goal: str) -> None:
        meta, body = self.read_doc(GOAL_FILE)
        meta["updated"] = today()
        body = documents.replace_goal_statement(body, goal) if body else documents.goal_body(goal)
        self._save_doc(GOAL_FILE, meta, body, f"goal: {_clip(goal)}")

    # -- Next step & checkpoints --

    def next_step(self) -> str | None:
        _, body = self.read_doc(STATE_FILE)
        return documents.next_step(body)

    def set_next_step(self, step: str) -> None:
        meta, body = self.read_doc(STATE_FILE)
        self._save_doc(STATE_FILE, meta, documents.replace_next_step(body, step), f"next: {_clip(step)}")

    def checkpoint(self, message: str) -> str:
        if not message.strip():
            raise UsageError("Checkpoint message is required")
        meta, body = self.read_doc(STATE_FILE)
        entry = f"{documents.CHECKED} {today()}: {message}"
        self._save_doc(
            STATE_FILE, meta, documents.add_checkpoint(body, entry), f"checkpoint: {_clip(message)}"
        )
        return entry

    def checkpoints(self) -> list[str]:
        _, body = self.read_doc(STATE_FILE)
        return documents.section_bullets(body, documents.CHECKPOINTS_HEADING)

    # -- Status & blockers --

    def status(self) -> Status:
        meta, _ = self.read_doc(STATE_FILE)
        try:
            return Status(meta.get("status", Status.active.value))
        except ValueError:
            return Status.active

    def blocker(self) -> str | None:
        meta, _ = self.read_doc(STATE_FILE)
        return meta.get("blocker")

    def set_blocker(self, reason: str) -> None:
        meta, body = self.read_doc(STATE_FILE)
        if meta.get("status") == Status.done.value:
            raise UsageError("Task is already done")
        meta["blocker"] = reason
        meta["status"] = Status.blocked.value
        self._save_doc(STATE_FILE, meta, body, f"stuck: {_clip(reason)}")

    def clear_blocker(self) -> None:
        meta, body = self.read_doc(STATE_FILE)
        if meta.get("status") == Status.done.value:
            raise UsageError("Task is already done")
        meta.pop("blocker", None)
        meta["status"] = Status.active.value
        self._save_doc(STATE_FILE, meta, body, "unblocked")

    # -- Learnings --

    def learn(self, insight: str, global_: bool = False) -> str:
        if not insight.strip():
            raise UsageError("Insight is required")
        filename = PLAYBOOK_FILE if global_ else MEMORY_FILE
        content = self.read(filename) or (PLAYBOOK_HEADER if global_ else LEARNINGS_HEADER)
        self._save(
            filename,
            documents.append_line(content, f"- {today()}: {insight}"),
            f"learn: {_clip(insight)}",
        )
        return filename

    def learnings(self, global_: bool = False) -> list[Learning]:
        content = self.read(PLAYBOOK_FILE if global_ else MEMORY_FILE) or ""
        return [
            documents.parse_learning(line, i)
            for i, line in enumerate(documents.bullet_lines(content), 1)
        ]

    def playbook(self) -> str | None:
        return self.read(PLAYBOOK_FILE)

    def promote(self, number: int) -> Learning:
        learnings = self.learnings()
        if not 1 <= number <= len(learnings):
            raise UsageError(f"Invalid number. You have {len(learnings)} learnings.")
        learning = learnings[number - 1]
        playbook = self.read(PLAYBOOK_FILE) or PLAYBOOK_HEADER
        self._save(
            PLAYBOOK_FILE,
            documents.append_line(playbook, learning.line),
            f"promote: {learning.line[2:50]}",
        )
        return learning

    # -- Constraints --

    def constraints(self) -> list[str]:
        text = self.read(GOAL_FILE) or ""
        return [line[2:] for line in documents.section_bullets(text, documents.CONSTRAINTS_HEADING)]

    def add_constraint(self, constraint: str) -> None:
        text = self.read(GOAL_FILE) or ""
        updated = documents.append_bullet(text, documents.CONSTRAINTS_HEADING, f"- {constraint}")
        self._save(GOAL_FILE, updated, f"constraint: {_clip(constraint, 40)}")

    def remove_constraint(self, number: int) -> str:
        text = self.read(GOAL_FILE) or ""
        try:
            updated, removed = documents.remove_bullet(text, documents.CONSTRAINTS_HEADING, number)
        except UsageError:
            raise UsageError(f"Constraint #{number} not found") from None
        removed = removed[2:]
        self._save(GOAL_FILE, updated, f"remove constraint: {_clip(removed, 30)}")
        return removed

    # -- Criteria & progress --

    def progress(self, write_marker: bool = True) -> Progress | None:
        """Compute progress and refresh the ``## Progress: N%`` marker when present."""
        text = self.read(GOAL_FILE)
        if text is None:
            return None
        progress = documents.compute_progress(text)
        if (
            write_marker
            and progress is not None
            and progress.percent is not None
            and documents.has_progress_marker(text)
        ):
            updated = documents.write_progress_marker(text, progress.percent)
            if updated != text:
                self._save(GOAL_FILE, updated, f"progress: {progress.percent}%")
        return progress

    def add_criterion(self, criterion: str) -> None:
        text = self._require(GOAL_FILE)
        self._save(
            GOAL_FILE,
            documents.add_criterion(text, criterion),
            f'criteria: add "{_clip(criterion, 30)}"',
        )

    def check_criterion(self, number: int) -> str:
        text = self._require(GOAL_FILE)
        updated, criterion = documents.check_criterion(text, number)
        self._save(GOAL_FILE, updated, f"criteria: complete #{number}")
        return criterion

    def _require(self, filename: str) -> str:
        text = self.read(filename)
        if text is None:
            raise StoreError(f"No {filename} found")
        return text

    # -- Key/value primitives --

    def set_value(self, key: str, value: str) -> None:
        if not key or ":" in key or "\n" in key or "\n" in value:
            raise UsageError("Keys must be colon-free and values single-line")
        meta, body = self.read_doc(STATE_FILE)
        meta[key] = value
        self._save_doc(STATE_FILE, meta, body, f"set: {key}={_clip(value, 30)}")

    def get_value(self, key: str) -> str | None:
        meta, _ = self.read_doc(STATE_FILE)
        return meta.get(key)

    def append(self, list_name: str, item: str) -> str:
        filename = APPEND_TARGETS.get(list_name)
        if filename is None:
            raise UsageError(
                f"Unknown list: {list_name}. Valid lists: {', '.join(APPEND_TARGETS)}"
            )
        if list_name == "checkpoints":
            return self.checkpoint(item)
        content = self.read(filename) or ""
        line = f"- {today()}: {item}"
        self._save(
            filename, documents.append_line(content, line), f"append {list_name}: {_clip(item, 40)}"
        )
        return line

    # -- Wake --

    def wake(self) -> tuple[str, str | None] | None:
        meta, _ = self.read_doc(STATE_FILE)
        if not meta.get("wake"):
            return None
        return meta["wake"], meta.get("wake_command")

    def set_wake(self, pattern: str, command: str | None = None) -> str:
        cron = wake_to_cron(pattern)
        if cron is None:
            raise UsageError(f"Could not parse wake pattern: {pattern}")
        meta, body = self.read_doc(STATE_FILE)
        meta["wake"] = pattern
        if command:
            meta["wake_command"] = command
        self._save_doc(STATE_FILE, meta, body, f"wake: {pattern}")
        return cron

    def clear_wake(self) -> None:
        meta, body = self.read_doc(STATE_FILE)
        meta.pop("wake", None)
        meta.pop("wake_command", None)
        self._save_doc(STATE_FILE, meta, body, "wake: clear")

    def cron_entry(self, project_dir: Path) -> str:
        wake = self.wake()
        if wake is None:
            raise UsageError("No wake set. Use `mem wake \"pattern\"` first.")
        pattern, command = wake
        entry = cron_line(pattern, command or f"cd {project_dir} && mem context")
        if entry is None:
            raise UsageError(f"Could not parse wake pattern: {pattern}")
        return entry

    # -- Tasks & branches --

    def tasks(self) -> list[TaskInfo]:
        return [
            TaskInfo(name=task_name(name), branch=name, current=current)
            for name, current in self.runner.branches()
            if name.startswith(TASK_PREFIX)
        ]

    def switch(self, name: str) -> str:
        """Check out task/<name>, falling back to <name> itself (e.g. main)."""
        branch = task_branch(name)
        try:
            self.runner.checkout(branch)
            return branch
        except GitError:
            logger.debug("No branch %s, trying %s", branch, name)
        try:
            self.runner.checkout(name)
        except GitError as e:
            raise StoreError(f"Branch not found: {name}") from e
        return name

    def switch_or_create(self, name: str) -> tuple[str, bool]:
        """Switch to task/<name>, creating it off the default branch if needed."""
        branch = task_branch(name)
        if self.runner.has_branch(branch):
            self.runner.checkout(branch)
            return branch, False
        self.runner.checkout(branch, create=True, start_point=self.default_branch)
        return branch, True

    def commit_all(self, message: str = "checkpoint") -> bool:
        """Commit every pending change. Returns False when there was nothing to commit."""
        if not self.runner.is_dirty():
            return False
        self.runner.add()
        self.runner.commit(message)
        return True

    def history(self, count: int = 20) -> str:
        return self.runner.log(count)

    def query(self, text: str) -> list[SearchResult]:
        if not text.strip():
            raise UsageError("Search text is required")
        return search_files(self.store_dir, text)

    # -- Completion --

    def complete(self, promote: list[int] | None = None, delete_branch: bool = False) -> dict:
        """Finish the current task: mark done, promote learnings, merge into the default branch.

        If the merge fails the task branch is checked out again; a promotion
        commit made before the merge is kept.
        """
        branch = self.current_branch()
        if branch == self.default_branch:
            raise StoreError(f"Already on {self.default_branch} branch.")

        learnings = self.learnings()
        chosen = []
        for number in promote or []:
            if not 1 <= number <= len(learnings):
                raise UsageError(f"Invalid number {number}. You have {len(learnings)} learnings.")
            chosen.append(learnings[number - 1])

        meta, body = self.read_doc(STATE_FILE)
        if meta.get("status") != Status.done.value:
            meta.pop("blocker", None)
            meta["status"] = Status.done.value
            self._save_doc(STATE_FILE, meta, body, f"done: {task_name(branch)}")

        if chosen:
            playbook = self.read(PLAYBOOK_FILE) or PLAYBOOK_HEADER
            for learning in chosen:
                playbook = documents.append_line(playbook, learning.line)
            self._save(PLAYBOOK_FILE, playbook, "promote learnings to playbook")

        self.runner.checkout(self.default_branch)
        try:
            self.runner.run("merge", branch, "-m", f"done: {branch}")
        except GitError as e:
            if self.runner.in_merge():
                self.runner.run("merge", "--abort")
            self.runner.checkout(branch)
            raise StoreError(f"Merge failed: {e}") from e

        if delete_branch:
            self.runner.run("branch", "-d", branch)

        return {
            "branch": branch,
            "merged_into": self.default_branch,
            "promoted": [learning.text for learning in chosen],
            "deleted": delete_branch,
        }

    # -- Views --

    def summary(self) -> dict:
        progress = self.progress(write_marker=False)
        return {
            "branch": self.current_branch(),
            "store": str(self.store_dir),
            "goal": self.goal_line(),
            "status": self.status().value,
            "blocker": self.blocker(),
            "next": self.next_step(),
            "checkpoints": self.checkpoints()[-3:],
            "progress": progress.percent if progress is not None else None,
        }

    def context(self) -> str:
        """Full hydration text for an agent waking up on this task."""
        lines = ["# Context", "", f"Branch: {self.current_branch()}", ""]

        if self.read(GOAL_FILE) is not None:
            lines += ["## Goal", "", self.goal_line() or "Not set", ""]

        state = self.read(STATE_FILE)
        if state is not None:
            _, body = parse_frontmatter(state)
            lines += ["## State", "", body, ""]

        task_learnings = self.learnings()
        if task_learnings:
            lines += ["## Task Learnings", ""]
            lines += [learning.line for learning in task_learnings]
            lines.append("")

        global_learnings = self.learnings(global_=True)
        if global_learnings:
            lines += ["## Playbook (Global)", ""]
            lines += [learning.line for learning in global_learnings[-10:]]
            lines.append("")

        return "\n".join(lines)
