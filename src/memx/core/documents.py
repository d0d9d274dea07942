"""Line-based editing of the markdown memory documents.

Sections are ``## `` headings; a section runs until the next ``## `` heading
or the end of the document. All functions take and return plain text so they
can be applied to a file's raw contents or to a decoded body alike.
"""

from __future__ import annotations

import re

from memx.core.errors import UsageError
from memx.core.schema import LEARNINGS_HEADER, Learning, Progress

DONE_HEADING = "## Definition of Done"
CONSTRAINTS_HEADING = "## Constraints"
NEXT_HEADING = "## Next Step"
CHECKPOINTS_HEADING = "## Checkpoints"

UNCHECKED = "- [ ]"
CHECKED = "- [x]"

_PROGRESS_RE = re.compile(r"^## Progress: \d+%", re.MULTILINE)
_LEARNING_RE = re.compile(r"^- (?:(\d{4}-\d{2}-\d{2}): )?(.+)$")


# -- Templates --


def goal_body(goal: str, criteria: list[str] | None = None) -> str:
    parts = [f"# Goal\n\n{goal}", DONE_HEADING]
    if criteria:
        parts.append("\n".join(f"{UNCHECKED} {c}" for c in criteria))
    parts.append("## Progress: 0%")
    return "\n\n".join(parts)


def state_body() -> str:
    return f"# State\n\n{NEXT_HEADING}\n\nDefine approach\n\n{CHECKPOINTS_HEADING}\n\n{UNCHECKED} Started"


def memory_document() -> str:
    return LEARNINGS_HEADER


# -- Sections --


def _section_bounds(lines: list[str], heading: str) -> tuple[int, int] | None:
    """(start, end) line indexes of a section's content, end exclusive."""
    for i, line in enumerate(lines):
        if line.rstrip() == heading:
            end = next(
                (j for j in range(i + 1, len(lines)) if lines[j].startswith("## ")),
                len(lines),
            )
            return i + 1, end
    return None


def _ensure_section(lines: list[str], heading: str) -> tuple[int, int]:
    bounds = _section_bounds(lines, heading)
    if bounds is not None:
        return bounds
    marker = next((i for i, line in enumerate(lines) if _PROGRESS_RE.match(line)), None)
    if marker is not None:
        lines[marker:marker] = [heading, "", ""]
    else:
        while lines and not lines[-1].strip():
            lines.pop()
        lines.extend(["", heading, ""])
    return _section_bounds(lines, heading)


def _append_to_section(lines: list[str], heading: str, entry: str) -> None:
    start, end = _ensure_section(lines, heading)
    last = None
    for j in range(start, end):
        if lines[j].strip():
            last = j
    if last is None:
        lines[start:end] = ["", entry, ""]
    else:
        lines.insert(last + 1, entry)


def _prepend_to_section(lines: list[str], heading: str, entry: str) -> None:
    start, end = _ensure_section(lines, heading)
    first = next((j for j in range(start, end) if lines[j].strip()), None)
    if first is None:
        lines[start:end] = ["", entry, ""]
    else:
        lines.insert(first, entry)


def section_text(text: str, heading: str) -> str | None:
    lines = text.split("\n")
    bounds = _section_bounds(lines, heading)
    if bounds is None:
        return None
    return "\n".join(lines[bounds[0]:bounds[1]]).strip()


def section_bullets(text: str, heading: str) -> list[str]:
    content = section_text(text, heading)
    if content is None:
        return []
    return [line for line in content.split("\n") if line.startswith("- ")]


def append_bullet(text: str, heading: str, entry: str) -> str:
    """Append a bullet line at the end of a section, creating the section if needed."""
    lines = text.split("\n")
    _append_to_section(lines, heading, entry)
    return "\n".join(lines)


def remove_bullet(text: str, heading: str, number: int) -> tuple[str, str]:
    """Remove the number-th (1-based) bullet of a section. Returns (text, removed line)."""
    lines = text.split("\n")
    bounds = _section_bounds(lines, heading)
    if bounds is not None:
        position = 0
        for j in range(*bounds):
            if lines[j].startswith("- "):
                position += 1
                if position == number:
                    removed = lines.pop(j)
                    return "\n".join(lines), removed
    raise UsageError(f"#{number} not found")


# -- Goal --


def goal_statement(body: str) -> str | None:
    """First non-heading line of the goal body."""
    return next((line for line in body.split("\n") if line and not line.startswith("#")), None)


def replace_goal_statement(body: str, goal: str) -> str:
    """Swap the goal paragraph, keeping every ``## `` section after it."""
    lines = body.split("\n")
    first = next((i for i, line in enumerate(lines) if line.startswith("## ")), None)
    head = f"# Goal\n\n{goal}"
    if first is None:
        return head
    return head + "\n\n" + "\n".join(lines[first:])


# -- Criteria & progress --


def compute_progress(text: str) -> Progress | None:
    """Progress over the Definition of Done checklist, or None without that section."""
    content = section_text(text, DONE_HEADING)
    if content is None:
        return None
    criteria = []
    for line in content.split("\n"):
        if line.startswith(CHECKED):
            criteria.append((True, line[len(CHECKED):].strip()))
        elif line.startswith(UNCHECKED):
            criteria.append((False, line[len(UNCHECKED):].strip()))
    total = len(criteria)
    checked = sum(1 for done, _ in criteria if done)
    percent = (200 * checked + total) // (2 * total) if total else None
    return Progress(checked=checked, total=total, percent=percent, criteria=criteria)


def has_progress_marker(text: str) -> bool:
    return _PROGRESS_RE.search(text) is not None


def write_progress_marker(text: str, percent: int) -> str:
    return _PROGRESS_RE.sub(f"## Progress: {percent}%", text, count=1)


def add_criterion(text: str, criterion: str) -> str:
    """Insert a new criterion at the top of the Definition of Done, creating the section if needed."""
    lines = text.split("\n")
    _prepend_to_section(lines, DONE_HEADING, f"{UNCHECKED} {criterion}")
    return "\n".join(lines)


def check_criterion(text: str, number: int) -> tuple[str, str]:
    """Mark the number-th unchecked criterion (1-based, document order) as done.

    Numbering counts only lines still reading ``- [ ]``, so numbers shift
    after each check. Returns (text, criterion).
    """
    lines = text.split("\n")
    position = 0
    for i, line in enumerate(lines):
        if line.startswith(UNCHECKED):
            position += 1
            if position == number:
                lines[i] = line.replace(UNCHECKED, CHECKED, 1)
                return "\n".join(lines), line[len(UNCHECKED):].strip()
    raise UsageError(f"Criterion #{number} not found ({position} open)")


# -- State --


def next_step(body: str) -> str | None:
    content = section_text(body, NEXT_HEADING)
    if not content:
        return None
    return content.split("\n")[0]


def replace_next_step(body: str, step: str) -> str:
    lines = body.split("\n")
    bounds = _section_bounds(lines, NEXT_HEADING)
    if bounds is None:
        return f"{NEXT_HEADING}\n\n{step}\n\n{body}"
    start, end = bounds
    lines[start:end] = ["", step, ""] if end < len(lines) else ["", step]
    return "\n".join(lines)


def add_checkpoint(body: str, entry: str) -> str:
    return append_bullet(body, CHECKPOINTS_HEADING, entry)


# -- Learnings --


def bullet_lines(text: str) -> list[str]:
    return [line for line in text.split("\n") if line.startswith("- ")]


def parse_learning(line: str, number: int) -> Learning:
    match = _LEARNING_RE.match(line)
    if match is None:
        return Learning(number=number, text=line[2:], line=line)
    return Learning(number=number, date=match.group(1) or "", text=match.group(2), line=line)


def append_line(text: str, line: str) -> str:
    if text and not text.endswith("\n"):
        text += "\n"
    return f"{text}{line}\n"
