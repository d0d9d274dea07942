"""Frontmatter parser/builder for the memory documents.

Handles the `---`-delimited ``key: value`` block at the top of goal.md and
state.md. Deliberately line-oriented rather than YAML: every key and value is
a single-line string, values keep any colons after the first one, and nothing
is coerced (``"true"`` stays a string).
"""

from __future__ import annotations

import re

_FRONTMATTER_RE = re.compile(r"^---\n(.*?)\n---\n(.*)$", re.DOTALL)


def parse_frontmatter(text: str | None) -> tuple[dict[str, str], str]:
    """Parse frontmatter + markdown body.

    Returns (metadata, body). If no frontmatter block is present, returns
    ({}, original_text).
    """
    if not text:
        return {}, ""

    match = _FRONTMATTER_RE.match(text)
    if not match:
        return {}, text

    metadata: dict[str, str] = {}
    for line in match.group(1).split("\n"):
        key, sep, value = line.partition(":")
        if not sep or not key.strip():
            continue
        metadata[key.strip()] = value.strip()

    return metadata, match.group(2).strip()


def build_frontmatter(metadata: dict[str, str], body: str) -> str:
    """Build a document from metadata and body. The body is emitted verbatim."""
    lines = "\n".join(f"{key}: {value}" for key, value in metadata.items())
    return f"---\n{lines}\n---\n\n{body}"
