"""Wake schedules: human-friendly patterns to cron expressions."""

from __future__ import annotations

import re

_INTERVAL_RE = re.compile(r"^every\s+(\d+)\s*(m|min|minutes?|h|hr|hours?)$")
_DAILY_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\s*(?:daily|every\s*day)?$")
_WEEKLY_RE = re.compile(
    r"^(?:every\s+)?(mon|tue|wed|thu|fri|sat|sun)[a-z]*\s+(?:at\s+)?(\d{1,2})(?::(\d{2}))?\s*(am|pm)?$"
)
_CRON_FIELD = r"[\d*/\-,]+"
_CRON_RE = re.compile(rf"^{_CRON_FIELD}(?:\s+{_CRON_FIELD}){{4}}$")

_WEEKDAYS = {"sun": 0, "mon": 1, "tue": 2, "wed": 3, "thu": 4, "fri": 5, "sat": 6}

EXAMPLES = [
    "every 15m",
    "every 2h",
    "8am daily",
    "monday 9am",
    "*/30 * * * *",
]


def _hour(value: str, ampm: str | None) -> int:
    hour = int(value)
    if ampm == "pm" and hour < 12:
        hour += 12
    if ampm == "am" and hour == 12:
        hour = 0
    return hour


def wake_to_cron(pattern: str) -> str | None:
    """Convert a wake pattern to a five-field cron expression, or None."""
    pattern = pattern.lower().strip()

    match = _INTERVAL_RE.match(pattern)
    if match:
        num = int(match.group(1))
        if match.group(2).startswith("m"):
            return f"*/{num} * * * *"
        return f"0 */{num} * * *"

    match = _DAILY_RE.match(pattern)
    if match:
        minute = int(match.group(2)) if match.group(2) else 0
        return f"{minute} {_hour(match.group(1), match.group(3))} * * *"

    match = _WEEKLY_RE.match(pattern)
    if match:
        minute = int(match.group(3)) if match.group(3) else 0
        day = _WEEKDAYS[match.group(1)]
        return f"{minute} {_hour(match.group(2), match.group(4))} * * {day}"

    if _CRON_RE.match(pattern):
        return pattern

    return None


def cron_line(pattern: str, command: str) -> str | None:
    cron = wake_to_cron(pattern)
    if cron is None:
        return None
    return f"{cron} {command}"
