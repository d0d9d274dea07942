"""The bundled SKILL.md that teaches an agent to drive `mem`, and its installer."""

from __future__ import annotations

from pathlib import Path

from memx.core.frontmatter import build_frontmatter

PROVIDER_DIRS = {
    "claude": ".claude",
    "gemini": ".gemini",
}

_BODY = """\
# mem: persistent agent memory

Keep goal, progress and learnings across sessions. Every task is a git
branch; every change is a commit.

## Start of a session

```bash
mem context                 # goal, state, task learnings, playbook
```

## Lifecycle

```bash
mem new "<goal>"            # task in ~/.mem, mapped to this directory
mem init <name> "<goal>"    # task in the store governing this directory
mem status                  # summary of the current task
mem done                    # mark done, promote learnings, merge
```

## Goal and criteria

```bash
mem goal ["<goal>"]         # show or replace the goal
mem criteria add "<text>"   # add a Definition of Done item
mem criteria <n>            # check off open criterion n
mem progress                # percent of criteria done
mem constraint add "<text>" # add a boundary; `mem constraints` lists them
```

## While working

```bash
mem next ["<step>"]         # show or set the next step
mem checkpoint "<msg>"      # record progress
mem stuck ["<reason>"|clear]
mem learn [-g] "<insight>"  # task learning, or straight to the playbook
mem learnings               # numbered, for `mem promote <n>`
```

## Tasks, schedules, sync

```bash
mem tasks                   # all task branches
mem switch <name>
mem wake "every 15m"        # also "8am daily", "monday 9am", raw cron
mem cron export
mem sync
```

## Session loop

1. `mem context`
2. `mem next`
3. Work, then `mem checkpoint "..."`
4. `mem learn "..."` for anything worth remembering
5. `mem next "..."` for your future self
"""

SKILL_MD = build_frontmatter(
    {
        "name": "mem",
        "description": "Persistent memory for AI agents: git-backed, one branch per task.",
    },
    _BODY,
)


def skill_path(provider: str, home: Path | None = None) -> Path:
    return (home or Path.home()) / PROVIDER_DIRS[provider] / "skills" / "mem" / "SKILL.md"


def installed_providers(home: Path | None = None) -> list[str]:
    return [p for p in PROVIDER_DIRS if skill_path(p, home).is_file()]


def install_skill(provider: str, home: Path | None = None) -> Path:
    """Write SKILL.md for one provider. Returns the file written."""
    if provider not in PROVIDER_DIRS:
        raise ValueError(f"Unknown provider: {provider}")
    path = skill_path(provider, home)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SKILL_MD)
    return path
