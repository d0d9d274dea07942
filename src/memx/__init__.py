"""memx: git-backed, branch-per-task persistent memory for AI agents."""

__version__ = "0.3.0"
