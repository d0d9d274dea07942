"""Exceptions raised by the memory store."""

from __future__ import annotations


class StoreError(Exception):
    pass


class UsageError(StoreError):
    """Bad user input: missing argument, out-of-range number, unknown name."""
