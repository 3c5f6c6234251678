"""Domain port definitions for adapters."""

from __future__ import annotations

from .store import AccessChecker, RecordStore

__all__ = [
    "AccessChecker",
    "RecordStore",
]
