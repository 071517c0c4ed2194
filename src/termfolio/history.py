# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Transcript (history) store and recall buffer.

Transcript:
- append-only; the only other mutation is clear()
- ids are strictly increasing for the life of the store and are never
  reused, including after clear()
- listeners are told about every append/clear so a view can render the
  newest entry and keep it in sight

Recall buffer:
- raw submitted lines, most-recent-first, bounded
- cursor is -1 when not navigating
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .fragments import Panel


class EntryKind(str, Enum):
    INPUT = "input"
    OUTPUT = "output"
    ERROR = "error"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"


@dataclass(frozen=True)
class HistoryEntry:
    id: int
    kind: EntryKind
    content: str | Panel
    timestamp: datetime


# ("append", entry) or ("clear", None)
HistoryListener = Callable[[str, "HistoryEntry | None"], None]


class HistoryStore:
    """Append-only transcript for one terminal session."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._entries: list[HistoryEntry] = []
        self._next_id = 1
        self._listeners: list[HistoryListener] = []
        # Delayed effects append from scheduler threads
        self._lock = threading.RLock()

    def append(self, kind: EntryKind | str, content: str | Panel) -> HistoryEntry:
        with self._lock:
            entry = HistoryEntry(
                id=self._next_id,
                kind=EntryKind(kind),
                content=content,
                timestamp=self._clock(),
            )
            self._next_id += 1
            self._entries.append(entry)
            listeners = list(self._listeners)

        for listener in listeners:
            listener("append", entry)
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries = []
            listeners = list(self._listeners)

        for listener in listeners:
            listener("clear", None)

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        """Register a listener. Returns an unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def last(self) -> HistoryEntry | None:
        with self._lock:
            return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self.entries)


class RecallBuffer:
    """Previously submitted raw lines for up/down navigation."""

    def __init__(self, capacity: int = 20) -> None:
        if capacity < 1:
            raise ValueError("Recall capacity must be at least 1.")
        self.capacity = capacity
        self.entries: list[str] = []
        self.cursor = -1

    def push(self, line: str) -> None:
        self.entries.insert(0, line)
        del self.entries[self.capacity:]
        self.cursor = -1

    def previous(self) -> str | None:
        """Step to an older line. None when there is nothing to recall."""
        if not self.entries:
            return None
        self.cursor = min(self.cursor + 1, len(self.entries) - 1)
        return self.entries[self.cursor]

    def next(self) -> str:
        """Step to a newer line; "" once past the newest."""
        if self.cursor <= 0:
            self.cursor = -1
            return ""
        self.cursor -= 1
        return self.entries[self.cursor]

    def chronological(self) -> list[str]:
        return list(reversed(self.entries))

    def __len__(self) -> int:
        return len(self.entries)
