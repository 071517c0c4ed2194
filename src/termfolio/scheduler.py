# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Delayed, fire-and-forget effects.

ThreadingScheduler runs each effect on a daemon timer thread: nothing
awaits it, nothing cancels it mid-session, and if the process exits
first the effect is simply lost.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ThreadingScheduler:
    """Scheduler protocol implementation backed by threading.Timer."""

    def __init__(self) -> None:
        self._timers: set[threading.Timer] = set()
        self._lock = threading.Lock()

    def after(self, delay: float, effect: Callable[[], None]) -> None:
        timer: threading.Timer | None = None

        def _fire() -> None:
            try:
                effect()
            except Exception:
                logger.exception("scheduled effect failed")
            finally:
                with self._lock:
                    self._timers.discard(timer)  # type: ignore[arg-type]

        timer = threading.Timer(max(delay, 0.0), _fire)
        timer.daemon = True
        with self._lock:
            self._timers.add(timer)
        timer.start()

    def pending(self) -> int:
        with self._lock:
            return len(self._timers)

    def cancel_all(self) -> None:
        """Drop effects that have not fired yet (session teardown)."""
        with self._lock:
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()
