# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Termfolio kernel.

Core implementation of one terminal session:
- command registry (built per session, no module-level table)
- transcript + recall buffer
- input line (draft, recall navigation, completion)
- dispatch of submitted lines
- follow-up commands queued by panel actions

Important boundary:
- Kernel does not load YAML or touch the browser/clipboard.
- Kernel consumes the injected config, catalog, host and scheduler.

Re-entrancy:
- Follow-ups are message passing: actions enqueue a command, and the
  host loop feeds the queue back through execute_command().
- Delayed effects may append to the transcript at any time; ordering is
  strictly append order.
"""

from __future__ import annotations

import logging
import traceback
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from . import config as cfg_module
from .catalog import Catalog
from .commands import CommandContext, build_registry
from .config import UI_CLEAR
from .dispatcher import Dispatched, Dispatcher
from .fragments import Action, Panel
from .history import EntryKind, HistoryEntry, HistoryStore, RecallBuffer
from .input_line import InputLine
from .interfaces import ConfigModel, Host, Scheduler
from .registry import CommandRegistry

logger = logging.getLogger(__name__)


def write_crash_log(
    error: Exception,
    raw_command: str = "",
    data_root: Path | None = None,
) -> None:
    """Write an entry to the crash log.

    Logs unhandled exceptions that escaped the engine.
    Only creates the log directory when actually needed.
    Appends to crash.log (never overwrites).
    """
    try:
        root = data_root or cfg_module.get_data_root()
        log_dir = cfg_module.logs_dir(root)
        log_dir.mkdir(parents=True, exist_ok=True)

        lines = [f"{datetime.now().isoformat()}"]
        if raw_command:
            lines.append(f"raw={raw_command}")
        lines.append(f"error={type(error).__name__}: {error}")
        lines.append("traceback:")
        lines.append(
            "".join(
                traceback.format_exception(
                    type(error), error, error.__traceback__
                )
            )
        )
        lines.append("----")

        with (log_dir / "crash.log").open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    except OSError:
        # Already in an error state; the session carries on regardless
        logger.exception("could not write crash log")


@dataclass
class Terminal:
    """Termfolio session engine."""

    config: ConfigModel
    catalog: Catalog
    host: Host
    scheduler: Scheduler
    clock: Callable[[], datetime] = datetime.now

    running: bool = False

    # Built in __post_init__
    history: HistoryStore = field(init=False)
    recall: RecallBuffer = field(init=False)
    registry: CommandRegistry = field(init=False)
    input_line: InputLine = field(init=False)
    dispatcher: Dispatcher = field(init=False)

    _followups: deque[str] = field(default_factory=deque, init=False)
    _cleared: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.history = HistoryStore(clock=self.clock)

        capacity = self.config.get_path("limits.recall", 20)
        self.recall = RecallBuffer(capacity=int(capacity))

        ctx = CommandContext(
            history=self.history,
            catalog=self.catalog,
            config=self.config,
            host=self.host,
            scheduler=self.scheduler,
            recall=self.recall,
            request_followup=self.request_followup,
            clear_session=self.clear,
        )
        self.registry = build_registry(ctx)
        self.input_line = InputLine(self.registry, self.recall)
        self.dispatcher = Dispatcher(self.registry, self.history)

    # -----------------------
    # Session
    # -----------------------

    def start(self) -> HistoryEntry | None:
        """Start a session and post the welcome message."""
        self.running = True
        message = self.config.get_path("system.welcome.message", "")
        if isinstance(message, str) and message.strip():
            return self.history.append(EntryKind.INFO, message.strip())
        return None

    def stop(self) -> None:
        self.running = False

    def prompt(self) -> str:
        return str(self.config.get_path("system.prompt", "$"))

    def clear(self) -> None:
        """Empty the transcript and the draft."""
        self.history.clear()
        self.input_line.clear()
        self._cleared = True

    # -----------------------
    # Command handling
    # -----------------------

    def submit(self) -> str | None:
        """Submit the current draft."""
        line = self.input_line.submit()
        if line is None:
            return None
        return self._run(line)

    def execute_command(self, text: str) -> str | None:
        """Run a command line exactly as if it had been typed.

        Returns UI_CLEAR when the command cleared the transcript.
        """
        line = (text or "").strip()
        if not line:
            return None
        self.recall.push(line)
        return self._run(line)

    def _run(self, line: str) -> str | None:
        self._cleared = False
        dispatched: Dispatched | None = self.dispatcher.dispatch(line)
        if dispatched is not None and dispatched.definition is not None:
            logger.debug("handled %s", dispatched.definition.name)
        if self._cleared:
            self._cleared = False
            return UI_CLEAR
        return None

    # -----------------------
    # Follow-ups
    # -----------------------

    def request_followup(self, command: str) -> None:
        self._followups.append(command)

    def pending_followups(self) -> list[str]:
        return list(self._followups)

    def drain_followups(self) -> list[str | None]:
        """Run queued follow-ups in FIFO order.

        Follow-ups queued while draining run in the same pass.
        """
        results: list[str | None] = []
        while self._followups:
            results.append(self.execute_command(self._followups.popleft()))
        return results

    def latest_actions(self) -> tuple[Action, ...]:
        """Actions of the most recent panel in the transcript."""
        for entry in reversed(self.history.entries):
            if isinstance(entry.content, Panel) and entry.content.actions:
                return entry.content.actions
        return ()

    def trigger_action(self, number: int) -> bool:
        """Queue the number-th (1-based) action of the latest panel."""
        actions = self.latest_actions()
        if not 1 <= number <= len(actions):
            return False
        self.request_followup(actions[number - 1].command)
        return True

    # -----------------------
    # UI helper hooks
    # -----------------------

    def describe(self, token: str) -> str | None:
        """Used by the UI toolbar to preview the first token."""
        definition = self.registry.resolve(token)
        if definition is None:
            return None
        return f"{definition.usage}: {definition.description}"

    def list_completions(self, prefix: str) -> list[dict[str, str]]:
        """Used by the UI completer.

        Returns:
            [{"key": "<token>", "meta": "<description>"}...]
        """
        return [
            {"key": token, "meta": definition.description}
            for token, definition in self.registry.candidates(prefix)
        ]
