# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Tokenizer and dispatcher.

Grammar is deliberately small:
- ``summon("item")`` / ``summon('item')`` is routed to summon directly
- anything else is split on whitespace: first token (lowercased) is the
  command, the rest are arguments with their casing preserved

The dispatcher appends the raw input, resolves the command, runs its
handler (awaiting it if needed) and appends the result. It never raises
for user input and it is safe to call again from inside a handler or a
delayed effect.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from collections.abc import Awaitable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from .fragments import Panel
from .history import EntryKind, HistoryStore
from .registry import CommandDefinition, CommandRegistry

logger = logging.getLogger(__name__)

SUMMON_CALL_RE = re.compile(
    r"""^summon\(\s*(?P<q>["'])(?P<item>.*?)(?P=q)\s*\)$""", re.IGNORECASE
)

NOT_FOUND_TEMPLATE = "Command not found: {}. Type 'help' for available commands."


@dataclass(frozen=True)
class ParsedLine:
    command: str
    args: tuple[str, ...]
    raw: str


@dataclass(frozen=True)
class CommandResult:
    """Handler result with an explicit entry kind."""

    content: str | Panel
    kind: EntryKind = EntryKind.OUTPUT


@dataclass(frozen=True)
class Dispatched:
    parsed: ParsedLine
    definition: CommandDefinition | None


def parse_line(line: str) -> ParsedLine | None:
    """Split a raw line into command + args. None for blank input."""
    raw = (line or "").strip()
    if not raw:
        return None

    match = SUMMON_CALL_RE.match(raw)
    if match:
        return ParsedLine(command="summon", args=(match.group("item"),), raw=raw)

    parts = raw.split()
    return ParsedLine(command=parts[0].lower(), args=tuple(parts[1:]), raw=raw)


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class Dispatcher:
    def __init__(self, registry: CommandRegistry, history: HistoryStore) -> None:
        self.registry = registry
        self.history = history

    def dispatch(self, line: str) -> Dispatched | None:
        parsed = parse_line(line)
        if parsed is None:
            return None

        self.history.append(EntryKind.INPUT, parsed.raw)

        definition = self.registry.resolve(parsed.command)
        if definition is None:
            logger.debug("unresolved command: %s", parsed.command)
            self.history.append(
                EntryKind.ERROR, NOT_FOUND_TEMPLATE.format(parsed.command)
            )
            return Dispatched(parsed, None)

        logger.debug("dispatch %s args=%r", definition.name, parsed.args)
        try:
            result = self._run(definition, list(parsed.args))
        except Exception as e:
            logger.exception("command %s failed", definition.name)
            self.history.append(EntryKind.ERROR, f"Error executing command: {e}")
            return Dispatched(parsed, definition)

        self._append_result(result)
        return Dispatched(parsed, definition)

    def _run(self, definition: CommandDefinition, args: list[str]) -> Any:
        result = definition.handler(args)
        if inspect.isawaitable(result):
            result = _run_awaitable(result)
        return result

    def _append_result(self, result: Any) -> None:
        if result is None:
            return
        if isinstance(result, CommandResult):
            if _is_empty(result.content):
                return
            self.history.append(result.kind, result.content)
            return
        if _is_empty(result):
            return
        if not isinstance(result, Panel):
            result = str(result)
        self.history.append(EntryKind.OUTPUT, result)


def _run_awaitable(awaitable: Awaitable[Any]) -> Any:
    """Drive an awaitable to completion from synchronous code.

    With no loop running on this thread a fresh one is used. Inside a
    running loop (an async handler dispatching again) the awaitable runs
    on its own loop in a worker thread while the caller waits.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_await(awaitable))

    with ThreadPoolExecutor(
        max_workers=1, thread_name_prefix="termfolio-async"
    ) as pool:
        return pool.submit(asyncio.run, _await(awaitable)).result()


def _is_empty(content: Any) -> bool:
    return isinstance(content, str) and content == ""
