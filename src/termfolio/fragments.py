# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Structured output fragments.

A Panel is a small block of output with a title, body lines and
suggested follow-up actions. Triggering an action submits its command
through the same path as typed input.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Action:
    label: str
    command: str


@dataclass(frozen=True)
class Panel:
    title: str = ""
    lines: tuple[str, ...] = ()
    actions: tuple[Action, ...] = field(default_factory=tuple)

    def text(self) -> str:
        """Plain-text rendering (no styling)."""
        out: list[str] = []
        if self.title:
            out.append(self.title)
        out.extend(self.lines)
        if self.actions:
            if out:
                out.append("")
            out.append(
                "  ".join(
                    f"[{i}] {a.label}" for i, a in enumerate(self.actions, 1)
                )
            )
        return "\n".join(out)

    def __str__(self) -> str:
        return self.text()


def panel(
    title: str, lines: list[str] | tuple[str, ...] = (), *actions: Action
) -> Panel:
    return Panel(title=title, lines=tuple(lines), actions=tuple(actions))

