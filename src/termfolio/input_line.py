# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""Input line controller: draft text, recall navigation, tab completion."""

from __future__ import annotations

from .history import RecallBuffer
from .registry import CommandRegistry


class InputLine:
    def __init__(self, registry: CommandRegistry, recall: RecallBuffer) -> None:
        self.registry = registry
        self.recall = recall
        self.draft = ""

    def set(self, text: str) -> None:
        self.draft = text

    def clear(self) -> None:
        self.draft = ""

    def submit(self) -> str | None:
        """Take the draft for submission. None when it is blank."""
        line = self.draft.strip()
        if not line:
            return None
        self.recall.push(line)
        self.draft = ""
        return line

    def previous(self) -> str:
        recalled = self.recall.previous()
        if recalled is not None:
            self.draft = recalled
        return self.draft

    def next(self) -> str:
        self.draft = self.recall.next()
        return self.draft

    def complete(self) -> bool:
        """Replace the draft with the first matching command name."""
        if not self.draft:
            return False
        match = self.registry.complete(self.draft.strip())
        if match is None or match.name == self.draft:
            return False
        self.draft = match.name
        return True
