# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Protocol definitions for dependency injection.

These interfaces keep the terminal engine free of the effects it asks
for: a host fulfils navigation, external links and clipboard writes, and
a scheduler runs delayed effects.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol


class Host(Protocol):
    """Protocol for the environment hosting a terminal session."""

    def navigate(self, path: str) -> None:
        """Request that the host change the displayed route."""
        ...

    def open_external(self, url: str) -> None:
        """Open a URL outside the terminal (new tab/window semantics)."""
        ...

    def copy_to_clipboard(self, text: str) -> bool:
        """Write text to the system clipboard. Returns success."""
        ...


class Scheduler(Protocol):
    """Protocol for delayed, fire-and-forget effects."""

    def after(self, delay: float, effect: Callable[[], None]) -> None:
        """Run effect once, delay seconds from now."""
        ...


class ConfigModel(Protocol):
    """Protocol for configuration access."""

    @property
    def system(self) -> dict[str, Any]:
        """System configuration."""
        ...

    @property
    def commands(self) -> dict[str, Any]:
        """Command configuration."""
        ...

    @property
    def profile(self) -> dict[str, Any]:
        """Identity/profile configuration."""
        ...

    def get_path(self, path: str, default: Any = None) -> Any:
        """Nested dotted lookup."""
        ...
