# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command registry.

An ordered table of command definitions. Names map straight to their
definition; aliases are a secondary lookup table. Colliding tokens are a
configuration error raised when the registry is built.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from .errors import RegistryError

Handler = Callable[[list[str]], "Any | Awaitable[Any]"]


@dataclass(frozen=True)
class CommandDefinition:
    name: str
    description: str
    handler: Handler
    aliases: frozenset[str] = field(default_factory=frozenset)
    hidden: bool = False
    usage: str = ""

    def tokens(self) -> tuple[str, ...]:
        return (self.name, *sorted(self.aliases))


class CommandRegistry:
    def __init__(self, definitions: Iterable[CommandDefinition]) -> None:
        self._definitions: list[CommandDefinition] = []
        self._by_name: dict[str, CommandDefinition] = {}
        self._by_alias: dict[str, CommandDefinition] = {}

        for definition in definitions:
            self._add(definition)

    def _add(self, definition: CommandDefinition) -> None:
        name = definition.name
        if not name or name != name.lower() or any(c.isspace() for c in name):
            raise RegistryError(
                f"Command name must be a lowercase token: {name!r}"
            )
        if name in self._by_name:
            raise RegistryError(f"Duplicate command name: {name}")
        if name in self._by_alias:
            owner = self._by_alias[name].name
            raise RegistryError(
                f"Command name {name!r} collides with an alias of {owner!r}"
            )

        for alias in definition.aliases:
            if not alias or alias != alias.lower():
                raise RegistryError(
                    f"Alias must be a lowercase token: {alias!r} ({name})"
                )
            if alias == name or alias in self._by_name:
                raise RegistryError(
                    f"Alias {alias!r} of {name!r} collides with a command name"
                )
            if alias in self._by_alias:
                owner = self._by_alias[alias].name
                raise RegistryError(
                    f"Alias {alias!r} of {name!r} is already an alias of "
                    f"{owner!r}"
                )

        self._definitions.append(definition)
        self._by_name[name] = definition
        for alias in definition.aliases:
            self._by_alias[alias] = definition

    # -----------------------
    # Lookup
    # -----------------------

    def resolve(self, token: str) -> CommandDefinition | None:
        candidate = (token or "").lower()
        if not candidate:
            return None
        found = self._by_name.get(candidate)
        if found is not None:
            return found
        return self._by_alias.get(candidate)

    def get(self, name: str) -> CommandDefinition:
        return self._by_name[name]

    def visible(self) -> list[CommandDefinition]:
        return [d for d in self._definitions if not d.hidden]

    def complete(self, prefix: str) -> CommandDefinition | None:
        """First command (registry order) with a token starting with prefix."""
        lowered = (prefix or "").lower()
        if not lowered:
            return None
        for definition in self._definitions:
            if any(t.startswith(lowered) for t in definition.tokens()):
                return definition
        return None

    def candidates(self, prefix: str) -> list[tuple[str, CommandDefinition]]:
        """All (token, definition) pairs whose token starts with prefix.

        Hidden commands are left out of the menu.
        """
        lowered = (prefix or "").lower()
        out: list[tuple[str, CommandDefinition]] = []
        for definition in self._definitions:
            if definition.hidden:
                continue
            for token in definition.tokens():
                if token.startswith(lowered):
                    out.append((token, definition))
        return out

    def names(self) -> list[str]:
        return [d.name for d in self._definitions]

    def __iter__(self) -> Iterator[CommandDefinition]:
        return iter(list(self._definitions))

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and self.resolve(token) is not None
