# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Utility functions for Termfolio.
"""

from typing import Any


def format_table(
    headers: list[str],
    rows: list[list[Any]],
    title: str = ""
) -> str:
    """
    Format data as a simple text table.

    Args:
        headers: List of column header names
        rows: List of rows, where each row is a list of values
        title: Optional title to display above the table

    Returns:
        Formatted table as a string ("" when there are no rows)
    """
    if not rows:
        return ""

    str_headers = [str(h) for h in headers]
    str_rows = [[str(val) for val in row] for row in rows]

    col_widths = []
    for i, header in enumerate(str_headers):
        max_width = len(header)
        for row in str_rows:
            if i < len(row):
                max_width = max(max_width, len(row[i]))
        col_widths.append(max_width)

    lines = []
    if title:
        lines.append(title)

    lines.append(
        "  ".join(h.ljust(col_widths[i]) for i, h in enumerate(str_headers))
        .rstrip()
    )
    for row in str_rows:
        lines.append(
            "  ".join(v.ljust(col_widths[i]) for i, v in enumerate(row))
            .rstrip()
        )

    return "\n".join(lines)


def strip_quotes(text: str) -> str:
    """Strip one matching pair of surrounding quotes.

    >>> strip_quotes('"Go Concurrency"')
    'Go Concurrency'
    >>> strip_quotes('"unbalanced')
    '"unbalanced'
    """
    s = (text or "").strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ('"', "'"):
        return s[1:-1]
    return s


def join_args(args: list[str] | None) -> str:
    """Rejoin handler arguments into one string."""
    return " ".join(args or [])


def quoted_arg(args: list[str] | None) -> str:
    """Rejoin args and strip one matching pair of quotes."""
    return strip_quotes(join_args(args)).strip()
