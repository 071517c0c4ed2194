# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""Exception types for Termfolio."""

from __future__ import annotations


class TermfolioError(Exception):
    """Base class for Termfolio errors."""


class RegistryError(TermfolioError):
    """Command registry is misconfigured (duplicate or colliding tokens)."""


class CatalogError(TermfolioError):
    """Content catalog data is malformed."""
