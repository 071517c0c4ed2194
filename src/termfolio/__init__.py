# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Termfolio core package.

An interactive portfolio terminal: a command registry with aliases, a
dispatcher, an append-only transcript and a prompt_toolkit front end.
"""

__version__ = "1.0.0"

from .kernel import Terminal as Terminal  # noqa: E402,F401 (re-export)
