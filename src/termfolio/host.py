# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Host effects for a terminal session.

BrowserHost hands navigation and external links to the system browser
and clipboard writes to pyperclip. Navigating to the site root means
leaving the terminal, so it also fires the on_leave callback.
"""

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Callable

import pyperclip

logger = logging.getLogger(__name__)


class BrowserHost:
    """Host protocol implementation for a desktop terminal."""

    def __init__(
        self,
        base_url: str,
        on_leave: Callable[[], None] | None = None,
        root_path: str = "/",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.on_leave = on_leave
        self.root_path = root_path

    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    def navigate(self, path: str) -> None:
        url = self.url_for(path)
        logger.info("navigate %s", url)
        webbrowser.open_new_tab(url)
        if path == self.root_path and self.on_leave is not None:
            self.on_leave()

    def open_external(self, url: str) -> None:
        logger.info("open external %s", url)
        webbrowser.open_new_tab(url)

    def copy_to_clipboard(self, text: str) -> bool:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException:
            logger.warning("clipboard unavailable", exc_info=True)
            return False
        return True
