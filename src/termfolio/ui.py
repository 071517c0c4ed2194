# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import clear as pt_clear
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.styles import Style

from .config import ANSI_COLORS, KIND_COLORS
from .fragments import Panel
from .history import EntryKind, HistoryEntry, HistoryStore

if TYPE_CHECKING:
    from .kernel import Terminal  # pragma: no cover


@dataclass(frozen=True)
class CommandCompletionItem:
    key: str
    meta: str


# ----------------------------
# Config helpers (from config.py facade via terminal.config.get_path)
# ----------------------------


def _cfg_get_path(cfg: Any, path: str, default):
    if cfg is None or not hasattr(cfg, "get_path"):
        return default
    try:
        return cfg.get_path(path, default)
    except Exception:
        return default


def _cfg_bool(cfg: Any, path: str, default: bool) -> bool:
    return bool(_cfg_get_path(cfg, path, default))


def _cfg_dict(cfg: Any, path: str, default: dict) -> dict:
    val = _cfg_get_path(cfg, path, default)
    return val if isinstance(val, dict) else default


def _terminal_config(terminal: Terminal | None) -> Any:
    return getattr(terminal, "config", None) if terminal is not None else None


# ----------------------------
# Theme / Style
# ----------------------------


def _default_style_dict() -> dict[str, str]:
    return {
        # completion menu
        "completion-menu": "bg:#111111 #d0d0d0",
        "completion-menu.completion": "bg:#111111 #d0d0d0",
        "completion-menu.completion.current": "bg:#303030 #ffffff bold",
        "completion-menu.meta.completion": "bg:#111111 #808080",
        "completion-menu.meta.completion.current": "bg:#303030 #a0a0a0",
        "scrollbar.background": "bg:#202020",
        "scrollbar.button": "bg:#505050",
        # toolbar base (prompt_toolkit uses this class name)
        "bottom-toolbar": "bg:#0b0b0b #d0d0d0",
        # command preview line
        "termfolio.toolbar": "bg:#0b0b0b #a0a0a0",
        "termfolio.toolbar.usage": "bg:#0b0b0b #d0d0d0 bold",
        "termfolio.toolbar.hint": "bg:#0b0b0b #666666",
    }


def _build_style(cfg: Any) -> Style:
    base = _default_style_dict()
    overrides = _cfg_dict(cfg, "ui.theme.style", {})
    # only keep string->string
    for k, v in list(overrides.items()):
        if isinstance(k, str) and isinstance(v, str):
            base[k] = v
    return Style.from_dict(base)


def _kind_colors(cfg: Any) -> dict[str, str]:
    colors = dict(KIND_COLORS)
    for k, v in _cfg_dict(cfg, "ui.theme.kinds", {}).items():
        if isinstance(k, str) and isinstance(v, str) and v in ANSI_COLORS:
            colors[k] = v
    return colors


# ----------------------------
# Transcript rendering
# ----------------------------


class TranscriptRenderer:
    """Turns transcript entries into ANSI text, one entry per call."""

    def __init__(self, cfg: Any = None, prompt: str = "$") -> None:
        self.prompt = prompt
        self.show_timestamps = _cfg_bool(cfg, "ui.show_timestamps", False)
        self._colors = _kind_colors(cfg)

    def _color(self, kind: EntryKind) -> str:
        return ANSI_COLORS.get(self._colors.get(kind.value, "reset"), "")

    def render(self, entry: HistoryEntry) -> str:
        reset = ANSI_COLORS["reset"]
        prefix = ""
        if self.show_timestamps:
            stamp = entry.timestamp.strftime("%H:%M:%S")
            prefix = f"{ANSI_COLORS['dim']}[{stamp}]{reset} "

        if entry.kind is EntryKind.INPUT:
            return (
                f"{prefix}{self._color(entry.kind)}{self.prompt}{reset} "
                f"{entry.content}"
            )

        if isinstance(entry.content, Panel):
            body = self._render_panel(entry.content, self._color(entry.kind))
        else:
            body = f"{self._color(entry.kind)}{entry.content}{reset}"
        return f"{prefix}{body}"

    def _render_panel(self, panel: Panel, color: str) -> str:
        reset = ANSI_COLORS["reset"]
        accent = ANSI_COLORS["cyan"]
        out: list[str] = []
        if panel.title:
            out.append(f"{accent}{panel.title}{reset}")
        out.extend(f"{color}{line}{reset}" for line in panel.lines)
        if panel.actions:
            if out:
                out.append("")
            out.append(
                "  ".join(
                    f"{ANSI_COLORS['pink']}[{i}]{reset} {a.label}"
                    for i, a in enumerate(panel.actions, 1)
                )
            )
        return "\n".join(out)


class TranscriptView:
    """History listener that renders each new entry as it is appended.

    Typed input is already visible on the prompt line, so the input entry
    for a typed line is not echoed again. Input entries produced by
    follow-up actions are shown.
    """

    def __init__(
        self, renderer: TranscriptRenderer, write: Callable[[str], None]
    ) -> None:
        self.renderer = renderer
        self.write = write
        self._expected_echo: str | None = None
        self._unsubscribe: Callable[[], None] | None = None

    def attach(self, history: HistoryStore) -> None:
        self.detach()
        self._unsubscribe = history.subscribe(self)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def expect_echo(self, line: str) -> None:
        self._expected_echo = line.strip()

    def __call__(self, event: str, entry: HistoryEntry | None) -> None:
        if event != "append" or entry is None:
            return
        if (
            entry.kind is EntryKind.INPUT
            and self._expected_echo is not None
            and entry.content == self._expected_echo
        ):
            self._expected_echo = None
            return
        self.write(self.renderer.render(entry))


# ----------------------------
# Command completion
# ----------------------------


class TerminalCompleter(Completer):
    """Completes command names and aliases on the first token."""

    def __init__(self, terminal: Terminal | None) -> None:
        self.terminal = terminal

    def _get_items(self, prefix: str) -> list[CommandCompletionItem]:
        t = self.terminal
        if t is None or not hasattr(t, "list_completions"):
            return []
        items: list[CommandCompletionItem] = []
        for r in t.list_completions(prefix) or []:
            key = str(r.get("key", "")).strip()
            if key:
                items.append(
                    CommandCompletionItem(key=key, meta=str(r.get("meta", "")))
                )
        return items

    def _first_token_before_cursor(self, text_before_cursor: str) -> str | None:
        """Return the first token fragment, or None once past it."""
        s = text_before_cursor.lstrip()
        if " " in s:
            return None
        return s

    def get_completions(self, document, complete_event) -> Iterable[Completion]:
        token = self._first_token_before_cursor(
            document.text_before_cursor or ""
        )
        if token is None:
            return
        for it in self._get_items(token):
            yield Completion(
                it.key, start_position=-len(token), display_meta=it.meta
            )


# ----------------------------
# PromptSession UI
# ----------------------------


class PromptToolkitUI:
    """
    This is the *terminal-friendly* UI:
      - Keeps normal terminal scrollback + drag-select copy.
      - Uses PromptSession so completion menus remain exactly as expected.
      - Bottom toolbar previews the usage of the command being typed.
      - Hotkeys:
          * Up / Down: walk the recall buffer
          * Tab: complete the command name
          * Ctrl+L: clear the screen
          * Alt+1..9: trigger an action of the latest panel
    """

    def __init__(self, terminal: Terminal | None = None) -> None:
        self.terminal = terminal
        self.session: PromptSession[str] | None = None
        self._completer: TerminalCompleter | None = None
        self._style = _build_style(_terminal_config(terminal))

        # Track whether we ended on a newline (to prevent prompt mangling)
        self._needs_newline_before_prompt = False

    # ---------- toolbar rendering ----------

    def _bottom_toolbar(self):
        t = self.terminal
        cfg = _terminal_config(t)
        if t is None or not _cfg_bool(cfg, "ui.toolbar.enabled", True):
            return ""
        if self.session is None:
            return ""

        raw = (self.session.default_buffer.text or "").lstrip()
        hint = ("class:termfolio.toolbar.hint", "  Tab: complete  Alt+N: action  ")
        if not raw:
            return [hint]

        first = raw.split(maxsplit=1)[0]
        described = t.describe(first)
        if not described:
            return [hint]
        return [
            ("class:termfolio.toolbar", "  "),
            ("class:termfolio.toolbar.usage", described),
            ("class:termfolio.toolbar", "  "),
        ]

    # ---------- session ----------

    def _ensure_session(self) -> None:
        if self.session is not None:
            return

        key_bindings = (
            self.build_key_bindings(self.terminal)
            if self.terminal else None
        )
        self._completer = TerminalCompleter(self.terminal)

        self.session = PromptSession(
            key_bindings=key_bindings,
            completer=self._completer,
            complete_while_typing=False,
            style=self._style,
            bottom_toolbar=self._bottom_toolbar,
        )

    # ---------- public API ----------

    def read(self, prompt: str) -> str:
        self._ensure_session()
        assert self.session is not None

        if self._needs_newline_before_prompt:
            print_formatted_text(ANSI("\n"), style=self._style, end="")
            self._needs_newline_before_prompt = False

        with patch_stdout():
            return self.session.prompt(ANSI(prompt + " "))

    def write(self, text: str) -> None:
        """Write EXACTLY what we receive (no extra newline).

        Track prompt safety.
        """
        if not text:
            return
        print_formatted_text(ANSI(text), style=self._style, end="")
        self._needs_newline_before_prompt = not text.endswith("\n")

    def write_line(self, text: str) -> None:
        self.write(text + "\n")

    def clear(self) -> None:
        pt_clear()

    def interrupt(self) -> None:
        """End a running prompt from another thread (reads as EOF)."""
        session = self.session
        if session is None:
            return
        app = session.app
        loop = getattr(app, "loop", None)
        if not app.is_running or loop is None:
            return

        def _exit() -> None:
            if app.is_running:
                app.exit(exception=EOFError())

        loop.call_soon_threadsafe(_exit)

    # ---------- keybindings ----------

    def build_key_bindings(self, terminal: Terminal) -> KeyBindings:
        kb = KeyBindings()
        line = terminal.input_line

        def _show(buf, text: str) -> None:
            buf.text = text
            buf.cursor_position = len(text)

        @kb.add("up")
        def _(event):
            buf = event.current_buffer
            if line.recall.cursor == -1:
                line.set(buf.text)
            _show(buf, line.previous())

        @kb.add("down")
        def _(event):
            _show(event.current_buffer, line.next())

        @kb.add("tab")
        def _(event):
            buf = event.current_buffer
            line.set(buf.text)
            if line.complete():
                _show(buf, line.draft)
                return
            buf.complete_next()

        @kb.add("c-l")
        def _(event):
            try:
                event.app.renderer.clear()
            except Exception:
                pass
            try:
                event.current_buffer.reset()
            except Exception:
                pass
            event.app.invalidate()

        # Alt+1..9 is usually ESC then digit (GNOME Terminal + tmux)
        for n in range(1, 10):

            @kb.add("escape", str(n))
            def _(event, n=n):
                if terminal.trigger_action(n):
                    # drop the draft; the host loop drains the follow-up
                    event.current_buffer.reset()
                    event.app.exit(result="")

        return kb
