# tests/test_ui.py
from __future__ import annotations

import importlib
import re
from datetime import datetime

import pytest

prompt_toolkit = pytest.importorskip("prompt_toolkit")

from prompt_toolkit.document import Document  # noqa: E402

from termfolio.catalog import Catalog  # noqa: E402
from termfolio.config import YAMLConfig, load_defaults_yaml  # noqa: E402
from termfolio.fragments import Action, Panel  # noqa: E402
from termfolio.history import EntryKind, HistoryEntry, HistoryStore  # noqa: E402

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def plain(text: str) -> str:
    return ANSI_RE.sub("", text)


# Helper: Create fake dependencies for Terminal
class FakeHost:
    def navigate(self, path: str) -> None:
        pass

    def open_external(self, url: str) -> None:
        pass

    def copy_to_clipboard(self, text: str) -> bool:
        return True


class FakeScheduler:
    def after(self, delay, effect) -> None:
        pass


def make_terminal():
    from termfolio.kernel import Terminal

    t = Terminal(
        config=YAMLConfig(load_defaults_yaml("system.yaml")),
        catalog=Catalog(),
        host=FakeHost(),
        scheduler=FakeScheduler(),
    )
    t.start()
    return t


def entry(kind: EntryKind, content, when=None) -> HistoryEntry:
    return HistoryEntry(
        id=1,
        kind=kind,
        content=content,
        timestamp=when or datetime(2025, 5, 22, 9, 5, 7),
    )


class FakeBuffer:
    def __init__(self, text: str = ""):
        self.text = text
        self.cursor_position = len(text)
        self.resets = 0
        self.menu_steps = 0

    def reset(self):
        self.text = ""
        self.resets += 1

    def complete_next(self):
        self.menu_steps += 1


class FakeApp:
    def __init__(self):
        self.exits = []

    def exit(self, result=None, exception=None):
        self.exits.append((result, exception))


class FakeEvent:
    def __init__(self, buf: FakeBuffer):
        self.current_buffer = buf
        self.app = FakeApp()


def _key_names(binding) -> tuple[str, ...]:
    return tuple(getattr(k, "value", k) for k in binding.keys)


def find_handler(kb, *keys: str):
    for binding in kb.bindings:
        if _key_names(binding) == keys:
            return binding.handler
    raise AssertionError(f"no binding for {keys}")


# -------------------------------------------------------------------
# Contract surface
# -------------------------------------------------------------------


def test_ui_module_exports_prompt_toolkit_ui() -> None:
    ui = importlib.import_module("termfolio.ui")
    assert hasattr(ui, "PromptToolkitUI")


def test_prompt_toolkit_ui_contract_surface() -> None:
    ui = importlib.import_module("termfolio.ui")

    inst = ui.PromptToolkitUI()

    assert callable(getattr(inst, "read", None))
    assert callable(getattr(inst, "write", None))
    assert callable(getattr(inst, "write_line", None))
    assert callable(getattr(inst, "clear", None))
    assert callable(getattr(inst, "interrupt", None))
    assert callable(getattr(inst, "build_key_bindings", None))


def test_interrupt_without_session_is_noop() -> None:
    ui = importlib.import_module("termfolio.ui")

    assert ui.PromptToolkitUI().interrupt() is None


# -------------------------------------------------------------------
# Transcript rendering
# -------------------------------------------------------------------


def test_render_input_entry_shows_prompt() -> None:
    ui = importlib.import_module("termfolio.ui")
    r = ui.TranscriptRenderer(None, prompt="me@box:~$")

    out = r.render(entry(EntryKind.INPUT, "help"))

    assert plain(out) == "me@box:~$ help"


def test_render_error_uses_red() -> None:
    ui = importlib.import_module("termfolio.ui")
    r = ui.TranscriptRenderer(None)

    out = r.render(entry(EntryKind.ERROR, "nope"))

    assert out.startswith("\033[31m")
    assert plain(out) == "nope"


def test_render_panel_with_actions() -> None:
    ui = importlib.import_module("termfolio.ui")
    r = ui.TranscriptRenderer(None)
    p = Panel(
        title="Get in touch:",
        lines=("- Email: a@b.c",),
        actions=(Action("Copy email", "copy-email"), Action("Open", "open contact")),
    )

    out = plain(r.render(entry(EntryKind.OUTPUT, p)))

    assert out == p.text()
    assert out.splitlines()[-1] == "[1] Copy email  [2] Open"


def test_render_with_timestamps() -> None:
    ui = importlib.import_module("termfolio.ui")
    cfg = YAMLConfig({"ui": {"show_timestamps": True}})
    r = ui.TranscriptRenderer(cfg)

    out = plain(r.render(entry(EntryKind.OUTPUT, "hi")))

    assert out == "[09:05:07] hi"


def test_kind_color_override() -> None:
    ui = importlib.import_module("termfolio.ui")
    cfg = YAMLConfig({"ui": {"theme": {"kinds": {"info": "magenta", "bad": 3}}}})
    r = ui.TranscriptRenderer(cfg)

    out = r.render(entry(EntryKind.INFO, "hi"))

    assert out.startswith("\033[38;5;126;1m")


def test_transcript_view_skips_expected_echo_once() -> None:
    ui = importlib.import_module("termfolio.ui")
    written: list[str] = []
    history = HistoryStore()
    view = ui.TranscriptView(ui.TranscriptRenderer(None, prompt="$"), written.append)
    view.attach(history)

    view.expect_echo("help ")
    history.append(EntryKind.INPUT, "help")
    history.append(EntryKind.OUTPUT, "text")
    history.append(EntryKind.INPUT, "help")

    assert [plain(w) for w in written] == ["text", "$ help"]


def test_transcript_view_detach() -> None:
    ui = importlib.import_module("termfolio.ui")
    written: list[str] = []
    history = HistoryStore()
    view = ui.TranscriptView(ui.TranscriptRenderer(None), written.append)
    view.attach(history)

    history.clear()
    view.detach()
    history.append(EntryKind.OUTPUT, "unseen")

    assert written == []


# -------------------------------------------------------------------
# Completion + toolbar
# -------------------------------------------------------------------


def test_completer_offers_first_token_only() -> None:
    ui = importlib.import_module("termfolio.ui")
    completer = ui.TerminalCompleter(make_terminal())

    found = [c.text for c in completer.get_completions(Document("proj"), None)]
    assert found == ["projects", "project"]

    assert list(completer.get_completions(Document("project 1"), None)) == []


def test_completer_without_terminal() -> None:
    ui = importlib.import_module("termfolio.ui")

    assert list(ui.TerminalCompleter(None).get_completions(Document("he"), None)) == []


def test_bottom_toolbar_previews_usage() -> None:
    ui = importlib.import_module("termfolio.ui")

    class Session:
        default_buffer = FakeBuffer("project 100")

    inst = ui.PromptToolkitUI(make_terminal())
    inst.session = Session()

    parts = inst._bottom_toolbar()

    assert ("class:termfolio.toolbar.usage",
            "project <id-or-name>: Show one project by id or name") in parts


def test_bottom_toolbar_hint_for_unknown_command() -> None:
    ui = importlib.import_module("termfolio.ui")

    class Session:
        default_buffer = FakeBuffer("zzz")

    inst = ui.PromptToolkitUI(make_terminal())
    inst.session = Session()

    parts = inst._bottom_toolbar()

    assert parts[0][0] == "class:termfolio.toolbar.hint"


# -------------------------------------------------------------------
# Output
# -------------------------------------------------------------------


def test_ui_clear_is_ansi_free(monkeypatch: pytest.MonkeyPatch) -> None:
    ui = importlib.import_module("termfolio.ui")

    called = {"clear": 0}

    def fake_clear():
        called["clear"] += 1

    monkeypatch.setattr(ui, "pt_clear", fake_clear, raising=True)

    inst = ui.PromptToolkitUI()
    assert inst.clear() is None
    assert called["clear"] == 1


def test_ui_write_noops_on_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    ui = importlib.import_module("termfolio.ui")

    called = {"print": 0}

    def fake_print_formatted_text(*args, **kwargs):
        called["print"] += 1

    monkeypatch.setattr(ui, "print_formatted_text", fake_print_formatted_text)

    inst = ui.PromptToolkitUI()
    inst.write("")
    inst.write(None)  # type: ignore[arg-type]
    assert called["print"] == 0


def test_ui_write_line_wraps_ansi(monkeypatch: pytest.MonkeyPatch) -> None:
    ui = importlib.import_module("termfolio.ui")

    seen = {}

    def fake_print_formatted_text(arg, **kwargs):
        seen["arg"] = arg
        seen["end"] = kwargs.get("end")

    monkeypatch.setattr(ui, "print_formatted_text", fake_print_formatted_text)

    inst = ui.PromptToolkitUI()
    inst.write_line("\033[31mRED\033[0m")

    assert seen["arg"].__class__.__name__ == "ANSI"
    assert seen["end"] == ""
    assert inst._needs_newline_before_prompt is False


def test_ui_read_creates_session_without_terminal(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    ui = importlib.import_module("termfolio.ui")

    created = {"key_bindings": "unset", "prompt_arg": None}

    class FakeSession:
        def __init__(
            self,
            key_bindings=None,
            completer=None,
            complete_while_typing=None,
            style=None,
            bottom_toolbar=None,
        ):
            created["key_bindings"] = key_bindings
            created["complete_while_typing"] = complete_while_typing

        def prompt(self, arg):
            created["prompt_arg"] = arg
            return "hello"

    monkeypatch.setattr(ui, "PromptSession", FakeSession, raising=True)

    inst = ui.PromptToolkitUI(terminal=None)
    assert inst.read("$") == "hello"
    assert created["key_bindings"] is None
    assert created["complete_while_typing"] is False
    assert created["prompt_arg"].__class__.__name__ == "ANSI"


def test_ui_read_uses_existing_session(monkeypatch: pytest.MonkeyPatch) -> None:
    ui = importlib.import_module("termfolio.ui")

    class FakeSession:
        def __init__(self):
            self.calls = 0

        def prompt(self, arg):
            self.calls += 1
            return "again"

    inst = ui.PromptToolkitUI(terminal=None)
    inst.session = FakeSession()

    assert inst.read("$") == "again"
    assert inst.session.calls == 1


# -------------------------------------------------------------------
# Key bindings
# -------------------------------------------------------------------


def test_up_and_down_walk_recall() -> None:
    ui = importlib.import_module("termfolio.ui")
    t = make_terminal()
    t.execute_command("help")
    t.execute_command("projects")
    kb = ui.PromptToolkitUI(t).build_key_bindings(t)
    up = find_handler(kb, "up")
    down = find_handler(kb, "down")

    buf = FakeBuffer("draft")
    up(FakeEvent(buf))
    assert buf.text == "projects"
    assert buf.cursor_position == len("projects")

    up(FakeEvent(buf))
    assert buf.text == "help"

    down(FakeEvent(buf))
    assert buf.text == "projects"
    down(FakeEvent(buf))
    assert buf.text == ""


def test_up_with_empty_recall_keeps_typed_text() -> None:
    ui = importlib.import_module("termfolio.ui")
    t = make_terminal()
    kb = ui.PromptToolkitUI(t).build_key_bindings(t)

    buf = FakeBuffer("half typed")
    find_handler(kb, "up")(FakeEvent(buf))

    assert buf.text == "half typed"


def test_tab_completes_command_name() -> None:
    ui = importlib.import_module("termfolio.ui")
    t = make_terminal()
    kb = ui.PromptToolkitUI(t).build_key_bindings(t)
    tab = find_handler(kb, "c-i")

    buf = FakeBuffer("wh")
    tab(FakeEvent(buf))
    assert buf.text == "whoami"
    assert buf.menu_steps == 0

    nothing = FakeBuffer("zz")
    tab(FakeEvent(nothing))
    assert nothing.text == "zz"
    assert nothing.menu_steps == 1


def test_ctrl_l_handler_executes_clear_reset_invalidate() -> None:
    ui = importlib.import_module("termfolio.ui")
    t = make_terminal()
    kb = ui.PromptToolkitUI(t).build_key_bindings(t)
    handler = find_handler(kb, "c-l")

    calls = {"clear": 0, "reset": 0, "invalidate": 0}

    class Renderer:
        def clear(self):
            calls["clear"] += 1

    class App:
        renderer = Renderer()

        def invalidate(self):
            calls["invalidate"] += 1

    class Buffer:
        def reset(self):
            calls["reset"] += 1

    class Event:
        app = App()
        current_buffer = Buffer()

    handler(Event())

    assert calls == {"clear": 1, "reset": 1, "invalidate": 1}


def test_alt_digit_triggers_panel_action() -> None:
    ui = importlib.import_module("termfolio.ui")
    t = make_terminal()
    t.execute_command("whoami")
    kb = ui.PromptToolkitUI(t).build_key_bindings(t)

    event = FakeEvent(FakeBuffer("typed"))
    find_handler(kb, "escape", "3")(event)

    assert t.pending_followups() == ["contact"]
    assert event.current_buffer.text == ""
    assert event.app.exits == [("", None)]


def test_alt_digit_out_of_range_does_nothing() -> None:
    ui = importlib.import_module("termfolio.ui")
    t = make_terminal()
    t.execute_command("whoami")
    kb = ui.PromptToolkitUI(t).build_key_bindings(t)

    event = FakeEvent(FakeBuffer("typed"))
    find_handler(kb, "escape", "9")(event)

    assert t.pending_followups() == []
    assert event.current_buffer.text == "typed"
    assert event.app.exits == []
