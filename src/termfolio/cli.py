# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Termfolio CLI entry point and REPL loop.

Design:
- CLI owns process startup: config, logging, catalog, host, scheduler.
- Terminal is the session engine (everything injected).
- UI is terminal-friendly PromptSession (keeps scrollback + copy/select).
- Every transcript entry reaches the screen through a TranscriptView
  subscribed to the history store, including entries appended later by
  delayed effects.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import typer

from . import __version__, config
from .catalog import load_catalog
from .host import BrowserHost
from .kernel import Terminal, write_crash_log
from .scheduler import ThreadingScheduler
from .ui import PromptToolkitUI, TranscriptRenderer, TranscriptView

LOG_LEVEL_ENV = "TERMFOLIO_LOG_LEVEL"

app = typer.Typer(
    name="termfolio",
    help="Interactive portfolio terminal.",
    add_completion=False,
)


def configure_logging(cfg: config.YAMLConfig) -> Path:
    """Send log records to a file; the terminal itself stays clean."""
    level_name = os.getenv(LOG_LEVEL_ENV) or str(
        cfg.get_path("logging.level", "WARNING")
    )
    log_file = cfg.get_path("logging.file")
    if log_file:
        path = Path(str(log_file)).expanduser()
    else:
        path = config.logs_dir(config.get_data_root()) / "termfolio.log"
    path.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.FileHandler(str(path), encoding="utf-8")],
    )
    return path


def run_repl(
    terminal: Terminal,
    ui: PromptToolkitUI | None = None,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
    view: TranscriptView | None = None,
) -> None:
    """Run the standard Termfolio REPL loop."""
    while terminal.running:
        try:
            for response in terminal.drain_followups():
                _apply_response(response, ui, output_fn)

            if not terminal.running:
                break

            prompt = terminal.prompt()
            if ui is not None:
                line = ui.read(prompt)
            else:
                line = input_fn(prompt + " ")

            if not terminal.running:
                break

            line = (line or "").strip()
            if not line:
                continue

            try:
                if view is not None:
                    view.expect_echo(line)
                terminal.input_line.set(line)
                response = terminal.submit()
                _apply_response(response, ui, output_fn)

            except Exception as e:
                # Unhandled exception - write crash log
                write_crash_log(e, raw_command=line)
                error_msg = (
                    f"[ERROR] Unhandled exception: "
                    f"{type(e).__name__}: {e}"
                )
                if ui is not None:
                    ui.write_line(error_msg)
                else:
                    output_fn(error_msg)
                # Continue session

        except (KeyboardInterrupt, EOFError):
            msg = "\nBye!\n"
            if ui is not None:
                ui.write(msg)
            else:
                output_fn(msg)
            break

    terminal.stop()


def _apply_response(
    response: str | None,
    ui: PromptToolkitUI | None,
    output_fn: Callable[[str], None],
) -> None:
    if response == config.UI_CLEAR:
        if ui is not None:
            ui.clear()
        else:
            output_fn("\033[2J\033[H")


def build_terminal(
    cfg: config.YAMLConfig, on_leave: Callable[[], None] | None = None
) -> tuple[Terminal, BrowserHost, ThreadingScheduler]:
    """Explicit wiring: config + catalog + host + scheduler -> Terminal."""
    host = BrowserHost(
        base_url=str(cfg.get_path("system.site_url", "")),
        on_leave=on_leave,
        root_path=str(cfg.get_path("system.routes.home", "/")),
    )
    scheduler = ThreadingScheduler()
    terminal = Terminal(
        config=cfg,
        catalog=load_catalog(cfg),
        host=host,
        scheduler=scheduler,
    )
    return terminal, host, scheduler


def run_commands(
    terminal: Terminal,
    commands: list[str],
    output_fn: Callable[[str], None] = print,
) -> None:
    """Non-interactive mode: run each command and print the transcript."""
    renderer = TranscriptRenderer(terminal.config, prompt=terminal.prompt())
    view = TranscriptView(renderer, output_fn)
    view.attach(terminal.history)
    terminal.running = True
    try:
        for command in commands:
            terminal.execute_command(command)
            terminal.drain_followups()
    finally:
        view.detach()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"termfolio {__version__}")
        raise typer.Exit()


@app.command()
def main(
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="YAML file merged over the packaged defaults."
    ),
    command: Optional[list[str]] = typer.Option(
        None, "--command", "-c", help="Run a command and exit (repeatable)."
    ),
    plain: bool = typer.Option(
        False, "--plain", help="Use plain input() instead of prompt_toolkit."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Start the portfolio terminal."""
    try:
        cfg = config.load_system_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    configure_logging(cfg)

    ui: PromptToolkitUI | None = None
    plain = plain or os.environ.get("TERMFOLIO_PLAIN_UI") == "1"

    def _leave() -> None:
        terminal.stop()
        if ui is not None:
            ui.interrupt()

    terminal, _host, scheduler = build_terminal(cfg, on_leave=_leave)

    if command:
        run_commands(terminal, list(command))
        scheduler.cancel_all()
        return

    renderer = TranscriptRenderer(cfg, prompt=terminal.prompt())

    if plain or not (os.isatty(0) and os.isatty(1)):
        view = TranscriptView(renderer, print)
        view.attach(terminal.history)
        terminal.start()
        run_repl(terminal, view=view)
    else:
        ui = PromptToolkitUI(terminal)
        view = TranscriptView(renderer, ui.write_line)
        view.attach(terminal.history)
        terminal.start()
        run_repl(terminal, ui=ui, view=view)

    view.detach()
    scheduler.cancel_all()
