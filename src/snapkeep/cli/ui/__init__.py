#!/usr/bin/env python3
from __future__ import annotations

import sys
from collections.abc import Sequence
from contextlib import contextmanager

from rich import box
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from .state import UIContext, get_context, isatty

DEFAULT_CONTEXT = get_context()
THEME = DEFAULT_CONTEXT.theme
console = DEFAULT_CONTEXT.console
console_err = DEFAULT_CONTEXT.console_err


def _resolve_context(context: UIContext | None) -> UIContext:
    return context or DEFAULT_CONTEXT


def configure_ui(
    *,
    no_color: bool,
    no_animations: bool,
    context: UIContext | None = None,
) -> None:
    context = _resolve_context(context)
    context.animations_enabled = not no_animations
    context.console.no_color = no_color
    context.console_err.no_color = no_color


def apply_ui_defaults(
    *,
    no_color: bool,
    no_animations: bool,
    context: UIContext | None = None,
) -> None:
    """Turn on config-file UI settings without undoing command-line flags."""
    context = _resolve_context(context)
    configure_ui(
        no_color=no_color or context.console.no_color,
        no_animations=no_animations or not context.animations_enabled,
        context=context,
    )


class StatusLine:
    """A single status line that advances through a sequence of messages.

    With animations the current message spins and finished messages are
    printed above it with a check mark; without, each message is printed once.
    """

    def __init__(self, message: str, *, live: Live | None, context: UIContext) -> None:
        self.message = message
        self._live = live
        self._context = context

    def update(self, message: str) -> None:
        if message == self.message:
            return
        if self._live is None:
            self._context.console.print(f"[subtitle]{message}[/subtitle]")
        else:
            self._context.console.print(Text(f"✓ {self.message}", style="success"))
            self._live.update(_spinner(message), refresh=True)
        self.message = message

    def finish(self, *, ok: bool) -> None:
        if self._live is None:
            return
        if ok:
            self._live.update(Text(f"✓ {self.message}", style="success"), refresh=True)
        else:
            self._live.update(Text(f"✗ {self.message}", style="error"), refresh=True)


def _spinner(message: str) -> Spinner:
    return Spinner("dots", text=Text(message, style="subtitle"))


@contextmanager
def status(message: str, *, quiet: bool, context: UIContext | None = None):
    context = _resolve_context(context)
    if quiet:
        yield None
        return
    if not context.animations_enabled or not isatty(sys.__stdout__, sys.stdout):
        context.console.print(f"[subtitle]{message}[/subtitle]")
        yield StatusLine(message, live=None, context=context)
        return
    with Live(
        _spinner(message),
        console=context.console,
        transient=False,
        refresh_per_second=12,
    ) as live:
        line = StatusLine(message, live=live, context=context)
        try:
            yield line
        except BaseException:
            line.finish(ok=False)
            raise
        line.finish(ok=True)


def build_kv_table(rows: Sequence[tuple[str, str]], *, title: str | None = None) -> Table:
    table = Table(title=title, show_header=False, box=box.SIMPLE, show_lines=False)
    table.add_column("Field", style="bold", no_wrap=True)
    table.add_column("Value")
    for key, value in rows:
        table.add_row(str(key), str(value))
    return table


def build_metrics_table(rows: Sequence[tuple[str, str]]) -> Table:
    table = Table(box=box.SIMPLE_HEAD, show_lines=False)
    table.add_column("Metric", style="muted", no_wrap=True)
    table.add_column("Value", justify="right")
    for key, value in rows:
        table.add_row(str(key), str(value))
    return table


def build_list_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> Table:
    table = Table(box=box.SIMPLE_HEAD, show_lines=False)
    for header in headers:
        table.add_column(header, overflow="fold")
    for row in rows:
        table.add_row(*(str(cell) for cell in row))
    return table


def panel(title: str, renderable, *, style: str = "panel") -> Panel:
    return Panel(
        renderable,
        title=title,
        title_align="left",
        border_style=style,
        box=box.ROUNDED,
        padding=(1, 2),
    )


def print_completion_panel(
    title: str,
    items: Sequence[str],
    *,
    quiet: bool,
    use_err: bool = False,
) -> None:
    if quiet:
        return
    output = console_err if use_err else console
    body = Table.grid(padding=(0, 1))
    body.add_column(no_wrap=True)
    body.add_column()
    for item in items:
        body.add_row("-", Text(item))
    output.print(panel(title, body, style="success"))
