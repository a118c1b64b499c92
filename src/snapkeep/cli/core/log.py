#!/usr/bin/env python3
from __future__ import annotations

from ..ui import console_err


def _warn(message: str, *, quiet: bool) -> None:
    if quiet:
        return
    console_err.print(f"[warning]Warning:[/warning] {message}")


def _warn_all(messages: tuple[str, ...] | list[str], *, quiet: bool) -> None:
    for message in messages:
        _warn(message, quiet=quiet)
