#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.
from __future__ import annotations

import os
import shlex
import subprocess
from pathlib import Path

import typer

from ...config import AppConfig, load_app_config, resolve_config_path
from ..api import build_kv_table, console, panel
from ..core.common import _ctx_value, _run_cli
from ..core.text import format_retention

_CONFIG_HELP = (
    "Show the effective configuration, or open the active TOML config in an editor.\n\n"
    "With --edit and no editor given, snapkeep uses $VISUAL / $EDITOR when set, otherwise it\n"
    "opens the file with the system default application.\n\n"
    "Examples:\n"
    "  snapkeep config\n"
    "  snapkeep config --print-path\n"
    "  snapkeep config --edit --editor nano\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_CONFIG_HELP)(config)


def config(
    ctx: typer.Context,
    config: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Use this config file (overrides the default).",
        rich_help_panel="Config",
    ),
    print_path: bool = typer.Option(
        False,
        "--print-path",
        help="Print the resolved config path and exit.",
        rich_help_panel="Behavior",
    ),
    edit: bool = typer.Option(
        False,
        "--edit",
        help="Open the config file in an editor.",
        rich_help_panel="Behavior",
    ),
    editor: str | None = typer.Option(
        None,
        "--editor",
        "-e",
        help="Editor command for --edit (defaults to $VISUAL/$EDITOR).",
        rich_help_panel="Behavior",
    ),
) -> None:
    config_value = config or _ctx_value(ctx, "config")
    quiet_value = bool(_ctx_value(ctx, "quiet"))
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        if print_path:
            console.print(str(resolve_config_path(config_value)))
            return
        if edit:
            _open_in_editor(resolve_config_path(config_value), editor=editor, quiet=quiet_value)
            return
        _print_effective_config(load_app_config(config_value))

    _run_cli(_run, debug=debug_value)


def _timeout_label(value: float | None) -> str:
    return "unbounded" if value is None else f"{value:g}s"


def _print_effective_config(app_config: AppConfig) -> None:
    rows = [
        ("Config file", str(app_config.path)),
        ("restic binary", app_config.restic.binary),
        ("Probe timeout", _timeout_label(app_config.restic.probe_timeout)),
        ("Stats timeout", _timeout_label(app_config.restic.stats_timeout)),
        ("Stats mode", app_config.restic.stats_mode),
        ("Repository root", app_config.run.repository_root),
        ("Password file", app_config.run.password_file or "-"),
        ("Cache dir", app_config.run.cache_dir or "-"),
        ("Tag", app_config.run.tag or "-"),
        ("Restore root", app_config.run.restore_root),
        ("Retention", format_retention(app_config.retention)),
    ]
    console.print(panel("Configuration", build_kv_table(rows)))


def _open_in_editor(path: Path, *, editor: str | None, quiet: bool) -> None:
    resolved = Path(os.path.expandvars(str(path))).expanduser()
    if not resolved.exists():
        raise FileNotFoundError(f"config file not found: {resolved}")

    editor_cmd = _resolve_editor_command(editor)
    if editor_cmd is None:
        if not quiet:
            console.print(f"[dim]Opening {resolved}...[/dim]")
        typer.launch(str(resolved))
        return

    if not quiet:
        console.print(f"[dim]Opening {resolved} with {' '.join(editor_cmd)}...[/dim]")
    subprocess.run([*editor_cmd, str(resolved)], check=False)


def _resolve_editor_command(editor: str | None) -> list[str] | None:
    value = editor if editor is not None else os.environ.get("VISUAL") or os.environ.get("EDITOR")
    value = (value or "").strip()
    if not value or value.lower() in {"default", "system"}:
        return None
    return shlex.split(value, posix=os.name != "nt")
