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

import functools

import typer

from ..core.common import _ctx_flag, _ctx_value, _run_cli
from ..core.types import SnapshotsArgs
from ..flows.snapshots import run_snapshots_command

_SNAPSHOTS_HELP = (
    "List the snapshots stored in a repository.\n\n"
    "Examples:\n"
    "  snapkeep snapshots example.com\n"
    "  snapkeep snapshots --repository /mnt/backup/site --json\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_SNAPSHOTS_HELP)(snapshots)


def snapshots(
    ctx: typer.Context,
    name: str | None = typer.Argument(
        None, help="Name used to derive the repository location."
    ),
    repository: str | None = typer.Option(
        None,
        "--repository",
        "-r",
        help="Repository location (overrides the name).",
        rich_help_panel="Repository",
    ),
    password_file: str | None = typer.Option(
        None,
        "--password-file",
        "-p",
        envvar="RESTIC_PASSWORD_FILE",
        help="File holding the repository password.",
        rich_help_panel="Repository",
    ),
    cache_dir: str | None = typer.Option(
        None,
        "--cache-dir",
        help="restic cache directory.",
        rich_help_panel="Repository",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print snapshots as JSON.",
        rich_help_panel="Outputs",
    ),
    config: str | None = typer.Option(
        None,
        "--config",
        help="Use this config file.",
        rich_help_panel="Config",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Hide non-error output.",
        rich_help_panel="Behavior",
    ),
) -> None:
    debug_value = bool(_ctx_value(ctx, "debug"))
    args = SnapshotsArgs(
        config=config or _ctx_value(ctx, "config"),
        name=name,
        repository=repository,
        password_file=password_file,
        cache_dir=cache_dir,
        as_json=as_json,
        debug=debug_value,
        quiet=_ctx_flag(ctx, "quiet", quiet),
    )
    _run_cli(functools.partial(run_snapshots_command, args), debug=debug_value)
