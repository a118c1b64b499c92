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
from ..core.types import RunArgs
from ..flows.run import run_backup_command

_RUN_HELP = (
    "Back up a directory with restic, apply the retention policy and report statistics.\n\n"
    "The repository is initialized on first use. Defaults come from the TOML config.\n\n"
    "Examples:\n"
    "  snapkeep run example.com --source /var/www/example.com\n"
    "  snapkeep run example.com -s /srv/site --tag nightly --keep-daily 14\n"
    "  snapkeep run example.com -s /srv/site --restore --restore-target /tmp/check\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_RUN_HELP)(run)


def run(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the site or data set being backed up."),
    source: str = typer.Option(
        ...,
        "--source",
        "-s",
        help="Directory to back up.",
        rich_help_panel="Inputs",
    ),
    password_file: str | None = typer.Option(
        None,
        "--password-file",
        "-p",
        envvar="RESTIC_PASSWORD_FILE",
        help="File holding the repository password.",
        rich_help_panel="Repository",
    ),
    repository: str | None = typer.Option(
        None,
        "--repository",
        "-r",
        help="Repository location (default: <repository_root>/<name>).",
        rich_help_panel="Repository",
    ),
    cache_dir: str | None = typer.Option(
        None,
        "--cache-dir",
        help="restic cache directory.",
        rich_help_panel="Repository",
    ),
    force_init: bool = typer.Option(
        False,
        "--force-init",
        help="Run restic init even when the repository already answers.",
        rich_help_panel="Repository",
    ),
    tag: str | None = typer.Option(
        None,
        "--tag",
        "-t",
        help="Tag applied to the snapshot; also scopes pruning and restore.",
        rich_help_panel="Backup",
    ),
    exclude: list[str] | None = typer.Option(
        None,
        "--exclude",
        "-e",
        help="Exclude pattern (repeatable).",
        rich_help_panel="Backup",
    ),
    exclude_file: str | None = typer.Option(
        None,
        "--exclude-file",
        help="File of exclude patterns.",
        rich_help_panel="Backup",
    ),
    keep_last: int | None = typer.Option(
        None, "--keep-last", min=0, help="Keep the last N snapshots.", rich_help_panel="Retention"
    ),
    keep_hourly: int | None = typer.Option(
        None, "--keep-hourly", min=0, help="Hourly snapshots to keep.", rich_help_panel="Retention"
    ),
    keep_daily: int | None = typer.Option(
        None, "--keep-daily", min=0, help="Daily snapshots to keep.", rich_help_panel="Retention"
    ),
    keep_weekly: int | None = typer.Option(
        None, "--keep-weekly", min=0, help="Weekly snapshots to keep.", rich_help_panel="Retention"
    ),
    keep_monthly: int | None = typer.Option(
        None,
        "--keep-monthly",
        min=0,
        help="Monthly snapshots to keep.",
        rich_help_panel="Retention",
    ),
    keep_yearly: int | None = typer.Option(
        None, "--keep-yearly", min=0, help="Yearly snapshots to keep.", rich_help_panel="Retention"
    ),
    restore: bool = typer.Option(
        False,
        "--restore",
        help="Restore a snapshot after the backup as a check.",
        rich_help_panel="Restore",
    ),
    restore_target: str | None = typer.Option(
        None,
        "--restore-target",
        help="Restore destination (default: <restore_root>/restore-<name>).",
        rich_help_panel="Restore",
    ),
    restore_snapshot: str | None = typer.Option(
        None,
        "--restore-snapshot",
        help="Snapshot to restore (default: latest).",
        rich_help_panel="Restore",
    ),
    config: str | None = typer.Option(
        None,
        "--config",
        help="Use this config file.",
        rich_help_panel="Config",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Show tracebacks on failure.",
        rich_help_panel="Debug",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Hide non-error output.",
        rich_help_panel="Behavior",
    ),
) -> None:
    debug_value = _ctx_flag(ctx, "debug", debug)
    args = RunArgs(
        config=config or _ctx_value(ctx, "config"),
        name=name,
        source=source,
        password_file=password_file,
        repository=repository,
        cache_dir=cache_dir,
        tag=tag,
        keep_last=keep_last,
        keep_hourly=keep_hourly,
        keep_daily=keep_daily,
        keep_weekly=keep_weekly,
        keep_monthly=keep_monthly,
        keep_yearly=keep_yearly,
        exclude=list(exclude or []),
        exclude_file=exclude_file,
        restore=restore,
        restore_target=restore_target,
        restore_snapshot=restore_snapshot,
        force_init=force_init,
        debug=debug_value,
        quiet=_ctx_flag(ctx, "quiet", quiet),
    )
    _run_cli(functools.partial(run_backup_command, args), debug=debug_value)
