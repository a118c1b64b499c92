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

from ...config import load_app_config
from ...core.models import SnapshotRecord
from ...restic.client import ResticClient
from ...restic.invoker import ProcessInvoker
from ..api import apply_ui_defaults, console, status
from ..core.plan import repository_from_snapshot_args
from ..core.types import SnapshotsArgs
from ..ui.summary import print_snapshots


def snapshot_to_dict(snapshot: SnapshotRecord) -> dict[str, object]:
    return {
        "id": snapshot.id,
        "time": snapshot.time,
        "hostname": snapshot.hostname,
        "username": snapshot.username,
        "paths": list(snapshot.paths),
        "tags": sorted(snapshot.tags),
    }


def run_snapshots_command(
    args: SnapshotsArgs,
    *,
    invoker: ProcessInvoker | None = None,
) -> list[SnapshotRecord]:
    config = load_app_config(args.config)
    repository = repository_from_snapshot_args(args, config)
    client = ResticClient(repository, settings=config.restic, invoker=invoker)
    quiet = args.quiet or config.ui.quiet
    apply_ui_defaults(no_color=config.ui.no_color, no_animations=config.ui.no_animations)
    with status("Listing snapshots...", quiet=quiet or args.as_json):
        snapshots = client.snapshots()
    if args.as_json:
        console.print_json(data=[snapshot_to_dict(snapshot) for snapshot in snapshots])
    else:
        print_snapshots(snapshots, quiet=quiet)
    return snapshots
