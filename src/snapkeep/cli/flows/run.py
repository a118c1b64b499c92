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
from ...restic.invoker import ProcessInvoker
from ...runner import BackupOrchestrator, RunReport, RunState
from ..api import StatusLine, apply_ui_defaults, print_completion_panel, status
from ..core.log import _warn, _warn_all
from ..core.plan import password_file_mode_warning, plan_from_args
from ..core.types import RunArgs
from ..ui.summary import print_run_configuration, print_run_summary

_STEP_MESSAGES: dict[RunState, str] = {
    RunState.UNCHECKED: "Checking repository...",
    RunState.INITIALIZING: "Initializing repository...",
    RunState.BACKING_UP: "Running backup...",
    RunState.PRUNING: "Applying retention policy...",
    RunState.COLLECTING_STATS: "Collecting repository statistics...",
    RunState.RESTORING: "Restoring snapshot...",
}


class _StepReporter:
    def __init__(self, line: StatusLine | None) -> None:
        self._line = line

    def __call__(self, state: RunState) -> None:
        message = _STEP_MESSAGES.get(state)
        if message is None or self._line is None:
            return
        self._line.update(message)


def run_backup_command(args: RunArgs, *, invoker: ProcessInvoker | None = None) -> RunReport:
    config = load_app_config(args.config)
    plan = plan_from_args(args, config)
    quiet = args.quiet or config.ui.quiet
    apply_ui_defaults(no_color=config.ui.no_color, no_animations=config.ui.no_animations)

    mode_warning = password_file_mode_warning(plan.repository.password_file)
    if mode_warning:
        _warn(mode_warning, quiet=quiet)
    print_run_configuration(plan, quiet=quiet)

    with status(_STEP_MESSAGES[RunState.UNCHECKED], quiet=quiet) as line:
        orchestrator = BackupOrchestrator(
            plan.repository,
            settings=plan.settings,
            invoker=invoker,
            on_transition=_StepReporter(line),
        )
        report = orchestrator.run(plan.request)

    _warn_all(report.warnings, quiet=quiet)
    print_run_summary(report, quiet=quiet)
    items = [f"Snapshot {report.backup.snapshot_id} saved to {plan.repository.location}"]
    if report.restored_to is not None:
        items.append(f"Restored to {report.restored_to}")
    print_completion_panel("Backup complete", items, quiet=quiet)
    return report
