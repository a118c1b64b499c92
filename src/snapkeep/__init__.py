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

"""Run restic backups with init, retention, statistics and restore in one pass."""

from __future__ import annotations

from .core.models import (
    BackupOptions,
    BackupResult,
    InitOutcome,
    RepositoryConfig,
    ResticSettings,
    RestoreRequest,
    RetentionPolicy,
    RunRequest,
    SnapshotRecord,
    StatsResult,
)
from .restic import ProcessFailure, ProcessTimeout, ResticClient
from .runner import BackupOrchestrator, RunReport, RunState, StepFailed

__all__ = [
    "BackupOptions",
    "BackupOrchestrator",
    "BackupResult",
    "InitOutcome",
    "ProcessFailure",
    "ProcessTimeout",
    "RepositoryConfig",
    "ResticClient",
    "ResticSettings",
    "RestoreRequest",
    "RetentionPolicy",
    "RunReport",
    "RunRequest",
    "RunState",
    "SnapshotRecord",
    "StatsResult",
    "StepFailed",
]
