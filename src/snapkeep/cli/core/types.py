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

from dataclasses import dataclass

from ...core.models import RepositoryConfig, ResticSettings, RunRequest


@dataclass
class RunArgs:
    """Typed container for run command arguments."""

    config: str | None = None
    name: str | None = None
    source: str | None = None
    password_file: str | None = None
    repository: str | None = None
    cache_dir: str | None = None
    tag: str | None = None
    keep_last: int | None = None
    keep_hourly: int | None = None
    keep_daily: int | None = None
    keep_weekly: int | None = None
    keep_monthly: int | None = None
    keep_yearly: int | None = None
    exclude: list[str] | None = None
    exclude_file: str | None = None
    restore: bool = False
    restore_target: str | None = None
    restore_snapshot: str | None = None
    force_init: bool = False
    debug: bool = False
    quiet: bool = False


@dataclass
class SnapshotsArgs:
    """Typed container for snapshots command arguments."""

    config: str | None = None
    name: str | None = None
    repository: str | None = None
    password_file: str | None = None
    cache_dir: str | None = None
    as_json: bool = False
    debug: bool = False
    quiet: bool = False


@dataclass(frozen=True)
class RunPlan:
    name: str
    repository: RepositoryConfig
    settings: ResticSettings
    request: RunRequest
