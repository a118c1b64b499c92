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

from collections.abc import Sequence

from ..core.models import (
    LATEST_SNAPSHOT,
    BackupOptions,
    BackupResult,
    InitOutcome,
    RepositoryConfig,
    ResticSettings,
    RetentionPolicy,
    SnapshotRecord,
    StatsResult,
)
from ..core.validation import require_non_empty_str
from .events import parse_backup_stream, parse_snapshots, parse_stats
from .invoker import ProcessFailure, ProcessInvoker, ProcessResult, SubprocessInvoker
from .retention import TAG_FLAG, encode_retention_policy

ALREADY_INITIALIZED_MARKER = "already initialized"


class ResticClient:
    """One method per restic operation against a single repository."""

    def __init__(
        self,
        repository: RepositoryConfig,
        *,
        settings: ResticSettings | None = None,
        invoker: ProcessInvoker | None = None,
    ) -> None:
        self.repository = repository
        self.settings = settings or ResticSettings()
        self.invoker = invoker or SubprocessInvoker(self.settings.binary)

    def init(self) -> InitOutcome:
        try:
            self._invoke("init", (), timeout=self.settings.probe_timeout)
        except ProcessFailure as exc:
            if is_already_initialized(exc):
                return InitOutcome.ALREADY_INITIALIZED
            raise
        return InitOutcome.CREATED

    def repository_exists(self) -> bool:
        try:
            self._invoke("snapshots", ("--json",), timeout=self.settings.probe_timeout)
        except Exception:
            # Any probe error means the repository is treated as not accessible.
            return False
        return True

    def backup(self, source: str, options: BackupOptions | None = None) -> BackupResult:
        require_non_empty_str(source, label="backup source")
        options = options or BackupOptions()
        args = [source, "--json"]
        if options.tag is not None:
            args.extend((TAG_FLAG, options.tag))
        for pattern in options.excludes:
            args.extend(("--exclude", pattern))
        if options.exclude_file is not None:
            args.extend(("--exclude-file", options.exclude_file))
        result = self._invoke("backup", args, timeout=None)
        return parse_backup_stream(result.stdout)

    def forget(self, policy: RetentionPolicy, *, tag: str | None = None) -> None:
        self._invoke("forget", encode_retention_policy(policy, tag=tag), timeout=None)

    def stats(self, *, mode: str | None = None) -> StatsResult:
        args = ("--mode", mode or self.settings.stats_mode, "--json")
        result = self._invoke("stats", args, timeout=self.settings.stats_timeout)
        return parse_stats(result.stdout)

    def restore(
        self,
        target: str,
        *,
        snapshot_id: str = LATEST_SNAPSHOT,
        tag: str | None = None,
    ) -> None:
        require_non_empty_str(target, label="restore target")
        args = [snapshot_id, "--target", target]
        if tag is not None:
            args.extend((TAG_FLAG, tag))
        self._invoke("restore", args, timeout=None)

    def snapshots(self) -> list[SnapshotRecord]:
        result = self._invoke("snapshots", ("--json",), timeout=self.settings.probe_timeout)
        return parse_snapshots(result.stdout)

    def _invoke(
        self,
        subcommand: str,
        args: Sequence[str],
        *,
        timeout: float | None,
    ) -> ProcessResult:
        return self.invoker.invoke(
            subcommand,
            list(args),
            env=self.repository.to_env(),
            timeout=timeout,
        )


def is_already_initialized(failure: ProcessFailure) -> bool:
    return (
        ALREADY_INITIALIZED_MARKER in failure.stderr
        or ALREADY_INITIALIZED_MARKER in failure.stdout
    )
