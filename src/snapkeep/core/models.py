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

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum

from .validation import (
    require_non_empty_str,
    require_optional_non_empty_str,
    require_optional_non_negative_int,
    require_positive_number,
)

UNKNOWN_SNAPSHOT_ID = "unknown"
LATEST_SNAPSHOT = "latest"
DEFAULT_TIMEOUT_SECONDS = 3600.0
DEFAULT_STATS_MODE = "raw-data"

REPOSITORY_ENV = "RESTIC_REPOSITORY"
PASSWORD_FILE_ENV = "RESTIC_PASSWORD_FILE"
CACHE_DIR_ENV = "RESTIC_CACHE_DIR"


class InitOutcome(str, Enum):
    CREATED = "created"
    ALREADY_INITIALIZED = "already_initialized"


@dataclass(frozen=True)
class RepositoryConfig:
    location: str
    password_file: str
    cache_dir: str | None = None

    def __post_init__(self) -> None:
        require_non_empty_str(self.location, label="repository location")
        require_non_empty_str(self.password_file, label="password file")
        require_optional_non_empty_str(self.cache_dir, label="cache dir")

    def to_env(self) -> dict[str, str]:
        env = {
            REPOSITORY_ENV: self.location,
            PASSWORD_FILE_ENV: self.password_file,
        }
        if self.cache_dir is not None:
            env[CACHE_DIR_ENV] = self.cache_dir
        return env


@dataclass(frozen=True)
class ResticSettings:
    """Tunables for talking to the restic binary.

    ``None`` for a timeout means the invocation may run without bound.
    Backup, prune and restore always run unbounded regardless of these values.
    """

    binary: str = "restic"
    probe_timeout: float | None = DEFAULT_TIMEOUT_SECONDS
    stats_timeout: float | None = DEFAULT_TIMEOUT_SECONDS
    stats_mode: str = DEFAULT_STATS_MODE

    def __post_init__(self) -> None:
        require_non_empty_str(self.binary, label="restic binary")
        require_non_empty_str(self.stats_mode, label="stats mode")
        if self.probe_timeout is not None:
            require_positive_number(self.probe_timeout, label="probe timeout")
        if self.stats_timeout is not None:
            require_positive_number(self.stats_timeout, label="stats timeout")


@dataclass(frozen=True)
class RetentionPolicy:
    last: int | None = None
    hourly: int | None = None
    daily: int | None = None
    weekly: int | None = None
    monthly: int | None = None
    yearly: int | None = None

    def __post_init__(self) -> None:
        for bucket in RETENTION_BUCKETS:
            require_optional_non_negative_int(getattr(self, bucket), label=f"keep-{bucket}")

    @classmethod
    def from_mapping(
        cls, values: Mapping[str, object], *, label: str = "retention"
    ) -> RetentionPolicy:
        """Build a policy from ``bucket`` or ``keep_bucket`` keys; None leaves a bucket unset."""
        kwargs: dict[str, object] = {}
        unknown: list[str] = []
        for key, value in values.items():
            bucket = key[len("keep_") :] if key.startswith("keep_") else key
            if bucket not in RETENTION_BUCKETS:
                unknown.append(key)
                continue
            kwargs[bucket] = value
        if unknown:
            raise ValueError(f"{label} has unknown bucket(s): {', '.join(sorted(unknown))}")
        return cls(**kwargs)  # type: ignore[arg-type]

    def buckets(self) -> tuple[tuple[str, int], ...]:
        """Present buckets in canonical order."""
        return tuple(
            (bucket, value)
            for bucket in RETENTION_BUCKETS
            if (value := getattr(self, bucket)) is not None
        )

    def merged(self, overrides: RetentionPolicy) -> RetentionPolicy:
        values = {bucket: getattr(self, bucket) for bucket in RETENTION_BUCKETS}
        values.update(dict(overrides.buckets()))
        return RetentionPolicy(**values)

    @property
    def is_empty(self) -> bool:
        return not self.buckets()


RETENTION_BUCKETS: tuple[str, ...] = tuple(item.name for item in fields(RetentionPolicy))


@dataclass(frozen=True)
class BackupOptions:
    tag: str | None = None
    excludes: tuple[str, ...] = ()
    exclude_file: str | None = None

    def __post_init__(self) -> None:
        require_optional_non_empty_str(self.tag, label="tag")
        require_optional_non_empty_str(self.exclude_file, label="exclude file")
        for pattern in self.excludes:
            require_non_empty_str(pattern, label="exclude pattern")


@dataclass(frozen=True)
class BackupResult:
    files_new: int = 0
    files_changed: int = 0
    files_unmodified: int = 0
    bytes_added: int = 0
    bytes_processed: int = 0
    snapshot_id: str = UNKNOWN_SNAPSHOT_ID


@dataclass(frozen=True)
class StatsResult:
    total_size: int = 0
    total_file_count: int = 0


@dataclass(frozen=True)
class SnapshotRecord:
    id: str
    time: str
    hostname: str
    username: str
    paths: tuple[str, ...] = ()
    tags: frozenset[str] = field(default_factory=frozenset)

    @property
    def short_id(self) -> str:
        return self.id[:8]


@dataclass(frozen=True)
class RestoreRequest:
    target: str
    snapshot_id: str = LATEST_SNAPSHOT
    tag: str | None = None

    def __post_init__(self) -> None:
        require_non_empty_str(self.target, label="restore target")
        require_non_empty_str(self.snapshot_id, label="restore snapshot")


@dataclass(frozen=True)
class RunRequest:
    source: str
    options: BackupOptions = field(default_factory=BackupOptions)
    retention: RetentionPolicy = field(default_factory=RetentionPolicy)
    restore: RestoreRequest | None = None
    force_init: bool = False

    def __post_init__(self) -> None:
        require_non_empty_str(self.source, label="backup source")
