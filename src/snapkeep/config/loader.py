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
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from ..core.models import (
    DEFAULT_STATS_MODE,
    DEFAULT_TIMEOUT_SECONDS,
    PASSWORD_FILE_ENV,
    ResticSettings,
    RetentionPolicy,
)
from .installer import resolve_config_path

RESTIC_PATH_ENV = "SNAPKEEP_RESTIC_PATH"
DEFAULT_REPOSITORY_ROOT = "~/backup-restic"
DEFAULT_RESTORE_ROOT = "."
DEFAULT_RETENTION = RetentionPolicy(daily=7, weekly=4, monthly=6)


@dataclass(frozen=True)
class RunDefaults:
    repository_root: str = DEFAULT_REPOSITORY_ROOT
    cache_dir: str | None = None
    password_file: str | None = None
    tag: str | None = None
    restore_root: str = DEFAULT_RESTORE_ROOT


@dataclass(frozen=True)
class UiDefaults:
    quiet: bool = False
    no_color: bool = False
    no_animations: bool = False


@dataclass(frozen=True)
class AppConfig:
    path: Path
    restic: ResticSettings = field(default_factory=ResticSettings)
    run: RunDefaults = field(default_factory=RunDefaults)
    retention: RetentionPolicy = DEFAULT_RETENTION
    ui: UiDefaults = field(default_factory=UiDefaults)


def load_app_config(path: str | Path | None = None) -> AppConfig:
    config_path = resolve_config_path(path)
    data = _load_toml(config_path)
    return AppConfig(
        path=config_path,
        restic=_parse_restic_settings(_get_dict(data, "restic")),
        run=_parse_run_defaults(_get_nested_dict(data, "defaults", "run")),
        retention=_parse_retention(_get_nested_dict(data, "defaults", "retention")),
        ui=_parse_ui_defaults(_get_dict(data, "ui")),
    )


def _parse_restic_settings(cfg: dict[str, object]) -> ResticSettings:
    binary = os.environ.get(RESTIC_PATH_ENV) or _parse_optional_unset_str(
        cfg.get("binary"), field="restic.binary"
    )
    stats_mode = _parse_optional_unset_str(cfg.get("stats_mode"), field="restic.stats_mode")
    return ResticSettings(
        binary=binary or "restic",
        probe_timeout=_parse_timeout(cfg.get("probe_timeout"), field="restic.probe_timeout"),
        stats_timeout=_parse_timeout(cfg.get("stats_timeout"), field="restic.stats_timeout"),
        stats_mode=stats_mode or DEFAULT_STATS_MODE,
    )


def _parse_run_defaults(cfg: dict[str, object]) -> RunDefaults:
    password_file = _parse_optional_unset_str(
        cfg.get("password_file"), field="defaults.run.password_file"
    )
    return RunDefaults(
        repository_root=_parse_optional_unset_str(
            cfg.get("repository_root"), field="defaults.run.repository_root"
        )
        or DEFAULT_REPOSITORY_ROOT,
        cache_dir=_parse_optional_unset_str(cfg.get("cache_dir"), field="defaults.run.cache_dir"),
        password_file=password_file or os.environ.get(PASSWORD_FILE_ENV) or None,
        tag=_parse_optional_unset_str(cfg.get("tag"), field="defaults.run.tag"),
        restore_root=_parse_optional_unset_str(
            cfg.get("restore_root"), field="defaults.run.restore_root"
        )
        or DEFAULT_RESTORE_ROOT,
    )


def _parse_retention(cfg: dict[str, object]) -> RetentionPolicy:
    if not cfg:
        return DEFAULT_RETENTION
    values = {
        key: _parse_optional_non_negative_int(value, field=f"defaults.retention.{key}")
        for key, value in cfg.items()
    }
    return RetentionPolicy.from_mapping(values, label="defaults.retention")


def _parse_ui_defaults(cfg: dict[str, object]) -> UiDefaults:
    return UiDefaults(
        quiet=_parse_bool(cfg.get("quiet"), field="ui.quiet", default=False),
        no_color=_parse_bool(cfg.get("no_color"), field="ui.no_color", default=False),
        no_animations=_parse_bool(
            cfg.get("no_animations"),
            field="ui.no_animations",
            default=False,
        ),
    )


def _load_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_dict(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if isinstance(value, dict):
        return value
    return {}


def _get_nested_dict(data: dict[str, object], *keys: str) -> dict[str, object]:
    current: dict[str, object] = data
    for key in keys:
        value = current.get(key)
        if not isinstance(value, dict):
            return {}
        current = value
    return current


def _parse_optional_unset_str(value: object, *, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    normalized = value.strip()
    return normalized or None


def _parse_bool(value: object, *, field: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"{field} must be a boolean")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"{field} must be a boolean")


def _parse_timeout(value: object, *, field: str) -> float | None:
    if value is None:
        return DEFAULT_TIMEOUT_SECONDS
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number of seconds")
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"", "none", "unbounded"}:
            return None
        try:
            value = float(text)
        except ValueError as exc:
            raise ValueError(f"{field} must be a number of seconds") from exc
    if not isinstance(value, (int, float)):
        raise ValueError(f"{field} must be a number of seconds")
    if value < 0:
        raise ValueError(f"{field} must be >= 0 (0 disables the limit)")
    if value == 0:
        return None
    return float(value)


def _parse_optional_non_negative_int(value: object, *, field: str) -> int | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    parsed = _parse_int_strict(value, field=field)
    if parsed < 0:
        raise ValueError(f"{field} must be a non-negative integer")
    return parsed


def _parse_int_strict(value: object, *, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{field} must be an integer")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError as exc:
            raise ValueError(f"{field} must be an integer") from exc
    raise ValueError(f"{field} must be an integer")
