#!/usr/bin/env python3
from __future__ import annotations

import os
import stat
from pathlib import Path

from ...config import AppConfig
from ...core.models import (
    LATEST_SNAPSHOT,
    BackupOptions,
    RepositoryConfig,
    RestoreRequest,
    RetentionPolicy,
    RunRequest,
)
from .types import RunArgs, RunPlan, SnapshotsArgs

_SAFE_PASSWORD_MODES = (0o600, 0o400)


def _validate_name(name: str | None) -> str:
    value = (name or "").strip()
    if not value:
        raise ValueError("name is required")
    if "/" in value or "\\" in value or value in {".", ".."}:
        raise ValueError("name must not contain path separators")
    return value


def _validate_run_args(args: RunArgs) -> None:
    _validate_name(args.name)
    if not args.source:
        raise ValueError("source is required")
    if not args.restore and (args.restore_target or args.restore_snapshot):
        raise ValueError("--restore-target and --restore-snapshot require --restore")
    if args.exclude_file and not Path(args.exclude_file).is_file():
        raise ValueError(f"exclude file not found: {args.exclude_file}")


def _expand(path: str) -> str:
    return os.path.expanduser(os.path.expandvars(path))


def resolve_repository(
    *,
    name: str | None,
    repository: str | None,
    password_file: str | None,
    cache_dir: str | None,
    config: AppConfig,
) -> RepositoryConfig:
    if repository:
        location = repository
    else:
        root = _expand(config.run.repository_root)
        location = os.path.join(root, _validate_name(name))
    password_value = password_file or config.run.password_file
    if not password_value:
        raise ValueError("password file is required (use --password-file or RESTIC_PASSWORD_FILE)")
    password_path = Path(_expand(password_value))
    if not password_path.is_file():
        raise FileNotFoundError(f"password file not found: {password_path}")
    cache_value = cache_dir or config.run.cache_dir
    return RepositoryConfig(
        location=location,
        password_file=str(password_path),
        cache_dir=_expand(cache_value) if cache_value else None,
    )


def password_file_mode_warning(path: str | Path) -> str | None:
    if os.name == "nt":
        return None
    mode = stat.S_IMODE(Path(path).stat().st_mode)
    if mode in _SAFE_PASSWORD_MODES:
        return None
    return f"password file {path} has permissions {mode:o}; expected 600 or 400"


def _retention_overrides(args: RunArgs) -> RetentionPolicy:
    return RetentionPolicy(
        last=args.keep_last,
        hourly=args.keep_hourly,
        daily=args.keep_daily,
        weekly=args.keep_weekly,
        monthly=args.keep_monthly,
        yearly=args.keep_yearly,
    )


def plan_from_args(args: RunArgs, config: AppConfig) -> RunPlan:
    _validate_run_args(args)
    name = _validate_name(args.name)
    source = Path(_expand(args.source or ""))
    if not source.exists():
        raise FileNotFoundError(f"source not found: {source}")
    if not source.is_dir():
        raise ValueError(f"source is not a directory: {source}")

    repository = resolve_repository(
        name=name,
        repository=args.repository,
        password_file=args.password_file,
        cache_dir=args.cache_dir,
        config=config,
    )
    tag = args.tag or config.run.tag
    options = BackupOptions(
        tag=tag,
        excludes=tuple(args.exclude or ()),
        exclude_file=args.exclude_file,
    )
    retention = config.retention.merged(_retention_overrides(args))
    restore = None
    if args.restore:
        target = args.restore_target or os.path.join(
            _expand(config.run.restore_root), f"restore-{name}"
        )
        restore = RestoreRequest(
            target=target,
            snapshot_id=args.restore_snapshot or LATEST_SNAPSHOT,
            tag=tag,
        )
    request = RunRequest(
        source=str(source),
        options=options,
        retention=retention,
        restore=restore,
        force_init=args.force_init,
    )
    return RunPlan(name=name, repository=repository, settings=config.restic, request=request)


def repository_from_snapshot_args(args: SnapshotsArgs, config: AppConfig) -> RepositoryConfig:
    if not args.repository:
        _validate_name(args.name)
    return resolve_repository(
        name=args.name,
        repository=args.repository,
        password_file=args.password_file,
        cache_dir=args.cache_dir,
        config=config,
    )
