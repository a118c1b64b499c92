#!/usr/bin/env python3
from __future__ import annotations

from collections.abc import Sequence

from ...core.models import BackupResult, InitOutcome, SnapshotRecord, StatsResult
from ...runner import RunReport
from ..core.text import format_bytes, format_count, format_retention
from ..core.types import RunPlan
from . import build_kv_table, build_list_table, build_metrics_table, console, panel


def print_run_configuration(plan: RunPlan, *, quiet: bool) -> None:
    if quiet:
        return
    request = plan.request
    rows = [
        ("Name", plan.name),
        ("Source", request.source),
        ("Repository", plan.repository.location),
        ("Password file", plan.repository.password_file),
    ]
    if plan.repository.cache_dir:
        rows.append(("Cache dir", plan.repository.cache_dir))
    if request.options.tag:
        rows.append(("Tag", request.options.tag))
    if request.options.excludes:
        rows.append(("Excludes", ", ".join(request.options.excludes)))
    rows.append(("Retention", format_retention(request.retention)))
    if request.restore is not None:
        rows.append(("Restore", f"{request.restore.snapshot_id} -> {request.restore.target}"))
    console.print(panel("Backup run", build_kv_table(rows)))


def print_backup_summary(result: BackupResult, *, quiet: bool) -> None:
    if quiet:
        return
    rows = [
        ("Snapshot", result.snapshot_id),
        ("New files", format_count(result.files_new)),
        ("Changed files", format_count(result.files_changed)),
        ("Unmodified files", format_count(result.files_unmodified)),
        ("Data added", format_bytes(result.bytes_added)),
        ("Data processed", format_bytes(result.bytes_processed)),
    ]
    console.print(panel("Backup", build_metrics_table(rows)))


def print_stats_summary(stats: StatsResult, *, quiet: bool) -> None:
    if quiet:
        return
    rows = [
        ("Repository size", format_bytes(stats.total_size)),
        ("Files", format_count(stats.total_file_count)),
    ]
    console.print(panel("Repository", build_metrics_table(rows)))


def print_run_summary(report: RunReport, *, quiet: bool) -> None:
    if quiet:
        return
    if report.init_outcome is InitOutcome.CREATED:
        console.print("[subtitle]Repository initialized.[/subtitle]")
    elif report.init_outcome is InitOutcome.ALREADY_INITIALIZED:
        console.print("[subtitle]Repository was already initialized.[/subtitle]")
    print_backup_summary(report.backup, quiet=quiet)
    if report.stats is not None:
        print_stats_summary(report.stats, quiet=quiet)


def print_snapshots(snapshots: Sequence[SnapshotRecord], *, quiet: bool) -> None:
    if quiet:
        return
    if not snapshots:
        console.print("[subtitle]No snapshots found.[/subtitle]")
        return
    rows = [
        (
            snapshot.short_id,
            snapshot.time,
            snapshot.hostname,
            ", ".join(sorted(snapshot.tags)),
            ", ".join(snapshot.paths),
        )
        for snapshot in snapshots
    ]
    console.print(build_list_table(("ID", "Time", "Host", "Tags", "Paths"), rows))
