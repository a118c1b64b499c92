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

"""Decoders for restic's ``--json`` output.

``backup --json`` writes one JSON object per line: progress ``status``
records, a final ``summary`` record and, depending on the restic version, a
separate ``snapshot`` record. Other commands write a single JSON document.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

from ..core.models import UNKNOWN_SNAPSHOT_ID, BackupResult, SnapshotRecord, StatsResult
from ..core.validation import coerce_count

MESSAGE_TYPE_FIELD = "message_type"
SUMMARY_MESSAGE = "summary"
SNAPSHOT_MESSAGE = "snapshot"
SNAPSHOT_ID_FIELD = "snapshot_id"


def iter_json_records(raw: str) -> Iterator[dict[str, Any]]:
    """Yield each line of ``raw`` that decodes to a JSON object.

    Blank lines, undecodable lines and JSON values that are not objects are
    dropped: restic mixes plain diagnostic text into its output.
    """
    for line in raw.splitlines():
        text = line.strip()
        if not text:
            continue
        try:
            record = json.loads(text)
        except ValueError:
            continue
        if isinstance(record, dict) and record:
            yield record


def parse_backup_stream(raw: str) -> BackupResult:
    summary: dict[str, Any] | None = None
    snapshot_record_id: str | None = None
    other_id: str | None = None

    for record in iter_json_records(raw):
        kind = record.get(MESSAGE_TYPE_FIELD)
        if kind == SUMMARY_MESSAGE:
            summary = record
            continue
        candidate = _snapshot_id(record)
        if candidate is None:
            continue
        if kind == SNAPSHOT_MESSAGE:
            snapshot_record_id = candidate
        else:
            other_id = candidate

    if summary is None:
        return BackupResult(snapshot_id=snapshot_record_id or other_id or UNKNOWN_SNAPSHOT_ID)

    snapshot_id = (
        snapshot_record_id or _snapshot_id(summary) or other_id or UNKNOWN_SNAPSHOT_ID
    )
    return BackupResult(
        files_new=coerce_count(summary.get("files_new")),
        files_changed=coerce_count(summary.get("files_changed")),
        files_unmodified=coerce_count(summary.get("files_unmodified")),
        bytes_added=coerce_count(summary.get("data_added")),
        bytes_processed=coerce_count(summary.get("total_bytes_processed")),
        snapshot_id=snapshot_id,
    )


def parse_stats(raw: str) -> StatsResult:
    data = _load_document(raw, label="stats")
    if not isinstance(data, dict):
        raise ValueError("stats output must be a JSON object")
    return StatsResult(
        total_size=coerce_count(data.get("total_size")),
        total_file_count=coerce_count(data.get("total_file_count")),
    )


def parse_snapshots(raw: str) -> list[SnapshotRecord]:
    if not raw.strip():
        return []
    data = _load_document(raw, label="snapshots")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("snapshots output must be a JSON array")
    return [_snapshot_record(item) for item in data if isinstance(item, dict)]


def _snapshot_record(item: dict[str, Any]) -> SnapshotRecord:
    return SnapshotRecord(
        id=str(item.get("id") or ""),
        time=str(item.get("time") or ""),
        hostname=str(item.get("hostname") or ""),
        username=str(item.get("username") or ""),
        paths=tuple(str(path) for path in item.get("paths") or ()),
        tags=frozenset(str(tag) for tag in item.get("tags") or ()),
    )


def _snapshot_id(record: dict[str, Any]) -> str | None:
    value = record.get(SNAPSHOT_ID_FIELD)
    if isinstance(value, str) and value:
        return value
    return None


def _load_document(raw: str, *, label: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ValueError(f"{label} output is not valid JSON") from exc
