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

"""Restic subprocess layer: invocation, output decoding and argument encoding."""

from __future__ import annotations

from .client import ALREADY_INITIALIZED_MARKER, ResticClient, is_already_initialized
from .events import parse_backup_stream, parse_snapshots, parse_stats
from .invoker import (
    ProcessFailure,
    ProcessInvoker,
    ProcessResult,
    ProcessTimeout,
    SubprocessInvoker,
)
from .retention import encode_retention_policy

__all__ = [
    "ALREADY_INITIALIZED_MARKER",
    "ProcessFailure",
    "ProcessInvoker",
    "ProcessResult",
    "ProcessTimeout",
    "ResticClient",
    "SubprocessInvoker",
    "encode_retention_policy",
    "is_already_initialized",
    "parse_backup_stream",
    "parse_snapshots",
    "parse_stats",
]
