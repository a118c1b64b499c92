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

from ..core.models import RetentionPolicy

PRUNE_FLAG = "--prune"
TAG_FLAG = "--tag"


def keep_flag(bucket: str) -> str:
    return f"--keep-{bucket}"


def encode_retention_policy(policy: RetentionPolicy, *, tag: str | None = None) -> list[str]:
    """Build the ``forget`` arguments for ``policy``.

    Absent buckets emit nothing: omitting ``--keep-daily`` leaves daily
    snapshots unconstrained, whereas ``--keep-daily 0`` would keep none.
    """
    args = [PRUNE_FLAG]
    for bucket, value in policy.buckets():
        args.extend((keep_flag(bucket), str(value)))
    if tag is not None:
        args.extend((TAG_FLAG, tag))
    return args
