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
from enum import Enum


class RunState(str, Enum):
    UNCHECKED = "unchecked"
    INITIALIZING = "initializing"
    READY = "ready"
    BACKING_UP = "backing_up"
    PRUNING = "pruning"
    COLLECTING_STATS = "collecting_stats"
    RESTORING = "restoring"
    DONE = "done"
    FAILED = "failed"


class FailurePolicy(str, Enum):
    FATAL = "fatal"
    WARN = "warn"


@dataclass(frozen=True)
class StepPolicy:
    state: RunState
    label: str
    on_failure: FailurePolicy


# Order is execution order. RESTORING only runs when a restore was requested.
STEP_POLICIES: dict[RunState, StepPolicy] = {
    policy.state: policy
    for policy in (
        StepPolicy(RunState.INITIALIZING, "Repository initialization", FailurePolicy.FATAL),
        StepPolicy(RunState.BACKING_UP, "Backup", FailurePolicy.FATAL),
        StepPolicy(RunState.PRUNING, "Retention policy", FailurePolicy.FATAL),
        StepPolicy(RunState.COLLECTING_STATS, "Repository statistics", FailurePolicy.WARN),
        StepPolicy(RunState.RESTORING, "Restore", FailurePolicy.FATAL),
    )
}


def step_policy(state: RunState) -> StepPolicy:
    try:
        return STEP_POLICIES[state]
    except KeyError as exc:
        raise LookupError(f"no step policy for state {state.value}") from exc
