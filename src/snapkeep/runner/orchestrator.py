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

"""Backup run state machine.

A run walks ``UNCHECKED -> [INITIALIZING] -> READY -> BACKING_UP -> PRUNING
-> COLLECTING_STATS -> [RESTORING] -> DONE``. Each step's failure handling is
looked up in :data:`~snapkeep.runner.steps.STEP_POLICIES`: fatal steps move
the run to ``FAILED`` and raise :class:`StepFailed`, warn steps record a
message on the report and let the run continue.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar, cast

from ..core.models import (
    BackupResult,
    InitOutcome,
    RepositoryConfig,
    ResticSettings,
    RunRequest,
    StatsResult,
)
from ..restic.client import ResticClient
from ..restic.invoker import ProcessFailure, ProcessInvoker
from .steps import FailurePolicy, RunState, step_policy

_T = TypeVar("_T")

TransitionCallback = Callable[[RunState], None]

# ValueError covers undecodable JSON from a step that parses a document.
_STEP_ERRORS = (ProcessFailure, ValueError)


@dataclass
class StepFailed(RuntimeError):
    state: RunState
    label: str
    failure: Exception

    @property
    def exit_code(self) -> int | None:
        if isinstance(self.failure, ProcessFailure):
            return self.failure.exit_code
        return None

    def __str__(self) -> str:
        return f"{self.label} failed: {self.failure}"


@dataclass(frozen=True)
class RunReport:
    backup: BackupResult
    stats: StatsResult | None = None
    init_outcome: InitOutcome | None = None
    restored_to: str | None = None
    warnings: tuple[str, ...] = ()
    state: RunState = RunState.DONE


class BackupOrchestrator:
    def __init__(
        self,
        repository: RepositoryConfig,
        *,
        settings: ResticSettings | None = None,
        invoker: ProcessInvoker | None = None,
        on_transition: TransitionCallback | None = None,
    ) -> None:
        self.client = ResticClient(repository, settings=settings, invoker=invoker)
        self._on_transition = on_transition
        self._state = RunState.UNCHECKED

    @property
    def state(self) -> RunState:
        return self._state

    def run(self, request: RunRequest) -> RunReport:
        self._state = RunState.UNCHECKED
        warnings: list[str] = []
        try:
            report = self._run(request, warnings)
        except Exception:
            self._transition(RunState.FAILED)
            raise
        self._transition(RunState.DONE)
        return report

    def _run(self, request: RunRequest, warnings: list[str]) -> RunReport:
        init_outcome = self._ensure_repository(request.force_init, warnings)
        self._transition(RunState.READY)

        backup = self._run_step(
            RunState.BACKING_UP,
            lambda: self.client.backup(request.source, request.options),
            warnings,
        )
        self._run_step(
            RunState.PRUNING,
            lambda: self.client.forget(request.retention, tag=request.options.tag),
            warnings,
        )
        stats = self._run_step(RunState.COLLECTING_STATS, self.client.stats, warnings)

        restored_to: str | None = None
        restore = request.restore
        if restore is not None:
            self._run_step(
                RunState.RESTORING,
                lambda: self.client.restore(
                    restore.target,
                    snapshot_id=restore.snapshot_id,
                    tag=restore.tag,
                ),
                warnings,
            )
            restored_to = restore.target

        # BACKING_UP is a fatal step, so a failed backup raised above.
        return RunReport(
            backup=cast(BackupResult, backup),
            stats=stats,
            init_outcome=init_outcome,
            restored_to=restored_to,
            warnings=tuple(warnings),
        )

    def _ensure_repository(self, force_init: bool, warnings: list[str]) -> InitOutcome | None:
        if not force_init and self.client.repository_exists():
            return None
        return self._run_step(RunState.INITIALIZING, self.client.init, warnings)

    def _run_step(
        self,
        state: RunState,
        action: Callable[[], _T],
        warnings: list[str],
    ) -> _T | None:
        policy = step_policy(state)
        self._transition(state)
        try:
            return action()
        except _STEP_ERRORS as exc:
            if policy.on_failure is FailurePolicy.WARN:
                warnings.append(f"{policy.label} unavailable: {exc}")
                return None
            raise StepFailed(state=state, label=policy.label, failure=exc) from exc

    def _transition(self, state: RunState) -> None:
        self._state = state
        if self._on_transition is not None:
            self._on_transition(state)
