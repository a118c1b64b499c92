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

import unittest

from snapkeep.core.models import (
    BackupOptions,
    InitOutcome,
    RestoreRequest,
    RetentionPolicy,
    RunRequest,
    StatsResult,
)
from snapkeep.restic.invoker import ProcessFailure
from snapkeep.runner import (
    STEP_POLICIES,
    BackupOrchestrator,
    FailurePolicy,
    RunState,
    StepFailed,
)
from snapkeep.runner.steps import step_policy
from tests.test_support import (
    TEST_SNAPSHOT_ID,
    FakeInvoker,
    healthy_responses,
    make_failure,
    make_repository,
)


def _request(**kwargs) -> RunRequest:
    kwargs.setdefault("source", "/var/www/example")
    kwargs.setdefault("retention", RetentionPolicy(daily=7, weekly=4))
    return RunRequest(**kwargs)


class TestBackupOrchestrator(unittest.TestCase):
    def _orchestrator(self, invoker: FakeInvoker) -> tuple[BackupOrchestrator, list[RunState]]:
        transitions: list[RunState] = []
        orchestrator = BackupOrchestrator(
            make_repository(),
            invoker=invoker,
            on_transition=transitions.append,
        )
        return orchestrator, transitions

    def test_existing_repository_happy_path(self) -> None:
        invoker = FakeInvoker(healthy_responses())
        orchestrator, transitions = self._orchestrator(invoker)
        report = orchestrator.run(_request())

        self.assertEqual(invoker.subcommands, ["snapshots", "backup", "forget", "stats"])
        self.assertEqual(
            transitions,
            [
                RunState.READY,
                RunState.BACKING_UP,
                RunState.PRUNING,
                RunState.COLLECTING_STATS,
                RunState.DONE,
            ],
        )
        self.assertIs(orchestrator.state, RunState.DONE)
        self.assertIsNone(report.init_outcome)
        self.assertEqual(report.backup.snapshot_id, TEST_SNAPSHOT_ID)
        self.assertEqual(report.stats, StatsResult(total_size=1048576, total_file_count=42))
        self.assertEqual(report.warnings, ())
        self.assertIsNone(report.restored_to)

    def test_missing_repository_is_initialized(self) -> None:
        responses = healthy_responses()
        responses["snapshots"] = make_failure("snapshots", exit_code=10)
        invoker = FakeInvoker(responses)
        orchestrator, transitions = self._orchestrator(invoker)
        report = orchestrator.run(_request())

        self.assertEqual(invoker.subcommands[:2], ["snapshots", "init"])
        self.assertEqual(transitions[:2], [RunState.INITIALIZING, RunState.READY])
        self.assertIs(report.init_outcome, InitOutcome.CREATED)

    def test_unexpected_probe_error_leads_to_init(self) -> None:
        responses = healthy_responses()
        responses["snapshots"] = RuntimeError("connection reset by peer")
        invoker = FakeInvoker(responses)
        orchestrator, transitions = self._orchestrator(invoker)
        report = orchestrator.run(_request())

        self.assertEqual(invoker.subcommands[:2], ["snapshots", "init"])
        self.assertEqual(transitions[:2], [RunState.INITIALIZING, RunState.READY])
        self.assertIs(orchestrator.state, RunState.DONE)
        self.assertIs(report.init_outcome, InitOutcome.CREATED)

    def test_force_init_skips_probe(self) -> None:
        invoker = FakeInvoker(healthy_responses())
        orchestrator, _ = self._orchestrator(invoker)
        orchestrator.run(_request(force_init=True))
        self.assertEqual(invoker.subcommands[0], "init")
        self.assertNotIn("snapshots", invoker.subcommands)

    def test_already_initialized_continues(self) -> None:
        responses = healthy_responses()
        responses["init"] = make_failure("init", stderr="config file already initialized")
        invoker = FakeInvoker(responses)
        orchestrator, _ = self._orchestrator(invoker)
        report = orchestrator.run(_request(force_init=True))
        self.assertIs(report.init_outcome, InitOutcome.ALREADY_INITIALIZED)
        self.assertIn("backup", invoker.subcommands)

    def test_init_failure_is_fatal(self) -> None:
        responses = healthy_responses()
        responses["snapshots"] = make_failure("snapshots")
        responses["init"] = make_failure("init", stderr="Fatal: permission denied")
        invoker = FakeInvoker(responses)
        orchestrator, transitions = self._orchestrator(invoker)
        with self.assertRaises(StepFailed) as ctx:
            orchestrator.run(_request())
        self.assertIs(ctx.exception.state, RunState.INITIALIZING)
        self.assertEqual(invoker.subcommands, ["snapshots", "init"])
        self.assertEqual(transitions[-1], RunState.FAILED)

    def test_backup_failure_aborts_before_prune_and_stats(self) -> None:
        responses = healthy_responses()
        responses["backup"] = make_failure("backup", exit_code=3, stderr="Fatal: source gone")
        invoker = FakeInvoker(responses)
        orchestrator, _ = self._orchestrator(invoker)
        with self.assertRaises(StepFailed) as ctx:
            orchestrator.run(_request())

        self.assertEqual(invoker.subcommands, ["snapshots", "backup"])
        self.assertIs(orchestrator.state, RunState.FAILED)
        failure = ctx.exception
        self.assertEqual(failure.label, "Backup")
        self.assertEqual(failure.exit_code, 3)
        self.assertIsInstance(failure.__cause__, ProcessFailure)
        self.assertIn("Backup failed", str(failure))
        self.assertIn("Fatal: source gone", str(failure))

    def test_prune_failure_skips_stats_and_restore(self) -> None:
        responses = healthy_responses()
        responses["forget"] = make_failure("forget")
        invoker = FakeInvoker(responses)
        orchestrator, _ = self._orchestrator(invoker)
        request = _request(restore=RestoreRequest(target="/tmp/restore"))
        with self.assertRaises(StepFailed) as ctx:
            orchestrator.run(request)
        self.assertIs(ctx.exception.state, RunState.PRUNING)
        self.assertEqual(invoker.subcommands, ["snapshots", "backup", "forget"])

    def test_stats_failure_is_a_warning(self) -> None:
        responses = healthy_responses()
        responses["stats"] = make_failure("stats", stderr="Fatal: lock timeout")
        invoker = FakeInvoker(responses)
        orchestrator, _ = self._orchestrator(invoker)
        report = orchestrator.run(_request())

        self.assertIs(orchestrator.state, RunState.DONE)
        self.assertIsNone(report.stats)
        self.assertEqual(len(report.warnings), 1)
        self.assertIn("Repository statistics unavailable", report.warnings[0])
        self.assertIn("lock timeout", report.warnings[0])

    def test_malformed_stats_is_a_warning(self) -> None:
        responses = healthy_responses()
        responses["stats"] = "not json"
        orchestrator, _ = self._orchestrator(FakeInvoker(responses))
        report = orchestrator.run(_request())
        self.assertIsNone(report.stats)
        self.assertEqual(len(report.warnings), 1)

    def test_restore_runs_last_with_tag(self) -> None:
        invoker = FakeInvoker(healthy_responses())
        orchestrator, transitions = self._orchestrator(invoker)
        request = _request(
            options=BackupOptions(tag="nightly"),
            restore=RestoreRequest(target="/tmp/restore", tag="nightly"),
        )
        report = orchestrator.run(request)

        self.assertEqual(invoker.subcommands[-1], "restore")
        self.assertEqual(
            invoker.call_for("restore").args,
            ["latest", "--target", "/tmp/restore", "--tag", "nightly"],
        )
        self.assertEqual(invoker.call_for("forget").args[-2:], ["--tag", "nightly"])
        self.assertEqual(transitions[-2:], [RunState.RESTORING, RunState.DONE])
        self.assertEqual(report.restored_to, "/tmp/restore")

    def test_restore_failure_is_fatal(self) -> None:
        responses = healthy_responses()
        responses["restore"] = make_failure("restore", stderr="Fatal: no snapshot found")
        orchestrator, _ = self._orchestrator(FakeInvoker(responses))
        with self.assertRaises(StepFailed) as ctx:
            orchestrator.run(_request(restore=RestoreRequest(target="/tmp/r")))
        self.assertIs(ctx.exception.state, RunState.RESTORING)

    def test_orchestrator_can_run_again_after_failure(self) -> None:
        responses = healthy_responses()
        responses["backup"] = make_failure("backup")
        invoker = FakeInvoker(responses)
        orchestrator, _ = self._orchestrator(invoker)
        with self.assertRaises(StepFailed):
            orchestrator.run(_request())
        invoker.responses = healthy_responses()
        report = orchestrator.run(_request())
        self.assertIs(orchestrator.state, RunState.DONE)
        self.assertEqual(report.backup.snapshot_id, TEST_SNAPSHOT_ID)


class TestStepPolicies(unittest.TestCase):
    def test_only_stats_is_soft(self) -> None:
        soft = [
            state
            for state, policy in STEP_POLICIES.items()
            if policy.on_failure is FailurePolicy.WARN
        ]
        self.assertEqual(soft, [RunState.COLLECTING_STATS])

    def test_unknown_step_raises(self) -> None:
        with self.assertRaises(LookupError):
            step_policy(RunState.DONE)


if __name__ == "__main__":
    unittest.main()
