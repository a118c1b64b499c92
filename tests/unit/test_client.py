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

import json
import unittest

from snapkeep.core.models import (
    BackupOptions,
    InitOutcome,
    ResticSettings,
    RetentionPolicy,
)
from snapkeep.restic.client import ResticClient, is_already_initialized
from snapkeep.restic.invoker import ProcessFailure
from tests.test_support import (
    STATS_RECORD,
    TEST_PASSWORD_FILE,
    TEST_REPOSITORY,
    FakeInvoker,
    backup_stream,
    make_failure,
    make_repository,
)


class TestResticClient(unittest.TestCase):
    def _client(self, invoker: FakeInvoker, **settings) -> ResticClient:
        return ResticClient(
            make_repository(cache_dir="/var/cache/restic"),
            settings=ResticSettings(**settings),
            invoker=invoker,
        )

    def test_every_call_carries_repository_env(self) -> None:
        invoker = FakeInvoker({"stats": json.dumps(STATS_RECORD)})
        client = self._client(invoker)
        client.snapshots()
        client.stats()
        for call in invoker.calls:
            self.assertEqual(
                call.env,
                {
                    "RESTIC_REPOSITORY": TEST_REPOSITORY,
                    "RESTIC_PASSWORD_FILE": TEST_PASSWORD_FILE,
                    "RESTIC_CACHE_DIR": "/var/cache/restic",
                },
            )

    def test_cache_dir_omitted_when_unset(self) -> None:
        invoker = FakeInvoker()
        ResticClient(make_repository(), invoker=invoker).snapshots()
        self.assertNotIn("RESTIC_CACHE_DIR", invoker.calls[0].env)

    def test_init_created(self) -> None:
        invoker = FakeInvoker()
        self.assertIs(self._client(invoker).init(), InitOutcome.CREATED)
        self.assertEqual(invoker.calls[0].args, [])

    def test_init_already_initialized_is_success(self) -> None:
        for stream in ("stderr", "stdout"):
            failure = make_failure(
                "init",
                **{stream: "Fatal: create key in repository failed: config already initialized"},
            )
            with self.subTest(stream=stream):
                outcome = self._client(FakeInvoker({"init": failure})).init()
                self.assertIs(outcome, InitOutcome.ALREADY_INITIALIZED)

    def test_init_twice_never_fails(self) -> None:
        invoker = FakeInvoker()
        client = self._client(invoker)
        self.assertIs(client.init(), InitOutcome.CREATED)
        invoker.responses["init"] = make_failure(
            "init", stderr="repository master key and config already initialized"
        )
        self.assertIs(client.init(), InitOutcome.ALREADY_INITIALIZED)

    def test_init_other_failure_propagates(self) -> None:
        failure = make_failure("init", stderr="Fatal: permission denied")
        with self.assertRaises(ProcessFailure) as ctx:
            self._client(FakeInvoker({"init": failure})).init()
        self.assertIs(ctx.exception, failure)

    def test_repository_exists_probe(self) -> None:
        invoker = FakeInvoker({"snapshots": "[]"})
        self.assertTrue(self._client(invoker, probe_timeout=30).repository_exists())
        call = invoker.calls[0]
        self.assertEqual((call.subcommand, call.args, call.timeout), ("snapshots", ["--json"], 30))

    def test_repository_exists_false_on_any_failure(self) -> None:
        failures = (
            make_failure("snapshots", exit_code=None),
            make_failure("snapshots", exit_code=10),
            RuntimeError("connection reset by peer"),
        )
        for failure in failures:
            with self.subTest(failure=failure):
                invoker = FakeInvoker({"snapshots": failure})
                self.assertFalse(self._client(invoker).repository_exists())

    def test_backup_arguments_and_unbounded_timeout(self) -> None:
        stream = backup_stream({"message_type": "snapshot", "snapshot_id": "s1"})
        invoker = FakeInvoker({"backup": stream})
        options = BackupOptions(
            tag="nightly", excludes=("*.log", "cache/"), exclude_file="/etc/ex"
        )
        result = self._client(invoker).backup("/var/www", options)
        call = invoker.call_for("backup")
        self.assertEqual(
            call.args,
            [
                "/var/www",
                "--json",
                "--tag",
                "nightly",
                "--exclude",
                "*.log",
                "--exclude",
                "cache/",
                "--exclude-file",
                "/etc/ex",
            ],
        )
        self.assertIsNone(call.timeout)
        self.assertEqual(result.snapshot_id, "s1")

    def test_backup_rejects_empty_source(self) -> None:
        invoker = FakeInvoker()
        with self.assertRaises(ValueError):
            self._client(invoker).backup("  ")
        self.assertEqual(invoker.calls, [])

    def test_forget_encodes_policy(self) -> None:
        invoker = FakeInvoker()
        self._client(invoker).forget(RetentionPolicy(daily=7), tag="web")
        call = invoker.call_for("forget")
        self.assertEqual(call.args, ["--prune", "--keep-daily", "7", "--tag", "web"])
        self.assertIsNone(call.timeout)

    def test_stats_mode_and_timeout(self) -> None:
        invoker = FakeInvoker({"stats": json.dumps(STATS_RECORD)})
        client = self._client(invoker, stats_timeout=120, stats_mode="restore-size")
        stats = client.stats()
        client.stats(mode="raw-data")
        first, second = invoker.calls
        self.assertEqual(first.args, ["--mode", "restore-size", "--json"])
        self.assertEqual(first.timeout, 120)
        self.assertEqual(second.args, ["--mode", "raw-data", "--json"])
        self.assertEqual(stats.total_file_count, 42)

    def test_restore_arguments(self) -> None:
        invoker = FakeInvoker()
        client = self._client(invoker)
        client.restore("/tmp/restore")
        client.restore("/tmp/restore", snapshot_id="abc", tag="web")
        first, second = invoker.calls
        self.assertEqual(first.args, ["latest", "--target", "/tmp/restore"])
        self.assertEqual(second.args, ["abc", "--target", "/tmp/restore", "--tag", "web"])
        self.assertIsNone(first.timeout)

    def test_snapshots_empty_repository(self) -> None:
        invoker = FakeInvoker({"snapshots": ""})
        self.assertEqual(self._client(invoker).snapshots(), [])

    def test_is_already_initialized(self) -> None:
        self.assertTrue(is_already_initialized(make_failure("init", stderr="already initialized")))
        self.assertFalse(is_already_initialized(make_failure("init", stderr="Already Initialized")))


if __name__ == "__main__":
    unittest.main()
