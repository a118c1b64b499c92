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

import tempfile
import unittest
from pathlib import Path

from snapkeep.config import load_app_config
from snapkeep.config.installer import (
    DEFAULT_CONFIG_PATH,
    init_user_config,
    resolve_config_path,
    user_config_needs_init,
    user_config_path,
)
from snapkeep.core.models import RetentionPolicy
from tests.test_support import temp_env, write_config


class TestLoadAppConfig(unittest.TestCase):
    def test_packaged_defaults(self) -> None:
        config = load_app_config(DEFAULT_CONFIG_PATH)
        self.assertEqual(config.path, DEFAULT_CONFIG_PATH)
        self.assertEqual(config.retention, RetentionPolicy(daily=7, weekly=4, monthly=6))
        self.assertEqual(config.run.repository_root, "~/backup-restic")
        self.assertEqual(config.run.restore_root, ".")
        self.assertEqual(config.restic.probe_timeout, 3600.0)
        self.assertEqual(config.restic.stats_mode, "raw-data")
        self.assertFalse(config.ui.quiet)

    def test_parses_sections(self) -> None:
        toml = """
[restic]
binary = "/opt/restic"
probe_timeout = "90"
stats_timeout = 0
stats_mode = "restore-size"

[defaults.run]
repository_root = "/mnt/backups"
cache_dir = "/var/cache/restic"
password_file = "/etc/restic/pw"
tag = "nightly"

[defaults.retention]
last = 3
hourly = ""
daily = "0"

[ui]
quiet = "yes"
"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_config(Path(tmpdir), toml)
            with temp_env({"SNAPKEEP_RESTIC_PATH": ""}):
                config = load_app_config(path)

        self.assertEqual(config.restic.binary, "/opt/restic")
        self.assertEqual(config.restic.probe_timeout, 90.0)
        self.assertIsNone(config.restic.stats_timeout)
        self.assertEqual(config.restic.stats_mode, "restore-size")
        self.assertEqual(config.run.repository_root, "/mnt/backups")
        self.assertEqual(config.run.cache_dir, "/var/cache/restic")
        self.assertEqual(config.run.password_file, "/etc/restic/pw")
        self.assertEqual(config.run.tag, "nightly")
        self.assertEqual(config.retention, RetentionPolicy(last=3, daily=0))
        self.assertTrue(config.ui.quiet)

    def test_env_overrides(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_config(Path(tmpdir))
            env = {"SNAPKEEP_RESTIC_PATH": "/usr/local/bin/restic", "RESTIC_PASSWORD_FILE": "/pw"}
            with temp_env(env):
                config = load_app_config(path)
        self.assertEqual(config.restic.binary, "/usr/local/bin/restic")
        self.assertEqual(config.run.password_file, "/pw")
        self.assertEqual(config.restic.stats_timeout, 3600.0)
        self.assertEqual(config.retention, RetentionPolicy(daily=7, weekly=4, monthly=6))

    def test_retention_zero_is_kept_and_empty_is_unset(self) -> None:
        toml = """
[defaults.retention]
keep_last = 0
weekly = ""
monthly = 12
"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_config(Path(tmpdir), toml)
            config = load_app_config(path)
        self.assertEqual(config.retention, RetentionPolicy(last=0, monthly=12))
        self.assertEqual(config.retention.buckets(), (("last", 0), ("monthly", 12)))

    def test_unknown_retention_bucket_names_section(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_config(Path(tmpdir), "[defaults.retention]\nforever = 1\ndaily = 2\n")
            with self.assertRaisesRegex(ValueError, r"defaults\.retention.*forever"):
                load_app_config(path)

    def test_invalid_values(self) -> None:
        cases = (
            "[restic]\nprobe_timeout = -1\n",
            "[restic]\nstats_timeout = true\n",
            "[restic]\nbinary = 5\n",
            "[defaults.retention]\nforever = 1\n",
            "[defaults.retention]\ndaily = -2\n",
            "[defaults.retention]\nweekly = 1.5\n",
            "[ui]\nquiet = \"maybe\"\n",
        )
        for toml in cases:
            with self.subTest(toml=toml):
                with tempfile.TemporaryDirectory() as tmpdir:
                    path = write_config(Path(tmpdir), toml)
                    with temp_env({"SNAPKEEP_RESTIC_PATH": ""}):
                        with self.assertRaises(ValueError):
                            load_app_config(path)


class TestConfigInstaller(unittest.TestCase):
    def test_user_config_lifecycle(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with temp_env({"XDG_CONFIG_HOME": tmpdir, "SNAPKEEP_CONFIG": ""}):
                self.assertTrue(user_config_needs_init())
                config_dir = init_user_config()
                self.assertEqual(config_dir, Path(tmpdir) / "snapkeep")
                self.assertFalse(user_config_needs_init())
                self.assertEqual(
                    user_config_path().read_text(encoding="utf-8"),
                    DEFAULT_CONFIG_PATH.read_text(encoding="utf-8"),
                )

    def test_resolve_precedence(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            explicit = Path(tmpdir) / "explicit.toml"
            from_env = Path(tmpdir) / "env.toml"
            with temp_env({"XDG_CONFIG_HOME": tmpdir, "SNAPKEEP_CONFIG": str(from_env)}):
                self.assertEqual(resolve_config_path(explicit), explicit)
                self.assertEqual(resolve_config_path(), from_env)
            with temp_env({"XDG_CONFIG_HOME": tmpdir, "SNAPKEEP_CONFIG": ""}):
                resolved = resolve_config_path()
                self.assertEqual(resolved, Path(tmpdir) / "snapkeep" / "config.toml")
                self.assertTrue(resolved.exists())


if __name__ == "__main__":
    unittest.main()
