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

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pagewright.config import installer


class TestConfigInstaller(unittest.TestCase):
    def test_user_config_path_precedence(self) -> None:
        with mock.patch.dict(os.environ, {installer.XDG_CONFIG_ENV: "/tmp/xdg"}, clear=False):
            with mock.patch.object(installer.sys, "platform", "linux"):
                self.assertEqual(
                    installer.user_config_path(), Path("/tmp/xdg/pagewright/config.toml")
                )

        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop(installer.XDG_CONFIG_ENV, None)
            with mock.patch.object(installer.sys, "platform", "darwin"):
                with mock.patch.object(installer.Path, "home", return_value=Path("/Users/example")):
                    self.assertEqual(
                        installer.user_config_path(),
                        Path("/Users/example/.config/pagewright/config.toml"),
                    )

        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop(installer.XDG_CONFIG_ENV, None)
            with mock.patch.object(installer.sys, "platform", "linux"):
                with mock.patch.object(
                    installer, "user_config_dir", return_value="/opt/config/pagewright"
                ):
                    self.assertEqual(
                        installer.user_config_path(), Path("/opt/config/pagewright/config.toml")
                    )

    def test_packaged_config_path(self) -> None:
        self.assertEqual(installer.packaged_config_path(), installer.DEFAULT_CONFIG_PATH)
        self.assertEqual(
            installer.packaged_config_path(" letter "), installer.PAPER_CONFIGS["LETTER"]
        )
        for path in installer.PAPER_CONFIGS.values():
            self.assertTrue(path.is_file(), path)
        with self.assertRaisesRegex(ValueError, "unknown paper size"):
            installer.packaged_config_path("A3")

    def test_resolve_config_path_order(self) -> None:
        self.assertEqual(installer.resolve_config_path("custom.toml"), Path("custom.toml"))

        with tempfile.TemporaryDirectory() as tmpdir:
            env = {installer.XDG_CONFIG_ENV: tmpdir, installer.CONFIG_ENV: ""}
            with mock.patch.dict(os.environ, env, clear=False):
                self.assertEqual(installer.resolve_config_path(), installer.DEFAULT_CONFIG_PATH)
                self.assertEqual(
                    installer.resolve_config_path(paper_size="LETTER"),
                    installer.PAPER_CONFIGS["LETTER"],
                )

                user_path = installer.user_config_path()
                user_path.parent.mkdir(parents=True)
                user_path.write_text("[page]\n", encoding="utf-8")
                self.assertEqual(installer.resolve_config_path(), user_path)

                with mock.patch.dict(os.environ, {installer.CONFIG_ENV: "/etc/report.toml"}):
                    self.assertEqual(installer.resolve_config_path(), Path("/etc/report.toml"))
                    self.assertEqual(
                        installer.resolve_config_path("explicit.toml"), Path("explicit.toml")
                    )

    def test_init_user_config_copies_once(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with mock.patch.dict(os.environ, {installer.XDG_CONFIG_ENV: tmpdir}, clear=False):
                self.assertTrue(installer.user_config_needs_init())
                dest = installer.init_user_config("LETTER")
                self.assertEqual(dest, Path(tmpdir) / "pagewright" / "config.toml")
                self.assertEqual(
                    dest.read_text(encoding="utf-8"),
                    installer.PAPER_CONFIGS["LETTER"].read_text(encoding="utf-8"),
                )
                self.assertFalse(installer.user_config_needs_init())

                dest.write_text("# edited\n", encoding="utf-8")
                self.assertEqual(installer.init_user_config(), dest)
                self.assertEqual(dest.read_text(encoding="utf-8"), "# edited\n")


if __name__ == "__main__":
    unittest.main()
