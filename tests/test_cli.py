"""CLI option merging and exit-status tests.

Verifies how ``lazyupgrade.cli.main`` combines flags with persisted config
and how failures map onto ``SystemExit``.
"""

from __future__ import annotations

import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazyupgrade import cli
from lazyupgrade.config import UpgradeConfig
from lazyupgrade.errors import ManifestError
from lazyupgrade.ui_theme import DEFAULT_THEME, OCEAN_THEME, PLAIN_THEME


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        patches = [
            mock.patch("lazyupgrade.cli.configure_logging"),
            mock.patch("lazyupgrade.cli.save_theme"),
            mock.patch("lazyupgrade.cli.load_upgrade_config", return_value=UpgradeConfig(exclude=("legacy",))),
            mock.patch.dict(os.environ, {}, clear=False),
        ]
        self.mocks = [patcher.start() for patcher in patches]
        for patcher in patches:
            self.addCleanup(patcher.stop)
        os.environ.pop("NO_COLOR", None)
        self.save_theme = self.mocks[1]
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.root = Path(self.tmp.name)

    def _options(self, argv: list[str]):
        with mock.patch("lazyupgrade.cli.run_upgrade") as run_upgrade:
            cli.main(["--dir", str(self.root), *argv])
        run_upgrade.assert_called_once()
        return run_upgrade.call_args.args[0]

    def test_defaults_merge_config(self) -> None:
        options = self._options([])
        self.assertEqual(options.root, self.root)
        self.assertEqual(options.exclude, ("legacy",))
        self.assertFalse(options.include_peer_deps)
        self.assertFalse(options.include_optional_deps)
        self.assertIs(options.theme, DEFAULT_THEME)
        self.assertTrue(options.install)
        self.save_theme.assert_not_called()

    def test_flags_extend_config(self) -> None:
        options = self._options([
            "-e", "apps/old, examples",
            "--include-peer-deps",
            "--include-optional-deps",
            "--no-install",
        ])
        self.assertEqual(options.exclude, ("legacy", "apps/old", "examples"))
        self.assertTrue(options.include_peer_deps)
        self.assertTrue(options.include_optional_deps)
        self.assertFalse(options.install)

    def test_theme_flag_is_used_and_remembered(self) -> None:
        options = self._options(["--theme", "ocean"])
        self.assertIs(options.theme, OCEAN_THEME)
        self.save_theme.assert_called_once_with("ocean")

    def test_no_color_flag_and_environment(self) -> None:
        self.assertIs(self._options(["--no-color"]).theme, PLAIN_THEME)
        with mock.patch.dict(os.environ, {"NO_COLOR": "1"}):
            self.assertIs(self._options([]).theme, PLAIN_THEME)

    def test_missing_directory_exits_with_message(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["--dir", str(self.root / "nope")])
        self.assertIn("Path not found", str(ctx.exception.code))

    def test_library_errors_become_one_line_exit(self) -> None:
        with mock.patch("lazyupgrade.cli.run_upgrade", side_effect=ManifestError("No package.json found")):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--dir", str(self.root)])
        self.assertEqual(ctx.exception.code, "Error: No package.json found")

    def test_ctrl_c_exits_130(self) -> None:
        with mock.patch("lazyupgrade.cli.run_upgrade", side_effect=KeyboardInterrupt):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--dir", str(self.root)])
        self.assertEqual(ctx.exception.code, 130)


class ConfigureLoggingTests(unittest.TestCase):
    def test_verbose_switches_package_logger_to_debug(self) -> None:
        logger = logging.getLogger("lazyupgrade")
        saved = (logger.handlers[:], logger.level, logger.propagate)
        try:
            cli.configure_logging(True)
            self.assertEqual(logger.level, logging.DEBUG)
            self.assertEqual(len(logger.handlers), 1)
            cli.configure_logging(False)
            self.assertEqual(logger.level, logging.WARNING)
            self.assertEqual(len(logger.handlers), 1)
        finally:
            logger.handlers[:], logger.level, logger.propagate = saved


if __name__ == "__main__":
    unittest.main()
