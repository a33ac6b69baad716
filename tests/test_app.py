"""End-to-end upgrade-flow tests with injected collaborators."""

from __future__ import annotations

import json
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazyupgrade.app import (
    UpgradeOptions,
    check_install_command,
    dependency_kinds,
    kind_label,
    run_install,
    run_upgrade,
)
from lazyupgrade.errors import LazyUpgradeError, ManifestError, RegistryError
from lazyupgrade.model import SELECTION_LATEST, SELECTION_NONE, PackageMetadata

VERSION_DATA = {
    "react": ("19.0.0", ["18.2.0", "18.3.1", "19.0.0"]),
    "lodash": ("4.17.21", ["4.17.20", "4.17.21"]),
}


class _FakeRegistry:
    session = None

    def __init__(self, data: dict[str, tuple[str, list[str]]]) -> None:
        self.data = data
        self.requested: list[str] = []

    def fetch_all(self, names, on_progress=None):
        self.requested = list(names)
        results = {}
        for done, name in enumerate(self.requested, start=1):
            results[name] = self.data.get(name, ("unknown", []))
            if on_progress is not None:
                on_progress(name, done, len(self.requested))
        return results


class _FakeMetadata:
    def fetch(self, name: str) -> PackageMetadata:
        return PackageMetadata(description=name)


def write_json(path: Path, data: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


class RunUpgradeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.root = Path(self.tmp.name).resolve()
        self.root_manifest = write_json(
            self.root / "package.json",
            {"dependencies": {"react": "^18.2.0", "lodash": "^4.17.21"}},
        )
        self.web_manifest = write_json(
            self.root / "packages" / "web" / "package.json",
            {"devDependencies": {"react": "^18.2.0"}},
        )
        self.output: list[str] = []
        self.installed: list[Path] = []
        self.select_calls: list[dict] = []
        self.progress: list[tuple[str, int, int]] = []
        self.preflight_calls = 0

    def _select_latest(self, states, **kwargs):
        self.select_calls.append({
            "options": [state.selected_option for state in states],
            **kwargs,
        })
        for state in states:
            if state.name == "react":
                state.selected_option = SELECTION_LATEST
        return states

    def _preflight(self) -> None:
        self.preflight_calls += 1

    def _run(self, *, confirm=lambda choices, theme: True, select=None, data=VERSION_DATA, install=True):
        return run_upgrade(
            UpgradeOptions(root=self.root, install=install),
            registry=_FakeRegistry(data),
            metadata=_FakeMetadata(),
            select=select or self._select_latest,
            confirm=confirm,
            install=self.installed.append,
            preflight=self._preflight,
            progress=lambda name, done, total: self.progress.append((name, done, total)),
            output=self.output.append,
        )

    def test_confirmed_upgrade_rewrites_every_manifest_and_installs(self) -> None:
        choices = self._run()

        self.assertEqual(len(choices), 2)
        self.assertEqual(json.loads(self.root_manifest.read_text())["dependencies"]["react"], "^19.0.0")
        self.assertEqual(json.loads(self.root_manifest.read_text())["dependencies"]["lodash"], "^4.17.21")
        self.assertEqual(json.loads(self.web_manifest.read_text())["devDependencies"]["react"], "^19.0.0")
        self.assertEqual(self.installed, [self.root])
        self.assertEqual(self.output[0], "📦 Found 2 package.json files")
        self.assertIn("✏️  Updated packages/web/package.json", self.output)

    def test_flat_session_gets_kind_label(self) -> None:
        self._run()
        call = self.select_calls[0]
        self.assertEqual(call["renderable_items"], [])
        self.assertEqual(call["label"], "Showing: dependencies, devDependencies")
        self.assertEqual(call["metadata_fetcher"]("react"), PackageMetadata(description="react"))

    def test_back_reopens_selection_with_remembered_choices(self) -> None:
        decisions = [None, True]
        self._run(confirm=lambda choices, theme: decisions.pop(0))
        self.assertEqual(len(self.select_calls), 2)
        self.assertEqual(self.select_calls[0]["options"], [SELECTION_NONE])
        self.assertEqual(self.select_calls[1]["options"], [SELECTION_LATEST])

    def test_cancel_leaves_manifests_untouched(self) -> None:
        before = self.root_manifest.read_text()
        self.assertEqual(self._run(confirm=lambda choices, theme: False), [])
        self.assertEqual(self.root_manifest.read_text(), before)
        self.assertEqual(self.installed, [])
        self.assertEqual(self.output[-1], "Upgrade cancelled.")

    def test_empty_selection_stops_before_confirm(self) -> None:
        def never(*_args, **_kwargs):
            raise AssertionError("confirm should not run")

        self.assertEqual(self._run(select=lambda states, **_kwargs: states, confirm=never), [])
        self.assertEqual(self.output[-1], "No packages selected.")

    def test_no_install_skips_reinstall(self) -> None:
        self._run(install=False)
        self.assertEqual(self.installed, [])

    def test_up_to_date_tree(self) -> None:
        data = {"react": ("18.2.0", ["18.2.0"]), "lodash": VERSION_DATA["lodash"]}
        self.assertEqual(self._run(data=data), [])
        self.assertEqual(self.output[-1], "✅ All packages are up to date!")
        self.assertEqual(self.select_calls, [])

    def test_unreachable_registry_is_an_error(self) -> None:
        with self.assertRaises(RegistryError):
            self._run(data={})

    def test_missing_manifests_is_an_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ManifestError):
                run_upgrade(
                    UpgradeOptions(root=Path(tmp)),
                    registry=_FakeRegistry({}),
                    preflight=lambda: None,
                    output=self.output.append,
                )


    def test_missing_pnpm_fails_before_anything_is_touched(self) -> None:
        before = self.root_manifest.read_text()
        registry = _FakeRegistry(VERSION_DATA)
        with mock.patch("lazyupgrade.app.shutil.which", return_value=None):
            with self.assertRaises(LazyUpgradeError) as ctx:
                run_upgrade(
                    UpgradeOptions(root=self.root),
                    registry=registry,
                    metadata=_FakeMetadata(),
                    select=self._select_latest,
                    confirm=lambda choices, theme: True,
                    install=self.installed.append,
                    output=self.output.append,
                )
        self.assertIn("pnpm is not installed", str(ctx.exception))
        self.assertEqual(self.root_manifest.read_text(), before)
        self.assertEqual(registry.requested, [])
        self.assertEqual(self.select_calls, [])
        self.assertEqual(self.output, [])

    def test_preflight_runs_only_when_installing(self) -> None:
        self._run()
        self.assertEqual(self.preflight_calls, 1)
        self._run(install=False)
        self.assertEqual(self.preflight_calls, 1)

    def test_fetch_progress_is_reported_per_package(self) -> None:
        self._run()
        self.assertEqual(self.progress, [("lodash", 1, 2), ("react", 2, 2)])


class OptionsTests(unittest.TestCase):
    def test_dependency_kinds_follow_flags(self) -> None:
        root = Path(".")
        self.assertEqual(dependency_kinds(UpgradeOptions(root=root)), ("dependencies", "devDependencies"))
        kinds = dependency_kinds(UpgradeOptions(root=root, include_peer_deps=True, include_optional_deps=True))
        self.assertEqual(kinds, ("dependencies", "devDependencies", "optionalDependencies", "peerDependencies"))
        self.assertEqual(kind_label(kinds[:1]), "Showing: dependencies")


class RunInstallTests(unittest.TestCase):
    def test_check_install_command_looks_up_pnpm(self) -> None:
        with mock.patch("lazyupgrade.app.shutil.which", return_value="/usr/bin/pnpm") as which:
            check_install_command()
        which.assert_called_once_with("pnpm")
        with mock.patch("lazyupgrade.app.shutil.which", return_value=None):
            with self.assertRaises(LazyUpgradeError):
                check_install_command()

    def test_missing_pnpm_is_reported(self) -> None:
        with mock.patch("lazyupgrade.app.subprocess.run", side_effect=FileNotFoundError):
            with self.assertRaises(LazyUpgradeError) as ctx:
                run_install(Path("."))
        self.assertIn("pnpm is not installed", str(ctx.exception))

    def test_failing_install_is_reported(self) -> None:
        failed = subprocess.CompletedProcess(["pnpm", "install"], 1)
        with mock.patch("lazyupgrade.app.subprocess.run", return_value=failed) as run:
            with self.assertRaises(LazyUpgradeError):
                run_install(Path("/repo"))
        run.assert_called_once_with(["pnpm", "install"], cwd=Path("/repo"), check=False)


if __name__ == "__main__":
    unittest.main()
