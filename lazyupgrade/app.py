"""End-to-end upgrade flow: discover, analyze, select, confirm, rewrite, install."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .detector import detect_packages
from .errors import LazyUpgradeError, ManifestError, RegistryError
from .manifests import DEFAULT_KINDS, collect_dependencies, find_manifests, write_upgrades
from .model import (
    OPTIONAL_DEPENDENCIES,
    PEER_DEPENDENCIES,
    PackageUpgradeChoice,
    build_renderable_items,
    build_selection_states,
    remember_selections,
    selections_to_choices,
)
from .registry import UNKNOWN_VERSION, MetadataFetcher, ProgressCallback, RegistryClient
from .runtime import run_confirmation_prompt, run_selection_session
from .state import DEFAULT_CHROME_LINES
from .ui_theme import DEFAULT_THEME, UITheme

logger = logging.getLogger(__name__)

INSTALL_COMMAND: tuple[str, ...] = ("pnpm", "install")
PNPM_MISSING_MESSAGE = "pnpm is not installed. Install it first: npm install -g pnpm"


@dataclass(frozen=True)
class UpgradeOptions:
    root: Path
    exclude: tuple[str, ...] = ()
    include_peer_deps: bool = False
    include_optional_deps: bool = False
    theme: UITheme = field(default=DEFAULT_THEME, repr=False)
    chrome_lines: int = DEFAULT_CHROME_LINES
    install: bool = True


def dependency_kinds(options: UpgradeOptions) -> tuple[str, ...]:
    kinds = list(DEFAULT_KINDS)
    if options.include_optional_deps:
        kinds.append(OPTIONAL_DEPENDENCIES)
    if options.include_peer_deps:
        kinds.append(PEER_DEPENDENCIES)
    return tuple(kinds)


def kind_label(kinds: tuple[str, ...]) -> str:
    return "Showing: " + ", ".join(kinds)


def check_install_command() -> None:
    """Fail before anything is touched when the reinstall binary is not on ``PATH``."""
    if shutil.which(INSTALL_COMMAND[0]) is None:
        raise LazyUpgradeError(PNPM_MISSING_MESSAGE)


def print_fetch_progress(name: str, done: int, total: int) -> None:
    """Overwrite one stdout line with the version-fetch counter."""
    sys.stdout.write(f"\r🔍 Fetched {done}/{total} packages")
    if done == total:
        sys.stdout.write("\n")
    sys.stdout.flush()


def run_install(root: Path) -> None:
    """Run the reinstall command in ``root``; a missing or failing binary is an error."""
    logger.debug("running %s in %s", " ".join(INSTALL_COMMAND), root)
    try:
        completed = subprocess.run(list(INSTALL_COMMAND), cwd=root, check=False)
    except FileNotFoundError as exc:
        raise LazyUpgradeError(PNPM_MISSING_MESSAGE) from exc
    if completed.returncode != 0:
        raise LazyUpgradeError(f"{' '.join(INSTALL_COMMAND)} failed with exit code {completed.returncode}")


def run_upgrade(
    options: UpgradeOptions,
    *,
    registry: RegistryClient | None = None,
    metadata: MetadataFetcher | None = None,
    select: Callable[..., list] = run_selection_session,
    confirm: Callable[..., bool | None] = run_confirmation_prompt,
    install: Callable[[Path], None] = run_install,
    preflight: Callable[[], None] = check_install_command,
    progress: ProgressCallback | None = print_fetch_progress,
    output: Callable[[str], None] = print,
) -> list[PackageUpgradeChoice]:
    """Run the whole interactive upgrade and return the choices that were applied."""
    if options.install:
        preflight()
    root = options.root.resolve()
    manifests = find_manifests(root, options.exclude)
    if not manifests:
        raise ManifestError(f"No package.json found in {root}")
    output(f"📦 Found {len(manifests)} package.json files")

    kinds = dependency_kinds(options)
    deps = collect_dependencies(manifests, kinds)
    names = sorted({dep.name for dep in deps})
    registry = registry if registry is not None else RegistryClient()
    output(f"🔍 Fetching version data for {len(names)} packages...")
    version_data = registry.fetch_all(names, on_progress=progress)
    if names and all(latest == UNKNOWN_VERSION for latest, _ in version_data.values()):
        raise RegistryError("Could not fetch version data from the npm registry")

    packages = detect_packages(deps, version_data)
    if not any(pkg.is_outdated for pkg in packages):
        output("✅ All packages are up to date!")
        return []

    metadata = metadata if metadata is not None else MetadataFetcher(session=registry.session)
    previous: dict[str, str] | None = None
    while True:
        states = build_selection_states(packages, previous)
        items = build_renderable_items(states)
        states = select(
            states,
            renderable_items=items,
            label=None if items else kind_label(kinds),
            theme=options.theme,
            metadata_fetcher=metadata.fetch,
            chrome_lines=options.chrome_lines,
        )
        choices = selections_to_choices(states)
        if not choices:
            output("No packages selected.")
            return []

        previous = remember_selections(choices)
        decision = confirm(choices, theme=options.theme)
        if decision is None:
            continue
        if not decision:
            output("Upgrade cancelled.")
            return []
        break

    for path in write_upgrades(choices, kinds):
        output(f"✏️  Updated {path.relative_to(root) if path.is_relative_to(root) else path}")
    if options.install:
        install(root)
    return choices


__all__ = [
    "INSTALL_COMMAND",
    "check_install_command",
    "print_fetch_progress",
    "UpgradeOptions",
    "dependency_kinds",
    "kind_label",
    "run_install",
    "run_upgrade",
]
