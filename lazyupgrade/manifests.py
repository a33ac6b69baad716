"""``package.json`` discovery, dependency collection, and in-place rewrites."""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .errors import ManifestError
from .model import DEPENDENCIES, DEV_DEPENDENCIES, PackageUpgradeChoice

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
MAX_DEPTH = 10
SKIP_DIRS = frozenset(
    {
        "node_modules",
        "dist",
        "build",
        "coverage",
        "out",
        "lib",
        "es",
        "esm",
        "cjs",
    }
)
WORKSPACE_PREFIXES = ("file:", "link:", "git+", "github:", "gitlab:", "bitbucket:")
DEFAULT_KINDS: tuple[str, ...] = (DEPENDENCIES, DEV_DEPENDENCIES)


@dataclass(frozen=True)
class DependencySpec:
    """One ``name: specifier`` entry from one dependency section of one manifest."""

    name: str
    specifier: str
    kind: str
    manifest_path: Path


def compile_excludes(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        pattern = pattern.strip()
        if not pattern:
            continue
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            raise ManifestError(f"Invalid exclude pattern {pattern!r}: {exc}") from exc
    return compiled


def find_manifests(root: Path, exclude_patterns: Iterable[str] = (), max_depth: int = MAX_DEPTH) -> list[Path]:
    """Return every ``package.json`` below ``root``, sorted.

    Hidden and build/dependency directories are skipped, as is any path
    whose root-relative form matches an exclude regex. Each real directory is
    visited once, so symlink cycles terminate.
    """
    root = root.resolve()
    excludes = compile_excludes(exclude_patterns)
    visited: set[Path] = set()
    found: list[Path] = []

    def is_excluded(path: Path) -> bool:
        relative = path.relative_to(root).as_posix()
        return any(regex.search(relative) for regex in excludes)

    def walk(directory: Path, depth: int) -> None:
        if depth > max_depth:
            return
        try:
            real = directory.resolve()
        except OSError:
            return
        if real in visited:
            return
        visited.add(real)

        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as exc:
            logger.debug("cannot list %s: %s", directory, exc)
            return

        for entry in entries:
            path = directory / entry.name
            if is_excluded(path):
                continue
            try:
                is_dir = entry.is_dir()
                is_file = entry.is_file()
            except OSError:
                continue
            if is_dir:
                if entry.name.startswith(".") or entry.name in SKIP_DIRS:
                    continue
                walk(path, depth + 1)
            elif is_file and entry.name == MANIFEST_NAME:
                found.append(path)

    walk(root, 0)
    return sorted(found)


def read_manifest(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ManifestError(f"Failed to read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"Failed to read {path}: top-level value is not an object")
    return data


def is_workspace_reference(specifier: str) -> bool:
    """Return whether ``specifier`` points at a local/VCS package rather than a registry range."""
    return "workspace:" in specifier or specifier == "*" or specifier.startswith(WORKSPACE_PREFIXES)


def collect_dependencies(paths: Iterable[Path], kinds: Iterable[str] = DEFAULT_KINDS) -> list[DependencySpec]:
    """Collect registry dependencies of the requested kinds; unreadable manifests are skipped."""
    kinds = tuple(kinds)
    collected: list[DependencySpec] = []
    for path in paths:
        try:
            manifest = read_manifest(path)
        except ManifestError as exc:
            logger.warning("%s", exc)
            continue
        for kind in kinds:
            section = manifest.get(kind)
            if not isinstance(section, dict):
                continue
            for name, specifier in section.items():
                if not isinstance(specifier, str) or is_workspace_reference(specifier):
                    continue
                collected.append(DependencySpec(name=name, specifier=specifier, kind=kind, manifest_path=path))
    return collected


def write_upgrades(choices: Iterable[PackageUpgradeChoice], kinds: Iterable[str] = DEFAULT_KINDS) -> list[Path]:
    """Apply choices to their manifests and return the files that changed.

    Each manifest is read once and written once. Key order is preserved and
    output uses two-space indentation with a trailing newline.
    """
    kinds = tuple(kinds)
    by_path: dict[Path, list[PackageUpgradeChoice]] = {}
    for choice in choices:
        by_path.setdefault(choice.manifest_path, []).append(choice)

    changed: list[Path] = []
    for path, path_choices in by_path.items():
        manifest = read_manifest(path)
        modified = False
        for choice in path_choices:
            for kind in kinds:
                section = manifest.get(kind)
                if isinstance(section, dict) and section.get(choice.name) == choice.current_specifier:
                    section[choice.name] = choice.target_version
                    modified = True
        if not modified:
            continue
        try:
            path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ManifestError(f"Failed to write {path}: {exc}") from exc
        changed.append(path)
    return changed


__all__ = [
    "DependencySpec",
    "MANIFEST_NAME",
    "collect_dependencies",
    "compile_excludes",
    "find_manifests",
    "is_workspace_reference",
    "read_manifest",
    "write_upgrades",
]
