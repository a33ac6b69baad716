"""Turn collected dependencies plus registry version lists into ``PackageInfo`` rows."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .manifests import DependencySpec
from .model import PackageInfo
from .registry import UNKNOWN_VERSION, VersionData
from .versions import coerce_version, find_closest_minor_version

logger = logging.getLogger(__name__)


def _not_outdated(dep: DependencySpec, latest: str) -> PackageInfo:
    return PackageInfo(
        name=dep.name,
        current_specifier=dep.specifier,
        range_version=dep.specifier,
        latest_version=latest,
        kind=dep.kind,
        manifest_path=dep.manifest_path,
        is_outdated=False,
        has_range_update=False,
        has_major_update=False,
    )


def analyze(dep: DependencySpec, latest: str, versions: list[str]) -> PackageInfo:
    """Compare one dependency against its registry versions.

    A range update exists when the closest in-major upgrade differs from the
    installed version; a major update exists when latest's major is higher.
    Unknown or unparsable versions yield a row that is not outdated.
    """
    installed = coerce_version(dep.specifier)
    latest_parsed = coerce_version(latest) if latest != UNKNOWN_VERSION else None
    if installed is None or latest_parsed is None:
        return _not_outdated(dep, latest)

    closest = find_closest_minor_version(dep.specifier, versions)
    closest_parsed = coerce_version(closest) if closest is not None else None
    has_range_update = closest_parsed is not None and closest_parsed != installed
    has_major_update = latest_parsed.major > installed.major
    return PackageInfo(
        name=dep.name,
        current_specifier=dep.specifier,
        range_version=closest or dep.specifier,
        latest_version=latest,
        kind=dep.kind,
        manifest_path=dep.manifest_path,
        is_outdated=has_range_update or has_major_update,
        has_range_update=has_range_update,
        has_major_update=has_major_update,
    )


def detect_packages(deps: Iterable[DependencySpec], version_data: dict[str, VersionData]) -> list[PackageInfo]:
    """Analyze every dependency; names missing from ``version_data`` are treated as unknown."""
    packages: list[PackageInfo] = []
    for dep in deps:
        latest, versions = version_data.get(dep.name, (UNKNOWN_VERSION, []))
        packages.append(analyze(dep, latest, versions))
    outdated = sum(1 for pkg in packages if pkg.is_outdated)
    logger.debug("analyzed %d dependencies, %d outdated", len(packages), outdated)
    return packages


__all__ = ["analyze", "detect_packages"]
