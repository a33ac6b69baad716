"""Version-string helpers built on ``semantic_version``.

Specifiers are the raw strings written in a manifest (``^4.1.0``, ``~2.0``,
``>=1.2.3``). Bare versions are plain ``X.Y.Z`` strings. Helpers here never
raise on malformed input; they report "unknown" through ``None``.
"""

from __future__ import annotations

import re

import semantic_version

_PREFIX_RE = re.compile(r"^([^\d]+)")
_COERCE_RE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")
PLAIN_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+$")


def apply_version_prefix(original_specifier: str, target_version: str) -> str:
    """Reapply the range prefix of ``original_specifier`` to ``target_version``.

    ``apply_version_prefix("^4.1.0", "5.0.0") == "^5.0.0"``; a bare
    specifier yields the bare target.
    """
    match = _PREFIX_RE.match(original_specifier)
    prefix = match.group(1) if match else ""
    return prefix + target_version


def coerce_version(text: str | None) -> semantic_version.Version | None:
    """Extract the first ``major[.minor[.patch]]`` run from ``text``.

    Missing components default to zero, mirroring npm's ``semver.coerce``.
    """
    if not text:
        return None
    match = _COERCE_RE.search(text)
    if match is None:
        return None
    major, minor, patch = (int(part) if part else 0 for part in match.groups())
    return semantic_version.Version(major=major, minor=minor, patch=patch)


def coerce_version_string(text: str) -> str:
    """Return the coerced bare version, or ``text`` unchanged when unparsable."""
    version = coerce_version(text)
    return str(version) if version is not None else text


def parse_version(text: str) -> semantic_version.Version | None:
    try:
        return semantic_version.Version(text)
    except ValueError:
        return None


def satisfies(version: str, specifier: str) -> bool:
    """Return whether ``version`` matches the npm range ``specifier``."""
    parsed = parse_version(version)
    if parsed is None:
        return False
    try:
        return semantic_version.NpmSpec(specifier).match(parsed)
    except ValueError:
        return False


def highest_version(versions: list[str]) -> str | None:
    best: semantic_version.Version | None = None
    best_text: str | None = None
    for text in versions:
        parsed = parse_version(text)
        if parsed is None:
            continue
        if best is None or parsed > best:
            best = parsed
            best_text = text
    return best_text


def find_closest_minor_version(specifier: str, versions: list[str]) -> str | None:
    """Pick the range-update target for ``specifier`` among ``versions``.

    Prefers the highest minor line above the installed one within the same
    major (taking that line's highest patch). Falls back to the highest patch
    above installed that still satisfies ``specifier``. Returns ``None`` when
    neither exists.
    """
    installed = coerce_version(specifier)
    if installed is None:
        return None

    best: semantic_version.Version | None = None
    best_text: str | None = None
    for text in versions:
        parsed = parse_version(text)
        if parsed is None or parsed.prerelease:
            continue
        if parsed.major != installed.major or parsed.minor <= installed.minor:
            continue
        if best is None or (parsed.minor, parsed.patch) > (best.minor, best.patch):
            best = parsed
            best_text = text
    if best_text is not None:
        return best_text

    for text in versions:
        parsed = parse_version(text)
        if parsed is None or parsed.prerelease or parsed <= installed:
            continue
        if not satisfies(text, specifier):
            continue
        if best is None or parsed > best:
            best = parsed
            best_text = text
    return best_text


def is_version_outdated(current: str, latest: str) -> bool:
    """Return whether ``latest`` is strictly newer than ``current``."""
    current_version = coerce_version(current)
    latest_version = coerce_version(latest)
    if current_version is None or latest_version is None:
        return False
    return latest_version > current_version


__all__ = [
    "PLAIN_VERSION_RE",
    "apply_version_prefix",
    "coerce_version",
    "coerce_version_string",
    "parse_version",
    "satisfies",
    "highest_version",
    "find_closest_minor_version",
    "is_version_outdated",
]
