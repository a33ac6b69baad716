"""Exception hierarchy shared by the CLI, collaborators, and the runtime."""

from __future__ import annotations


class LazyUpgradeError(Exception):
    """Base class for errors the CLI reports as a one-line message."""


class ManifestError(LazyUpgradeError):
    """A ``package.json`` could not be read, parsed, or written."""


class RegistryError(LazyUpgradeError):
    """The package registry could not be reached at all."""


class TerminalUnavailableError(LazyUpgradeError):
    """stdin/stdout is not an interactive terminal that accepts raw mode."""


__all__ = [
    "LazyUpgradeError",
    "ManifestError",
    "RegistryError",
    "TerminalUnavailableError",
]
