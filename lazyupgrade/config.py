"""Persistent JSON config helpers.

Stores the UI theme, the header/footer line budget, default exclude
patterns, and which optional dependency kinds to include. A malformed or
missing config falls back to defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .state import DEFAULT_CHROME_LINES
from .ui_theme import normalize_theme_name

APP_NAME = "lazyupgrade"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
MIN_CHROME_LINES = 4


@dataclass(frozen=True)
class UpgradeConfig:
    theme: str = "default"
    chrome_lines: int = DEFAULT_CHROME_LINES
    exclude: tuple[str, ...] = ()
    include_peer_deps: bool = False
    include_optional_deps: bool = False


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON; write failures are ignored."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _load_bool(data: dict[str, object], key: str) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else False


def _load_chrome_lines(data: dict[str, object]) -> int:
    value = data.get("chrome_lines")
    if isinstance(value, bool) or not isinstance(value, int) or value < MIN_CHROME_LINES:
        return DEFAULT_CHROME_LINES
    return value


def _load_exclude(data: dict[str, object]) -> tuple[str, ...]:
    value = data.get("exclude")
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str) and item.strip())


def load_upgrade_config() -> UpgradeConfig:
    """Return validated settings; each invalid key falls back on its own."""
    data = load_config()
    theme = data.get("theme")
    return UpgradeConfig(
        theme=normalize_theme_name(theme if isinstance(theme, str) else None),
        chrome_lines=_load_chrome_lines(data),
        exclude=_load_exclude(data),
        include_peer_deps=_load_bool(data, "include_peer_deps"),
        include_optional_deps=_load_bool(data, "include_optional_deps"),
    )


def save_theme(name: str) -> None:
    """Remember ``name`` as the default theme for later runs."""
    config = load_config()
    config["theme"] = normalize_theme_name(name)
    save_config(config)


__all__ = [
    "CONFIG_PATH",
    "UpgradeConfig",
    "load_config",
    "save_config",
    "load_upgrade_config",
    "save_theme",
]
