"""Selection-state records and the conversions around an interactive session.

``PackageSelectionState`` is the per-row record the session mutates.
Renderable items are the display-only rows (section headers, spacers,
package references) derived once per session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .versions import apply_version_prefix, coerce_version_string

SELECTION_NONE = "none"
SELECTION_RANGE = "range"
SELECTION_LATEST = "latest"
SELECTION_OPTIONS: tuple[str, ...] = (SELECTION_NONE, SELECTION_RANGE, SELECTION_LATEST)

DEPENDENCIES = "dependencies"
DEV_DEPENDENCIES = "devDependencies"
OPTIONAL_DEPENDENCIES = "optionalDependencies"
PEER_DEPENDENCIES = "peerDependencies"

SECTION_MAIN = "main"
SECTION_PEER = "peer"
SECTION_OPTIONAL = "optional"
SECTION_TITLES: dict[str, str] = {
    SECTION_MAIN: "Dependencies",
    SECTION_PEER: "Peer Dependencies",
    SECTION_OPTIONAL: "Optional Dependencies",
}


def section_for_kind(kind: str) -> str:
    if kind == PEER_DEPENDENCIES:
        return SECTION_PEER
    if kind == OPTIONAL_DEPENDENCIES:
        return SECTION_OPTIONAL
    return SECTION_MAIN


def selection_key(name: str, specifier: str) -> str:
    """Key used to remember a choice across sessions: ``name@specifier``."""
    return f"{name}@{specifier}"


@dataclass(frozen=True)
class PackageMetadata:
    """Optional registry details shown in the detail modal."""

    description: str | None = None
    homepage: str | None = None
    license: str | None = None
    author: str | None = None
    weekly_downloads: int | None = None
    release_notes_url: str | None = None


@dataclass(frozen=True)
class PackageInfo:
    """One dependency entry of one manifest, with resolved version data."""

    name: str
    current_specifier: str
    range_version: str
    latest_version: str
    kind: str
    manifest_path: Path
    is_outdated: bool
    has_range_update: bool
    has_major_update: bool


@dataclass
class PackageSelectionState:
    """Mutable per-row record for one unique ``name@specifier`` pair."""

    name: str
    manifest_paths: list[Path]
    current_specifier: str
    current_version: str
    range_version: str
    latest_version: str
    selected_option: str = SELECTION_NONE
    has_range_update: bool = False
    has_major_update: bool = False
    kind: str = DEPENDENCIES
    description: str | None = None
    homepage: str | None = None
    license: str | None = None
    author: str | None = None
    weekly_downloads: int | None = None
    release_notes_url: str | None = None
    metadata_loaded: bool = False

    @property
    def key(self) -> str:
        return selection_key(self.name, self.current_specifier)

    def is_option_available(self, option: str) -> bool:
        if option == SELECTION_RANGE:
            return self.has_range_update
        if option == SELECTION_LATEST:
            return self.has_major_update
        return option == SELECTION_NONE

    def target_version(self, option: str | None = None) -> str | None:
        """Bare version the given (or selected) option upgrades to."""
        option = self.selected_option if option is None else option
        if option == SELECTION_RANGE:
            return self.range_version
        if option == SELECTION_LATEST:
            return self.latest_version
        return None

    def apply_metadata(self, metadata: PackageMetadata | None) -> None:
        """Fill lazily-loaded detail fields; ``None`` means nothing is known."""
        self.metadata_loaded = True
        if metadata is None:
            return
        self.description = metadata.description
        self.homepage = metadata.homepage
        self.license = metadata.license
        self.author = metadata.author
        self.weekly_downloads = metadata.weekly_downloads
        self.release_notes_url = metadata.release_notes_url


@dataclass(frozen=True)
class PackageUpgradeChoice:
    """One manifest rewrite: ``name`` in ``manifest_path`` becomes ``target_version``."""

    name: str
    manifest_path: Path
    upgrade_type: str
    target_version: str
    current_specifier: str


@dataclass(frozen=True)
class HeaderItem:
    title: str
    section: str


@dataclass(frozen=True)
class SpacerItem:
    pass


@dataclass(frozen=True)
class PackageItem:
    index: int
    state: PackageSelectionState = field(compare=False, repr=False)


RenderableItem = Union[HeaderItem, SpacerItem, PackageItem]


def build_renderable_items(states: list[PackageSelectionState]) -> list[RenderableItem]:
    """Group states into main/peer/optional sections.

    Returns an empty list (flat mode) when fewer than two sections have
    packages. Sections are separated by a spacer before every header but
    the first.
    """
    grouped: dict[str, list[int]] = {SECTION_MAIN: [], SECTION_PEER: [], SECTION_OPTIONAL: []}
    for index, state in enumerate(states):
        grouped[section_for_kind(state.kind)].append(index)

    non_empty = [section for section, indices in grouped.items() if indices]
    if len(non_empty) < 2:
        return []

    items: list[RenderableItem] = []
    for section in non_empty:
        if items:
            items.append(SpacerItem())
        items.append(HeaderItem(title=SECTION_TITLES[section], section=section))
        for index in grouped[section]:
            items.append(PackageItem(index=index, state=states[index]))
    return items


def _sort_key(state: PackageSelectionState) -> tuple[int, int, str]:
    # Section order first so state indices follow the on-screen order, then
    # scoped packages first, then case-insensitive by name.
    section_rank = list(SECTION_TITLES).index(section_for_kind(state.kind))
    return (section_rank, 0 if state.name.startswith("@") else 1, state.name.lower())


def build_selection_states(
    packages: list[PackageInfo],
    previous_selections: dict[str, str] | None = None,
) -> list[PackageSelectionState]:
    """Build one selection state per unique ``name@specifier`` among outdated packages.

    Manifest paths of duplicates are merged in first-seen order. A remembered
    selection is applied only if that option is still available for the row.
    States come out in section order (main, peer, optional), so index order
    matches the on-screen order of a sectioned list.
    """
    by_key: dict[str, PackageSelectionState] = {}
    for pkg in packages:
        if not pkg.is_outdated:
            continue
        key = selection_key(pkg.name, pkg.current_specifier)
        existing = by_key.get(key)
        if existing is not None:
            if pkg.manifest_path not in existing.manifest_paths:
                existing.manifest_paths.append(pkg.manifest_path)
            continue
        by_key[key] = PackageSelectionState(
            name=pkg.name,
            manifest_paths=[pkg.manifest_path],
            current_specifier=pkg.current_specifier,
            current_version=coerce_version_string(pkg.current_specifier),
            range_version=coerce_version_string(pkg.range_version),
            latest_version=coerce_version_string(pkg.latest_version),
            has_range_update=pkg.has_range_update,
            has_major_update=pkg.has_major_update,
            kind=pkg.kind,
        )

    states = sorted(by_key.values(), key=_sort_key)
    remembered = previous_selections or {}
    for state in states:
        option = remembered.get(state.key, SELECTION_NONE)
        if state.is_option_available(option):
            state.selected_option = option
    return states


def selections_to_choices(states: list[PackageSelectionState]) -> list[PackageUpgradeChoice]:
    """Expand every non-``none`` state into one choice per manifest path."""
    choices: list[PackageUpgradeChoice] = []
    for state in states:
        target = state.target_version()
        if target is None:
            continue
        target_with_prefix = apply_version_prefix(state.current_specifier, target)
        for manifest_path in state.manifest_paths:
            choices.append(
                PackageUpgradeChoice(
                    name=state.name,
                    manifest_path=manifest_path,
                    upgrade_type=state.selected_option,
                    target_version=target_with_prefix,
                    current_specifier=state.current_specifier,
                )
            )
    return choices


def remember_selections(choices: list[PackageUpgradeChoice]) -> dict[str, str]:
    """Selection-memory map used to seed the next session."""
    return {selection_key(choice.name, choice.current_specifier): choice.upgrade_type for choice in choices}


__all__ = [
    "SELECTION_NONE",
    "SELECTION_RANGE",
    "SELECTION_LATEST",
    "SELECTION_OPTIONS",
    "DEPENDENCIES",
    "DEV_DEPENDENCIES",
    "OPTIONAL_DEPENDENCIES",
    "PEER_DEPENDENCIES",
    "SECTION_MAIN",
    "SECTION_PEER",
    "SECTION_OPTIONAL",
    "SECTION_TITLES",
    "PackageMetadata",
    "PackageInfo",
    "PackageSelectionState",
    "PackageUpgradeChoice",
    "HeaderItem",
    "SpacerItem",
    "PackageItem",
    "RenderableItem",
    "section_for_kind",
    "selection_key",
    "build_renderable_items",
    "build_selection_states",
    "selections_to_choices",
    "remember_selections",
]
