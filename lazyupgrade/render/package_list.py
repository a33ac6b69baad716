"""Main selection frame: header block, package table rows, section rows.

Everything here is a pure function of its arguments. Identical inputs give
byte-identical lines, which the runtime relies on to skip redundant repaints.
"""

from __future__ import annotations

from ..ansi import clip_ansi_line, visible_width
from ..model import (
    SECTION_OPTIONAL,
    SECTION_PEER,
    SELECTION_LATEST,
    SELECTION_NONE,
    SELECTION_RANGE,
    HeaderItem,
    PackageItem,
    PackageSelectionState,
    RenderableItem,
    SpacerItem,
)
from ..ui_theme import DEFAULT_THEME, UITheme, styled
from ..versions import apply_version_prefix

APP_TITLE = "🚀 lazyupgrade"
CURSOR_MARKER = "❯ "
DOT_SELECTED = "●"
DOT_UNSELECTED = "○"
FILLER = "-"

NAME_COLUMN_WIDTH = 38
MIN_NAME_COLUMN_WIDTH = 12
VERSION_COLUMN_WIDTH = 16
COLUMN_GAP = "   "


def name_column_width(width: int | None) -> int:
    """Name column that leaves room for all three version slots within ``width - 1`` columns."""
    if width is None:
        return NAME_COLUMN_WIDTH
    fixed = len(CURSOR_MARKER) + 3 * len(COLUMN_GAP) + 3 * VERSION_COLUMN_WIDTH + 1
    return max(MIN_NAME_COLUMN_WIDTH, min(NAME_COLUMN_WIDTH, width - fixed))


def _dot(selected: bool, theme: UITheme) -> str:
    if selected:
        return styled(theme.dot_selected, DOT_SELECTED, theme)
    return styled(theme.dot_unselected, DOT_UNSELECTED, theme)


def _package_name(name: str, is_current_row: bool, theme: UITheme) -> str:
    name_style = theme.name_current if is_current_row else theme.name_default
    if name.startswith("@") and "/" in name:
        scope, rest = name.split("/", 1)
        return styled(theme.scope, scope, theme) + styled(name_style, "/" + rest, theme)
    return styled(name_style, name, theme)


def _version_slot(
    available: bool,
    selected: bool,
    version_text: str,
    version_style: str,
    filler_style: str,
    theme: UITheme,
) -> str:
    """One fixed-width ``dot version ----`` column, or blank filler when unavailable."""
    if not available:
        return " " * VERSION_COLUMN_WIDTH
    section = f"{_dot(selected, theme)} {styled(version_style, version_text, theme)}"
    padding = max(0, VERSION_COLUMN_WIDTH - visible_width(section) - 1)
    return f"{section} {styled(filler_style, FILLER * padding, theme)}"


def render_package_line(
    state: PackageSelectionState,
    is_current_row: bool,
    theme: UITheme = DEFAULT_THEME,
    name_width: int = NAME_COLUMN_WIDTH,
) -> str:
    """Render one column-aligned package row.

    Names longer than ``name_width`` are clipped so the version slots stay aligned.
    """
    prefix = styled(theme.cursor, CURSOR_MARKER, theme) if is_current_row else "  "
    filler_style = theme.filler_current if is_current_row else theme.filler_default

    name = _package_name(clip_ansi_line(state.name, name_width - 1), is_current_row, theme)
    name_padding = max(0, name_width - visible_width(name) - 1)
    name_section = f"{name} {styled(filler_style, FILLER * name_padding, theme)}"

    current_section = _version_slot(
        True,
        state.selected_option == SELECTION_NONE,
        state.current_specifier,
        theme.version_current,
        filler_style,
        theme,
    )
    range_section = _version_slot(
        state.has_range_update,
        state.selected_option == SELECTION_RANGE,
        apply_version_prefix(state.current_specifier, state.range_version),
        theme.version_range,
        filler_style,
        theme,
    )
    latest_section = _version_slot(
        state.has_major_update,
        state.selected_option == SELECTION_LATEST,
        apply_version_prefix(state.current_specifier, state.latest_version),
        theme.version_latest,
        filler_style,
        theme,
    )
    return COLUMN_GAP.join((prefix + name_section, current_section, range_section, latest_section))


def render_section_header(title: str, section: str, theme: UITheme = DEFAULT_THEME) -> str:
    if section == SECTION_PEER:
        style = theme.section_peer
    elif section == SECTION_OPTIONAL:
        style = theme.section_optional
    else:
        style = theme.section_main
    return "  " + styled(style, title, theme)


def render_spacer() -> str:
    return ""


def _legend_line(theme: UITheme) -> str:
    entries = (
        ("↑/↓", "Move"),
        ("←/→", "Select versions"),
        ("I", "Info"),
        ("M", "Select all minor"),
        ("L", "Select all"),
        ("U", "Unselect all"),
    )
    parts = [
        styled(theme.legend_key, f"{key} ", theme) + styled(theme.legend_text, text, theme)
        for key, text in entries
    ]
    return "  " + "  ".join(parts)


def _status_line(total_packages: int, total_visual: int, scroll_offset: int, capacity: int, theme: UITheme) -> str:
    if total_visual > capacity:
        first = scroll_offset + 1
        last = min(scroll_offset + capacity, total_visual)
        shown = f"Showing {first}-{last} of {total_packages} packages"
    else:
        shown = f"Showing all {total_packages} packages"
    return "  " + styled(theme.status, f"{shown}  Enter Confirm  Esc Cancel", theme)


def render_interface(
    states: list[PackageSelectionState],
    current_row: int,
    scroll_offset: int,
    max_visible_items: int,
    renderable_items: list[RenderableItem] | None = None,
    dependency_kind_label: str | None = None,
    status_message: str = "",
    theme: UITheme = DEFAULT_THEME,
    width: int | None = None,
) -> list[str]:
    """Produce one full frame of the selection list.

    ``renderable_items`` switches to sectioned mode; when it is empty or
    ``None`` the visible window is taken straight from ``states``. ``width``
    clips every line so rows never wrap in a narrow terminal.
    """
    output: list[str] = ["  " + styled(theme.title, APP_TITLE, theme), ""]
    if dependency_kind_label:
        output.append("  " + styled(theme.label, dependency_kind_label, theme))
        output.append("")
    output.append(_legend_line(theme))

    total_visual = len(renderable_items) if renderable_items else len(states)
    output.append(_status_line(len(states), total_visual, scroll_offset, max_visible_items, theme))
    output.append("")

    name_width = name_column_width(width)
    window_end = min(scroll_offset + max_visible_items, total_visual)
    if renderable_items:
        for item in renderable_items[scroll_offset:window_end]:
            if isinstance(item, HeaderItem):
                output.append(render_section_header(item.title, item.section, theme))
            elif isinstance(item, SpacerItem):
                output.append(render_spacer())
            elif isinstance(item, PackageItem):
                output.append(render_package_line(item.state, item.index == current_row, theme, name_width))
    else:
        for index in range(scroll_offset, window_end):
            output.append(render_package_line(states[index], index == current_row, theme, name_width))

    if status_message:
        output.append("  " + styled(theme.warning, status_message, theme))

    if width is not None:
        output = [clip_ansi_line(line, max(1, width - 1)) for line in output]
    return output


__all__ = [
    "APP_TITLE",
    "DOT_SELECTED",
    "DOT_UNSELECTED",
    "NAME_COLUMN_WIDTH",
    "name_column_width",
    "VERSION_COLUMN_WIDTH",
    "render_package_line",
    "render_section_header",
    "render_spacer",
    "render_interface",
]
