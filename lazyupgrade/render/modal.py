"""Centered detail box for one package, plus its loading placeholder."""

from __future__ import annotations

from ..ansi import clip_ansi_line, pad_visible, wrap_words
from ..model import SELECTION_LATEST, SELECTION_RANGE, PackageSelectionState
from ..ui_theme import DEFAULT_THEME, UITheme, styled

MAX_MODAL_WIDTH = 120
MIN_MODAL_WIDTH = 20
LOADING_MESSAGE = "⏳ Loading package info..."
UNKNOWN_FIELD = "Unknown"


def format_downloads(count: int | None) -> str:
    """Human-abbreviate a download count: ``1234 -> 1.2K``, ``3400000 -> 3.4M``."""
    if not count:
        return "N/A"
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def modal_width(terminal_width: int) -> int:
    return max(MIN_MODAL_WIDTH, min(terminal_width - 6, MAX_MODAL_WIDTH))


def modal_target_version(state: PackageSelectionState) -> str:
    """Version the modal advertises as the upgrade target."""
    if state.selected_option == SELECTION_RANGE:
        return state.range_version
    if state.selected_option == SELECTION_LATEST:
        return state.latest_version
    return state.latest_version if state.has_major_update else state.range_version


class _Box:
    """Accumulates bordered rows of a fixed outer width at a fixed left margin."""

    def __init__(self, width: int, margin: int, theme: UITheme) -> None:
        self.width = width
        self.margin = " " * max(0, margin)
        self.theme = theme
        self.lines: list[str] = []

    def _border(self, text: str) -> str:
        return styled(self.theme.modal_border, text, self.theme)

    def rule(self, left: str, right: str) -> None:
        self.lines.append(self.margin + self._border(left + "─" * (self.width - 2) + right))

    def row(self, content: str) -> None:
        inner = self.width - 2
        body = pad_visible(clip_ansi_line(" " + content, inner), inner)
        self.lines.append(self.margin + self._border("│") + body + self._border("│"))


def _vertical_padding(rows: int) -> list[str]:
    return [""] * rows


def render_package_info_loading(
    state: PackageSelectionState,
    terminal_width: int = 80,
    terminal_height: int = 24,
    theme: UITheme = DEFAULT_THEME,
) -> list[str]:
    width = modal_width(terminal_width)
    box = _Box(width, (terminal_width - width) // 2, theme)
    box.rule("╭", "╮")
    box.row(styled(theme.modal_loading, LOADING_MESSAGE, theme))
    box.row(state.name)
    box.rule("╰", "╯")
    return _vertical_padding(max(1, (terminal_height - 10) // 2)) + box.lines


def render_package_info_modal(
    state: PackageSelectionState,
    terminal_width: int = 80,
    terminal_height: int = 24,
    theme: UITheme = DEFAULT_THEME,
) -> list[str]:
    """Render the full detail box for ``state``.

    Optional sections (downloads, description, changelog, homepage) are
    omitted when the corresponding field is unknown. URLs are truncated so the
    box never widens beyond ``min(terminal_width - 6, 120)`` columns.
    """
    width = modal_width(terminal_width)
    url_limit = max(1, width - 20)
    box = _Box(width, (terminal_width - width) // 2, theme)

    box.rule("╭", "╮")
    box.row(styled(theme.modal_title, f"ℹ️  {state.name}", theme))
    author = state.author or UNKNOWN_FIELD
    license_name = state.license or UNKNOWN_FIELD
    box.row(styled(theme.modal_dim, f"{author} • {license_name}", theme))
    box.rule("├", "┤")

    current = styled(theme.version_range, state.current_specifier, theme)
    target = styled(theme.dot_selected, modal_target_version(state), theme)
    box.row(f"Current: {current} → Target: {target}")

    if state.weekly_downloads is not None:
        box.row(styled(theme.modal_accent, f"📊 {format_downloads(state.weekly_downloads)} downloads/week", theme))

    if state.description:
        box.rule("├", "┤")
        for line in wrap_words(state.description, width - 4):
            box.row(line)

    if state.release_notes_url:
        box.rule("├", "┤")
        url = styled(theme.modal_link, state.release_notes_url[:url_limit], theme)
        box.row(f" Changelog: {url}")

    if state.homepage:
        box.rule("├", "┤")
        url = styled(theme.modal_link, state.homepage[:url_limit], theme)
        box.row(f" Homepage: {url}")

    box.rule("╰", "╯")
    return _vertical_padding(max(1, (terminal_height - 20) // 2)) + box.lines


__all__ = [
    "format_downloads",
    "modal_target_version",
    "modal_width",
    "render_package_info_loading",
    "render_package_info_modal",
]
