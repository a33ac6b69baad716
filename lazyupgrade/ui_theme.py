"""UI theme definitions and selection helpers.

Themes are ANSI palettes for the selection list, detail modal, and
confirmation summary. The plain theme carries empty strings so frames
rendered with it contain no escape sequences at all.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    title: str
    label: str
    legend_key: str
    legend_text: str
    status: str
    warning: str
    cursor: str
    name_default: str
    name_current: str
    scope: str
    filler_default: str
    filler_current: str
    dot_selected: str
    dot_unselected: str
    version_current: str
    version_range: str
    version_latest: str
    section_main: str
    section_peer: str
    section_optional: str
    modal_border: str
    modal_title: str
    modal_dim: str
    modal_accent: str
    modal_link: str
    modal_loading: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    title="\033[1;35m",
    label="\033[1;36m",
    legend_key="\033[1;37m",
    legend_text="\033[90m",
    status="\033[90m",
    warning="\033[33m",
    cursor="\033[32m",
    name_default="\033[37m",
    name_current="\033[36m",
    scope="\033[1;37m",
    filler_default="\033[90m",
    filler_current="\033[37m",
    dot_selected="\033[32m",
    dot_unselected="\033[90m",
    version_current="\033[37m",
    version_range="\033[33m",
    version_latest="\033[31m",
    section_main="\033[1;36m",
    section_peer="\033[1;35m",
    section_optional="\033[1;33m",
    modal_border="\033[90m",
    modal_title="\033[1;36m",
    modal_dim="\033[90m",
    modal_accent="\033[34m",
    modal_link="\033[4;34m",
    modal_loading="\033[36m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    title="\033[1;38;5;45m",
    label="\033[1;38;5;81m",
    legend_key="\033[38;5;153m",
    legend_text="\033[2;38;5;110m",
    status="\033[2;38;5;110m",
    warning="\033[38;5;215m",
    cursor="\033[38;5;84m",
    name_default="\033[38;5;252m",
    name_current="\033[1;38;5;45m",
    scope="\033[1;38;5;117m",
    filler_default="\033[2;38;5;31m",
    filler_current="\033[38;5;117m",
    dot_selected="\033[38;5;84m",
    dot_unselected="\033[2;38;5;110m",
    version_current="\033[38;5;252m",
    version_range="\033[38;5;221m",
    version_latest="\033[38;5;209m",
    section_main="\033[1;38;5;45m",
    section_peer="\033[1;38;5;141m",
    section_optional="\033[1;38;5;221m",
    modal_border="\033[38;5;39m",
    modal_title="\033[1;38;5;39m",
    modal_dim="\033[2;38;5;110m",
    modal_accent="\033[38;5;117m",
    modal_link="\033[4;38;5;117m",
    modal_loading="\033[38;5;45m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    title="",
    label="",
    legend_key="",
    legend_text="",
    status="",
    warning="",
    cursor="",
    name_default="",
    name_current="",
    scope="",
    filler_default="",
    filler_current="",
    dot_selected="",
    dot_unselected="",
    version_current="",
    version_range="",
    version_latest="",
    section_main="",
    section_peer="",
    section_optional="",
    modal_border="",
    modal_title="",
    modal_dim="",
    modal_accent="",
    modal_link="",
    modal_loading="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def styled(style: str, text: str, theme: UITheme) -> str:
    """Wrap ``text`` in ``style`` and the theme reset, or return it bare."""
    if not style or not text:
        return text
    return f"{style}{text}{theme.reset}"


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "styled",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
