"""Summary shown after a selection session, before manifests are rewritten."""

from __future__ import annotations

from ..model import SELECTION_RANGE, PackageUpgradeChoice
from ..ui_theme import DEFAULT_THEME, UITheme, styled

CONFIRM_HINT = "Press Enter/Y to proceed, N to go back to selection, ESC to cancel"
EMPTY_MESSAGE = "No packages selected for upgrade."


def group_choices(choices: list[PackageUpgradeChoice]) -> dict[str, list[PackageUpgradeChoice]]:
    """Group per-manifest choices by package name, keeping first-seen order."""
    grouped: dict[str, list[PackageUpgradeChoice]] = {}
    for choice in choices:
        grouped.setdefault(choice.name, []).append(choice)
    return grouped


def render_confirmation(
    choices: list[PackageUpgradeChoice],
    theme: UITheme = DEFAULT_THEME,
) -> list[str]:
    if not choices:
        return [styled(theme.warning, EMPTY_MESSAGE, theme)]

    grouped = group_choices(choices)
    lines = ["", styled(theme.title, f"🚀 Ready to upgrade {len(grouped)} package(s):", theme)]
    for name, package_choices in grouped.items():
        first = package_choices[0]
        version_style = theme.version_range if first.upgrade_type == SELECTION_RANGE else theme.version_latest
        line = (
            f"  • {styled(theme.name_current, name, theme)} → "
            f"{styled(version_style, first.target_version, theme)} "
            f"{styled(theme.status, f'({first.upgrade_type})', theme)}"
        )
        if len(package_choices) > 1:
            line += styled(theme.status, f" ({len(package_choices)} instances)", theme)
        lines.append(line)
    lines.append(styled(theme.status, CONFIRM_HINT, theme))
    return lines


__all__ = ["CONFIRM_HINT", "group_choices", "render_confirmation"]
