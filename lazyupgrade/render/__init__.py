"""Pure frame renderers for the selection list, detail modal, and confirmation summary.

Each renderer returns a list of display lines and never touches the terminal.
"""

from __future__ import annotations

from .confirmation import CONFIRM_HINT, group_choices, render_confirmation
from .modal import (
    format_downloads,
    modal_target_version,
    render_package_info_loading,
    render_package_info_modal,
)
from .package_list import (
    render_interface,
    render_package_line,
    render_section_header,
    render_spacer,
)

__all__ = [
    "CONFIRM_HINT",
    "format_downloads",
    "group_choices",
    "modal_target_version",
    "render_confirmation",
    "render_interface",
    "render_package_info_loading",
    "render_package_info_modal",
    "render_package_line",
    "render_section_header",
    "render_spacer",
]
