"""Mutable UI state for one selection session and the operations on it.

``StateManager`` owns the cursor, the scroll window, the viewport capacity,
modal visibility, and per-row selection cycling. It performs no I/O; the
runtime loop reads ``manager.ui`` to render and calls the mutators below in
response to input actions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .model import (
    SELECTION_LATEST,
    SELECTION_NONE,
    SELECTION_RANGE,
    HeaderItem,
    PackageItem,
    PackageSelectionState,
    RenderableItem,
    SpacerItem,
)

DEFAULT_CHROME_LINES = 8
MIN_VISIBLE_ITEMS = 5

DIRECTION_UP = "up"
DIRECTION_DOWN = "down"
DIRECTION_LEFT = "left"
DIRECTION_RIGHT = "right"


def visible_capacity(terminal_height: int, chrome_lines: int = DEFAULT_CHROME_LINES) -> int:
    """Number of body rows that fit below the header and above the footer."""
    return max(MIN_VISIBLE_ITEMS, terminal_height - chrome_lines)


def cycle_option(option: str, has_range_update: bool, has_major_update: bool, direction: str) -> str:
    """Return the option after one left/right step.

    Right walks ``none -> range -> latest -> none`` and left walks the mirror,
    both skipping options whose update flag is false. An option that is not
    available for the row is treated as ``none``.
    """
    if option == SELECTION_RANGE and not has_range_update:
        option = SELECTION_NONE
    elif option == SELECTION_LATEST and not has_major_update:
        option = SELECTION_NONE

    if direction == DIRECTION_LEFT:
        if option == SELECTION_LATEST:
            return SELECTION_RANGE if has_range_update else SELECTION_NONE
        if option == SELECTION_RANGE:
            return SELECTION_NONE
        if has_major_update:
            return SELECTION_LATEST
        if has_range_update:
            return SELECTION_RANGE
        return SELECTION_NONE

    if option == SELECTION_NONE:
        if has_range_update:
            return SELECTION_RANGE
        if has_major_update:
            return SELECTION_LATEST
        return SELECTION_NONE
    if option == SELECTION_RANGE:
        return SELECTION_LATEST if has_major_update else SELECTION_NONE
    return SELECTION_NONE


@dataclass
class UIState:
    current_row: int = 0
    previous_row: int = -1
    scroll_offset: int = 0
    max_visible_items: int = MIN_VISIBLE_ITEMS
    terminal_height: int = 24
    is_initial_render: bool = True
    rendered_lines: list[str] = field(default_factory=list)
    renderable_items: list[RenderableItem] = field(default_factory=list)
    show_info_modal: bool = False
    info_modal_row: int = -1
    is_loading_modal_info: bool = False
    status_message: str = ""
    status_message_until: float = 0.0


class StateManager:
    """Single source of truth for cursor, scroll window, and row selections."""

    def __init__(
        self,
        states: list[PackageSelectionState],
        terminal_height: int = 24,
        chrome_lines: int = DEFAULT_CHROME_LINES,
        initial_row: int = 0,
    ) -> None:
        self.states = states
        self.chrome_lines = chrome_lines
        self.ui = UIState(
            current_row=self._clamp_row(initial_row),
            max_visible_items=visible_capacity(terminal_height, chrome_lines),
            terminal_height=terminal_height,
        )

    def _clamp_row(self, row: int) -> int:
        if not self.states:
            return 0
        return max(0, min(row, len(self.states) - 1))

    @property
    def current_state(self) -> PackageSelectionState | None:
        if not self.states:
            return None
        return self.states[self._clamp_row(self.ui.current_row)]

    @property
    def modal_state(self) -> PackageSelectionState | None:
        if not self.ui.show_info_modal or not (0 <= self.ui.info_modal_row < len(self.states)):
            return None
        return self.states[self.ui.info_modal_row]

    def selected_count(self) -> int:
        return sum(1 for state in self.states if state.selected_option != SELECTION_NONE)

    # Layout

    def set_renderable_items(self, items: list[RenderableItem]) -> None:
        self.ui.renderable_items = list(items)
        self.ensure_visible(self.ui.current_row)

    def total_visual_rows(self) -> int:
        return len(self.ui.renderable_items) or len(self.states)

    def package_index_to_visual_index(self, package_index: int) -> int:
        """Map a state index to its row in the renderable list (identity when flat)."""
        items = self.ui.renderable_items
        if not items:
            return package_index
        for visual_index, item in enumerate(items):
            if isinstance(item, PackageItem) and item.index == package_index:
                return visual_index
        return 0

    def _find_next_package_index(self, current: int, direction: str) -> int:
        total = len(self.states)
        if total == 0:
            return 0
        items = self.ui.renderable_items
        if not items:
            if direction == DIRECTION_UP:
                return total - 1 if current <= 0 else current - 1
            return 0 if current >= total - 1 else current + 1

        package_order = [item.index for item in items if isinstance(item, PackageItem)]
        if not package_order:
            return current
        if current not in package_order:
            return package_order[0]
        pos = package_order.index(current)
        if direction == DIRECTION_UP:
            pos = len(package_order) - 1 if pos <= 0 else pos - 1
        else:
            pos = 0 if pos >= len(package_order) - 1 else pos + 1
        return package_order[pos]

    # Navigation

    def navigate(self, direction: str) -> None:
        """Move to the previous/next package row with wraparound, skipping headers."""
        self.ui.previous_row = self.ui.current_row
        self.ui.current_row = self._find_next_package_index(self.ui.current_row, direction)
        self.ensure_visible(self.ui.current_row)

    def navigate_up(self) -> None:
        self.navigate(DIRECTION_UP)

    def navigate_down(self) -> None:
        self.navigate(DIRECTION_DOWN)

    def ensure_visible(self, package_index: int) -> None:
        """Scroll so ``package_index`` is inside the viewport.

        The first package of a section pulls its header (and a header+spacer
        pair) into view when everything still fits; otherwise the package is
        pinned to the bottom row of the viewport.
        """
        ui = self.ui
        items = ui.renderable_items
        visual_index = self.package_index_to_visual_index(package_index)
        capacity = ui.max_visible_items

        target = visual_index
        if items and visual_index > 0:
            prev_item = items[visual_index - 1]
            if isinstance(prev_item, HeaderItem):
                target = visual_index - 1
            elif visual_index > 1:
                prev_prev_item = items[visual_index - 2]
                if isinstance(prev_item, SpacerItem) and isinstance(prev_prev_item, HeaderItem):
                    target = visual_index - 2

        if target < ui.scroll_offset:
            ui.scroll_offset = target
        elif visual_index >= ui.scroll_offset + capacity:
            bottom_pinned = visual_index - capacity + 1
            if visual_index - target + 1 <= capacity:
                # Window ends at the package and still starts at or above its header.
                ui.scroll_offset = min(target, bottom_pinned)
            else:
                ui.scroll_offset = bottom_pinned

        max_offset = max(0, self.total_visual_rows() - capacity)
        ui.scroll_offset = max(0, min(ui.scroll_offset, max_offset))

    # Selection

    def update_selection(self, direction: str) -> None:
        """Cycle the selected option of the row under the cursor."""
        state = self.current_state
        if state is None:
            return
        state.selected_option = cycle_option(
            state.selected_option,
            state.has_range_update,
            state.has_major_update,
            direction,
        )

    def bulk_select_range_eligible(self) -> None:
        for state in self.states:
            if state.has_range_update:
                state.selected_option = SELECTION_RANGE

    def bulk_select_best_available(self) -> None:
        for state in self.states:
            if state.has_major_update:
                state.selected_option = SELECTION_LATEST
            elif state.has_range_update:
                state.selected_option = SELECTION_RANGE

    def bulk_clear_all(self) -> None:
        for state in self.states:
            state.selected_option = SELECTION_NONE

    # Viewport and repaint bookkeeping

    def update_viewport_height(self, new_height: int) -> bool:
        """Recompute capacity for ``new_height``; return whether anything changed."""
        capacity = visible_capacity(new_height, self.chrome_lines)
        if new_height == self.ui.terminal_height and capacity == self.ui.max_visible_items:
            return False
        self.ui.terminal_height = new_height
        self.ui.max_visible_items = capacity
        return True

    def reset_for_resize(self) -> None:
        self.ensure_visible(self.ui.current_row)
        self.ui.is_initial_render = True

    def mark_rendered(self, lines: list[str]) -> None:
        self.ui.rendered_lines = list(lines)
        self.ui.previous_row = self.ui.current_row

    def set_initial_render(self, is_initial: bool) -> None:
        self.ui.is_initial_render = is_initial

    def set_status_message(self, message: str, until: float) -> None:
        self.ui.status_message = message
        self.ui.status_message_until = until

    def clear_status_message(self) -> None:
        self.ui.status_message = ""
        self.ui.status_message_until = 0.0

    # Detail modal

    def toggle_detail_modal(self) -> bool:
        """Open the modal for the current row, or close it; return whether it is open."""
        if self.ui.show_info_modal:
            self.close_detail_modal()
            return False
        if not self.states:
            return False
        self.ui.show_info_modal = True
        self.ui.info_modal_row = self._clamp_row(self.ui.current_row)
        self.ui.is_initial_render = True
        return True

    def close_detail_modal(self) -> None:
        self.ui.show_info_modal = False
        self.ui.info_modal_row = -1
        self.ui.is_loading_modal_info = False
        self.ui.is_initial_render = True

    def set_modal_loading(self, is_loading: bool) -> None:
        self.ui.is_loading_modal_info = is_loading
        self.ui.is_initial_render = True


__all__ = [
    "DEFAULT_CHROME_LINES",
    "MIN_VISIBLE_ITEMS",
    "DIRECTION_UP",
    "DIRECTION_DOWN",
    "DIRECTION_LEFT",
    "DIRECTION_RIGHT",
    "UIState",
    "StateManager",
    "cycle_option",
    "visible_capacity",
]
