"""Interactive event loops for the selection session and the confirm prompt.

Each loop owns the terminal for its lifetime: raw mode is entered once and
restored on every exit path, including Ctrl-C, which propagates as
``KeyboardInterrupt`` after the terminal has been released.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..errors import TerminalUnavailableError
from ..input import ConfirmationInputHandler, InputAction, InputHandler, read_key
from ..input.handler import (
    BULK_CLEAR_ALL,
    BULK_SELECT_BEST,
    BULK_SELECT_RANGE_ELIGIBLE,
    NAVIGATE_DOWN,
    NAVIGATE_UP,
    SELECT_LEFT,
    SELECT_RIGHT,
    TOGGLE_DETAIL_MODAL,
    VIEWPORT_RESIZED,
)
from ..model import PackageMetadata, PackageSelectionState, PackageUpgradeChoice, RenderableItem
from ..render import (
    render_confirmation,
    render_interface,
    render_package_info_loading,
    render_package_info_modal,
)
from ..state import DEFAULT_CHROME_LINES, DIRECTION_LEFT, DIRECTION_RIGHT, StateManager
from ..terminal import CLEAR_LINE_TAIL, TerminalController
from ..ui_theme import DEFAULT_THEME, UITheme
from .metadata_worker import MetadataFetchScheduler

logger = logging.getLogger(__name__)

KEY_POLL_MS = 120
WARNING_SECONDS = 2.0

KeyReader = Callable[..., str]
TerminalFactory = Callable[[], TerminalController]


class SelectionSession:
    """Wires one ``StateManager`` to a terminal, the renderers, and an input handler."""

    def __init__(
        self,
        states: list[PackageSelectionState],
        terminal: TerminalController,
        *,
        renderable_items: list[RenderableItem] | None = None,
        label: str | None = None,
        theme: UITheme = DEFAULT_THEME,
        metadata_fetcher: Callable[[str], PackageMetadata | None] | None = None,
        chrome_lines: int = DEFAULT_CHROME_LINES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.terminal = terminal
        self.label = label
        self.theme = theme
        self.clock = clock
        self.columns, rows = terminal.size()
        self.manager = StateManager(states, terminal_height=rows, chrome_lines=chrome_lines)
        if renderable_items:
            self.manager.set_renderable_items(renderable_items)
        self.scheduler = MetadataFetchScheduler(metadata_fetcher) if metadata_fetcher is not None else None
        self.done = False
        self.confirmed = False
        self.handler = InputHandler(
            self.manager,
            on_action=self.dispatch,
            on_confirm=self._on_confirm,
            on_cancel=self._on_cancel,
            on_warning=self._on_warning,
        )

    # Callbacks from the input handler

    def _on_confirm(self, _states: list[PackageSelectionState]) -> None:
        self.done = True
        self.confirmed = True

    def _on_cancel(self, _states: list[PackageSelectionState]) -> None:
        self.done = True
        self.confirmed = False

    def _on_warning(self, message: str) -> None:
        self.manager.set_status_message(message, self.clock() + WARNING_SECONDS)

    def dispatch(self, action: InputAction) -> None:
        """Apply one action to the state manager."""
        manager = self.manager
        if action.type == NAVIGATE_UP:
            manager.navigate_up()
        elif action.type == NAVIGATE_DOWN:
            manager.navigate_down()
        elif action.type == SELECT_LEFT:
            manager.update_selection(DIRECTION_LEFT)
        elif action.type == SELECT_RIGHT:
            manager.update_selection(DIRECTION_RIGHT)
        elif action.type == BULK_SELECT_RANGE_ELIGIBLE:
            manager.bulk_select_range_eligible()
        elif action.type == BULK_SELECT_BEST:
            manager.bulk_select_best_available()
        elif action.type == BULK_CLEAR_ALL:
            manager.bulk_clear_all()
        elif action.type == TOGGLE_DETAIL_MODAL:
            self._toggle_modal()
        elif action.type == VIEWPORT_RESIZED and action.height is not None:
            if manager.update_viewport_height(action.height):
                manager.reset_for_resize()
            else:
                manager.set_initial_render(True)

    def _toggle_modal(self) -> None:
        if not self.manager.toggle_detail_modal():
            return
        state = self.manager.modal_state
        if state is None or state.metadata_loaded or self.scheduler is None:
            return
        self.manager.set_modal_loading(True)
        self.scheduler.schedule(row=self.manager.ui.info_modal_row, name=state.name)

    # Per-tick bookkeeping

    def apply_metadata_results(self) -> None:
        """Fold completed fetches into their rows; clear loading if the modal still shows that row."""
        if self.scheduler is None:
            return
        ui = self.manager.ui
        for result in self.scheduler.drain_results():
            row = result.request.row
            if not 0 <= row < len(self.manager.states):
                continue
            self.manager.states[row].apply_metadata(result.metadata)
            if ui.show_info_modal and ui.info_modal_row == row:
                self.manager.set_modal_loading(False)

    def expire_status_message(self) -> None:
        ui = self.manager.ui
        if ui.status_message and self.clock() >= ui.status_message_until:
            self.manager.clear_status_message()

    def check_resize(self) -> None:
        columns, rows = self.terminal.size()
        if columns == self.columns and rows == self.manager.ui.terminal_height:
            return
        width_changed = columns != self.columns
        self.columns = columns
        self.handler.handle_resize(rows)
        if width_changed:
            self.manager.set_initial_render(True)

    # Painting

    def build_frame(self) -> list[str]:
        manager = self.manager
        ui = manager.ui
        modal_state = manager.modal_state
        if modal_state is not None:
            if ui.is_loading_modal_info:
                lines = render_package_info_loading(modal_state, self.columns, ui.terminal_height, self.theme)
            else:
                lines = render_package_info_modal(modal_state, self.columns, ui.terminal_height, self.theme)
        else:
            lines = render_interface(
                manager.states,
                ui.current_row,
                ui.scroll_offset,
                ui.max_visible_items,
                renderable_items=ui.renderable_items,
                dependency_kind_label=self.label,
                status_message=ui.status_message,
                theme=self.theme,
                width=self.columns,
            )
        return lines[: ui.terminal_height]

    def paint(self) -> bool:
        """Write the current frame; return whether anything was written.

        The first paint (and any forced full repaint) clears the screen. Later
        paints home the cursor, overwrite each line, and clear what is left.
        """
        ui = self.manager.ui
        lines = self.build_frame()
        if not ui.is_initial_render and lines == ui.rendered_lines:
            return False
        if ui.is_initial_render:
            self.terminal.clear_screen()
        else:
            self.terminal.cursor_home()
        self.terminal.write((CLEAR_LINE_TAIL + "\r\n").join(lines) + CLEAR_LINE_TAIL)
        self.terminal.clear_to_end()
        self.manager.mark_rendered(lines)
        self.manager.set_initial_render(False)
        return True

    def finish_screen(self) -> None:
        """Leave the cursor below the last painted frame."""
        self.terminal.write("\r\n")

    def run(self, key_reader: KeyReader = read_key) -> list[PackageSelectionState]:
        with self.terminal.raw_mode():
            try:
                while not self.done:
                    self.check_resize()
                    self.expire_status_message()
                    self.apply_metadata_results()
                    self.paint()
                    key = key_reader(self.terminal.stdin_fd, timeout_ms=KEY_POLL_MS)
                    self.handler.handle_key(key)
            finally:
                self.finish_screen()
        return self.manager.states


def run_selection_session(
    states: list[PackageSelectionState],
    *,
    renderable_items: list[RenderableItem] | None = None,
    label: str | None = None,
    theme: UITheme = DEFAULT_THEME,
    metadata_fetcher: Callable[[str], PackageMetadata | None] | None = None,
    chrome_lines: int = DEFAULT_CHROME_LINES,
    terminal_factory: TerminalFactory = TerminalController.open,
    key_reader: KeyReader = read_key,
    clock: Callable[[], float] = time.monotonic,
) -> list[PackageSelectionState]:
    """Run an interactive selection session and return the states.

    Confirmed sessions return the user's choices; cancelled sessions return
    every row reset to ``none``. Without a usable terminal the states are
    returned unchanged and a one-line warning is logged.
    """
    if not states:
        return states
    try:
        terminal = terminal_factory()
    except TerminalUnavailableError as exc:
        logger.warning("Interactive selection unavailable (%s); keeping current versions", exc)
        return states

    session = SelectionSession(
        states,
        terminal,
        renderable_items=renderable_items,
        label=label,
        theme=theme,
        metadata_fetcher=metadata_fetcher,
        chrome_lines=chrome_lines,
        clock=clock,
    )
    return session.run(key_reader)


def _prompt_without_terminal(input_fn: Callable[[str], str]) -> bool | None:
    try:
        answer = input_fn("Proceed? [Y/n/back] ").strip().lower()
    except EOFError:
        return False
    if answer in {"", "y", "yes"}:
        return True
    if answer in {"n", "no", "back", "b"}:
        return None
    return False


def run_confirmation_prompt(
    choices: list[PackageUpgradeChoice],
    *,
    theme: UITheme = DEFAULT_THEME,
    terminal_factory: TerminalFactory = TerminalController.open,
    key_reader: KeyReader = read_key,
    output: Callable[[str], None] = print,
    input_fn: Callable[[str], str] = input,
) -> bool | None:
    """Show the upgrade summary and wait for proceed (``True``), back (``None``) or cancel (``False``)."""
    for line in render_confirmation(choices, theme):
        output(line)

    try:
        terminal = terminal_factory()
    except TerminalUnavailableError:
        return _prompt_without_terminal(input_fn)

    outcome: list[bool | None] = []
    handler = ConfirmationInputHandler(outcome.append)
    with terminal.raw_mode():
        while not outcome:
            handler.handle_key(key_reader(terminal.stdin_fd, timeout_ms=KEY_POLL_MS))
    return outcome[0]


__all__ = [
    "KEY_POLL_MS",
    "WARNING_SECONDS",
    "SelectionSession",
    "run_selection_session",
    "run_confirmation_prompt",
]
