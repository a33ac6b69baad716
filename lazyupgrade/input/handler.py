"""Key-token to action translation for the selection session and confirm prompt.

``InputHandler`` never mutates list state itself except on cancel, where every
row is reset to ``none`` before the cancel callback fires. Everything else is
forwarded as an :class:`InputAction` to the caller-supplied dispatcher.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..model import PackageSelectionState
from ..state import StateManager
from .key_registry import KeyComboBinding, KeyComboRegistry, normalize_letter_key

NAVIGATE_UP = "navigate_up"
NAVIGATE_DOWN = "navigate_down"
SELECT_LEFT = "select_left"
SELECT_RIGHT = "select_right"
BULK_SELECT_RANGE_ELIGIBLE = "bulk_select_range_eligible"
BULK_SELECT_BEST = "bulk_select_best"
BULK_CLEAR_ALL = "bulk_clear_all"
TOGGLE_DETAIL_MODAL = "toggle_detail_modal"
CONFIRM = "confirm"
CANCEL = "cancel"
VIEWPORT_RESIZED = "viewport_resized"

NO_SELECTION_WARNING = (
    "⚠️  No packages selected. Press ↑/↓ to navigate and ←/→ to select versions, or ESC to exit."
)

INTERRUPT_KEY = "CTRL_C"


@dataclass(frozen=True)
class InputAction:
    type: str
    height: int | None = None


ActionDispatcher = Callable[[InputAction], None]


class InputHandler:
    """Dispatch key tokens for one selection session."""

    def __init__(
        self,
        state_manager: StateManager,
        on_action: ActionDispatcher,
        on_confirm: Callable[[list[PackageSelectionState]], None],
        on_cancel: Callable[[list[PackageSelectionState]], None],
        on_warning: Callable[[str], None] | None = None,
    ) -> None:
        self.state_manager = state_manager
        self.on_action = on_action
        self.on_confirm = on_confirm
        self.on_cancel = on_cancel
        self.on_warning = on_warning
        self._registry = KeyComboRegistry(normalize=normalize_letter_key).register_bindings(
            KeyComboBinding(("UP",), lambda: self._emit(NAVIGATE_UP)),
            KeyComboBinding(("DOWN",), lambda: self._emit(NAVIGATE_DOWN)),
            KeyComboBinding(("LEFT",), lambda: self._emit(SELECT_LEFT)),
            KeyComboBinding(("RIGHT",), lambda: self._emit(SELECT_RIGHT)),
            KeyComboBinding(("m",), lambda: self._emit(BULK_SELECT_RANGE_ELIGIBLE)),
            KeyComboBinding(("l",), lambda: self._emit(BULK_SELECT_BEST)),
            KeyComboBinding(("u",), lambda: self._emit(BULK_CLEAR_ALL)),
            KeyComboBinding(("i",), lambda: self._emit(TOGGLE_DETAIL_MODAL)),
            KeyComboBinding(("ENTER",), self._confirm),
            KeyComboBinding(("ESC",), self._escape),
        )

    def _emit(self, action_type: str) -> bool:
        self.on_action(InputAction(action_type))
        return True

    def _confirm(self) -> bool:
        if self.state_manager.selected_count() == 0:
            if self.on_warning is not None:
                self.on_warning(NO_SELECTION_WARNING)
            return True
        self.on_confirm(self.state_manager.states)
        return True

    def _escape(self) -> bool:
        if self.state_manager.ui.show_info_modal:
            return self._emit(TOGGLE_DETAIL_MODAL)
        self.state_manager.bulk_clear_all()
        self.on_cancel(self.state_manager.states)
        return True

    def handle_key(self, key: str) -> bool:
        """Handle one key token; return whether it was bound.

        Ctrl-C raises ``KeyboardInterrupt`` so the session unwinds without
        resolving; the terminal is restored by the enclosing raw-mode scope.
        """
        if key == INTERRUPT_KEY:
            raise KeyboardInterrupt
        if not key:
            return False
        return bool(self._registry.dispatch(key))

    def handle_resize(self, height: int) -> None:
        self.on_action(InputAction(VIEWPORT_RESIZED, height=height))


class ConfirmationInputHandler:
    """Three-way prompt: proceed (``True``), go back (``None``), cancel (``False``)."""

    def __init__(self, on_result: Callable[[bool | None], None]) -> None:
        self.on_result = on_result
        self._registry = KeyComboRegistry(normalize=normalize_letter_key).register_bindings(
            KeyComboBinding(("y", "ENTER"), lambda: self._resolve(True)),
            KeyComboBinding(("n",), lambda: self._resolve(None)),
            KeyComboBinding(("ESC",), lambda: self._resolve(False)),
        )

    def _resolve(self, result: bool | None) -> bool:
        self.on_result(result)
        return True

    def handle_key(self, key: str) -> bool:
        if key == INTERRUPT_KEY:
            raise KeyboardInterrupt
        if not key:
            return False
        return bool(self._registry.dispatch(key))


__all__ = [
    "NAVIGATE_UP",
    "NAVIGATE_DOWN",
    "SELECT_LEFT",
    "SELECT_RIGHT",
    "BULK_SELECT_RANGE_ELIGIBLE",
    "BULK_SELECT_BEST",
    "BULK_CLEAR_ALL",
    "TOGGLE_DETAIL_MODAL",
    "CONFIRM",
    "CANCEL",
    "VIEWPORT_RESIZED",
    "NO_SELECTION_WARNING",
    "ActionDispatcher",
    "InputAction",
    "InputHandler",
    "ConfirmationInputHandler",
]
