"""Input-layer public API for key decoding and action handlers.

Low-level terminal decoding (`read_key`) is kept separate from the handlers
that turn key tokens into session actions.
"""

from .handler import (
    ConfirmationInputHandler,
    InputAction,
    InputHandler,
    NO_SELECTION_WARNING,
)
from .key_registry import KeyComboBinding, KeyComboRegistry, normalize_letter_key
from .reader import ESC_SEQUENCE_TIMEOUT_MS, _PENDING_BYTES, read_key

__all__ = [
    "read_key",
    "_PENDING_BYTES",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyComboBinding",
    "KeyComboRegistry",
    "normalize_letter_key",
    "InputAction",
    "InputHandler",
    "ConfirmationInputHandler",
    "NO_SELECTION_WARNING",
]
