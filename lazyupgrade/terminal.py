"""Terminal control helpers for the selection session.

Owns the raw-mode lifecycle, cursor visibility, and the handful of screen
operations the incremental painter needs. The main screen buffer is kept so
the final selection stays visible in scrollback after the session ends.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import sys
import termios
import tty

from .errors import TerminalUnavailableError

CLEAR_SCREEN = "\x1b[2J"
CURSOR_HOME = "\x1b[H"
CLEAR_TO_END = "\x1b[J"
CLEAR_LINE_TAIL = "\x1b[K"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"

FALLBACK_SIZE = (80, 24)


class TerminalController:
    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    @classmethod
    def open(cls, stdin_fd: int | None = None, stdout_fd: int | None = None) -> TerminalController:
        """Bind to the process tty, raising ``TerminalUnavailableError`` when there is none."""
        try:
            in_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
            out_fd = sys.stdout.fileno() if stdout_fd is None else stdout_fd
        except (OSError, ValueError) as exc:
            raise TerminalUnavailableError(f"standard streams have no file descriptor: {exc}") from exc
        if not os.isatty(in_fd) or not os.isatty(out_fd):
            raise TerminalUnavailableError("stdin/stdout is not a terminal")
        try:
            return cls(in_fd, out_fd)
        except termios.error as exc:
            raise TerminalUnavailableError(f"cannot read terminal attributes: {exc}") from exc

    def enable_raw_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        self.write(HIDE_CURSOR)

    def disable_raw_mode(self) -> None:
        self.write(SHOW_CURSOR)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_raw_mode()
            yield self
        finally:
            self.disable_raw_mode()

    def write(self, text: str) -> None:
        data = text.encode("utf-8")
        while data:
            written = os.write(self.stdout_fd, data)
            data = data[written:]

    def clear_screen(self) -> None:
        self.write(CLEAR_SCREEN + CURSOR_HOME)

    def cursor_home(self) -> None:
        self.write(CURSOR_HOME)

    def clear_to_end(self) -> None:
        self.write(CLEAR_TO_END)

    def size(self) -> tuple[int, int]:
        """Return ``(columns, rows)``, falling back to 80x24 when unknown."""
        try:
            size = os.get_terminal_size(self.stdout_fd)
        except OSError:
            size = shutil.get_terminal_size(FALLBACK_SIZE)
        columns = size.columns or FALLBACK_SIZE[0]
        rows = size.lines or FALLBACK_SIZE[1]
        return columns, rows


__all__ = [
    "CLEAR_LINE_TAIL",
    "FALLBACK_SIZE",
    "TerminalController",
]
