"""ANSI-aware text measurement and line shaping utilities.

Every width calculation in the renderers goes through :func:`visible_width`
so embedded color codes never break column alignment.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    """Remove escape sequences, leaving only printable content."""
    return ANSI_ESCAPE_RE.sub("", text)


def visible_width(text: str) -> int:
    """Return the number of terminal columns ``text`` occupies once styled."""
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def pad_visible(text: str, width: int, fill: str = " ") -> str:
    """Right-pad ``text`` with ``fill`` until it spans ``width`` columns."""
    missing = width - visible_width(text)
    if missing <= 0:
        return text
    return text + fill * missing


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered terminal cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1

    # Keep trailing style resets so a clipped line never bleeds color.
    while i < n and text[i] == "\x1b":
        match = ANSI_ESCAPE_RE.match(text, i)
        if match is None:
            break
        out.append(match.group(0))
        i = match.end()

    return "".join(out)


def wrap_words(text: str, width: int) -> list[str]:
    """Greedy word wrap of plain text into lines of at most ``width`` columns.

    Words longer than ``width`` are hard-split so no line ever overflows.
    """
    if width <= 0:
        return [""]
    words = text.split()
    if not words:
        return [""]

    lines: list[str] = []
    current = ""
    for word in words:
        while visible_width(word) > width:
            if current:
                lines.append(current)
                current = ""
            head = clip_ansi_line(word, width)
            lines.append(head)
            word = word[len(head):]
        if not word:
            continue
        candidate = f"{current} {word}" if current else word
        if visible_width(candidate) > width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines
