"""Caret-level editing helpers for the live-markup editing surface.

Every operation takes the whole text plus a caret offset and returns an
``EditResult`` with the new text and caret. Structural questions ("is the
caret in a list item?") are answered by tokenizing the full text again;
there is no incremental state.
"""

import re

from ..core.model import EditResult, HeadingToken, ListItemToken, Token
from .tokenizer import tokenize

LIST_MARKER_RE = re.compile(r"(?:[-*+]|\d+\.) ")
_ORDERED_RE = re.compile(r"(\d+)\.")


def _clamp(text: str, pos: int) -> int:
    return max(0, min(pos, len(text)))


def _line_start(text: str, pos: int) -> int:
    return text.rfind("\n", 0, pos) + 1


def line_and_column(text: str, pos: int) -> tuple[int, int]:
    """Zero-based (line, column) of ``pos``."""
    lines = text[:_clamp(text, pos)].split("\n")
    return len(lines) - 1, len(lines[-1])


def position_from_line_column(text: str, line: int, column: int) -> int:
    """Offset for (line, column); the column is clamped to the line length."""
    lines = text.split("\n")
    pos = sum(len(ln) + 1 for ln in lines[:line])
    if line < len(lines):
        pos += min(column, len(lines[line]))
    return _clamp(text, pos)


def move_cursor_up(text: str, pos: int) -> int:
    line, column = line_and_column(text, pos)
    if line == 0:
        return 0
    return position_from_line_column(text, line - 1, column)


def move_cursor_down(text: str, pos: int) -> int:
    line, column = line_and_column(text, pos)
    if line >= text.count("\n"):
        return len(text)
    return position_from_line_column(text, line + 1, column)


def insert_text(text: str, pos: int, insert: str) -> EditResult:
    pos = _clamp(text, pos)
    return EditResult(text[:pos] + insert + text[pos:], pos + len(insert))


def delete_at(text: str, pos: int, forward: bool = False) -> EditResult:
    """
    Backspace (or Delete when ``forward``) at ``pos``.

    Backspace directly after a list marker at the start of a line removes
    the whole marker (``"- "``, ``"12. "``) instead of a single space.
    """
    pos = _clamp(text, pos)

    if forward:
        if pos >= len(text):
            return EditResult(text, pos)
        return EditResult(text[:pos] + text[pos + 1:], pos)

    if pos == 0:
        return EditResult(text, pos)

    start = _line_start(text, pos)
    if LIST_MARKER_RE.fullmatch(text[start:pos]):
        return EditResult(text[:start] + text[pos:], start)

    return EditResult(text[:pos - 1] + text[pos:], pos - 1)


def _block_on_line(text: str, pos: int) -> Token | None:
    start = _line_start(text, pos)
    for token in tokenize(text):
        if token.start == start and token.block:
            return token
        if token.start > start:
            break
    return None


def _next_marker(item: ListItemToken) -> str:
    if item.ordered:
        m = _ORDERED_RE.match(item.raw)
        number = int(m.group(1)) + 1 if m else 1
        return f"{number}. "
    return f"{item.raw[0]} "


def handle_enter(text: str, pos: int) -> EditResult:
    """
    Enter key with list continuation.

    - non-empty list item: start the next item with the same marker kind
    - empty list item: drop it and leave a blank line (ends the list)
    - heading: open a new block below with a blank line
    - anything else: plain newline
    """
    pos = _clamp(text, pos)
    token = _block_on_line(text, pos)

    if isinstance(token, ListItemToken):
        if not token.content:
            before = text[:token.start].rstrip("\n")
            after = text[token.end:]
            if not before:
                return EditResult(after, 0)
            return EditResult(f"{before}\n\n{after}", len(before) + 2)
        marker = _next_marker(token)
        return insert_text(text, pos, "\n" + marker)

    if isinstance(token, HeadingToken):
        return insert_text(text, pos, "\n\n")

    return insert_text(text, pos, "\n")
