"""Tokenizer: raw entry text to a flat, position-tagged token list."""

import re

from ..core.model import (
    BlockquoteToken,
    BoldToken,
    CodeBlockToken,
    CodeToken,
    HeadingToken,
    HrToken,
    ItalicToken,
    LinkToken,
    ListItemToken,
    StrikethroughToken,
    TextToken,
    Token,
    WikiLinkToken,
)

# Block rules; matched with pattern.match(text, pos) at line start only
HEADING_RE = re.compile(r"(#{1,6})(?!#)([^\n]*)(\n?)")
FENCE_OPEN_RE = re.compile(r"```([^`\n]*)\n")
BLOCKQUOTE_RE = re.compile(r">[ \t]+([^\n]*)(\n?)")
LIST_ITEM_RE = re.compile(r"(?:[-*+]|(\d+)\.)[ \t]([^\n]*)(\n?)")
HR_RE = re.compile(r"([-*_])\1{2,}(?=\n|\Z)\n?")

# Inline rules; none of them crosses a newline
BOLD_RE = {
    "*": re.compile(r"\*\*([^\n]+?)\*\*"),
    "_": re.compile(r"__([^\n]+?)__"),
}
ITALIC_RE = {
    "*": re.compile(r"\*(?!\*)([^\n]+?)\*"),
    "_": re.compile(r"_(?!_)([^\n]+?)_"),
}
STRIKETHROUGH_RE = re.compile(r"~~([^\n]+?)~~")
CODE_RE = re.compile(r"`([^`\n]+)`")
WIKI_LINK_RE = re.compile(r"\[\[([^\]|\n]+)(?:\|([^\]\n]+))?\]\]")
LINK_RE = re.compile(r"\[([^\]\n]+)\]\(([^)\n]+)\)")

FENCE = "```"


class MarkdownTokenizer:
    """
    Single left-to-right scan over the text.

    At every position the block rules are tried first (only at line start),
    then the inline rules. Characters no rule claims accumulate into one
    ``TextToken`` until the next match. Malformed markup never raises; it
    simply ends up in a text token.
    """

    def tokenize(self, text: str) -> list[Token]:
        tokens: list[Token] = []
        pos = 0
        plain_start = 0

        while pos < len(text):
            token = None
            if pos == 0 or text[pos - 1] == "\n":
                token = self._match_block(text, pos)
            if token is None:
                token = self._match_inline(text, pos)
            if token is None:
                pos += 1
                continue

            if plain_start < pos:
                tokens.append(_text(text, plain_start, pos))
            tokens.append(token)
            pos = plain_start = token.end

        if plain_start < len(text):
            tokens.append(_text(text, plain_start, len(text)))
        return tokens

    def _match_block(self, text: str, pos: int) -> Token | None:
        ch = text[pos]
        if ch == "#":
            return self._heading(text, pos)
        if ch == "`":
            return self._code_block(text, pos)
        if ch == ">":
            return self._blockquote(text, pos)
        # "- item" and "---" share a first character; the list rule goes first
        return self._list_item(text, pos) or self._hr(text, pos)

    def _heading(self, text: str, pos: int) -> Token | None:
        m = HEADING_RE.match(text, pos)
        if not m:
            return None
        content = m.group(2).strip()
        if not content:
            return None
        return HeadingToken(pos, m.end(), m.group(0), content, level=len(m.group(1)))

    def _code_block(self, text: str, pos: int) -> Token | None:
        m = FENCE_OPEN_RE.match(text, pos)
        if not m:
            return None
        info = m.group(1).split()
        language = info[0] if info else ""

        body_start = line_start = m.end()
        while line_start < len(text):
            line_end = text.find("\n", line_start)
            if line_end == -1:
                line_end = len(text)
            if text[line_start:line_end].rstrip(" \t") == FENCE:
                content = text[body_start:line_start - 1] if line_start > body_start else ""
                end = min(line_end + 1, len(text))
                return CodeBlockToken(pos, end, text[pos:end], content, language=language)
            line_start = line_end + 1

        # Unterminated fence: the opener stays plain text
        return None

    def _blockquote(self, text: str, pos: int) -> Token | None:
        m = BLOCKQUOTE_RE.match(text, pos)
        if not m or not m.group(1).strip():
            return None
        return BlockquoteToken(pos, m.end(), m.group(0), m.group(1).strip())

    def _list_item(self, text: str, pos: int) -> Token | None:
        m = LIST_ITEM_RE.match(text, pos)
        if not m:
            return None
        return ListItemToken(
            pos,
            m.end(),
            m.group(0),
            m.group(2).strip(),
            ordered=m.group(1) is not None,
        )

    def _hr(self, text: str, pos: int) -> Token | None:
        m = HR_RE.match(text, pos)
        if not m:
            return None
        return HrToken(pos, m.end(), m.group(0), "")

    def _match_inline(self, text: str, pos: int) -> Token | None:
        ch = text[pos]
        if ch in BOLD_RE:
            m = BOLD_RE[ch].match(text, pos)
            if m:
                return BoldToken(pos, m.end(), m.group(0), m.group(1))
            m = ITALIC_RE[ch].match(text, pos)
            if m:
                return ItalicToken(pos, m.end(), m.group(0), m.group(1))
        elif ch == "~":
            m = STRIKETHROUGH_RE.match(text, pos)
            if m:
                return StrikethroughToken(pos, m.end(), m.group(0), m.group(1))
        elif ch == "`":
            m = CODE_RE.match(text, pos)
            if m:
                return CodeToken(pos, m.end(), m.group(0), m.group(1))
        elif ch == "[":
            return self._wiki_link(text, pos) or self._link(text, pos)
        return None

    def _wiki_link(self, text: str, pos: int) -> Token | None:
        m = WIKI_LINK_RE.match(text, pos)
        if not m:
            return None
        entry_id = m.group(1).strip()
        if not entry_id:
            return None
        display = (m.group(2) or "").strip() or None
        return WikiLinkToken(
            pos,
            m.end(),
            m.group(0),
            display or entry_id,
            entry_id=entry_id,
            display=display,
        )

    def _link(self, text: str, pos: int) -> Token | None:
        m = LINK_RE.match(text, pos)
        if not m:
            return None
        return LinkToken(pos, m.end(), m.group(0), m.group(1), href=m.group(2).strip())


def _text(text: str, start: int, end: int) -> TextToken:
    chunk = text[start:end]
    return TextToken(start, end, chunk, chunk)


_default = MarkdownTokenizer()


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens whose ``raw`` values concatenate back to it."""
    return _default.tokenize(text)
