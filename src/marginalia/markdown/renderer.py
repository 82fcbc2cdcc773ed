"""Cursor-aware HTML renderer for tokenized entry text."""

from collections.abc import Callable, Mapping

from ..core.model import (
    BlockquoteToken,
    BoldToken,
    CodeBlockToken,
    CodeToken,
    EntryId,
    HeadingToken,
    HrToken,
    ItalicToken,
    LinkToken,
    ListItemToken,
    TOKEN_TYPES,
    RenderedOutput,
    StrikethroughToken,
    TextToken,
    Token,
    WikiLinkToken,
)
from ..core.utils import escape_html, slugify
from .tokenizer import tokenize

NO_CURSOR = -1
DEFAULT_LINK_BASE = "/entries"

TitleMap = Mapping[EntryId, str]


def cursor_touches(token: Token, cursor: int) -> bool:
    """
    True when ``token`` should be shown as its raw source.

    Both ends are inclusive, except that a token whose raw text ends with the
    newline it swallowed does not claim ``cursor == end``: that offset is the
    first column of the next line.
    """
    if cursor < 0:
        return False
    if token.raw.endswith("\n"):
        return token.start <= cursor < token.end
    return token.start <= cursor <= token.end


def wiki_link_base(slug: str) -> str:
    """Link base for entries rendered inside the published wiki ``slug``."""
    return f"/wiki/{slugify(slug)}"


def _heading(token: HeadingToken, ctx: "_Context") -> str:
    return f"<h{token.level}>{escape_html(token.content)}</h{token.level}>"


def _bold(token: BoldToken, ctx: "_Context") -> str:
    return f"<strong>{escape_html(token.content)}</strong>"


def _italic(token: ItalicToken, ctx: "_Context") -> str:
    return f"<em>{escape_html(token.content)}</em>"


def _strikethrough(token: StrikethroughToken, ctx: "_Context") -> str:
    return f"<del>{escape_html(token.content)}</del>"


def _code(token: CodeToken, ctx: "_Context") -> str:
    return f"<code>{escape_html(token.content)}</code>"


def _code_block(token: CodeBlockToken, ctx: "_Context") -> str:
    body = escape_html(token.content)
    if not token.language:
        return f"<pre><code>{body}</code></pre>"
    return f'<pre><code class="language-{escape_html(token.language)}">{body}</code></pre>'


def _link(token: LinkToken, ctx: "_Context") -> str:
    return f'<a href="{escape_html(token.href)}">{escape_html(token.content)}</a>'


def _wiki_link(token: WikiLinkToken, ctx: "_Context") -> str:
    # Explicit "|Display" wins, then the resolved title, then the bare id
    label = token.display or ctx.titles.get(token.entry_id) or token.entry_id
    href = f"{ctx.link_base}/{token.entry_id}"
    return f'<a href="{escape_html(href)}" class="wiki-link">{escape_html(label)}</a>'


def _list_item(token: ListItemToken, ctx: "_Context") -> str:
    return f"<li>{escape_html(token.content)}</li>"


def _blockquote(token: BlockquoteToken, ctx: "_Context") -> str:
    return f"<blockquote>{escape_html(token.content)}</blockquote>"


def _hr(token: HrToken, ctx: "_Context") -> str:
    return "<hr>"


def _text(token: TextToken, ctx: "_Context") -> str:
    return escape_html(token.content)


FORMATTERS: dict[type[Token], Callable[..., str]] = {
    TextToken: _text,
    HeadingToken: _heading,
    BoldToken: _bold,
    ItalicToken: _italic,
    StrikethroughToken: _strikethrough,
    CodeToken: _code,
    CodeBlockToken: _code_block,
    LinkToken: _link,
    WikiLinkToken: _wiki_link,
    ListItemToken: _list_item,
    BlockquoteToken: _blockquote,
    HrToken: _hr,
}

_unformatted = set(TOKEN_TYPES) - set(FORMATTERS)
if _unformatted:
    raise RuntimeError(f"no formatter for token types: {sorted(t.type for t in _unformatted)}")


class _Context:
    def __init__(self, titles: TitleMap | None, link_base: str):
        self.titles: TitleMap = titles or {}
        self.link_base = link_base.rstrip("/")


class _Paragraph:
    """
    Collects one run of inline tokens between block tokens. Only a run
    holding plain text becomes a paragraph; formatted or raw spans alone
    are emitted bare.
    """

    def __init__(self) -> None:
        self.parts: list[str] = []
        self.has_content = False

    def add(self, html: str, content: bool) -> None:
        self.parts.append(html)
        self.has_content = self.has_content or content

    def flush(self, out: list[str]) -> None:
        if not self.parts:
            return
        body = "".join(self.parts)
        out.append(f"<p>{body}</p>" if self.has_content else body)
        self.parts = []
        self.has_content = False


def render(
    tokens: list[Token],
    cursor: int = NO_CURSOR,
    titles: TitleMap | None = None,
    link_base: str = DEFAULT_LINK_BASE,
) -> str:
    """
    Render ``tokens`` to an HTML fragment.

    Args:
        tokens: Output of ``tokenize``
        cursor: Caret offset into the tokenized text; -1 for no caret
        titles: Optional entry id -> title map for wiki-link labels
        link_base: Path prefix for wiki-link hrefs

    Returns:
        HTML fragment; tokens under the caret appear as escaped raw markup
    """
    ctx = _Context(titles, link_base)
    out: list[str] = []
    paragraph = _Paragraph()

    for token in tokens:
        raw_mode = cursor_touches(token, cursor)
        if token.block:
            paragraph.flush(out)
            out.append(escape_html(token.raw) if raw_mode else FORMATTERS[type(token)](token, ctx))
        elif isinstance(token, TextToken):
            paragraph.add(_text(token, ctx), bool(token.content.strip()))
        else:
            html = escape_html(token.raw) if raw_mode else FORMATTERS[type(token)](token, ctx)
            paragraph.add(html, False)

    paragraph.flush(out)
    return "".join(out)


def parse_markdown(
    text: str,
    cursor: int = NO_CURSOR,
    titles: TitleMap | None = None,
    link_base: str = DEFAULT_LINK_BASE,
) -> RenderedOutput:
    """Tokenize and render ``text`` in one call."""
    tokens = tokenize(text)
    return RenderedOutput(tokens=tokens, html=render(tokens, cursor, titles, link_base))
