from __future__ import annotations
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, ClassVar

EntryId = str


@dataclass(frozen=True)
class Token:
    """
    A typed span of source text. Offsets are str indices into the text that
    was tokenized; ``raw`` is exactly ``text[start:end]``.
    """

    type: ClassVar[str] = ""
    block: ClassVar[bool] = False

    start: int
    end: int
    raw: str
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, **asdict(self)}


@dataclass(frozen=True)
class TextToken(Token):
    type: ClassVar[str] = "text"


@dataclass(frozen=True)
class HeadingToken(Token):
    type: ClassVar[str] = "heading"
    block: ClassVar[bool] = True

    level: int


@dataclass(frozen=True)
class BoldToken(Token):
    type: ClassVar[str] = "bold"


@dataclass(frozen=True)
class ItalicToken(Token):
    type: ClassVar[str] = "italic"


@dataclass(frozen=True)
class StrikethroughToken(Token):
    type: ClassVar[str] = "strikethrough"


@dataclass(frozen=True)
class CodeToken(Token):
    type: ClassVar[str] = "code"


@dataclass(frozen=True)
class CodeBlockToken(Token):
    type: ClassVar[str] = "code-block"
    block: ClassVar[bool] = True

    language: str


@dataclass(frozen=True)
class LinkToken(Token):
    type: ClassVar[str] = "link"

    href: str


@dataclass(frozen=True)
class WikiLinkToken(Token):
    type: ClassVar[str] = "wiki-link"

    entry_id: EntryId
    display: str | None = None  # "[[id|Display]]"; None for a bare "[[id]]"


@dataclass(frozen=True)
class ListItemToken(Token):
    type: ClassVar[str] = "list-item"
    block: ClassVar[bool] = True

    ordered: bool = False


@dataclass(frozen=True)
class BlockquoteToken(Token):
    type: ClassVar[str] = "blockquote"
    block: ClassVar[bool] = True


@dataclass(frozen=True)
class HrToken(Token):
    type: ClassVar[str] = "hr"
    block: ClassVar[bool] = True


TOKEN_TYPES: tuple[type[Token], ...] = (
    TextToken,
    HeadingToken,
    BoldToken,
    ItalicToken,
    StrikethroughToken,
    CodeToken,
    CodeBlockToken,
    LinkToken,
    WikiLinkToken,
    ListItemToken,
    BlockquoteToken,
    HrToken,
)


@dataclass
class TagExtractionResult:
    tags: list[str] = field(default_factory=list)
    cleaned_title: str = ""


@dataclass
class RenderedOutput:
    tokens: list[Token]
    html: str


@dataclass(frozen=True)
class EditResult:
    text: str
    cursor: int


@dataclass(frozen=True)
class Range:
    start: int  # str offsets into the entry body
    end: int


@dataclass(frozen=True)
class Link:
    source: EntryId
    target: EntryId
    display: str | None = None
    range: Range | None = None


@dataclass
class Entry:
    id: EntryId
    title: str
    content: str = ""
    tags: list[str] = field(default_factory=list)
    created: datetime | None = None
    updated: datetime | None = None
