from ..core.model import Entry, RenderedOutput
from ..core.ports import Renderer, TitleSource
from ..markdown.renderer import DEFAULT_LINK_BASE, NO_CURSOR, parse_markdown
from ..markdown.wikilinks import extract_entry_ids_from_content


class EntryRenderer(Renderer):
    """
    Renders stored entries: resolves the titles of every referenced entry
    before the (pure) render call, never during it.
    """

    def __init__(self, titles: TitleSource, link_base: str = DEFAULT_LINK_BASE):
        self.titles = titles
        self.link_base = link_base

    def render_text(
        self, text: str, cursor: int = NO_CURSOR, link_base: str | None = None
    ) -> RenderedOutput:
        title_map = self.titles.titles(sorted(extract_entry_ids_from_content(text)))
        return parse_markdown(text, cursor, title_map, link_base or self.link_base)

    def render_html(
        self, entry: Entry, cursor: int = NO_CURSOR, link_base: str | None = None
    ) -> str:
        return self.render_text(entry.content, cursor, link_base).html
