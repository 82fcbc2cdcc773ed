"""Wiki-link reference scanning over raw entry text."""

from ..core.model import EntryId, Link, Range
from .tokenizer import WIKI_LINK_RE


def extract_entry_ids_from_content(text: str) -> set[EntryId]:
    """Ids referenced by ``[[id]]`` or ``[[id|Display]]`` anywhere in ``text``."""
    ids: set[EntryId] = set()
    for m in WIKI_LINK_RE.finditer(text):
        entry_id = m.group(1).strip()
        if entry_id:
            ids.add(entry_id)
    return ids


def find_wiki_links(text: str, source: EntryId) -> list[Link]:
    """Outgoing links of entry ``source`` with their offsets, in text order."""
    links = []
    for m in WIKI_LINK_RE.finditer(text):
        entry_id = m.group(1).strip()
        if not entry_id:
            continue
        display = (m.group(2) or "").strip() or None
        links.append(
            Link(
                source=source,
                target=entry_id,
                display=display,
                range=Range(m.start(), m.end()),
            )
        )
    return links
