import logging
from collections import defaultdict
from typing import Iterable

from ..core.model import EntryId, Link
from ..core.ports import Index
from ..core.store import EntryStore
from ..markdown.wikilinks import find_wiki_links

logger = logging.getLogger(__name__)


class InMemoryIndex(Index):
    """Dict-backed reverse index over the store; rebuilt from scratch on demand."""

    def __init__(self, store: EntryStore):
        self.store = store
        self._links_out: dict[str, list[Link]] = defaultdict(list)
        self._links_in: dict[str, list[Link]] = defaultdict(list)
        self._titles: dict[str, str] = {}
        self._tags: dict[str, set[str]] = defaultdict(set)

    def rebuild(self) -> None:
        self._links_out.clear()
        self._links_in.clear()
        self._titles.clear()
        self._tags.clear()
        for eid in self.store.list_ids():
            try:
                entry = self.store.get(eid)
            except Exception as e:
                logger.warning("skipping entry %s: %s", eid, e)
                continue
            if not entry:
                continue
            links = find_wiki_links(entry.content, eid)
            self._links_out[eid] = links
            for link in links:
                self._links_in[link.target].append(link)
            if entry.title:
                self._titles[eid] = entry.title
            for tag in entry.tags:
                self._tags[tag].add(eid)

    def links_out(self, id: str) -> list[Link]:
        return list(self._links_out.get(id, []))

    def links_in(self, id: str) -> list[Link]:
        return list(self._links_in.get(id, []))

    def backlinks(self, id: str) -> list[EntryId]:
        return sorted({link.source for link in self._links_in.get(id, [])})

    def titles(self, ids: Iterable[EntryId]) -> dict[EntryId, str]:
        return {i: self._titles[i] for i in ids if i in self._titles}

    def entries_with_tag(self, tag: str) -> list[EntryId]:
        return sorted(self._tags.get(tag, set()))
