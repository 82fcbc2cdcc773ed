import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from ..markdown.tags import extract_tags_from_title
from .model import Entry, EntryId
from .ports import EntryCodec, IdGenerator, StorageStrategy

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 500
MAX_TAGS = 20
MAX_TAG_LENGTH = 50


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def split_title(title: str) -> tuple[str, list[str]]:
    """
    Run a user-typed title through tag extraction and validate the parts.

    Raises:
        ValueError: empty title, too long, too many tags or an oversized tag
    """
    if not title.strip():
        raise ValueError("Entry title cannot be empty")

    result = extract_tags_from_title(title)
    if len(result.cleaned_title) > MAX_TITLE_LENGTH:
        raise ValueError(f"Title must be {MAX_TITLE_LENGTH} characters or less")
    if len(result.tags) > MAX_TAGS:
        raise ValueError(f"Maximum {MAX_TAGS} tags per entry")
    for tag in result.tags:
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"Tag must be {MAX_TAG_LENGTH} characters or less: {tag}")
    return result.cleaned_title, result.tags


class EntryStore:
    """System of record: raw entry text plus the tags lifted from its title."""

    def __init__(
        self, storage: StorageStrategy, codec: EntryCodec, idgen: IdGenerator
    ):
        self.storage = storage
        self.codec = codec
        self.idgen = idgen

    def get(self, id: EntryId) -> Entry | None:
        raw = self.storage.read_raw(id)
        if raw is None:
            return None
        return self.codec.decode_file(raw, id)

    def put(self, entry: Entry) -> None:
        self.storage.write_raw(entry.id, self.codec.encode_file(entry))

    def create(self, title: str, content: str = "") -> Entry:
        cleaned, tags = split_title(title)
        now = _now()
        entry = Entry(
            id=self.idgen.new_id(),
            title=cleaned,
            content=content,
            tags=tags,
            created=now,
            updated=now,
        )
        self.put(entry)
        logger.debug("created entry %s with tags %s", entry.id, tags)
        return entry

    def update(
        self, id: EntryId, title: str | None = None, content: str | None = None
    ) -> Entry | None:
        entry = self.get(id)
        if entry is None:
            return None
        if title is not None:
            entry.title, entry.tags = split_title(title)
        if content is not None:
            entry.content = content
        entry.updated = _now()
        self.put(entry)
        return entry

    def delete(self, id: EntryId) -> None:
        self.storage.delete_raw(id)

    def list_ids(self) -> Iterable[EntryId]:
        return self.storage.list_all_ids()

    def search(self, term: str = "") -> list[Entry]:
        """
        Entries whose title contains ``term`` (case-insensitive), newest
        first. A blank term matches every entry.
        """
        needle = term.strip().lower()
        found: list[Entry] = []
        for id in self.list_ids():
            try:
                entry = self.get(id)
            except Exception as e:
                logger.warning("skipping entry %s in search: %s", id, e)
                continue
            if entry is None or needle not in entry.title.lower():
                continue
            found.append(entry)
        found.sort(key=lambda e: e.created.timestamp() if e.created else float("-inf"), reverse=True)
        return found

    def titles(self, ids: Iterable[EntryId]) -> dict[EntryId, str]:
        """
        Title lookup straight from the files. An entry that is missing or
        fails to decode is left out, so its wiki-links show the raw id.
        """
        out: dict[EntryId, str] = {}
        for id in ids:
            try:
                entry = self.get(id)
            except Exception as e:
                logger.warning("failed to load title for entry %s: %s", id, e)
                continue
            if entry is not None and entry.title:
                out[id] = entry.title
        return out
