from typing import Iterable, Protocol
from .model import Entry, EntryId, Link


class StorageStrategy(Protocol):
    """
    Flat store: one directory, files named <id>.md
    """

    def read_raw(self, id: EntryId) -> str | None:
        pass

    def write_raw(self, id: EntryId, contents: str) -> None:
        pass

    def delete_raw(self, id: EntryId) -> None:
        pass

    def list_all_ids(self) -> Iterable[EntryId]:
        pass

    def stat(self, id: EntryId) -> tuple[int, int] | None:
        """(mtime_ns, size_bytes) used for change detection."""
        pass


class EntryCodec(Protocol):
    """
    Round-trip an entry (title, tags, timestamps, body) through one file.
    """

    def decode_file(self, text: str, id: EntryId) -> Entry:
        pass

    def encode_file(self, entry: Entry) -> str:
        pass


class IdGenerator(Protocol):
    def new_id(self) -> EntryId:
        pass


class TitleSource(Protocol):
    """
    Resolve entry ids to titles for wiki-link labels. Ids that cannot be
    resolved are simply absent from the result.
    """

    def titles(self, ids: Iterable[EntryId]) -> dict[EntryId, str]:
        pass


class Index(TitleSource, Protocol):
    """
    Reverse index over extracted wiki-link ids; safe to rebuild at any time.
    """

    def rebuild(self) -> None:
        pass

    def links_out(self, id: EntryId) -> list[Link]:
        pass

    def links_in(self, id: EntryId) -> list[Link]:
        pass

    def backlinks(self, id: EntryId) -> list[EntryId]:
        pass

    def entries_with_tag(self, tag: str) -> list[EntryId]:
        pass


class Renderer(Protocol):
    def render_html(self, entry: Entry, cursor: int = -1) -> str:
        pass
