import io
import re
from datetime import datetime
from typing import Any

import yaml

from ..core.model import Entry
from ..core.ports import EntryCodec

_FM = re.compile(r"\A---[ \t]*\n(.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


class YamlEntryCodec(EntryCodec):
    """
    ``---`` YAML front matter (title, tags, created, updated) followed by the
    raw entry body. Files without front matter decode as an untitled entry.
    """

    def decode_file(self, text: str, id: str) -> Entry:
        m = _FM.match(text)
        if not m:
            return Entry(id=id, title="", content=text)
        fm = yaml.safe_load(io.StringIO(m.group(1))) or {}
        if not isinstance(fm, dict):
            raise ValueError(f"Front matter of {id} is not a mapping")
        tags = fm.get("tags") or []
        return Entry(
            id=id,
            title=str(fm.get("title") or ""),
            content=text[m.end():],
            tags=[str(t) for t in tags] if isinstance(tags, list) else [str(tags)],
            created=_as_datetime(fm.get("created")),
            updated=_as_datetime(fm.get("updated")),
        )

    def encode_file(self, entry: Entry) -> str:
        meta: dict[str, Any] = {"id": entry.id, "title": entry.title, "tags": list(entry.tags)}
        if entry.created:
            meta["created"] = entry.created.isoformat()
        if entry.updated:
            meta["updated"] = entry.updated.isoformat()
        buf = io.StringIO()
        yaml.safe_dump(meta, buf, sort_keys=False, allow_unicode=True)
        return f"---\n{buf.getvalue()}---\n{entry.content}"
