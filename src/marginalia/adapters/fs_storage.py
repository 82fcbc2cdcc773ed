from pathlib import Path
from typing import Iterable
from ..core.ports import StorageStrategy


class FsStorage(StorageStrategy):
    def __init__(self, root: Path):
        self.root = root

    def path(self, id: str) -> Path:
        return self.root / f"{id}.md"

    def read_raw(self, id: str) -> str | None:
        p = self.path(id)
        return p.read_text(encoding="utf-8") if p.exists() else None

    def write_raw(self, id: str, contents: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self.path(id).write_text(contents, encoding="utf-8")

    def delete_raw(self, id: str) -> None:
        p = self.path(id)
        if p.exists():
            p.unlink()

    def list_all_ids(self) -> Iterable[str]:
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.md") if not p.name.startswith("."))

    def stat(self, id: str) -> tuple[int, int] | None:
        """(mtime_ns, size_bytes) of the entry file, or None when absent."""
        p = self.path(id)
        if not p.exists():
            return None
        st = p.stat()
        return st.st_mtime_ns, st.st_size
