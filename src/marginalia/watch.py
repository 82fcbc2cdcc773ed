"""Watch mode - keeps the backlink index in step with the entry directory."""

import json
import logging
import signal
import time
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .adapters.sqlite_index import SQLiteIndex

logger = logging.getLogger(__name__)

BatchCallback = Callable[[set[str], set[str]], None]


class DebounceHandler(FileSystemEventHandler):
    """Collects entry ids from file events and hands them over in batches."""

    def __init__(self, on_batch: BatchCallback, debounce_ms: int = 150):
        super().__init__()
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms

        self.changed: set[str] = set()
        self.deleted: set[str] = set()
        self.last_event_time = 0.0

    @staticmethod
    def entry_id(path: Path) -> str | None:
        """Entry id for ``path``, or None for hidden, temp and non-entry files."""
        name = path.name
        if name.startswith(".") or name.endswith("~") or name.endswith(".swp"):
            return None
        if not name.endswith(".md"):
            return None
        return path.stem

    def _record(self, event: FileSystemEvent, deleted: bool) -> None:
        if event.is_directory:
            return
        entry_id = self.entry_id(Path(str(event.src_path)))
        if not entry_id:
            return
        if deleted:
            self.changed.discard(entry_id)
            self.deleted.add(entry_id)
        else:
            self.deleted.discard(entry_id)
            self.changed.add(entry_id)
        self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        self._record(event, deleted=False)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._record(event, deleted=False)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._record(event, deleted=True)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._record(event, deleted=True)
        dest = getattr(event, "dest_path", None)
        if dest:
            entry_id = self.entry_id(Path(str(dest)))
            if entry_id:
                self.deleted.discard(entry_id)
                self.changed.add(entry_id)

    def check_and_flush(self) -> None:
        """Flush once the debounce window has passed since the last event."""
        if not (self.changed or self.deleted):
            return
        if (time.time() - self.last_event_time) * 1000 >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        if not (self.changed or self.deleted):
            return
        changed, deleted = set(self.changed), set(self.deleted)
        self.changed.clear()
        self.deleted.clear()
        self.on_batch(changed, deleted)


def watch_store(
    store_path: Path,
    index: SQLiteIndex,
    debounce_ms: int = 150,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch the entry directory and update the index incrementally.

    Returns:
        Exit code
    """
    if not store_path.exists():
        logger.error("store not found: %s", store_path)
        return 1

    counts = index.rebuild()
    if not quiet and not json_output:
        print(f"Index ready: +{counts['inserted']} ~{counts['updated']} -{counts['removed']}")

    running = True

    def handle_batch(changed: set[str], deleted: set[str]) -> None:
        start_time = time.time()
        try:
            result = index.update_entries(changed, deleted)
        except Exception as e:
            logger.exception("index update failed")
            if json_output:
                print(json.dumps({"type": "error", "message": str(e)}), flush=True)
            return

        duration_ms = int((time.time() - start_time) * 1000)
        if json_output:
            event = {
                "type": "batch",
                "changed": sorted(changed),
                "deleted": sorted(deleted),
                "duration_ms": duration_ms,
            }
            print(json.dumps(event), flush=True)
        elif not quiet:
            print(
                f"Indexed: +{result['inserted']} ~{result['updated']} "
                f"-{result['removed']} ({duration_ms}ms)",
                flush=True,
            )

    def stop(signum: int, frame: Any) -> None:
        nonlocal running
        running = False

    signal.signal(signal.SIGINT, stop)
    signal.signal(signal.SIGTERM, stop)

    handler = DebounceHandler(handle_batch, debounce_ms)
    observer = Observer()
    observer.schedule(handler, str(store_path), recursive=False)

    if not quiet and not json_output:
        print(f"Watching {store_path} (debounce: {debounce_ms}ms)", flush=True)

    observer.start()
    try:
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)
    return 0
