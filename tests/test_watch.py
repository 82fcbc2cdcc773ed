"""Tests for watch mode event batching."""

from pathlib import Path

from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from marginalia.watch import DebounceHandler


class Recorder:
    def __init__(self):
        self.batches = []

    def __call__(self, changed, deleted):
        self.batches.append((changed, deleted))


def test_entry_id_filters_files():
    assert DebounceHandler.entry_id(Path("/s/abc123.md")) == "abc123"
    assert DebounceHandler.entry_id(Path("/s/.abc123.md")) is None
    assert DebounceHandler.entry_id(Path("/s/abc123.md~")) is None
    assert DebounceHandler.entry_id(Path("/s/abc123.md.swp")) is None
    assert DebounceHandler.entry_id(Path("/s/notes.txt")) is None


def test_events_are_batched():
    recorder = Recorder()
    handler = DebounceHandler(recorder, debounce_ms=0)

    handler.on_created(FileCreatedEvent("/s/a.md"))
    handler.on_modified(FileModifiedEvent("/s/b.md"))
    handler.on_deleted(FileDeletedEvent("/s/c.md"))
    handler.on_created(DirCreatedEvent("/s/sub"))
    handler.check_and_flush()

    assert recorder.batches == [({"a", "b"}, {"c"})]
    assert not handler.changed
    assert not handler.deleted


def test_recreate_after_delete_counts_as_change():
    recorder = Recorder()
    handler = DebounceHandler(recorder, debounce_ms=0)

    handler.on_deleted(FileDeletedEvent("/s/a.md"))
    handler.on_created(FileCreatedEvent("/s/a.md"))
    handler.flush()

    assert recorder.batches == [({"a"}, set())]


def test_move_deletes_source_and_changes_dest():
    recorder = Recorder()
    handler = DebounceHandler(recorder, debounce_ms=0)

    handler.on_moved(FileMovedEvent("/s/.tmp123", "/s/a.md"))
    handler.on_moved(FileMovedEvent("/s/b.md", "/s/c.md"))
    handler.flush()

    assert recorder.batches == [({"a", "c"}, {"b"})]


def test_debounce_window_holds_batch():
    recorder = Recorder()
    handler = DebounceHandler(recorder, debounce_ms=60_000)

    handler.on_modified(FileModifiedEvent("/s/a.md"))
    handler.check_and_flush()
    assert recorder.batches == []

    handler.flush()
    assert recorder.batches == [({"a"}, set())]


def test_flush_without_events_is_noop():
    recorder = Recorder()
    handler = DebounceHandler(recorder)
    handler.flush()
    assert recorder.batches == []
