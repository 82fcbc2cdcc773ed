"""Tests for the entry store, YAML codec and storage."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from marginalia.adapters.fs_storage import FsStorage
from marginalia.adapters.idgen import HexId
from marginalia.adapters.yaml_codec import YamlEntryCodec
from marginalia.core.model import Entry
from marginalia.core.store import EntryStore, split_title


@pytest.fixture
def store():
    """Entry store over a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield EntryStore(FsStorage(Path(tmpdir) / "entries"), YamlEntryCodec(), HexId(nbytes=4))


def test_create_lifts_tags_from_title(store):
    entry = store.create("Meeting notes #work #urgent", "Agenda")
    assert entry.title == "Meeting notes"
    assert entry.tags == ["work", "urgent"]
    assert len(entry.id) == 8

    loaded = store.get(entry.id)
    assert loaded is not None
    assert loaded.title == "Meeting notes"
    assert loaded.tags == ["work", "urgent"]
    assert loaded.content == "Agenda"
    assert loaded.created == entry.created


def test_update_title_and_content(store):
    entry = store.create("Draft", "v1")
    updated = store.update(entry.id, title="Final #done", content="v2")
    assert updated is not None
    assert updated.title == "Final"
    assert updated.tags == ["done"]

    loaded = store.get(entry.id)
    assert loaded.content == "v2"
    assert loaded.tags == ["done"]


def test_update_missing_entry_returns_none(store):
    assert store.update("nope", content="x") is None


def test_get_missing_entry_returns_none(store):
    assert store.get("missing") is None


def test_delete_and_list(store):
    a = store.create("A")
    b = store.create("B")
    assert sorted(store.list_ids()) == sorted([a.id, b.id])
    store.delete(a.id)
    assert list(store.list_ids()) == [b.id]


def test_search_matches_title_case_insensitively_newest_first(store):
    store.put(Entry(id="a", title="Weekly Review", created=datetime(2024, 1, 1, tzinfo=timezone.utc)))
    store.put(Entry(id="b", title="review backlog", created=datetime(2024, 2, 1, tzinfo=timezone.utc)))
    store.put(Entry(id="c", title="Shopping", created=datetime(2024, 3, 1, tzinfo=timezone.utc)))

    assert [e.id for e in store.search("REVIEW")] == ["b", "a"]
    assert [e.id for e in store.search("")] == ["c", "b", "a"]
    assert store.search("nothing like it") == []


def test_titles_skip_missing_and_broken(store):
    good = store.create("Good one")
    store.storage.write_raw("broken", "---\n- just\n- a list\n---\nbody")
    assert store.titles([good.id, "broken", "missing"]) == {good.id: "Good one"}


@pytest.mark.parametrize("title,message", [
    ("   ", "cannot be empty"),
    ("x" * 501, "500 characters"),
    ("Many " + " ".join(f"#t{i}" for i in range(21)), "Maximum 20 tags"),
    ("Long #" + "a" * 51, "50 characters"),
])
def test_split_title_validation(title, message):
    with pytest.raises(ValueError, match=message):
        split_title(title)


def test_split_title_at_limits():
    title, tags = split_title("x" * 500 + " " + " ".join(f"#t{i}" for i in range(20)))
    assert len(title) == 500
    assert len(tags) == 20


def test_codec_round_trip():
    codec = YamlEntryCodec()
    when = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    entry = Entry(id="abc", title="Hello", content="# Body\n", tags=["x"], created=when, updated=when)
    decoded = codec.decode_file(codec.encode_file(entry), "abc")
    assert decoded == entry


def test_codec_without_front_matter():
    entry = YamlEntryCodec().decode_file("just text", "abc")
    assert entry.title == ""
    assert entry.content == "just text"


def test_codec_rejects_non_mapping_front_matter():
    with pytest.raises(ValueError):
        YamlEntryCodec().decode_file("---\n- a\n---\nbody", "abc")


def test_fs_storage_skips_hidden_files():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "a.md").write_text("x")
        (root / ".hidden.md").write_text("x")
        (root / "notes.txt").write_text("x")
        storage = FsStorage(root)
        assert list(storage.list_all_ids()) == ["a"]
        assert storage.stat("a")[1] == 1
        assert storage.stat("b") is None
