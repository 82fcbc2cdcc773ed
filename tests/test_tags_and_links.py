"""Tests for title tag extraction and wiki-link scanning."""

from marginalia.core.model import Link, Range
from marginalia.markdown import (
    extract_entry_ids_from_content,
    extract_tags_from_title,
    find_wiki_links,
)


def test_extract_tags_from_title():
    result = extract_tags_from_title("Meeting notes #work #urgent #team")
    assert result.tags == ["work", "urgent", "team"]
    assert result.cleaned_title == "Meeting notes"


def test_empty_title():
    result = extract_tags_from_title("")
    assert result.tags == []
    assert result.cleaned_title == ""


def test_title_of_only_tags():
    result = extract_tags_from_title("#tag1 #tag2 #tag3")
    assert result.tags == ["tag1", "tag2", "tag3"]
    assert result.cleaned_title == ""


def test_tags_in_the_middle_collapse_spaces():
    result = extract_tags_from_title("Plan #q3 for  launch")
    assert result.tags == ["q3"]
    assert result.cleaned_title == "Plan for launch"


def test_duplicate_tags_kept_once_in_first_order():
    result = extract_tags_from_title("#b idea #a #b")
    assert result.tags == ["b", "a"]
    assert result.cleaned_title == "idea"


def test_tags_keep_case():
    assert extract_tags_from_title("x #Work").tags == ["Work"]


def test_hash_without_word_is_title_text():
    result = extract_tags_from_title("C# rocks")
    assert result.tags == []
    assert result.cleaned_title == "C# rocks"


def test_title_without_tags():
    result = extract_tags_from_title("  Just a title ")
    assert result.tags == []
    assert result.cleaned_title == "Just a title"


def test_cleaned_title_has_no_tags():
    result = extract_tags_from_title("#one two #three_3 four")
    for tag in result.tags:
        assert f"#{tag}" not in result.cleaned_title


def test_extract_entry_ids():
    text = "See [[a1]] and [[b2|Bee]] then [[a1]] again, not [c](d)."
    assert extract_entry_ids_from_content(text) == {"a1", "b2"}


def test_extract_entry_ids_empty():
    assert extract_entry_ids_from_content("no links here") == set()


def test_find_wiki_links_in_order():
    text = "[[a1]] x [[b2|Bee]]"
    assert find_wiki_links(text, "src") == [
        Link(source="src", target="a1", display=None, range=Range(0, 6)),
        Link(source="src", target="b2", display="Bee", range=Range(9, 19)),
    ]
