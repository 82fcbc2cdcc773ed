"""Hashtag extraction from entry titles."""

import re

from ..core.model import TagExtractionResult

TAG_RE = re.compile(r"#([A-Za-z0-9_]+)")
_SPACES = re.compile(r"\s+")


def extract_tags_from_title(title: str) -> TagExtractionResult:
    """Split ``title`` into its ``#tags`` and the title text left without them.

    Tags keep their case and first-seen order; a repeated tag is kept once.
    A ``#`` that is not directly followed by a word character is ordinary
    title text.

        >>> extract_tags_from_title("Meeting notes #work #urgent #team")
        TagExtractionResult(tags=['work', 'urgent', 'team'], cleaned_title='Meeting notes')
    """
    tags: list[str] = []
    for m in TAG_RE.finditer(title):
        if m.group(1) not in tags:
            tags.append(m.group(1))

    cleaned = _SPACES.sub(" ", TAG_RE.sub("", title)).strip()
    return TagExtractionResult(tags=tags, cleaned_title=cleaned)
