"""Markup core: tokenizer, cursor-aware renderer, tag and wiki-link scanners."""

from .renderer import cursor_touches, parse_markdown, render, wiki_link_base
from .tags import extract_tags_from_title
from .tokenizer import MarkdownTokenizer, tokenize
from .wikilinks import extract_entry_ids_from_content, find_wiki_links

__all__ = [
    "MarkdownTokenizer",
    "tokenize",
    "render",
    "parse_markdown",
    "cursor_touches",
    "wiki_link_base",
    "extract_tags_from_title",
    "extract_entry_ids_from_content",
    "find_wiki_links",
]
