"""Utility functions for marginalia."""

import html
import re
import unicodedata

_DASHES = str.maketrans({"–": "-", "—": "-", "−": "-"})


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for insertion into HTML text or attribute values."""
    return html.escape(text, quote=True).replace("&#x27;", "&#039;")


def slugify(text: str) -> str:
    """
    Convert a wiki name to the URL-safe slug used in published wiki paths.

    Examples:
        >>> slugify("Reading list")
        'reading-list'
        >>> slugify("Garden – Spring plans")
        'garden-spring-plans'
    """
    text = text.lower().translate(_DASHES)

    # Drop combining marks after NFKD so "Café" becomes "cafe"
    text = unicodedata.normalize("NFKD", text)
    text = "".join(c for c in text if not unicodedata.combining(c))

    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")
