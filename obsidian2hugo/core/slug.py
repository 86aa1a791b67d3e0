"""Slug generation for post identifiers and heading anchors."""

import re

_DISALLOWED = re.compile("[^A-Za-z0-9_\u00C0-\u024F\u4e00-\u9fff-]")


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated slug.

    Latin extended and CJK characters are kept so that non-English note
    names still produce readable URLs.
    """
    text = text.strip().lower()
    text = re.sub(r"\s+", "-", text)
    text = _DISALLOWED.sub("", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def title_from_filename(name: str) -> str:
    """Turn a note file name into a readable title."""
    stem = re.sub(r"\.md$", "", name, flags=re.IGNORECASE)
    return re.sub(r"[-_]", " ", stem).strip()
