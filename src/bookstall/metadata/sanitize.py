# ABOUTME: Text cleanup for values that end up as product names and tag labels.
# ABOUTME: Strips markup and control whitespace, and derives URL-safe slugs for tags.

import re
import unicodedata

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_SLUG_STRIP_RE = re.compile(r"[^\w\s-]")
_SLUG_SEPARATOR_RE = re.compile(r"[\s_-]+")


def sanitize_text(value: str) -> str:
    """Clean a single-line text value for storage.

    Removes HTML tags and percent-encoded octets, collapses line breaks,
    tabs and runs of spaces into a single space, and trims the result.
    """
    text = _TAG_RE.sub("", value)
    text = _OCTET_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def slugify(value: str) -> str:
    """Derive a lowercase, hyphen-separated slug from a label.

    Letters outside ASCII are kept (so CJK tags still get a slug), while
    punctuation is dropped. May return an empty string.
    """
    text = unicodedata.normalize("NFKC", sanitize_text(value)).lower()
    text = _SLUG_STRIP_RE.sub("", text)
    text = _SLUG_SEPARATOR_RE.sub("-", text)
    return text.strip("-")
