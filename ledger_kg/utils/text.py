"""
Text Processing Utilities

Literal escaping and slug normalization shared by the codec and the
identity resolver.
"""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import quote

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t"}
_ESCAPE_SEQUENCE = re.compile(r"\\(.)", re.DOTALL)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def escape_literal(value: object) -> str:
    """
    Escape a value for use inside a double-quoted literal.

    Backslash, double quote, newline, carriage return and tab are escaped.
    ``None`` escapes to the empty string.
    """
    if value is None:
        return ""
    return "".join(_ESCAPES.get(ch, ch) for ch in str(value))


def unescape_literal(text: str) -> str:
    """Reverse escape_literal in a single left-to-right pass."""
    return _ESCAPE_SEQUENCE.sub(
        lambda m: _UNESCAPES.get(m.group(1), m.group(0)), text
    )


def strip_diacritics(text: str) -> str:
    """Decompose (NFD) and drop combining marks."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(text: str, *, fold_diacritics: bool = True) -> str:
    """
    Lowercase, collapse runs of non-alphanumerics to ``_`` and trim separators.

    Returns an empty string when nothing alphanumeric remains.
    """
    text = str(text).strip().lower()
    if fold_diacritics:
        text = strip_diacritics(text)
    return _NON_ALNUM.sub("_", text).strip("_")


def to_uri_safe(value: object) -> str:
    """Percent-encode a value for use as a URI path segment (whitespace -> ``_``)."""
    text = re.sub(r"\s+", "_", str(value).strip())
    return quote(text, safe="-_.!~*'()")
