"""
Utility Functions

Helpers used throughout the package.

Modules:
    text: Literal escaping, slug normalization, URI-safe encoding
"""

from ledger_kg.utils.text import (
    escape_literal,
    slugify,
    strip_diacritics,
    to_uri_safe,
    unescape_literal,
)

__all__ = [
    "escape_literal",
    "unescape_literal",
    "slugify",
    "strip_diacritics",
    "to_uri_safe",
]
