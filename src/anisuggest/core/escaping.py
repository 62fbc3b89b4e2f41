"""Markup escaping for suggestion descriptions.

Suggestion descriptions are XML-like markup, so names coming from the
remote site must have the five markup-significant characters escaped.
Names sometimes arrive already (partially) escaped; ``reescape`` folds such
a mix into one consistently escaped form.
"""

from __future__ import annotations

import re

_SIGNIFICANT = re.compile(r"[\"'<>&]")

# Order matters: '&' first on the way in, last on the way out
_ESCAPES: tuple[tuple[str, str], ...] = (
    ("&", "&amp;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
    ("<", "&lt;"),
    (">", "&gt;"),
)


def escape(text: str | None) -> str:
    """Replace ``& " ' < >`` with their named entities.

    Returns the input unchanged when none of them is present.
    """
    if not text or not _SIGNIFICANT.search(text):
        return text or ""
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def unescape(text: str | None) -> str:
    """Exact inverse of :func:`escape`."""
    if not text or not _SIGNIFICANT.search(text):
        return text or ""
    for char, entity in reversed(_ESCAPES):
        text = text.replace(entity, char)
    return text


def reescape(text: str | None) -> str:
    """Normalize a mix of literal and escaped characters to escaped form."""
    return escape(unescape(text))


__all__ = ["escape", "reescape", "unescape"]
