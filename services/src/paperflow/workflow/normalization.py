"""Canonicalise editor HTML and extracted document text for comparison."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

_WHITESPACE_RE = re.compile(r"\s+")
_NON_TEXT_TAGS = ("script", "style", "template", "noscript")


def normalize(text: str | None) -> str:
    """Lower-case ``text`` and collapse every whitespace run to one space."""

    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text.lower()).strip()


def strip_markup(markup: str | None) -> str:
    """Return the visible text of editor HTML with entities decoded.

    Text nodes are joined with a space so ``<p>one</p><p>two</p>`` never
    collapses into ``onetwo``. Comments and script or style bodies are dropped.
    """

    if not markup:
        return ""
    soup = BeautifulSoup(markup, "html.parser")
    for element in soup(list(_NON_TEXT_TAGS)):
        element.decompose()
    return soup.get_text(separator=" ")


def count_words(markup: str | None) -> int:
    """Count words in editor HTML once markup is removed."""

    normalized = normalize(strip_markup(markup))
    if not normalized:
        return 0
    return len(normalized.split(" "))


__all__ = ["count_words", "normalize", "strip_markup"]
