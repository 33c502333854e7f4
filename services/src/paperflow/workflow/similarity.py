"""Text similarity metrics used as consistency evidence."""

from __future__ import annotations

import re
from collections import Counter

from .normalization import normalize

_SENTENCE_SPLIT_RE = re.compile(r"[.]")
_SYMBOL_RE = re.compile(r"[^a-z0-9\s]")
_NUMBER_RE = re.compile(r"\b\d+\b")
_WHITESPACE_RE = re.compile(r"\s+")

DEFAULT_MIN_SENTENCE_WORDS = 20


def _bigrams(text: str) -> Counter[str]:
    return Counter(text[index : index + 2] for index in range(len(text) - 1))


def dice_coefficient(first: str, second: str) -> float:
    """Return the Dice coefficient of the character bigrams of two strings.

    Whitespace is ignored. Identical strings score ``1.0``; strings shorter
    than two characters cannot form bigrams and score ``0.0`` unless identical.
    """

    left = _WHITESPACE_RE.sub("", first)
    right = _WHITESPACE_RE.sub("", second)
    if left == right:
        return 1.0 if left else 0.0
    if len(left) < 2 or len(right) < 2:
        return 0.0

    left_bigrams = _bigrams(left)
    right_bigrams = _bigrams(right)
    overlap = sum((left_bigrams & right_bigrams).values())
    return (2.0 * overlap) / ((len(left) - 1) + (len(right) - 1))


def score(first: str | None, second: str | None) -> float:
    """Score the similarity of two texts as a percentage in ``[0, 100]``.

    Either text being empty after normalisation yields exactly ``0.0``.
    """

    left = normalize(first)
    right = normalize(second)
    if not left or not right:
        return 0.0
    return round(dice_coefficient(left, right) * 100.0, 2)


def _aggressive_normalize(text: str) -> str:
    text = _SYMBOL_RE.sub(" ", text.lower())
    text = _NUMBER_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def _long_sentences(text: str, min_words: int) -> list[str]:
    sentences = (_aggressive_normalize(chunk) for chunk in _SENTENCE_SPLIT_RE.split(text))
    return [sentence for sentence in sentences if sentence and len(sentence.split(" ")) >= min_words]


def sentence_coverage(
    source: str | None,
    target: str | None,
    *,
    min_words: int = DEFAULT_MIN_SENTENCE_WORDS,
) -> float:
    """Percentage of long ``source`` sentences found verbatim in ``target``.

    Short sentences (titles, headings, boilerplate) are skipped. Returns
    ``0.0`` when ``source`` has no qualifying sentence or either side is empty.
    """

    left = normalize(source)
    right = normalize(target)
    if not left or not right:
        return 0.0

    sentences = _long_sentences(left, min_words)
    if not sentences:
        return 0.0

    haystack = _aggressive_normalize(right)
    matched = sum(1 for sentence in sentences if sentence in haystack)
    return round(matched / len(sentences) * 100.0, 2)


__all__ = [
    "DEFAULT_MIN_SENTENCE_WORDS",
    "dice_coefficient",
    "score",
    "sentence_coverage",
]
