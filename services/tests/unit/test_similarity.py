"""Tests for similarity scoring and sentence coverage."""

from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from paperflow.workflow.normalization import strip_markup
from paperflow.workflow.similarity import dice_coefficient, score, sentence_coverage

LOREM = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua. Ut enim ad minim veniam, quis nostrud "
    "exercitation ullamco laboris nisi ut aliquip ex ea commodo consequat."
)


def test_identical_texts_score_100() -> None:
    assert score(LOREM, LOREM) == 100.0


def test_whitespace_and_case_do_not_matter() -> None:
    reflowed = LOREM.upper().replace(" ", "\n  ")

    assert score(LOREM, reflowed) == 100.0


def test_lorem_ipsum_with_extra_line_scores_high() -> None:
    editor = f"<p>{LOREM}</p>"
    extracted = f"{LOREM}\nPage 1"

    assert score(strip_markup(editor), extracted) >= 95.0


@pytest.mark.parametrize("empty", ["", "   ", None])
def test_empty_side_scores_zero(empty) -> None:
    assert score(empty, LOREM) == 0.0
    assert score(LOREM, empty) == 0.0


def test_score_is_symmetric_and_bounded() -> None:
    first = "the quick brown fox jumps over the lazy dog"
    second = "a quick brown dog jumps over the lazy fox"

    forward = score(first, second)

    assert forward == score(second, first)
    assert 0.0 < forward < 100.0


def test_unrelated_texts_score_low() -> None:
    assert score("aaaaaaaaaa", "zzzzzzzzzz") == 0.0


def test_dice_coefficient_counts_repeated_bigrams_once_per_occurrence() -> None:
    # "aaa" has bigrams [aa, aa]; "aa" has [aa]; overlap is 1.
    assert dice_coefficient("aaa", "aa") == pytest.approx(2 * 1 / (2 + 1))


def test_dice_coefficient_short_strings() -> None:
    assert dice_coefficient("a", "a") == 1.0
    assert dice_coefficient("a", "b") == 0.0
    assert dice_coefficient("", "") == 0.0


def _sentence(word: str, count: int = 22) -> str:
    return " ".join(f"{word}{index}x" for index in range(count))


def test_sentence_coverage_counts_long_sentences_only() -> None:
    first = _sentence("alpha")
    second = _sentence("beta")
    source = f"Short title. {first}. {second}."
    target = f"{first}. Something else entirely."

    assert sentence_coverage(source, target) == 50.0


def test_sentence_coverage_without_long_sentences_is_zero() -> None:
    assert sentence_coverage("Short. Also short.", "Short. Also short.") == 0.0


def test_sentence_coverage_respects_min_words() -> None:
    text = "one two three four. five six seven eight."

    assert sentence_coverage(text, text, min_words=4) == 100.0


_TEXT = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters=["\x00"]),
    min_size=0,
    max_size=400,
)


@given(_TEXT, _TEXT)
def test_score_is_bounded_and_symmetric(first: str, second: str) -> None:
    forward = score(first, second)

    assert 0.0 <= forward <= 100.0
    assert forward == score(second, first)


@given(
    st.text(
        alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd", "Zs")),
        min_size=1,
        max_size=400,
    ).filter(lambda value: value.strip())
)
def test_text_scores_100_against_itself(text: str) -> None:
    assert score(text, text) == 100.0
