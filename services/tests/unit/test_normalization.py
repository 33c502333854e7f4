"""Tests for editor and document text canonicalisation."""

from __future__ import annotations

from hypothesis import given, strategies as st

from paperflow.workflow.normalization import count_words, normalize, strip_markup


def test_normalize_lowercases_and_collapses_whitespace() -> None:
    assert normalize("  Hello\n\tWORLD   again ") == "hello world again"


def test_normalize_handles_missing_text() -> None:
    assert normalize(None) == ""
    assert normalize("   \n ") == ""


@given(
    st.text(
        alphabet=st.one_of(
            st.characters(whitelist_categories=("Lu", "Ll", "Lt", "Nd", "Po", "Zs")),
            st.sampled_from(["\t", "\n", "\r", " "]),
        ),
        max_size=300,
    )
)
def test_normalize_is_idempotent(text: str) -> None:
    once = normalize(text)

    assert normalize(once) == once


def test_strip_markup_keeps_block_boundaries() -> None:
    text = normalize(strip_markup("<p>one</p><p>two</p>"))

    assert text == "one two"


def test_strip_markup_drops_scripts_and_comments() -> None:
    markup = "<p>Body</p><script>alert('x')</script><!-- note --><style>p{}</style>"

    assert normalize(strip_markup(markup)) == "body"


def test_strip_markup_decodes_entities() -> None:
    assert normalize(strip_markup("<p>a &lt;b&gt; &amp; c</p>")) == "a <b> & c"


def test_strip_markup_ignores_angle_brackets_in_attributes() -> None:
    markup = '<p title="a > b" data-note=\'x>y\'>Hello <a href="/q?a>b">world</a></p>'

    assert normalize(strip_markup(markup)) == "hello world"


def test_count_words_ignores_markup() -> None:
    assert count_words("<h1>Title</h1><p>Three more <b>words</b></p>") == 4
    assert count_words("") == 0
    assert count_words("<p></p>") == 0
