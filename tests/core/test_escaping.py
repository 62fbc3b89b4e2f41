"""Tests for the markup escape codec."""

from __future__ import annotations

import pytest

from anisuggest.core.escaping import escape, reescape, unescape


class TestEscape:
    """Test escape()."""

    def test_escapes_all_five_characters(self) -> None:
        assert escape("""<a href="x">Tom & Jerry's</a>""") == (
            "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&apos;s&lt;/a&gt;"
        )

    def test_no_op_without_significant_characters(self) -> None:
        text = "Cowboy Bebop"
        assert escape(text) is text

    def test_none_and_empty(self) -> None:
        assert escape(None) == ""
        assert escape("") == ""


class TestUnescape:
    """Test unescape()."""

    @pytest.mark.parametrize(
        "text",
        [
            "Tom & Jerry",
            "<match>",
            "\"quoted\" and 'single'",
            "&&<<>>''\"\"",
            "plain text",
        ],
    )
    def test_inverts_escape(self, text: str) -> None:
        assert unescape(escape(text)) == text

    def test_ampersand_entities_are_not_double_decoded(self) -> None:
        assert unescape("&amp;lt;") == "&lt;"


class TestReescape:
    """Test reescape()."""

    def test_folds_mixed_input_into_one_form(self) -> None:
        assert reescape("Tom &amp; Jerry & <friends>") == "Tom &amp; Jerry &amp; &lt;friends&gt;"

    def test_idempotent(self) -> None:
        once = reescape("a & b &amp; c < d")
        assert reescape(once) == once
