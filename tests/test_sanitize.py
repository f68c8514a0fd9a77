"""Tests for label sanitizing."""

import pytest

from drawio_sql.parsers.sanitize import html_to_text, sanitize_label


class TestSanitizeLabel:
    """Tests for sanitize_label."""

    def test_keeps_clean_text(self):
        assert sanitize_label("user_id: INT") == "user_id: INT"

    def test_strips_tags(self):
        assert sanitize_label("<b>users</b>") == "users"

    def test_strips_entities(self):
        assert sanitize_label("users&nbsp;") == "users"
        assert sanitize_label("a&#160;b") == "ab"

    def test_percent_decodes(self):
        assert sanitize_label("order%20items") == "order items"

    def test_invalid_percent_encoding_kept(self):
        assert sanitize_label("50%FF off") == "50%FF off"

    def test_removes_embedded_model(self):
        text = 'name<mxGraphModel dx="1"><root><mxCell id="0"/></root></mxGraphModel>'
        assert sanitize_label(text) == "name"

    def test_removes_percent_encoded_embedded_model(self):
        text = "name%3CmxGraphModel%3E%3Croot%3E%3C%2Froot%3E%3C%2FmxGraphModel%3E"
        assert sanitize_label(text) == "name"

    def test_collapses_whitespace(self):
        assert sanitize_label("  first \t\n name  ") == "first name"

    def test_empty_string(self):
        assert sanitize_label("") == ""

    def test_non_text_input(self):
        assert sanitize_label(b"\x00\xff") == ""

    @pytest.mark.parametrize(
        "text",
        [
            "&a&b;;",
            "%2541",
            "<<b>b>",
            "%2<i>5</i>41 &amp;amp;",
            "\x00\x01� garbage %zz <",
            "a<b>&c<d>;</d>",
        ],
    )
    def test_idempotent(self, text):
        once = sanitize_label(text)
        assert sanitize_label(once) == once

    @pytest.mark.parametrize("text", ["%41%42", "<b>x</b>", "  spaced  ", "&amp;&amp;", "plain"])
    def test_never_longer_than_input(self, text):
        assert len(sanitize_label(text)) <= len(text)


class TestHtmlToText:
    """Tests for html_to_text."""

    def test_line_breaks_become_spaces(self):
        assert html_to_text("id:<br>INT") == "id: INT"

    def test_decodes_entities(self):
        assert html_to_text("a&amp;b") == "a&b"

    def test_non_breaking_space(self):
        assert html_to_text("id:&nbsp;INT") == "id: INT"
