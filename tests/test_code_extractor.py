"""Tests for extracting the HTML document from raw model output."""

import pytest

from src.chains.code_extractor import (
    DOCUMENT_END,
    STREAM_BANNER,
    clean_generated_code,
    is_html_document,
)


class TestCleanGeneratedCode:
    """Test clean_generated_code."""

    def test_fenced_document_with_banner(self, sample_html):
        """Banner and fence are stripped, leaving the document only."""
        raw = STREAM_BANNER + "Here you go:\n```html\n" + sample_html + "\n```\nEnjoy!"

        result = clean_generated_code(raw)

        assert result == sample_html

    def test_plain_document_with_prose_around(self, sample_html):
        """Text before the doctype and after the end marker is dropped."""
        raw = "Sure! " + sample_html + " Hope the kids like it."

        assert clean_generated_code(raw) == sample_html

    def test_doctype_is_case_insensitive(self):
        """A lowercase doctype is still recognised."""
        raw = "intro <!doctype html><html><body></body></html> outro"

        assert clean_generated_code(raw) == "<!doctype html><html><body></body></html>"

    def test_last_end_marker_wins(self):
        """A stray end marker inside the document does not cut it short."""
        raw = (
            "<!DOCTYPE html><html><body><script>const s = '</html>';</script>"
            "</body></html>\ntrailing"
        )

        result = clean_generated_code(raw)

        assert result.endswith("</script></body></html>")
        assert "trailing" not in result

    def test_missing_end_marker_is_appended(self):
        """A truncated document gets its closing tag."""
        raw = "<!DOCTYPE html><html><body><canvas></canvas>   "

        result = clean_generated_code(raw)

        assert result == "<!DOCTYPE html><html><body><canvas></canvas>\n" + DOCUMENT_END

    def test_uppercase_end_marker_not_duplicated(self):
        """An uppercase closing tag is recognised as the end marker."""
        raw = "<!doctype html><html><body></body></HTML>\nThanks!"

        assert clean_generated_code(raw) == "<!doctype html><html><body></body></HTML>"

    def test_text_without_document_is_trimmed(self):
        """Conversational text passes through, trimmed."""
        assert clean_generated_code("  Mình đã hiểu yêu cầu!  \n") == "Mình đã hiểu yêu cầu!"

    def test_empty_fence_is_ignored(self, sample_html):
        """An empty ```html fence does not replace the rest of the text."""
        raw = "```html\n```\n" + sample_html

        assert clean_generated_code(raw) == sample_html

    def test_only_first_fence_used(self, sample_html):
        """Only the first html fence is unwrapped."""
        other = sample_html.replace("Game", "Other")
        raw = f"```html\n{sample_html}\n```\n```html\n{other}\n```"

        assert clean_generated_code(raw) == sample_html

    def test_banner_only_yields_empty_text(self):
        """The progress banner alone cleans to an empty string."""
        assert clean_generated_code(STREAM_BANNER) == ""

    @pytest.mark.parametrize(
        "raw",
        [
            STREAM_BANNER + "```html\n<!DOCTYPE html><html></html>\n```",
            "<!DOCTYPE html><html><body>",
            "không có code",
            "",
        ],
    )
    def test_idempotent(self, raw):
        """Cleaning twice equals cleaning once."""
        once = clean_generated_code(raw)

        assert clean_generated_code(once) == once


class TestIsHtmlDocument:
    """Test is_html_document."""

    def test_document(self, sample_html):
        assert is_html_document(sample_html) is True

    def test_prose(self):
        assert is_html_document("Đã sửa xong rồi nhé") is False

    def test_leading_whitespace_allowed(self, sample_html):
        assert is_html_document("\n  " + sample_html) is True
