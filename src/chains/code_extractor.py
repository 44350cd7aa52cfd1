"""Extraction of a single HTML document from raw model output."""

import re

DOCUMENT_START = "<!DOCTYPE html>"
DOCUMENT_END = "</html>"

# Progress banner prepended to the stream while the model is working
STREAM_BANNER = "<!-- 🚀 Đang khởi tạo Engine Game HTML5 Canvas... -->\n"

_BANNER_PATTERN = re.compile(r"<!-- 🚀.*?-->", re.DOTALL)
_FENCE_PATTERN = re.compile(r"```html([\s\S]*?)```", re.IGNORECASE)
_START_PATTERN = re.compile(re.escape(DOCUMENT_START), re.IGNORECASE)
_END_PATTERN = re.compile(re.escape(DOCUMENT_END), re.IGNORECASE)


def clean_generated_code(raw_text: str) -> str:
    """Return the best-effort HTML document contained in ``raw_text``.

    Steps, in order: drop banner comments, unwrap the first ```html fence,
    slice from the first doctype to the last ``</html>``. A document that
    never closes gets ``</html>`` appended. Text without a doctype comes back
    trimmed and otherwise unchanged, so callers can treat it as prose.

    The function is idempotent.
    """
    text = _BANNER_PATTERN.sub("", raw_text)

    fence = _FENCE_PATTERN.search(text)
    if fence and fence.group(1).strip():
        text = fence.group(1)

    start_match = _START_PATTERN.search(text)
    if start_match is None:
        return text.strip()

    start = start_match.start()
    # Last end marker, so stray mentions inside commentary are absorbed
    end_match = None
    for end_match in _END_PATTERN.finditer(text, start):
        pass
    if end_match is not None:
        return text[start : end_match.end()].strip()
    return (text[start:].rstrip() + "\n" + DOCUMENT_END).strip()


def is_html_document(text: str) -> bool:
    """Whether cleaned text is a document rather than a conversational reply."""
    return _START_PATTERN.match(text.lstrip()) is not None
