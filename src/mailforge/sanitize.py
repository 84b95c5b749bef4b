"""Allow-list HTML sanitizing for values substituted into previews."""

from __future__ import annotations

import re

try:
    from bs4 import BeautifulSoup
    from bs4.element import Comment, Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for HTML sanitizing (pip install beautifulsoup4)."
    ) from exc

ALLOWED_TAGS = frozenset(
    {
        "div", "span", "p", "br", "h1", "h2", "h3", "h4", "h5", "h6",
        "ul", "ol", "li", "a", "img", "table", "thead", "tbody", "tr", "th", "td",
        "strong", "em", "u", "b", "i", "blockquote", "pre", "code",
    }
)
ALLOWED_ATTRS = frozenset({"href", "src", "alt", "title", "class", "style", "target"})
# Removed together with everything inside them.
FORBIDDEN_TAGS = ("script", "style", "iframe", "object", "embed")

_SCRIPT_BLOCK_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_BLOCK_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_JS_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+\s*=", re.IGNORECASE)


def _is_unsafe_url(value: str) -> bool:
    return value.strip().lower().startswith(("javascript:", "vbscript:", "data:text/html"))


def sanitize_html(html: str | None) -> str:
    """Strip everything outside the tag/attribute allow-list.

    Forbidden elements are removed with their content, other unknown tags are
    unwrapped so their text survives.
    """
    if not html:
        return ""
    if "<" not in html:
        return html

    soup = BeautifulSoup(html, "html.parser")
    for node in soup.find_all(FORBIDDEN_TAGS):
        node.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for tag in soup.find_all(True):
        if not isinstance(tag, Tag):
            continue
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        for attr in list(tag.attrs):
            if attr not in ALLOWED_ATTRS:
                del tag.attrs[attr]
            elif attr in ("href", "src") and _is_unsafe_url(str(tag.attrs[attr])):
                del tag.attrs[attr]
    return soup.decode(formatter="minimal")


def sanitize_input(value: str | None) -> str:
    """Light scrubbing for plain-text inputs such as labels."""
    if not value:
        return ""
    cleaned = _SCRIPT_BLOCK_RE.sub("", value)
    cleaned = _STYLE_BLOCK_RE.sub("", cleaned)
    cleaned = _JS_SCHEME_RE.sub("", cleaned)
    return _EVENT_HANDLER_RE.sub("", cleaned)
