from __future__ import annotations

import logging
from pathlib import Path

from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter
from readability import Document
from readability.readability import Unparseable

from .base import AdapterResponse, read_html
from ..errors import ConversionError
from ..links import rewrite_links
from ..models import ConversionOptions
from ..utils import atomic_write, collapse_blank_lines

logger = logging.getLogger(__name__)


class _TreeMarkdownConverter(MarkdownConverter):
    """markdownify converter that drops paragraphs with no text."""

    def convert_p(self, el, text, parent_tags):
        if not el.get_text().strip():
            return ""
        return super().convert_p(el, text, parent_tags)


class MarkdownRenderer:
    """Renders HTML fragments with ATX headings, ``-`` bullets and fenced code.

    markdownify already emits ``---`` for ``<hr>`` and backtick fences for ``<pre>``.
    """

    def __init__(self, **overrides: object) -> None:
        settings: dict[str, object] = {
            "heading_style": ATX,
            "bullets": "-",
        }
        settings.update(overrides)
        self._converter = _TreeMarkdownConverter(**settings)

    def render(self, fragment: str) -> str:
        return collapse_blank_lines(self._converter.convert(fragment))


def extract_article(html: str) -> str | None:
    """Return readability's article HTML, or ``None`` when it has no text."""
    try:
        article = Document(html).summary(html_partial=True)
    except Unparseable as exc:
        logger.debug("Readability could not parse document: %s", exc)
        return None
    if not BeautifulSoup(article, "html.parser").get_text(strip=True):
        return None
    return article


def body_html(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    if soup.body is None:
        return str(soup)
    return soup.body.decode_contents()


class ReadabilityAdapter:
    name = "readability"

    def __init__(self, renderer: MarkdownRenderer | None = None, encoding: str = "utf-8") -> None:
        self._renderer = renderer or MarkdownRenderer()
        self._encoding = encoding

    def convert_html(self, html: str, options: ConversionOptions) -> str:
        markdown, _ = self._convert(html, options)
        return markdown

    def _convert(self, html: str, options: ConversionOptions) -> tuple[str, list[str]]:
        warnings: list[str] = []
        try:
            if options.domain:
                html = rewrite_links(html, options.domain)
            content = extract_article(html)
            if content is None:
                logger.debug("No article found, rendering document body")
                warnings.append("NO_ARTICLE")
                content = body_html(html)
            markdown = self._renderer.render(content)
        except Exception as exc:
            raise ConversionError(
                "RENDER_FAILED", f"Cannot render HTML: {str(exc) or type(exc).__name__}"
            ) from exc
        return markdown, warnings

    def convert_file(
        self, source: Path, target: Path, options: ConversionOptions
    ) -> AdapterResponse:
        html = read_html(source, self._encoding)
        markdown, warnings = self._convert(html, options)
        try:
            atomic_write(target, markdown)
        except OSError as exc:
            raise ConversionError("WRITE_FAILED", f"Cannot write {target}: {exc}") from exc
        return AdapterResponse(output_path=target, markdown=markdown, warnings=warnings)
