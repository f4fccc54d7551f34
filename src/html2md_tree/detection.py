from __future__ import annotations

from pathlib import Path

HTML_EXTENSIONS = frozenset({".html", ".htm"})
MARKDOWN_EXTENSION = ".md"


def is_html_file(path: Path) -> bool:
    return path.suffix.lower() in HTML_EXTENSIONS


def markdown_name(path: Path) -> str:
    return path.stem + MARKDOWN_EXTENSION
