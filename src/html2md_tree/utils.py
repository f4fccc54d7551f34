from __future__ import annotations

import os
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator


BLANK_LINES_RE = re.compile(r"\n{3,}")
_META_CHARSET_RE = re.compile(rb"charset=[\"']?([A-Za-z0-9_-]+)", re.IGNORECASE)


def collapse_blank_lines(markdown: str) -> str:
    """Reduce runs of three or more newlines to one blank line and trim the result."""
    return BLANK_LINES_RE.sub("\n\n", markdown).strip()


def _detect_meta_charset(data: bytes) -> str | None:
    match = _META_CHARSET_RE.search(data[:4096])
    if not match:
        return None
    return match.group(1).decode("ascii").strip().lower()


def decode_html_bytes(data: bytes, encoding: str = "utf-8") -> str:
    candidates = [encoding]
    charset = _detect_meta_charset(data)
    if charset and charset not in candidates:
        candidates.append(charset)

    for enc in candidates:
        try:
            return data.decode(enc)
        except (LookupError, UnicodeDecodeError):
            continue
    return data.decode("latin-1", errors="replace")


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding=encoding) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


@contextmanager
def atomic_output(path: Path) -> Iterator[IO[bytes]]:
    """Yield a binary handle whose contents replace ``path`` only if the block succeeds."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile("wb", delete=False, dir=path.parent, suffix=".partial")
    tmp_path = Path(tmp.name)
    try:
        with tmp:
            yield tmp
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


@contextmanager
def temporary_sibling(source: Path, content: str, encoding: str = "utf-8") -> Iterator[Path]:
    """Write ``content`` next to ``source`` and remove it when the block exits."""
    with tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        dir=source.parent,
        prefix=f".{source.stem}.",
        suffix=".tmp.html",
        encoding=encoding,
    ) as tmp:
        tmp.write(content)
    tmp_path = Path(tmp.name)
    try:
        yield tmp_path
    finally:
        tmp_path.unlink(missing_ok=True)


def list_entries(directory: Path) -> list[Path]:
    return sorted(directory.iterdir(), key=lambda entry: entry.name)
