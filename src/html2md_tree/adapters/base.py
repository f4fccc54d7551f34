from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from ..errors import ConversionError
from ..models import ConversionOptions
from ..utils import decode_html_bytes


@dataclass(slots=True)
class AdapterResponse:
    output_path: Path
    markdown: str | None = None
    warnings: list[str] = field(default_factory=list)


class Adapter(Protocol):
    name: str

    def convert_file(
        self, source: Path, target: Path, options: ConversionOptions
    ) -> AdapterResponse:  # pragma: no cover - interface
        ...


def read_html(source: Path, encoding: str = "utf-8") -> str:
    try:
        data = source.read_bytes()
    except OSError as exc:
        raise ConversionError("READ_FAILED", f"Cannot read {source}: {exc}") from exc
    return decode_html_bytes(data, encoding)
