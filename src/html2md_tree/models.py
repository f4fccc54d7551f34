"""Domain models for HTML tree conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ConversionOptions:
    """Settings for one run, passed unchanged through every recursive call."""

    source_dir: Path
    target_dir: Path
    use_markitdown: bool = False
    domain: str = ""


@dataclass(frozen=True, slots=True)
class ConversionJob:
    """One discovered HTML file and the Markdown file it maps to."""

    source: Path
    target: Path
    relative: Path


@dataclass(slots=True)
class FileFailure:
    relative: Path
    code: str
    message: str


@dataclass(slots=True)
class ConversionReport:
    """Outcome of a whole-tree conversion."""

    source_dir: Path
    target_dir: Path
    strategy: str
    converted: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    failed: list[FileFailure] = field(default_factory=list)
    warnings: dict[str, int] = field(default_factory=dict)
    fatal_error: str | None = None
    elapsed_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.fatal_error is None and not self.failed

    @property
    def total(self) -> int:
        return len(self.converted) + len(self.failed)


__all__ = [
    "ConversionJob",
    "ConversionOptions",
    "ConversionReport",
    "FileFailure",
]
