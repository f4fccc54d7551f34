from __future__ import annotations

from enum import Enum

from .base import Adapter, AdapterResponse
from .markitdown import MarkitdownAdapter
from .readability import MarkdownRenderer, ReadabilityAdapter
from ..config import ConverterConfig


class Strategy(str, Enum):
    READABILITY = "readability"
    MARKITDOWN = "markitdown"

    @classmethod
    def from_flag(cls, use_markitdown: bool) -> "Strategy":
        return cls.MARKITDOWN if use_markitdown else cls.READABILITY

    @property
    def description(self) -> str:
        if self is Strategy.MARKITDOWN:
            return "markitdown system command"
        return "readability + markdownify"


def get_converter(strategy: Strategy, config: ConverterConfig | None = None) -> Adapter:
    """Build a fresh adapter; nothing is shared between runs."""
    config = config or ConverterConfig()
    if strategy is Strategy.MARKITDOWN:
        return MarkitdownAdapter(config.markitdown_command, encoding=config.encoding)
    if strategy is Strategy.READABILITY:
        return ReadabilityAdapter(MarkdownRenderer(), encoding=config.encoding)
    raise KeyError(f"No converter registered for {strategy}")


__all__ = [
    "Adapter",
    "AdapterResponse",
    "MarkdownRenderer",
    "MarkitdownAdapter",
    "ReadabilityAdapter",
    "Strategy",
    "get_converter",
]
