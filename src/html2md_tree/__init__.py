"""Mirror a directory tree of HTML documents as Markdown."""

from .config import AppConfig, load_config
from .core import ConversionService, convert_html_tree
from .errors import ConversionError
from .links import rewrite_links
from .models import ConversionOptions, ConversionReport, FileFailure

__all__ = [
    "AppConfig",
    "load_config",
    "ConversionError",
    "ConversionOptions",
    "ConversionReport",
    "ConversionService",
    "FileFailure",
    "convert_html_tree",
    "rewrite_links",
]
