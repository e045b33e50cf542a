"""Word HTML export to reStructuredText converter."""

from .core import (
    ConversionOptions,
    ConversionResult,
    ConversionStats,
    convert_html_to_rst,
    extract_images,
    get_conversion_stats,
    preview_conversion,
    run_conversion_pipeline,
    validate_rst,
)
from .formatter import FormatterOptions, format_document, format_element
from .parser import parse_document
from .version import __version__

__all__ = [
    "ConversionOptions",
    "ConversionResult",
    "ConversionStats",
    "FormatterOptions",
    "__version__",
    "convert_html_to_rst",
    "extract_images",
    "format_document",
    "format_element",
    "get_conversion_stats",
    "parse_document",
    "preview_conversion",
    "run_conversion_pipeline",
    "validate_rst",
]
