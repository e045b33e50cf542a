"""Conversion entry points: HTML string to RST, and HTML file to output directory."""

from __future__ import annotations

import base64
import binascii
import datetime
import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import unquote, urlparse

from .formatter import FormatterOptions, create_comment, format_document, format_field
from .model import DocumentMetadata, Element, ImageRef
from .parser import parse_document

LOG = logging.getLogger("html2rst")

EXIT_INVALID_ARGS = 6
EXIT_OUTPUT_DIR = 7

HEADING_UNDERLINE_RE = re.compile(r"^([=\-~^\"'`])\1*$")


@dataclass
class ConversionOptions:
    line_width: int = 0
    title_overline: bool = True
    indent_size: int = 3
    image_dir: str = "images/"
    include_metadata: bool = False
    add_generated_comment: bool = False
    validate: bool = False

    def formatter_options(self) -> FormatterOptions:
        return FormatterOptions(
            line_width=self.line_width,
            title_overline=self.title_overline,
            indent_size=self.indent_size,
            image_dir=self.image_dir or "images/",
        )


@dataclass
class ConversionResult:
    text: str = ""
    images: List[ImageRef] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    elements: List[Element] = field(default_factory=list)


@dataclass
class ConversionStats:
    element_count: int
    image_count: int
    word_count: int
    line_count: int
    has_metadata: bool
    warning_count: int


def _resolve_log_level(verbose: bool, debug: bool) -> int:
    return logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)


def _configure_html2rst_logger(level: int) -> None:
    LOG.setLevel(level)
    LOG.propagate = False
    if not LOG.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        handler.setLevel(level)
        LOG.addHandler(handler)
    else:
        for handler in LOG.handlers:
            handler.setLevel(level)
            if handler.formatter is None:
                handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))


def setup_logging(verbose: bool, debug: bool) -> None:
    level = _resolve_log_level(verbose, debug)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    _configure_html2rst_logger(level)


def format_metadata(metadata: DocumentMetadata) -> str:
    fields = []
    if metadata.title:
        fields.append(format_field("title", metadata.title))
    if metadata.author:
        fields.append(format_field("author", metadata.author))
    if metadata.language:
        fields.append(format_field("language", metadata.language))
    return "\n".join(fields)


def format_generation_comment(today: Optional[datetime.date] = None) -> str:
    day = (today or datetime.date.today()).isoformat()
    return create_comment(f"Generated by html2rst on {day}")


def convert_html_to_rst(html: Optional[str], options: Optional[ConversionOptions] = None) -> ConversionResult:
    """Convert Word HTML to RST.

    Never raises for malformed input: ``None`` and parser failures return an
    empty result carrying one warning.
    """
    opts = options or ConversionOptions()
    if html is None:
        return ConversionResult(warnings=["No HTML content to convert"])

    formatter_options = opts.formatter_options()
    try:
        parsed = parse_document(html, image_dir=formatter_options.image_dir)
    except Exception as exc:
        LOG.debug("HTML parsing failed", exc_info=True)
        return ConversionResult(warnings=[f"HTML parsing error: {exc}"])

    text = format_document(parsed.elements, formatter_options)
    if opts.include_metadata and parsed.metadata.has_values():
        text = "\n\n".join(part for part in (format_metadata(parsed.metadata), text) if part)
    if opts.add_generated_comment:
        text = "\n\n".join(part for part in (format_generation_comment(), text) if part)

    warnings = list(parsed.warnings)
    if opts.validate:
        warnings.extend(validate_rst(text))

    return ConversionResult(
        text=text,
        images=parsed.images,
        warnings=warnings,
        metadata=parsed.metadata,
        elements=parsed.elements,
    )


def validate_rst(text: str) -> List[str]:
    """Lightweight lint of generated RST; returns warnings, never raises."""
    warnings: List[str] = []
    lines = (text or "").split("\n")
    for index, line in enumerate(lines):
        number = index + 1
        asterisks = line.replace("\\*", "").replace("**", "").count("*")
        if asterisks % 2:
            warnings.append(f"Line {number}: Potentially unpaired asterisk (*)")
        stripped = line.strip()
        if index > 0 and line == stripped and HEADING_UNDERLINE_RE.match(stripped):
            previous = lines[index - 1].strip()
            if previous and not HEADING_UNDERLINE_RE.match(previous) and len(stripped) < len(previous):
                warnings.append(f"Line {number}: Heading underline may be too short")
        if "\t" in line:
            warnings.append(f"Line {number}: Contains tab character (spaces preferred)")
    return warnings


def get_conversion_stats(result: ConversionResult) -> ConversionStats:
    return ConversionStats(
        element_count=len(result.elements),
        image_count=len(result.images),
        word_count=len(result.text.split()),
        line_count=len(result.text.split("\n")) if result.text else 0,
        has_metadata=result.metadata.has_values(),
        warning_count=len(result.warnings),
    )


def extract_images(html: str, image_dir: str = "images/") -> List[ImageRef]:
    return parse_document(html, image_dir=image_dir).images


def preview_conversion(html: str, max_elements: int = 10, options: Optional[ConversionOptions] = None) -> str:
    formatter_options = (options or ConversionOptions()).formatter_options()
    parsed = parse_document(html, image_dir=formatter_options.image_dir)
    text = format_document(parsed.elements[:max_elements], formatter_options)
    hidden = len(parsed.elements) - max_elements
    if hidden > 0:
        text = "\n\n".join(part for part in (text, create_comment(f"[Preview truncated - {hidden} more elements]")) if part)
    return text


# -- file pipeline ------------------------------------------------------------


def slugify_filename(name: str) -> str:
    name = name.strip().replace(" ", "_")
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name)
    return name or "document"


def safe_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8", newline="\n")


def read_html(path: Path) -> str:
    """Read an HTML export; Word writes UTF-8 or the Windows code page."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        LOG.debug("%s is not valid UTF-8, decoding as cp1252", path)
        return path.read_text(encoding="cp1252", errors="replace")


def _local_image_source(ref: ImageRef, base_dir: Path) -> Optional[Path]:
    if not ref.src or ref.src.startswith("blob:"):
        return None
    parsed = urlparse(ref.src)
    if parsed.scheme == "file":
        candidate = Path(unquote(parsed.path))
    elif parsed.scheme and len(parsed.scheme) > 1:
        return None
    else:
        candidate = base_dir / unquote(ref.src)
    return candidate if candidate.is_file() else None


def write_images(images: List[ImageRef], out_dir: Path, source_dir: Path, verbose: bool = False) -> List[str]:
    """Write every available image payload under ``out_dir``; returns warnings."""
    warnings: List[str] = []
    for ref in images:
        target = out_dir / ref.filename
        if ref.base64_data:
            try:
                payload = base64.b64decode(ref.base64_data, validate=False)
            except (binascii.Error, ValueError) as exc:
                warnings.append(f"Image {ref.filename}: invalid base64 payload ({exc})")
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload)
        else:
            source = _local_image_source(ref, source_dir)
            if source is None:
                warnings.append(f"Image {ref.filename}: no payload available, file not written")
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        if verbose:
            LOG.info("Image written: %s", target)
    return warnings


def run_conversion_pipeline(
    *,
    input_path: Path,
    out_dir: Path,
    options: Optional[ConversionOptions] = None,
    verbose: bool = False,
) -> Tuple[ConversionResult, Path]:
    if not input_path.exists() or not input_path.is_file():
        raise RuntimeError(f"Input file not found: {input_path}")
    if out_dir.exists() and not out_dir.is_dir():
        raise RuntimeError(f"Output path is not a directory: {out_dir}")

    raw_html = read_html(input_path)

    if verbose:
        LOG.info("Converting %s", input_path)
    result = convert_html_to_rst(raw_html, options)

    rst_path = out_dir / f"{slugify_filename(input_path.stem)}.rst"
    try:
        safe_write_text(rst_path, result.text.strip() + "\n")
        result.warnings.extend(write_images(result.images, out_dir, input_path.parent, verbose=verbose))
    except OSError as exc:
        raise RuntimeError(f"Unable to write output to {out_dir}: {exc}") from exc

    if verbose:
        LOG.info("RST written: %s (%d image(s))", rst_path, len(result.images))
    return result, rst_path
