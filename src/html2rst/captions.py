"""Caption grammar for Word captions such as ``Figure 1: Title``."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from .model import ParsedCaption

CAPTION_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("Figure", re.compile(r"^(Figure|Fig\.?)\s+", re.IGNORECASE)),
    ("Table", re.compile(r"^(Table|Tbl\.?)\s+", re.IGNORECASE)),
    ("Listing", re.compile(r"^(Listing|List\.?|Code)\s+", re.IGNORECASE)),
    ("Equation", re.compile(r"^(Equation|Eq\.?)\s+", re.IGNORECASE)),
    ("Example", re.compile(r"^(Example|Ex\.?)\s+", re.IGNORECASE)),
    ("Chart", re.compile(r"^(Chart)\s+", re.IGNORECASE)),
    ("Diagram", re.compile(r"^(Diagram)\s+", re.IGNORECASE)),
    ("Item", re.compile(r"^(\d+(?:\.\d+)*)\s*[:.]\s*")),
]

FIGURE_CAPTION_TYPES = {"Figure", "Chart", "Diagram"}

_NUMBER_RE = re.compile(r"^(\d+(?:\.\d+)*)")
_SEPARATOR_RE = re.compile(r"^\s*[:.–—-]\s*")
_SIMPLE_NUMBERED_RE = re.compile(r"^(\d+(?:\.\d+)*)\s*[:.–—-]\s*(.*)$", re.DOTALL)
_CAPTION_CLASS_RE = re.compile(r"caption", re.IGNORECASE)


def parse_caption(caption: Optional[str]) -> Optional[ParsedCaption]:
    """Split ``caption`` into type, number and text.

    ``"Table 2.1 - User Data"`` gives ``ParsedCaption("Table", "2.1", "User
    Data", ...)``. Returns ``None`` when the text does not look like a caption.
    """
    trimmed = (caption or "").strip()
    if not trimmed:
        return None

    for caption_type, pattern in CAPTION_PATTERNS:
        match = pattern.match(trimmed)
        if not match:
            continue
        remainder = trimmed[match.end():]
        if caption_type == "Item":
            return ParsedCaption(type="Item", number=match.group(1), text=remainder.strip(), original=trimmed)

        number = ""
        number_match = _NUMBER_RE.match(remainder)
        if number_match:
            number = number_match.group(1)
            remainder = remainder[number_match.end():]
        separator = _SEPARATOR_RE.match(remainder)
        if separator:
            remainder = remainder[separator.end():]
        return ParsedCaption(type=caption_type, number=number, text=remainder.strip(), original=trimmed)

    simple = _SIMPLE_NUMBERED_RE.match(trimmed)
    if simple:
        return ParsedCaption(type="Item", number=simple.group(1), text=simple.group(2).strip(), original=trimmed)
    return None


def looks_like_caption(text: str) -> bool:
    trimmed = (text or "").strip()
    if any(pattern.match(trimmed) for _, pattern in CAPTION_PATTERNS):
        return True
    return bool(re.match(r"^\d+(?:\.\d+)*\s*[:.–—-]", trimmed))


def detect_caption_type(text: str) -> Optional[str]:
    trimmed = (text or "").strip()
    for caption_type, pattern in CAPTION_PATTERNS:
        if pattern.match(trimmed):
            return caption_type
    return None


def extract_caption_number(caption: str) -> Optional[str]:
    parsed = parse_caption(caption)
    return parsed.number if parsed and parsed.number else None


def extract_caption_text(caption: str) -> str:
    parsed = parse_caption(caption)
    return parsed.text if parsed and parsed.text else (caption or "").strip()


def format_caption_for_rst(parsed: ParsedCaption, include_number: bool = True) -> str:
    if include_number and parsed.number:
        return f"{parsed.type} {parsed.number}: {parsed.text}"
    return parsed.text


def _slug(text: str, limit: int) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")
    return slug[:limit]


def generate_ref_label(parsed: ParsedCaption) -> str:
    prefix = parsed.type.lower()[:3]
    number = parsed.number.replace(".", "-")
    if number:
        return f"{prefix}-{number}"
    return f"{prefix}-{_slug(parsed.text, 40) or 'unnamed'}"


def has_caption_style(tag) -> bool:
    """True when ``tag`` carries Word caption styling or is a ``figcaption``."""
    if tag is None or not getattr(tag, "name", None):
        return False
    if tag.name.lower() == "figcaption":
        return True
    classes = " ".join(tag.get("class") or [])
    if _CAPTION_CLASS_RE.search(classes):
        return True
    style = (tag.get("style") or "").lower()
    return "caption" in style


def _caption_candidate(tag, excluded_types: Iterable[str]) -> bool:
    if tag is None:
        return False
    text = tag.get_text(" ", strip=True)
    if not text:
        return False
    parsed = parse_caption(text)
    if parsed is not None and parsed.type in excluded_types:
        return False
    if has_caption_style(tag):
        return True
    return parsed is not None and bool(parsed.number)


def find_nearby_caption(tag, search_parent: bool = True, excluded_types: Iterable[str] = ("Table",), skip_parents=()):
    """Locate the caption block describing ``tag``.

    Checks the next sibling, then the previous sibling, then a caption-styled
    descendant of the parent. Parents listed in ``skip_parents`` (document
    containers) are not searched, so a caption elsewhere in the body is never
    picked up.
    """
    excluded = tuple(excluded_types)
    following = tag.find_next_sibling()
    if _caption_candidate(following, excluded):
        return following

    preceding = tag.find_previous_sibling()
    if _caption_candidate(preceding, excluded):
        return preceding

    parent = tag.parent
    if not search_parent or parent is None or parent.name in (None, "[document]", "html", "body"):
        return None
    if any(parent is skipped for skipped in skip_parents):
        return None

    figcaption = parent.find("figcaption")
    if figcaption is not None:
        return figcaption
    for candidate in parent.find_all(class_=_CAPTION_CLASS_RE):
        if candidate is not tag and _caption_candidate(candidate, excluded):
            return candidate
    return None
