"""Nested list reconstruction from Word's flat list paragraphs.

Word exports every list item as its own ``<p class=MsoListParagraph...>``
with the bullet glyph inlined and the nesting only visible through the left
margin. Each paragraph becomes a :class:`FlatListItem`; :func:`build_list`
folds a run of them back into a tree.
"""

from __future__ import annotations

import copy
import re
from typing import Iterable, Optional, Tuple

from bs4.element import NavigableString, Tag

from .inline import class_string, format_inline, is_list_glyph, plain_text, style_of
from .model import FlatListItem, ListBlock, ListItem, ListType

LIST_PARAGRAPH_CLASS_RE = re.compile(r"MsoList(Paragraph|Bullet|Number|Continue)", re.IGNORECASE)
SYMBOL_FONTS = ("symbol", "wingdings", "webdings", "courier new")
ORDERED_GLYPH_RE = re.compile(r"^\(?(\d+(?:\.\d+)*|[A-Za-z]|[ivxlcdmIVXLCDM]+)[.)]$")
LEADING_MARKER_RE = re.compile(
    r"^\s*(?P<glyph>[•·▪■●◦○§\-–*]|o(?=\s)|\(?(?:\d+(?:\.\d+)*|[A-Za-z]|[ivxlcdmIVXLCDM]+)[.)])[\s\xa0]+"
)
MSO_LEVEL_RE = re.compile(r"level(\d+)", re.IGNORECASE)
LENGTH_RE = re.compile(r"^(-?\d*\.?\d+)\s*(in|pt|cm|mm|px|pc)?$", re.IGNORECASE)
UNITS_PER_INCH = {"in": 1.0, "pt": 72.0, "cm": 2.54, "mm": 25.4, "px": 96.0, "pc": 6.0}
# Word indents the first list level by half an inch and each further level by another half
INDENT_STEP_INCHES = 0.5


def is_list_paragraph(tag: Tag) -> bool:
    if LIST_PARAGRAPH_CLASS_RE.search(class_string(tag)):
        return True
    mso_list = style_of(tag).get("mso-list", "")
    return bool(mso_list) and mso_list.lower() != "ignore"


def length_in_inches(value: Optional[str]) -> Optional[float]:
    match = LENGTH_RE.match((value or "").strip())
    if not match:
        return None
    unit = (match.group(2) or "px").lower()
    return float(match.group(1)) / UNITS_PER_INCH[unit]


def indent_level_from_style(tag: Tag) -> int:
    """Nesting depth from ``margin-left`` in half-inch steps, else the ``mso-list`` level."""
    style = style_of(tag)
    inches = length_in_inches(style.get("margin-left"))
    if inches is not None and inches > 0:
        return max(0, int(round(inches / INDENT_STEP_INCHES)) - 1)
    level = MSO_LEVEL_RE.search(style.get("mso-list", ""))
    if level:
        return max(0, int(level.group(1)) - 1)
    return 0


def classify_glyph(glyph: str) -> ListType:
    return ListType.ORDERED if ORDERED_GLYPH_RE.match(glyph.strip()) else ListType.UNORDERED


def _uses_symbol_font(tag: Tag) -> bool:
    for node in [tag] + tag.find_all(True):
        family = (style_of(node).get("font-family", "") or node.get("face") or "").lower()
        if any(font in family for font in SYMBOL_FONTS):
            return True
    return False


def _first_text_tag(tag: Tag) -> Optional[Tag]:
    for node in tag.descendants:
        if isinstance(node, NavigableString) and node.strip(" \t\r\n\xa0"):
            parent = node.parent
            return parent if isinstance(parent, Tag) and parent is not tag else None
    return None


def split_list_glyph(tag: Tag) -> Tuple[Optional[str], Tag, bool]:
    """Return ``(glyph, content_tag, symbol_font)`` for a list paragraph.

    ``content_tag`` is a copy of ``tag`` with the glyph removed.
    """
    working = copy.copy(tag)
    glyph_span = working.find(is_list_glyph)
    if glyph_span is not None:
        glyph = plain_text(glyph_span)
        symbol = _uses_symbol_font(glyph_span)
        glyph_span.decompose()
        return glyph or None, working, symbol

    first = _first_text_tag(working)
    if first is not None and _uses_symbol_font(first):
        glyph = plain_text(first)
        first.decompose()
        return glyph or None, working, True

    for node in working.descendants:
        if isinstance(node, NavigableString) and node.strip(" \t\r\n\xa0"):
            match = LEADING_MARKER_RE.match(str(node))
            if match:
                node.replace_with(str(node)[match.end():])
                return match.group("glyph"), working, False
            break
    return None, working, False


def parse_list_paragraph(tag: Tag) -> Optional[FlatListItem]:
    """Turn one Word list paragraph into a flat item; ``None`` when it is empty."""
    glyph, content_tag, symbol_font = split_list_glyph(tag)
    content = format_inline(content_tag)
    if not content and not glyph:
        return None
    if symbol_font or glyph is None:
        list_type = ListType.UNORDERED
    else:
        list_type = classify_glyph(glyph)
    return FlatListItem(
        content=content,
        indent_level=indent_level_from_style(tag),
        list_type=list_type,
        style=class_string(tag) or None,
        html=str(tag),
    )


def insert(root: ListBlock, content: str, indent_level: int, list_type: ListType) -> None:
    """Place one item into ``root`` at ``indent_level``.

    Level 0 appends a sibling when the type matches; a type switch at level 0
    nests the item under the last sibling. Deeper levels descend through the
    last item of each level, creating empty lists of ``list_type`` as needed.
    """
    if indent_level <= 0:
        if root.list_type == list_type or not root.items:
            root.items.append(ListItem(content=content))
            return
        last = root.items[-1]
        if last.nested_list is None:
            last.nested_list = ListBlock(list_type=list_type)
        last.nested_list.items.append(ListItem(content=content))
        return

    current = root
    for _ in range(indent_level):
        if not current.items:
            current.items.append(ListItem(content=""))
        last = current.items[-1]
        if last.nested_list is None:
            last.nested_list = ListBlock(list_type=list_type)
        current = last.nested_list
    current.items.append(ListItem(content=content))


def build_list(items: Iterable[FlatListItem]) -> Optional[ListBlock]:
    root: Optional[ListBlock] = None
    for item in items:
        if root is None:
            root = ListBlock(list_type=item.list_type, style=item.style)
        insert(root, item.content, item.indent_level, item.list_type)
    return root


def parse_html_list(tag: Tag) -> ListBlock:
    """``<ul>``/``<ol>`` with real nesting."""
    list_type = ListType.ORDERED if tag.name == "ol" else ListType.UNORDERED
    block = ListBlock(list_type=list_type, html=str(tag), style=class_string(tag) or None)
    for li in tag.find_all("li", recursive=False):
        nested = None
        working = copy.copy(li)
        for sub in working.find_all(["ul", "ol"], recursive=False):
            sub.decompose()
        for sub in li.find_all(["ul", "ol"], recursive=False):
            child = parse_html_list(sub)
            if nested is None:
                nested = child
            else:
                nested.items.extend(child.items)
        block.items.append(ListItem(content=format_inline(working), nested_list=nested))
    return block
