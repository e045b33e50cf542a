"""Second pass over the parsed elements.

A single left fold that rebuilds nested lists from flat list paragraphs,
merges split directives and table-of-contents markers, and moves caption
paragraphs onto the table or figure they describe.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional

from .captions import FIGURE_CAPTION_TYPES
from .directives import parse_custom_directive
from .lists import build_list
from .model import (
    ContentsOptions,
    CustomDirective,
    Element,
    Figure,
    FlatListItem,
    Paragraph,
    Table,
    TableOfContents,
)
from .tables import apply_table_caption

LOG = logging.getLogger("html2rst")


def _is_caption_styled(paragraph: Paragraph) -> bool:
    return "caption" in (paragraph.style or "").lower()


def is_table_caption(paragraph: Element) -> bool:
    if not isinstance(paragraph, Paragraph) or paragraph.caption is None or paragraph.is_block_quote:
        return False
    if paragraph.caption.type == "Table":
        return True
    return _is_caption_styled(paragraph) and paragraph.caption.type not in FIGURE_CAPTION_TYPES


def is_figure_caption(paragraph: Element) -> bool:
    if not isinstance(paragraph, Paragraph) or paragraph.caption is None or paragraph.is_block_quote:
        return False
    if paragraph.caption.type in FIGURE_CAPTION_TYPES:
        return True
    return _is_caption_styled(paragraph) and paragraph.caption.type != "Table"


def _absorb_into_table(table: Table, paragraph: Paragraph) -> Table:
    options = replace(table.options)
    apply_table_caption(options, paragraph.caption.original)
    LOG.debug("Table caption taken from paragraph: %s", paragraph.caption.original)
    return replace(table, options=options)


def _absorb_into_figure(figure: Figure, paragraph: Paragraph) -> Optional[Figure]:
    """Figure with the caption applied; ``None`` when the paragraph belongs elsewhere."""
    if figure.caption_source is not None:
        return figure if figure.caption_source == paragraph.caption.original else None
    if figure.options.caption:
        return None
    options = replace(figure.options)
    caption = paragraph.caption
    if caption.number:
        options.caption = caption.text or caption.original
        options.figure_number = caption.number
        options.figname = f"fig-{caption.number.replace('.', '-')}"
    else:
        options.caption = caption.original
    return replace(figure, options=options, caption_source=caption.original)


def _merge_directives(previous: CustomDirective, current: CustomDirective) -> CustomDirective:
    raw_text = previous.raw_text + "\n\n" + current.raw_text
    merged = parse_custom_directive(previous.style or "rst_" + previous.name, raw_text)
    merged.name = previous.name
    merged.html = previous.html
    return merged


def _merge_tocs(previous: TableOfContents, current: TableOfContents) -> TableOfContents:
    depths = [depth for depth in (previous.options.depth, current.options.depth) if depth]
    options = ContentsOptions(
        title=previous.options.title or current.options.title,
        depth=max(depths) if depths else None,
        local=previous.options.local or current.options.local,
        backlinks=previous.options.backlinks or current.options.backlinks,
        class_=previous.options.class_ or current.options.class_,
    )
    return replace(previous, options=options)


def _flush_list(pending: List[FlatListItem], result: List[Element]) -> None:
    if pending:
        block = build_list(pending)
        if block is not None:
            result.append(block)
        for item in pending:
            result.extend(item.images)
        pending.clear()


def post_process(elements: List[Element]) -> List[Element]:
    """Fold the parsed elements into their final sequence.

    The input list is not modified; merged elements are new objects.
    """
    result: List[Element] = []
    pending_items: List[FlatListItem] = []

    for current in elements:
        if isinstance(current, FlatListItem):
            pending_items.append(current)
            continue
        _flush_list(pending_items, result)
        previous = result[-1] if result else None

        if isinstance(current, CustomDirective) and isinstance(previous, CustomDirective):
            if previous.style == current.style:
                result[-1] = _merge_directives(previous, current)
                continue

        if isinstance(current, TableOfContents) and isinstance(previous, TableOfContents):
            result[-1] = _merge_tocs(previous, current)
            continue

        if isinstance(current, Paragraph) and current.caption is not None:
            if isinstance(previous, Table) and not previous.options.caption and is_table_caption(current):
                result[-1] = _absorb_into_table(previous, current)
                continue
            if isinstance(previous, Figure) and is_figure_caption(current):
                absorbed = _absorb_into_figure(previous, current)
                if absorbed is not None:
                    result[-1] = absorbed
                    continue

        if isinstance(current, Table) and not current.options.caption and is_table_caption(previous):
            result[-1] = _absorb_into_table(current, previous)
            continue

        if isinstance(current, Figure) and is_figure_caption(previous):
            absorbed = _absorb_into_figure(current, previous)
            if absorbed is not None:
                result[-1] = absorbed
                continue

        result.append(current)

    _flush_list(pending_items, result)
    return result
