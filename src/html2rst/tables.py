"""Table model builder and RST grid table renderer."""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from bs4.element import Tag

from .captions import has_caption_style, parse_caption
from .inline import BLOCK_TAGS, format_inline, plain_text, style_of
from .model import Table, TableCell, TableOptions, TableRow

INDENT = "   "
MIN_COLUMN_WIDTH = 3
MAX_COLUMN_WIDTH = 40
ALIGNMENTS = ("left", "center", "right")
CELL_BORDER_RE = re.compile(r"(?<![\\\S])([|+])")


@dataclass
class _Slot:
    """A cell placed on the column grid."""

    cell: TableCell
    row: int
    col: int
    colspan: int
    rowspan: int


def _span(value: Optional[str]) -> Optional[int]:
    try:
        span = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return span if span > 1 else None


def _cell_alignment(cell: Tag) -> Optional[str]:
    align = (cell.get("align") or style_of(cell).get("text-align") or "").strip().lower()
    if align == "middle":
        align = "center"
    return align if align in ALIGNMENTS else None


def _cell_content(cell: Tag) -> str:
    blocks = [child for child in cell.find_all(True, recursive=False) if child.name in BLOCK_TAGS]
    if not blocks:
        return format_inline(cell)
    lines = [format_inline(block) for block in blocks]
    return "\n".join(line for line in lines if line)


def parse_table_row(tr: Tag, is_header: bool) -> TableRow:
    cells: List[TableCell] = []
    for cell in tr.find_all(["td", "th"], recursive=False):
        cells.append(
            TableCell(
                content=_cell_content(cell),
                colspan=_span(cell.get("colspan")),
                rowspan=_span(cell.get("rowspan")),
                align=_cell_alignment(cell),
            )
        )
    return TableRow(cells=cells, is_header=is_header)


def _own_rows(table: Tag, container: Tag) -> List[Tag]:
    return [tr for tr in container.find_all("tr") if tr.find_parent("table") is table]


def generate_table_ref_name(caption: str, table_number: Optional[str] = None) -> str:
    if table_number:
        return f"tbl-{table_number.replace('.', '-')}"
    text = re.sub(r"^(?:Table|Tbl\.?)\s*\d*[:.]\s*", "", caption or "", flags=re.IGNORECASE)
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")[:50]
    return f"tbl-{slug or 'unnamed'}"


def apply_table_caption(options: TableOptions, caption_text: str) -> None:
    """Fill caption, number and reference name from a caption string."""
    parsed = parse_caption(caption_text)
    if parsed is not None and parsed.type == "Table" and parsed.number:
        options.caption = parsed.text or caption_text.strip()
        options.table_number = parsed.number
        options.name = generate_table_ref_name(options.caption, parsed.number)
    else:
        options.caption = caption_text.strip()


def _find_caption(table: Tag) -> Optional[str]:
    caption = table.find("caption")
    if caption is not None and caption.find_parent("table") is table:
        text = plain_text(caption)
        if text:
            return text
    for child in table.find_all(True, recursive=False):
        if child.name not in ("tr", "thead", "tbody", "tfoot", "colgroup", "col") and has_caption_style(child):
            text = plain_text(child)
            if text:
                return text
    return None


def parse_html_table(table: Tag) -> Table:
    """Build the table model for an HTML ``<table>``.

    ``<thead>`` rows are headers; without one, the first row is a header only
    when every cell in it is a ``<th>``.
    """
    rows: List[TableRow] = []
    options = TableOptions()

    caption = _find_caption(table)
    if caption:
        apply_table_caption(options, caption)

    thead = table.find("thead")
    if thead is not None and thead.find_parent("table") is not table:
        thead = None
    if thead is not None:
        for tr in _own_rows(table, thead):
            rows.append(parse_table_row(tr, True))
        options.has_header = bool(rows)

    body_rows = [tr for tr in _own_rows(table, table) if thead is None or tr.find_parent("thead") is not thead]
    for index, tr in enumerate(body_rows):
        cells = tr.find_all(["td", "th"], recursive=False)
        is_header = thead is None and index == 0 and bool(cells) and all(cell.name == "th" for cell in cells)
        if is_header:
            options.has_header = True
        row = parse_table_row(tr, is_header)
        if row.cells:
            rows.append(row)

    align = (table.get("align") or "").strip().lower()
    if align in ALIGNMENTS:
        options.align = align
    width = (table.get("width") or "").strip()
    if width:
        options.width = f"{width}px" if width.isdigit() else width

    return Table(rows=rows, options=options, html=str(table))


def escape_cell_text(text: str) -> str:
    """Escape ``|`` and ``+`` at the start of a word so they never read as cell borders."""
    return CELL_BORDER_RE.sub(r"\\\1", text)


def wrap_cell_text(text: str, width: int) -> List[str]:
    """Greedy word wrap of the escaped cell text; hard line breaks start new paragraphs."""
    if not text:
        return [""]
    text = escape_cell_text(text)
    wrapper = textwrap.TextWrapper(width=max(width, 1), break_on_hyphens=False, break_long_words=True)
    lines: List[str] = []
    for paragraph in text.split("\n"):
        if len(paragraph) <= width:
            lines.append(paragraph)
            continue
        lines.extend(wrapper.wrap(paragraph) or [""])
    return lines or [""]


def _layout(rows: List[TableRow]) -> Tuple[List[_Slot], int, Dict[Tuple[int, int], _Slot]]:
    slots: List[_Slot] = []
    occupied: Dict[Tuple[int, int], _Slot] = {}
    num_columns = 0
    for r, row in enumerate(rows):
        col = 0
        for cell in row.cells:
            while (r, col) in occupied:
                col += 1
            colspan = cell.colspan or 1
            rowspan = min(cell.rowspan or 1, len(rows) - r)
            slot = _Slot(cell=cell, row=r, col=col, colspan=colspan, rowspan=rowspan)
            slots.append(slot)
            for dr in range(rowspan):
                for dc in range(colspan):
                    occupied[(r + dr, col + dc)] = slot
            col += colspan
        num_columns = max(num_columns, col, max((c + 1 for (rr, c) in occupied if rr == r), default=0))
    return slots, num_columns, occupied


def calculate_column_widths(
    rows: List[TableRow],
    min_width: int = MIN_COLUMN_WIDTH,
    max_width: int = MAX_COLUMN_WIDTH,
) -> List[int]:
    """Per-column width from the longest line after wrapping at ``max_width``.

    Wrapping again at the resulting width yields the same lines, so the width
    is a fixed point of wrap-then-measure.
    """
    slots, num_columns, _ = _layout(rows)
    widths = [min_width] * num_columns
    for slot in slots:
        if slot.colspan != 1:
            continue
        longest = max(len(line) for line in wrap_cell_text(slot.cell.content, max_width))
        widths[slot.col] = max(widths[slot.col], min(longest, max_width))
    return widths


def _span_width(widths: List[int], col: int, colspan: int) -> int:
    return sum(widths[col:col + colspan]) + 3 * (colspan - 1)


def pad_cell(content: str, width: int, align: Optional[str] = None) -> str:
    text = content or ""
    if len(text) >= width:
        return text[:width]
    padding = width - len(text)
    if align == "right":
        return " " * padding + text
    if align == "center":
        left = padding // 2
        return " " * left + text + " " * (padding - left)
    return text + " " * padding


def _separator(widths: List[int], char: str, r: int, occupied: Dict[Tuple[int, int], _Slot]) -> str:
    """Border below row ``r``; segments stay open where a cell spans into the next row."""
    num_columns = len(widths)

    def continuing(col: int) -> Optional[_Slot]:
        slot = occupied.get((r, col))
        if slot is not None and slot.row + slot.rowspan - 1 > r:
            return slot
        return None

    open_cells = [continuing(col) for col in range(num_columns)]
    parts = ["|" if open_cells[0] else "+"]
    for col, width in enumerate(widths):
        parts.append(" " * (width + 2) if open_cells[col] else char * (width + 2))
        if col == num_columns - 1:
            parts.append("|" if open_cells[col] else "+")
            continue
        left, right = open_cells[col], open_cells[col + 1]
        if left is not None and right is not None:
            parts.append(" " if left is right else "|")
        else:
            parts.append("+")
    return "".join(parts)


def _row_lines(
    r: int,
    widths: List[int],
    occupied: Dict[Tuple[int, int], _Slot],
    wrapped: Dict[int, List[str]],
) -> List[str]:
    num_columns = len(widths)
    starting = {}
    for col in range(num_columns):
        slot = occupied.get((r, col))
        if slot is not None and slot.row == r and slot.col == col:
            starting[col] = slot
    height = max([len(wrapped[id(slot)]) for slot in starting.values()] + [1])

    lines: List[str] = []
    for index in range(height):
        parts = ["|"]
        col = 0
        while col < num_columns:
            slot = occupied.get((r, col))
            if slot is None:
                parts.append(" " * (widths[col] + 2) + "|")
                col += 1
                continue
            width = _span_width(widths, slot.col, slot.colspan)
            text = ""
            if slot.row == r:
                cell_lines = wrapped[id(slot)]
                text = cell_lines[index] if index < len(cell_lines) else ""
            parts.append(" " + pad_cell(text, width, slot.cell.align) + " |")
            col = slot.col + slot.colspan
        lines.append("".join(parts))
    return lines


def _header_row_count(rows: List[TableRow], has_header: bool) -> int:
    """Rows of the leading header block; 0 when nothing would follow it."""
    count = 0
    for row in rows:
        if not row.is_header:
            break
        count += 1
    if count == 0 and has_header:
        count = 1
    # the head/body separator cannot be the last border of a grid table
    return count if count < len(rows) else 0


def generate_grid_table(rows: List[TableRow], has_header: bool = False) -> str:
    """Render ``rows`` as an RST grid table.

    Every output line has the same length. The border after the leading
    block of header rows uses ``=``, every other border ``-``.
    """
    if not rows:
        return ""
    slots, num_columns, occupied = _layout(rows)
    if num_columns == 0:
        return ""
    widths = calculate_column_widths(rows)
    wrapped = {id(slot): wrap_cell_text(slot.cell.content, _span_width(widths, slot.col, slot.colspan)) for slot in slots}

    header_rows = _header_row_count(rows, has_header)
    lines = [_separator(widths, "-", -1, occupied)]
    for r in range(len(rows)):
        lines.extend(_row_lines(r, widths, occupied, wrapped))
        lines.append(_separator(widths, "=" if r == header_rows - 1 else "-", r, occupied))
    return "\n".join(lines)


def generate_table_directive(table: Table) -> str:
    options = table.options
    grid = generate_grid_table(table.rows, options.has_header)
    use_directive = bool(
        options.caption or options.align or options.width or options.widths or options.class_ or options.name
    )
    if not use_directive:
        return grid

    lines = [f".. table:: {options.caption}" if options.caption else ".. table::"]
    if options.align:
        lines.append(f"{INDENT}:align: {options.align}")
    if options.width:
        lines.append(f"{INDENT}:width: {options.width}")
    if options.widths:
        widths = options.widths
        if isinstance(widths, (list, tuple)):
            widths = " ".join(str(value) for value in widths)
        lines.append(f"{INDENT}:widths: {widths}")
    if options.class_:
        lines.append(f"{INDENT}:class: {options.class_}")
    if options.name:
        lines.append(f"{INDENT}:name: {options.name}")
    if grid:
        lines.append("")
        lines.extend(INDENT + line for line in grid.split("\n"))
    return "\n".join(lines)
