"""RST rendering of the document model."""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .directives import generate_custom_directive
from .inline import escape_rst_text
from .model import (
    ContentsOptions,
    CustomDirective,
    Element,
    ElementKind,
    FieldList,
    Figure,
    FigureOptions,
    FlatListItem,
    Heading,
    Image,
    ImageOptions,
    ListBlock,
    ListItem,
    ListType,
    Paragraph,
    Table,
    TableOfContents,
    Unclassified,
)
from .tables import generate_table_directive

HEADING_CHARS = ["=", "-", "~", "^", '"', "'"]
FIGURE_ALIGNMENTS = ("left", "center", "right")
INDENT = "   "


@dataclass
class FormatterOptions:
    line_width: int = 0  # 0 disables wrapping
    title_overline: bool = True
    indent_size: int = 3
    image_dir: str = "images/"


def _wrap(text: str, width: int) -> List[str]:
    """Wrap each hard line of ``text``; words are never split."""
    if width <= 0:
        return text.split("\n")
    wrapper = textwrap.TextWrapper(width=width, break_long_words=False, break_on_hyphens=False)
    lines: List[str] = []
    for line in text.split("\n"):
        lines.extend(wrapper.wrap(line) if len(line) > width else [line])
    return lines


def indent_text(text: str, spaces: int) -> str:
    indent = " " * spaces
    return "\n".join(indent + line if line.strip() else "" for line in text.split("\n"))


# -- element formatters -------------------------------------------------------


def format_heading(element: Heading, options: FormatterOptions) -> str:
    char = HEADING_CHARS[min(element.level - 1, len(HEADING_CHARS) - 1)]
    underline = char * len(element.text)
    lines = []
    if element.level == 1 and options.title_overline:
        lines.append(underline)
    lines.extend([element.text, underline])
    return "\n".join(lines)


def format_paragraph(element: Paragraph, options: FormatterOptions) -> str:
    width = options.line_width
    if element.is_block_quote:
        if width > 0:
            width = max(width - options.indent_size, 1)
        return indent_text("\n".join(_wrap(element.content, width)), options.indent_size)
    return "\n".join(_wrap(element.content, width))


def _list_lines(block: ListBlock, options: FormatterOptions, indent: str = "") -> List[str]:
    marker = "#." if block.list_type == ListType.ORDERED else "-"
    hanging = " " * (len(marker) + 1)
    width = options.line_width - len(indent) - len(hanging) if options.line_width > 0 else 0
    lines: List[str] = []
    for item in block.items:
        content = _wrap(item.content, max(width, 1) if options.line_width > 0 else 0)
        lines.append(f"{indent}{marker} {content[0]}".rstrip())
        lines.extend(f"{indent}{hanging}{line}" if line.strip() else "" for line in content[1:])
        if item.nested_list is not None and item.nested_list.items:
            if lines[-1]:
                lines.append("")
            lines.extend(_list_lines(item.nested_list, options, indent + hanging))
            if lines[-1]:
                lines.append("")
    while lines and not lines[-1]:
        lines.pop()
    return lines


def format_list(element: ListBlock, options: FormatterOptions) -> str:
    """Nested lists start at the parent item's text column, framed by blank lines."""
    return "\n".join(_list_lines(element, options))


def format_flat_list_item(element: FlatListItem, options: FormatterOptions) -> str:
    block = ListBlock(list_type=element.list_type, items=[ListItem(content=element.content)])
    return format_list(block, options)


def generate_image_directive(options: ImageOptions) -> str:
    lines = [f".. image:: {options.uri}"]
    if options.alt:
        lines.append(f"{INDENT}:alt: {options.alt}")
    if options.height:
        lines.append(f"{INDENT}:height: {options.height}")
    if options.width:
        lines.append(f"{INDENT}:width: {options.width}")
    if options.scale:
        lines.append(f"{INDENT}:scale: {str(options.scale).rstrip('%')}%")
    if options.align:
        lines.append(f"{INDENT}:align: {options.align}")
    if options.target:
        lines.append(f"{INDENT}:target: {options.target}")
    if options.class_:
        lines.append(f"{INDENT}:class: {options.class_}")
    if options.name:
        lines.append(f"{INDENT}:name: {options.name}")
    if options.loading:
        lines.append(f"{INDENT}:loading: {options.loading}")
    return "\n".join(lines)


def generate_figure_directive(options: FigureOptions) -> str:
    lines = [f".. figure:: {options.uri}"]
    if options.alt:
        lines.append(f"{INDENT}:alt: {options.alt}")
    if options.height:
        lines.append(f"{INDENT}:height: {options.height}")
    if options.width:
        lines.append(f"{INDENT}:width: {options.width}")
    if options.scale:
        lines.append(f"{INDENT}:scale: {str(options.scale).rstrip('%')}%")
    if options.align in FIGURE_ALIGNMENTS:
        lines.append(f"{INDENT}:align: {options.align}")
    if options.target:
        lines.append(f"{INDENT}:target: {options.target}")
    if options.figwidth:
        lines.append(f"{INDENT}:figwidth: {options.figwidth}")
    if options.figclass:
        lines.append(f"{INDENT}:figclass: {options.figclass}")
    if options.figname or options.name:
        lines.append(f"{INDENT}:name: {options.figname or options.name}")
    if options.class_:
        lines.append(f"{INDENT}:class: {options.class_}")
    for block in (options.caption, options.legend):
        if block:
            lines.append("")
            lines.extend(f"{INDENT}{line}" if line.strip() else "" for line in block.split("\n"))
    return "\n".join(lines)


def generate_contents_directive(options: Optional[ContentsOptions] = None) -> str:
    options = options or ContentsOptions()
    lines = [f".. contents:: {options.title}" if options.title else ".. contents::"]
    if options.depth:
        lines.append(f"{INDENT}:depth: {options.depth}")
    if options.local:
        lines.append(f"{INDENT}:local:")
    if options.backlinks:
        lines.append(f"{INDENT}:backlinks: {options.backlinks}")
    if options.class_:
        lines.append(f"{INDENT}:class: {options.class_}")
    return "\n".join(lines)


def _with_image_uri(options, element) -> ImageOptions:
    ref = element.image_ref
    if ref is not None and not options.uri.startswith(("http://", "https://")) and options.uri != ref.filename:
        options = type(options)(**{**vars(options), "uri": ref.filename})
    return options


def format_image(element: Image, options: FormatterOptions) -> str:
    return generate_image_directive(_with_image_uri(element.options, element))


def format_figure(element: Figure, options: FormatterOptions) -> str:
    return generate_figure_directive(_with_image_uri(element.options, element))


def format_table(element: Table, options: FormatterOptions) -> str:
    return generate_table_directive(element)


def format_toc(element: TableOfContents, options: FormatterOptions) -> str:
    return generate_contents_directive(element.options)


def format_directive(element: CustomDirective, options: FormatterOptions) -> str:
    return generate_custom_directive(element)


def format_field_list(element: FieldList, options: FormatterOptions) -> str:
    return "\n".join(format_field(f.name, f.value) for f in element.fields)


def format_unclassified(element: Unclassified, options: FormatterOptions) -> str:
    return element.text


FORMATTERS: Dict[ElementKind, Callable[[Element, FormatterOptions], str]] = {
    ElementKind.HEADING: format_heading,
    ElementKind.PARAGRAPH: format_paragraph,
    ElementKind.LIST: format_list,
    ElementKind.LIST_ITEM: format_flat_list_item,
    ElementKind.IMAGE: format_image,
    ElementKind.FIGURE: format_figure,
    ElementKind.TABLE: format_table,
    ElementKind.TOC: format_toc,
    ElementKind.DIRECTIVE: format_directive,
    ElementKind.FIELD_LIST: format_field_list,
    ElementKind.UNKNOWN: format_unclassified,
}


def format_element(element: Element, options: Optional[FormatterOptions] = None) -> str:
    handler = FORMATTERS.get(element.kind)
    if handler is None:
        return ""
    return handler(element, options or FormatterOptions())


def _trim_block(text: str) -> str:
    lines = [line.rstrip() for line in text.split("\n")]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)


def format_document(elements: List[Element], options: Optional[FormatterOptions] = None) -> str:
    """Render ``elements`` with exactly one blank line between non-empty blocks."""
    options = options or FormatterOptions()
    parts = [_trim_block(format_element(element, options)) for element in elements]
    return "\n\n".join(part for part in parts if part)


# -- snippets -----------------------------------------------------------------


def create_label(name: str) -> str:
    normalized = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f".. _{normalized}:"


def create_ref(label: str, text: Optional[str] = None) -> str:
    if text:
        return f":ref:`{text} <{label}>`"
    return f":ref:`{label}`"


def create_link(url: str, text: str) -> str:
    return f"`{text} <{url}>`_"


def create_substitution(name: str, replacement: str) -> str:
    return f".. |{name}| replace:: {replacement}"


def create_comment(text: str) -> str:
    lines = text.split("\n")
    if len(lines) == 1:
        return f".. {text}"
    return "\n".join([".."] + [f"{INDENT}{line}" if line else "" for line in lines])


def format_code_block(code: str, language: Optional[str] = None) -> str:
    lines = [f".. code-block:: {language}" if language else "::", ""]
    lines.extend(f"{INDENT}{line}" if line.strip() else "" for line in code.split("\n"))
    return "\n".join(lines)


def format_field(name: str, value: str = "") -> str:
    return f":{name}: {value}" if value else f":{name}:"


def format_definition(term: str, definition: str) -> str:
    body = "\n".join(f"{INDENT}{line}" if line.strip() else "" for line in definition.split("\n"))
    return f"{term}\n{body}"
