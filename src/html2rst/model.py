"""Document model shared by the parser, post-processor and RST formatter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Union


class ElementKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    LIST_ITEM = "list_item"
    IMAGE = "image"
    FIGURE = "figure"
    TABLE = "table"
    TOC = "toc"
    DIRECTIVE = "directive"
    FIELD_LIST = "field_list"
    UNKNOWN = "unknown"


class ListType(str, Enum):
    ORDERED = "ordered"
    UNORDERED = "unordered"


@dataclass
class ParsedCaption:
    type: str
    number: str
    text: str
    original: str


@dataclass
class ImageRef:
    """Image extracted from the source HTML.

    ``base64_data`` is empty when the payload could not be read inline (blob
    or local URLs); the host has to resolve it before packaging.
    """

    id: str
    filename: str
    format: str
    base64_data: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    alt_text: Optional[str] = None
    src: Optional[str] = None


@dataclass
class ImageOptions:
    uri: str = ""
    alt: Optional[str] = None
    height: Optional[str] = None
    width: Optional[str] = None
    scale: Optional[str] = None
    align: Optional[str] = None
    target: Optional[str] = None
    class_: Optional[str] = None
    name: Optional[str] = None
    loading: Optional[str] = None


@dataclass
class FigureOptions(ImageOptions):
    caption: Optional[str] = None
    legend: Optional[str] = None
    figwidth: Optional[str] = None
    figclass: Optional[str] = None
    figname: Optional[str] = None
    figure_number: Optional[str] = None


@dataclass
class TableCell:
    content: str = ""
    colspan: Optional[int] = None
    rowspan: Optional[int] = None
    align: Optional[str] = None


@dataclass
class TableRow:
    cells: List[TableCell] = field(default_factory=list)
    is_header: bool = False


@dataclass
class TableOptions:
    caption: Optional[str] = None
    table_number: Optional[str] = None
    align: Optional[str] = None
    width: Optional[str] = None
    widths: Optional[Union[str, List[int]]] = None
    class_: Optional[str] = None
    name: Optional[str] = None
    has_header: bool = False


@dataclass
class ContentsOptions:
    title: Optional[str] = None
    depth: Optional[int] = None
    local: bool = False
    backlinks: Optional[str] = None
    class_: Optional[str] = None


@dataclass
class Element:
    kind: ClassVar[ElementKind] = ElementKind.UNKNOWN

    style: Optional[str] = None
    html: Optional[str] = None


@dataclass
class Heading(Element):
    kind: ClassVar[ElementKind] = ElementKind.HEADING

    level: int = 1
    text: str = ""

    def __post_init__(self) -> None:
        self.level = min(max(int(self.level), 1), 6)


@dataclass
class Paragraph(Element):
    kind: ClassVar[ElementKind] = ElementKind.PARAGRAPH

    content: str = ""
    is_block_quote: bool = False
    caption: Optional[ParsedCaption] = None


@dataclass
class ListItem:
    content: str = ""
    nested_list: Optional["ListBlock"] = None


@dataclass
class ListBlock(Element):
    kind: ClassVar[ElementKind] = ElementKind.LIST

    list_type: ListType = ListType.UNORDERED
    items: List[ListItem] = field(default_factory=list)


@dataclass
class FlatListItem(Element):
    """One Word list paragraph before nesting is rebuilt."""

    kind: ClassVar[ElementKind] = ElementKind.LIST_ITEM

    content: str = ""
    indent_level: int = 0
    list_type: ListType = ListType.UNORDERED
    # pictures found inside the item, emitted after the rebuilt list
    images: List[Element] = field(default_factory=list)


@dataclass
class Image(Element):
    kind: ClassVar[ElementKind] = ElementKind.IMAGE

    options: ImageOptions = field(default_factory=ImageOptions)
    image_ref: Optional[ImageRef] = None


@dataclass
class Figure(Element):
    kind: ClassVar[ElementKind] = ElementKind.FIGURE

    options: FigureOptions = field(default_factory=FigureOptions)
    image_ref: Optional[ImageRef] = None
    # original caption text the figure took from a neighbouring block
    caption_source: Optional[str] = None


@dataclass
class Table(Element):
    kind: ClassVar[ElementKind] = ElementKind.TABLE

    rows: List[TableRow] = field(default_factory=list)
    options: TableOptions = field(default_factory=TableOptions)


@dataclass
class TableOfContents(Element):
    kind: ClassVar[ElementKind] = ElementKind.TOC

    options: ContentsOptions = field(default_factory=ContentsOptions)


@dataclass
class CustomDirective(Element):
    kind: ClassVar[ElementKind] = ElementKind.DIRECTIVE

    name: str = ""
    argument: Optional[str] = None
    options: Dict[str, str] = field(default_factory=dict)
    content: str = ""
    raw_text: str = ""


@dataclass
class Field:
    name: str
    value: str = ""


@dataclass
class FieldList(Element):
    kind: ClassVar[ElementKind] = ElementKind.FIELD_LIST

    fields: List[Field] = field(default_factory=list)


@dataclass
class Unclassified(Element):
    kind: ClassVar[ElementKind] = ElementKind.UNKNOWN

    text: str = ""


@dataclass
class DocumentMetadata:
    title: Optional[str] = None
    author: Optional[str] = None
    language: Optional[str] = None

    def has_values(self) -> bool:
        return bool(self.title or self.author or self.language)


@dataclass
class ParsedDocument:
    elements: List[Element] = field(default_factory=list)
    images: List[ImageRef] = field(default_factory=list)
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    warnings: List[str] = field(default_factory=list)
