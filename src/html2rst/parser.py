"""Word HTML to document model.

Each block of the body is classified by the first matching entry of
``BLOCK_RULES``. Classification errors never escape: the block degrades to a
plain paragraph and the cause is logged at DEBUG level.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass, field, fields
from typing import Callable, List, Optional, Sequence, Tuple, Union

from bs4.element import Comment, NavigableString, PreformattedString, Tag

from .captions import FIGURE_CAPTION_TYPES, find_nearby_caption, has_caption_style, parse_caption
from .directives import (
    is_known_directive,
    is_rst_directive_style,
    normalize_directive_name,
    parse_custom_directive,
    parse_field_block,
    suggest_directive_name,
)
from .inline import BLOCK_TAGS, class_string, flatten_text, format_inline, is_list_glyph, plain_text, style_of
from .lists import is_list_paragraph, parse_html_list, parse_list_paragraph
from .model import (
    ContentsOptions,
    DocumentMetadata,
    Element,
    FieldList,
    Figure,
    FigureOptions,
    FlatListItem,
    Heading,
    Image,
    ImageOptions,
    ImageRef,
    ParsedCaption,
    ParsedDocument,
    Paragraph,
    TableOfContents,
    Unclassified,
)
from .postprocess import post_process
from .tables import parse_html_table

LOG = logging.getLogger("html2rst")

BlockResult = Union[None, Element, List[Element]]

CONTAINER_TAGS = ("div", "span", "section", "article", "main", "center", "font")
WALKER_BLOCK_TAGS = {"p", "h1", "h2", "h3", "h4", "h5", "h6", "div", "table", "ul", "ol", "blockquote", "figure", "nav", "pre", "img"}

HEADING_CLASS_RE = re.compile(r"(?:MsoHeading|Heading\s*)(\d)", re.IGNORECASE)
OUTLINE_LEVEL_RE = re.compile(r"(\d)")
TOC_CLASS_RE = re.compile(r"(?:^|[_-])(?:mso)?toc|tableofcontents|table-of-contents", re.IGNORECASE)
TOC_LEVEL_CLASS_RE = re.compile(r"MsoToc(\d)", re.IGNORECASE)
TOC_HEADING_CLASS_RE = re.compile(r"toc\s*heading", re.IGNORECASE)
TOC_OUTLINE_RE = re.compile(r"\\o\s*\"(\d+)-(\d+)\"", re.IGNORECASE)
TOC_LEVEL_RE = re.compile(r"\\l\s*\"?(\d+)\"?", re.IGNORECASE)
MSO_CLASS_RE = re.compile(r"\b(Mso\w+)")
STYLE_NAME_RE = re.compile(r"^['\"]?([^;'\"]+)")
DATA_URI_RE = re.compile(r"^data:image/([\w.+-]+);base64,(.+)$", re.IGNORECASE | re.DOTALL)
EXTENSION_RE = re.compile(r"\.(\w+)(?:[?#].*)?$")
CSS_LENGTH_RE = re.compile(r"^\d+(?:\.\d+)?(?:px|%|em|ex|rem|cm|mm|in|pt|pc)?$", re.IGNORECASE)
FIGWIDTH_RE = re.compile(r"^(\d+(?:\.\d+)?(?:px|%|em|cm|in|pt))$", re.IGNORECASE)
ALIGN_CLASSES = ("left", "center", "right", "middle", "top", "bottom")
IMAGE_FORMAT_ALIASES = {"jpeg": "jpg", "svg+xml": "svg", "x-icon": "ico", "tiff": "tif"}
TOC_TITLES_IGNORED = ("contents", "table of contents")


@dataclass
class ParseContext:
    """Mutable state of one parse call."""

    image_dir: str = "images/"
    images: List[ImageRef] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    containers: List[Tag] = field(default_factory=list)
    counter: int = 0

    def next_image_number(self) -> int:
        self.counter += 1
        return self.counter

    def image_path(self, number: int, extension: str) -> str:
        prefix = self.image_dir.rstrip("/") + "/" if self.image_dir else ""
        return f"{prefix}image_{number:03d}.{extension}"


# -- metadata and style names -------------------------------------------------


def extract_metadata(soup) -> DocumentMetadata:
    metadata = DocumentMetadata()
    title = soup.find("title")
    if title is not None:
        metadata.title = plain_text(title) or None
    author = soup.find("meta", attrs={"name": re.compile(r"^author$", re.IGNORECASE)})
    if author is not None:
        metadata.author = (author.get("content") or "").strip() or None
    html = soup.find("html")
    if html is not None:
        metadata.language = (html.get("lang") or html.get("xml:lang") or "").strip() or None
    return metadata


def extract_word_style(tag: Tag) -> Optional[str]:
    """Style name of a block: ``rst_`` classes win over Word's ``Mso*`` classes."""
    classes = class_string(tag).split()
    for name in classes:
        if name.lower().startswith("rst_") or name.lower().startswith("rst-"):
            return "rst_" + name[4:]
    style = style_of(tag)
    style_name = style.get("mso-style-name")
    if style_name:
        match = STYLE_NAME_RE.match(style_name)
        if match and is_rst_directive_style(match.group(1).strip()):
            return match.group(1).strip()
    data_style = (tag.get("data-style") or "").strip()
    if data_style and is_rst_directive_style(data_style):
        return data_style
    mso = MSO_CLASS_RE.search(" ".join(classes))
    if mso:
        return mso.group(1)
    if style_name:
        match = STYLE_NAME_RE.match(style_name)
        if match:
            return match.group(1).strip()
    return data_style or (classes[0] if classes else None)


def detect_heading_level(tag: Tag) -> Optional[int]:
    if re.match(r"^h[1-6]$", tag.name or ""):
        return int(tag.name[1])
    match = HEADING_CLASS_RE.search(class_string(tag))
    if match:
        return int(match.group(1))
    outline = style_of(tag).get("mso-outline-level")
    if outline:
        match = OUTLINE_LEVEL_RE.search(outline)
        if match:
            return int(match.group(1))
    return None


# -- table of contents --------------------------------------------------------


def is_toc_element(tag: Tag) -> bool:
    for token in class_string(tag).split():
        if not token.lower().startswith(("rst_", "rst-")) and TOC_CLASS_RE.search(token):
            return True
    field_code = tag.get("data-field-code") or ""
    if "toc" in field_code.lower():
        return True
    if "mso-toc" in (tag.get("style") or "").lower():
        return True
    if tag.name in ("div", "nav"):
        has_heading = tag.find(["h1", "h2", "h3", "h4"]) is not None or tag.find(class_=re.compile("heading", re.I)) is not None
        links = tag.find_all("a")
        if has_heading and len(links) > 3 and tag.find(["ul", "ol"]) is not None:
            internal = [a for a in links if (a.get("href") or "").startswith(("#", "_"))]
            return len(internal) > len(links) / 2
    return False


def _list_depth(tag: Tag) -> int:
    depth = 0
    for top in tag.find_all(["ul", "ol"]):
        if top.find_parent(["ul", "ol"]) is not None:
            continue
        stack = [(top, 1)]
        while stack:
            node, level = stack.pop()
            depth = max(depth, level)
            for li in node.find_all("li", recursive=False):
                for nested in li.find_all(["ul", "ol"], recursive=False):
                    stack.append((nested, level + 1))
    return depth


def parse_toc_field_code(field_code: str) -> Optional[int]:
    """Depth from a Word ``TOC`` field code: ``\\o "1-3"`` gives 3, ``\\l 2`` gives 2."""
    depth = None
    outline = TOC_OUTLINE_RE.search(field_code or "")
    if outline:
        depth = int(outline.group(2)) - int(outline.group(1)) + 1
    level = TOC_LEVEL_RE.search(field_code or "")
    if level:
        depth = int(level.group(1))
    return depth


def parse_toc_options(tag: Tag) -> ContentsOptions:
    options = ContentsOptions()

    heading = tag.find(["h1", "h2", "h3", "h4"]) or tag.find(class_=re.compile("heading", re.I))
    if heading is None and TOC_HEADING_CLASS_RE.search(class_string(tag)):
        heading = tag
    if heading is not None:
        title = plain_text(heading)
        if title and title.lower() not in TOC_TITLES_IGNORED:
            options.title = title

    depth = _list_depth(tag)
    if 0 < depth < 10:
        options.depth = depth
    level = TOC_LEVEL_CLASS_RE.search(class_string(tag))
    if level:
        options.depth = int(level.group(1))
    field_depth = parse_toc_field_code(tag.get("data-field-code") or "")
    if field_depth:
        options.depth = field_depth
    return options


def parse_toc_block(tag: Tag, ctx: ParseContext) -> BlockResult:
    return TableOfContents(options=parse_toc_options(tag), style=extract_word_style(tag), html=str(tag))


# -- directives, headings, field lists ----------------------------------------


def _is_directive_block(tag: Tag, ctx: ParseContext) -> bool:
    return is_rst_directive_style(extract_word_style(tag))


def parse_directive_block(tag: Tag, ctx: ParseContext) -> BlockResult:
    style_name = extract_word_style(tag) or ""
    directive = parse_custom_directive(style_name, flatten_text(tag))
    directive.html = str(tag)
    name = normalize_directive_name(style_name)
    if is_known_directive(name):
        directive.name = name
    else:
        suggestion = suggest_directive_name(name)
        if suggestion:
            ctx.warnings.append(f"Unknown directive '{directive.name}' (style {style_name}); did you mean '{suggestion}'?")
        else:
            LOG.debug("Directive %s is not a known directive, emitting it verbatim", directive.name)
    return directive


def _is_heading_block(tag: Tag, ctx: ParseContext) -> bool:
    return detect_heading_level(tag) is not None


def parse_heading_block(tag: Tag, ctx: ParseContext) -> BlockResult:
    text = plain_text(tag)
    if not text:
        return None
    return Heading(level=detect_heading_level(tag) or 1, text=text, style=extract_word_style(tag), html=str(tag))


def _is_field_block(tag: Tag, ctx: ParseContext) -> bool:
    return tag.name in ("p", "div") and tag.find("img") is None and parse_field_block(flatten_text(tag)) is not None


def parse_field_list_block(tag: Tag, ctx: ParseContext) -> BlockResult:
    parsed_fields = parse_field_block(flatten_text(tag)) or []
    return FieldList(fields=parsed_fields, style=extract_word_style(tag), html=str(tag))


# -- tables -------------------------------------------------------------------


def is_layout_table(tag: Tag) -> bool:
    """Word wraps floating pictures in a borderless single-purpose table."""
    if tag.name != "table":
        return False
    if (tag.get("cellspacing") or "").strip() != "0" or (tag.get("cellpadding") or "").strip() != "0":
        return False
    if "grid" in class_string(tag).lower():
        return False
    return tag.find("img") is not None and not plain_text(tag)


def parse_table_block(tag: Tag, ctx: ParseContext) -> BlockResult:
    if is_layout_table(tag):
        LOG.debug("Unwrapping layout table holding %d image(s)", len(tag.find_all("img")))
        return [Image(options=options, image_ref=ref, html=str(img)) for img, options, ref in _collect_images(tag, ctx)]
    table = parse_html_table(tag)
    table.style = extract_word_style(tag)
    return table


# -- images and figures -------------------------------------------------------


def _image_format(src: str) -> str:
    match = EXTENSION_RE.search(src.split("?")[0]) if not src.startswith("data:") else None
    if not match:
        return "png"
    extension = match.group(1).lower()
    return IMAGE_FORMAT_ALIASES.get(extension, extension)


def read_image_size(payload: str) -> Tuple[Optional[int], Optional[int]]:
    """Pixel size of a base64 image payload, ``(None, None)`` when unreadable."""
    try:
        from PIL import Image as PILImage  # type: ignore
    except Exception as exc:
        LOG.debug("Pillow not available, image size unknown: %s", exc)
        return None, None
    try:
        raw = base64.b64decode(payload, validate=False)
        with PILImage.open(io.BytesIO(raw)) as img:
            width, height = img.size
    except (binascii.Error, ValueError, OSError) as exc:
        LOG.debug("Unable to read image size from payload: %s", exc)
        return None, None
    return int(width), int(height)


def extract_image_ref(img: Tag, ctx: ParseContext) -> Optional[ImageRef]:
    """Register the image behind ``img``; remote URLs are referenced as-is."""
    src = (img.get("src") or "").strip()
    if not src:
        return None
    alt = (img.get("alt") or "").strip() or None

    match = DATA_URI_RE.match(src)
    if match:
        fmt = match.group(1).lower()
        fmt = IMAGE_FORMAT_ALIASES.get(fmt, fmt)
        payload = re.sub(r"\s+", "", match.group(2))
        number = ctx.next_image_number()
        width, height = read_image_size(payload)
        ref = ImageRef(
            id=f"img-{number}",
            filename=ctx.image_path(number, fmt),
            format=fmt,
            base64_data=payload,
            width=width,
            height=height,
            alt_text=alt,
        )
        ctx.images.append(ref)
        return ref

    if src.lower().startswith(("http://", "https://")):
        return None

    fmt = _image_format(src)
    number = ctx.next_image_number()
    ref = ImageRef(
        id=f"img-{number}",
        filename=ctx.image_path(number, fmt),
        format=fmt,
        alt_text=alt,
        src=src,
    )
    ctx.images.append(ref)
    ctx.warnings.append(f"Image {ref.filename} references {src!r}; its content is not embedded in the HTML")
    return ref


def normalize_length(value: str) -> str:
    trimmed = value.strip()
    if trimmed.isdigit():
        return f"{trimmed}px"
    return trimmed.replace(" ", "")


def detect_image_alignment(img: Tag) -> Optional[str]:
    float_value = style_of(img).get("float", "").lower()
    if float_value in ("left", "right"):
        return float_value
    parent = img.parent
    while isinstance(parent, Tag) and parent.name in ("a", "span"):
        parent = parent.parent
    if isinstance(parent, Tag):
        text_align = style_of(parent).get("text-align", "").lower()
        if text_align in ("center", "left", "right"):
            return text_align
    align = (img.get("align") or "").strip().lower()
    if align in ALIGN_CLASSES:
        return align
    tokens = [token.lower() for token in class_string(img).split()]
    for candidate in ALIGN_CLASSES:
        if candidate in tokens or f"align{candidate}" in tokens:
            return candidate
    return None


def parse_image_options(img: Tag, ref: Optional[ImageRef], option_cls=ImageOptions):
    style = style_of(img)
    options = option_cls(uri=ref.filename if ref is not None else (img.get("src") or "").strip())
    alt = (img.get("alt") or "").strip()
    if alt:
        options.alt = alt
    width = (img.get("width") or style.get("width") or "").strip()
    height = (img.get("height") or style.get("height") or "").strip()
    if width and CSS_LENGTH_RE.match(width.replace(" ", "")):
        options.width = normalize_length(width)
    if height and CSS_LENGTH_RE.match(height.replace(" ", "")):
        options.height = normalize_length(height)
    options.align = detect_image_alignment(img)
    link = img.find_parent("a")
    if link is not None:
        href = (link.get("href") or "").strip()
        if href and not href.startswith("#"):
            options.target = href
    return options


def _content_images(tag: Tag) -> List[Tag]:
    """Pictures of a block, without Word picture bullets."""
    if tag.name == "img":
        return [tag]
    return [img for img in tag.find_all("img") if img.find_parent(is_list_glyph) is None]


def _collect_images(tag: Tag, ctx: ParseContext, option_cls=ImageOptions):
    images = _content_images(tag)
    collected = []
    for img in images:
        ref = extract_image_ref(img, ctx)
        collected.append((img, parse_image_options(img, ref, option_cls), ref))
    return collected


def is_likely_figure(tag: Tag) -> bool:
    if tag.name == "figure":
        return True
    if style_of(tag).get("text-align", "").lower() == "center" or (tag.get("align") or "").lower() == "center":
        return True
    classes = class_string(tag).lower()
    return "figure" in classes or "image-container" in classes


def apply_figure_caption(options: FigureOptions, caption_text: str) -> None:
    parsed = parse_caption(caption_text)
    if parsed is not None and parsed.number:
        options.caption = parsed.text or caption_text
        options.figure_number = parsed.number
        options.figname = f"fig-{parsed.number.replace('.', '-')}"
    else:
        options.caption = caption_text


def _figure_width(tag: Tag) -> Optional[str]:
    width = style_of(tag).get("width", "").replace(" ", "")
    match = FIGWIDTH_RE.match(width)
    return match.group(1) if match else None


def _is_image_block(tag: Tag, ctx: ParseContext) -> bool:
    if tag.name in ("figure", "img"):
        return True
    return bool(_content_images(tag))


def parse_image_block(tag: Tag, ctx: ParseContext) -> BlockResult:
    text = plain_text(tag) if tag.name not in ("figure", "img") else ""
    inline_caption = None
    if text:
        parsed = parse_caption(text)
        if parsed is not None and parsed.type in FIGURE_CAPTION_TYPES:
            inline_caption = text
        else:
            return parse_text_with_images(tag, ctx)

    collected = _collect_images(tag, ctx, FigureOptions)
    if not collected:
        return parse_paragraph_block(tag, ctx)

    caption_text = inline_caption
    if not caption_text:
        if tag.name == "figure":
            caption_tag = tag.find("figcaption")
        else:
            caption_tag = find_nearby_caption(tag, excluded_types=("Table",), skip_parents=ctx.containers)
        caption_text = plain_text(caption_tag) if caption_tag is not None else ""
    as_figure = bool(caption_text) or is_likely_figure(tag)
    results: List[Element] = []
    for index, (img, options, ref) in enumerate(collected):
        if not as_figure or index > 0:
            plain = ImageOptions(**{f.name: getattr(options, f.name) for f in fields(ImageOptions)})
            results.append(Image(options=plain, image_ref=ref, html=str(img)))
            continue
        figure = Figure(options=options, image_ref=ref, style=extract_word_style(tag), html=str(tag))
        if caption_text:
            apply_figure_caption(options, caption_text)
            figure.caption_source = caption_text
        figwidth = _figure_width(tag)
        if figwidth:
            options.figwidth = figwidth
        results.append(figure)
    return results


# -- quotes, list paragraphs, paragraphs --------------------------------------


def _is_block_quote(tag: Tag, ctx: ParseContext) -> bool:
    return tag.name == "blockquote" or "quote" in class_string(tag).lower()


def parse_block_quote(tag: Tag, ctx: ParseContext) -> BlockResult:
    content = format_inline(tag)
    if not content:
        return None
    return Paragraph(content=content, is_block_quote=True, style=extract_word_style(tag), html=str(tag))


def _is_list_paragraph(tag: Tag, ctx: ParseContext) -> bool:
    return tag.name in ("p", "div") and is_list_paragraph(tag)


def parse_list_paragraph_block(tag: Tag, ctx: ParseContext) -> BlockResult:
    return parse_list_paragraph(tag)


def _paragraph_caption(tag: Tag, text: str) -> Optional[ParsedCaption]:
    parsed = parse_caption(text)
    if has_caption_style(tag):
        return parsed or ParsedCaption(type="", number="", text=text, original=text)
    if parsed is not None and parsed.number and parsed.type != "Item":
        return parsed
    return None


def parse_paragraph_block(tag: Tag, ctx: ParseContext) -> BlockResult:
    content = format_inline(tag)
    if not content.strip():
        return None
    style = extract_word_style(tag)
    caption = _paragraph_caption(tag, plain_text(tag))
    if caption is not None and has_caption_style(tag) and "caption" not in (style or "").lower():
        style = "Caption"
    return Paragraph(content=content, caption=caption, style=style, html=str(tag))


def _always(tag: Tag, ctx: ParseContext) -> bool:
    return True


Rule = Tuple[str, Callable[[Tag, ParseContext], bool], Callable[[Tag, ParseContext], BlockResult]]

# blocks classified by their text; also applied to text blocks holding pictures
TEXT_BLOCK_RULES: Sequence[Rule] = (
    ("blockquote", _is_block_quote, parse_block_quote),
    ("list-paragraph", _is_list_paragraph, parse_list_paragraph_block),
    ("field-list", _is_field_block, parse_field_list_block),
    ("paragraph", _always, parse_paragraph_block),
)

BLOCK_RULES: Sequence[Rule] = (
    ("toc", lambda tag, ctx: is_toc_element(tag), parse_toc_block),
    ("directive", _is_directive_block, parse_directive_block),
    ("heading", _is_heading_block, parse_heading_block),
    ("table", lambda tag, ctx: tag.name == "table", parse_table_block),
    ("list", lambda tag, ctx: tag.name in ("ul", "ol"), lambda tag, ctx: parse_html_list(tag)),
    ("image", _is_image_block, parse_image_block),
    *TEXT_BLOCK_RULES,
)


def parse_text_with_images(tag: Tag, ctx: ParseContext) -> BlockResult:
    """Classify a text block by its text, then emit its pictures after it.

    Pictures inside a list paragraph stay on the item and are emitted after
    the rebuilt list, so the list is not split.
    """
    text_element = None
    for name, matches, build in TEXT_BLOCK_RULES:
        if matches(tag, ctx):
            text_element = build(tag, ctx)
            break
    images = [Image(options=options, image_ref=ref, html=str(img)) for img, options, ref in _collect_images(tag, ctx)]
    if isinstance(text_element, FlatListItem):
        text_element.images.extend(images)
        return text_element
    return ([text_element] if text_element is not None else []) + images


def parse_block(tag: Tag, ctx: ParseContext) -> List[Element]:
    """Classify one block; failures degrade to a paragraph of its text."""
    try:
        for name, matches, build in BLOCK_RULES:
            if not matches(tag, ctx):
                continue
            result = build(tag, ctx)
            if result is None:
                return []
            return list(result) if isinstance(result, list) else [result]
    except Exception as exc:
        LOG.debug("Block <%s> could not be classified, keeping its text: %s", tag.name, exc)
        text = flatten_text(tag)
        if text:
            return [Paragraph(content=text, style=class_string(tag) or None, html=str(tag))]
        return []
    return [Unclassified(text=flatten_text(tag), html=str(tag))]


# -- block walker -------------------------------------------------------------


def _has_block_children(tag: Tag) -> bool:
    return any(isinstance(child, Tag) and child.name in BLOCK_TAGS | WALKER_BLOCK_TAGS for child in tag.children)


def _is_container(tag: Tag) -> bool:
    if tag.name not in CONTAINER_TAGS or not _has_block_children(tag):
        return False
    if is_toc_element(tag) or is_rst_directive_style(extract_word_style(tag)):
        return False
    classes = class_string(tag).lower()
    return "figure" not in classes and "quote" not in classes


def _wrap_inline_run(run: List, soup) -> Optional[Tag]:
    text = "".join(node.get_text() if isinstance(node, Tag) else str(node) for node in run)
    if not text.strip() and not any(isinstance(node, Tag) and node.find("img") for node in run):
        return None
    wrapper = soup.new_tag("p")
    run[0].insert_before(wrapper)
    for node in run:
        wrapper.append(node.extract())
    return wrapper


def iter_blocks(container: Tag, ctx: ParseContext, soup) -> List[Tag]:
    """Block-level nodes of ``container`` in document order.

    Wrapper containers (``WordSection1`` and similar) are descended into and
    remembered in ``ctx.containers``; stray inline content is grouped into a
    synthetic paragraph.
    """
    blocks: List[Tag] = []
    run: List = []

    def flush() -> None:
        if run:
            wrapper = _wrap_inline_run(list(run), soup)
            if wrapper is not None:
                blocks.append(wrapper)
            run.clear()

    for child in list(container.children):
        if isinstance(child, (Comment, PreformattedString)):
            continue
        if isinstance(child, NavigableString):
            run.append(child)
            continue
        if not isinstance(child, Tag) or child.name in ("script", "style", "o:p", "meta", "link"):
            continue
        if _is_container(child):
            flush()
            ctx.containers.append(child)
            blocks.extend(iter_blocks(child, ctx, soup))
            continue
        if child.name in WALKER_BLOCK_TAGS or child.name in BLOCK_TAGS:
            flush()
            blocks.append(child)
            continue
        run.append(child)
    flush()
    return blocks


def parse_document(html: Optional[str], image_dir: str = "images/") -> ParsedDocument:
    """Parse Word HTML into a post-processed :class:`ParsedDocument`."""
    try:
        from bs4 import BeautifulSoup  # type: ignore
    except Exception as exc:
        raise RuntimeError(f"beautifulsoup4 not available: {exc}") from exc

    ctx = ParseContext(image_dir=image_dir)
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup.find_all(["script", "style"]):
        tag.decompose()

    metadata = extract_metadata(soup)
    body = soup.body if soup.body is not None else soup
    ctx.containers.append(body)

    elements: List[Element] = []
    for block in iter_blocks(body, ctx, soup):
        elements.extend(parse_block(block, ctx))
    LOG.debug("Parsed %d block element(s), %d image(s)", len(elements), len(ctx.images))

    return ParsedDocument(
        elements=post_process(elements),
        images=ctx.images,
        metadata=metadata,
        warnings=ctx.warnings,
    )
