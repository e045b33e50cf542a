"""Inline formatting and text flattening for Word HTML nodes."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from bs4.element import NavigableString, PreformattedString, Tag

_WS_RE = re.compile(r"[ \t\r\n\f]+")
_MULTI_SPACE_RE = re.compile(r" {2,}")
_MONOSPACE_FONTS = ("courier", "consolas", "monospace", "lucida console", "menlo")
# characters that may not touch inline markup start/end strings
_GLUE_CHARS = "*`_|"

BLOCK_TAGS = {
    "p",
    "div",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "li",
    "tr",
    "table",
    "ul",
    "ol",
    "blockquote",
    "figure",
    "figcaption",
    "nav",
    "caption",
}


def parse_style(style: Optional[str]) -> Dict[str, str]:
    declarations: Dict[str, str] = {}
    for chunk in (style or "").split(";"):
        if ":" not in chunk:
            continue
        name, value = chunk.split(":", 1)
        name = name.strip().lower()
        if name:
            declarations[name] = value.strip()
    return declarations


def style_of(tag) -> Dict[str, str]:
    if not isinstance(tag, Tag):
        return {}
    return parse_style(tag.get("style"))


def class_string(tag) -> str:
    if not isinstance(tag, Tag):
        return ""
    classes = tag.get("class") or []
    if isinstance(classes, str):
        return classes
    return " ".join(classes)


def is_list_glyph(tag) -> bool:
    """Word wraps list bullets/numbers in ``<span style='mso-list:Ignore'>``."""
    return isinstance(tag, Tag) and style_of(tag).get("mso-list", "").lower() == "ignore"


def _collapse(text: str) -> str:
    return _WS_RE.sub(" ", text)


def _flatten_into(node, out: List[str]) -> None:
    for child in node.children:
        if isinstance(child, PreformattedString):
            continue
        if isinstance(child, NavigableString):
            out.append(_collapse(str(child)))
            continue
        if not isinstance(child, Tag) or child.name in ("script", "style"):
            continue
        if child.name == "br":
            out.append("\n")
            continue
        if is_list_glyph(child):
            continue
        block = child.name in BLOCK_TAGS
        if block:
            out.append("\n")
        _flatten_into(child, out)
        if block:
            out.append("\n")


def flatten_text(node) -> str:
    """Text of ``node`` with ``<br>`` and nested blocks turned into newlines.

    Non-breaking spaces survive as plain spaces so indentation typed in the
    document is kept; whitespace coming from HTML source formatting is not.
    """
    out: List[str] = []
    if isinstance(node, NavigableString):
        out.append(_collapse(str(node)))
    elif node is not None:
        _flatten_into(node, out)
    lines = [line.strip(" ").replace("\xa0", " ").rstrip() for line in "".join(out).split("\n")]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def plain_text(node) -> str:
    """Single-line, formatting-stripped text."""
    return _MULTI_SPACE_RE.sub(" ", flatten_text(node).replace("\n", " ")).strip()


@dataclass
class _Token:
    text: str
    kind: str = "text"  # text | break | emphasis | markup
    marker: str = ""


def _emphasis_marker(tag: Tag) -> Optional[str]:
    name = tag.name.lower()
    if name in ("b", "strong"):
        return "**"
    if name in ("i", "em", "u", "ins", "cite", "dfn"):
        # no underline in RST, it degrades to emphasis
        return "*"
    if name in ("span", "font"):
        style = style_of(tag)
        weight = style.get("font-weight", "").lower()
        if weight in ("bold", "bolder", "600", "700", "800", "900"):
            return "**"
        if "italic" in style.get("font-style", "").lower():
            return "*"
        if "underline" in style.get("text-decoration", "").lower():
            return "*"
    return None


def _is_monospace(tag: Tag) -> bool:
    if tag.name in ("code", "tt", "kbd", "samp"):
        return True
    if tag.name in ("span", "font"):
        family = (style_of(tag).get("font-family", "") or tag.get("face") or "").lower()
        return any(font in family for font in _MONOSPACE_FONTS)
    return False


def _merge_text(tokens: List[_Token]) -> List[_Token]:
    merged: List[_Token] = []
    for token in tokens:
        if token.kind == "text" and merged and merged[-1].kind == "text":
            merged[-1] = _Token(merged[-1].text + token.text)
        elif token.kind != "text" or token.text:
            merged.append(token)
    return merged


def _split_outer_space(text: str):
    core = text.strip()
    if not core:
        return text, "", ""
    lead = text[: len(text) - len(text.lstrip())]
    trail = text[len(text.rstrip()):]
    return lead, core, trail


def _apply_emphasis(tokens: List[_Token], marker: str) -> List[_Token]:
    result: List[_Token] = []
    for token in _merge_text(tokens):
        if token.kind == "text":
            lead, core, trail = _split_outer_space(token.text)
            if not core:
                result.append(token)
                continue
            if lead:
                result.append(_Token(lead))
            result.append(_Token(core, "emphasis", marker))
            if trail:
                result.append(_Token(trail))
        elif token.kind == "emphasis" and marker == "**":
            # RST cannot nest emphasis; strong wins
            result.append(_Token(token.text, "emphasis", "**"))
        else:
            result.append(token)
    return result


def _markup_token(text: str, template: str) -> List[_Token]:
    lead, core, trail = _split_outer_space(text)
    if not core:
        return [_Token(text)] if text else []
    tokens: List[_Token] = []
    if lead:
        tokens.append(_Token(lead))
    tokens.append(_Token(template.format(core), "markup"))
    if trail:
        tokens.append(_Token(trail))
    return tokens


def _link_tokens(tag: Tag) -> List[_Token]:
    href = (tag.get("href") or "").strip()
    text = plain_text(tag)
    if not href:
        return _collect(tag)
    if href.startswith("#"):
        anchor = href[1:]
        if not anchor:
            return [_Token(text)] if text else []
        if not text or text == anchor:
            return [_Token(f":ref:`{anchor}`", "markup")]
        return [_Token(f":ref:`{text} <{anchor}>`", "markup")]
    if not text or text == href:
        return [_Token(href)]
    return [_Token(f"`{text} <{href}>`_", "markup")]


def _collect(node) -> List[_Token]:
    tokens: List[_Token] = []
    for child in node.children:
        if isinstance(child, PreformattedString):
            continue
        if isinstance(child, NavigableString):
            tokens.append(_Token(_collapse(str(child))))
            continue
        if not isinstance(child, Tag):
            continue
        name = child.name.lower()
        if name in ("script", "style", "img") or is_list_glyph(child):
            continue
        if name == "br":
            tokens.append(_Token("\n", "break"))
        elif name == "a":
            tokens.extend(_link_tokens(child))
        elif name in ("sub", "sup"):
            tokens.extend(_markup_token(plain_text(child), ":" + name + ":`{}`"))
        elif _is_monospace(child):
            tokens.extend(_markup_token(plain_text(child), "``{}``"))
        else:
            marker = _emphasis_marker(child)
            inner = _collect(child)
            if marker:
                inner = _apply_emphasis(inner, marker)
            elif name in BLOCK_TAGS and tokens:
                tokens.append(_Token("\n", "break"))
            tokens.extend(inner)
    return tokens


def escape_rst_text(text: str) -> str:
    """Backslash-escape markup characters that would start or end inline markup."""
    result = text.replace("\\", "\\\\")
    for char in _GLUE_CHARS:
        escaped = re.escape(char)
        result = re.sub(rf"(^|\s){escaped}", lambda m: m.group(1) + "\\" + char, result)
        result = re.sub(rf"(?<!\\){escaped}($|\s)", lambda m: "\\" + char + m.group(1), result)
    return result


def _render(tokens: List[_Token]) -> str:
    out: List[str] = []
    last_char = ""
    after_markup = False
    for token in _merge_text(tokens):
        if token.kind == "break":
            out.append("\n")
            last_char, after_markup = "\n", False
            continue
        if token.kind == "text":
            if after_markup and (token.text[:1].isalnum() or token.text[:1] in _GLUE_CHARS):
                out.append("\\ ")
            out.append(escape_rst_text(token.text))
            last_char, after_markup = token.text[-1:], False
            continue
        text = token.marker + token.text + token.marker if token.kind == "emphasis" else token.text
        if last_char and (last_char.isalnum() or last_char in _GLUE_CHARS):
            out.append("\\ ")
        out.append(text)
        last_char, after_markup = text[-1:], True
    return "".join(out)


def format_inline(node) -> str:
    """Convert the inline content of ``node`` to RST inline markup.

    ``<b>`` -> ``**x**``, ``<i>`` -> ``*x*``, ``<code>`` -> double backquotes,
    ``<sub>``/``<sup>`` -> roles, ``#anchor`` links -> ``:ref:``, other links
    -> inline hyperlinks, ``<br>`` -> newline.
    """
    if node is None:
        return ""
    if isinstance(node, NavigableString):
        tokens = [_Token(_collapse(str(node)))]
    else:
        tokens = _collect(node)
    lines = []
    for line in _render(tokens).split("\n"):
        lines.append(_MULTI_SPACE_RE.sub(" ", line.replace("\xa0", " ")).strip())
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)
