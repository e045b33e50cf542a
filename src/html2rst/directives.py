"""Custom directive grammar for ``rst_*`` paragraph styles.

A paragraph styled ``rst_note`` (or ``rst_code-block``, ...) holds a small
mini-language::

    [argument]          optional, first non-blank line only
    :option: value      optional, before the body
    :flag:

    Body text           everything else, kept verbatim

Parsing and :func:`generate_custom_directive` are inverses of each other.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from .model import CustomDirective, Field

RST_STYLE_PREFIX = "rst_"
INDENT = "   "

ARGUMENT_RE = re.compile(r"^\[(.*)\]$")
OPTION_RE = re.compile(r"^:([A-Za-z][\w-]*):\s*(.*)$")
FIELD_LINE_RE = re.compile(r"^([A-Za-z][\w-]*(?: [\w-]+){0,2})::(?:\t| +|$)(.*)$")

KNOWN_DIRECTIVES = [
    # admonitions
    "attention",
    "caution",
    "danger",
    "error",
    "hint",
    "important",
    "note",
    "tip",
    "warning",
    "admonition",
    # body elements
    "topic",
    "sidebar",
    "line-block",
    "parsed-literal",
    "rubric",
    "epigraph",
    "highlights",
    "pull-quote",
    "compound",
    "container",
    # tables
    "table",
    "csv-table",
    "list-table",
    # code
    "code",
    "code-block",
    "sourcecode",
    "literalinclude",
    # sphinx
    "toctree",
    "only",
    "index",
    "glossary",
    "productionlist",
    "deprecated",
    "versionadded",
    "versionchanged",
    "seealso",
    "centered",
    "hlist",
    # sphinx-needs
    "need",
    "req",
    "spec",
    "impl",
    "test",
    "needflow",
    "needtable",
    "needlist",
    # extensions
    "todo",
    "todolist",
    "math",
    "graphviz",
    "plantuml",
]

DIRECTIVE_CORRECTIONS = {
    "codeblock": "code-block",
    "code_block": "code-block",
    "source-code": "code-block",
    "warn": "warning",
    "info": "note",
    "requirement": "req",
    "specification": "spec",
    "implementation": "impl",
    "testcase": "test",
    "test-case": "test",
}


def is_rst_directive_style(style_name: Optional[str]) -> bool:
    return bool(style_name) and style_name.lower().startswith(RST_STYLE_PREFIX)


def extract_directive_name(style_name: str) -> str:
    return style_name[len(RST_STYLE_PREFIX):]


def normalize_directive_name(style_name: str) -> str:
    """``rst_CODE_BLOCK`` -> ``code-block``."""
    return extract_directive_name(style_name).lower().replace("_", "-")


def get_known_directives() -> List[str]:
    return list(KNOWN_DIRECTIVES)


def is_known_directive(name: str) -> bool:
    return name.lower() in KNOWN_DIRECTIVES


def suggest_directive_name(name: str) -> Optional[str]:
    return DIRECTIVE_CORRECTIONS.get(name.lower())


def _trim_blank_lines(lines: List[str]) -> List[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def parse_custom_directive(style_name: str, content: str) -> CustomDirective:
    argument: Optional[str] = None
    options: Dict[str, str] = {}
    body_lines: List[str] = []
    seen_first = False
    in_body = False

    for line in (content or "").split("\n"):
        if in_body:
            body_lines.append(line)
            continue
        stripped = line.strip()
        if not stripped:
            continue
        if not seen_first:
            seen_first = True
            match = ARGUMENT_RE.match(stripped)
            if match:
                argument = match.group(1).strip()
                continue
        match = OPTION_RE.match(stripped)
        if match:
            options[match.group(1)] = match.group(2).strip()
            continue
        in_body = True
        body_lines.append(line)

    return CustomDirective(
        name=extract_directive_name(style_name),
        argument=argument or None,
        options=options,
        content="\n".join(_trim_blank_lines(body_lines)),
        raw_text=content or "",
        style=style_name,
    )


def generate_custom_directive(directive: CustomDirective) -> str:
    if directive.argument:
        lines = [f".. {directive.name}:: {directive.argument}"]
    else:
        lines = [f".. {directive.name}::"]

    for name, value in directive.options.items():
        lines.append(f"{INDENT}:{name}: {value}" if value else f"{INDENT}:{name}:")

    if directive.content:
        lines.append("")
        for line in directive.content.split("\n"):
            lines.append(f"{INDENT}{line}" if line.strip() else "")
    return "\n".join(lines)


def parse_field_line(line: str) -> Optional[Field]:
    """Parse ``Name:: value``; a bare ``Name::`` (with or without a trailing tab) has value ``""``."""
    match = FIELD_LINE_RE.match((line or "").strip(" \r\n"))
    if not match:
        return None
    return Field(name=match.group(1).strip(), value=match.group(2).strip())


def parse_field_block(text: str) -> Optional[List[Field]]:
    """Return the fields when every non-blank line of ``text`` is a field line."""
    fields: List[Field] = []
    for line in (text or "").split("\n"):
        if not line.strip():
            continue
        parsed = parse_field_line(line)
        if parsed is None:
            return None
        fields.append(parsed)
    return fields or None
