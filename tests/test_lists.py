from bs4 import BeautifulSoup

import html2rst.lists as lists
from html2rst.model import FlatListItem, ListBlock, ListType


def _tag(html: str):
    return BeautifulSoup(html, "html.parser").find(True)


def _flat(content: str, level: int, list_type: ListType = ListType.UNORDERED) -> FlatListItem:
    return FlatListItem(content=content, indent_level=level, list_type=list_type)


def test_build_list_nests_by_indent_level():
    root = lists.build_list(
        [_flat("a", 0), _flat("b", 0), _flat("c", 1), _flat("d", 1), _flat("e", 0)]
    )

    assert [item.content for item in root.items] == ["a", "b", "e"]
    assert root.items[0].nested_list is None
    assert [item.content for item in root.items[1].nested_list.items] == ["c", "d"]


def test_type_switch_at_top_level_nests_under_previous_item():
    root = lists.build_list([_flat("one", 0), _flat("first", 0, ListType.ORDERED)])

    assert root.list_type == ListType.UNORDERED
    assert len(root.items) == 1
    nested = root.items[0].nested_list
    assert nested.list_type == ListType.ORDERED
    assert [item.content for item in nested.items] == ["first"]


def test_insert_creates_placeholder_parents():
    root = ListBlock(list_type=ListType.ORDERED)

    lists.insert(root, "deep", 2, ListType.ORDERED)

    assert root.items[0].content == ""
    assert root.items[0].nested_list.items[0].content == ""
    assert root.items[0].nested_list.items[0].nested_list.items[0].content == "deep"


def test_build_list_of_nothing():
    assert lists.build_list([]) is None


def test_indent_level_from_margin():
    assert lists.indent_level_from_style(_tag('<p style="margin-left:.5in">x</p>')) == 0
    assert lists.indent_level_from_style(_tag('<p style="margin-left:1.0in">x</p>')) == 1
    assert lists.indent_level_from_style(_tag('<p style="margin-left:72pt">x</p>')) == 1
    assert lists.indent_level_from_style(_tag('<p style="mso-list:l0 level3 lfo1">x</p>')) == 2
    assert lists.indent_level_from_style(_tag("<p>x</p>")) == 0


def test_classify_glyph():
    assert lists.classify_glyph("1.") == ListType.ORDERED
    assert lists.classify_glyph("a)") == ListType.ORDERED
    assert lists.classify_glyph("iv.") == ListType.ORDERED
    assert lists.classify_glyph("·") == ListType.UNORDERED
    assert lists.classify_glyph("o") == ListType.UNORDERED


def test_parse_word_bullet_paragraph():
    tag = _tag(
        "<p class=MsoListParagraphCxSpFirst style='margin-left:.5in;text-indent:-.25in;"
        "mso-list:l0 level1 lfo1'><span style='font-family:Symbol'><span style='mso-list:Ignore'>"
        "·<span style='font:7.0pt \"Times New Roman\"'>&nbsp;&nbsp;&nbsp; </span></span></span>"
        "First <b>item</b></p>"
    )

    item = lists.parse_list_paragraph(tag)

    assert item.content == "First **item**"
    assert item.indent_level == 0
    assert item.list_type == ListType.UNORDERED
    assert lists.is_list_paragraph(tag)


def test_parse_word_numbered_paragraph():
    tag = _tag(
        "<p class=MsoListParagraph style='margin-left:1.0in;mso-list:l1 level2 lfo2'>"
        "<span style='mso-list:Ignore'>a.&nbsp;&nbsp; </span>Second level</p>"
    )

    item = lists.parse_list_paragraph(tag)

    assert item.content == "Second level"
    assert item.indent_level == 1
    assert item.list_type == ListType.ORDERED


def test_parse_list_paragraph_with_typed_marker():
    item = lists.parse_list_paragraph(_tag("<p class=MsoListParagraph>2. Second</p>"))

    assert item.content == "Second"
    assert item.list_type == ListType.ORDERED


def test_parse_list_paragraph_without_marker_is_unordered():
    item = lists.parse_list_paragraph(_tag("<p class=MsoListParagraph>Hello world</p>"))

    assert item.content == "Hello world"
    assert item.list_type == ListType.UNORDERED


def test_parse_html_list_keeps_real_nesting():
    block = lists.parse_html_list(_tag("<ul><li>One<ul><li>Sub</li></ul></li><li>Two</li></ul>"))

    assert block.list_type == ListType.UNORDERED
    assert [item.content for item in block.items] == ["One", "Two"]
    assert block.items[0].nested_list.items[0].content == "Sub"
    assert block.items[1].nested_list is None
