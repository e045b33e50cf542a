import html2rst.postprocess as postprocess
from html2rst.captions import parse_caption
from html2rst.directives import parse_custom_directive
from html2rst.model import (
    ContentsOptions,
    Figure,
    FigureOptions,
    FlatListItem,
    Image,
    ImageOptions,
    ListBlock,
    ListType,
    Paragraph,
    ParsedCaption,
    Table,
    TableCell,
    TableOfContents,
    TableOptions,
    TableRow,
)


def _table(caption=None) -> Table:
    return Table(rows=[TableRow(cells=[TableCell(content="a")])], options=TableOptions(caption=caption))


def _caption_paragraph(text: str, style=None) -> Paragraph:
    return Paragraph(content=text, caption=parse_caption(text), style=style)


def _styled_caption(text: str) -> Paragraph:
    caption = ParsedCaption(type="", number="", text=text, original=text)
    return Paragraph(content=text, caption=caption, style="MsoCaption")


def test_preceding_table_caption_is_absorbed():
    elements = [_caption_paragraph("Table 1: Sales"), _table()]

    result = postprocess.post_process(elements)

    assert len(result) == 1
    table = result[0]
    assert table.options.table_number == "1"
    assert table.options.caption == "Sales"
    assert table.options.name == "tbl-1"
    assert len(elements) == 2
    assert elements[1].options.caption is None


def test_following_table_caption_is_absorbed():
    result = postprocess.post_process([_table(), _caption_paragraph("Table 2: Costs")])

    assert len(result) == 1
    assert result[0].options.caption == "Costs"


def test_captioned_table_keeps_neighbouring_caption_paragraph():
    result = postprocess.post_process([_table(caption="Own"), _caption_paragraph("Table 2: Costs")])

    assert len(result) == 2
    assert result[0].options.caption == "Own"


def test_figure_caption_does_not_attach_to_table():
    result = postprocess.post_process([_table(), _caption_paragraph("Figure 1: Chart")])

    assert len(result) == 2
    assert result[0].options.caption is None


def test_styled_caption_without_number_attaches_to_figure():
    figure = Figure(options=FigureOptions(uri="images/image_001.png"))
    paragraph = _styled_caption("A sunset")

    result = postprocess.post_process([figure, paragraph])

    assert len(result) == 1
    assert result[0].options.caption == "A sunset"
    assert result[0].options.figname is None


def test_figure_caption_with_number_sets_figname():
    figure = Figure(options=FigureOptions(uri="images/image_001.png"))

    result = postprocess.post_process([figure, _caption_paragraph("Figure 3.2: Layout")])

    assert result[0].options.caption == "Layout"
    assert result[0].options.figure_number == "3.2"
    assert result[0].options.figname == "fig-3-2"


def test_figure_keeps_paragraph_that_is_not_its_caption_source():
    figure = Figure(options=FigureOptions(uri="x.png", caption="Mine"), caption_source="Figure 1: Mine")

    result = postprocess.post_process([figure, _caption_paragraph("Figure 2: Other")])

    assert len(result) == 2


def test_same_style_directives_merge():
    first = parse_custom_directive("rst_code-block", "[python]")
    second = parse_custom_directive("rst_code-block", ":linenos:")
    third = parse_custom_directive("rst_code-block", "print(1)")

    result = postprocess.post_process([first, second, third])

    assert len(result) == 1
    merged = result[0]
    assert merged.argument == "python"
    assert merged.options == {"linenos": ""}
    assert merged.content == "print(1)"


def test_directive_body_paragraphs_keep_blank_line():
    result = postprocess.post_process(
        [parse_custom_directive("rst_note", "First"), parse_custom_directive("rst_note", "Second")]
    )

    assert result[0].content == "First\n\nSecond"


def test_different_directive_styles_do_not_merge():
    result = postprocess.post_process(
        [parse_custom_directive("rst_note", "a"), parse_custom_directive("rst_warning", "b")]
    )

    assert [directive.name for directive in result] == ["note", "warning"]


def test_consecutive_tocs_collapse_to_deepest():
    result = postprocess.post_process(
        [
            TableOfContents(options=ContentsOptions(title="Index", depth=1)),
            TableOfContents(options=ContentsOptions(depth=3)),
            TableOfContents(options=ContentsOptions(depth=2)),
        ]
    )

    assert len(result) == 1
    assert result[0].options.title == "Index"
    assert result[0].options.depth == 3


def test_flat_items_fold_into_lists_split_by_paragraphs():
    result = postprocess.post_process(
        [
            FlatListItem(content="a"),
            FlatListItem(content="b", indent_level=1, list_type=ListType.ORDERED),
            Paragraph(content="between"),
            FlatListItem(content="c"),
        ]
    )

    assert [type(element) for element in result] == [ListBlock, Paragraph, ListBlock]
    assert result[0].items[0].nested_list.list_type == ListType.ORDERED
    assert result[2].items[0].content == "c"


def test_caption_predicates():
    assert postprocess.is_table_caption(_caption_paragraph("Table 1: x"))
    assert not postprocess.is_table_caption(_caption_paragraph("Figure 1: x"))
    assert postprocess.is_figure_caption(_caption_paragraph("Figure 1: x"))
    assert postprocess.is_figure_caption(_caption_paragraph("Chart 1: x"))
    assert not postprocess.is_figure_caption(Paragraph(content="plain"))
    assert not postprocess.is_table_caption(None)


def test_pictures_inside_list_items_follow_the_list():
    picture = Image(options=ImageOptions(uri="images/image_001.png"))
    result = postprocess.post_process(
        [
            FlatListItem(content="one", list_type=ListType.ORDERED),
            FlatListItem(content="two", list_type=ListType.ORDERED, images=[picture]),
            FlatListItem(content="three", list_type=ListType.ORDERED),
        ]
    )

    assert [type(element) for element in result] == [ListBlock, Image]
    assert [item.content for item in result[0].items] == ["one", "two", "three"]
    assert result[1] is picture
