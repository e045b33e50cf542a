from bs4 import BeautifulSoup

import html2rst.tables as tables
from html2rst.model import Table, TableCell, TableOptions, TableRow


def _row(*texts: str, header: bool = False) -> TableRow:
    return TableRow(cells=[TableCell(content=text) for text in texts], is_header=header)


def _table_tag(html: str):
    return BeautifulSoup(html, "html.parser").find("table")


def _assert_rectangular(grid: str) -> None:
    lengths = {len(line) for line in grid.split("\n")}
    assert len(lengths) == 1, grid


def test_generate_grid_table_with_header():
    grid = tables.generate_grid_table([_row("Name", "Qty", header=True), _row("Apple", "3")])

    assert grid == (
        "+-------+-----+\n"
        "| Name  | Qty |\n"
        "+=======+=====+\n"
        "| Apple | 3   |\n"
        "+-------+-----+"
    )


def test_has_header_flag_marks_first_row():
    grid = tables.generate_grid_table([_row("A", "B"), _row("1", "2")], has_header=True)

    assert grid.split("\n")[2].startswith("+===")
    assert "=" not in grid.split("\n")[-1]


def test_long_cells_wrap_and_lines_stay_equal():
    long_text = "word " * 30
    grid = tables.generate_grid_table([_row("Key", long_text.strip()), _row("k2", "short")])

    _assert_rectangular(grid)
    assert len(grid.split("\n")[0]) == 1 + (3 + 2) + 1 + (tables.MAX_COLUMN_WIDTH + 2) + 1
    assert len(grid.split("\n")) > 5


def test_colspan_cell_spans_columns():
    rows = [TableRow(cells=[TableCell(content="A", colspan=2)]), _row("B", "C")]

    grid = tables.generate_grid_table(rows)

    _assert_rectangular(grid)
    assert grid.split("\n")[1] == "| A         |"
    assert grid.split("\n")[3] == "| B   | C   |"


def test_rowspan_cell_leaves_border_open():
    rows = [TableRow(cells=[TableCell(content="A", rowspan=2), TableCell(content="B")]), _row("C")]

    grid = tables.generate_grid_table(rows)
    lines = grid.split("\n")

    _assert_rectangular(grid)
    assert lines[2] == "|     +-----+"
    assert lines[3] == "|     | C   |"


def test_empty_rows_render_nothing():
    assert tables.generate_grid_table([]) == ""


def test_calculate_column_widths_respects_limits():
    widths = tables.calculate_column_widths([_row("a", "x" * 80), _row("bbbb", "y")])

    assert widths == [4, tables.MAX_COLUMN_WIDTH]


def test_pad_cell_alignment():
    assert tables.pad_cell("ab", 6) == "ab    "
    assert tables.pad_cell("ab", 6, "right") == "    ab"
    assert tables.pad_cell("ab", 6, "center") == "  ab  "


def test_parse_html_table_with_thead_and_caption():
    table = tables.parse_html_table(
        _table_tag(
            "<table align=center width=400><caption>Table 3: Results</caption>"
            "<thead><tr><th>Run</th><th>Score</th></tr></thead>"
            "<tbody><tr><td>1</td><td align=right><b>9</b></td></tr></tbody></table>"
        )
    )

    assert table.options.has_header
    assert table.rows[0].is_header
    assert not table.rows[1].is_header
    assert table.rows[1].cells[1].content == "**9**"
    assert table.rows[1].cells[1].align == "right"
    assert table.options.caption == "Results"
    assert table.options.table_number == "3"
    assert table.options.name == "tbl-3"
    assert table.options.align == "center"
    assert table.options.width == "400px"


def test_parse_html_table_infers_header_from_th_row():
    table = tables.parse_html_table(
        _table_tag("<table><tr><th>A</th><th>B</th></tr><tr><td>1</td><td>2</td></tr></table>")
    )

    assert table.options.has_header
    assert table.rows[0].is_header
    assert len(table.rows) == 2


def test_nested_table_rows_are_not_merged_into_outer_table():
    table = tables.parse_html_table(
        _table_tag("<table><tr><td>outer<table><tr><td>inner</td></tr></table></td></tr></table>")
    )

    assert len(table.rows) == 1


def test_generate_table_directive_with_caption():
    table = Table(
        rows=[_row("Name", header=True), _row("Apple")],
        options=TableOptions(caption="Sales", table_number="1", name="tbl-1", has_header=True),
    )

    text = tables.generate_table_directive(table)
    lines = text.split("\n")

    assert lines[0] == ".. table:: Sales"
    assert lines[1] == "   :name: tbl-1"
    assert lines[2] == ""
    assert all(line.startswith("   +") or line.startswith("   |") for line in lines[3:])


def test_generate_table_directive_without_options_is_a_bare_grid():
    table = Table(rows=[_row("x")])

    assert tables.generate_table_directive(table) == "+-----+\n| x   |\n+-----+"


def test_generate_table_ref_name_without_number():
    assert tables.generate_table_ref_name("Table: Quarterly Sales") == "tbl-quarterly-sales"


def test_multi_row_header_has_one_header_separator():
    table = tables.parse_html_table(
        _table_tag(
            "<table><thead><tr><th colspan=2>Results</th></tr><tr><th>Run</th><th>Score</th></tr></thead>"
            "<tbody><tr><td>1</td><td>9</td></tr></tbody></table>"
        )
    )

    grid = tables.generate_grid_table(table.rows, table.options.has_header)
    lines = grid.split("\n")

    assert [index for index, line in enumerate(lines) if line.startswith("+=")] == [4]
    _assert_rectangular(grid)


def test_header_only_table_has_no_header_separator():
    grid = tables.generate_grid_table([_row("A", header=True)], has_header=True)

    assert "=" not in grid


def test_cell_text_cannot_open_a_border():
    grid = tables.generate_grid_table([_row("a | b", "c"), _row("+-- x", "d")])
    lines = grid.split("\n")

    _assert_rectangular(grid)
    assert lines[1] == "| a \\| b | c   |"
    assert lines[3] == "| \\+-- x | d   |"


def test_escaped_cell_text_is_not_escaped_twice():
    assert tables.escape_cell_text("a \\| b") == "a \\| b"
    assert tables.escape_cell_text("a|b") == "a|b"
