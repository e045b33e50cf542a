import base64
import datetime
import io
from pathlib import Path

import pytest

import html2rst.core as core


def _png_bytes(width: int, height: int) -> bytes:
    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(0, 200, 0)).save(buffer, format="PNG")
    return buffer.getvalue()


def _data_uri(payload: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(payload).decode("ascii")


def _body(html: str) -> str:
    return f"<html><body>{html}</body></html>"


def test_convert_empty_input():
    result = core.convert_html_to_rst("")

    assert result.text == ""
    assert result.elements == []
    assert result.images == []
    assert result.warnings == []


def test_convert_none_input_warns():
    result = core.convert_html_to_rst(None)

    assert result.text == ""
    assert result.warnings == ["No HTML content to convert"]


def test_convert_parser_failure_is_reported(monkeypatch):
    def broken(html, image_dir="images/"):
        raise ValueError("boom")

    monkeypatch.setattr(core, "parse_document", broken)

    result = core.convert_html_to_rst("<p>x</p>")

    assert result.text == ""
    assert result.warnings == ["HTML parsing error: boom"]


def test_convert_document():
    result = core.convert_html_to_rst(_body("<h1>Title</h1><p>Hello <b>world</b></p>"))

    assert result.text == "=====\nTitle\n=====\n\nHello **world**"
    assert len(result.elements) == 2


def test_convert_options_are_applied():
    html = _body("<h1>Title</h1><p>one two three four five six</p>")
    options = core.ConversionOptions(line_width=10, title_overline=False)

    result = core.convert_html_to_rst(html, options)

    assert result.text == "Title\n=====\n\none two\nthree four\nfive six"


def test_include_metadata_prefixes_field_list():
    html = '<html lang="de"><head><title>Doc</title></head><body><p>x</p></body></html>'

    result = core.convert_html_to_rst(html, core.ConversionOptions(include_metadata=True))

    assert result.text == ":title: Doc\n:language: de\n\nx"
    assert result.metadata.title == "Doc"


def test_generated_comment():
    result = core.convert_html_to_rst(_body("<p>x</p>"), core.ConversionOptions(add_generated_comment=True))

    assert result.text.startswith(".. Generated by html2rst on ")
    assert result.text.endswith("\n\nx")
    assert core.format_generation_comment(datetime.date(2024, 1, 2)) == ".. Generated by html2rst on 2024-01-02"


def test_validate_option_adds_lint_warnings():
    result = core.convert_html_to_rst(_body('<p class="rst_code-block">a = 2 * 3</p>'), core.ConversionOptions(validate=True))

    assert any("unpaired asterisk" in warning for warning in result.warnings)


def test_validate_rst():
    assert core.validate_rst("Title\n=====\n\n**bold** and \\* escaped") == []
    assert core.validate_rst("Title\n===") == ["Line 2: Heading underline may be too short"]
    assert core.validate_rst("a *b") == ["Line 1: Potentially unpaired asterisk (*)"]
    assert core.validate_rst("\tx") == ["Line 1: Contains tab character (spaces preferred)"]
    assert core.validate_rst("") == []


def test_conversion_stats():
    result = core.convert_html_to_rst(_body("<h1>Title</h1><p>Hello <b>world</b></p>"))

    stats = core.get_conversion_stats(result)

    assert stats.element_count == 2
    assert stats.image_count == 0
    assert stats.word_count == 5
    assert stats.line_count == 5
    assert not stats.has_metadata
    assert stats.warning_count == 0


def test_extract_images():
    images = core.extract_images(_body(f'<p><img src="{_data_uri(_png_bytes(3, 4))}"></p>'), image_dir="pics")

    assert [ref.filename for ref in images] == ["pics/image_001.png"]
    assert (images[0].width, images[0].height) == (3, 4)


def test_preview_conversion_truncates():
    preview = core.preview_conversion(_body("<p>One</p><p>Two</p><p>Three</p>"), max_elements=2)

    assert preview == "One\n\nTwo\n\n.. [Preview truncated - 1 more elements]"
    assert core.preview_conversion(_body("<p>One</p>")) == "One"


def test_slugify_filename():
    assert core.slugify_filename("My Doc (final)") == "My_Doc__final_"
    assert core.slugify_filename("  ") == "document"


def test_read_html_falls_back_to_cp1252(tmp_path):
    path = tmp_path / "legacy.htm"
    path.write_bytes("<p>café “quoted”</p>".encode("cp1252"))

    assert core.read_html(path) == "<p>café “quoted”</p>"


def test_pipeline_writes_rst_and_images(tmp_path):
    source = tmp_path / "src"
    (source / "doc_files").mkdir(parents=True)
    (source / "doc_files" / "image001.png").write_bytes(_png_bytes(5, 5))
    html_path = source / "My Doc.html"
    html_path.write_text(
        _body(
            "<h1>Report</h1>"
            f'<p><img src="{_data_uri(_png_bytes(8, 6))}"></p>'
            '<p><img src="doc_files/image001.png"></p>'
            '<p><img src="missing.png"></p>'
        ),
        encoding="utf-8",
    )
    out_dir = tmp_path / "out"

    result, rst_path = core.run_conversion_pipeline(input_path=html_path, out_dir=out_dir)

    assert rst_path == out_dir / "My_Doc.rst"
    text = rst_path.read_text(encoding="utf-8")
    assert text.startswith("======\nReport\n======\n")
    assert text.endswith("\n") and not text.endswith("\n\n")
    assert ".. image:: images/image_001.png" in text
    assert (out_dir / "images" / "image_001.png").read_bytes() == _png_bytes(8, 6)
    assert (out_dir / "images" / "image_002.png").read_bytes() == _png_bytes(5, 5)
    assert not (out_dir / "images" / "image_003.png").exists()
    assert any("image_003.png" in warning and "not written" in warning for warning in result.warnings)


def test_pipeline_rejects_file_as_output_dir(tmp_path):
    html_path = tmp_path / "doc.html"
    html_path.write_text("<p>x</p>", encoding="utf-8")
    blocker = tmp_path / "out"
    blocker.write_text("not a dir", encoding="utf-8")

    with pytest.raises(RuntimeError):
        core.run_conversion_pipeline(input_path=html_path, out_dir=blocker)


def test_pipeline_rejects_missing_input(tmp_path):
    with pytest.raises(RuntimeError):
        core.run_conversion_pipeline(input_path=Path(tmp_path / "nope.html"), out_dir=tmp_path / "out")


def test_setup_logging_levels():
    core.setup_logging(verbose=False, debug=True)
    assert core.LOG.level == core.logging.DEBUG

    core.setup_logging(verbose=True, debug=False)
    assert core.LOG.level == core.logging.INFO

    core.setup_logging(verbose=False, debug=False)
    assert core.LOG.level == core.logging.WARNING


def test_plain_text_asterisks_are_escaped_and_pass_validation():
    result = core.convert_html_to_rst(_body("<p>2 * 3 and *important</p>"), core.ConversionOptions(validate=True))

    assert result.text == "2 \\* 3 and \\*important"
    assert result.warnings == []


def test_list_with_inline_picture_renders_as_one_list():
    item = (
        "<p class=MsoListParagraph style='margin-left:.5in;mso-list:l0 level1 lfo1'>"
        "<span style='mso-list:Ignore'>{0}.&nbsp; </span>{1}</p>"
    )
    html = _body(item.format(1, "First") + item.format(2, 'See <img src="a.png">') + item.format(3, "Third"))

    result = core.convert_html_to_rst(html)

    assert result.text.startswith("#. First\n#. See\n#. Third\n\n.. image:: ")
