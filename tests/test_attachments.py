from pathlib import Path

import pytest

from NoteMark.attachments import (
    TABLE_MAX_WIDTH,
    is_table_row,
    is_table_separator,
    layout_table,
    load_image_preview,
    make_image_loader,
    make_rule_attachment,
    make_table_attachment,
    resolve_image_path,
    table_row_cells,
)


def test_resolve_image_path(tmp_path: Path):
    assert resolve_image_path("a/b.png", tmp_path) == tmp_path / "a" / "b.png"
    assert resolve_image_path("/abs/c.png", tmp_path) == Path("/abs/c.png")
    assert resolve_image_path("~/d.png", tmp_path) == Path("~/d.png").expanduser()


@pytest.mark.parametrize(
    "line, expected",
    [("| a | b |", True), ("  |x|  ", True), ("||", False), ("| a", False), ("a |", False)],
)
def test_is_table_row(line, expected):
    assert is_table_row(line) is expected


def test_is_table_separator():
    assert is_table_separator("|---|:--:|")
    assert is_table_separator("| - | - |")
    assert not is_table_separator("| a | - |")
    assert not is_table_separator("---")


def test_table_row_cells_trims_each_cell():
    assert table_row_cells("|  a | b b |c|") == ["a", "b b", "c"]
    assert table_row_cells("| x |  |") == ["x", ""]


def test_small_table_uses_minimum_cell_width():
    preview = layout_table(("a", "b"), [("1", "2"), ("3", "4"), ("5", "6")])
    assert preview.column_widths == (54.0, 54.0)
    assert preview.header_fill == "E3E8ED"
    assert preview.row_fills == ("FFFFFF", "F7F7FA", "FFFFFF")
    assert preview.height == preview.header_height + 3 * preview.row_height


def test_wide_table_is_scaled_to_max_width():
    header = ("word " * 20, "more " * 20)
    preview = layout_table(header, [])
    assert preview.width <= TABLE_MAX_WIDTH
    assert preview.column_widths[0] == preview.column_widths[1]


def test_table_attachment_skips_extra_separators():
    lines = ["| h |", "|---|", "| 1 |", "|---|", "| 2 |"]
    attachment = make_table_attachment(lines)
    assert attachment.header == ("h",)
    assert attachment.rows == (("1",), ("2",))
    assert attachment.source == "\n".join(lines)


def test_rule_attachment_preview():
    rule = make_rule_attachment()
    assert rule.source == "---"
    assert rule.preview.width == 1000
    assert rule.preview.height == 1


def test_image_preview_keeps_small_images(png_factory):
    path = png_factory("small.png", width=40, height=20)
    preview = load_image_preview(path)
    assert (preview.width, preview.height) == (40, 20)
    assert preview.content_type == "image/png"


def test_image_preview_rejects_non_images(tmp_path: Path):
    text_file = tmp_path / "note.png"
    text_file.write_text("not an image", encoding="utf-8")
    assert load_image_preview(text_file) is None
    assert load_image_preview(tmp_path / "missing.png") is None


def test_image_loader_honours_max_width(tmp_path: Path, png_factory):
    png_factory("wide.png", width=300, height=100)
    preview = make_image_loader(tmp_path, max_width=150)("wide.png")
    assert preview.width == 150
    assert preview.height == 50


def test_truncated_image_header_is_rejected(tmp_path: Path):
    gif = tmp_path / "cut.gif"
    gif.write_bytes(b"GIF89a\x01")
    assert load_image_preview(gif) is None


def test_loader_skips_unknown_home_directory(tmp_path: Path):
    assert make_image_loader(tmp_path)("~nosuchuser_zz/a.png") is None
