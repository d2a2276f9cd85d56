import textwrap

from NoteMark import markdown_parser
from NoteMark.attachments import make_rule_attachment
from NoteMark.config import Settings
from NoteMark.model import (
    Heading,
    HorizontalRule,
    Image,
    OrderedListItem,
    Plain,
    RuleAttachment,
    Table,
    TableAttachment,
    UnorderedListItem,
)
from NoteMark.styles import LinkTarget, ListKind


def parse(text, loader=lambda path: None):
    return markdown_parser.parse_markdown(text, image_loader=loader)


def test_parse_blocks_in_line_order():
    md_text = textwrap.dedent(
        """\
        # Введение

        Текст с *курсивом* и **жирным**.
        - Первый пункт
        3. Третий пункт
        ---
        | A | B |
        |---|---|
        | 1 | 2 |
        конец"""
    )
    document = parse(md_text)
    kinds = [block.kind for block in document.blocks]
    assert kinds[0] == Heading(1)
    assert kinds[1] == Plain()
    assert kinds[2] == Plain()
    assert kinds[3] == UnorderedListItem()
    assert kinds[4] == OrderedListItem(3)
    assert kinds[5] == HorizontalRule()
    assert isinstance(kinds[6], Table)
    assert kinds[7] == Plain()
    assert len(document.blocks) == 8


def test_heading():
    document = parse("# Title")
    assert len(document.blocks) == 1
    block = document.blocks[0]
    assert block.kind == Heading(1)
    assert block.text == "Title"
    assert all(run.attributes.heading_level == 1 for run in block.runs)


def test_heading_levels_and_limits():
    assert parse("###### six").blocks[0].kind == Heading(6)
    seven = parse("####### seven").blocks[0]
    assert seven.kind == Plain()
    assert seven.text == "####### seven"
    assert parse("#nospace").blocks[0].kind == Plain()


def test_heading_content_drops_leading_spaces():
    block = parse("##    Spaced").blocks[0]
    assert block.kind == Heading(2)
    assert block.text == "Spaced"


def test_heading_keeps_inline_formatting():
    block = parse("## A *slanted* word").blocks[0]
    slanted = [run for run in block.runs if run.attributes.italic]
    assert [run.text for run in slanted] == ["slanted"]
    assert slanted[0].attributes.heading_level == 2


def test_unordered_list_items():
    document = parse("- a\n- b")
    assert len(document.blocks) == 2
    for block, content in zip(document.blocks, ["a", "b"]):
        assert block.kind == UnorderedListItem()
        assert block.runs[0].text == "-\t"
        assert block.runs[0].attributes.marker
        assert block.runs[1].text == content
        assert block.runs[1].attributes.list_kind is ListKind.UNORDERED


def test_ordered_list_index_is_kept():
    document = parse("7. seven\n2. two")
    first, second = document.blocks
    assert first.kind == OrderedListItem(7)
    assert first.runs[0].text == "7.\t"
    assert second.kind == OrderedListItem(2)
    assert second.text == "2.\ttwo"


def test_ordered_item_needs_space_after_dot():
    block = parse("1.x").blocks[0]
    assert block.kind == Plain()
    assert block.text == "1.x"


def test_empty_lines_are_empty_blocks():
    document = parse("a\n\nb")
    assert [block.text for block in document.blocks] == ["a", "", "b"]
    assert document.blocks[1].runs == []


def test_empty_input_gives_one_empty_block():
    document = parse("")
    assert len(document.blocks) == 1
    assert document.blocks[0].kind == Plain()


def test_horizontal_rule_must_be_exact():
    rule = parse("---").blocks[0]
    assert isinstance(rule.runs[0].attachment, RuleAttachment)
    assert rule.runs[0].attachment.source == "---"
    assert parse("--- ").blocks[0].kind == Plain()


def test_rule_preview_uses_settings_theme():
    settings = Settings(body_size=20)
    rule = markdown_parser.parse_markdown("---\n---", settings=settings).blocks[1]
    assert rule.runs[0].attachment == make_rule_attachment(settings.theme())


def test_table_block():
    lines = ["| Name | Qty |", "|:-----|----:|", "| apple | 3 |", "| pear | 10 |"]
    document = parse("\n".join(lines))
    assert len(document.blocks) == 1
    kind = document.blocks[0].kind
    assert isinstance(kind, Table)
    assert kind.header_cells == ("Name", "Qty")
    assert kind.data_rows == (("apple", "3"), ("pear", "10"))
    assert kind.markdown_source == "\n".join(lines)


def test_table_needs_separator():
    document = parse("| a | b |\n| c | d |")
    assert [block.kind for block in document.blocks] == [Plain(), Plain()]


def test_table_stops_at_first_non_row():
    document = parse("| a |\n|---|\n| 1 |\n\n| 2 |")
    attachment = document.blocks[0].runs[0].attachment
    assert isinstance(attachment, TableAttachment)
    assert attachment.rows == (("1",),)
    assert document.blocks[1].text == ""
    assert document.blocks[2].text == "| 2 |"


def test_link_parsing():
    block = parse("go [home](https://example.com/a b)").blocks[0]
    link_run = block.runs[1]
    assert link_run.text == "home"
    assert link_run.attributes.link == "https://example.com/a b"

    block = parse("[x](http://a)").blocks[0]
    assert isinstance(block.runs[0].attributes.link, LinkTarget)
    assert str(block.runs[0].attributes.link) == "http://a"
    assert block.runs[0].attributes.display_underline
    assert not block.runs[0].attributes.underline


def test_unsafe_link_stays_opaque_string():
    block = parse("[x](javascript:void)").blocks[0]
    assert block.runs[0].attributes.link == "javascript:void"


def test_missing_image_stays_literal(tmp_path):
    settings = Settings(notes_root=str(tmp_path))
    document = markdown_parser.parse_markdown("![alt](nowhere.png)", settings=settings)
    block = document.blocks[0]
    assert block.text == "![alt](nowhere.png)"
    assert all(run.attachment is None for run in block.runs)
    assert all(run.attributes.link is None for run in block.runs)


def test_image_resolves_against_notes_root(tmp_path, png_factory):
    png_factory("photo.png", width=1000, height=400)
    settings = Settings(notes_root=str(tmp_path))
    document = markdown_parser.parse_markdown("![A photo](photo.png)", settings=settings)
    block = document.blocks[0]
    assert block.kind == Image("A photo", "photo.png")
    preview = block.runs[0].attachment.preview
    assert preview.width == 500
    assert preview.height == 200
    assert preview.pixel_width == 1000


def test_image_inside_list_item_keeps_list_kind(tmp_path, png_factory):
    png_factory("dot.png")
    settings = Settings(notes_root=str(tmp_path))
    block = markdown_parser.parse_markdown("- ![](dot.png) dot", settings=settings).blocks[0]
    assert block.kind == UnorderedListItem()
    assert block.runs[1].attachment is not None
    assert block.runs[1].attributes.list_kind is ListKind.UNORDERED


def test_parse_never_raises_on_odd_input():
    odd = "**unclosed\n[broken](\n<u>x\n|\n| |\n*\n# \n1. \n- \n\t\r"
    document = parse(odd)
    assert len(document.blocks) == odd.count("\n") + 1


def test_unreadable_images_stay_literal(tmp_path):
    (tmp_path / "cut.gif").write_bytes(b"GIF89a\x01")
    settings = Settings(notes_root=str(tmp_path))
    text = "![a](~nosuchuser_zz/a.png) ![x](cut.gif)"
    block = markdown_parser.parse_markdown(text, settings=settings).blocks[0]
    assert block.text == text
    assert all(run.attachment is None for run in block.runs)
