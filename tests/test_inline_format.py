from NoteMark.inline_format import (
    InlineContext,
    apply_bold,
    apply_italic,
    apply_links,
    apply_underline,
    format_inline,
)
from NoteMark.model import Run
from NoteMark.styles import BODY, heading_attributes


def spans(runs):
    return [(run.text, run.attributes.bold, run.attributes.italic) for run in runs]


def test_nested_italic_inside_bold():
    runs = format_inline("**bold *and italic* together**")
    assert spans(runs) == [
        ("bold ", True, False),
        ("and italic", True, True),
        (" together", True, False),
    ]


def test_triple_asterisks_are_bold_italic():
    runs = format_inline("a ***b*** c")
    assert spans(runs) == [("a ", False, False), ("b", True, True), (" c", False, False)]


def test_bold_over_italic_content_becomes_bold_italic():
    runs = [Run("**x**", BODY.with_changes(italic=True))]
    result = apply_bold(runs, InlineContext())
    assert spans(result) == [("x", True, True)]


def test_italic_does_not_match_bold_markers():
    runs = [Run("**x**")]
    assert apply_italic(runs, InlineContext())[0].text == "**x**"


def test_font_traits_come_from_first_character():
    # italic on "a", plain on "b": the whole bold span follows "a"
    runs = [Run("**"), Run("a", BODY.with_changes(italic=True)), Run("b**")]
    result = apply_bold(runs, InlineContext())
    assert spans(result) == [("ab", True, True)]


def test_bold_keeps_link_on_inner_text():
    runs = format_inline("**see [docs](https://example.com) now**")
    assert [run.text for run in runs] == ["see ", "docs", " now"]
    assert all(run.attributes.bold for run in runs)
    assert str(runs[1].attributes.link) == "https://example.com"
    assert runs[0].attributes.link is None


def test_links_replace_markup_with_text():
    result = apply_links([Run("[a](x) and [b](y)")], InlineContext())
    assert [run.text for run in result] == ["a", " and ", "b"]
    assert result[1].attributes.link is None
    assert str(result[0].attributes.link) == "x"
    assert str(result[2].attributes.link) == "y"


def test_underline_inherits_existing_attributes():
    runs = format_inline("<u>**x**</u>")
    assert len(runs) == 1
    assert runs[0].text == "x"
    assert runs[0].attributes.bold
    assert runs[0].attributes.underline


def test_underline_pass_alone():
    result = apply_underline([Run("a <u>b</u> c")], InlineContext())
    assert [(run.text, run.attributes.underline) for run in result] == [("a ", False), ("b", True), (" c", False)]


def test_base_attributes_flow_through():
    runs = format_inline("x **y**", heading_attributes(3))
    assert all(run.attributes.heading_level == 3 for run in runs)
    assert runs[1].attributes.bold


def test_unmatched_markers_stay_text():
    runs = format_inline("2 * 3 = **6")
    assert [run.text for run in runs] == ["2 * 3 = **6"]


def test_image_pass_uses_loader_result():
    loaded = []

    def loader(path):
        loaded.append(path)
        return None

    runs = format_inline("![a](one.png) ![b](two.png)", image_loader=loader)
    assert loaded == ["one.png", "two.png"]
    assert runs[0].text == "![a](one.png) ![b](two.png)"
