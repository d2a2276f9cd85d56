from __future__ import annotations

from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Cm, Pt, RGBColor

from .styles import Color, FontSpec, ParagraphSpacing

A4_WIDTH_MM = 210
A4_HEIGHT_MM = 297

FONT_NAME = "Arial"

MARGIN_LEFT_CM = 2.0
MARGIN_RIGHT_CM = 2.0
MARGIN_TOP_CM = 2.0
MARGIN_BOTTOM_CM = 2.0


def apply_page_layout(doc) -> None:
    """Apply A4 page setup and margins."""
    section = doc.sections[0]
    section.page_height = Cm(A4_HEIGHT_MM / 10)
    section.page_width = Cm(A4_WIDTH_MM / 10)
    section.left_margin = Cm(MARGIN_LEFT_CM)
    section.right_margin = Cm(MARGIN_RIGHT_CM)
    section.top_margin = Cm(MARGIN_TOP_CM)
    section.bottom_margin = Cm(MARGIN_BOTTOM_CM)


def rgb(color: Color) -> RGBColor:
    return RGBColor.from_string(color.hex())


def set_run_font(run, font: FontSpec, color: Color, underline: bool = False) -> None:
    run.font.name = FONT_NAME
    run.font.size = Pt(font.size)
    run.font.color.rgb = rgb(color)
    run.bold = font.bold
    run.italic = font.italic
    run.underline = underline


def apply_paragraph_format(paragraph, spacing: ParagraphSpacing, font_size: float) -> None:
    fmt = paragraph.paragraph_format
    paragraph.alignment = WD_ALIGN_PARAGRAPH.LEFT
    fmt.space_before = Pt(spacing.before)
    fmt.space_after = Pt(spacing.after)
    fmt.line_spacing = Pt(font_size + spacing.line_spacing)
    fmt.first_line_indent = Pt(-spacing.head_indent) if spacing.head_indent else Cm(0)
    fmt.left_indent = Pt(spacing.head_indent)
    if spacing.tab_stop is not None:
        fmt.tab_stops.add_tab_stop(Pt(spacing.tab_stop))


def shade_cell(cell, fill: str) -> None:
    tc_pr = cell._tc.get_or_add_tcPr()
    for child in list(tc_pr):
        if child.tag == qn("w:shd"):
            tc_pr.remove(child)
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    tc_pr.append(shd)


def set_bottom_border(paragraph, color: str, size: int = 4) -> None:
    """Draw a horizontal line under an empty paragraph."""
    p_pr = paragraph._p.get_or_add_pPr()
    borders = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), str(size))
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), color)
    borders.append(bottom)
    p_pr.append(borders)
