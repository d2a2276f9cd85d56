from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from docx import Document as DocxDocument
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.image.exceptions import UnrecognizedImageError
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt

from . import docx_format
from .model import (
    Block,
    HorizontalRule,
    ImageAttachment,
    OrderedListItem,
    Run,
    StyledDocument,
    Table,
    TableAttachment,
    UnorderedListItem,
)
from .styles import DEFAULT_THEME, FontSpec, LinkTarget, Theme

logger = logging.getLogger(__name__)

BULLET = "•"


@dataclass
class RenderState:
    theme: Theme = DEFAULT_THEME
    images: int = 0
    tables: int = 0
    links: int = 0


def render_document(doc: StyledDocument, output_path: str | Path, theme: Theme = DEFAULT_THEME) -> RenderState:
    output_path = Path(output_path)
    state = RenderState(theme=theme)
    docx = DocxDocument()
    docx_format.apply_page_layout(docx)

    for block in doc.blocks:
        _dispatch_block(docx, block, state)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    docx.save(output_path)
    return state


def _dispatch_block(docx: DocxDocument, block: Block, state: RenderState) -> None:
    kind = block.kind
    if isinstance(kind, Table):
        attachment = block.runs[0].attachment
        _render_table(docx, attachment, state)
    elif isinstance(kind, HorizontalRule):
        _render_horizontal_rule(docx, state)
    else:
        _render_paragraph(docx, block, state)


def _render_paragraph(docx: DocxDocument, block: Block, state: RenderState) -> None:
    paragraph = docx.add_paragraph()
    attrs = block.first_attributes
    if attrs is None:
        return
    docx_format.apply_paragraph_format(paragraph, attrs.paragraph(state.theme), attrs.font(state.theme).size)

    kind = block.kind
    for run in block.runs:
        if run.attributes.marker:
            if isinstance(kind, (OrderedListItem, UnorderedListItem)):
                marker = f"{kind.index}.\t" if isinstance(kind, OrderedListItem) else f"{BULLET}\t"
                docx_run = paragraph.add_run(marker)
                docx_format.set_run_font(docx_run, attrs.font(state.theme), state.theme.text_color)
            continue
        attachment = run.attachment
        if isinstance(attachment, ImageAttachment):
            _render_image(paragraph, attachment, state)
        elif attachment is not None:
            paragraph.add_run(attachment.source)
        elif run.attributes.link is not None:
            _render_link(paragraph, run, state)
        else:
            docx_run = paragraph.add_run(run.text)
            docx_format.set_run_font(
                docx_run,
                run.attributes.font(state.theme),
                run.attributes.display_color(state.theme),
                underline=run.attributes.display_underline,
            )


def _render_link(paragraph, run: Run, state: RenderState) -> None:
    attrs = run.attributes
    docx_run = paragraph.add_run(run.text)
    docx_format.set_run_font(docx_run, attrs.font(state.theme), attrs.display_color(state.theme), underline=True)
    if not isinstance(attrs.link, LinkTarget):
        return
    r_id = paragraph.part.relate_to(attrs.link.href, RT.HYPERLINK, is_external=True)
    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), r_id)
    paragraph._p.remove(docx_run._r)
    hyperlink.append(docx_run._r)
    paragraph._p.append(hyperlink)
    state.links += 1


def _render_image(paragraph, attachment: ImageAttachment, state: RenderState) -> None:
    run = paragraph.add_run()
    preview = attachment.preview
    if preview is None:
        run.add_text(attachment.source)
        return
    try:
        run.add_picture(preview.path, width=Pt(preview.width))
    except (OSError, UnrecognizedImageError) as exc:
        logger.warning("Image %s skipped: %s", preview.path, exc)
        run.add_text(attachment.source)
        return
    state.images += 1


def _render_horizontal_rule(docx: DocxDocument, state: RenderState) -> None:
    paragraph = docx.add_paragraph()
    docx_format.set_bottom_border(paragraph, state.theme.text_color.with_alpha(0.2).hex())
    paragraph.paragraph_format.space_before = Pt(12)
    paragraph.paragraph_format.space_after = Pt(12)


def _render_table(docx: DocxDocument, attachment: TableAttachment, state: RenderState) -> None:
    col_count = len(attachment.header)
    table = docx.add_table(rows=1 + len(attachment.rows), cols=col_count)
    table.style = "Table Grid"
    table.alignment = WD_TABLE_ALIGNMENT.LEFT
    preview = attachment.preview
    if preview is not None:
        table.autofit = False
        for idx, width in enumerate(preview.column_widths):
            table.columns[idx].width = Pt(width)

    header_font = FontSpec(state.theme.body_size, bold=True)
    body_font = FontSpec(state.theme.body_size)
    for idx, text in enumerate(attachment.header):
        cell = table.cell(0, idx)
        _fill_cell(cell, text, header_font, state)
        if preview is not None:
            docx_format.shade_cell(cell, preview.header_fill)
    for r_idx, row in enumerate(attachment.rows, start=1):
        for c_idx in range(col_count):
            cell = table.cell(r_idx, c_idx)
            _fill_cell(cell, row[c_idx] if c_idx < len(row) else "", body_font, state)
            if preview is not None:
                docx_format.shade_cell(cell, preview.row_fills[r_idx - 1])
    state.tables += 1


def _fill_cell(cell, text: str, font: FontSpec, state: RenderState) -> None:
    paragraph = cell.paragraphs[0]
    run = paragraph.add_run(text)
    color = state.theme.heading_color if font.bold else state.theme.text_color
    docx_format.set_run_font(run, font, color)
