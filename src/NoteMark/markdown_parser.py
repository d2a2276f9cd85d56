from __future__ import annotations

import re
from typing import List

from .attachments import (
    ImageLoader,
    is_table_row,
    is_table_separator,
    make_image_loader,
    make_rule_attachment,
    make_table_attachment,
)
from .config import Settings
from .inline_format import format_inline
from .model import Block, Run, StyledDocument
from .styles import BODY, ListKind, Theme, heading_attributes, list_attributes, marker_text

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
ORDERED_ITEM_PATTERN = re.compile(r"^([0-9]+)\.\s+(.+)$")


def parse_markdown(
    text: str,
    settings: Settings | None = None,
    image_loader: ImageLoader | None = None,
) -> StyledDocument:
    """Parse note Markdown into a StyledDocument. Never raises."""
    settings = settings or Settings()
    if image_loader is None:
        image_loader = make_image_loader(settings.notes_root, settings.image_max_width)
    theme = settings.theme()

    lines = text.split("\n")
    blocks: List[Block] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if not line:
            blocks.append(Block())
            i += 1
            continue

        if is_table_row(line) and i + 1 < len(lines) and is_table_separator(lines[i + 1]):
            j = i + 1
            while j < len(lines) and (is_table_row(lines[j]) or is_table_separator(lines[j])):
                j += 1
            table = make_table_attachment(lines[i:j], theme=theme, max_width=settings.table_max_width)
            blocks.append(Block([Run.for_attachment(table)]))
            i = j
            continue

        blocks.append(_parse_line(line, image_loader, theme))
        i += 1
    return StyledDocument(blocks=blocks)


def _parse_line(line: str, image_loader: ImageLoader, theme: Theme) -> Block:
    heading = _parse_heading(line)
    if heading is not None:
        level, content = heading
        return Block(format_inline(content, heading_attributes(level), image_loader)).normalize()

    if line == "---":
        return Block([Run.for_attachment(make_rule_attachment(theme))])

    ordered = _parse_ordered_item(line)
    if ordered is not None:
        content, index = ordered
        return _list_block(ListKind.ORDERED, index, content, image_loader)

    unordered = _parse_unordered_item(line)
    if unordered is not None:
        return _list_block(ListKind.UNORDERED, None, unordered, image_loader)

    return Block(format_inline(line, BODY, image_loader)).normalize()


def _list_block(kind: ListKind, index: int | None, content: str, image_loader: ImageLoader) -> Block:
    attrs = list_attributes(kind, index)
    marker = Run(marker_text(kind, index), attrs.with_changes(marker=True))
    return Block([marker, *format_inline(content, attrs, image_loader)]).normalize()


def _parse_heading(line: str) -> tuple[int, str] | None:
    match = HEADING_PATTERN.match(line)
    if not match:
        return None
    level = len(match.group(1))
    return level, line[level:].lstrip(" ")


def _parse_ordered_item(line: str) -> tuple[str, int] | None:
    match = ORDERED_ITEM_PATTERN.match(line)
    if not match:
        return None
    return match.group(2), int(match.group(1))


def _parse_unordered_item(line: str) -> str | None:
    if line.startswith("- "):
        return line[2:]
    return None
