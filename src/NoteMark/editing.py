"""In-place mutators used by the editing surface.

Offsets are character offsets into one block's text, list markers included.
Every mutator leaves the blocks it touches normalized.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from .attachments import ImageLoader, make_image_attachment
from .model import Block, HorizontalRule, OrderedListItem, Run, StyledDocument, Table, UnorderedListItem
from .styles import (
    BODY,
    ListKind,
    RunAttributes,
    list_attributes,
    marker_text,
    parse_link_target,
)

TYPED_ORDERED_PREFIX = re.compile(r"^([0-9]+)\.\s")


@dataclass(frozen=True)
class Position:
    block: int
    offset: int


@dataclass(frozen=True)
class TextRange:
    block: int
    start: int
    end: int

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


def _block(document: StyledDocument, index: int) -> Block:
    if not 0 <= index < len(document.blocks):
        raise IndexError(f"Block index {index} out of range")
    return document.blocks[index]


def _checked(document: StyledDocument, text_range: TextRange) -> Block:
    block = _block(document, text_range.block)
    if not 0 <= text_range.start <= text_range.end <= len(block):
        raise ValueError(f"Invalid range {text_range.start}..{text_range.end} for block of length {len(block)}")
    return block


def _text_only(update: Callable[[RunAttributes], RunAttributes]) -> Callable[[RunAttributes], RunAttributes]:
    def apply(attrs: RunAttributes) -> RunAttributes:
        if attrs.marker or not attrs.is_text:
            return attrs
        return update(attrs)

    return apply


def _is_list(block: Block) -> bool:
    return isinstance(block.kind, (UnorderedListItem, OrderedListItem))


def _drop_marker(block: Block) -> None:
    block.runs = [run for run in block.runs if not run.attributes.marker]
    block.normalize()


def _set_block_fields(block: Block, **fields) -> None:
    block.runs = [Run(run.text, run.attributes.with_changes(**fields)) for run in block.runs]
    block.normalize()


def _typing_attributes(block: Block, offset: int) -> RunAttributes:
    attrs = block.attributes_at(offset - 1) if offset > 0 else None
    if attrs is None:
        attrs = block.attributes_at(offset)
    if attrs is None:
        return BODY
    return attrs.typing_attributes()


# Font and underline toggles


def toggle_bold(document: StyledDocument, text_range: TextRange) -> None:
    block = _checked(document, text_range)
    if text_range.is_empty:
        return
    block.map_range(
        text_range.start,
        text_range.end,
        _text_only(lambda attrs: attrs.with_changes(bold=not attrs.bold)),
    )


def toggle_italic(document: StyledDocument, text_range: TextRange) -> None:
    block = _checked(document, text_range)
    if text_range.is_empty:
        return
    block.map_range(
        text_range.start,
        text_range.end,
        _text_only(lambda attrs: attrs.with_changes(italic=not attrs.italic)),
    )


def toggle_underline(document: StyledDocument, text_range: TextRange) -> None:
    block = _checked(document, text_range)
    if text_range.is_empty:
        return
    current = block.attributes_at(text_range.start)
    underline = not (current is not None and current.underline)
    block.map_range(
        text_range.start,
        text_range.end,
        _text_only(lambda attrs: attrs.with_changes(underline=underline)),
    )


# Block-level changes


def toggle_heading(document: StyledDocument, block_index: int, level: int) -> None:
    if not 1 <= level <= 6:
        raise ValueError(f"Heading level must be between 1 and 6, got {level}")
    block = _block(document, block_index)
    if isinstance(block.kind, (Table, HorizontalRule)):
        return
    attrs = block.first_attributes
    if attrs is None:
        return
    if attrs.heading_level == level:
        _set_block_fields(block, heading_level=None)
        return
    _drop_marker(block)
    _set_block_fields(block, heading_level=level, list_kind=None, list_index=None)


def reset_to_normal(document: StyledDocument, target: TextRange | int) -> None:
    """Clear formatting on a range, or on a whole block when given its index.

    A range reset keeps the block's heading and list fields so the block
    stays one kind; a block reset drops them too.
    """
    if isinstance(target, TextRange):
        block = _checked(document, target)
        block.map_range(
            target.start,
            target.end,
            _text_only(lambda attrs: BODY.with_changes(**attrs.block_fields())),
        )
        return

    block = _block(document, target)
    _drop_marker(block)
    block.runs = [Run(run.text, BODY.with_changes(attachment=run.attachment)) for run in block.runs]
    block.normalize()


def set_list_index(document: StyledDocument, block_index: int, index: int) -> None:
    if index < 0:
        raise ValueError(f"List index must not be negative, got {index}")
    block = _block(document, block_index)
    if not isinstance(block.kind, OrderedListItem):
        raise ValueError(f"Block {block_index} is not an ordered list item")
    runs = []
    for run in block.runs:
        attrs = run.attributes.with_changes(list_index=index)
        text = marker_text(ListKind.ORDERED, index) if attrs.marker else run.text
        runs.append(Run(text, attrs))
    block.runs = runs
    block.normalize()


# Links


def update_link(document: StyledDocument, text_range: TextRange, url: str, title: str | None = None) -> TextRange:
    """Point the link on ``text_range`` at ``url`` and optionally retitle it."""
    block = _checked(document, text_range)
    if text_range.is_empty:
        raise ValueError("Cannot update a link on an empty range")
    target = parse_link_target(url)
    block.map_range(text_range.start, text_range.end, _text_only(lambda attrs: attrs.with_changes(link=target)))

    current = block.text[text_range.start:text_range.end]
    if title and title != current:
        attrs = (block.attributes_at(text_range.start) or BODY).with_changes(
            link=target, marker=False, attachment=None
        )
        block.replace_range(text_range.start, text_range.end, [Run(title, attrs)])
        return TextRange(text_range.block, text_range.start, text_range.start + len(title))
    return text_range


def apply_link(document: StyledDocument, text_range: TextRange, url: str) -> TextRange:
    """Link the selected text, or insert ``url`` itself as a link when nothing is selected."""
    block = _checked(document, text_range)
    target = parse_link_target(url)
    if not text_range.is_empty:
        block.map_range(text_range.start, text_range.end, _text_only(lambda attrs: attrs.with_changes(link=target)))
        return text_range
    start = max(text_range.start, block.marker_length)
    attrs = _typing_attributes(block, start).with_changes(link=target)
    block.replace_range(start, start, [Run(url, attrs)])
    return TextRange(text_range.block, start, start + len(url))


# Text insertion and deletion


def insert_text(document: StyledDocument, position: Position, text: str) -> Position:
    """Insert typed text; each newline splits the block like the return key."""
    segments = text.split("\n")
    for idx, segment in enumerate(segments):
        if idx > 0:
            position = insert_newline(document, position)
        if not segment:
            continue
        block = _block(document, position.block)
        offset = max(min(position.offset, len(block)), block.marker_length)
        attrs = _typing_attributes(block, offset)
        block.replace_range(offset, offset, [Run(segment, attrs)])
        position = Position(position.block, offset + len(segment))
    return position


def delete_text(document: StyledDocument, text_range: TextRange) -> None:
    block = _checked(document, text_range)
    start, end = text_range.start, text_range.end
    marker = block.marker_length
    if start < marker and end > start:
        # touching the marker removes it and the list formatting with it
        block.replace_range(start, end, [])
        _drop_marker(block)
        _set_block_fields(block, list_kind=None, list_index=None)
        return
    block.replace_range(start, end, [])


def join_with_next(document: StyledDocument, block_index: int) -> Position:
    """Remove the line break after ``block_index`` (backspace at the start of the next line)."""
    block = _block(document, block_index)
    following = _block(document, block_index + 1)
    join_offset = len(block)
    tail = following.slice(following.marker_length, len(following))
    attrs = block.first_attributes
    if attrs is not None:
        fields = attrs.block_fields()
        tail = [Run(run.text, run.attributes.with_changes(**fields)) for run in tail]
    else:
        tail = [Run(run.text, run.attributes.with_changes(heading_level=None, list_kind=None, list_index=None))
                for run in tail]
    block.replace_range(join_offset, join_offset, tail)
    del document.blocks[block_index + 1]
    return Position(block_index, join_offset)


def insert_newline(document: StyledDocument, position: Position) -> Position:
    """Split the block at ``position``, continuing lists; returns the new cursor position."""
    block = _block(document, position.block)
    offset = max(0, min(position.offset, len(block)))

    if _is_list(block):
        marker = block.marker_length
        if not block.text[marker:].strip():
            document.blocks[position.block] = Block()
            return Position(position.block, 0)
        attrs = block.first_attributes
        if attrs.list_kind is ListKind.ORDERED:
            next_attrs = list_attributes(ListKind.ORDERED, (attrs.list_index or 0) + 1)
        else:
            next_attrs = list_attributes(ListKind.UNORDERED)
        offset = max(offset, marker)
        tail = [Run(run.text, run.attributes.with_changes(**next_attrs.block_fields()))
                for run in block.slice(offset, len(block))]
        prefix = marker_text(next_attrs.list_kind, next_attrs.list_index)
        new_block = Block([Run(prefix, next_attrs.with_changes(marker=True)), *tail]).normalize()
        block.runs = block.slice(0, offset)
        block.normalize()
        document.blocks.insert(position.block + 1, new_block)
        return Position(position.block + 1, len(prefix))

    typed_prefix = _typed_list_prefix(block.text)
    if typed_prefix is not None:
        current, following = typed_prefix
        if not block.text[len(current):].strip():
            block.runs = []
            return Position(position.block, 0)
        attrs = _typing_attributes(block, offset)
        offset = max(offset, len(current))
        new_block = Block([Run(following, attrs), *block.slice(offset, len(block))]).normalize()
        block.runs = block.slice(0, offset)
        block.normalize()
        document.blocks.insert(position.block + 1, new_block)
        return Position(position.block + 1, len(following))

    new_block = Block(block.slice(offset, len(block))).normalize()
    block.runs = block.slice(0, offset)
    block.normalize()
    document.blocks.insert(position.block + 1, new_block)
    return Position(position.block + 1, 0)


def _typed_list_prefix(text: str) -> tuple[str, str] | None:
    """The list prefix typed as plain text on a line, and the one for the next line."""
    if text.startswith("- "):
        return "- ", "- "
    match = TYPED_ORDERED_PREFIX.match(text)
    if match:
        return match.group(0), f"{int(match.group(1)) + 1}. "
    return None


# Attachments


def insert_image(
    document: StyledDocument,
    position: Position,
    path: str,
    image_loader: ImageLoader,
    alt: str = "",
) -> Position:
    """Insert an image reference, as an attachment when it loads and as text otherwise."""
    attachment = make_image_attachment(alt, path, image_loader)
    if attachment is None:
        return insert_text(document, position, f"![{alt}]({path})")
    block = _block(document, position.block)
    offset = max(min(position.offset, len(block)), block.marker_length)
    attrs = _typing_attributes(block, offset).with_changes(bold=False, italic=False, underline=False)
    block.replace_range(offset, offset, [Run.for_attachment(attachment, attrs)])
    return Position(position.block, offset + 1)
