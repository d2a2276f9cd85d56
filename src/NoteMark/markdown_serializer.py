from __future__ import annotations

from typing import List

from .model import Block, Run, StyledDocument, merge_runs
from .styles import ListKind, RunAttributes, link_text, markdown_prefix


def serialize_document(document: StyledDocument) -> str:
    """Write a StyledDocument back to the Markdown accepted by parse_markdown."""
    lines: List[str] = [serialize_block(block) for block in document.blocks]

    while len(lines) > 1 and lines[-1] == "":
        lines.pop()
    if not lines:
        lines.append("")
    return "\n".join(lines)


def serialize_block(block: Block) -> str:
    attrs = block.first_attributes
    if attrs is None:
        return ""

    runs = block.runs
    if attrs.list_kind is not None:
        runs = block.slice(block.text.find("\t") + 1, len(block))
    content = serialize_inline(runs)

    if attrs.heading_level is not None:
        return "#" * attrs.heading_level + " " + content
    if attrs.list_kind is ListKind.UNORDERED:
        return markdown_prefix(ListKind.UNORDERED) + content
    if attrs.list_kind is ListKind.ORDERED:
        return markdown_prefix(ListKind.ORDERED, attrs.list_index) + content
    return content


def serialize_inline(runs: List[Run]) -> str:
    parts: List[str] = []
    emitted = [Run(run.text, _emitted_attributes(run.attributes)) for run in runs]
    for run in merge_runs(emitted):
        attachment = run.attachment
        if attachment is not None:
            parts.append(attachment.source)
            continue
        parts.append(_decorate(run.text, run.attributes))
    return "".join(parts)


def _emitted_attributes(attrs: RunAttributes) -> RunAttributes:
    """Drop attributes that produce no markup: links are always underlined
    and heading text is always bold."""
    if attrs.link is not None and attrs.underline:
        attrs = attrs.with_changes(underline=False)
    if attrs.heading_level is not None and attrs.bold and not attrs.italic:
        attrs = attrs.with_changes(bold=False)
    return attrs


def _decorate(text: str, attrs: RunAttributes) -> str:
    url = link_text(attrs.link)
    if attrs.underline and url is None:
        text = f"<u>{text}</u>"
    if attrs.bold and attrs.italic:
        text = f"***{text}***"
    elif attrs.bold:
        text = f"**{text}**"
    elif attrs.italic:
        text = f"*{text}*"
    if url is not None:
        text = f"[{text}]({url})"
    return text
