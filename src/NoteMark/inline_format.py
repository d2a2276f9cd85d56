"""Inline Markdown formatting as an ordered list of rewrite passes.

Every pass takes the runs produced so far, finds all non-overlapping matches
of one pattern in their joined text and builds a fresh run list from the
gaps and the replacements. Passes run strictly one after another: the
delimiters removed by one pass shift the offsets the next pass sees.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Sequence

from .attachments import ImageLoader, make_image_attachment
from .model import Run, merge_runs, runs_text, slice_runs
from .styles import BODY, RunAttributes, parse_link_target

IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
# An image that failed to load stays literal, so its "[alt](path)" tail must not become a link.
LINK_PATTERN = re.compile(r"(?<!!)\[([^\]]+)\]\(([^)]+)\)")
BOLD_ITALIC_PATTERN = re.compile(r"\*\*\*(.+?)\*\*\*")
BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
ITALIC_PATTERN = re.compile(r"(?<!\*)\*(?!\*)(.+?)(?<!\*)\*(?!\*)")
UNDERLINE_PATTERN = re.compile(r"<u>(.+?)</u>")


@dataclass(frozen=True)
class InlineContext:
    base: RunAttributes = BODY
    image_loader: ImageLoader | None = None


InlinePass = Callable[[Sequence[Run], InlineContext], List[Run]]
Replacement = Callable[[re.Match, Sequence[Run]], List[Run]]


def rewrite(runs: Sequence[Run], pattern: re.Pattern, replacement: Replacement) -> List[Run]:
    """Rebuild ``runs`` left to right, substituting every match of ``pattern``."""
    text = runs_text(runs)
    result: List[Run] = []
    position = 0
    for match in pattern.finditer(text):
        result.extend(slice_runs(runs, position, match.start()))
        result.extend(replacement(match, runs))
        position = match.end()
    result.extend(slice_runs(runs, position, len(text)))
    return merge_runs(result)


def _content(match: re.Match, runs: Sequence[Run], group: int = 1) -> List[Run]:
    return slice_runs(runs, match.start(group), match.end(group))


def apply_images(runs: Sequence[Run], context: InlineContext) -> List[Run]:
    if context.image_loader is None:
        return list(runs)

    def replace(match: re.Match, current: Sequence[Run]) -> List[Run]:
        alt, path = match.group(1), match.group(2)
        attachment = make_image_attachment(alt, path, context.image_loader)
        if attachment is None:
            return slice_runs(current, match.start(), match.end())
        attrs = context.base.with_changes(bold=False, italic=False, underline=False, link=None)
        return [Run.for_attachment(attachment, attrs)]

    return rewrite(runs, IMAGE_PATTERN, replace)


def apply_links(runs: Sequence[Run], context: InlineContext) -> List[Run]:
    def replace(match: re.Match, current: Sequence[Run]) -> List[Run]:
        target = parse_link_target(match.group(2))
        return [Run(run.text, run.attributes.with_changes(link=target)) for run in _content(match, current)]

    return rewrite(runs, LINK_PATTERN, replace)


def _font_pass(pattern: re.Pattern, traits: Callable[[RunAttributes], tuple[bool, bool]]) -> InlinePass:
    # The traits for the whole match are decided by its first character.
    def apply(runs: Sequence[Run], context: InlineContext) -> List[Run]:
        def replace(match: re.Match, current: Sequence[Run]) -> List[Run]:
            content = _content(match, current)
            if not content:
                return []
            bold, italic = traits(content[0].attributes)
            return [Run(run.text, run.attributes.with_changes(bold=bold, italic=italic)) for run in content]

        return rewrite(runs, pattern, replace)

    return apply


apply_bold_italic = _font_pass(BOLD_ITALIC_PATTERN, lambda attrs: (True, True))
apply_bold = _font_pass(BOLD_PATTERN, lambda attrs: (True, True) if attrs.italic else (True, False))
apply_italic = _font_pass(ITALIC_PATTERN, lambda attrs: (True, True) if attrs.bold else (False, True))


def apply_underline(runs: Sequence[Run], context: InlineContext) -> List[Run]:
    def replace(match: re.Match, current: Sequence[Run]) -> List[Run]:
        return [Run(run.text, run.attributes.with_changes(underline=True)) for run in _content(match, current)]

    return rewrite(runs, UNDERLINE_PATTERN, replace)


PIPELINE: tuple[InlinePass, ...] = (
    apply_images,
    apply_links,
    apply_bold_italic,
    apply_bold,
    apply_italic,
    apply_underline,
)


def format_inline(
    text: str,
    base: RunAttributes = BODY,
    image_loader: ImageLoader | None = None,
) -> List[Run]:
    context = InlineContext(base=base, image_loader=image_loader)
    runs: List[Run] = merge_runs([Run(text, base)])
    for inline_pass in PIPELINE:
        runs = inline_pass(runs, context)
    return runs
