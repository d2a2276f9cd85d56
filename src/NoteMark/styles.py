from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from markdown_it.common.normalize_url import normalizeLink, validateLink

OBJECT_REPLACEMENT = "\ufffc"


class ListKind(Enum):
    ORDERED = "ordered"
    UNORDERED = "unordered"


@dataclass(frozen=True)
class Color:
    red: float
    green: float
    blue: float
    alpha: float = 1.0

    def with_alpha(self, alpha: float) -> "Color":
        return replace(self, alpha=alpha)

    def hex(self) -> str:
        """RRGGBB form, alpha blended over white."""
        channels = []
        for value in (self.red, self.green, self.blue):
            blended = value * self.alpha + (1.0 - self.alpha)
            channels.append(round(max(0.0, min(1.0, blended)) * 255))
        return "".join(f"{c:02X}" for c in channels)


@dataclass(frozen=True)
class FontSpec:
    size: float
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True)
class ParagraphSpacing:
    line_spacing: float = 0.0
    before: float = 0.0
    after: float = 0.0
    head_indent: float = 0.0
    tab_stop: float | None = None


@dataclass(frozen=True)
class Theme:
    body_size: float = 16
    heading_sizes: tuple[float, ...] = (28, 24, 20, 18, 16, 14)

    background_color: Color = Color(0.96, 0.97, 0.98)
    text_color: Color = Color(0.33, 0.38, 0.44)
    link_color: Color = Color(0.20, 0.50, 0.85)
    heading_color: Color = Color(0.22, 0.27, 0.33)

    line_spacing: float = 10.0
    paragraph_spacing: float = 16.0
    list_indent: float = 24.0

    def heading_size(self, level: int) -> float:
        index = min(max(level - 1, 0), len(self.heading_sizes) - 1)
        return self.heading_sizes[index]

    def body_paragraph(self) -> ParagraphSpacing:
        return ParagraphSpacing(line_spacing=self.line_spacing, after=self.paragraph_spacing)

    def heading_paragraph(self, level: int) -> ParagraphSpacing:
        return ParagraphSpacing(
            line_spacing=4.0,
            before=16.0 if level <= 2 else 10.0,
            after=10.0 if level <= 2 else 6.0,
        )

    def list_paragraph(self) -> ParagraphSpacing:
        return ParagraphSpacing(
            line_spacing=self.line_spacing,
            after=4.0,
            head_indent=self.list_indent,
            tab_stop=self.list_indent,
        )


DEFAULT_THEME = Theme()


@dataclass(frozen=True)
class LinkTarget:
    """A link destination that passed URL validation.

    ``raw`` is exactly what the Markdown source contained and is what gets
    written back; ``href`` is the normalized form used when exporting.
    """

    raw: str
    href: str

    def __str__(self) -> str:
        return self.raw


def parse_link_target(raw: str) -> LinkTarget | str:
    """Return a LinkTarget for a usable URL, otherwise the raw string."""
    if not raw or any(ch.isspace() for ch in raw):
        return raw
    try:
        if not validateLink(raw):
            return raw
        return LinkTarget(raw=raw, href=normalizeLink(raw))
    except (ValueError, UnicodeError):
        return raw


def link_text(link: LinkTarget | str | None) -> str | None:
    if link is None:
        return None
    return str(link)


@dataclass(frozen=True)
class RunAttributes:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    link: LinkTarget | str | None = None
    heading_level: int | None = None
    list_kind: ListKind | None = None
    list_index: int | None = None
    marker: bool = False
    attachment: Any = None

    def with_changes(self, **changes: Any) -> "RunAttributes":
        return replace(self, **changes)

    @property
    def is_text(self) -> bool:
        return self.attachment is None

    @property
    def display_underline(self) -> bool:
        return self.underline or self.link is not None

    def display_color(self, theme: Theme = DEFAULT_THEME) -> Color:
        if self.link is not None:
            return theme.link_color
        if self.heading_level is not None:
            return theme.heading_color
        return theme.text_color

    def font(self, theme: Theme = DEFAULT_THEME) -> FontSpec:
        if self.heading_level is not None:
            # headings always render bold
            return FontSpec(theme.heading_size(self.heading_level), bold=True, italic=self.italic)
        return FontSpec(theme.body_size, bold=self.bold, italic=self.italic)

    def paragraph(self, theme: Theme = DEFAULT_THEME) -> ParagraphSpacing:
        if self.heading_level is not None:
            return theme.heading_paragraph(self.heading_level)
        if self.list_kind is not None:
            return theme.list_paragraph()
        return theme.body_paragraph()

    def block_fields(self) -> dict[str, Any]:
        return {
            "heading_level": self.heading_level,
            "list_kind": self.list_kind,
            "list_index": self.list_index,
        }

    def typing_attributes(self) -> "RunAttributes":
        """Attributes newly typed text picks up next to this run."""
        return replace(self, link=None, marker=False, attachment=None)


BODY = RunAttributes()


def heading_attributes(level: int) -> RunAttributes:
    if not 1 <= level <= 6:
        raise ValueError(f"Heading level must be between 1 and 6, got {level}")
    return RunAttributes(heading_level=level)


def list_attributes(kind: ListKind, index: int | None = None) -> RunAttributes:
    if kind is ListKind.ORDERED:
        return RunAttributes(list_kind=kind, list_index=1 if index is None else index)
    return RunAttributes(list_kind=kind)


def marker_text(kind: ListKind, index: int | None = None) -> str:
    if kind is ListKind.ORDERED:
        return f"{1 if index is None else index}.\t"
    return "-\t"


def markdown_prefix(kind: ListKind, index: int | None = None) -> str:
    if kind is ListKind.ORDERED:
        return f"{1 if index is None else index}. "
    return "- "
