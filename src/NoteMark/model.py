from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Sequence

from .styles import BODY, OBJECT_REPLACEMENT, ListKind, RunAttributes


@dataclass(frozen=True)
class ImagePreview:
    width: float
    height: float
    pixel_width: int
    pixel_height: int
    content_type: str
    path: str


@dataclass(frozen=True)
class TablePreview:
    column_widths: tuple[float, ...]
    header_height: float
    row_height: float
    padding_h: float
    padding_v: float
    header_fill: str
    row_fills: tuple[str, ...]
    grid_color: str

    @property
    def width(self) -> float:
        return sum(self.column_widths)

    @property
    def height(self) -> float:
        return self.header_height + self.row_height * len(self.row_fills)


@dataclass(frozen=True)
class RulePreview:
    width: float = 1000
    height: float = 1
    color: str = "D4D7DA"
    spacing: float = 12


@dataclass(frozen=True)
class ImageAttachment:
    source: str
    alt: str
    path: str
    preview: ImagePreview | None = None


@dataclass(frozen=True)
class TableAttachment:
    source: str
    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    preview: TablePreview | None = None


@dataclass(frozen=True)
class RuleAttachment:
    source: str = "---"
    preview: RulePreview = field(default_factory=RulePreview)


Attachment = ImageAttachment | TableAttachment | RuleAttachment


@dataclass(frozen=True)
class BlockKind:
    """Base class for block-level tags."""


@dataclass(frozen=True)
class Plain(BlockKind):
    pass


@dataclass(frozen=True)
class Heading(BlockKind):
    level: int


@dataclass(frozen=True)
class UnorderedListItem(BlockKind):
    pass


@dataclass(frozen=True)
class OrderedListItem(BlockKind):
    index: int


@dataclass(frozen=True)
class HorizontalRule(BlockKind):
    """A `---` line."""


@dataclass(frozen=True)
class Table(BlockKind):
    markdown_source: str
    header_cells: tuple[str, ...]
    data_rows: tuple[tuple[str, ...], ...]


@dataclass(frozen=True)
class Image(BlockKind):
    alt_text: str
    path: str


@dataclass
class Run:
    text: str
    attributes: RunAttributes = BODY

    @classmethod
    def for_attachment(cls, attachment: Attachment, attributes: RunAttributes = BODY) -> "Run":
        return cls(OBJECT_REPLACEMENT, attributes.with_changes(attachment=attachment))

    @property
    def attachment(self) -> Attachment | None:
        return self.attributes.attachment

    def __len__(self) -> int:
        return len(self.text)


@dataclass
class Block:
    runs: List[Run] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    def __len__(self) -> int:
        return sum(len(run) for run in self.runs)

    @property
    def first_attributes(self) -> RunAttributes | None:
        for run in self.runs:
            if run.text:
                return run.attributes
        return None

    @property
    def kind(self) -> BlockKind:
        attrs = self.first_attributes
        if attrs is None:
            return Plain()
        if attrs.heading_level is not None:
            return Heading(attrs.heading_level)
        if attrs.list_kind is ListKind.ORDERED:
            return OrderedListItem(attrs.list_index if attrs.list_index is not None else 1)
        if attrs.list_kind is ListKind.UNORDERED:
            return UnorderedListItem()
        content = [run for run in self.runs if run.text]
        if len(content) == 1 and len(content[0].text) == 1:
            attachment = content[0].attachment
            if isinstance(attachment, TableAttachment):
                return Table(attachment.source, attachment.header, attachment.rows)
            if isinstance(attachment, RuleAttachment):
                return HorizontalRule()
            if isinstance(attachment, ImageAttachment):
                return Image(attachment.alt, attachment.path)
        return Plain()

    @property
    def marker_length(self) -> int:
        """Length of the list marker (up to and including the first tab)."""
        if not isinstance(self.kind, (UnorderedListItem, OrderedListItem)):
            return 0
        tab = self.text.find("\t")
        return tab + 1 if tab >= 0 else 0

    def attributes_at(self, offset: int) -> RunAttributes | None:
        position = 0
        for run in self.runs:
            if position <= offset < position + len(run):
                return run.attributes
            position += len(run)
        return None

    def slice(self, start: int, end: int) -> List[Run]:
        return slice_runs(self.runs, start, end)

    def replace_range(self, start: int, end: int, runs: Iterable[Run]) -> None:
        self.runs = self.slice(0, start) + list(runs) + self.slice(end, len(self))
        self.normalize()

    def map_range(self, start: int, end: int, update: Callable[[RunAttributes], RunAttributes]) -> None:
        middle = [Run(run.text, update(run.attributes)) for run in self.slice(start, end)]
        self.replace_range(start, end, middle)

    def normalize(self) -> "Block":
        self.runs = merge_runs(self.runs)
        return self


@dataclass
class StyledDocument:
    blocks: List[Block] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self):
        return iter(self.blocks)

    def __getitem__(self, index: int) -> Block:
        return self.blocks[index]


def runs_text(runs: Sequence[Run]) -> str:
    return "".join(run.text for run in runs)


def slice_runs(runs: Sequence[Run], start: int, end: int) -> List[Run]:
    """Copy the part of ``runs`` covering the character range [start, end)."""
    result: List[Run] = []
    if end <= start:
        return result
    position = 0
    for run in runs:
        run_start = position
        run_end = position + len(run)
        position = run_end
        if run_end <= start or run_start >= end:
            continue
        lo = max(start, run_start) - run_start
        hi = min(end, run_end) - run_start
        result.append(Run(run.text[lo:hi], run.attributes))
    return result


def merge_runs(runs: Iterable[Run]) -> List[Run]:
    """Drop empty runs and join neighbours with equal attributes.

    Attachment runs are never joined: each one stands for a single object.
    """
    merged: List[Run] = []
    for run in runs:
        if not run.text:
            continue
        if (
            merged
            and merged[-1].attributes == run.attributes
            and run.attributes.is_text
        ):
            merged[-1] = Run(merged[-1].text + run.text, run.attributes)
        else:
            merged.append(Run(run.text, run.attributes))
    return merged
