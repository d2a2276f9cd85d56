from __future__ import annotations

import logging
import math
import struct
from pathlib import Path
from typing import Callable, Sequence

from docx.image.exceptions import InvalidImageStreamError, UnexpectedEndOfFileError, UnrecognizedImageError
from docx.image.image import Image as DocxImage

from .model import (
    ImageAttachment,
    ImagePreview,
    RuleAttachment,
    RulePreview,
    TableAttachment,
    TablePreview,
)
from .styles import DEFAULT_THEME, Color, Theme

logger = logging.getLogger(__name__)

DEFAULT_NOTES_ROOT = Path("~/notes")
IMAGE_MAX_WIDTH = 500.0
TABLE_MAX_WIDTH = 560.0

TABLE_PADDING_H = 12.0
TABLE_PADDING_V = 8.0
TABLE_MIN_CELL = 30.0
HEADER_FILL = Color(0.89, 0.91, 0.93)
ALT_ROW_FILL = Color(0.97, 0.97, 0.98)
WHITE = Color(1.0, 1.0, 1.0)

# Truncated or malformed headers surface as struct, index and value errors.
IMAGE_READ_ERRORS = (
    OSError,
    ValueError,
    IndexError,
    struct.error,
    UnrecognizedImageError,
    UnexpectedEndOfFileError,
    InvalidImageStreamError,
)

ImageLoader = Callable[[str], "ImagePreview | None"]


def resolve_image_path(path: str, notes_root: str | Path = DEFAULT_NOTES_ROOT) -> Path:
    """Absolute and ``~`` paths are used as written, the rest live under the notes root."""
    if path.startswith("/") or path.startswith("~"):
        return Path(path).expanduser()
    return Path(notes_root).expanduser() / path


def load_image_preview(path: str | Path, max_width: float = IMAGE_MAX_WIDTH) -> ImagePreview | None:
    """Read the image header and compute its display size, or None if unusable."""
    try:
        image = DocxImage.from_file(str(path))
    except IMAGE_READ_ERRORS as exc:
        logger.debug("Image %s not loaded: %s", path, exc)
        return None
    horz_dpi = image.horz_dpi or 72
    vert_dpi = image.vert_dpi or 72
    width = image.px_width * 72.0 / horz_dpi
    height = image.px_height * 72.0 / vert_dpi
    if width <= 0 or height <= 0:
        logger.debug("Image %s has no size", path)
        return None
    scale = max_width / width if width > max_width else 1.0
    return ImagePreview(
        width=width * scale,
        height=height * scale,
        pixel_width=image.px_width,
        pixel_height=image.px_height,
        content_type=image.content_type,
        path=str(path),
    )


def make_image_loader(notes_root: str | Path = DEFAULT_NOTES_ROOT, max_width: float = IMAGE_MAX_WIDTH) -> ImageLoader:
    def loader(path: str) -> ImagePreview | None:
        try:
            resolved = resolve_image_path(path, notes_root)
        except RuntimeError as exc:
            # "~user/..." for an unknown user
            logger.debug("Image path %s not resolved: %s", path, exc)
            return None
        return load_image_preview(resolved, max_width=max_width)

    return loader


def make_image_attachment(alt: str, path: str, loader: ImageLoader) -> ImageAttachment | None:
    preview = loader(path)
    if preview is None:
        return None
    return ImageAttachment(source=f"![{alt}]({path})", alt=alt, path=path, preview=preview)


def make_rule_attachment(theme: Theme = DEFAULT_THEME) -> RuleAttachment:
    return RuleAttachment(source="---", preview=RulePreview(color=theme.text_color.with_alpha(0.2).hex()))


# Table support


def is_table_row(line: str) -> bool:
    stripped = line.strip(" \t")
    return stripped.startswith("|") and stripped.endswith("|") and len(stripped) > 2


def is_table_separator(line: str) -> bool:
    stripped = line.strip(" \t")
    if not (stripped.startswith("|") and stripped.endswith("|")):
        return False
    return all(ch in "|-: " for ch in stripped)


def table_row_cells(line: str) -> list[str]:
    stripped = line.strip(" \t")
    if stripped.startswith("|"):
        stripped = stripped[1:]
    if stripped.endswith("|"):
        stripped = stripped[:-1]
    return [cell.strip(" \t") for cell in stripped.split("|")]


def estimate_text_width(text: str, size: float, bold: bool = False) -> float:
    """Rough advance width for a proportional UI font."""
    em = 0.55 if bold else 0.5
    return len(text) * size * em


def _line_height(size: float) -> float:
    return math.ceil(size * 1.2)


def layout_table(
    header: Sequence[str],
    rows: Sequence[Sequence[str]],
    theme: Theme = DEFAULT_THEME,
    max_width: float = TABLE_MAX_WIDTH,
) -> TablePreview:
    col_count = len(header)
    widths = [TABLE_PADDING_H * 2 + TABLE_MIN_CELL] * col_count
    for idx, cell in enumerate(header):
        natural = math.ceil(estimate_text_width(cell, theme.body_size, bold=True)) + TABLE_PADDING_H * 2
        widths[idx] = max(widths[idx], natural)
    for row in rows:
        for idx, cell in enumerate(row[:col_count]):
            natural = math.ceil(estimate_text_width(cell, theme.body_size)) + TABLE_PADDING_H * 2
            widths[idx] = max(widths[idx], natural)

    natural_width = sum(widths)
    if natural_width > max_width:
        scale = max_width / natural_width
        widths = [math.floor(w * scale) for w in widths]

    text_height = _line_height(theme.body_size)
    row_fills = tuple((WHITE if idx % 2 == 0 else ALT_ROW_FILL).hex() for idx in range(len(rows)))
    return TablePreview(
        column_widths=tuple(float(w) for w in widths),
        header_height=text_height + TABLE_PADDING_V * 2,
        row_height=text_height + TABLE_PADDING_V * 2,
        padding_h=TABLE_PADDING_H,
        padding_v=TABLE_PADDING_V,
        header_fill=HEADER_FILL.hex(),
        row_fills=row_fills,
        grid_color=theme.text_color.with_alpha(0.18).hex(),
    )


def make_table_attachment(
    lines: Sequence[str],
    theme: Theme = DEFAULT_THEME,
    max_width: float = TABLE_MAX_WIDTH,
) -> TableAttachment:
    source = "\n".join(lines)
    header = tuple(table_row_cells(lines[0]))
    rows = tuple(tuple(table_row_cells(line)) for line in lines[2:] if not is_table_separator(line))
    return TableAttachment(
        source=source,
        header=header,
        rows=rows,
        preview=layout_table(header, rows, theme=theme, max_width=max_width),
    )
