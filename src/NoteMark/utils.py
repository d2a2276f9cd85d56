from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import Settings
from .markdown_parser import parse_markdown
from .markdown_serializer import serialize_document
from .model import StyledDocument

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Configure a simple console logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )


def resolve_output_path(input_path: Path, output: Optional[str], suffix: str = ".md") -> Path:
    if output:
        out_path = Path(output)
        if out_path.is_dir():
            out_path = out_path / f"{input_path.stem}{suffix}"
        return out_path
    return input_path.with_suffix(suffix)


def read_markdown(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def ensure_notes_directory(settings: Settings) -> Path:
    """Create the notes folder and an empty main note if they are missing."""
    main_path = settings.main_path
    main_path.parent.mkdir(parents=True, exist_ok=True)
    if not main_path.exists():
        main_path.write_text("", encoding="utf-8")
        logger.info("Created %s", main_path)
    return main_path


def load_note(path: Path, settings: Settings | None = None) -> StyledDocument:
    """Parse a note file; unreadable files load as an empty document."""
    try:
        text = read_markdown(path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Could not read %s: %s", path, exc)
        text = ""
    return parse_markdown(text, settings=settings)


def save_note(path: Path, document: StyledDocument) -> bool:
    markdown = serialize_document(document)
    try:
        path.write_text(markdown, encoding="utf-8")
    except OSError as exc:
        logger.error("Could not save %s: %s", path, exc)
        return False
    logger.debug("Saved %d chars to %s", len(markdown), path)
    return True
