from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .styles import Theme

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    notes_root: str = "~/notes"
    main_file: str = "main.md"
    image_max_width: float = 500.0
    table_max_width: float = 560.0
    body_size: float = 16.0
    heading_sizes: tuple[float, ...] = (28, 24, 20, 18, 16, 14)

    @property
    def notes_dir(self) -> Path:
        return Path(self.notes_root).expanduser()

    @property
    def main_path(self) -> Path:
        return self.notes_dir / self.main_file

    def theme(self) -> Theme:
        return Theme(body_size=self.body_size, heading_sizes=tuple(self.heading_sizes))


def parse_settings(text: str) -> Settings:
    """Build Settings from a YAML mapping; missing keys keep their defaults."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError("Settings YAML root must be a mapping.")

    known = {f.name for f in fields(Settings)}
    values: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown setting %r", key)
            continue
        values[key] = _coerce(key, value)
    return Settings(**values)


def load_settings(path: str | Path | None = None) -> Settings:
    if path is None:
        return Settings()
    config_path = Path(path).expanduser()
    logger.debug("Loading settings from %s", config_path)
    return parse_settings(config_path.read_text(encoding="utf-8"))


def _coerce(key: str, value: Any) -> Any:
    if key in {"notes_root", "main_file"}:
        if not isinstance(value, str) or not value:
            raise ValueError(f"Setting {key!r} must be a non-empty string.")
        return value
    if key == "heading_sizes":
        if not isinstance(value, (list, tuple)) or len(value) != 6:
            raise ValueError("Setting 'heading_sizes' must list six sizes.")
        return tuple(_number(key, v) for v in value)
    return _number(key, value)


def _number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"Setting {key!r} must be a positive number.")
    return float(value)
