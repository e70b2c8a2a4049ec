"""Configuration dataclasses and loading helpers for the sprite-sheet engine."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from pixelforge.models import CellSize
from pixelforge.metadata import parse_resolution

DEFAULT_CONFIG_PATH = Path("pixelforge.json")


def _default_analysis_workers() -> int:
    """Determine a sensible default for CPU-bound sheet analysis workers."""
    return max(1, min(4, os.cpu_count() or 1))


def _parse_positive_int(value: Any, default: int) -> int:
    """Parse a positive integer with fallback to default."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _parse_positive_float(value: Any, default: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _parse_optional_path(value: Any) -> Optional[Path]:
    if value is None:
        return None
    text = str(value).strip()
    return Path(text) if text else None


@dataclass(frozen=True)
class Settings:
    """Engine-wide defaults used by the CLI and playback ticker."""

    default_fps: float = 12.0
    default_resolution: str = "64x64"
    min_part_pixels: int = 1
    analysis_workers: int = 1
    output_dir: Path = Path("output")
    metadata_filename: str = "spritesheet_meta.json"
    log_file: Optional[Path] = None

    @property
    def default_cell_size(self) -> CellSize:
        return parse_resolution(self.default_resolution)

    @property
    def metadata_path(self) -> Path:
        return self.output_dir / self.metadata_filename


def _parse_settings(data: Mapping[str, Any]) -> Settings:
    default = Settings()
    return Settings(
        default_fps=_parse_positive_float(data.get("default_fps"), default.default_fps),
        default_resolution=str(data.get("default_resolution") or default.default_resolution),
        min_part_pixels=_parse_positive_int(data.get("min_part_pixels"), default.min_part_pixels),
        analysis_workers=_parse_positive_int(
            data.get("analysis_workers"),
            _default_analysis_workers(),
        ),
        output_dir=Path(data.get("output_dir") or default.output_dir),
        metadata_filename=str(data.get("metadata_filename") or default.metadata_filename),
        log_file=_parse_optional_path(data.get("log_file")),
    )


def _load_env_settings(env: Mapping[str, str]) -> Settings:
    """Fallback settings derived from environment variables."""
    return _parse_settings({
        "default_fps": env.get("PIXELFORGE_FPS"),
        "default_resolution": env.get("PIXELFORGE_RESOLUTION"),
        "min_part_pixels": env.get("PIXELFORGE_MIN_PART_PIXELS"),
        "analysis_workers": env.get("PIXELFORGE_WORKERS"),
        "output_dir": env.get("PIXELFORGE_OUTPUT_DIR"),
        "metadata_filename": env.get("PIXELFORGE_METADATA_FILENAME"),
        "log_file": env.get("PIXELFORGE_LOG_FILE"),
    })


def load_config(
    config_path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from a JSON file, or from the environment when it is missing."""
    if env is None:
        load_dotenv()
        source_env: Mapping[str, str] = os.environ
    else:
        source_env = env

    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    if path.exists():
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, Mapping):
            data = {}
        settings = data.get("settings")
        return _parse_settings(settings if isinstance(settings, Mapping) else data)

    return _load_env_settings(source_env)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "Settings",
    "load_config",
    "_parse_positive_float",
    "_parse_positive_int",
]
