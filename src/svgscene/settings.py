from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .paint import FallbackPaint

__all__ = [
    "ReaderSettings",
    "resolve_reader_settings",
    "root_id_from_path",
]


class ReaderSettings(BaseSettings):
    """Reader options, overridable through ``SVGSCENE_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="SVGSCENE_", populate_by_name=True)

    root_id: Optional[str] = None
    fallback_paint: FallbackPaint = FallbackPaint.DERIVED
    sentinel_color: str = "magenta"
    dpi: float = 96.0
    font_size: float = 16.0
    chunk_size: int = 64 * 1024


def root_id_from_path(path: str | Path) -> str:
    """Default root id: the file name with ``.`` -> ``-`` and ``#`` -> ``_``."""
    return Path(path).name.replace(".", "-").replace("#", "_")


def _snake_case(key: str) -> str:
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", key).lower()


def resolve_reader_settings(options: Mapping[str, Any]) -> ReaderSettings:
    """Validate a plain mapping (camelCase or snake_case keys) into settings."""
    values = {_snake_case(str(key)): value for key, value in options.items()}
    unknown = sorted(set(values) - set(ReaderSettings.model_fields))
    if unknown:
        raise ValueError(f"Unknown reader option(s): {', '.join(unknown)}.")
    try:
        settings = ReaderSettings(**values)
    except ValidationError as exc:
        raise ValueError(f"Invalid reader options: {exc}") from exc
    if settings.chunk_size <= 0:
        raise ValueError("Reader option 'chunk_size' must be positive.")
    return settings
