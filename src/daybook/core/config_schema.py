"""Pydantic models for config validation.

Opt-in schema validation for ``Config.config_data``.  Call
``Config.validated()`` to obtain a typed, validated ``DaybookConfig``
instance.  Dict-based access through ``Config.get`` keeps working.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .config import DEFAULT_ALLOWED_IMAGE_TYPES, DEFAULT_MAX_IMAGE_SIZE


class PathsConfig(BaseModel):
    """File-system locations for entries, images and logs."""

    data_dir: Path
    entries_dir: Path | None = None
    images_dir: Path | None = None
    log_dir: Path | None = None

    @field_validator("data_dir", "entries_dir", "images_dir", "log_dir", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v

    @model_validator(mode="after")
    def _derive_subdirs(self) -> PathsConfig:
        if self.entries_dir is None:
            self.entries_dir = self.data_dir / "diary_entries"
        if self.images_dir is None:
            self.images_dir = self.data_dir / "diary_images"
        return self


class DiaryConfig(BaseModel):
    """Entry listing and validation settings."""

    entries_per_page: int = Field(default=5, ge=1)
    timezone: str = "Europe/Berlin"
    title_max_length: int = Field(default=200, ge=1)
    memory_years: int = Field(default=10, ge=0)
    preview_length: int = Field(default=150, ge=1)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone {v!r}") from e
        return v


class ImagesConfig(BaseModel):
    """Upload limits for the local image store."""

    max_size: int = Field(default=DEFAULT_MAX_IMAGE_SIZE, ge=1)
    allowed_types: list[str] = list(DEFAULT_ALLOWED_IMAGE_TYPES)

    @field_validator("allowed_types")
    @classmethod
    def _image_types_only(cls, v: list[str]) -> list[str]:
        bad = [t for t in v if not t.startswith("image/")]
        if bad:
            raise ValueError(f"allowed_types must be image/* MIME types, got {bad}")
        return [t.lower() for t in v]


class LoggingConfig(BaseModel):
    """Log level and optional log file."""

    level: str = "WARNING"
    file: str | None = None

    @field_validator("level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()


class DaybookConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so applications can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathsConfig = PathsConfig(data_dir=Path("~/.daybook"))
    diary: DiaryConfig = DiaryConfig()
    images: ImagesConfig = ImagesConfig()
    logging: LoggingConfig = LoggingConfig()
