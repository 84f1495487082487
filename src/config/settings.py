# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings. Values are read once
per process and converted into an immutable BuildConfig before any build work
starts (see build.models.BuildConfig.from_settings).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Content ===
    content_dir: Path = Path("quotes")

    # === Output ===
    output_root: Path = Path(".")
    manifest_file: str = ".quotecards-manifest.json"

    # === Links ===
    base_path: str = ""
    site_origin: str = ""

    # === Incremental build ===
    card_version: str | None = None
    force_rebuild: bool = False
    render_workers: int = 4

    # === Card rendering ===
    card_format: Literal["jpeg", "png", "webp"] = "jpeg"
    card_quality: int = 88
    font_path: Path | None = None
    template_dir: Path | None = None

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("base_path")
    @classmethod
    def normalize_base_path(cls, v: str) -> str:
        """Leading slash, no trailing slash; '/' means no prefix."""
        v = (v or "").strip()
        if not v or v == "/":
            return ""
        if not v.startswith("/"):
            v = "/" + v
        return v.rstrip("/")

    @field_validator("site_origin")
    @classmethod
    def normalize_site_origin(cls, v: str) -> str:
        return (v or "").strip().rstrip("/")

    @field_validator("card_version", mode="before")
    @classmethod
    def normalize_card_version(cls, v: object) -> str | None:
        """Blank cache-bust tokens count as unset."""
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("font_path", "template_dir", mode="before")
    @classmethod
    def blank_path_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.render_workers < 1:
            errors.append("RENDER_WORKERS must be >= 1")

        if not 1 <= self.card_quality <= 100:
            errors.append("CARD_QUALITY must be between 1 and 100")

        if not self.manifest_file.strip():
            errors.append("MANIFEST_FILE must not be empty")

        if self.site_origin and "://" not in self.site_origin:
            errors.append("SITE_ORIGIN must include a scheme, e.g. https://example.org")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def manifest_path(self) -> Path:
        """Manifest location; relative names resolve under output_root."""
        path = Path(self.manifest_file).expanduser()
        if path.is_absolute():
            return path
        return self.output_root / path


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (CLI flags or tests).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
