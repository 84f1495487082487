# src/cache/models.py — v2
"""Manifest domain models: ManifestEntry, GlobalFingerprints, Manifest."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

MANIFEST_SCHEMA_VERSION = 1


class ManifestEntry(BaseModel):
    """Fingerprints recorded for one content record.

    group_key, source_domain and article_slug are denormalized so a later run
    can clean up the group of a record that no longer exists.
    """

    card_fingerprint: str
    wrapper_fingerprint: str
    group_item_fingerprint: str
    group_key: str
    source_domain: str
    article_slug: str


class GlobalFingerprints(BaseModel):
    """Run-wide inputs shared by every artifact of a class."""

    card_version: str | None = None
    card_extension: str = ""
    card_render_version: str = ""
    card_render_fingerprint: str = ""
    fonts_fingerprint: str = ""
    wrapper_render_version: str = ""
    wrapper_template_fingerprint: str = ""
    source_render_version: str = ""
    source_template_fingerprint: str = ""


class Manifest(GlobalFingerprints):
    """Persisted record of what the last successful build produced."""

    version: int = MANIFEST_SCHEMA_VERSION
    generated_at: datetime | None = None
    entries: dict[str, ManifestEntry] = Field(default_factory=dict)

    @property
    def is_blank(self) -> bool:
        """True for the stand-in returned when no manifest file exists."""
        return self.generated_at is None and not self.entries

    @classmethod
    def assemble(
        cls,
        fingerprints: GlobalFingerprints,
        entries: dict[str, ManifestEntry],
    ) -> Manifest:
        return cls(**fingerprints.model_dump(), entries=dict(entries))

    def fingerprints(self) -> GlobalFingerprints:
        return GlobalFingerprints(
            **self.model_dump(include=set(GlobalFingerprints.model_fields))
        )
