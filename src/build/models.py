# src/build/models.py — v1
"""Build models: BuildConfig, BuildPlan, BuildResult, BuildOutcome."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from quotecards.cache.models import Manifest, ManifestEntry
from quotecards.core.models import ContentRecord, SourceGroup
from quotecards.render.pages import LinkContext

if TYPE_CHECKING:
    from quotecards.config.settings import Settings


class BuildConfig(BaseModel):
    """Immutable per-run build parameters, resolved once from Settings."""

    model_config = ConfigDict(frozen=True)

    output_root: Path
    manifest_path: Path
    base_path: str = ""
    site_origin: str = ""
    card_version: str | None = None
    force: bool = False
    render_workers: int = Field(default=4, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> BuildConfig:
        """Snapshot settings; keyword overrides (CLI flags) take precedence."""
        values: dict[str, Any] = {
            "output_root": settings.output_root,
            "manifest_path": settings.manifest_path,
            "base_path": settings.base_path,
            "site_origin": settings.site_origin,
            "card_version": settings.card_version,
            "force": settings.force_rebuild,
            "render_workers": settings.render_workers,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def link_context(self, card_extension: str) -> LinkContext:
        return LinkContext(
            base_path=self.base_path,
            site_origin=self.site_origin,
            card_version=self.card_version,
            card_extension=card_extension,
        )


class RemovedRecord(BaseModel):
    """A record present in the previous manifest but absent from this run."""

    id: str
    entry: ManifestEntry
    card_path: str


class GroupLocation(BaseModel):
    """Where a group's source page lives on disk."""

    source_domain: str
    article_slug: str


class BuildPlan(BaseModel):
    """Everything a run has to render or delete, decided up front."""

    dirty_cards: list[str] = Field(default_factory=list)
    dirty_wrappers: list[str] = Field(default_factory=list)
    dirty_groups: list[str] = Field(default_factory=list)
    removed: list[RemovedRecord] = Field(default_factory=list)
    stale_card_paths: list[str] = Field(default_factory=list)
    next_entries: dict[str, ManifestEntry] = Field(default_factory=dict)
    groups: dict[str, SourceGroup] = Field(default_factory=dict)
    # Locations of dirty groups that have no members left
    orphan_groups: dict[str, GroupLocation] = Field(default_factory=dict)
    previous_absent: bool = False

    @property
    def is_noop(self) -> bool:
        return not (
            self.dirty_cards
            or self.dirty_wrappers
            or self.dirty_groups
            or self.removed
            or self.stale_card_paths
        )

    def records_to_render(self, records: list[ContentRecord]) -> list[ContentRecord]:
        """Records with a dirty card or wrapper, in input order."""
        wanted = set(self.dirty_cards) | set(self.dirty_wrappers)
        return [r for r in records if r.id in wanted]


class BuildResult(BaseModel):
    """Summary counters of one build run."""

    records_total: int = 0
    cards_rendered: int = 0
    cards_removed: int = 0
    wrappers_rendered: int = 0
    wrappers_removed: int = 0
    source_pages_rendered: int = 0
    source_pages_removed: int = 0
    forced: bool = False
    duration_seconds: float = 0.0

    @property
    def changed(self) -> bool:
        return any((
            self.cards_rendered,
            self.cards_removed,
            self.wrappers_rendered,
            self.wrappers_removed,
            self.source_pages_rendered,
            self.source_pages_removed,
        ))


class BuildOutcome(BaseModel):
    """A BuildResult plus the manifest the run persisted (None if deleted)."""

    result: BuildResult
    manifest: Manifest | None = None
