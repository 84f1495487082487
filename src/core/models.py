# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

ContentRecord is the unit every artifact is derived from; LoadResult is what
the content loader hands to the facade.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Placeholder domain when neither front matter nor URL host yields one.
UNKNOWN_SOURCE = "unknown-source"

# Slug used when the normalized URL has no path.
INDEX_SLUG = "index"


# === CONTENT RECORDS ===


class ContentRecord(BaseModel):
    """One validated quote, immutable for the duration of a build."""

    model_config = ConfigDict(frozen=True)

    # --- Identity ---
    id: str

    # --- Content ---
    text: str
    attribution: str
    title: str = ""
    body_html: str = ""
    tags: list[str] = Field(default_factory=list)

    # --- Source ---
    url: str
    normalized_url: str
    source_domain: str = UNKNOWN_SOURCE
    article_slug: str = INDEX_SLUG

    # --- Ordering ---
    created_at: datetime | None = None

    # --- Traceability ---
    location: str = ""

    @property
    def group_key(self) -> str:
        """Key of the SourceGroup this record belongs to."""
        return group_key_for(self.source_domain, self.article_slug)

    @property
    def created_sort_value(self) -> float:
        """Epoch seconds for ordering; undated records sort as epoch zero."""
        if self.created_at is None:
            return 0.0
        return self.created_at.timestamp()

    @property
    def created_iso(self) -> str:
        if self.created_at is None:
            return ""
        return self.created_at.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def group_key_for(source_domain: str, article_slug: str) -> str:
    """Build the group key from a domain and an article slug."""
    return f"{source_domain}/{article_slug}"


class LoadResult(BaseModel):
    """Outcome of loading a content directory."""

    records: list[ContentRecord] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    files_scanned: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary(self) -> dict[str, Any]:
        return {
            "files_scanned": self.files_scanned,
            "records": len(self.records),
            "warnings": len(self.warnings),
            "errors": len(self.errors),
        }


# === SOURCE GROUPS ===


class SourceGroup(BaseModel):
    """Records sharing a group key, rendered together on one source page."""

    key: str
    source_domain: str
    article_slug: str
    source_url: str = ""
    title: str = ""
    records: list[ContentRecord] = Field(default_factory=list)

    def add(self, record: ContentRecord) -> None:
        """Append a member.

        URL and title come from the lowest-id member that has one, so they
        depend only on fingerprinted fields, not on file order.
        """
        self.records.append(record)
        by_id = sorted(self.records, key=lambda r: r.id)
        self.source_url = next(
            (r.normalized_url or r.url for r in by_id if r.normalized_url or r.url), ""
        )
        self.title = next((r.title for r in by_id if r.title), "")

    def ordered_records(self) -> list[ContentRecord]:
        """Newest first; undated records last; ties keep input order."""
        return sorted(self.records, key=lambda r: r.created_sort_value, reverse=True)


def group_records(records: list[ContentRecord]) -> dict[str, SourceGroup]:
    """Bucket records by group key, keeping first-seen group order."""
    groups: dict[str, SourceGroup] = {}
    for record in records:
        group = groups.get(record.group_key)
        if group is None:
            group = SourceGroup(
                key=record.group_key,
                source_domain=record.source_domain,
                article_slug=record.article_slug,
            )
            groups[record.group_key] = group
        group.add(record)
    return groups
