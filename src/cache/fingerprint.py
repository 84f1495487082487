# src/cache/fingerprint.py — v3
"""Content fingerprints for incremental builds.

Every artifact class hashes its own ordered input tuple. SHA-256 is used
throughout: a collision would silently skip a required rebuild.

  card        [card render version, text, attribution, tags]
  wrapper     [wrapper render version, base path, site origin, card version,
               card extension, text, attribution, title, url, source domain]
  group item  [source render version, base path, card extension, id, text,
               attribution, body html, url, title, source domain,
               article slug, created-at, tags]

Tags are sorted before joining: their order carries no meaning, but the hash
input must be deterministic.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable

from quotecards.cache.models import ManifestEntry
from quotecards.core.models import ContentRecord

TAG_SEPARATOR = "|"


def hash_bytes(data: bytes) -> str:
    """SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def hash_strings(*parts: str) -> str:
    """SHA-256 over the compact JSON array of parts (order-sensitive)."""
    payload = json.dumps(list(parts), ensure_ascii=False, separators=(",", ":"))
    return hash_bytes(payload.encode("utf-8"))


def join_tags(tags: Iterable[str]) -> str:
    return TAG_SEPARATOR.join(sorted(tags))


def card_fingerprint(record: ContentRecord, *, render_version: str) -> str:
    """Inputs of the card image. Title and URL are not drawn, so excluded."""
    return hash_strings(
        render_version,
        record.text,
        record.attribution,
        join_tags(record.tags),
    )


def wrapper_fingerprint(
    record: ContentRecord,
    *,
    render_version: str,
    base_path: str,
    site_origin: str,
    card_version: str | None,
    card_extension: str,
) -> str:
    """Inputs of the per-quote wrapper page."""
    return hash_strings(
        render_version,
        base_path,
        site_origin,
        card_version or "",
        card_extension,
        record.text,
        record.attribution,
        record.title,
        record.url,
        record.source_domain,
    )


def group_item_fingerprint(
    record: ContentRecord,
    *,
    render_version: str,
    base_path: str,
    card_extension: str,
) -> str:
    """Inputs of the record's fragment on its source aggregation page."""
    return hash_strings(
        render_version,
        base_path,
        card_extension,
        record.id,
        record.text,
        record.attribution,
        record.body_html,
        record.url,
        record.title,
        record.source_domain,
        record.article_slug,
        record.created_iso,
        join_tags(record.tags),
    )


def fonts_fingerprint(font_blobs: Iterable[bytes]) -> str:
    """Combined hash of every font file the card renderer draws with."""
    return hash_strings(*(hash_bytes(blob) for blob in font_blobs))


def card_render_fingerprint(
    render_version: str,
    fonts_hash: str,
    image_format: str,
    quality: int,
) -> str:
    """Global card fingerprint: algorithm version, font bytes, encoder settings."""
    return hash_strings(render_version, fonts_hash, image_format, str(quality))


def template_fingerprint(template: str) -> str:
    return hash_bytes(template.encode("utf-8"))


def build_manifest_entry(
    record: ContentRecord,
    *,
    card_render_version: str,
    wrapper_render_version: str,
    source_render_version: str,
    base_path: str,
    site_origin: str,
    card_version: str | None,
    card_extension: str,
) -> ManifestEntry:
    """Compute all three per-record fingerprints plus the group location."""
    return ManifestEntry(
        card_fingerprint=card_fingerprint(record, render_version=card_render_version),
        wrapper_fingerprint=wrapper_fingerprint(
            record,
            render_version=wrapper_render_version,
            base_path=base_path,
            site_origin=site_origin,
            card_version=card_version,
            card_extension=card_extension,
        ),
        group_item_fingerprint=group_item_fingerprint(
            record,
            render_version=source_render_version,
            base_path=base_path,
            card_extension=card_extension,
        ),
        group_key=record.group_key,
        source_domain=record.source_domain,
        article_slug=record.article_slug,
    )
