# tests/unit/cache/test_manifest_models.py — v1
"""Tests for cache/models.py — Manifest, GlobalFingerprints."""

from __future__ import annotations

from datetime import datetime, timezone

from quotecards.cache.models import (
    MANIFEST_SCHEMA_VERSION,
    GlobalFingerprints,
    Manifest,
    ManifestEntry,
)


class TestManifest:
    def test_defaults(self):
        manifest = Manifest()
        assert manifest.version == MANIFEST_SCHEMA_VERSION
        assert manifest.generated_at is None
        assert manifest.is_blank

    def test_stamped_is_not_blank(self):
        manifest = Manifest(generated_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert not manifest.is_blank

    def test_assemble_and_fingerprints(self):
        fingerprints = GlobalFingerprints(
            card_version="7",
            card_extension="png",
            card_render_fingerprint="crf",
            wrapper_template_fingerprint="wt",
        )
        entry = ManifestEntry(
            card_fingerprint="c",
            wrapper_fingerprint="w",
            group_item_fingerprint="g",
            group_key="a.org/x",
            source_domain="a.org",
            article_slug="x",
        )
        manifest = Manifest.assemble(fingerprints, {"q1": entry})
        assert manifest.card_extension == "png"
        assert manifest.entries == {"q1": entry}
        assert manifest.fingerprints() == fingerprints
