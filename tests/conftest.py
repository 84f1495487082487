# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides content-file writers, sample records, page templates and a fake card
renderer. No fonts or network needed; everything lives under tmp_path.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from quotecards.build.models import BuildConfig
from quotecards.cache.fingerprint import hash_strings
from quotecards.content.urls import infer_article_slug, infer_domain, normalize_url
from quotecards.core.models import ContentRecord
from quotecards.render.assets import TemplateBundle


# === HELPERS ===


def write_quote(directory: Path, name: str, body: str = "", /, **fields: Any) -> Path:
    """Write one content file with YAML front matter built from fields."""
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    front = yaml.safe_dump(fields, sort_keys=False, allow_unicode=True)
    path.write_text(f"---\n{front}---\n{body}", encoding="utf-8")
    return path


class FakeRenderer:
    """Stands in for CardRenderer: counts calls, returns deterministic bytes."""

    render_version = "test-card-1"

    def __init__(self, extension: str = "jpg", fonts: str = "fonts-a") -> None:
        self.extension = extension
        self.fonts_fingerprint = hash_strings(fonts)
        self.calls: list[str] = []
        self._lock = threading.Lock()

    @property
    def fingerprint(self) -> str:
        return hash_strings(self.render_version, self.fonts_fingerprint, self.extension)

    def render(self, text: str) -> bytes:
        with self._lock:
            self.calls.append(text)
        return f"card:{self.extension}:{text}".encode("utf-8")


# === FIXTURES: Sample data ===


@pytest.fixture
def make_record() -> Callable[..., ContentRecord]:
    """Factory for ContentRecords with URL-derived fields filled in."""

    def _make(
        record_id: str = "q1",
        text: str = "Simplicity is prerequisite for reliability.",
        attribution: str = "Edsger Dijkstra",
        url: str = "https://example.org/essays/reliability",
        **overrides: Any,
    ) -> ContentRecord:
        normalized = normalize_url(url)
        values: dict[str, Any] = {
            "id": record_id,
            "text": text,
            "attribution": attribution,
            "url": url,
            "normalized_url": normalized,
            "source_domain": infer_domain(normalized),
            "article_slug": infer_article_slug(normalized),
        }
        values.update(overrides)
        return ContentRecord(**values)

    return _make


@pytest.fixture
def sample_record(make_record: Callable[..., ContentRecord]) -> ContentRecord:
    """Minimal valid dated ContentRecord."""
    return make_record(
        title="On Reliability",
        tags=["software", "design"],
        created_at=datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Empty content directory."""
    path = tmp_path / "quotes"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "site"
    path.mkdir()
    return path


# === FIXTURES: Rendering ===


@pytest.fixture
def templates() -> TemplateBundle:
    """Small templates exercising tokens and sections."""
    return TemplateBundle(
        wrapper=(
            "<title>{{page_title}}</title>\n"
            '<meta property="og:image" content="{{og_image}}">\n'
            "<blockquote>{{quote_text}}</blockquote>\n"
            "{{#article_title}}<cite>{{article_title}}</cite>{{/article_title}}\n"
        ),
        source="<h1>{{page_title}}</h1>\n{{quote_items}}\n",
    )


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def build_config(output_dir: Path) -> BuildConfig:
    return BuildConfig(
        output_root=output_dir,
        manifest_path=output_dir / ".quotecards-manifest.json",
        render_workers=2,
    )


@pytest.fixture
def renderer_factory() -> type[FakeRenderer]:
    """The FakeRenderer class, for tests that need several renderers."""
    return FakeRenderer


@pytest.fixture
def add_quote(content_dir: Path) -> Callable[..., Path]:
    """Write a content file into content_dir: add_quote(name, body, **fields)."""

    def _add(name: str, body: str = "", /, **fields: Any) -> Path:
        return write_quote(content_dir, name, body, **fields)

    return _add
