# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests: real loader, renderer and filesystem."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from quotecards.config.settings import Settings


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end build on the local filesystem")


@pytest.fixture
def site_settings(content_dir: Path, output_dir: Path) -> Callable[..., Settings]:
    """Settings factory pointing at the test content and output directories."""

    def _settings(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "content_dir": content_dir,
            "output_root": output_dir,
            "render_workers": 2,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _settings


@pytest.fixture
def seed_quotes(add_quote) -> Callable[[], None]:
    """Three quotes over two sources; two share a URL up to slash and fragment."""

    def _seed() -> None:
        add_quote(
            "dijkstra.md",
            "From the *EWD* notes.",
            id="dijkstra",
            quote="Simplicity is prerequisite for reliability.",
            name="Edsger Dijkstra",
            url="https://example.org/essays/reliability/",
            article_title="On Reliability",
            created_at="2024-03-01T09:00:00Z",
            tags=["design"],
        )
        add_quote(
            "hoare.md",
            id="hoare",
            quote="Premature optimization is the root of all evil.",
            name="Tony Hoare",
            url="https://example.org/essays/reliability#section-2",
            created_at="2024-06-01T09:00:00Z",
        )
        add_quote(
            "perlis.md",
            id="perlis",
            quote="Simplicity does not precede complexity, but follows it.",
            name="Alan Perlis",
            url="https://epigrams.example/",
        )

    return _seed
