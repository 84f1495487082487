# tests/unit/storage/test_layout.py — v2
"""Tests for storage/layout.py — output path conventions."""

from __future__ import annotations

import pytest

from quotecards.storage import layout


class TestPaths:
    def test_card_path(self):
        assert layout.card_path("q1", "jpg") == "cards/q1.jpg"

    def test_wrapper(self):
        assert layout.wrapper_dir("q1") == "q/q1"
        assert layout.wrapper_path("q1") == "q/q1/index.html"

    def test_source(self):
        assert layout.source_dir("example.org", "post") == "sources/example.org/post"
        assert layout.source_path("example.org", "post") == "sources/example.org/post/index.html"

    def test_output_trees(self):
        assert set(layout.OUTPUT_TREES) == {"cards", "q", "sources"}


class TestIsSafeSegment:
    @pytest.mark.parametrize("segment", ["q1", "my-quote", "example.org", "Example Magazine"])
    def test_safe(self, segment):
        assert layout.is_safe_segment(segment)

    @pytest.mark.parametrize("segment", ["", ".", "..", "a/b", "a\\b"])
    def test_unsafe(self, segment):
        assert not layout.is_safe_segment(segment)
