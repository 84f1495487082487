# tests/unit/build/test_planner.py — v1
"""Tests for build/planner.py — dirty sets and cascading invalidation."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from quotecards.build.planner import compute_globals, plan_build
from quotecards.cache.models import GlobalFingerprints, Manifest
from quotecards.render.assets import TemplateBundle
from quotecards.render.pages import SOURCE_RENDER_VERSION, WRAPPER_RENDER_VERSION


def _commit(plan, current: GlobalFingerprints) -> Manifest:
    """The manifest a successful run of plan would persist."""
    manifest = Manifest.assemble(current, plan.next_entries)
    return manifest.model_copy(update={"generated_at": datetime.now(timezone.utc)})


@pytest.fixture
def current(fake_renderer, templates, build_config) -> GlobalFingerprints:
    return compute_globals(fake_renderer, templates, build_config)


@pytest.fixture
def records(make_record):
    return [
        make_record("a", url="https://example.org/post"),
        make_record("b", url="https://example.org/post/", text="Second"),
        make_record("c", url="https://other.example/x", text="Third"),
    ]


@pytest.fixture
def previous(records, current, build_config) -> Manifest:
    return _commit(plan_build(records, Manifest(), current, build_config), current)


class TestComputeGlobals:
    def test_values(self, fake_renderer, templates, build_config, current):
        assert current.card_extension == "jpg"
        assert current.card_render_version == fake_renderer.render_version
        assert current.card_render_fingerprint == fake_renderer.fingerprint
        assert current.fonts_fingerprint == fake_renderer.fonts_fingerprint
        assert current.wrapper_render_version == WRAPPER_RENDER_VERSION
        assert current.source_render_version == SOURCE_RENDER_VERSION
        assert current.wrapper_template_fingerprint == templates.wrapper_fingerprint
        assert current.card_version is None


class TestFirstRun:
    def test_everything_dirty(self, records, current, build_config):
        plan = plan_build(records, Manifest(), current, build_config)
        assert plan.previous_absent
        assert plan.dirty_cards == ["a", "b", "c"]
        assert plan.dirty_wrappers == ["a", "b", "c"]
        assert plan.dirty_groups == ["example.org/post", "other.example/x"]
        assert plan.removed == []
        assert set(plan.next_entries) == {"a", "b", "c"}


class TestIncremental:
    def test_unchanged_is_noop(self, records, previous, current, build_config):
        plan = plan_build(records, previous, current, build_config)
        assert plan.is_noop
        assert not plan.previous_absent
        assert plan.records_to_render(records) == []

    def test_text_change(self, records, previous, current, build_config):
        records[0] = records[0].model_copy(update={"text": "Changed"})
        plan = plan_build(records, previous, current, build_config)
        assert plan.dirty_cards == ["a"]
        assert plan.dirty_wrappers == ["a"]
        assert plan.dirty_groups == ["example.org/post"]

    def test_title_change_skips_card(self, records, previous, current, build_config):
        records[2] = records[2].model_copy(update={"title": "A Title"})
        plan = plan_build(records, previous, current, build_config)
        assert plan.dirty_cards == []
        assert plan.dirty_wrappers == ["c"]
        assert plan.dirty_groups == ["other.example/x"]

    def test_tag_change_skips_wrapper(self, records, previous, current, build_config):
        records[1] = records[1].model_copy(update={"tags": ["new"]})
        plan = plan_build(records, previous, current, build_config)
        assert plan.dirty_cards == ["b"]
        assert plan.dirty_wrappers == []
        assert plan.dirty_groups == ["example.org/post"]

    def test_body_change_only_group(self, records, previous, current, build_config):
        records[1] = records[1].model_copy(update={"body_html": "<p>note</p>"})
        plan = plan_build(records, previous, current, build_config)
        assert plan.dirty_cards == []
        assert plan.dirty_wrappers == []
        assert plan.dirty_groups == ["example.org/post"]

    def test_added_record(self, records, previous, current, build_config, make_record):
        records.append(make_record("d", url="https://other.example/x", text="Fourth"))
        plan = plan_build(records, previous, current, build_config)
        assert plan.dirty_cards == ["d"]
        assert plan.dirty_wrappers == ["d"]
        assert plan.dirty_groups == ["other.example/x"]


class TestGlobalCascades:
    def test_wrapper_template_change(self, records, previous, fake_renderer, templates, build_config):
        changed = TemplateBundle(wrapper="<new>{{quote_text}}</new>", source=templates.source)
        current = compute_globals(fake_renderer, changed, build_config)
        plan = plan_build(records, previous, current, build_config)
        assert plan.dirty_wrappers == ["a", "b", "c"]
        assert plan.dirty_cards == []
        assert plan.dirty_groups == []

    def test_source_template_change(self, records, previous, fake_renderer, templates, build_config):
        changed = TemplateBundle(wrapper=templates.wrapper, source="<ul>{{quote_items}}</ul>")
        current = compute_globals(fake_renderer, changed, build_config)
        plan = plan_build(records, previous, current, build_config)
        assert plan.dirty_groups == ["example.org/post", "other.example/x"]
        assert plan.dirty_cards == []
        assert plan.dirty_wrappers == []

    def test_card_version_change(self, records, previous, fake_renderer, templates, build_config):
        bumped = build_config.model_copy(update={"card_version": "2"})
        current = compute_globals(fake_renderer, templates, bumped)
        plan = plan_build(records, previous, current, bumped)
        assert plan.dirty_wrappers == ["a", "b", "c"]
        assert plan.dirty_cards == []
        assert plan.dirty_groups == []

    def test_font_change(self, records, previous, renderer_factory, templates, build_config):
        renderer = renderer_factory(fonts="fonts-b")
        current = compute_globals(renderer, templates, build_config)
        plan = plan_build(records, previous, current, build_config)
        assert plan.dirty_cards == ["a", "b", "c"]
        assert plan.dirty_wrappers == []
        assert plan.dirty_groups == []

    def test_extension_change(self, records, previous, renderer_factory, templates, build_config):
        renderer = renderer_factory(extension="png")
        current = compute_globals(renderer, templates, build_config)
        plan = plan_build(records, previous, current, build_config)
        assert plan.dirty_cards == ["a", "b", "c"]
        # Both page kinds link to the card file
        assert plan.dirty_wrappers == ["a", "b", "c"]
        assert plan.dirty_groups == ["example.org/post", "other.example/x"]
        assert plan.stale_card_paths == ["cards/a.jpg", "cards/b.jpg", "cards/c.jpg"]

    def test_force_ignores_previous(self, records, previous, current, build_config):
        forced = build_config.model_copy(update={"force": True})
        plan = plan_build(records[:1], previous, current, forced)
        assert plan.previous_absent
        assert plan.dirty_cards == ["a"]
        assert plan.removed == []


class TestRemoval:
    def test_removed_sibling_regenerates_group(self, records, previous, current, build_config):
        plan = plan_build([records[0], records[2]], previous, current, build_config)
        assert [r.id for r in plan.removed] == ["b"]
        assert plan.removed[0].card_path == "cards/b.jpg"
        assert plan.dirty_groups == ["example.org/post"]
        assert plan.orphan_groups == {}
        assert plan.dirty_cards == []

    def test_last_member_removed_orphans_group(self, records, previous, current, build_config):
        plan = plan_build(records[:2], previous, current, build_config)
        assert [r.id for r in plan.removed] == ["c"]
        assert plan.dirty_groups == ["other.example/x"]
        location = plan.orphan_groups["other.example/x"]
        assert (location.source_domain, location.article_slug) == ("other.example", "x")

    def test_removed_card_uses_previous_extension(self, records, previous, renderer_factory, templates, build_config):
        current = compute_globals(renderer_factory(extension="webp"), templates, build_config)
        plan = plan_build(records[:2], previous, current, build_config)
        assert plan.removed[0].card_path == "cards/c.jpg"
        assert "cards/c.jpg" not in plan.stale_card_paths


class TestGroupMove:
    def test_move_dirties_old_and_new_group(self, records, previous, current, build_config, make_record):
        records[2] = make_record("c", url="https://example.org/post", text="Third")
        plan = plan_build(records, previous, current, build_config)
        assert set(plan.dirty_groups) == {"example.org/post", "other.example/x"}
        assert "other.example/x" in plan.orphan_groups
        assert plan.next_entries["c"].group_key == "example.org/post"

    def test_declared_domain_change_moves_group(self, records, previous, current, build_config):
        records[0] = records[0].model_copy(update={"source_domain": "Example Mag"})
        plan = plan_build(records, previous, current, build_config)
        assert set(plan.dirty_groups) == {"Example Mag/post", "example.org/post"}
        # b still lives in the old group
        assert "example.org/post" not in plan.orphan_groups
