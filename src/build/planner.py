# src/build/planner.py — v1
"""Dirty-set computation for incremental builds.

plan_build is a pure function of (records, previous manifest, current global
fingerprints, build config). It decides, per artifact class, what must be
rendered or deleted, and cascades shared-input changes:

  card        global card fingerprint changed, or the record's card inputs
  wrapper     wrapper render version / template / cache-bust token changed,
              or the record's wrapper inputs
  group item  source render version / template changed, the record's group
              item inputs changed, or the record moved to another group

A dirty group item dirties its group; a record that moved also dirties the
group it left; a removed record dirties the group recorded in its stale entry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quotecards.build.models import BuildConfig, BuildPlan, GroupLocation, RemovedRecord
from quotecards.cache.fingerprint import build_manifest_entry
from quotecards.cache.models import GlobalFingerprints, Manifest, ManifestEntry
from quotecards.core.models import ContentRecord, group_records
from quotecards.render.pages import SOURCE_RENDER_VERSION, WRAPPER_RENDER_VERSION
from quotecards.storage.layout import card_path

if TYPE_CHECKING:
    from quotecards.render.assets import TemplateBundle
    from quotecards.render.card_renderer import CardRenderer

logger = logging.getLogger(__name__)


def compute_globals(
    renderer: CardRenderer,
    templates: TemplateBundle,
    config: BuildConfig,
) -> GlobalFingerprints:
    """Run-wide fingerprints for the current renderer, templates and config."""
    return GlobalFingerprints(
        card_version=config.card_version,
        card_extension=renderer.extension,
        card_render_version=renderer.render_version,
        card_render_fingerprint=renderer.fingerprint,
        fonts_fingerprint=renderer.fonts_fingerprint,
        wrapper_render_version=WRAPPER_RENDER_VERSION,
        wrapper_template_fingerprint=templates.wrapper_fingerprint,
        source_render_version=SOURCE_RENDER_VERSION,
        source_template_fingerprint=templates.source_fingerprint,
    )


def plan_build(
    records: list[ContentRecord],
    previous: Manifest,
    current: GlobalFingerprints,
    config: BuildConfig,
) -> BuildPlan:
    """Compute the dirty sets and next manifest entries for one run.

    Args:
        records: Validated records of this run (ids unique).
        previous: Manifest of the last successful run, or a blank Manifest.
        current: Global fingerprints of this run.
        config: Build configuration; force treats previous as absent.

    Returns:
        BuildPlan listing dirty ids and groups, removals and next entries.
    """
    previous_absent = config.force or previous.is_blank
    prior_entries: dict[str, ManifestEntry] = {} if previous_absent else previous.entries

    card_global_changed = (
        previous.card_render_fingerprint != current.card_render_fingerprint
    )
    wrapper_global_changed = (
        previous.wrapper_render_version != current.wrapper_render_version
        or previous.wrapper_template_fingerprint != current.wrapper_template_fingerprint
        or previous.card_version != current.card_version
    )
    source_global_changed = (
        previous.source_render_version != current.source_render_version
        or previous.source_template_fingerprint != current.source_template_fingerprint
    )

    plan = BuildPlan(previous_absent=previous_absent, groups=group_records(records))
    dirty_groups: dict[str, None] = {}
    locations: dict[str, GroupLocation] = {}

    def mark_group(entry: ManifestEntry) -> None:
        dirty_groups.setdefault(entry.group_key, None)
        locations.setdefault(
            entry.group_key,
            GroupLocation(source_domain=entry.source_domain, article_slug=entry.article_slug),
        )

    for record in records:
        entry = build_manifest_entry(
            record,
            card_render_version=current.card_render_version,
            wrapper_render_version=current.wrapper_render_version,
            source_render_version=current.source_render_version,
            base_path=config.base_path,
            site_origin=config.site_origin,
            card_version=current.card_version,
            card_extension=current.card_extension,
        )
        plan.next_entries[record.id] = entry
        prior = prior_entries.get(record.id)

        if (
            previous_absent
            or card_global_changed
            or prior is None
            or prior.card_fingerprint != entry.card_fingerprint
        ):
            plan.dirty_cards.append(record.id)

        if (
            previous_absent
            or wrapper_global_changed
            or prior is None
            or prior.wrapper_fingerprint != entry.wrapper_fingerprint
        ):
            plan.dirty_wrappers.append(record.id)

        moved = prior is not None and prior.group_key != entry.group_key
        if (
            previous_absent
            or source_global_changed
            or prior is None
            or prior.group_item_fingerprint != entry.group_item_fingerprint
            or moved
        ):
            mark_group(entry)
        if moved:
            mark_group(prior)

    removed_extension = previous.card_extension or current.card_extension
    for record_id, entry in prior_entries.items():
        if record_id in plan.next_entries:
            continue
        plan.removed.append(RemovedRecord(
            id=record_id,
            entry=entry,
            card_path=card_path(record_id, removed_extension),
        ))
        mark_group(entry)

    if (
        not previous_absent
        and previous.card_extension
        and previous.card_extension != current.card_extension
    ):
        plan.stale_card_paths = [
            card_path(record_id, previous.card_extension)
            for record_id in prior_entries
            if record_id in plan.next_entries
        ]

    plan.dirty_groups = list(dirty_groups)
    plan.orphan_groups = {
        key: location
        for key, location in locations.items()
        if key in dirty_groups and key not in plan.groups
    }

    logger.info(
        "Plan: %d card(s), %d wrapper(s), %d group(s) dirty; %d removed%s",
        len(plan.dirty_cards),
        len(plan.dirty_wrappers),
        len(plan.dirty_groups),
        len(plan.removed),
        " (no usable manifest)" if previous_absent else "",
    )
    return plan
