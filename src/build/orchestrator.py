# src/build/orchestrator.py — v1
"""Build orchestrator: turns validated records into files on disk.

Run order:
  1. Load the previous manifest (skipped in force mode, which wipes outputs
     and deletes the manifest first)
  2. Empty record set: wipe every output tree, delete the manifest, stop
  3. Plan dirty sets (build.planner)
  4. Delete outputs of removed records and cards under a stale extension
  5. Render dirty cards and wrappers, bounded by render_workers
  6. Barrier: only then render (or delete) dirty source pages
  7. Persist the next manifest, built from current records only

Any exception aborts the run before step 7, so the manifest on disk never
describes outputs that were not written.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import TYPE_CHECKING

from quotecards.build.models import BuildConfig, BuildOutcome, BuildPlan, BuildResult
from quotecards.build.planner import compute_globals, plan_build
from quotecards.cache.manifest_store import ManifestStore
from quotecards.cache.models import Manifest
from quotecards.core.models import ContentRecord
from quotecards.logging.context import clear_context, set_record_context, set_run_context
from quotecards.render.pages import LinkContext, render_source_page, render_wrapper_page
from quotecards.storage import layout
from quotecards.storage.local_writer import LocalWriter

if TYPE_CHECKING:
    from quotecards.render.assets import TemplateBundle
    from quotecards.render.card_renderer import CardRenderer
    from quotecards.storage.base_output_writer import BaseOutputWriter

logger = logging.getLogger(__name__)


class BuildOrchestrator:
    """Incremental builder for cards, wrapper pages and source pages.

    Args:
        config: Immutable build configuration.
        renderer: Card rasterizer; its extension and fingerprint feed the plan.
        templates: Wrapper and source page templates.
        writer: Output backend. Defaults to a LocalWriter on config.output_root.
        manifest_store: Defaults to a ManifestStore on config.manifest_path.
    """

    def __init__(
        self,
        config: BuildConfig,
        renderer: CardRenderer,
        templates: TemplateBundle,
        writer: BaseOutputWriter | None = None,
        manifest_store: ManifestStore | None = None,
    ) -> None:
        self._config = config
        self._renderer = renderer
        self._templates = templates
        self._writer = writer or LocalWriter(config.output_root)
        self._store = manifest_store or ManifestStore(config.manifest_path)

    @property
    def config(self) -> BuildConfig:
        return self._config

    async def run(self, records: list[ContentRecord]) -> BuildOutcome:
        """Bring the output tree in line with records.

        Args:
            records: Validated records with unique ids.

        Returns:
            BuildOutcome with counters and the persisted manifest (None when
            the record set was empty and the manifest was deleted).

        Raises:
            ManifestError: If the previous manifest is unreadable.
            RenderError: If a card cannot be drawn or encoded.
            OSError: If an output cannot be written or removed.
        """
        start_time = time.monotonic()
        set_run_context(uuid.uuid4().hex[:12])
        result = BuildResult(records_total=len(records), forced=self._config.force)

        try:
            if self._config.force:
                logger.info("Force rebuild: wiping outputs and manifest")
                await self._wipe_outputs()
                self._store.delete()
                previous = Manifest()
            else:
                previous = self._store.load()

            if not records:
                logger.info("No content records; removing all generated outputs")
                await self._wipe_outputs()
                self._store.delete()
                result.duration_seconds = time.monotonic() - start_time
                return BuildOutcome(result=result, manifest=None)

            current = compute_globals(self._renderer, self._templates, self._config)
            plan = plan_build(records, previous, current, self._config)
            links = self._config.link_context(self._renderer.extension)
            if plan.is_noop:
                logger.info("All outputs are up to date")

            await self._remove_outputs(plan, result)
            await self._render_records(plan.records_to_render(records), plan, links, result)
            # Barrier: every record task has finished before groups are built
            await self._render_groups(plan, links, result)

            manifest = self._store.save(Manifest.assemble(current, plan.next_entries))
        except Exception:
            logger.exception("Build failed; manifest not updated")
            raise
        finally:
            clear_context()

        result.duration_seconds = time.monotonic() - start_time
        logger.info(
            "Build complete in %.2fs: %d card(s), %d wrapper(s), %d source page(s) "
            "rendered; %d card(s), %d wrapper(s), %d source page(s) removed",
            result.duration_seconds,
            result.cards_rendered,
            result.wrappers_rendered,
            result.source_pages_rendered,
            result.cards_removed,
            result.wrappers_removed,
            result.source_pages_removed,
        )
        return BuildOutcome(result=result, manifest=manifest)

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    async def _wipe_outputs(self) -> None:
        for tree in layout.OUTPUT_TREES:
            if await self._writer.remove_tree(tree):
                logger.debug("Removed output tree %s", tree)

    async def _remove_outputs(self, plan: BuildPlan, result: BuildResult) -> None:
        for removed in plan.removed:
            set_record_context(removed.id, stage="remove")
            if await self._writer.remove(removed.card_path):
                result.cards_removed += 1
            if await self._writer.remove_tree(layout.wrapper_dir(removed.id)):
                result.wrappers_removed += 1
            logger.info("Removed outputs of deleted record")
        set_record_context(None)

        for path in plan.stale_card_paths:
            if await self._writer.remove(path):
                result.cards_removed += 1
        if plan.stale_card_paths:
            logger.info(
                "Card format changed; removed %d card(s) with the old extension",
                len(plan.stale_card_paths),
            )

    # ------------------------------------------------------------------
    # Per-record artifacts
    # ------------------------------------------------------------------

    async def _render_records(
        self,
        records: list[ContentRecord],
        plan: BuildPlan,
        links: LinkContext,
        result: BuildResult,
    ) -> None:
        dirty_cards = set(plan.dirty_cards)
        dirty_wrappers = set(plan.dirty_wrappers)
        semaphore = asyncio.Semaphore(self._config.render_workers)

        async def render_one(record: ContentRecord) -> None:
            async with semaphore:
                if record.id in dirty_cards:
                    set_record_context(record.id, stage="card")
                    image = await asyncio.to_thread(self._renderer.render, record.text)
                    await self._writer.write(
                        layout.card_path(record.id, self._renderer.extension), image
                    )
                    result.cards_rendered += 1
                    logger.debug("Card written")
                if record.id in dirty_wrappers:
                    set_record_context(record.id, stage="wrapper")
                    page = render_wrapper_page(self._templates.wrapper, record, links)
                    await self._writer.write(layout.wrapper_path(record.id), page)
                    result.wrappers_rendered += 1
                    logger.debug("Wrapper page written")

        # A failing task cancels its siblings; nothing is written after run() raises
        try:
            async with asyncio.TaskGroup() as group:
                for record in records:
                    group.create_task(render_one(record))
        except ExceptionGroup as exc_group:
            for extra in exc_group.exceptions[1:]:
                logger.error("Additional render failure: %s", extra)
            raise exc_group.exceptions[0] from None

    # ------------------------------------------------------------------
    # Source pages
    # ------------------------------------------------------------------

    async def _render_groups(
        self,
        plan: BuildPlan,
        links: LinkContext,
        result: BuildResult,
    ) -> None:
        for key in plan.dirty_groups:
            group = plan.groups.get(key)
            if group is None:
                location = plan.orphan_groups[key]
                target = layout.source_dir(location.source_domain, location.article_slug)
                if await self._writer.remove_tree(target):
                    result.source_pages_removed += 1
                    logger.info("Source page %s has no quotes left; removed", key)
                continue

            page = render_source_page(self._templates.source, group, links)
            await self._writer.write(
                layout.source_path(group.source_domain, group.article_slug), page
            )
            result.source_pages_rendered += 1
            logger.debug("Source page %s written (%d quote(s))", key, len(group.records))
