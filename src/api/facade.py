# src/api/facade.py — v2
"""Public API facade — single entry point for checking and building.

Usage:
    from quotecards.api.facade import build, check
    load_result = check(settings)
    outcome = await build(settings, force=True)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quotecards.build.models import BuildConfig, BuildOutcome
from quotecards.build.orchestrator import BuildOrchestrator
from quotecards.config.settings import Settings
from quotecards.content.loader import load_records
from quotecards.core.errors import ContentValidationError
from quotecards.core.models import LoadResult
from quotecards.render.assets import TemplateBundle, load_font_source, load_templates
from quotecards.render.card_renderer import CardRenderer

if TYPE_CHECKING:
    from quotecards.storage.base_output_writer import BaseOutputWriter

logger = logging.getLogger(__name__)


def check(settings: Settings | None = None) -> LoadResult:
    """Load and validate content without touching the output tree.

    Warnings and errors are logged; the caller decides the exit status from
    LoadResult.ok.
    """
    settings = settings or Settings()
    result = load_records(settings.content_dir)
    report_load_result(result)
    return result


async def build(
    settings: Settings | None = None,
    *,
    force: bool | None = None,
    card_version: str | None = None,
    renderer: CardRenderer | None = None,
    templates: TemplateBundle | None = None,
    writer: BaseOutputWriter | None = None,
) -> BuildOutcome:
    """Load content and run an incremental build.

    Args:
        settings: Global settings. Loaded from .env if None.
        force: Override settings.force_rebuild.
        card_version: Override settings.card_version (cache-bust token).
        renderer: Card renderer. Built from settings if None.
        templates: Page templates. Loaded from settings.template_dir if None.
        writer: Output backend. LocalWriter on settings.output_root if None.

    Returns:
        BuildOutcome with counters and the persisted manifest.

    Raises:
        ContentValidationError: If any content file fails validation.
        AssetError: If the font or a template cannot be read.
        ManifestError: If the previous manifest is unreadable.
    """
    settings = settings or Settings()
    load_result = load_records(settings.content_dir)
    report_load_result(load_result)
    if not load_result.ok:
        raise ContentValidationError(load_result.errors)

    config = BuildConfig.from_settings(settings, force=force, card_version=card_version)
    orchestrator = BuildOrchestrator(
        config,
        renderer or create_renderer(settings),
        templates or load_templates(settings.template_dir),
        writer=writer,
    )
    return await orchestrator.run(load_result.records)


def create_renderer(settings: Settings) -> CardRenderer:
    """CardRenderer configured from settings (font, format, quality)."""
    return CardRenderer(
        load_font_source(settings.font_path),
        image_format=settings.card_format,
        quality=settings.card_quality,
    )


def report_load_result(result: LoadResult) -> None:
    for warning in result.warnings:
        logger.warning(warning)
    for error in result.errors:
        logger.error(error)
    logger.info(
        "Content check: %d record(s), %d warning(s), %d error(s)",
        len(result.records), len(result.warnings), len(result.errors),
    )
