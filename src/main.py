# src/main.py — v2
"""CLI entry point — build or check the quote card site.

Usage:
    quotecards [--content-dir DIR] [--output DIR] [--force] [--card-version TOKEN]
    quotecards --check

Environment (.env) supplies defaults; flags override it.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from quotecards.config.settings import ConfigurationError, Settings, load_settings
from quotecards.logging.logger import setup_logging
from quotecards.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(**_settings_overrides(args))
    except (ConfigurationError, ValidationError) as exc:
        _setup_logging(None, args.verbose)
        logger.error("Invalid configuration: %s", exc)
        return 1

    _setup_logging(settings, args.verbose)

    try:
        if args.check:
            return _cmd_check(settings)
        return asyncio.run(_cmd_build(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="quotecards",
        description=f"quotecards v{__version__} — Incremental quote card site builder",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--check", "--dry-run", "--validate", dest="check", action="store_true",
        help="Validate content only; write nothing",
    )
    parser.add_argument(
        "--force", action="store_true",
        help="Wipe generated outputs and the manifest, then rebuild everything",
    )
    parser.add_argument(
        "--card-version", "--image-version", dest="card_version", default=None,
        help="Cache-bust token appended to card URLs as ?v=TOKEN",
    )
    parser.add_argument(
        "--content-dir", type=Path, default=None,
        help="Directory of quote files (default: CONTENT_DIR or ./quotes)",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output root (default: OUTPUT_ROOT or .)",
    )
    return parser


def _settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Flags that were given explicitly, as Settings field overrides."""
    overrides: dict[str, Any] = {}
    if args.content_dir is not None:
        overrides["content_dir"] = args.content_dir
    if args.output is not None:
        overrides["output_root"] = args.output
    if args.card_version is not None:
        overrides["card_version"] = args.card_version
    if args.force:
        overrides["force_rebuild"] = True
    return overrides


def _cmd_check(settings: Settings) -> int:
    """Validate content and report; exit 1 iff there are errors."""
    from quotecards.api.facade import check

    result = check(settings)
    print(f"\nCheck complete:")
    print(f"  Files:     {result.files_scanned}")
    print(f"  Records:   {len(result.records)}")
    print(f"  Warnings:  {len(result.warnings)}")
    print(f"  Errors:    {len(result.errors)}")
    return 0 if result.ok else 1


async def _cmd_build(settings: Settings) -> int:
    """Run an incremental (or forced) build."""
    from quotecards.api.facade import build

    outcome = await build(settings)
    result = outcome.result

    print(f"\nBuild complete{' (forced)' if result.forced else ''}:")
    print(f"  Records:       {result.records_total}")
    print(f"  Cards:         {result.cards_rendered} rendered, {result.cards_removed} removed")
    print(f"  Wrappers:      {result.wrappers_rendered} rendered, {result.wrappers_removed} removed")
    print(
        f"  Source pages:  {result.source_pages_rendered} rendered, "
        f"{result.source_pages_removed} removed"
    )
    print(f"  Duration:      {result.duration_seconds:.2f}s")
    if outcome.manifest is None:
        print("  Manifest:      removed (no content)")
    else:
        print(f"  Manifest:      {settings.manifest_path}")
    return 0


def _setup_logging(settings: Settings | None, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    if settings is None:
        setup_logging(level="DEBUG" if verbose else "INFO")
        return
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
