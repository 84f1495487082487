# src/storage/layout.py — v2
"""Output directory structure definition.

All paths are relative to the output root:

    cards/<id>.<ext>                      card image
    q/<id>/index.html                     wrapper page
    sources/<domain>/<slug>/index.html    source aggregation page
"""

from __future__ import annotations

from pathlib import PurePosixPath

CARDS_DIR = "cards"
WRAPPERS_DIR = "q"
SOURCES_DIR = "sources"
INDEX_FILE = "index.html"

OUTPUT_TREES = (CARDS_DIR, WRAPPERS_DIR, SOURCES_DIR)


def card_path(record_id: str, extension: str) -> str:
    return str(PurePosixPath(CARDS_DIR) / f"{record_id}.{extension}")


def wrapper_dir(record_id: str) -> str:
    return str(PurePosixPath(WRAPPERS_DIR) / record_id)


def wrapper_path(record_id: str) -> str:
    return str(PurePosixPath(wrapper_dir(record_id)) / INDEX_FILE)


def source_dir(source_domain: str, article_slug: str) -> str:
    return str(PurePosixPath(SOURCES_DIR) / source_domain / article_slug)


def source_path(source_domain: str, article_slug: str) -> str:
    return str(PurePosixPath(source_dir(source_domain, article_slug)) / INDEX_FILE)


def is_safe_segment(segment: str) -> bool:
    """True if segment can be used as a single path component."""
    return bool(segment) and segment not in {".", ".."} and "/" not in segment and "\\" not in segment
