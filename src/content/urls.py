# src/content/urls.py — v1
"""Source URL normalization and domain/slug inference."""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import unquote, urlsplit, urlunsplit

from quotecards.core.models import INDEX_SLUG
from quotecards.storage.layout import is_safe_segment

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


class InvalidURLError(ValueError):
    """Raised when a source URL lacks a scheme or a usable host, or cannot be parsed."""


def normalize_url(raw: str) -> str:
    """Normalize a source URL for grouping.

    Lowercases scheme and host, drops the fragment, keeps the query, and
    strips one trailing slash so `https://a.org/x/` and `https://a.org/x#top`
    normalize identically.

    Raises:
        InvalidURLError: If the URL has no scheme or host.
    """
    trimmed = (raw or "").strip()
    if not trimmed:
        raise InvalidURLError("empty url")
    try:
        parts = urlsplit(trimmed)
        # Accessing .port validates it (raises ValueError when out of range)
        parts.port
    except ValueError as exc:
        raise InvalidURLError(str(exc)) from exc

    if not parts.scheme or not parts.netloc or not parts.hostname:
        raise InvalidURLError(f"missing scheme or host in {trimmed!r}")
    # The host becomes a directory under sources/
    if not is_safe_segment(parts.hostname):
        raise InvalidURLError(f"host {parts.hostname!r} is not a valid name in {trimmed!r}")

    normalized = urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, "")
    )
    if normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized


def infer_domain(normalized_url: str) -> str:
    """Return the lowercase host of a normalized URL, or '' if there is none."""
    if not normalized_url:
        return ""
    try:
        return urlsplit(normalized_url).hostname or ""
    except ValueError:
        return ""


def infer_article_slug(normalized_url: str) -> str:
    """Derive a stable slug from the URL path; an empty path gives 'index'.

    Returns '' only when the URL itself cannot be parsed.
    """
    if not normalized_url:
        return ""
    try:
        path = urlsplit(normalized_url).path
    except ValueError:
        return ""
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return INDEX_SLUG
    return slugify("-".join(unquote(segment) for segment in segments)) or INDEX_SLUG


def slugify(text: str) -> str:
    """Lowercase ASCII slug of a-z, 0-9 and single hyphens."""
    text = unicodedata.normalize("NFKD", text or "")
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    return _NON_SLUG_CHARS.sub("-", text).strip("-")
