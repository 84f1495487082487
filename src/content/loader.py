# src/content/loader.py — v1
"""Content loader: discover quote files, validate them, build ContentRecords.

Each `*.md` file under the content directory holds one quote as YAML front
matter plus optional Markdown commentary. Files are processed in sorted path
order so validation messages and duplicate-id resolution are deterministic.

Severity rules:
  - errors (missing field, duplicate id, malformed URL, bad front matter)
    exclude the file's record and make the load fail;
  - warnings (shared URL, undeterminable domain or slug, unparsable
    created_at) are reported and never exclude anything.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any

from quotecards.content.frontmatter import (
    FrontMatterError,
    render_markdown,
    split_front_matter,
)
from quotecards.content.urls import (
    InvalidURLError,
    infer_article_slug,
    infer_domain,
    normalize_url,
)
from quotecards.core.models import (
    INDEX_SLUG,
    UNKNOWN_SOURCE,
    ContentRecord,
    LoadResult,
)
from quotecards.storage.layout import is_safe_segment

logger = logging.getLogger(__name__)

CONTENT_SUFFIX = ".md"

# front matter key -> ContentRecord field
REQUIRED_FIELDS: dict[str, str] = {
    "id": "id",
    "quote": "text",
    "name": "attribution",
    "url": "url",
}


def discover_content_files(content_dir: Path) -> list[Path]:
    """Return every content file under content_dir, sorted by relative path."""
    return sorted(
        path
        for path in content_dir.rglob(f"*{CONTENT_SUFFIX}")
        if path.is_file() and not _is_hidden(path.relative_to(content_dir))
    )


def load_records(content_dir: Path) -> LoadResult:
    """Load and validate all content records under content_dir.

    Args:
        content_dir: Root directory of the quote files.

    Returns:
        LoadResult with accepted records, warnings and errors.

    Raises:
        OSError: If a content file exists but cannot be read.
    """
    content_dir = Path(content_dir)
    if not content_dir.is_dir():
        return LoadResult(errors=[f"content directory not found: {content_dir}"])

    files = discover_content_files(content_dir)
    seen_ids: set[str] = set()
    url_owners: dict[str, list[str]] = {}
    records: list[ContentRecord] = []
    warnings: list[str] = []
    errors: list[str] = []

    for path in files:
        location = path.relative_to(content_dir).as_posix()
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            errors.append(f"{location}: file is not valid UTF-8.")
            continue

        try:
            data, body = split_front_matter(raw)
        except FrontMatterError as exc:
            errors.append(f"{location}: {exc}.")
            continue

        record, file_errors, file_warnings = _build_record(
            data, body, location, seen_ids
        )
        warnings.extend(file_warnings)

        owner_url = _safe_normalize(_string_or_none(data.get("url")))
        if owner_url:
            owner = _string_or_none(data.get("id")) or location
            url_owners.setdefault(owner_url, []).append(owner)

        if file_errors:
            errors.extend(file_errors)
            continue
        if record is not None:
            records.append(record)

    for page_url, owners in url_owners.items():
        if len(owners) > 1:
            warnings.append(
                f"Multiple quotes reference the same url ({page_url}): "
                f"{', '.join(sorted(owners))}"
            )

    result = LoadResult(
        records=records,
        warnings=warnings,
        errors=errors,
        files_scanned=len(files),
    )
    logger.info(
        "Loaded %d record(s) from %d file(s) in %s (%d warning(s), %d error(s))",
        len(records), len(files), content_dir, len(warnings), len(errors),
    )
    return result


def _build_record(
    data: dict[str, Any],
    body: str,
    location: str,
    seen_ids: set[str],
) -> tuple[ContentRecord | None, list[str], list[str]]:
    """Validate one front matter mapping. Returns (record, errors, warnings)."""
    errors: list[str] = []
    warnings: list[str] = []

    values = {key: _string_or_none(data.get(key)) for key in REQUIRED_FIELDS}
    for key, value in values.items():
        if value is None:
            errors.append(f'{location}: missing required field "{key}".')

    record_id = values["id"]
    if record_id is not None and not is_safe_segment(record_id):
        errors.append(f'{location}: id "{record_id}" cannot be used as a file name.')
        record_id = None
    if record_id is not None:
        if record_id in seen_ids:
            errors.append(f'{location}: duplicate id "{record_id}".')
        else:
            seen_ids.add(record_id)

    normalized_url = ""
    if values["url"] is not None:
        try:
            normalized_url = normalize_url(values["url"])
        except InvalidURLError:
            errors.append(f'{location}: invalid url "{values["url"]}".')

    declared_domain = _string_or_none(data.get("source_domain"))
    domain = declared_domain or infer_domain(normalized_url)
    if not domain:
        warnings.append(f"{location}: could not determine source domain.")
    elif not is_safe_segment(domain):
        errors.append(f'{location}: source_domain "{domain}" cannot be used as a directory name.')

    article_slug = infer_article_slug(normalized_url)
    if not article_slug:
        warnings.append(f"{location}: could not determine article slug.")

    created_at = _parse_created_at(data.get("created_at"))
    if data.get("created_at") not in (None, "") and created_at is None:
        warnings.append(f"{location}: could not parse created_at; treating as undated.")

    if errors:
        return None, errors, warnings

    record = ContentRecord(
        id=values["id"],
        text=values["quote"],
        attribution=values["name"],
        url=values["url"],
        normalized_url=normalized_url,
        title=_string_or_none(data.get("article_title")) or "",
        source_domain=domain or UNKNOWN_SOURCE,
        article_slug=article_slug or INDEX_SLUG,
        created_at=created_at,
        tags=_parse_tags(data.get("tags")),
        body_html=render_markdown(body),
        location=location,
    )
    return record, errors, warnings


def _string_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _safe_normalize(url: str | None) -> str:
    if url is None:
        return ""
    try:
        return normalize_url(url)
    except InvalidURLError:
        return ""


def _parse_created_at(value: Any) -> datetime | None:
    """Accept YAML timestamps, YAML dates and ISO-8601 strings; naive means UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_tags(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(tag).strip() for tag in value if str(tag).strip()]


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith(".") for part in relative.parts)
