# src/render/pages.py — v1
"""HTML builders for wrapper pages and source aggregation pages."""

from __future__ import annotations

import html
from dataclasses import dataclass
from urllib.parse import quote

from quotecards.core.models import ContentRecord, SourceGroup
from quotecards.render.templating import apply_template

# Bump when payload construction or fragment markup changes.
WRAPPER_RENDER_VERSION = "20260412"
SOURCE_RENDER_VERSION = "20260412"

FALLBACK_DOMAIN = "original-source"
GROUP_ITEM_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class LinkContext:
    """Everything link construction depends on besides the record itself."""

    base_path: str = ""
    site_origin: str = ""
    card_version: str | None = None
    card_extension: str = "jpg"

    def public_path(self, relative: str) -> str:
        """Site-relative path under the configured base path."""
        if not relative.startswith("/"):
            relative = "/" + relative
        return f"{self.base_path}{relative}"

    def absolute_url(self, relative: str) -> str:
        """Absolute URL when a site origin is configured, else the public path."""
        path = self.public_path(relative)
        if not self.site_origin:
            return path
        return f"{self.site_origin}{path}"

    def card_path(self, record_id: str) -> str:
        return f"/cards/{record_id}.{self.card_extension}"

    def wrapper_path(self, record_id: str) -> str:
        return f"/q/{record_id}/"

    def versioned_card_path(self, record_id: str) -> str:
        """Card path with the cache-bust token as ?v= when one is set."""
        path = self.card_path(record_id)
        if self.card_version:
            return f"{path}?v={quote(self.card_version, safe='')}"
        return path


def escape_html(value: object) -> str:
    return html.escape(str(value), quote=True)


def describe(record: ContentRecord) -> str:
    """One-line description used for meta and Open Graph tags."""
    domain = record.source_domain or FALLBACK_DOMAIN
    if record.title:
        if record.attribution:
            return f"From {record.title} by {record.attribution}"
        return f"From {record.title} on {domain}"
    if record.attribution:
        return f"{record.attribution} on {domain}"
    return f"Collected from {domain}"


def build_wrapper_payload(record: ContentRecord, links: LinkContext) -> dict[str, str]:
    """Template values for a record's wrapper page, already HTML-escaped."""
    domain = record.source_domain or FALLBACK_DOMAIN
    page_title = record.title or domain
    description = describe(record)
    og_image = links.absolute_url(links.versioned_card_path(record.id))

    return {
        "page_title": escape_html(page_title),
        "meta_description": escape_html(description),
        "og_title": escape_html(page_title),
        "og_description": escape_html(description),
        "og_image": escape_html(og_image),
        "canonical_url": escape_html(record.url),
        "source_url": escape_html(record.url),
        "quote_text": escape_html(record.text),
        "quote_author": escape_html(record.attribution) if record.attribution else "",
        "article_title": escape_html(record.title) if record.title else "",
        "card_url": escape_html(links.public_path(links.card_path(record.id))),
    }


def render_wrapper_page(template: str, record: ContentRecord, links: LinkContext) -> str:
    return apply_template(template, build_wrapper_payload(record, links))


def build_group_item_html(record: ContentRecord, links: LinkContext) -> str:
    """The <article> fragment a record contributes to its source page."""
    parts = [
        "<article>",
        f"  <blockquote>“{escape_html(record.text)}”</blockquote>",
        f"  <cite>{escape_html(record.attribution)}</cite>",
    ]
    if record.body_html.strip():
        # Rendered from trusted Markdown; inserted as-is
        parts.append(f'  <div class="body">{record.body_html}</div>')
    quote_page = escape_html(links.public_path(links.wrapper_path(record.id)))
    card_file = escape_html(links.public_path(links.card_path(record.id)))
    parts.extend([
        '  <div class="meta">',
        f'    <span><a href="{quote_page}">Quote page</a></span>',
        f'    <span><a href="{card_file}">Download {links.card_extension.upper()}</a></span>',
        "  </div>",
        "</article>",
    ])
    return "\n".join(parts)


def build_source_payload(group: SourceGroup, links: LinkContext) -> dict[str, str]:
    members = group.ordered_records()
    if group.title:
        page_title = f"{group.title} — {group.source_domain}"
    else:
        page_title = f"Quotes from {group.source_domain}"
    source_url = group.source_url or (members[0].url if members else "")

    return {
        "page_title": escape_html(page_title),
        "source_domain": escape_html(group.source_domain),
        "source_url": escape_html(source_url),
        "quote_items": GROUP_ITEM_SEPARATOR.join(
            build_group_item_html(record, links) for record in members
        ),
    }


def render_source_page(template: str, group: SourceGroup, links: LinkContext) -> str:
    return apply_template(template, build_source_payload(group, links))
