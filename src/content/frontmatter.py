# src/content/frontmatter.py — v1
"""YAML front matter splitting and Markdown body rendering."""

from __future__ import annotations

from typing import Any

import markdown
import yaml

_DELIMITER = "---"
_MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]


class FrontMatterError(ValueError):
    """Raised when a content file has no usable front matter block."""


def split_front_matter(raw: str) -> tuple[dict[str, Any], str]:
    """Split a content file into its front matter mapping and Markdown body.

    The file must open with a `---` line; the block ends at the next line that
    starts with `---`.

    Raises:
        FrontMatterError: Missing, unterminated or non-mapping front matter,
            or YAML that does not parse.
    """
    text = raw.replace("\r\n", "\n").strip()
    if not text.startswith(_DELIMITER + "\n"):
        raise FrontMatterError("missing YAML front matter")

    rest = text[len(_DELIMITER) + 1:]
    if rest.startswith(_DELIMITER):
        yaml_section, body = "", rest[len(_DELIMITER):]
    else:
        end = rest.find("\n" + _DELIMITER)
        if end == -1:
            raise FrontMatterError("unterminated YAML front matter")
        yaml_section = rest[:end]
        body = rest[end + len(_DELIMITER) + 1:]

    # Anything after the closing dashes on the same line is not body text
    _, _, body = body.partition("\n")

    try:
        data = yaml.safe_load(yaml_section) if yaml_section.strip() else {}
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"invalid YAML front matter: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError("front matter must be a mapping")

    return data, body.strip()


def render_markdown(body: str) -> str:
    """Render commentary Markdown to HTML; blank bodies give ''."""
    if not body.strip():
        return ""
    return markdown.markdown(body, extensions=_MARKDOWN_EXTENSIONS)
