# src/render/templating.py — v1
"""Two-pass placeholder templating.

Pass 1 resolves sections: `{{#key}}inner{{/key}}` keeps `inner` only when
`key` maps to a non-empty value. Pass 2 replaces tokens: `{{key}}` becomes the
value, or '' for unknown keys. Substituted values are never re-scanned, so a
value containing braces is emitted verbatim.

Keys are ASCII letters, digits and underscores. Anything else between braces,
and any section opener without a matching closer, is left untouched.
"""

from __future__ import annotations

from collections.abc import Mapping

OPEN = "{{"
CLOSE = "}}"
SECTION_START = "{{#"
SECTION_END = "{{/"


def apply_template(template: str, data: Mapping[str, str]) -> str:
    """Render template with data; see module docstring for the syntax."""
    return substitute_tokens(resolve_sections(template, data), data)


def resolve_sections(text: str, data: Mapping[str, str]) -> str:
    out: list[str] = []
    pos = 0
    while True:
        start = text.find(SECTION_START, pos)
        if start == -1:
            out.append(text[pos:])
            break
        name_end = text.find(CLOSE, start + len(SECTION_START))
        if name_end == -1:
            out.append(text[pos:])
            break

        key = text[start + len(SECTION_START):name_end]
        body_start = name_end + len(CLOSE)
        closer = f"{SECTION_END}{key}{CLOSE}"
        close_at = text.find(closer, body_start) if is_key(key) else -1
        if close_at == -1:
            out.append(text[pos:body_start])
            pos = body_start
            continue

        out.append(text[pos:start])
        if data.get(key):
            out.append(resolve_sections(text[body_start:close_at], data))
        pos = close_at + len(closer)
    return "".join(out)


def substitute_tokens(text: str, data: Mapping[str, str]) -> str:
    out: list[str] = []
    pos = 0
    while True:
        start = text.find(OPEN, pos)
        if start == -1:
            out.append(text[pos:])
            break
        end = text.find(CLOSE, start + len(OPEN))
        if end == -1:
            out.append(text[pos:])
            break

        out.append(text[pos:start])
        key = text[start + len(OPEN):end]
        if is_key(key):
            out.append(str(data.get(key, "")))
            pos = end + len(CLOSE)
        else:
            out.append(OPEN)
            pos = start + len(OPEN)
    return "".join(out)


def is_key(name: str) -> bool:
    return bool(name) and name.isascii() and all(
        ch.isalnum() or ch == "_" for ch in name
    )
