# src/render/assets.py — v1
"""Template and font asset loading.

Templates ship inside the package (render/templates/*.html) and can be
overridden by a directory on disk. Fonts come from a configured file or fall
back to Pillow's bundled face. Any unreadable asset raises AssetError.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

import PIL
from PIL import ImageFont

from quotecards.cache.fingerprint import template_fingerprint
from quotecards.core.errors import AssetError

logger = logging.getLogger(__name__)

WRAPPER_TEMPLATE = "wrapper.html"
SOURCE_TEMPLATE = "source.html"


@dataclass(frozen=True)
class TemplateBundle:
    """The two page templates a build applies."""

    wrapper: str
    source: str

    @property
    def wrapper_fingerprint(self) -> str:
        return template_fingerprint(self.wrapper)

    @property
    def source_fingerprint(self) -> str:
        return template_fingerprint(self.source)


def load_templates(template_dir: Path | None = None) -> TemplateBundle:
    """Read the wrapper and source templates.

    Args:
        template_dir: Directory holding wrapper.html and source.html. None
            uses the templates packaged with quotecards.

    Raises:
        AssetError: If either template cannot be read.
    """
    return TemplateBundle(
        wrapper=_read_template(WRAPPER_TEMPLATE, template_dir),
        source=_read_template(SOURCE_TEMPLATE, template_dir),
    )


def _read_template(name: str, template_dir: Path | None) -> str:
    try:
        if template_dir is not None:
            return (Path(template_dir).expanduser() / name).read_text(encoding="utf-8")
        return (
            resources.files("quotecards.render")
            .joinpath("templates", name)
            .read_text(encoding="utf-8")
        )
    except (OSError, UnicodeDecodeError) as exc:
        where = template_dir or "package data"
        raise AssetError(f"Template {name} unreadable ({where}): {exc}") from exc


@dataclass(frozen=True)
class FontSource:
    """Font bytes for the card face; data=None selects Pillow's default face."""

    name: str
    data: bytes | None = None

    @property
    def fingerprint_bytes(self) -> bytes:
        """Bytes hashed into the card render fingerprint."""
        if self.data is not None:
            return self.data
        # The bundled face changes only with the Pillow release
        return f"pillow-default-font:{PIL.__version__}".encode("utf-8")

    def load_face(self, size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        if self.data is not None:
            return ImageFont.truetype(io.BytesIO(self.data), size=size)
        return ImageFont.load_default(size=size)


def load_font_source(font_path: Path | None = None) -> FontSource:
    """Read and validate the configured font file.

    Raises:
        AssetError: If the file is missing or is not a font FreeType can open.
    """
    if font_path is None:
        logger.debug("No font configured; using Pillow's default face")
        return FontSource(name="pillow-default")

    path = Path(font_path).expanduser()
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise AssetError(f"Font file unreadable: {path}: {exc}") from exc

    try:
        ImageFont.truetype(io.BytesIO(data), size=12)
    except OSError as exc:
        raise AssetError(f"Font file {path} is not a usable TrueType/OpenType font") from exc

    return FontSource(name=path.name, data=data)
