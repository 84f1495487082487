# src/render/card_renderer.py — v1
"""Quote card rasterizer built on Pillow.

CardRenderer draws the fitted quote centred on a fixed canvas and encodes it.
Font faces are expensive to build, so each renderer owns a FontFaceCache
(size -> face) guarded by a lock; faces are shared read-only by every render
call at that size, including calls from worker threads.
"""

from __future__ import annotations

import io
import logging
import threading

from PIL import Image, ImageDraw, ImageFont

from quotecards.cache.fingerprint import (
    card_render_fingerprint,
    fonts_fingerprint,
)
from quotecards.core.errors import RenderError
from quotecards.render.assets import FontSource
from quotecards.render.text_fit import (
    DEFAULT_GEOMETRY,
    ApproximateMeasure,
    CardGeometry,
    FitResult,
    TextMeasure,
    fit_text,
)

logger = logging.getLogger(__name__)

# Bump whenever layout, colours or drawing change in a way that alters pixels.
CARD_RENDER_VERSION = "20260412"

BACKGROUND = (0xF7, 0xF4, 0xEC)
INK = (0x26, 0x21, 0x1A)

# card_format setting -> (Pillow encoder, file extension)
IMAGE_FORMATS: dict[str, tuple[str, str]] = {
    "jpeg": ("JPEG", "jpg"),
    "png": ("PNG", "png"),
    "webp": ("WEBP", "webp"),
}

Face = ImageFont.FreeTypeFont | ImageFont.ImageFont


class FontFaceCache:
    """Lock-guarded size -> face map for one font source."""

    def __init__(self, source: FontSource) -> None:
        self._source = source
        self._faces: dict[float, Face] = {}
        self._lock = threading.Lock()

    @property
    def source(self) -> FontSource:
        return self._source

    def get(self, size: float) -> Face:
        with self._lock:
            face = self._faces.get(size)
            if face is None:
                face = self._source.load_face(size)
                self._faces[size] = face
            return face

    def __len__(self) -> int:
        with self._lock:
            return len(self._faces)


class GlyphMeasure:
    """Line widths from the face's real glyph advances."""

    def __init__(self, faces: FontFaceCache) -> None:
        self._faces = faces

    def line_width(self, text: str, size: float) -> float:
        return float(self._faces.get(size).getlength(text))


class CardRenderer:
    """Render quote text to a fixed-size card image.

    Args:
        font_source: Face to draw with. None uses Pillow's default face.
        image_format: "jpeg", "png" or "webp".
        quality: Encoder quality for lossy formats.
        geometry: Canvas and font-size search range.
        face_cache: Cache to share between renderers; its font source takes
            precedence over font_source. A private cache is created if None.
    """

    render_version = CARD_RENDER_VERSION

    def __init__(
        self,
        font_source: FontSource | None = None,
        *,
        image_format: str = "jpeg",
        quality: int = 88,
        geometry: CardGeometry = DEFAULT_GEOMETRY,
        face_cache: FontFaceCache | None = None,
    ) -> None:
        if image_format not in IMAGE_FORMATS:
            raise ValueError(f"Unsupported card format: {image_format!r}")
        if face_cache is None:
            face_cache = FontFaceCache(font_source or FontSource("pillow-default"))
        self._faces = face_cache
        self._format = image_format
        self._quality = quality
        self._geometry = geometry
        self._measure: TextMeasure | None = None
        self._measure_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Fingerprint inputs
    # ------------------------------------------------------------------

    @property
    def extension(self) -> str:
        return IMAGE_FORMATS[self._format][1]

    @property
    def fonts_fingerprint(self) -> str:
        return fonts_fingerprint([self._faces.source.fingerprint_bytes])

    @property
    def fingerprint(self) -> str:
        """Global card fingerprint recorded in the manifest."""
        return card_render_fingerprint(
            self.render_version, self.fonts_fingerprint, self._format, self._quality
        )

    # ------------------------------------------------------------------
    # Layout and drawing
    # ------------------------------------------------------------------

    @property
    def measure(self) -> TextMeasure:
        """Glyph metrics when the face is scalable, else the approximate model."""
        with self._measure_lock:
            if self._measure is None:
                face = self._faces.get(self._geometry.max_size)
                if isinstance(face, ImageFont.FreeTypeFont):
                    self._measure = GlyphMeasure(self._faces)
                else:
                    logger.warning(
                        "Font %s has no scalable metrics; wrapping with the "
                        "approximate width model",
                        self._faces.source.name,
                    )
                    self._measure = ApproximateMeasure()
            return self._measure

    def layout(self, text: str) -> FitResult:
        fit = fit_text(text, self.measure, self._geometry)
        if fit.overflow:
            logger.warning(
                "Quote overflows the card even at %.0fpx (%d lines)",
                fit.size, len(fit.lines),
            )
        return fit

    def render(self, text: str) -> bytes:
        """Rasterize and encode one card.

        Raises:
            RenderError: If drawing or encoding fails.
        """
        fit = self.layout(text)
        geometry = self._geometry
        try:
            image = Image.new("RGB", (geometry.width, geometry.height), BACKGROUND)
            draw = ImageDraw.Draw(image)
            face = self._faces.get(fit.size)
            line_height = fit.line_height_px
            start_y = geometry.height / 2 - (len(fit.lines) - 1) * line_height / 2
            centre_x = geometry.width / 2

            for index, line in enumerate(fit.lines):
                y = start_y + index * line_height
                _draw_centered(draw, line, face, centre_x, y)

            buffer = io.BytesIO()
            encoder = IMAGE_FORMATS[self._format][0]
            if encoder == "PNG":
                image.save(buffer, format=encoder)
            else:
                image.save(buffer, format=encoder, quality=self._quality)
        except (OSError, ValueError) as exc:
            raise RenderError(f"Card rendering failed: {exc}") from exc
        return buffer.getvalue()


def _draw_centered(
    draw: ImageDraw.ImageDraw, line: str, face: Face, x: float, y: float
) -> None:
    """Draw a line with its centre at (x, y)."""
    if isinstance(face, ImageFont.FreeTypeFont):
        draw.text((x, y), line, font=face, fill=INK, anchor="mm")
        return
    # Bitmap faces do not support anchors
    left, top, right, bottom = draw.textbbox((0, 0), line, font=face)
    draw.text(
        (x - (right - left) / 2 - left, y - (bottom - top) / 2 - top),
        line,
        font=face,
        fill=INK,
    )
