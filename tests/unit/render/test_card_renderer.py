# tests/unit/render/test_card_renderer.py — v1
"""Tests for render/card_renderer.py — rasterization with Pillow's default face."""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest
from PIL import Image, ImageFont

from quotecards.core.errors import RenderError
from quotecards.render.assets import FontSource
from quotecards.render.card_renderer import (
    CARD_RENDER_VERSION,
    CardRenderer,
    FontFaceCache,
)
from quotecards.render.text_fit import DEFAULT_GEOMETRY, ApproximateMeasure


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


class TestFontFaceCache:
    def test_caches_per_size(self):
        cache = FontFaceCache(FontSource("pillow-default"))
        assert cache.get(40) is cache.get(40)
        cache.get(42)
        assert len(cache) == 2

    def test_loads_each_size_once(self):
        source = FontSource("pillow-default")
        cache = FontFaceCache(source)
        with patch.object(FontSource, "load_face", autospec=True) as load_face:
            cache.get(40)
            cache.get(40)
        assert load_face.call_count == 1

    def test_instance_owned(self):
        a = CardRenderer()
        b = CardRenderer()
        a.render("warm")
        assert a._faces is not b._faces
        assert len(b._faces) == 0


class TestCardRendererConfig:
    @pytest.mark.parametrize(
        ("image_format", "extension"),
        [("jpeg", "jpg"), ("png", "png"), ("webp", "webp")],
    )
    def test_extension(self, image_format, extension):
        assert CardRenderer(image_format=image_format).extension == extension

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unsupported card format"):
            CardRenderer(image_format="gif")

    def test_render_version(self):
        assert CardRenderer.render_version == CARD_RENDER_VERSION

    def test_fingerprint_covers_encoder(self):
        base = CardRenderer().fingerprint
        assert base == CardRenderer().fingerprint
        assert base != CardRenderer(quality=70).fingerprint
        assert base != CardRenderer(image_format="png").fingerprint

    def test_fingerprint_covers_font_bytes(self):
        default = CardRenderer()
        custom = CardRenderer(FontSource("custom.ttf", data=b"not-really-a-font"))
        assert default.fonts_fingerprint != custom.fonts_fingerprint

    def test_shared_face_cache(self):
        cache = FontFaceCache(FontSource("pillow-default"))
        a = CardRenderer(face_cache=cache)
        b = CardRenderer(face_cache=cache)
        a.render("shared")
        size = len(cache)
        b.render("shared")
        assert len(cache) == size


class TestRender:
    def test_jpeg_dimensions(self):
        image = _open(CardRenderer().render("Simplicity is prerequisite for reliability."))
        assert image.format == "JPEG"
        assert image.size == (1200, 628)

    def test_png(self):
        image = _open(CardRenderer(image_format="png").render("Short"))
        assert image.format == "PNG"
        assert image.size == (1200, 628)

    def test_deterministic(self):
        renderer = CardRenderer(image_format="png")
        assert renderer.render("Same text") == renderer.render("Same text")

    def test_very_long_text_still_renders(self):
        renderer = CardRenderer()
        text = "words " * 1500
        fit = renderer.layout(text)
        assert fit.overflow
        assert fit.size == DEFAULT_GEOMETRY.min_size
        assert _open(renderer.render(text)).size == (1200, 628)

    def test_short_text_uses_max_size(self):
        renderer = CardRenderer()
        assert renderer.layout("Hi").size == DEFAULT_GEOMETRY.max_size

    def test_empty_text(self):
        assert _open(CardRenderer().render("")).size == (1200, 628)

    def test_bitmap_face_falls_back_to_approximate_measure(self):
        bitmap = ImageFont.load_default_imagefont()
        with patch.object(FontSource, "load_face", return_value=bitmap):
            renderer = CardRenderer()
            assert isinstance(renderer.measure, ApproximateMeasure)
            assert _open(renderer.render("Bitmap face")).size == (1200, 628)

    def test_encoder_failure_is_render_error(self):
        with patch("quotecards.render.card_renderer.Image.new", side_effect=OSError("boom")):
            with pytest.raises(RenderError, match="boom"):
                CardRenderer().render("x")
