# src/render/text_fit.py — v1
"""Adaptive text fitting: pick the largest font size whose wrap fits the card.

Pure layout code with no Pillow imports. Width measurement is delegated to a
TextMeasure so the same search runs against real glyph advances
(render.card_renderer.GlyphMeasure) or against ApproximateMeasure, the
lower-fidelity character-class model used when a face carries no scalable
metrics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

OPEN_QUOTE = "“"
CLOSE_QUOTE = "”"

# ApproximateMeasure ratios, as fractions of the font size
SPACE_WIDTH_RATIO = 0.35
CHAR_WIDTH_RATIO = 0.6
WIDE_CHAR_BONUS_RATIO = 0.08
NARROW_CHAR_PENALTY_RATIO = 0.04
MIN_WORD_WIDTH_RATIO = 0.4
WIDE_CHARS = frozenset("MW@#&$%")
NARROW_CHARS = frozenset("il1'")


@dataclass(frozen=True)
class CardGeometry:
    """Canvas size, padding and the font size search range."""

    width: int = 1200
    height: int = 628
    padding_x: int = 150
    padding_y: int = 120
    max_size: float = 72.0
    min_size: float = 36.0
    step: float = 2.0
    line_height: float = 1.32

    def __post_init__(self) -> None:
        if self.step <= 0:
            raise ValueError("step must be positive")
        if self.min_size <= 0 or self.min_size > self.max_size:
            raise ValueError("min_size must be positive and <= max_size")
        if self.available_width <= 0 or self.available_height <= 0:
            raise ValueError("padding leaves no room for text")

    @property
    def available_width(self) -> float:
        return float(self.width - 2 * self.padding_x)

    @property
    def available_height(self) -> float:
        return float(self.height - 2 * self.padding_y)

    def candidate_sizes(self) -> list[float]:
        """Font sizes from max_size down to min_size, largest first."""
        sizes: list[float] = []
        size = self.max_size
        # Small epsilon keeps min_size when step does not divide evenly
        while size >= self.min_size - 1e-9:
            sizes.append(size)
            size -= self.step
        return sizes


DEFAULT_GEOMETRY = CardGeometry()


class TextMeasure(Protocol):
    """Width of a single line of text at a font size, in pixels."""

    def line_width(self, text: str, size: float) -> float: ...


class ApproximateMeasure:
    """Character-class width estimate for when true glyph metrics are unavailable.

    Lower fidelity: proportional fonts can differ from the estimate by 10-20%,
    so text may wrap one line earlier or later than it renders.
    """

    def line_width(self, text: str, size: float) -> float:
        words = [word for word in text.split(" ") if word]
        if not words:
            return 0.0
        spaces = (len(words) - 1) * SPACE_WIDTH_RATIO * size
        return spaces + sum(self.word_width(word, size) for word in words)

    @staticmethod
    def word_width(word: str, size: float) -> float:
        if not word:
            return 0.0
        wide = sum(1 for ch in word if ch in WIDE_CHARS)
        narrow = sum(1 for ch in word if ch in NARROW_CHARS)
        estimate = (
            len(word) * CHAR_WIDTH_RATIO
            + wide * WIDE_CHAR_BONUS_RATIO
            - narrow * NARROW_CHAR_PENALTY_RATIO
        )
        return max(MIN_WORD_WIDTH_RATIO, estimate) * size


@dataclass(frozen=True)
class FitResult:
    """Chosen font size and the wrapped lines at that size."""

    size: float
    lines: tuple[str, ...] = field(default_factory=tuple)
    overflow: bool = False
    line_height: float = DEFAULT_GEOMETRY.line_height

    @property
    def line_height_px(self) -> float:
        return self.size * self.line_height

    @property
    def total_height(self) -> float:
        return len(self.lines) * self.line_height_px


def display_text(text: str) -> str:
    """Collapse whitespace runs and wrap in typographic quotation marks."""
    return f"{OPEN_QUOTE}{' '.join((text or '').split())}{CLOSE_QUOTE}"


def wrap_words(text: str, size: float, max_width: float, measure: TextMeasure) -> list[str]:
    """Greedy word wrap that only breaks on whitespace.

    A single word wider than max_width is kept whole on its own line.
    """
    words = text.split()
    if not words:
        return [""]

    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if measure.line_width(candidate, size) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def fit_text(
    text: str,
    measure: TextMeasure,
    geometry: CardGeometry = DEFAULT_GEOMETRY,
) -> FitResult:
    """Find the largest candidate size whose wrapped height fits the card.

    Falls back to geometry.min_size with overflow=True when nothing fits;
    never raises for long input.
    """
    display = display_text(text)
    for size in geometry.candidate_sizes():
        lines = wrap_words(display, size, geometry.available_width, measure)
        height = len(lines) * size * geometry.line_height
        if height <= geometry.available_height:
            return FitResult(
                size=size, lines=tuple(lines), line_height=geometry.line_height
            )

    lines = wrap_words(display, geometry.min_size, geometry.available_width, measure)
    return FitResult(
        size=geometry.min_size,
        lines=tuple(lines),
        overflow=True,
        line_height=geometry.line_height,
    )
