# src/core/errors.py — v1
"""Exception hierarchy shared across modules.

Everything raised on purpose by quotecards derives from QuoteCardsError so the
CLI can tell a reported failure from a programming error.
"""

from __future__ import annotations


class QuoteCardsError(Exception):
    """Base class for all quotecards errors."""


class ContentValidationError(QuoteCardsError):
    """Raised when content records fail validation and a build cannot start."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(
            f"{len(self.errors)} content validation error(s); aborting build"
        )


class ManifestError(QuoteCardsError):
    """Raised when the build manifest cannot be decoded or written."""


class AssetError(QuoteCardsError):
    """Raised when a font or template asset cannot be read."""


class RenderError(QuoteCardsError):
    """Raised when a card image cannot be rasterized or encoded."""
