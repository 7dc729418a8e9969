"""Diff engine: perceptual pixel comparison with side-attributed diff masks.

pixelmatch does the per-pixel work (YIQ color distance with anti-aliasing
detection) and paints every counted mismatch in its marker color. The marker
pixels are then recolored by which environment holds the darker, i.e.
foreground, pixel: staging-side differences in orange and production-side
differences in blue, so a reviewer can tell which side added content.

The side is picked by darkness on purpose: pixelmatch's own alternate color
fires where the first image is lighter, which would tint staging for
content that only production has. Dark-on-light pages put their content in
the darker pixel, so that pixel names the side the content belongs to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from PIL import Image, ImageChops
from pixelmatch.contrib.PIL import pixelmatch

logger = logging.getLogger(__name__)

# Perceptual tolerance on pixelmatch's 0-1 scale.
DIFF_THRESHOLD = 0.1

STAGING_TINT = (255, 165, 0, 255)
PROD_TINT = (0, 0, 255, 255)

# pixelmatch's default color for counted (non anti-aliased) mismatches.
_MARKER = (255, 0, 0)


@dataclass(frozen=True)
class DiffOutcome:
    mask: Image.Image
    similarity: float
    mismatched_pixels: int
    total_pixels: int


class RasterDiffer(Protocol):
    def diff(self, image_a: Image.Image, image_b: Image.Image) -> DiffOutcome: ...


def _channel_equals(band: Image.Image, value: int) -> Image.Image:
    return band.point(lambda v: 255 if v == value else 0)


def _marker_mask(raw: Image.Image) -> Image.Image:
    """L-mode mask, 255 where pixelmatch painted a counted mismatch."""
    r, g, b, _ = raw.split()
    hit = ImageChops.multiply(_channel_equals(r, _MARKER[0]), _channel_equals(g, _MARKER[1]))
    return ImageChops.multiply(hit, _channel_equals(b, _MARKER[2]))


def _darker_mask(image_a: Image.Image, image_b: Image.Image) -> Image.Image:
    """L-mode mask, 255 where image_a's luminance is below image_b's."""
    darker_by = ImageChops.subtract(image_b.convert("L"), image_a.convert("L"))
    return darker_by.point(lambda v: 255 if v > 0 else 0)


class PixelmatchDiffer:
    """Compares staging (A) against production (B) rasters of equal size."""

    def __init__(self, threshold: float = DIFF_THRESHOLD,
                 a_tint: tuple[int, int, int, int] = STAGING_TINT,
                 b_tint: tuple[int, int, int, int] = PROD_TINT):
        self.threshold = threshold
        self.a_tint = a_tint
        self.b_tint = b_tint

    def diff(self, image_a: Image.Image, image_b: Image.Image) -> DiffOutcome:
        if image_a.size != image_b.size:
            raise ValueError(f"Cannot diff rasters of different sizes: {image_a.size} vs {image_b.size}")

        image_a = image_a.convert("RGBA")
        image_b = image_b.convert("RGBA")
        width, height = image_a.size
        total = width * height
        if total == 0:
            return DiffOutcome(mask=Image.new("RGBA", (width, height)), similarity=100.0,
                               mismatched_pixels=0, total_pixels=0)

        raw = Image.new("RGBA", (width, height))
        mismatched = pixelmatch(image_a, image_b, raw, threshold=self.threshold)

        mask = raw.copy()
        if mismatched:
            hits = _marker_mask(raw)
            a_side = ImageChops.multiply(hits, _darker_mask(image_a, image_b))
            mask.paste(self.b_tint, None, hits)
            mask.paste(self.a_tint, None, a_side)

        similarity = (total - mismatched) / total * 100
        similarity = min(100.0, max(0.0, similarity))
        logger.debug("Diff: %d/%d pixels mismatched (%.2f%% similar)", mismatched, total, similarity)
        return DiffOutcome(mask=mask, similarity=similarity,
                           mismatched_pixels=mismatched, total_pixels=total)
