"""Raster codec: decode, encode, and normalize captures onto a fixed canvas."""

from __future__ import annotations

import io
import logging
from typing import Protocol

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Fully transparent white, used for the letterbox area around contained content.
PAD_COLOR = (255, 255, 255, 0)


class DecodeError(Exception):
    """Raised when bytes cannot be read as a raster image."""


class RasterCodec(Protocol):
    def decode(self, data: bytes) -> Image.Image: ...

    def encode(self, image: Image.Image) -> bytes: ...

    def normalize(self, data: bytes, width: int, height: int) -> bytes: ...


class PillowCodec:
    """PNG codec backed by Pillow. All decoded rasters are RGBA."""

    def decode(self, data: bytes) -> Image.Image:
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                return img.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DecodeError(f"Not a readable image ({len(data)} bytes): {e}") from e

    def encode(self, image: Image.Image) -> bytes:
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        return buf.getvalue()

    def fit(self, image: Image.Image, width: int, height: int) -> Image.Image:
        """Scale to fit inside width x height keeping aspect ratio, then center-pad."""
        if image.size == (width, height):
            return image
        return ImageOps.pad(
            image, (width, height),
            method=Image.Resampling.BICUBIC,
            color=PAD_COLOR,
            centering=(0.5, 0.5),
        )

    def normalize(self, data: bytes, width: int, height: int) -> bytes:
        image = self.decode(data)
        logger.debug("Normalizing %dx%d raster to %dx%d", image.width, image.height, width, height)
        return self.encode(self.fit(image, width, height))
