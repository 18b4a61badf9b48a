"""
Raster image primitives shared by the background removers and the compositor.

Everything downstream of decoding works on RGBA ``uint8`` arrays so the
removal heuristics can stay vectorized and the compositor can hand the same
pixels to Pillow without re-decoding.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import ImageDecodeError


@dataclass(frozen=True)
class ImagePayload:
    """Fetched image bytes plus what the upstream declared about them."""

    data: bytes
    mime_type: str = "application/octet-stream"
    filename: str = "image"


@dataclass
class RasterImage:
    pixels: np.ndarray  # (height, width, 4) uint8, RGBA

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(f"RasterImage expects an (H, W, 4) buffer, got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            self.pixels = self.pixels.astype(np.uint8)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[..., :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[..., 3]

    def copy(self) -> "RasterImage":
        return RasterImage(self.pixels.copy())

    @classmethod
    def from_pil(cls, image: Image.Image) -> "RasterImage":
        return cls(np.array(image.convert("RGBA"), dtype=np.uint8))

    @classmethod
    def from_bytes(cls, data: bytes, source: Optional[str] = None) -> "RasterImage":
        """
        Decode any Pillow-readable format and coerce it to RGBA.

        Raises:
            ImageDecodeError: when the bytes are not a supported raster image.
        """
        try:
            with Image.open(BytesIO(data)) as image:
                image.load()
                return cls.from_pil(image)
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            label = source or "image"
            raise ImageDecodeError(f"Could not decode {label}: {exc}") from exc

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def to_png_bytes(self) -> bytes:
        buf = BytesIO()
        self.to_pil().save(buf, format="PNG")
        return buf.getvalue()


def solid_image(width: int, height: int, color: tuple) -> RasterImage:
    """Build a uniformly filled image; RGB colours get full opacity."""
    if len(color) == 3:
        color = (*color, 255)
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[...] = np.asarray(color, dtype=np.uint8)
    return RasterImage(pixels)
