"""Common contract for the interchangeable background-removal strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from .errors import BackgroundRemovalError
from .imaging import RasterImage

logger = logging.getLogger(__name__)


class BackgroundRemover(ABC):
    """Turns background pixels transparent; output keeps the input dimensions."""

    name = "base"

    def __init__(self, debug_dir: Optional[Path] = None):
        self.debug_dir = debug_dir

    @abstractmethod
    def remove(self, image: RasterImage) -> RasterImage:
        """Return a copy of `image` with background alpha set to 0."""

    def _check_input(self, image: RasterImage) -> None:
        if image is None or image.width <= 0 or image.height <= 0:
            raise BackgroundRemovalError("image dimensions could not be determined")

    def _dump_mask(self, mask: np.ndarray, label: str) -> None:
        if self.debug_dir is not None:
            dump_debug_mask(mask, self.debug_dir, f"{self.name}_{label}.png")


def apply_mask(image: RasterImage, mask: np.ndarray) -> RasterImage:
    """Zero the alpha of masked pixels; colour channels are left untouched."""
    if mask.shape != (image.height, image.width):
        raise ValueError(f"mask shape {mask.shape} does not match image {image.height}x{image.width}")
    out = image.copy()
    out.pixels[..., 3][mask] = 0
    return out


def dump_debug_mask(mask: np.ndarray, debug_dir: Path, filename: str) -> None:
    """Optionally write a mask visualization when DEBUG is enabled."""
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
        path = debug_dir / filename
        cv2.imwrite(str(path), mask.astype(np.uint8) * 255)
        logger.debug("removal: wrote debug mask to %s", path)
    except Exception as exc:  # noqa: BLE001
        logger.warning("removal: failed to write debug mask: %s", exc)
