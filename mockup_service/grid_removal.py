"""
Grid / halftone removal for scanned textures.

Scans of printed paper often carry a fine light-gray grid. These strategies
find low-saturation, high-brightness candidate pixels and either remove the
small components they form (`GridComponentRemover`) or drop whole blocks
that consist almost entirely of such pixels (`GridBlockRemover`).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from .imaging import RasterImage
from .removal import BackgroundRemover, apply_mask

logger = logging.getLogger(__name__)

# 3x3 neighbourhood offsets, centre excluded
_NEIGHBOUR_OFFSETS = [(dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)]


def grid_candidates(image: RasterImage, max_saturation: int = 24, min_brightness: float = 170.0) -> np.ndarray:
    """Opaque pixels that are both nearly gray and light."""
    rgb = image.rgb.astype(np.int16)
    saturation = rgb.max(axis=2) - rgb.min(axis=2)
    brightness = rgb.mean(axis=2)
    return (saturation <= max_saturation) & (brightness >= min_brightness) & (image.alpha > 0)


def small_components(candidates: np.ndarray, max_extent: int = 6) -> np.ndarray:
    """Keep only 8-connected candidate components whose bounding box fits in max_extent x max_extent."""
    num_labels, labels, stats, _ = cv2.connectedComponentsWithStats(
        candidates.astype(np.uint8), connectivity=8
    )
    if num_labels <= 1:
        return np.zeros_like(candidates, dtype=bool)

    widths = stats[:, cv2.CC_STAT_WIDTH]
    heights = stats[:, cv2.CC_STAT_HEIGHT]
    keep = (widths <= max_extent) & (heights <= max_extent)
    keep[0] = False  # label 0 is the non-candidate background
    logger.debug(
        "grid: %d candidate components, %d within %dpx", num_labels - 1, int(keep.sum()), max_extent
    )
    return keep[labels]


def inpaint_median(image: RasterImage, mask: np.ndarray) -> RasterImage:
    """
    Replace masked pixels with the per-channel median of their 3x3 neighbourhood.

    Masked neighbours and out-of-bounds positions are excluded. Pixels with
    no usable neighbour keep their colour.
    """
    out = image.copy()
    ys, xs = np.nonzero(mask)
    if ys.size == 0:
        return out

    padded_rgb = np.pad(image.rgb.astype(np.float32), ((1, 1), (1, 1), (0, 0)), mode="edge")
    padded_mask = np.pad(mask, 1, mode="constant", constant_values=True)

    neighbours = np.full((ys.size, len(_NEIGHBOUR_OFFSETS), 3), np.nan, dtype=np.float32)
    for i, (dy, dx) in enumerate(_NEIGHBOUR_OFFSETS):
        ny, nx = ys + 1 + dy, xs + 1 + dx
        usable = ~padded_mask[ny, nx]
        neighbours[usable, i] = padded_rgb[ny[usable], nx[usable]]

    has_any = ~np.all(np.isnan(neighbours[..., 0]), axis=1)
    if np.any(has_any):
        medians = np.nanmedian(neighbours[has_any], axis=1)
        out.pixels[ys[has_any], xs[has_any], :3] = np.clip(np.round(medians), 0, 255).astype(np.uint8)
    return out


class GridComponentRemover(BackgroundRemover):
    name = "grid-component"

    def __init__(
        self,
        mode: str = "transparent",
        max_saturation: int = 24,
        min_brightness: float = 170.0,
        max_extent: int = 6,
        debug_dir: Optional[Path] = None,
    ):
        super().__init__(debug_dir=debug_dir)
        if mode not in {"transparent", "inpaint"}:
            raise ValueError("mode must be one of transparent | inpaint")
        self.mode = mode
        self.max_saturation = max_saturation
        self.min_brightness = min_brightness
        self.max_extent = max_extent

    def remove(self, image: RasterImage) -> RasterImage:
        self._check_input(image)
        candidates = grid_candidates(image, self.max_saturation, self.min_brightness)
        mask = small_components(candidates, self.max_extent)
        self._dump_mask(mask, "mask")
        if self.mode == "inpaint":
            return inpaint_median(image, mask)
        return apply_mask(image, mask)


class GridBlockRemover(BackgroundRemover):
    name = "grid-block"

    def __init__(
        self,
        block_size: int = 8,
        min_fill: float = 0.9,
        max_saturation: int = 24,
        min_brightness: float = 170.0,
        debug_dir: Optional[Path] = None,
    ):
        super().__init__(debug_dir=debug_dir)
        self.block_size = block_size
        self.min_fill = min_fill
        self.max_saturation = max_saturation
        self.min_brightness = min_brightness

    def block_mask(self, image: RasterImage) -> np.ndarray:
        """Pixel mask of every block whose candidate fraction reaches `min_fill`."""
        candidates = grid_candidates(image, self.max_saturation, self.min_brightness)
        h, w = candidates.shape
        bs = self.block_size
        rows, cols = -(-h // bs), -(-w // bs)

        # Padding counts as non-candidate so partial edge blocks are judged on real pixels only.
        padded = np.zeros((rows * bs, cols * bs), dtype=np.float32)
        padded[:h, :w] = candidates
        valid = np.zeros_like(padded)
        valid[:h, :w] = 1.0

        hits = padded.reshape(rows, bs, cols, bs).sum(axis=(1, 3))
        sizes = valid.reshape(rows, bs, cols, bs).sum(axis=(1, 3))
        blocks = hits / sizes >= self.min_fill
        logger.debug("grid-block: %d/%d blocks cleared", int(blocks.sum()), blocks.size)

        return np.repeat(np.repeat(blocks, bs, axis=0), bs, axis=1)[:h, :w]

    def remove(self, image: RasterImage) -> RasterImage:
        self._check_input(image)
        mask = self.block_mask(image)
        self._dump_mask(mask, "mask")
        return apply_mask(image, mask)
