"""
Border-seeded flood-fill background removal.

Dominant border colours are estimated by clustering samples taken along the
four edges; background is whatever is connected to the border through pixels
close to one of those colours. Light regions inside the design (white text,
icons) survive because they are not reachable from the border.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from .imaging import RasterImage
from .removal import BackgroundRemover, apply_mask

logger = logging.getLogger(__name__)


@dataclass
class ColorCluster:
    color: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    count: int = 0

    def add(self, rgb: np.ndarray) -> None:
        """Fold one sample into the running mean."""
        self.count += 1
        self.color = self.color + (rgb - self.color) / self.count

    @property
    def brightness(self) -> float:
        return float(self.color.mean())


def sample_border(image: RasterImage, divisions: int = 50) -> np.ndarray:
    """
    Sample RGB colours along all four edges at a fixed stride.

    Fully transparent samples are skipped. Returns an (N, 3) float array.
    """
    h, w = image.height, image.width
    step_x = max(1, w // divisions)
    step_y = max(1, h // divisions)
    xs = np.arange(0, w, step_x)
    ys = np.arange(0, h, step_y)

    px = image.pixels
    samples = np.concatenate(
        [
            px[0, xs],
            px[h - 1, xs],
            px[ys, 0],
            px[ys, w - 1],
        ],
        axis=0,
    )
    samples = samples[samples[:, 3] > 0]
    return samples[:, :3].astype(np.float64)


def cluster_colors(samples: np.ndarray, max_distance: float = 25.0) -> List[ColorCluster]:
    """Greedy single-pass clustering: join the nearest cluster within `max_distance`, else start one."""
    clusters: List[ColorCluster] = []
    for rgb in samples:
        best = None
        best_dist = max_distance
        for cluster in clusters:
            dist = float(np.linalg.norm(rgb - cluster.color))
            if dist < best_dist:
                best, best_dist = cluster, dist
        if best is None:
            best = ColorCluster()
            clusters.append(best)
        best.add(rgb)
    return clusters


def select_background_colors(
    clusters: List[ColorCluster],
    max_clusters: int = 3,
    min_brightness: Optional[float] = None,
) -> np.ndarray:
    """
    Pick the most frequent border colours as background candidates.

    With `min_brightness` set, only clusters at least that bright (mean of
    R, G, B) qualify, so dark or saturated frames are never treated as
    background. Returns a (K, 3) array, possibly empty.
    """
    ranked = sorted(clusters, key=lambda c: c.count, reverse=True)[:max_clusters]
    if min_brightness is not None:
        ranked = [c for c in ranked if c.brightness >= min_brightness]
    if not ranked:
        return np.empty((0, 3), dtype=np.float64)
    return np.stack([c.color for c in ranked])


def _near_any_color(rgb: np.ndarray, colors: np.ndarray, tolerance: float) -> np.ndarray:
    rgb_f = rgb.astype(np.float32)
    limit = np.float32(tolerance) ** 2
    near = np.zeros(rgb.shape[:2], dtype=bool)
    for color in colors.astype(np.float32):
        dist_sq = np.sum((rgb_f - color) ** 2, axis=2)
        near |= dist_sq <= limit
    return near


def _border_mask(height: int, width: int) -> np.ndarray:
    border = np.zeros((height, width), dtype=bool)
    border[0, :] = True
    border[-1, :] = True
    border[:, 0] = True
    border[:, -1] = True
    return border


def flood_fill_mask(
    image: RasterImage,
    colors: np.ndarray,
    start_tolerance: float = 26.0,
    grow_tolerance: float = 30.0,
) -> np.ndarray:
    """
    Mark pixels reachable from border seeds through background-like pixels.

    Seeds are border pixels within `start_tolerance` of a background colour or
    already fully transparent. The region grows with 4-connectivity through
    pixels within the looser `grow_tolerance`. Equivalent to a BFS from every
    seed, done as one connected-components pass.
    """
    transparent = image.alpha == 0
    growable = _near_any_color(image.rgb, colors, grow_tolerance) | transparent
    seeds = (_near_any_color(image.rgb, colors, start_tolerance) | transparent) & _border_mask(
        image.height, image.width
    )
    if not np.any(seeds):
        return np.zeros((image.height, image.width), dtype=bool)

    _, labels = cv2.connectedComponents(growable.astype(np.uint8), connectivity=4)
    seed_labels = np.unique(labels[seeds])
    return np.isin(labels, seed_labels[seed_labels > 0])


class FloodFillRemover(BackgroundRemover):
    name = "flood-fill"

    def __init__(
        self,
        cluster_distance: float = 25.0,
        max_clusters: int = 3,
        start_tolerance: float = 26.0,
        grow_tolerance: float = 30.0,
        sample_divisions: int = 50,
        min_brightness: Optional[float] = 180.0,
        debug_dir: Optional[Path] = None,
    ):
        super().__init__(debug_dir=debug_dir)
        self.cluster_distance = cluster_distance
        self.max_clusters = max_clusters
        self.start_tolerance = start_tolerance
        self.grow_tolerance = grow_tolerance
        self.sample_divisions = sample_divisions
        self.min_brightness = min_brightness

    def background_mask(self, image: RasterImage) -> Optional[np.ndarray]:
        """Return the background mask, or None when no clear background exists."""
        self._check_input(image)
        if image.width < 2 or image.height < 2:
            logger.debug("flood-fill: degenerate %dx%d image, skipping", image.width, image.height)
            return None

        samples = sample_border(image, self.sample_divisions)
        if samples.size == 0:
            logger.debug("flood-fill: no opaque border samples")
            return None

        clusters = cluster_colors(samples, self.cluster_distance)
        colors = select_background_colors(clusters, self.max_clusters, self.min_brightness)
        logger.debug(
            "flood-fill: samples=%d clusters=%d background_colors=%s",
            len(samples),
            len(clusters),
            np.round(colors).astype(int).tolist(),
        )
        if len(colors) == 0:
            return None

        return flood_fill_mask(image, colors, self.start_tolerance, self.grow_tolerance)

    def remove(self, image: RasterImage) -> RasterImage:
        mask = self.background_mask(image)
        if mask is None:
            return image.copy()
        logger.debug("flood-fill: cleared %.2f%% of pixels", float(mask.mean()) * 100.0)
        self._dump_mask(mask, "mask")
        return apply_mask(image, mask)
