"""
High-level preview pipeline.

`PreviewRenderer.render` is the main entry point used by the HTTP API; the
strategy factory is shared with the local test script. It keeps
orchestration simple:
cache -> fetch artwork -> remove background -> fetch mockup (+ overlay)
-> composite -> PNG bytes -> cache.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from . import config
from .cache import PreviewCache
from .compositor import render_png
from .errors import PreviewError
from .fetch import download_image
from .flood_fill import FloodFillRemover
from .grid_removal import GridBlockRemover, GridComponentRemover
from .imaging import ImagePayload, RasterImage
from .mockups import MockupSpec, build_mockup_specs, resolve_mockup
from .removal import BackgroundRemover

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], ImagePayload]


def build_remover(settings: Optional[config.Settings] = None) -> BackgroundRemover:
    """Instantiate the background-removal strategy selected by BG_REMOVAL_STRATEGY."""
    settings = settings or config.get_settings()
    debug_dir = settings.debug_output_dir if settings.debug else None
    strategy = settings.bg_removal_strategy

    if strategy == "grid-component":
        return GridComponentRemover(
            mode=settings.grid_mode,
            max_saturation=settings.grid_max_saturation,
            min_brightness=settings.grid_min_brightness,
            max_extent=settings.grid_max_extent,
            debug_dir=debug_dir,
        )
    if strategy == "grid-block":
        return GridBlockRemover(
            block_size=settings.grid_block_size,
            min_fill=settings.grid_block_fill,
            max_saturation=settings.grid_max_saturation,
            min_brightness=settings.grid_min_brightness,
            debug_dir=debug_dir,
        )
    return FloodFillRemover(
        cluster_distance=settings.bg_cluster_distance,
        max_clusters=settings.bg_max_clusters,
        start_tolerance=settings.bg_start_tolerance,
        grow_tolerance=settings.bg_grow_tolerance,
        sample_divisions=settings.bg_sample_divisions,
        min_brightness=settings.bg_min_brightness if settings.bg_brightness_filter else None,
        debug_dir=debug_dir,
    )


class PreviewRenderer:
    def __init__(
        self,
        remover: BackgroundRemover,
        cache: PreviewCache,
        mockups: Optional[Dict[str, MockupSpec]] = None,
        fetch: Fetcher = download_image,
    ):
        self.remover = remover
        self.cache = cache
        self.mockups = mockups if mockups is not None else build_mockup_specs()
        self.fetch = fetch

    def _load(self, url: str, stage: str) -> RasterImage:
        try:
            payload = self.fetch(url)
            image = RasterImage.from_bytes(payload.data, source=f"{stage} ({payload.filename})")
        except PreviewError as exc:
            exc.stage = exc.stage or stage
            raise
        logger.debug("%s: decoded %s %dx%d", stage, payload.mime_type, image.width, image.height)
        return image

    def _remove_background(self, artwork: RasterImage, artwork_url: str) -> RasterImage:
        """Run the configured remover, falling back to the RGBA original on any failure."""
        try:
            return self.remover.remove(artwork)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Background removal (%s) failed for %s, using original: %s",
                self.remover.name,
                artwork_url,
                exc,
            )
            return artwork

    def cutout(self, artwork_url: str) -> bytes:
        """Background-removed artwork only, as PNG bytes."""
        artwork = self._load(artwork_url, "artwork")
        return self._remove_background(artwork, artwork_url).to_png_bytes()

    def render(self, product: str, artwork_url: str) -> bytes:
        """
        Full pipeline from artwork URL to preview PNG bytes.

        Raises:
            PreviewError: on unknown products, fetch, decode or mockup failures.
                Nothing is cached in that case.
        """
        spec = resolve_mockup(self.mockups, product)
        key = (product, artwork_url)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Cache hit product=%s url=%s", product, artwork_url)
            return cached

        artwork = self._load(artwork_url, "artwork")
        artwork = self._remove_background(artwork, artwork_url)

        mockup = self._load(spec.mockup_url, "mockup")
        overlay = self._load(spec.overlay_url, "overlay") if spec.overlay_url else None

        png_bytes = render_png(artwork, mockup, spec.scale, spec.offset_x, spec.offset_y, overlay)
        self.cache.put(key, png_bytes)
        logger.info(
            "Rendered product=%s url=%s bytes=%d cache_size=%d",
            product,
            artwork_url,
            len(png_bytes),
            len(self.cache),
        )
        return png_bytes
