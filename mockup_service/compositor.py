"""
Places cut-out artwork onto a product mockup.

`composite_preview` is the main entry point used by the preview pipeline:
scale artwork to a fraction of the mockup width -> alpha-composite at
fractional offsets -> optional overlay layer -> RGBA result.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from PIL import Image

from .errors import MockupMetadataError
from .imaging import RasterImage

logger = logging.getLogger(__name__)


def _compute_artwork_dims(art_w: int, art_h: int, target_w: int) -> Tuple[int, int]:
    """Fit inside `target_w`, preserving aspect ratio; height is derived."""
    target_w = max(1, target_w)
    new_h = max(1, int(round(art_h * target_w / art_w)))
    return target_w, new_h


def scale_artwork(artwork: RasterImage, mockup_width: int, scale: float) -> RasterImage:
    """Resize artwork so its width equals round(mockup_width * scale)."""
    if not 0 < scale <= 1:
        raise ValueError(f"scale must be in (0, 1], got {scale}")
    new_w, new_h = _compute_artwork_dims(artwork.width, artwork.height, int(round(mockup_width * scale)))
    if (new_w, new_h) == (artwork.width, artwork.height):
        return artwork.copy()
    resized = artwork.to_pil().resize((new_w, new_h), Image.LANCZOS)
    return RasterImage.from_pil(resized)


def placement_offset(mockup_width: int, mockup_height: int, offset_x: float, offset_y: float) -> Tuple[int, int]:
    """Top-left corner for the artwork; deliberately unclamped."""
    return int(round(mockup_width * offset_x)), int(round(mockup_height * offset_y))


def _paste_over(canvas: Image.Image, layer: Image.Image, left: int, top: int) -> None:
    """Alpha-composite `layer` onto `canvas` in place, clipping anything off-canvas."""
    x0, y0 = max(left, 0), max(top, 0)
    x1 = min(left + layer.width, canvas.width)
    y1 = min(top + layer.height, canvas.height)
    if x0 >= x1 or y0 >= y1:
        logger.debug("compositor: layer at (%d, %d) lies fully outside the canvas", left, top)
        return
    visible = layer.crop((x0 - left, y0 - top, x1 - left, y1 - top))
    canvas.alpha_composite(visible, dest=(x0, y0))


def composite_preview(
    artwork: RasterImage,
    mockup: RasterImage,
    scale: float,
    offset_x: float,
    offset_y: float,
    overlay: Optional[RasterImage] = None,
) -> RasterImage:
    """
    Composite cut-out artwork onto the mockup.

    Raises:
        MockupMetadataError: when the mockup has no usable dimensions.
    """
    mockup_w, mockup_h = mockup.width, mockup.height
    if not mockup_w or not mockup_h:
        raise MockupMetadataError(stage="composite")

    design = scale_artwork(artwork, mockup_w, scale)
    left, top = placement_offset(mockup_w, mockup_h, offset_x, offset_y)
    logger.debug(
        "compositor: mockup=%dx%d artwork=%dx%d at (%d, %d) overlay=%s",
        mockup_w,
        mockup_h,
        design.width,
        design.height,
        left,
        top,
        overlay is not None,
    )

    canvas = mockup.to_pil()
    _paste_over(canvas, design.to_pil(), left, top)
    if overlay is not None:
        _paste_over(canvas, overlay.to_pil(), 0, 0)
    return RasterImage.from_pil(canvas)


def render_png(
    artwork: RasterImage,
    mockup: RasterImage,
    scale: float,
    offset_x: float,
    offset_y: float,
    overlay: Optional[RasterImage] = None,
) -> bytes:
    """Composite and encode as PNG bytes."""
    return composite_preview(artwork, mockup, scale, offset_x, offset_y, overlay).to_png_bytes()
