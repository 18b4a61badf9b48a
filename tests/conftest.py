"""Pytest fixtures for mockup preview tests."""

from __future__ import annotations

from collections import Counter
from typing import Dict

import numpy as np
import pytest

from mockup_service.errors import UpstreamFetchError
from mockup_service.imaging import ImagePayload, RasterImage, solid_image

WHITE = (255, 255, 255, 255)
BLUE = (0, 0, 255, 255)
GRAY = (128, 128, 128, 255)

ARTWORK_URL = "https://cdn.example.com/art/design.png"
MOCKUP_URL = "https://cdn.example.com/mockups/tote.jpg"
OVERLAY_URL = "https://cdn.example.com/mockups/fold.png"


class FakeFetcher:
    """In-memory stand-in for `download_image` that counts calls per URL."""

    def __init__(self, responses: Dict[str, bytes]):
        self.responses = dict(responses)
        self.calls: Counter = Counter()

    def __call__(self, url: str) -> ImagePayload:
        self.calls[url] += 1
        if url not in self.responses:
            raise UpstreamFetchError(url, status=404)
        return ImagePayload(data=self.responses[url], mime_type="image/png", filename=url.rsplit("/", 1)[-1])


def framed_image(size: int = 500, frame: int = 20, frame_color=WHITE, center_color=BLUE) -> RasterImage:
    """Square image with a uniform frame around a solid centre."""
    image = solid_image(size, size, frame_color)
    image.pixels[frame : size - frame, frame : size - frame] = center_color
    return image


@pytest.fixture
def framed_artwork() -> RasterImage:
    """500x500 white 20px frame around a solid blue 460x460 square."""
    return framed_image()


@pytest.fixture
def gray_mockup() -> RasterImage:
    """1000x1000 solid gray mockup."""
    return solid_image(1000, 1000, GRAY)


@pytest.fixture
def dark_noise() -> RasterImage:
    """Opaque random noise with every channel below 128."""
    rng = np.random.default_rng(1234)
    pixels = np.empty((64, 80, 4), dtype=np.uint8)
    pixels[..., :3] = rng.integers(0, 128, size=(64, 80, 3), dtype=np.uint8)
    pixels[..., 3] = 255
    return RasterImage(pixels)


@pytest.fixture
def fake_fetcher(framed_artwork: RasterImage, gray_mockup: RasterImage) -> FakeFetcher:
    return FakeFetcher(
        {
            ARTWORK_URL: framed_artwork.to_png_bytes(),
            MOCKUP_URL: gray_mockup.to_png_bytes(),
        }
    )
