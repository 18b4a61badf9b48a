"""
Static per-product mockup placement.

Scale and offsets are fractions of the mockup's own size so the same numbers
keep working if a mockup photo is swapped for a different resolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from . import config
from .errors import MockupNotConfiguredError, UnknownProductError


@dataclass(frozen=True)
class MockupSpec:
    product: str
    mockup_url: Optional[str]
    scale: float  # artwork width as a fraction of mockup width
    offset_x: float
    offset_y: float
    overlay_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0 < self.scale <= 1:
            raise ValueError(f"{self.product}: scale must be in (0, 1], got {self.scale}")


def build_mockup_specs(settings: Optional[config.Settings] = None) -> Dict[str, MockupSpec]:
    """Product table with URLs resolved from settings."""
    settings = settings or config.get_settings()
    specs = [
        # Slightly left of centre and lowered onto the bag body.
        MockupSpec("tote", settings.tote_mockup_url, scale=0.45, offset_x=0.26, offset_y=0.36),
        MockupSpec("mug", settings.mug_mockup_url, scale=0.35, offset_x=0.28, offset_y=0.32),
        MockupSpec(
            "tee-white",
            settings.tee_white_mockup_url,
            scale=0.38,
            offset_x=0.31,
            offset_y=0.26,
            overlay_url=settings.tee_white_overlay_url,
        ),
        MockupSpec(
            "tee-black",
            settings.tee_black_mockup_url,
            scale=0.38,
            offset_x=0.31,
            offset_y=0.26,
            overlay_url=settings.tee_black_overlay_url,
        ),
    ]
    return {spec.product: spec for spec in specs}


def resolve_mockup(specs: Dict[str, MockupSpec], product: str) -> MockupSpec:
    """
    Look up a product and make sure it has a mockup to render onto.

    Raises:
        UnknownProductError: for tags outside the product table.
        MockupNotConfiguredError: when the product has no mockup URL.
    """
    spec = specs.get(product)
    if spec is None:
        raise UnknownProductError(f"Unknown product '{product}'", stage="resolve")
    if not spec.mockup_url:
        raise MockupNotConfiguredError(f"No mockup URL configured for '{product}'", stage="resolve")
    return spec
