"""
Configuration loader for the mockup preview service.

Environment variables are centralized here to keep the rest of the code
focused on business logic and to make operational tuning clear.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings

REMOVAL_STRATEGIES = {"flood-fill", "grid-component", "grid-block"}
GRID_MODES = {"transparent", "inpaint"}


class Settings(BaseSettings):
    # API
    request_timeout_seconds: int = Field(30, env="REQUEST_TIMEOUT_SECONDS")
    log_level: str = Field("INFO", env="LOG_LEVEL")

    # Background removal strategy
    bg_removal_strategy: str = Field("flood-fill", env="BG_REMOVAL_STRATEGY")

    # Flood-fill tunables
    bg_cluster_distance: float = Field(25.0, env="BG_CLUSTER_DISTANCE")
    bg_max_clusters: int = Field(3, env="BG_MAX_CLUSTERS")
    bg_start_tolerance: float = Field(26.0, env="BG_START_TOLERANCE")
    bg_grow_tolerance: float = Field(30.0, env="BG_GROW_TOLERANCE")
    bg_sample_divisions: int = Field(50, env="BG_SAMPLE_DIVISIONS")
    bg_brightness_filter: bool = Field(True, env="BG_BRIGHTNESS_FILTER")
    bg_min_brightness: float = Field(180.0, env="BG_MIN_BRIGHTNESS")

    # Grid strategies
    grid_mode: str = Field("transparent", env="GRID_MODE")
    grid_max_saturation: int = Field(24, env="GRID_MAX_SATURATION")
    grid_min_brightness: float = Field(170.0, env="GRID_MIN_BRIGHTNESS")
    grid_max_extent: int = Field(6, env="GRID_MAX_EXTENT")
    grid_block_size: int = Field(8, env="GRID_BLOCK_SIZE")
    grid_block_fill: float = Field(0.9, env="GRID_BLOCK_FILL")

    # Mockup sources (scale/offset constants live in mockups.py)
    tote_mockup_url: Optional[str] = Field(
        "https://cdn.shopify.com/s/files/1/0958/7346/6743/files/Tragetasche_Mockup.jpg?v=1763713012",
        env="TOTE_MOCKUP_URL",
    )
    mug_mockup_url: Optional[str] = Field(None, env="MUG_MOCKUP_URL")
    tee_white_mockup_url: Optional[str] = Field(None, env="TEE_WHITE_MOCKUP_URL")
    tee_white_overlay_url: Optional[str] = Field(None, env="TEE_WHITE_OVERLAY_URL")
    tee_black_mockup_url: Optional[str] = Field(None, env="TEE_BLACK_MOCKUP_URL")
    tee_black_overlay_url: Optional[str] = Field(None, env="TEE_BLACK_OVERLAY_URL")

    # Debugging
    debug: bool = Field(False, env="DEBUG")
    debug_output_dir: Path = Field(Path("/tmp/mockup_preview_debug"), env="DEBUG_OUTPUT_DIR")

    class Config:
        env_file = ".env"
        case_sensitive = False

    @validator("bg_removal_strategy")
    def validate_strategy(cls, v: str) -> str:  # noqa: B902
        if v not in REMOVAL_STRATEGIES:
            raise ValueError("BG_REMOVAL_STRATEGY must be one of flood-fill|grid-component|grid-block")
        return v

    @validator("grid_mode")
    def validate_grid_mode(cls, v: str) -> str:  # noqa: B902
        if v not in GRID_MODES:
            raise ValueError("GRID_MODE must be one of transparent|inpaint")
        return v

    @validator("bg_max_clusters", "bg_sample_divisions", "grid_max_extent", "grid_block_size")
    def validate_positive(cls, v: int) -> int:  # noqa: B902
        if v < 1:
            raise ValueError("value must be >= 1")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()
