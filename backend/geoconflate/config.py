# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Application Configuration
All settings are loaded from environment variables with defaults tuned
for projected coordinates in metres. Override via .env or environment.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Candidate Search ────────────────────────────────────────────────────
    # Target envelope is expanded by this much before querying candidates
    search_buffer: float = Field(50.0, ge=0.0)

    # ─── Scorer Ranges ───────────────────────────────────────────────────────
    # Distance at which a distance-based score drops to zero
    centroid_max_distance: float = Field(100.0, gt=0.0)
    hausdorff_max_distance: float = Field(100.0, gt=0.0)

    # ─── Scorer Weights ──────────────────────────────────────────────────────
    # Relative weights; 0 disables a scorer entirely
    weight_centroid_distance: float = Field(1.0, ge=0.0)
    weight_aligned_symdiff: float = Field(1.0, ge=0.0)
    weight_hausdorff: float = Field(0.0, ge=0.0)
    weight_attribute: float = Field(0.0, ge=0.0)
    match_attribute: str | None = None

    # ─── Assignment ──────────────────────────────────────────────────────────
    disambiguate: bool = True
    match_workers: int = Field(1, ge=1)
    confidence_threshold: float = Field(0.5, ge=0.0, le=1.0)

    # ─── Logging ─────────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached singleton Settings instance."""
    return Settings()
