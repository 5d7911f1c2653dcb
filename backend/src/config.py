from __future__ import annotations

import os
from typing import Any, Optional

from pydantic import BaseModel, Field

from utils import mask_secret


class Configuration(BaseModel):
    # Google Places / Geocoding
    google_maps_api_key: Optional[str] = Field(default=None)
    places_base_url: str = Field(default="https://maps.googleapis.com/maps/api")
    places_timeout: int = Field(default=15)
    search_radius_m: int = Field(default=15000)
    search_max_workers: int = Field(default=5)

    # Fairness / ranking
    fairness_ratio: float = Field(default=2.0)
    max_per_brand: int = Field(default=2)

    # Admission of raw candidates
    min_rating: float = Field(default=3.5)
    min_rating_count: int = Field(default=30)

    lang_default: str = Field(default="en")

    @classmethod
    def from_env(cls, overrides: Optional[dict[str, Any]] = None) -> "Configuration":
        raw: dict[str, Any] = {}

        env_map = {
            "google_maps_api_key": os.getenv("GOOGLE_MAPS_API_KEY"),
            "places_base_url": os.getenv("PLACES_BASE_URL"),
            "places_timeout": os.getenv("PLACES_TIMEOUT"),
            "search_radius_m": os.getenv("SEARCH_RADIUS_M"),
            "search_max_workers": os.getenv("SEARCH_MAX_WORKERS"),
            "fairness_ratio": os.getenv("FAIRNESS_RATIO"),
            "max_per_brand": os.getenv("MAX_PER_BRAND"),
            "min_rating": os.getenv("MIN_RATING"),
            "min_rating_count": os.getenv("MIN_RATING_COUNT"),
            "lang_default": os.getenv("LANG_DEFAULT"),
        }

        for k, v in env_map.items():
            if v is None:
                continue
            raw[k] = v

        if overrides:
            raw.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**raw)

    def require_places_api_key(self) -> None:
        if not self.google_maps_api_key:
            raise ValueError("GOOGLE_MAPS_API_KEY is required")

    def log_summary(self) -> str:
        return (
            "places=%s base=%s timeout=%s radius_m=%s fairness_ratio=%s max_per_brand=%s api_key=%s"
            % (
                bool(self.google_maps_api_key),
                self.places_base_url,
                self.places_timeout,
                self.search_radius_m,
                self.fairness_ratio,
                self.max_per_brand,
                mask_secret(self.google_maps_api_key),
            )
        )
