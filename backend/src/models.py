"""Data models for the meetup spot finder."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional


VENUE_CATEGORIES = ("cafe", "restaurant", "park", "shopping_mall", "hotel")


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            raise ValueError(f"coordinate must be finite: {self.lat},{self.lng}")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"longitude out of range: {self.lng}")


@dataclass
class GeocodeResult:
    location: Coordinate
    formatted_address: Optional[str] = None


@dataclass
class DistanceScore:
    distance_from_origin1: float
    distance_from_origin2: float
    distance_difference: float
    total_distance: float
    balanced_score: float


@dataclass
class Review:
    author: str
    rating: Optional[float] = None
    text: str = ""
    relative_time: Optional[str] = None


@dataclass
class PlaceDetails:
    reviews: list[Review] = field(default_factory=list)
    menu_url: Optional[str] = None
    website: Optional[str] = None
    photo_reference: Optional[str] = None


@dataclass
class Venue:
    name: str
    address: Optional[str]
    location: Coordinate
    source_category: str
    place_id: str
    rating: Optional[float] = None
    user_ratings_count: Optional[int] = None
    types: list[str] = field(default_factory=list)
    photo_reference: Optional[str] = None
    # attached by the pipeline
    distance_score: Optional[DistanceScore] = None
    ai_score: float = 0.0
    ai_reasons: list[str] = field(default_factory=list)
    # filled from Place Details for the returned venues
    photo_url: Optional[str] = None
    reviews: list[Review] = field(default_factory=list)
    menu_url: Optional[str] = None


@dataclass
class SearchIntent:
    intent: str = "general"
    place_type: str = "any"
    place_types: set[str] = field(default_factory=set)
    atmosphere: set[str] = field(default_factory=set)
    features: set[str] = field(default_factory=set)
    occasion: str = "casual"
    time_context: str = "any"
    accessibility: set[str] = field(default_factory=set)
    budget: str = "medium"
    keywords: list[str] = field(default_factory=list)


@dataclass
class ScoringBonuses:
    time_bonus: int = 0
    atmosphere_bonus: int = 0
    feature_bonus: int = 0
    occasion_bonus: int = 0


@dataclass
class SearchParameters:
    place_types: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    min_rating: float = 3.5
    max_distance_km: float = 20.0
    time_context: str = "any"
    occasion: str = "casual"
    atmosphere: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    budget: str = "medium"
    bonuses: ScoringBonuses = field(default_factory=ScoringBonuses)


@dataclass
class UserPreferences:
    favorite_types: list[str] = field(default_factory=list)
    avoid_types: list[str] = field(default_factory=list)
    min_rating: Optional[float] = 3.5
    max_distance_km: float = 20.0
    quiet: bool = False
    romantic: bool = False
    family_friendly: bool = False
    business: bool = False
    budget: str = "medium"


@dataclass
class ScoringContext:
    time_of_day: Optional[str] = None  # morning / afternoon / evening
    weather: Optional[str] = None  # sunny / rainy
    occasion: Optional[str] = None
    urgency: Optional[str] = None  # quick
    intent: Optional[SearchIntent] = None
    bonuses: Optional[ScoringBonuses] = None
    preferences: Optional[UserPreferences] = None


@dataclass
class MeetingResult:
    origin1: Coordinate
    origin2: Coordinate
    midpoint: Coordinate
    midpoint_fallback: bool = False
    venues: list[Venue] = field(default_factory=list)
    intent: Optional[SearchIntent] = None
    search_parameters: Optional[SearchParameters] = None
    insights: list[str] = field(default_factory=list)
