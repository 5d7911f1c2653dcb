from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from loguru import logger

from config import Configuration
from models import (
    Coordinate,
    MeetingResult,
    ScoringContext,
    SearchIntent,
    SearchParameters,
    UserPreferences,
)
from services.details import DetailsSource, attach_details
from services.filter_rank import filter_and_rank
from services.geomath import arithmetic_midpoint, spherical_midpoint
from services.query_interpreter import build_search_parameters, parse_query
from services.scorer import generate_insights, score_venues
from services.venue_search import VenueSource, search_venues
from utils import time_of_day_bucket


def validate_origins(origin1: Optional[Coordinate], origin2: Optional[Coordinate]) -> Tuple[Coordinate, Coordinate]:
    if origin1 is None or origin2 is None:
        raise ValueError("Missing locations")
    if origin1.lat == origin2.lat and origin1.lng == origin2.lng:
        raise ValueError("Locations must be different")
    return origin1, origin2


def compute_midpoint(origin1: Coordinate, origin2: Coordinate) -> Tuple[Coordinate, bool]:
    """Spherical midpoint, or the plain lat/lng mean when that comes out non-finite.

    The second element tells whether the fallback was used.
    """
    try:
        return spherical_midpoint(origin1, origin2), False
    except ValueError as exc:
        midpoint = arithmetic_midpoint(origin1, origin2)
        logger.warning("falling back to simple midpoint {},{}: {}", midpoint.lat, midpoint.lng, exc)
        return midpoint, True


def build_context(
    intent: Optional[SearchIntent] = None,
    params: Optional[SearchParameters] = None,
    *,
    weather: Optional[str] = None,
    urgency: Optional[str] = None,
    preferences: Optional[UserPreferences] = None,
    now: Optional[datetime] = None,
) -> ScoringContext:
    time_of_day = time_of_day_bucket(now)
    if intent is not None and intent.time_context != "any":
        time_of_day = intent.time_context
    return ScoringContext(
        time_of_day=time_of_day,
        weather=weather,
        occasion=intent.occasion if intent is not None else None,
        urgency=urgency,
        intent=intent,
        bonuses=params.bonuses if params is not None else None,
        preferences=preferences,
    )


def find_meeting_spots(
    cfg: Configuration,
    source: VenueSource,
    origin1: Optional[Coordinate],
    origin2: Optional[Coordinate],
    *,
    query: Optional[str] = None,
    weather: Optional[str] = None,
    urgency: Optional[str] = None,
    preferences: Optional[UserPreferences] = None,
    now: Optional[datetime] = None,
    details: Optional[DetailsSource] = None,
) -> MeetingResult:
    origin1, origin2 = validate_origins(origin1, origin2)
    midpoint, fallback = compute_midpoint(origin1, origin2)

    intent: Optional[SearchIntent] = None
    params: Optional[SearchParameters] = None
    if query and query.strip():
        intent = parse_query(query)
        params = build_search_parameters(intent)
        logger.info("query interpreted: place_types={} occasion={}", params.place_types, params.occasion)

    candidates = search_venues(cfg, source, midpoint, params)
    ranked = filter_and_rank(
        candidates,
        origin1,
        origin2,
        fairness_ratio=cfg.fairness_ratio,
        max_per_brand=cfg.max_per_brand,
    )

    context = build_context(
        intent,
        params,
        weather=weather,
        urgency=urgency,
        preferences=preferences,
        now=now,
    )
    scored = score_venues(ranked, context)
    if details is not None:
        attach_details(details, scored, lang=cfg.lang_default, max_workers=cfg.search_max_workers)
    logger.info(
        "meeting spots midpoint={:.4f},{:.4f} fallback={} candidates={} returned={}",
        midpoint.lat,
        midpoint.lng,
        fallback,
        len(candidates),
        len(scored),
    )

    return MeetingResult(
        origin1=origin1,
        origin2=origin2,
        midpoint=midpoint,
        midpoint_fallback=fallback,
        venues=scored,
        intent=intent,
        search_parameters=params,
        insights=generate_insights(scored, context),
    )
