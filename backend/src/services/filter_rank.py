from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Dict, List, Tuple

from loguru import logger

from models import Coordinate, DistanceScore, Venue
from services.geomath import distance_km


# substring -> brand key for chains whose branch names vary ("Starbucks - Indiranagar")
KNOWN_CHAINS: List[Tuple[str, str]] = [
    ("third wave", "third wave coffee"),
    ("starbucks", "starbucks"),
    ("chai point", "chai point"),
    ("cafe coffee day", "cafe coffee day"),
    ("blue tokai", "blue tokai"),
    ("costa coffee", "costa coffee"),
    ("dunkin", "dunkin"),
    ("mcdonald", "mcdonalds"),
]

BRAND_KEY_MAX_LEN = 20
TIE_TOLERANCE_KM = 0.1
TOTAL_DISTANCE_WEIGHT = 0.1


def brand_key(name: str) -> str:
    lowered = (name or "").lower()
    for needle, key in KNOWN_CHAINS:
        if needle in lowered:
            return key
    return re.sub(r"[^a-z]", "", lowered)[:BRAND_KEY_MAX_LEN]


def filter_by_fairness(
    venues: List[Venue],
    origin1: Coordinate,
    origin2: Coordinate,
    fairness_ratio: float = 2.0,
) -> List[Venue]:
    """Keep venues within fairness_ratio x the origin-to-origin distance of BOTH origins."""
    origin_distance = distance_km(origin1, origin2)
    max_allowed = origin_distance * fairness_ratio
    logger.debug(
        "origin distance {:.2f}km, max distance from either origin {:.2f}km",
        origin_distance,
        max_allowed,
    )

    kept: list[Venue] = []
    for venue in venues:
        d1 = distance_km(origin1, venue.location)
        d2 = distance_km(origin2, venue.location)
        if d1 <= max_allowed and d2 <= max_allowed:
            kept.append(venue)
        else:
            logger.debug("dropped {}: {:.2f}km / {:.2f}km from origins", venue.name, d1, d2)
    return kept


def dedupe_by_brand(venues: List[Venue], max_per_brand: int = 2) -> List[Venue]:
    """Keep the first max_per_brand venues of every brand, in discovery order."""
    counts: Dict[str, int] = {}
    kept: list[Venue] = []
    for venue in venues:
        key = brand_key(venue.name)
        counts[key] = counts.get(key, 0) + 1
        if counts[key] <= max_per_brand:
            kept.append(venue)
    return kept


def balanced_distance_score(venue: Venue, origin1: Coordinate, origin2: Coordinate) -> DistanceScore:
    d1 = distance_km(origin1, venue.location)
    d2 = distance_km(origin2, venue.location)
    difference = abs(d1 - d2)
    total = d1 + d2
    return DistanceScore(
        distance_from_origin1=d1,
        distance_from_origin2=d2,
        distance_difference=difference,
        total_distance=total,
        balanced_score=difference + total * TOTAL_DISTANCE_WEIGHT,
    )


def _compare(a: Venue, b: Venue) -> float:
    if a.distance_score is None or b.distance_score is None:
        raise ValueError("venues must carry a distance score before sorting")
    delta = a.distance_score.balanced_score - b.distance_score.balanced_score
    if abs(delta) > TIE_TOLERANCE_KM:
        return delta
    # practically equally fair: prefer the better rated one
    return (b.rating or 0.0) - (a.rating or 0.0)


def sort_by_balance(venues: List[Venue]) -> List[Venue]:
    """Order scored venues by balanced score, breaking near-ties by rating."""
    return sorted(venues, key=cmp_to_key(_compare))


def filter_and_rank(
    candidates: List[Venue],
    origin1: Coordinate,
    origin2: Coordinate,
    fairness_ratio: float = 2.0,
    max_per_brand: int = 2,
) -> List[Venue]:
    if not candidates:
        return []

    fair = filter_by_fairness(candidates, origin1, origin2, fairness_ratio)
    unique = dedupe_by_brand(fair, max_per_brand)
    logger.debug(
        "{} candidates, {} within fairness bound, {} after brand cap",
        len(candidates),
        len(fair),
        len(unique),
    )

    for venue in unique:
        venue.distance_score = balanced_distance_score(venue, origin1, origin2)

    return sort_by_balance(unique)
