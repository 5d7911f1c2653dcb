from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Protocol, Tuple

from loguru import logger

from config import Configuration
from models import Coordinate, SearchParameters, Venue
from services.places_client import PlacesError


# (provider place type, search keyword), queried in this order
CATEGORY_SEARCHES: List[Tuple[str, str]] = [
    ("cafe", "coffee"),
    ("restaurant", "dining"),
    ("park", "green"),
    ("shopping_mall", "mall"),
    ("hotel", "hotel"),
]

# businesses that show up under these categories but are not places to meet
NAME_DENYLIST = (
    "dhaba",
    "store",
    "car",
    "garage",
    "automobile",
    "repair",
    "laundry",
    "fuel",
    "petrol",
    "storage",
)


class VenueSource(Protocol):
    def nearby_search(
        self,
        center: Coordinate,
        *,
        radius_m: int,
        place_type: str,
        keyword: Optional[str] = None,
        lang: Optional[str] = None,
    ) -> List[Venue]: ...


def is_admissible(
    venue: Venue,
    category: str,
    *,
    min_rating: float = 3.5,
    min_rating_count: int = 30,
) -> bool:
    if category not in venue.types:
        return False
    if (venue.rating or 0.0) < min_rating:
        return False
    if (venue.user_ratings_count or 0) <= min_rating_count:
        return False
    lowered = venue.name.lower()
    return not any(word in lowered for word in NAME_DENYLIST)


def categories_for(params: Optional[SearchParameters]) -> List[Tuple[str, str]]:
    if params is None or not params.place_types:
        return list(CATEGORY_SEARCHES)
    return [(cat, kw) for cat, kw in CATEGORY_SEARCHES if cat in params.place_types]


def search_venues(
    cfg: Configuration,
    source: VenueSource,
    midpoint: Coordinate,
    params: Optional[SearchParameters] = None,
) -> List[Venue]:
    """Run one nearby search per category around the midpoint and admit the usable hits.

    Searches run concurrently; results are concatenated in category order so the
    discovery order seen by the brand cap does not depend on thread timing.
    """
    searches = categories_for(params)
    if not searches:
        return []

    min_rating = max(cfg.min_rating, params.min_rating if params else cfg.min_rating)

    def _run(search: Tuple[str, str]) -> List[Venue]:
        category, keyword = search
        try:
            raw = source.nearby_search(
                midpoint,
                radius_m=cfg.search_radius_m,
                place_type=category,
                keyword=keyword,
                lang=cfg.lang_default,
            )
        except PlacesError as exc:
            logger.warning("no results for {}: {}", category, exc)
            return []
        admitted = [
            v
            for v in raw
            if is_admissible(v, category, min_rating=min_rating, min_rating_count=cfg.min_rating_count)
        ]
        logger.debug("{}: {} raw, {} admitted", category, len(raw), len(admitted))
        return admitted

    workers = max(1, min(cfg.search_max_workers, len(searches)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        batches = list(pool.map(_run, searches))

    venues: list[Venue] = []
    for batch in batches:
        venues.extend(batch)
    return venues
