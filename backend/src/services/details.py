from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Protocol

from loguru import logger

from models import PlaceDetails, Venue
from services.places_client import PlacesError


class DetailsSource(Protocol):
    def place_details(self, place_id: str, *, lang: Optional[str] = None) -> Optional[PlaceDetails]: ...

    def photo_url(self, photo_reference: str, *, max_width: int = ...) -> str: ...


def _fetch(source: DetailsSource, venue: Venue, lang: Optional[str]) -> Optional[PlaceDetails]:
    try:
        return source.place_details(venue.place_id, lang=lang)
    except PlacesError as exc:
        # a venue without details is still a recommendation
        logger.warning("no details for {} ({}): {}", venue.name, venue.place_id, exc)
        return None


def attach_details(
    source: DetailsSource,
    venues: List[Venue],
    *,
    lang: Optional[str] = None,
    max_workers: int = 5,
) -> List[Venue]:
    """Fill photo_url, reviews and menu_url on each venue from Place Details.

    Lookups run concurrently. A failed lookup leaves the venue with its search
    photo and no reviews or menu.
    """
    if not venues:
        return venues

    workers = max(1, min(max_workers, len(venues)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda v: _fetch(source, v, lang), venues))

    for venue, details in zip(venues, results):
        photo_reference = venue.photo_reference
        if details is not None:
            venue.reviews = list(details.reviews)
            venue.menu_url = details.menu_url
            photo_reference = photo_reference or details.photo_reference
        if photo_reference:
            venue.photo_url = source.photo_url(photo_reference)

    logger.debug("details attached to {}/{} venues", sum(1 for d in results if d is not None), len(venues))
    return venues
