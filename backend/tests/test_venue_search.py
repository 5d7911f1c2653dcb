from __future__ import annotations

import threading
from typing import Dict, List, Optional

from config import Configuration
from models import Coordinate, SearchParameters, Venue
from services.places_client import PlacesError
from services.venue_search import categories_for, is_admissible, search_venues


MIDPOINT = Coordinate(28.659, 77.156)


def _raw(
    name: str,
    category: str,
    rating: Optional[float] = 4.2,
    count: Optional[int] = 120,
    types: Optional[List[str]] = None,
) -> Venue:
    return Venue(
        name=name,
        address="somewhere",
        location=MIDPOINT,
        source_category=category,
        place_id=f"{category}:{name}",
        rating=rating,
        user_ratings_count=count,
        types=types if types is not None else [category, "point_of_interest"],
    )


class FakeSource:
    def __init__(self, results: Dict[str, List[Venue]], failing: tuple = ()) -> None:
        self.results = results
        self.failing = set(failing)
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def nearby_search(self, center, *, radius_m, place_type, keyword=None, lang=None):
        with self._lock:
            self.calls.append((place_type, keyword, radius_m))
        if place_type in self.failing:
            raise PlacesError("upstream 503")
        return list(self.results.get(place_type, []))


def test_admission_rules() -> None:
    assert is_admissible(_raw("Good Cafe", "cafe"), "cafe")
    assert not is_admissible(_raw("Low Rated", "cafe", rating=3.4), "cafe")
    assert not is_admissible(_raw("Unrated", "cafe", rating=None), "cafe")
    assert not is_admissible(_raw("New Place", "cafe", count=30), "cafe")
    assert not is_admissible(_raw("Wrong Type", "cafe", types=["store"]), "cafe")
    assert not is_admissible(_raw("Sharma Auto Repair Cafe", "cafe"), "cafe")
    assert not is_admissible(_raw("LAUNDRY lounge", "cafe"), "cafe")
    assert not is_admissible(_raw("Indian Oil Fuel Station Cafe", "cafe"), "cafe")
    assert not is_admissible(_raw("Safe Storage Cafe", "cafe"), "cafe")
    assert not is_admissible(_raw("HP Petrol Pump Canteen", "cafe"), "cafe")


def test_categories_default_and_narrowed() -> None:
    assert [c for c, _ in categories_for(None)] == ["cafe", "restaurant", "park", "shopping_mall", "hotel"]
    params = SearchParameters(place_types=["park", "cafe"])
    assert categories_for(params) == [("cafe", "coffee"), ("park", "green")]


def test_search_keeps_category_order_and_skips_failures() -> None:
    source = FakeSource(
        {
            "cafe": [_raw("Bean There", "cafe"), _raw("Low Beans", "cafe", rating=3.0)],
            "park": [_raw("Lodhi Garden", "park")],
            "hotel": [_raw("Grand Hotel", "hotel")],
        },
        failing=("restaurant",),
    )
    cfg = Configuration(search_radius_m=15000)

    venues = search_venues(cfg, source, MIDPOINT)

    assert [v.name for v in venues] == ["Bean There", "Lodhi Garden", "Grand Hotel"]
    assert sorted(call[0] for call in source.calls) == sorted(
        ["cafe", "restaurant", "park", "shopping_mall", "hotel"]
    )
    assert all(call[2] == 15000 for call in source.calls)


def test_search_uses_stricter_rating_from_parameters() -> None:
    source = FakeSource({"restaurant": [_raw("Fine", "restaurant", rating=4.3), _raw("Okay", "restaurant", rating=3.8)]})
    params = SearchParameters(place_types=["restaurant"], min_rating=4.0)

    venues = search_venues(Configuration(), source, MIDPOINT, params)

    assert [v.name for v in venues] == ["Fine"]
    assert [call[0] for call in source.calls] == ["restaurant"]
