from typing import Optional

import pytest

from models import Coordinate, DistanceScore, Venue
from services.filter_rank import (
    balanced_distance_score,
    brand_key,
    dedupe_by_brand,
    filter_and_rank,
    filter_by_fairness,
    sort_by_balance,
)


ORIGIN_1 = Coordinate(0.0, 0.0)
ORIGIN_2 = Coordinate(0.0, 1.0)  # ~111 km east


def _venue(name: str, lat: float, lng: float, rating: Optional[float] = 4.0, place_id: Optional[str] = None) -> Venue:
    return Venue(
        name=name,
        address=None,
        location=Coordinate(lat, lng),
        source_category="cafe",
        place_id=place_id or name,
        rating=rating,
        user_ratings_count=50,
    )


def test_fairness_filter_drops_far_venue_and_keeps_central_one() -> None:
    far = _venue("far", 0.0, 4.5)  # ~500 km from origin 1
    central = _venue("central", 0.5, 0.5)  # ~79 km from both
    kept = filter_by_fairness([far, central], ORIGIN_1, ORIGIN_2, fairness_ratio=2.0)
    assert [v.name for v in kept] == ["central"]


def test_fairness_bound_applies_to_both_origins() -> None:
    # ~200 km from origin 1 but ~300 km from origin 2; bound is ~222 km
    lopsided = _venue("lopsided", 0.0, -1.8)
    assert filter_by_fairness([lopsided], ORIGIN_1, ORIGIN_2) == []


@pytest.mark.parametrize(
    "name,key",
    [
        ("Starbucks Reserve - MG Road", "starbucks"),
        ("Third Wave Coffee Roasters, Indiranagar", "third wave coffee"),
        ("CHAI POINT", "chai point"),
        ("Blue Bottle #42!", "bluebottle"),
        ("The Extremely Long Independent Bakery", "theextremelylonginde"),
    ],
)
def test_brand_key(name: str, key: str) -> None:
    assert brand_key(name) == key


def test_brand_cap_keeps_first_occurrences() -> None:
    names = [
        ("Starbucks A", "s1"),
        ("Cafe Y", "c1"),
        ("Starbucks B", "s2"),
        ("Starbucks C", "s3"),
        ("Cafe Y", "c2"),
        ("Starbucks D", "s4"),
        ("Cafe Y", "c3"),
        ("Starbucks E", "s5"),
    ]
    venues = [_venue(n, 0.0, 0.5, place_id=pid) for n, pid in names]

    kept = dedupe_by_brand(venues, max_per_brand=2)
    assert [v.place_id for v in kept] == ["s1", "c1", "s2", "c2"]

    ranked = filter_and_rank(venues, ORIGIN_1, ORIGIN_2)
    assert sum(1 for v in ranked if brand_key(v.name) == "starbucks") == 2
    assert sum(1 for v in ranked if brand_key(v.name) == "cafey") == 2


def test_balanced_distance_score() -> None:
    venue = _venue("east", 0.0, 0.75)
    score = balanced_distance_score(venue, ORIGIN_1, ORIGIN_2)
    assert score.distance_from_origin1 == pytest.approx(83.39, abs=0.01)
    assert score.distance_from_origin2 == pytest.approx(27.80, abs=0.01)
    assert score.distance_difference == pytest.approx(
        score.distance_from_origin1 - score.distance_from_origin2
    )
    assert score.balanced_score == pytest.approx(score.distance_difference + 0.1 * score.total_distance)


def _scored(name: str, balanced: float, rating: Optional[float]) -> Venue:
    venue = _venue(name, 0.0, 0.5, rating=rating)
    venue.distance_score = DistanceScore(0.0, 0.0, 0.0, 0.0, balanced)
    return venue


def test_near_ties_are_broken_by_rating() -> None:
    a = _scored("a", 3.02, 4.0)
    b = _scored("b", 3.05, 4.8)
    c = _scored("c", 5.0, 5.0)
    assert [v.name for v in sort_by_balance([c, a, b])] == ["b", "a", "c"]


def test_missing_rating_loses_tie() -> None:
    unrated = _scored("unrated", 1.0, None)
    rated = _scored("rated", 1.05, 3.6)
    assert [v.name for v in sort_by_balance([unrated, rated])] == ["rated", "unrated"]


def test_ranks_by_balanced_score() -> None:
    venues = [_venue("east", 0.0, 0.9), _venue("middle", 0.0, 0.5), _venue("west", 0.0, 0.2)]
    ranked = filter_and_rank(venues, ORIGIN_1, ORIGIN_2)
    assert [v.name for v in ranked] == ["middle", "west", "east"]
    assert all(v.distance_score is not None for v in ranked)


def test_empty_candidates() -> None:
    assert filter_and_rank([], ORIGIN_1, ORIGIN_2) == []


def test_sorting_requires_distance_scores() -> None:
    with pytest.raises(ValueError):
        sort_by_balance([_venue("unscored", 0.0, 0.5), _scored("scored", 1.0, 4.0)])
