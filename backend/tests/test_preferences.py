import pytest

from models import Coordinate, UserPreferences, Venue
from services.preferences import default_preferences, learn_from_behavior


def _venue(category: str, rating=None) -> Venue:
    return Venue(
        name="Somewhere",
        address=None,
        location=Coordinate(28.66, 77.15),
        source_category=category,
        place_id="p1",
        rating=rating,
    )


def test_default_preferences() -> None:
    assert default_preferences("u1") == UserPreferences()
    with pytest.raises(ValueError):
        default_preferences("")


def test_selected_venue_signals() -> None:
    learned = learn_from_behavior("u1", "selected", _venue("restaurant", rating=4.4), "romantic")
    assert learned["learned"] is True
    assert learned["signals"] == ["likes restaurant places", "prefers high-rated places", "likes romantic occasions"]
    assert learned["recommendations"] == [
        "Consider restaurants with a similar cuisine",
        "Look for places with good ratings and reviews",
    ]


def test_rejected_venue_signals() -> None:
    learned = learn_from_behavior("u1", "rejected", _venue("park", rating=4.9))
    assert learned["signals"] == ["avoids park places"]
    assert learned["recommendations"] == []


def test_nothing_learned_without_venue() -> None:
    learned = learn_from_behavior("u1", "selected", occasion="business")
    assert learned["learned"] is False
    assert learned["signals"] == []
    assert "Places with good accessibility and parking" in learned["recommendations"]


@pytest.mark.parametrize("user_id,action", [("", "selected"), ("u1", ""), ("u1", "clicked")])
def test_invalid_requests(user_id: str, action: str) -> None:
    with pytest.raises(ValueError):
        learn_from_behavior(user_id, action)
