from models import Coordinate, DistanceScore, MeetingResult, Review, SearchParameters, Venue
from services.report import build_report


def _result(**kwargs) -> MeetingResult:
    return MeetingResult(
        origin1=Coordinate(28.6139, 77.2090),
        origin2=Coordinate(28.7041, 77.1025),
        midpoint=Coordinate(28.659, 77.1558),
        **kwargs,
    )


def test_build_report_basic():
    venue = Venue(
        name="Midway Brews",
        address="Pitampura",
        location=Coordinate(28.659, 77.1557),
        source_category="cafe",
        place_id="midway",
        rating=4.3,
        user_ratings_count=250,
        distance_score=DistanceScore(7.2, 7.3, 0.1, 14.5, 1.55),
        ai_score=50,
        ai_reasons=["Perfect for morning coffee", "Very fair for both of you"],
    )
    md = _result(
        venues=[venue],
        search_parameters=SearchParameters(place_types=["cafe"], occasion="work"),
        insights=["Morning picks: coffee shops and breakfast spots come first."],
    )
    text = build_report(md)
    assert "## Meeting Spot Recommendations" in text
    assert "- Searched: cafe" in text
    assert "### Insights" in text
    assert "#### 1. Midway Brews" in text
    assert "- Rating: 4.3/5 (250 reviews)" in text
    assert "7.2 km / 7.3 km" in text
    assert "  * Very fair for both of you" in text
    assert "approximate" not in text


def test_build_report_empty_and_fallback():
    text = build_report(_result(midpoint_fallback=True))
    assert "(approximate: simple average)" in text
    assert "No places nearby were fair for both of you." in text
    assert "### Insights" not in text


def test_build_report_limits_and_unrated():
    venues = [
        Venue(name=f"Spot {i}", address=None, location=Coordinate(28.66, 77.15), source_category="park", place_id=str(i))
        for i in range(7)
    ]
    text = build_report(_result(venues=venues), top_n=3)
    assert "#### 3. Spot 2" in text
    assert "Spot 3" not in text
    assert "- Rating: Not rated (0 reviews)" in text
    assert "- Address: Not provided" in text


def test_build_report_shows_menu_and_first_review():
    venue = Venue(
        name="Cafe Lota",
        address="Pragati Maidan",
        location=Coordinate(28.61, 77.24),
        source_category="cafe",
        place_id="lota",
        menu_url="https://lota.test/menu",
        reviews=[Review(author="Asha", rating=5.0, text="Great   thali.\n" + "x" * 300), Review(author="Ravi")],
    )
    text = build_report(_result(venues=[venue]))
    assert "- Menu: https://lota.test/menu" in text
    line = next(l for l in text.splitlines() if l.startswith("- Review by Asha (5/5): "))
    assert "Great thali." in line
    assert line.endswith('..."')
    assert "Ravi" not in text
