"""Rule-table scoring of fairness-ranked venues.

Each ScoringRule adds a fixed number of points and a short reason when its
predicate holds. Rules run in table order; that order is also the order of
the reasons attached to a venue (first three kept).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from loguru import logger

from models import ScoringContext, Venue


MAX_REASONS = 3

Predicate = Callable[[Venue, ScoringContext], bool]


@dataclass(frozen=True)
class ScoringRule:
    name: str
    predicate: Predicate
    weight: int
    reason: str
    # ScoringBonuses field supplying the weight; the rule is skipped when it is 0
    bonus: Optional[str] = None
    needs_context: bool = True

    def points(self, ctx: ScoringContext) -> int:
        if self.bonus is None:
            return self.weight
        if ctx.bonuses is None:
            return 0
        return int(getattr(ctx.bonuses, self.bonus, 0) or 0)


def _rating(venue: Venue) -> float:
    return venue.rating or 0.0


def _is(venue: Venue, *categories: str) -> bool:
    return venue.source_category in categories


def _difference_within(venue: Venue, low: float, high: float) -> bool:
    if venue.distance_score is None:
        return False
    return low <= venue.distance_score.distance_difference < high


def _occasion(ctx: ScoringContext, occasion: str) -> bool:
    # an interpreted request brings its own occasion rules
    return ctx.intent is None and ctx.occasion == occasion


def _prefs_list(ctx: ScoringContext, attr: str) -> list[str]:
    return list(getattr(ctx.preferences, attr, None) or []) if ctx.preferences else []


def _meets_min_rating(venue: Venue, ctx: ScoringContext) -> bool:
    if ctx.preferences is None or not ctx.preferences.min_rating or venue.rating is None:
        return False
    return venue.rating >= ctx.preferences.min_rating


CONTEXT_RULES: List[ScoringRule] = [
    # time of day
    ScoringRule(
        "morning_cafe",
        lambda v, c: c.time_of_day == "morning" and _is(v, "cafe"),
        20,
        "Perfect for morning coffee",
    ),
    ScoringRule(
        "evening_restaurant",
        lambda v, c: c.time_of_day == "evening" and _is(v, "restaurant"),
        20,
        "Great for evening dining",
    ),
    # weather
    ScoringRule(
        "rainy_indoor",
        lambda v, c: c.weather == "rainy" and not _is(v, "park"),
        15,
        "Indoor option for rainy weather",
    ),
    ScoringRule(
        "sunny_park",
        lambda v, c: c.weather == "sunny" and _is(v, "park"),
        15,
        "Great outdoor option",
    ),
    # occasion
    ScoringRule(
        "business_spot",
        lambda v, c: _occasion(c, "business") and _is(v, "cafe", "restaurant"),
        25,
        "Professional meeting spot",
    ),
    ScoringRule(
        "romantic_spot",
        lambda v, c: _occasion(c, "romantic") and _is(v, "restaurant") and _rating(v) >= 4.0,
        30,
        "Romantic atmosphere",
    ),
    ScoringRule(
        "family_spot",
        lambda v, c: _occasion(c, "family") and _is(v, "park", "shopping_mall"),
        25,
        "Family-friendly location",
    ),
    ScoringRule(
        "casual_spot",
        lambda v, c: _occasion(c, "casual") and _is(v, "cafe", "park"),
        20,
        "Casual and relaxed",
    ),
    # user preference hints
    ScoringRule(
        "favorite_type",
        lambda v, c: v.source_category in _prefs_list(c, "favorite_types"),
        30,
        "Matches your preferences",
    ),
    ScoringRule(
        "avoid_type",
        lambda v, c: v.source_category in _prefs_list(c, "avoid_types"),
        -20,
        "Not your usual choice",
    ),
    ScoringRule(
        "min_rating_met",
        lambda v, c: _meets_min_rating(v, c),
        15,
        "Meets your quality standards",
    ),
]

FAIRNESS_RULES: List[ScoringRule] = [
    ScoringRule(
        "very_fair",
        lambda v, c: _difference_within(v, 0.0, 2.0),
        20,
        "Very fair for both of you",
        needs_context=False,
    ),
    ScoringRule(
        "fair",
        lambda v, c: _difference_within(v, 2.0, 5.0),
        10,
        "Fair for both of you",
        needs_context=False,
    ),
]

QUALITY_RULES: List[ScoringRule] = [
    ScoringRule("highly_rated", lambda v, c: _rating(v) >= 4.5, 15, "Highly rated", needs_context=False),
    ScoringRule(
        "popular",
        lambda v, c: (v.user_ratings_count or 0) > 100,
        10,
        "Popular choice",
        needs_context=False,
    ),
    ScoringRule(
        "quick_cafe",
        lambda v, c: c.urgency == "quick" and _is(v, "cafe"),
        15,
        "Quick and easy",
    ),
]


def _wants(ctx: ScoringContext, attr: str, tag: str) -> bool:
    return ctx.intent is not None and tag in getattr(ctx.intent, attr)


def _intent_is(ctx: ScoringContext, attr: str, value: str) -> bool:
    return ctx.intent is not None and getattr(ctx.intent, attr) == value


INTENT_RULES: List[ScoringRule] = [
    # atmosphere
    ScoringRule(
        "quiet_cafe",
        lambda v, c: _wants(c, "atmosphere", "quiet") and _is(v, "cafe"),
        25,
        "Quiet atmosphere, good for studying",
    ),
    ScoringRule(
        "romantic_setting",
        lambda v, c: _wants(c, "atmosphere", "romantic") and _is(v, "restaurant") and _rating(v) >= 4.0,
        30,
        "Romantic setting for special occasions",
        bonus="atmosphere_bonus",
    ),
    ScoringRule(
        "formal_restaurant",
        lambda v, c: _wants(c, "atmosphere", "formal") and _is(v, "restaurant"),
        20,
        "Professional business meeting spot",
    ),
    # features
    ScoringRule(
        "wifi_cafe",
        lambda v, c: _wants(c, "features", "wifi") and _is(v, "cafe"),
        20,
        "Great for work with WiFi",
        bonus="feature_bonus",
    ),
    ScoringRule(
        "kid_friendly",
        lambda v, c: _wants(c, "features", "kid-friendly") and _is(v, "park", "shopping_mall"),
        25,
        "Family-friendly with activities for kids",
    ),
    ScoringRule(
        "outdoor_park",
        lambda v, c: _wants(c, "features", "outdoor") and _is(v, "park"),
        20,
        "Perfect outdoor setting",
    ),
    # occasion
    ScoringRule(
        "family_gathering",
        lambda v, c: _intent_is(c, "occasion", "family") and _is(v, "park", "shopping_mall"),
        25,
        "Great for family gatherings",
        bonus="occasion_bonus",
    ),
    ScoringRule(
        "business_cafe",
        lambda v, c: _intent_is(c, "occasion", "business") and _is(v, "cafe"),
        20,
        "Professional meeting environment",
    ),
    ScoringRule(
        "romantic_dinner",
        lambda v, c: _intent_is(c, "occasion", "romantic") and _is(v, "restaurant") and _rating(v) >= 4.0,
        30,
        "Perfect for romantic dinners",
    ),
    # requested time of day
    ScoringRule(
        "requested_time",
        lambda v, c: c.intent is not None and v.source_category == c.intent.place_type,
        25,
        "Right kind of place for the time you asked",
        bonus="time_bonus",
    ),
    # budget
    ScoringRule(
        "budget_friendly",
        lambda v, c: _intent_is(c, "budget", "low") and _rating(v) < 4.0,
        15,
        "Budget-friendly option",
    ),
    ScoringRule(
        "premium",
        lambda v, c: _intent_is(c, "budget", "high") and _rating(v) >= 4.5,
        20,
        "Premium quality experience",
    ),
]

SCORING_RULES: List[ScoringRule] = CONTEXT_RULES + FAIRNESS_RULES + QUALITY_RULES + INTENT_RULES


def score_venue(venue: Venue, context: Optional[ScoringContext] = None) -> Venue:
    ctx = context or ScoringContext()
    total = 0
    reasons: list[str] = []
    for rule in SCORING_RULES:
        if rule.needs_context and context is None:
            continue
        points = rule.points(ctx)
        if points == 0 or not rule.predicate(venue, ctx):
            continue
        total += points
        reasons.append(rule.reason)

    venue.ai_score = float(max(0, total))
    venue.ai_reasons = reasons[:MAX_REASONS]
    return venue


def score_venues(venues: List[Venue], context: Optional[ScoringContext] = None) -> List[Venue]:
    """Attach ai_score / ai_reasons and order by score, highest first.

    The sort is stable, so venues with equal scores keep their fairness order.
    """
    if not venues:
        return []
    scored = [score_venue(v, context) for v in venues]
    scored.sort(key=lambda v: v.ai_score, reverse=True)
    logger.debug("top venue {} scored {:.0f}", scored[0].name, scored[0].ai_score)
    return scored


def generate_insights(venues: List[Venue], context: Optional[ScoringContext] = None) -> List[str]:
    insights: list[str] = []
    top = venues[:3]
    if not top:
        return insights

    occasion = context.occasion if context else None
    if occasion == "business":
        insights.append("Found several professional meeting spots with good ratings and calm settings.")
    elif occasion == "romantic":
        insights.append("Romantic spots with excellent ratings and intimate settings.")
    elif occasion == "family":
        insights.append("Family-friendly options that work for all ages.")

    time_of_day = context.time_of_day if context else None
    if time_of_day == "morning":
        insights.append("Morning picks: coffee shops and breakfast spots come first.")
    elif time_of_day == "evening":
        insights.append("Evening picks: restaurants and dinner spots are highlighted.")

    avg_rating = sum(_rating(v) for v in top) / len(top)
    if avg_rating > 4.0:
        insights.append("High-quality recommendations with excellent ratings.")

    categories = list(dict.fromkeys(v.source_category for v in top))
    if len(categories) > 1:
        insights.append(f"Diverse options: {', '.join(categories)}.")

    return insights
