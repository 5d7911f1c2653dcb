"""Keyword-table interpreter for free-text meeting requests.

Every table is evaluated in order against the lower-cased request. Tag-like
fields (atmosphere, features, accessibility, place types) accumulate; the
single-valued fields (intent, place_type, occasion, time_context, budget) are
overwritten by each later hit, so the last matching row wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from models import VENUE_CATEGORIES, ScoringBonuses, SearchIntent, SearchParameters


@dataclass(frozen=True)
class KeywordRule:
    value: str
    keywords: Tuple[str, ...]
    occasion: Optional[str] = None
    search_keywords: Tuple[str, ...] = ()


INTENT_RULES: List[KeywordRule] = [
    KeywordRule("search", ("find", "search", "looking for")),
    KeywordRule("recommend", ("recommend", "suggest")),
]

PLACE_TYPE_RULES: List[KeywordRule] = [
    KeywordRule("cafe", ("coffee", "cafe", "coffee shop"), search_keywords=("coffee", "cafe")),
    KeywordRule(
        "restaurant",
        ("restaurant", "dining", "dinner", "lunch"),
        search_keywords=("restaurant", "dining"),
    ),
    KeywordRule("park", ("park", "outdoor", "garden"), search_keywords=("park", "outdoor")),
    KeywordRule("shopping_mall", ("mall", "shopping"), search_keywords=("shopping", "mall")),
]

ATMOSPHERE_RULES: List[KeywordRule] = [
    KeywordRule("quiet", ("quiet", "peaceful", "calm")),
    KeywordRule("romantic", ("romantic", "intimate", "cozy"), occasion="romantic"),
    KeywordRule("lively", ("lively", "energetic", "vibrant")),
    KeywordRule("casual", ("casual", "relaxed")),
    KeywordRule("formal", ("formal", "professional", "business"), occasion="business"),
]

FEATURE_RULES: List[KeywordRule] = [
    KeywordRule("wifi", ("wifi", "internet", "studying"), occasion="work"),
    KeywordRule("kid-friendly", ("playground", "kid", "family", "children"), occasion="family"),
    KeywordRule("parking", ("parking",)),
    KeywordRule("outdoor", ("outdoor", "patio", "terrace")),
    KeywordRule("bar", ("bar", "alcohol", "drinks")),
]

TIME_RULES: List[KeywordRule] = [
    KeywordRule("morning", ("morning", "breakfast", "coffee")),
    KeywordRule("afternoon", ("afternoon", "lunch")),
    KeywordRule("evening", ("evening", "dinner", "night")),
]

ACCESSIBILITY_RULES: List[KeywordRule] = [
    KeywordRule("wheelchair-accessible", ("wheelchair", "accessible")),
    KeywordRule("family-friendly", ("stroller", "family")),
]

BUDGET_RULES: List[KeywordRule] = [
    KeywordRule("low", ("cheap", "budget", "affordable")),
    KeywordRule("high", ("expensive", "luxury", "upscale")),
]

DEFAULT_PLACE_TYPES = ["cafe", "restaurant", "park"]
DEFAULT_MIN_RATING = 3.5
STRICT_MIN_RATING = 4.0
STRICT_OCCASIONS = {"romantic", "business"}


def _hits(text: str, rules: Iterable[KeywordRule]) -> List[KeywordRule]:
    return [rule for rule in rules if any(kw in text for kw in rule.keywords)]


def parse_query(text: str) -> SearchIntent:
    """Turn a free-text request into a SearchIntent.

    Requests that match nothing come back with the defaults: any place type,
    casual occasion, medium budget and empty tag sets.
    """
    lowered = (text or "").lower()
    intent = SearchIntent()

    for rule in _hits(lowered, INTENT_RULES):
        intent.intent = rule.value

    for rule in _hits(lowered, PLACE_TYPE_RULES):
        intent.place_type = rule.value
        intent.place_types.add(rule.value)
        intent.keywords.extend(kw for kw in rule.search_keywords if kw not in intent.keywords)

    for rule in _hits(lowered, ATMOSPHERE_RULES):
        intent.atmosphere.add(rule.value)
        if rule.occasion:
            intent.occasion = rule.occasion

    for rule in _hits(lowered, FEATURE_RULES):
        intent.features.add(rule.value)
        if rule.occasion:
            intent.occasion = rule.occasion

    for rule in _hits(lowered, TIME_RULES):
        intent.time_context = rule.value

    for rule in _hits(lowered, ACCESSIBILITY_RULES):
        intent.accessibility.add(rule.value)

    for rule in _hits(lowered, BUDGET_RULES):
        intent.budget = rule.value

    return intent


def _requested_time_bonus(intent: SearchIntent) -> int:
    if intent.time_context == "morning" and intent.place_type == "cafe":
        return 25
    if intent.time_context == "evening" and intent.place_type == "restaurant":
        return 25
    return 0


def build_search_parameters(intent: SearchIntent) -> SearchParameters:
    """Map an intent onto the categories to query, a rating floor and scoring bonuses."""
    place_types = [c for c in VENUE_CATEGORIES if c in intent.place_types]
    if not place_types:
        place_types = list(DEFAULT_PLACE_TYPES)

    min_rating = STRICT_MIN_RATING if intent.occasion in STRICT_OCCASIONS else DEFAULT_MIN_RATING

    bonuses = ScoringBonuses(
        time_bonus=_requested_time_bonus(intent),
        atmosphere_bonus=30 if "romantic" in intent.atmosphere else 0,
        feature_bonus=20 if "wifi" in intent.features else 0,
        occasion_bonus=25 if intent.occasion == "family" else 0,
    )

    return SearchParameters(
        place_types=place_types,
        keywords=list(intent.keywords),
        min_rating=min_rating,
        time_context=intent.time_context,
        occasion=intent.occasion,
        atmosphere=sorted(intent.atmosphere),
        features=sorted(intent.features),
        budget=intent.budget,
        bonuses=bonuses,
    )


def generate_suggestions(intent: SearchIntent) -> List[str]:
    suggestions: list[str] = []

    if intent.place_type == "cafe" and "quiet" in intent.atmosphere:
        suggestions.append("Perfect for studying or work meetings")
        suggestions.append("Quiet atmosphere with good WiFi")

    if intent.occasion == "romantic":
        suggestions.append("Romantic restaurants with intimate settings")
        suggestions.append("Highly-rated places for special occasions")

    if "kid-friendly" in intent.features:
        suggestions.append("Family-friendly restaurants and parks")
        suggestions.append("Places with playgrounds and kid activities")

    if intent.occasion == "business":
        suggestions.append("Professional meeting spots")
        suggestions.append("Quiet places with good WiFi and accessibility")

    if intent.time_context == "morning":
        suggestions.append("Morning coffee spots and breakfast places")
    if intent.time_context == "evening":
        suggestions.append("Evening dining and entertainment options")

    return suggestions
