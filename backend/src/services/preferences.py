"""Stand-in for a preference-learning service.

Nothing is stored: defaults are canned and "learning" only reports what a
real learner would take from the interaction.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from models import UserPreferences, Venue


ACTIONS = {"selected", "rejected"}


def default_preferences(user_id: str) -> UserPreferences:
    if not user_id:
        raise ValueError("user id is required")
    return UserPreferences()


def _personalized_recommendations(venue: Optional[Venue], occasion: Optional[str]) -> List[str]:
    recommendations: list[str] = []
    category = venue.source_category if venue else None

    if category == "cafe":
        recommendations.append("Try similar coffee shops in the area")
        recommendations.append("Look for places with good WiFi and a quiet atmosphere")
    if category == "restaurant":
        recommendations.append("Consider restaurants with a similar cuisine")
        recommendations.append("Look for places with good ratings and reviews")
    if occasion == "business":
        recommendations.append("Professional meeting spots with a quiet atmosphere")
        recommendations.append("Places with good accessibility and parking")

    return recommendations


def learn_from_behavior(
    user_id: str,
    action: str,
    venue: Optional[Venue] = None,
    occasion: Optional[str] = None,
) -> Dict[str, Any]:
    if not user_id or not action:
        raise ValueError("user id and action are required")
    if action not in ACTIONS:
        raise ValueError(f"unknown action: {action}")

    signals: list[str] = []
    if venue is not None:
        if action == "selected":
            signals.append(f"likes {venue.source_category} places")
            if venue.rating is not None and venue.rating > 4.0:
                signals.append("prefers high-rated places")
            if occasion:
                signals.append(f"likes {occasion} occasions")
        else:
            signals.append(f"avoids {venue.source_category} places")

    for signal in signals:
        logger.info("preference signal user={} {}", user_id, signal)

    return {
        "learned": bool(signals),
        "signals": signals,
        "recommendations": _personalized_recommendations(venue, occasion),
    }
