from __future__ import annotations

import threading
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from config import Configuration
from models import (
    Coordinate,
    DistanceScore,
    Review,
    ScoringContext,
    SearchIntent,
    SearchParameters,
    UserPreferences,
    Venue,
)
from services.pipeline import find_meeting_spots
from services.places_client import PlacesClient, PlacesError
from services.preferences import default_preferences, learn_from_behavior
from services.query_interpreter import build_search_parameters, generate_suggestions, parse_query
from services.report import build_report
from services.scorer import generate_insights, score_venues


load_dotenv()

app = FastAPI(title="Meetup Spot Finder")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class LocationPayload(BaseModel):
    lat: float
    lng: float


class DistanceScorePayload(BaseModel):
    distance_from_origin1: float
    distance_from_origin2: float
    distance_difference: float
    total_distance: float
    balanced_score: float


class ReviewPayload(BaseModel):
    author: str
    rating: Optional[float] = None
    text: str = ""
    relative_time: Optional[str] = None


class PlacePayload(BaseModel):
    name: str
    address: Optional[str] = None
    location: LocationPayload
    source_category: str
    place_id: str
    rating: Optional[float] = None
    user_ratings_count: Optional[int] = None
    types: List[str] = []
    distance_score: Optional[DistanceScorePayload] = None
    ai_score: float = 0.0
    ai_reasons: List[str] = []
    photo_url: Optional[str] = None
    reviews: List[ReviewPayload] = []
    menu_url: Optional[str] = None


class PreferencesPayload(BaseModel):
    favorite_types: List[str] = []
    avoid_types: List[str] = []
    min_rating: Optional[float] = None
    max_distance_km: float = 20.0
    quiet: bool = False
    romantic: bool = False
    family_friendly: bool = False
    business: bool = False
    budget: str = "medium"


class ContextPayload(BaseModel):
    time_of_day: Optional[str] = Field(None, description="morning / afternoon / evening")
    weather: Optional[str] = Field(None, description="sunny / rainy")
    occasion: Optional[str] = Field(None, description="business / romantic / family / casual")
    urgency: Optional[str] = Field(None, description="quick")


class MidpointRequest(BaseModel):
    location1: Optional[LocationPayload] = None
    location2: Optional[LocationPayload] = None
    nlp_query: Optional[str] = Field(None, description="Optional free-text request, e.g. 'quiet cafe with wifi'")
    weather: Optional[str] = None
    urgency: Optional[str] = None
    user_id: Optional[str] = Field(None, description="Apply the user's stored preference hints")


class MidpointResponse(BaseModel):
    midpoint: LocationPayload
    midpoint_fallback: bool
    places: List[PlacePayload]
    ai_enabled: bool = True
    search_params: Optional[Dict[str, Any]] = None
    insights: List[str] = []
    recommendations_markdown: str


class NlpSearchRequest(BaseModel):
    query: str = Field(..., description="Natural-language description of the meeting spot")


class AIRecommendationsRequest(BaseModel):
    places: List[PlacePayload]
    user_preferences: Optional[PreferencesPayload] = None
    context: Optional[ContextPayload] = None


class PreferenceActionRequest(BaseModel):
    user_id: str
    action: str = Field(..., description="selected / rejected")
    place: Optional[PlacePayload] = None
    occasion: Optional[str] = None


class GeocodeRequest(BaseModel):
    address: str


_client_lock = threading.Lock()
_client: Optional[PlacesClient] = None


def _places_client(cfg: Configuration) -> PlacesClient:
    """Process-wide client so its response cache outlives a single request.

    Rebuilt when the configuration read from the environment changes.
    """
    global _client
    with _client_lock:
        if _client is None or _client.cfg != cfg:
            _client = PlacesClient(cfg)
        return _client


def _to_coordinate(payload: Optional[LocationPayload]) -> Optional[Coordinate]:
    if payload is None:
        return None
    return Coordinate(lat=payload.lat, lng=payload.lng)


def _to_venue(p: PlacePayload) -> Venue:
    return Venue(
        name=p.name,
        address=p.address,
        location=Coordinate(lat=p.location.lat, lng=p.location.lng),
        source_category=p.source_category,
        place_id=p.place_id,
        rating=p.rating,
        user_ratings_count=p.user_ratings_count,
        types=list(p.types),
        distance_score=DistanceScore(**p.distance_score.model_dump()) if p.distance_score else None,
        photo_url=p.photo_url,
        reviews=[Review(**r.model_dump()) for r in p.reviews],
        menu_url=p.menu_url,
    )


def _to_payload(v: Venue) -> PlacePayload:
    return PlacePayload(
        name=v.name,
        address=v.address,
        location=LocationPayload(lat=v.location.lat, lng=v.location.lng),
        source_category=v.source_category,
        place_id=v.place_id,
        rating=v.rating,
        user_ratings_count=v.user_ratings_count,
        types=v.types,
        distance_score=DistanceScorePayload(**asdict(v.distance_score)) if v.distance_score else None,
        ai_score=v.ai_score,
        ai_reasons=v.ai_reasons,
        photo_url=v.photo_url,
        reviews=[ReviewPayload(**asdict(r)) for r in v.reviews],
        menu_url=v.menu_url,
    )


def _intent_dict(intent: SearchIntent) -> Dict[str, Any]:
    data = asdict(intent)
    for key in ("place_types", "atmosphere", "features", "accessibility"):
        data[key] = sorted(data[key])
    return data


def _params_dict(params: SearchParameters) -> Dict[str, Any]:
    return asdict(params)


@app.get("/healthz")
def healthz() -> dict:
    cfg = Configuration.from_env()
    logger.info("cfg: {}", cfg.log_summary())
    return {"status": "ok"}


@app.post("/midpoint", response_model=MidpointResponse)
def midpoint(req: MidpointRequest) -> MidpointResponse:
    try:
        cfg = Configuration.from_env()
        cfg.require_places_api_key()
        preferences = default_preferences(req.user_id) if req.user_id else None
        client = _places_client(cfg)
        result = find_meeting_spots(
            cfg,
            client,
            _to_coordinate(req.location1),
            _to_coordinate(req.location2),
            query=req.nlp_query,
            weather=req.weather,
            urgency=req.urgency,
            preferences=preferences,
            details=client,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.exception("meeting spot search failed: {}", exc)
        raise HTTPException(status_code=500, detail="internal error")

    return MidpointResponse(
        midpoint=LocationPayload(lat=result.midpoint.lat, lng=result.midpoint.lng),
        midpoint_fallback=result.midpoint_fallback,
        places=[_to_payload(v) for v in result.venues],
        search_params=_params_dict(result.search_parameters) if result.search_parameters else None,
        insights=result.insights,
        recommendations_markdown=build_report(result),
    )


@app.post("/nlp-search")
def nlp_search(req: NlpSearchRequest) -> dict:
    if not req.query.strip():
        raise HTTPException(status_code=400, detail="Query is required")
    intent = parse_query(req.query)
    params = build_search_parameters(intent)
    return {
        "success": True,
        "original_query": req.query,
        "parsed_query": _intent_dict(intent),
        "search_params": _params_dict(params),
        "suggestions": generate_suggestions(intent),
    }


@app.post("/ai-recommendations")
def ai_recommendations(req: AIRecommendationsRequest) -> dict:
    try:
        venues = [_to_venue(p) for p in req.places]
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    context: Optional[ScoringContext] = None
    if req.context is not None or req.user_preferences is not None:
        ctx = req.context or ContextPayload()
        context = ScoringContext(
            time_of_day=ctx.time_of_day,
            weather=ctx.weather,
            occasion=ctx.occasion,
            urgency=ctx.urgency,
            preferences=UserPreferences(**req.user_preferences.model_dump()) if req.user_preferences else None,
        )

    scored = score_venues(venues, context)
    payloads = [_to_payload(v) for v in scored]
    return {
        "places": payloads,
        "ai_insights": generate_insights(scored, context),
        "total_places": len(payloads),
        "top_recommendation": payloads[0] if payloads else None,
    }


@app.get("/user-preferences")
def get_user_preferences(user_id: str = "") -> dict:
    try:
        return asdict(default_preferences(user_id))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.post("/user-preferences")
def post_user_preferences(req: PreferenceActionRequest) -> dict:
    try:
        venue = _to_venue(req.place) if req.place else None
        learned = learn_from_behavior(req.user_id, req.action, venue, req.occasion)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"success": True, **learned}


@app.post("/geocode")
def geocode(req: GeocodeRequest) -> dict:
    if not req.address.strip():
        raise HTTPException(status_code=400, detail="Address is required")
    try:
        cfg = Configuration.from_env()
        cfg.require_places_api_key()
        result = _places_client(cfg).geocode(req.address)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except PlacesError as exc:
        logger.warning("geocoding failed for {!r}: {}", req.address, exc)
        raise HTTPException(status_code=502, detail="geocoding failed")
    if result is None:
        raise HTTPException(status_code=404, detail="Address not found")
    return {
        "location": {"lat": result.location.lat, "lng": result.location.lng},
        "formatted_address": result.formatted_address,
    }


@app.get("/reverse-geocode")
def reverse_geocode(lat: float, lng: float) -> dict:
    try:
        cfg = Configuration.from_env()
        cfg.require_places_api_key()
        result = _places_client(cfg).reverse_geocode(Coordinate(lat=lat, lng=lng))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except PlacesError as exc:
        logger.warning("reverse geocoding failed for {},{}: {}", lat, lng, exc)
        raise HTTPException(status_code=502, detail="reverse geocoding failed")
    if result is None:
        raise HTTPException(status_code=404, detail="No address for this location")
    return {"formatted_address": result.formatted_address}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8010, reload=True)
