from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Tuple

import requests
from loguru import logger

from config import Configuration
from models import Coordinate, GeocodeResult, PlaceDetails, Review, Venue


class PlacesError(RuntimeError):
    pass


@dataclass
class _RetryPolicy:
    retries: int = 3
    base_delay: float = 0.5


# statuses the Places / Geocoding APIs use for "worked, nothing found"
_EMPTY_STATUSES = {"ZERO_RESULTS"}
_RETRY_STATUSES = {"OVER_QUERY_LIMIT", "UNKNOWN_ERROR"}

DETAIL_FIELDS = "reviews,website,url,photos,editorial_summary,menu"
PHOTO_MAX_WIDTH = 400


class PlacesClient:
    def __init__(self, cfg: Configuration) -> None:
        self.cfg = cfg
        self.base = cfg.places_base_url.rstrip("/")
        self.session = requests.Session()
        self._cache_ttl = 60 * 30  # 30 minutes
        self._cache_max = 128
        self._geocode_cache: OrderedDict[str, Tuple[float, Optional[GeocodeResult]]] = OrderedDict()
        self._places_cache: OrderedDict[str, Tuple[float, List[Venue]]] = OrderedDict()
        self._details_cache: OrderedDict[str, Tuple[float, PlaceDetails]] = OrderedDict()
        # the client is shared by the category search workers
        self._cache_lock = threading.Lock()
        self._policy = _RetryPolicy()

    def _cache_get(self, cache: OrderedDict[str, Tuple[float, Any]], key: str):  # type: ignore[valid-type]
        with self._cache_lock:
            entry = cache.get(key)
            if not entry:
                return None
            ts, value = entry
            if time.time() - ts > self._cache_ttl:
                cache.pop(key, None)
                return None
            cache.move_to_end(key)
            return value

    def _cache_set(self, cache: OrderedDict[str, Tuple[float, Any]], key: str, value):  # type: ignore[valid-type]
        with self._cache_lock:
            if key not in cache and len(cache) >= self._cache_max:
                cache.popitem(last=False)
            cache[key] = (time.time(), value)
            cache.move_to_end(key)

    def _get(self, path: str, params: dict) -> dict:
        url = f"{self.base}{path}"
        params = {**params, "key": self.cfg.google_maps_api_key}
        policy = self._policy
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = self.session.get(url, params=params, timeout=self.cfg.places_timeout)
            except requests.RequestException as exc:  # network error
                if attempt <= policy.retries:
                    time.sleep(policy.base_delay * attempt)
                    continue
                raise PlacesError(f"request error: {exc}")

            if resp.status_code in (429, 500, 502, 503, 504):
                if attempt <= policy.retries:
                    time.sleep(policy.base_delay * attempt)
                    continue
                raise PlacesError(f"upstream {resp.status_code}: {resp.text[:300]}")

            if not resp.ok:
                raise PlacesError(f"upstream {resp.status_code}: {resp.text[:300]}")

            try:
                payload = resp.json()
            except ValueError:
                raise PlacesError("invalid json response")

            status = payload.get("status", "OK")
            if status == "OK" or status in _EMPTY_STATUSES:
                return payload
            if status in _RETRY_STATUSES and attempt <= policy.retries:
                time.sleep(policy.base_delay * attempt)
                continue
            message = payload.get("error_message") or ""
            raise PlacesError(f"api status {status}: {message}".strip())

    @staticmethod
    def _parse_geocode(payload: dict) -> Optional[GeocodeResult]:
        results = payload.get("results") or []
        if not results:
            return None
        first = results[0]
        loc = (first.get("geometry") or {}).get("location") or {}
        lat = loc.get("lat")
        lng = loc.get("lng")
        if lat is None or lng is None:
            return None
        return GeocodeResult(
            location=Coordinate(lat=float(lat), lng=float(lng)),
            formatted_address=first.get("formatted_address"),
        )

    def geocode(self, address: str, *, lang: Optional[str] = None) -> Optional[GeocodeResult]:
        lang = lang or self.cfg.lang_default
        key = f"geocode:{lang}:{address.strip().lower()}"
        cached = self._cache_get(self._geocode_cache, key)
        if cached is not None:
            return cached
        payload = self._get("/geocode/json", {"address": address, "language": lang})
        result = self._parse_geocode(payload)
        if result is not None:
            self._cache_set(self._geocode_cache, key, result)
        return result

    def reverse_geocode(self, location: Coordinate, *, lang: Optional[str] = None) -> Optional[GeocodeResult]:
        lang = lang or self.cfg.lang_default
        key = f"reverse:{lang}:{location.lat:.5f},{location.lng:.5f}"
        cached = self._cache_get(self._geocode_cache, key)
        if cached is not None:
            return cached
        payload = self._get(
            "/geocode/json",
            {"latlng": f"{location.lat},{location.lng}", "language": lang},
        )
        result = self._parse_geocode(payload)
        if result is not None:
            self._cache_set(self._geocode_cache, key, result)
        return result

    @staticmethod
    def _parse_places(results: List[dict], category: str) -> List[Venue]:
        venues: list[Venue] = []
        for item in results:
            loc = (item.get("geometry") or {}).get("location") or {}
            lat = loc.get("lat")
            lng = loc.get("lng")
            place_id = item.get("place_id")
            if lat is None or lng is None or not place_id:
                continue
            photos = item.get("photos") or []
            rating = item.get("rating")
            count = item.get("user_ratings_total")
            try:
                location = Coordinate(lat=float(lat), lng=float(lng))
            except ValueError:
                logger.debug("skipping {} with invalid location {},{}", item.get("name"), lat, lng)
                continue
            venues.append(
                Venue(
                    name=str(item.get("name") or "Unnamed place"),
                    address=item.get("vicinity") or item.get("formatted_address"),
                    location=location,
                    source_category=category,
                    place_id=str(place_id),
                    rating=float(rating) if isinstance(rating, (int, float)) else None,
                    user_ratings_count=int(count) if isinstance(count, (int, float)) else None,
                    types=[str(t) for t in (item.get("types") or [])],
                    photo_reference=(photos[0] or {}).get("photo_reference") if photos else None,
                )
            )
        return venues

    def nearby_search(
        self,
        center: Coordinate,
        *,
        radius_m: int,
        place_type: str,
        keyword: Optional[str] = None,
        lang: Optional[str] = None,
    ) -> List[Venue]:
        lang = lang or self.cfg.lang_default
        key = f"nearby:{place_type}:{keyword or '*'}:{lang}:{center.lat:.4f},{center.lng:.4f}:{radius_m}"
        cached = self._cache_get(self._places_cache, key)
        if cached is not None:
            return [replace(v) for v in cached]
        params = {
            "location": f"{center.lat},{center.lng}",
            "radius": radius_m,
            "type": place_type,
            "language": lang,
        }
        if keyword:
            params["keyword"] = keyword
        payload = self._get("/place/nearbysearch/json", params)
        results = self._parse_places(payload.get("results") or [], place_type)
        self._cache_set(self._places_cache, key, [replace(v) for v in results])
        return results

    @staticmethod
    def _parse_details(result: dict) -> PlaceDetails:
        reviews = [
            Review(
                author=str(r.get("author_name") or "Anonymous"),
                rating=float(r["rating"]) if isinstance(r.get("rating"), (int, float)) else None,
                text=str(r.get("text") or ""),
                relative_time=r.get("relative_time_description"),
            )
            for r in (result.get("reviews") or [])
        ]
        photos = result.get("photos") or []
        menu = result.get("menu")
        return PlaceDetails(
            reviews=reviews,
            menu_url=menu if isinstance(menu, str) and menu else None,
            website=result.get("website"),
            photo_reference=(photos[0] or {}).get("photo_reference") if photos else None,
        )

    def place_details(self, place_id: str, *, lang: Optional[str] = None) -> Optional[PlaceDetails]:
        """Reviews, menu link, website and first photo of one place; None when Google has nothing."""
        lang = lang or self.cfg.lang_default
        key = f"details:{lang}:{place_id}"
        cached = self._cache_get(self._details_cache, key)
        if cached is not None:
            return cached
        payload = self._get(
            "/place/details/json",
            {"place_id": place_id, "fields": DETAIL_FIELDS, "language": lang},
        )
        result = payload.get("result")
        if not result:
            return None
        details = self._parse_details(result)
        self._cache_set(self._details_cache, key, details)
        return details

    def photo_url(self, photo_reference: str, *, max_width: int = PHOTO_MAX_WIDTH) -> str:
        # the Places photo endpoint redirects to the image itself
        return (
            f"{self.base}/place/photo?maxwidth={max_width}"
            f"&photoreference={photo_reference}&key={self.cfg.google_maps_api_key}"
        )
