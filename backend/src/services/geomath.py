"""Spherical geometry on a mean-radius Earth."""

from __future__ import annotations

import math

from models import Coordinate


EARTH_RADIUS_KM = 6371.0


def to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0


def to_degrees(radians: float) -> float:
    return radians * 180.0 / math.pi


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle (haversine) distance in kilometers."""
    phi1 = to_radians(a.lat)
    phi2 = to_radians(b.lat)
    dphi = to_radians(b.lat - a.lat)
    dlambda = to_radians(b.lng - a.lng)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def spherical_midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    """True geographic midpoint of two points.

    Both points are projected onto the unit sphere, averaged component-wise
    and projected back, so the result stays correct across the antimeridian
    and at high latitudes where a plain lat/lng average drifts.
    """
    lat1, lng1 = to_radians(a.lat), to_radians(a.lng)
    lat2, lng2 = to_radians(b.lat), to_radians(b.lng)

    x = (math.cos(lat1) * math.cos(lng1) + math.cos(lat2) * math.cos(lng2)) / 2
    y = (math.cos(lat1) * math.sin(lng1) + math.cos(lat2) * math.sin(lng2)) / 2
    z = (math.sin(lat1) + math.sin(lat2)) / 2

    lng = math.atan2(y, x)
    lat = math.atan2(z, math.sqrt(x * x + y * y))
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValueError("non-finite midpoint")
    # atan2 is bounded by pi, the clamp only absorbs rounding at the edges
    return Coordinate(
        lat=max(-90.0, min(90.0, to_degrees(lat))),
        lng=max(-180.0, min(180.0, to_degrees(lng))),
    )


def arithmetic_midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    """Plain mean of the raw lat/lng pairs; biased near the poles and antimeridian."""
    return Coordinate(lat=(a.lat + b.lat) / 2.0, lng=(a.lng + b.lng) / 2.0)
