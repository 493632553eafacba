"""Great-circle distance helpers (spherical Earth, haversine)."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

EARTH_RADIUS_KM = 6371.0
KM_TO_MILES = 0.621371
MILES_TO_KM = 1.60934


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometers between two WGS84 points given in decimal degrees."""

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(lon2) - math.radians(lon1)
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def haversine_km_many(lat: float, lon: float, lats: Sequence[float], lons: Sequence[float]) -> np.ndarray:
    """Vectorised ``haversine_km`` from one point to many, same formula."""

    lats_rad = np.radians(np.asarray(lats, dtype=float))
    lons_rad = np.radians(np.asarray(lons, dtype=float))
    lat_rad = math.radians(lat)
    dlat = lats_rad - lat_rad
    dlon = lons_rad - math.radians(lon)
    a = np.sin(dlat / 2) ** 2 + math.cos(lat_rad) * np.cos(lats_rad) * np.sin(dlon / 2) ** 2
    # rounding can push a a hair past 1 for antipodal points
    a = np.clip(a, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def km_to_miles(km: float) -> float:
    return km * KM_TO_MILES


def miles_to_km(miles: float) -> float:
    return miles * MILES_TO_KM


__all__ = [
    "EARTH_RADIUS_KM",
    "haversine_km",
    "haversine_km_many",
    "km_to_miles",
    "miles_to_km",
]
