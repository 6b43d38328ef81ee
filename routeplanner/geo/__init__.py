"""Geolocation helpers for building networks and snapping coordinates."""

from .distance import estimate_travel_time, haversine
from .nearest_point import NearestPointFinder, NearestResult

__all__ = ["haversine", "estimate_travel_time", "NearestPointFinder", "NearestResult"]
