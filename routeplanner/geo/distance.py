"""Distance and travel-time estimates between coordinates."""

import math

# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        lat1: Latitude of first point (degrees)
        lon1: Longitude of first point (degrees)
        lat2: Latitude of second point (degrees)
        lon2: Longitude of second point (degrees)

    Returns:
        Distance in kilometers
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def estimate_travel_time(distance_km: float, speed_kmh: float) -> float:
    """
    Estimate travel time in minutes at a constant average speed.

    Raises:
        ValueError: if speed_kmh is not positive
    """
    if speed_kmh <= 0:
        raise ValueError(f"Speed must be positive, got {speed_kmh}")
    return distance_km / speed_kmh * 60
