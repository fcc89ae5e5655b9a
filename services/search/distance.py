"""Great-circle distance math used by proximity search."""

import math

# Fixed conversion used everywhere distances are reported in miles
MILES_TO_METERS = 1609.34
EARTH_RADIUS_METERS = 6371000


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        lat1, lng1: Latitude and longitude of point 1 (in degrees)
        lat2, lng2: Latitude and longitude of point 2 (in degrees)

    Returns:
        Distance in meters
    """
    d_lat = (lat2 - lat1) * math.pi / 180
    d_lng = (lng2 - lng1) * math.pi / 180

    a = math.sin(d_lat / 2) ** 2 + \
        math.cos(lat1 * math.pi / 180) * math.cos(lat2 * math.pi / 180) * math.sin(d_lng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def meters_to_miles(meters: float) -> float:
    return meters / MILES_TO_METERS


def miles_to_meters(miles: float) -> float:
    return miles * MILES_TO_METERS
