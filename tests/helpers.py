"""
Shared helpers for tests.
"""
import math

from neighbo.core.geohash import EARTH_RADIUS_KM


def destination(lat: float, lng: float, bearing_deg: float, dist_km: float):
    """Point reached travelling dist_km from (lat, lng) along a great circle."""
    phi1 = math.radians(lat)
    lam1 = math.radians(lng)
    theta = math.radians(bearing_deg)
    delta = dist_km / EARTH_RADIUS_KM
    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    )
    lam2 = lam1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    return math.degrees(phi2), (math.degrees(lam2) + 540) % 360 - 180
