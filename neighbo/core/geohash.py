"""
Geohash utilities for proximity queries.

Provides encoding, decomposition of a (point, radius) disc into a small set of
geohash prefix ranges whose union covers the disc, and great-circle distance.
The decomposition follows the well-known geofire approach: pick the number of
bits whose cell size is at least the radius, sample nine points around the
centre at that precision, and widen each to a [start, end] range. Ranges are
inclusive at both ends; "~" is used as an open upper bound because it sorts
after every base32 character.
"""
import math
from typing import List, Tuple

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
BITS_PER_CHAR = 5
GEOHASH_PRECISION = 10
MAXIMUM_BITS_PRECISION = 22 * BITS_PER_CHAR

# Length of a meridian on Earth, in meters
EARTH_MERI_CIRCUMFERENCE = 40007860
METERS_PER_DEGREE_LATITUDE = 110574
# WGS84 equatorial radius (meters) and eccentricity squared
EARTH_EQ_RADIUS = 6378137.0
E2 = 0.00669447819799
EPSILON = 1e-12

# Mean Earth radius used for great-circle distance
EARTH_RADIUS_KM = 6371.0

# Cells are sized on the WGS84 ellipsoid but distance_km is spherical; the
# ellipsoid can under-estimate the longitude span by up to ~0.4%.
BOUNDS_PADDING = 1.01

# Past this latitude the nine sample points no longer reach every cell a disc
# touches (meridians converge), so the whole latitude band is scanned instead
POLAR_LATITUDE = 85.0
MAX_BAND_RANGES = 64


def validate_location(lat: float, lng: float) -> None:
    """Raise ValueError if the coordinates are not a valid point on Earth."""
    if not isinstance(lat, (int, float)) or math.isnan(lat) or not -90 <= lat <= 90:
        raise ValueError(f"Latitude must be within [-90, 90] (got {lat})")
    if not isinstance(lng, (int, float)) or math.isnan(lng) or not -180 <= lng <= 180:
        raise ValueError(f"Longitude must be within [-180, 180] (got {lng})")


def encode_geohash(lat: float, lng: float, precision: int = GEOHASH_PRECISION) -> str:
    """Encode a point as a geohash of ``precision`` characters."""
    validate_location(lat, lng)
    if precision < 1 or precision > 22:
        raise ValueError(f"Precision must be between 1 and 22 (got {precision})")

    lat_range = [-90.0, 90.0]
    lng_range = [-180.0, 180.0]
    chars = []
    hash_value = 0
    bits = 0
    even = True

    while len(chars) < precision:
        value = lng if even else lat
        rng = lng_range if even else lat_range
        mid = (rng[0] + rng[1]) / 2
        if value > mid:
            hash_value = (hash_value << 1) + 1
            rng[0] = mid
        else:
            hash_value = hash_value << 1
            rng[1] = mid

        even = not even
        if bits < 4:
            bits += 1
        else:
            bits = 0
            chars.append(BASE32[hash_value])
            hash_value = 0

    return "".join(chars)


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle (haversine) distance between two points in kilometers."""
    lat_delta = math.radians(lat2 - lat1)
    lng_delta = math.radians(lng2 - lng1)
    a = (
        math.sin(lat_delta / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(lng_delta / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _meters_to_longitude_degrees(distance: float, latitude: float) -> float:
    radians = math.radians(latitude)
    num = math.cos(radians) * EARTH_EQ_RADIUS * math.pi / 180
    denom = 1 / math.sqrt(1 - E2 * math.sin(radians) * math.sin(radians))
    delta_deg = num * denom
    if delta_deg < EPSILON:
        return 360.0 if distance > 0 else 0.0
    return min(360.0, distance / delta_deg)


def _longitude_bits_for_resolution(resolution: float, latitude: float) -> float:
    degs = _meters_to_longitude_degrees(resolution, latitude)
    if abs(degs) > 0.000001:
        return max(1.0, math.log2(360 / degs))
    return 1.0


def _latitude_bits_for_resolution(resolution: float) -> float:
    return min(math.log2(EARTH_MERI_CIRCUMFERENCE / 2 / resolution), MAXIMUM_BITS_PRECISION)


def _wrap_longitude(longitude: float) -> float:
    if -180 <= longitude <= 180:
        return longitude
    adjusted = longitude + 180
    if adjusted > 0:
        return (adjusted % 360) - 180
    return 180 - (-adjusted % 360)


def _bounding_box_bits(lat: float, size: float) -> int:
    lat_delta_degrees = size / METERS_PER_DEGREE_LATITUDE
    latitude_north = min(90.0, lat + lat_delta_degrees)
    latitude_south = max(-90.0, lat - lat_delta_degrees)
    bits_lat = math.floor(_latitude_bits_for_resolution(size)) * 2
    bits_lng_north = math.floor(_longitude_bits_for_resolution(size, latitude_north)) * 2 - 1
    bits_lng_south = math.floor(_longitude_bits_for_resolution(size, latitude_south)) * 2 - 1
    return min(bits_lat, bits_lng_north, bits_lng_south, MAXIMUM_BITS_PRECISION)


def _bounding_box(lat: float, radius: float) -> Tuple[float, float, float]:
    """(south, north, half-width in longitude degrees) of the box around a disc."""
    lat_degrees = radius / METERS_PER_DEGREE_LATITUDE
    latitude_north = min(90.0, lat + lat_degrees)
    latitude_south = max(-90.0, lat - lat_degrees)
    lng_degs = max(
        _meters_to_longitude_degrees(radius, latitude_north),
        _meters_to_longitude_degrees(radius, latitude_south),
    )
    return latitude_south, latitude_north, lng_degs


def _bounding_box_coordinates(lat: float, lng: float, radius: float) -> List[Tuple[float, float]]:
    latitude_south, latitude_north, lng_degs = _bounding_box(lat, radius)
    west = _wrap_longitude(lng - lng_degs)
    east = _wrap_longitude(lng + lng_degs)
    return [
        (lat, lng),
        (lat, west),
        (lat, east),
        (latitude_north, lng),
        (latitude_north, west),
        (latitude_north, east),
        (latitude_south, lng),
        (latitude_south, west),
        (latitude_south, east),
    ]


def _geohash_range(geohash: str, bits: int) -> Tuple[str, str]:
    precision = math.ceil(bits / BITS_PER_CHAR)
    if len(geohash) < precision:
        return geohash, geohash + "~"

    geohash = geohash[:precision]
    base = geohash[:-1]
    last_value = BASE32.index(geohash[-1])
    significant_bits = bits - len(base) * BITS_PER_CHAR
    unused_bits = BITS_PER_CHAR - significant_bits
    # Drop the unused low bits of the last character
    start_value = (last_value >> unused_bits) << unused_bits
    end_value = start_value + (1 << unused_bits)
    if end_value > 31:
        return base + BASE32[start_value], base + "~"
    return base + BASE32[start_value], base + BASE32[end_value]


def _latitude_band_ranges(south: float, north: float) -> List[Tuple[str, str]]:
    """
    Prefix ranges for every cell touching [south, north] at any longitude.

    Uses the finest precision (at most two characters) that stays within
    MAX_BAND_RANGES cells.
    """
    for chars in (2, 1):
        bits = chars * BITS_PER_CHAR
        lng_cells = 2 ** ((bits + 1) // 2)
        lat_cells = 2 ** (bits // 2)
        row_height = 180.0 / lat_cells
        col_width = 360.0 / lng_cells

        # A point on a row boundary encodes into the row below it
        first_row = max(0, math.ceil((south + 90) / row_height) - 1)
        last_row = min(lat_cells - 1, math.floor((north + 90) / row_height))
        if chars > 1 and (last_row - first_row + 1) * lng_cells > MAX_BAND_RANGES:
            continue

        ranges = []
        for row in range(first_row, last_row + 1):
            for col in range(lng_cells):
                prefix = encode_geohash(
                    -90 + (row + 0.5) * row_height,
                    -180 + (col + 0.5) * col_width,
                    chars,
                )
                ranges.append((prefix, prefix + "~"))
        return sorted(ranges)
    return []


def geohash_query_bounds(lat: float, lng: float, radius_km: float) -> List[Tuple[str, str]]:
    """
    Geohash ranges whose union covers every point within ``radius_km``.

    The ranges are a superset of the disc: callers must still filter
    candidates by exact distance.

    Args:
        lat: Centre latitude in degrees
        lng: Centre longitude in degrees
        radius_km: Radius in kilometers, must be positive

    Returns:
        Deduplicated list of inclusive (start, end) geohash ranges
    """
    validate_location(lat, lng)
    if radius_km <= 0:
        raise ValueError(f"Radius must be positive (got {radius_km})")

    radius = radius_km * 1000 * BOUNDS_PADDING
    south, north, lng_degs = _bounding_box(lat, radius)
    if north >= POLAR_LATITUDE or south <= -POLAR_LATITUDE or lng_degs >= 180:
        return _latitude_band_ranges(south, north)

    query_bits = max(1, _bounding_box_bits(lat, radius))
    precision = math.ceil(query_bits / BITS_PER_CHAR)

    ranges: List[Tuple[str, str]] = []
    for point_lat, point_lng in _bounding_box_coordinates(lat, lng, radius):
        candidate = _geohash_range(encode_geohash(point_lat, point_lng, precision), query_bits)
        if candidate not in ranges:
            ranges.append(candidate)
    return ranges
