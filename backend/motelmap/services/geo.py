"""Great-circle distance and proximity ranking."""
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, TypeVar

from motelmap.constants import EARTH_RADIUS_KM

T = TypeVar("T")


@dataclass(frozen=True)
class Coordinates:
    """A point in degrees."""
    lat: float
    lng: float


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometers between two points given in degrees."""
    p1 = math.radians(lat1)
    p2 = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = math.sin(dlat / 2) ** 2 + math.cos(p1) * math.cos(p2) * (math.sin(dlng / 2) ** 2)
    # Rounding can push a slightly past 1 for antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return EARTH_RADIUS_KM * c


def distance_to(origin: Coordinates, location: dict) -> float:
    """Distance from origin to a stored {"lat", "lng"} location."""
    return haversine_km(origin.lat, origin.lng, float(location["lat"]), float(location["lng"]))


def rank_by_proximity(listings: Sequence[T], origin: Optional[Coordinates]) -> List[Tuple[T, Optional[float]]]:
    """
    Order listings by distance from origin.

    Without an origin the input order is kept and no distances are reported.
    With one, listings are sorted ascending by distance; equal distances keep
    their input order.

    Args:
        listings: Objects with a ``location`` mapping holding lat/lng
        origin: Caller location, or None when unavailable

    Returns:
        List of (listing, distance_km) pairs
    """
    if origin is None:
        return [(listing, None) for listing in listings]

    ranked = [(listing, distance_to(origin, listing.location)) for listing in listings]
    ranked.sort(key=lambda pair: pair[1])
    return ranked
