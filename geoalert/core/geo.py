"""Geographic calculations - Pure functions.

This module provides distance calculations and zone classification of a
location catalog around an alert epicenter. All functions are pure with
no side effects.

Location names are matched with a deliberately fuzzy policy
(bidirectional, case-insensitive substring). It can produce false
positives for overlapping names ("Navi Mumbai" vs "Mumbai"); this is a
known approximation of free-text location naming.
"""

import math
from dataclasses import dataclass

from geoalert.core.errors import InvalidCoordinatesError


# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Zone kinds, innermost first
ZONE_IMMEDIATE = "immediate"
ZONE_NEARBY = "nearby"
ZONE_REGIONAL = "regional"
ZONE_KINDS = (ZONE_IMMEDIATE, ZONE_NEARBY, ZONE_REGIONAL)

# Upper edge of each band (inclusive)
ZONE_RADII_KM = {
    ZONE_IMMEDIATE: 5,
    ZONE_NEARBY: 25,
    ZONE_REGIONAL: 100,
}


@dataclass(frozen=True)
class Coordinates:
    """A point in decimal degrees.

    Attributes:
        lat: Latitude
        lng: Longitude
    """
    lat: float
    lng: float


@dataclass(frozen=True)
class LocationEntry:
    """A known place in the location catalog.

    Attributes:
        name: City or locality name (e.g., "Chennai")
        coordinates: Location coordinates
        state: State or administrative region (e.g., "Tamil Nadu")
        region: Broad region (e.g., "South")
    """
    name: str
    coordinates: Coordinates
    state: str = ""
    region: str = ""


@dataclass(frozen=True)
class ZoneBuckets:
    """Partition of a location catalog into distance bands.

    Attributes:
        immediate: Entries 0-5 km from the epicenter
        nearby: Entries >5-25 km from the epicenter
        regional: Entries >25-100 km from the epicenter
    """
    immediate: tuple[LocationEntry, ...] = ()
    nearby: tuple[LocationEntry, ...] = ()
    regional: tuple[LocationEntry, ...] = ()

    def for_kind(self, kind: str) -> tuple[LocationEntry, ...]:
        """Get the entries for a zone kind."""
        return getattr(self, kind)


def validate_coordinates(coordinates: Coordinates) -> Coordinates:
    """Reject NaN or out-of-range coordinates.

    Pure function.

    Args:
        coordinates: Coordinates to check

    Returns:
        The same coordinates, if valid

    Raises:
        InvalidCoordinatesError: If either value is NaN or out of range
    """
    lat, lng = coordinates.lat, coordinates.lng

    if math.isnan(lat) or math.isnan(lng):
        raise InvalidCoordinatesError(f"Coordinates must be numbers, got ({lat}, {lng})")

    if not -90 <= lat <= 90:
        raise InvalidCoordinatesError(f"Latitude {lat} out of range [-90, 90]")

    if not -180 <= lng <= 180:
        raise InvalidCoordinatesError(f"Longitude {lng} out of range [-180, 180]")

    return coordinates


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    # Convert to radians
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    # Haversine formula
    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_between(a: Coordinates, b: Coordinates) -> float:
    """Distance in kilometers between two coordinate pairs."""
    return calculate_distance(a.lat, a.lng, b.lat, b.lng)


def classify_distance(distance_km: float) -> str | None:
    """Map a distance to its zone kind.

    Pure function. Each band is inclusive at its upper edge, so exactly
    5.0 km is immediate and exactly 25.0 km is nearby.

    Args:
        distance_km: Distance from the epicenter

    Returns:
        Zone kind, or None if beyond the regional band
    """
    for kind in ZONE_KINDS:
        if distance_km <= ZONE_RADII_KM[kind]:
            return kind
    return None


def classify_locations(
    epicenter: Coordinates,
    catalog: list[LocationEntry],
) -> ZoneBuckets:
    """Partition a location catalog into zone buckets around an epicenter.

    Pure function. Entries beyond 100 km are excluded. Catalog order is
    preserved within each bucket.

    Args:
        epicenter: Alert coordinates
        catalog: Known locations

    Returns:
        ZoneBuckets with disjoint immediate/nearby/regional entries

    Raises:
        InvalidCoordinatesError: If the epicenter is invalid
    """
    validate_coordinates(epicenter)

    buckets: dict[str, list[LocationEntry]] = {kind: [] for kind in ZONE_KINDS}

    for entry in catalog:
        kind = classify_distance(distance_between(epicenter, entry.coordinates))
        if kind is not None:
            buckets[kind].append(entry)

    return ZoneBuckets(
        immediate=tuple(buckets[ZONE_IMMEDIATE]),
        nearby=tuple(buckets[ZONE_NEARBY]),
        regional=tuple(buckets[ZONE_REGIONAL]),
    )


def names_match(a: str, b: str) -> bool:
    """Fuzzy location-name match policy.

    Pure function. Bidirectional case-insensitive substring match; empty
    names never match.
    """
    a_lower, b_lower = a.strip().lower(), b.strip().lower()
    if not a_lower or not b_lower:
        return False
    return a_lower in b_lower or b_lower in a_lower


def find_location(name: str, catalog: list[LocationEntry]) -> LocationEntry | None:
    """Find the first catalog entry whose name fuzzy-matches.

    Pure function.
    """
    for entry in catalog:
        if names_match(entry.name, name):
            return entry
    return None


def find_location_coordinates(
    name: str,
    catalog: list[LocationEntry],
) -> Coordinates | None:
    """Resolve a free-text location name to catalog coordinates.

    Pure function.
    """
    entry = find_location(name, catalog)
    return entry.coordinates if entry else None


def find_nearby_locations(
    epicenter: Coordinates,
    catalog: list[LocationEntry],
    radius_km: float = 50.0,
) -> list[tuple[LocationEntry, float]]:
    """Get catalog entries within a radius, sorted by distance.

    Pure function.

    Args:
        epicenter: Center point
        catalog: Known locations
        radius_km: Maximum distance to include

    Returns:
        List of (entry, distance_km) tuples, nearest first
    """
    nearby = []
    for entry in catalog:
        distance = distance_between(epicenter, entry.coordinates)
        if distance <= radius_km:
            nearby.append((entry, distance))

    return sorted(nearby, key=lambda x: x[1])


def parse_location_from_text(
    text: str,
    catalog: list[LocationEntry],
) -> Coordinates | None:
    """Find coordinates for the first known place mentioned in free text.

    Pure function. City names are tried first, then state names; a state
    match resolves to that state's first catalog entry.
    """
    lowered = text.lower()

    for entry in catalog:
        if entry.name and entry.name.lower() in lowered:
            return entry.coordinates

    for entry in catalog:
        if entry.state and entry.state.lower() in lowered:
            return locations_in_state(entry.state, catalog)[0].coordinates

    return None


def locations_in_state(state: str, catalog: list[LocationEntry]) -> list[LocationEntry]:
    """Catalog entries belonging to a state (case-insensitive)."""
    wanted = state.strip().lower()
    return [e for e in catalog if e.state.lower() == wanted]


def locations_in_region(region: str, catalog: list[LocationEntry]) -> list[LocationEntry]:
    """Catalog entries belonging to a broad region (case-insensitive)."""
    wanted = region.strip().lower()
    return [e for e in catalog if e.region.lower() == wanted]
