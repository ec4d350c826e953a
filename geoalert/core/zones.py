"""Alert zone definition - Pure functions.

Combines the geo classifier with the severity policy: one Zone per
non-empty, materialized distance band around the epicenter. Zones are a
pure function of the epicenter and are recomputed for every alert.
"""

from dataclasses import dataclass

from geoalert.core.geo import (
    ZONE_KINDS,
    ZONE_RADII_KM,
    Coordinates,
    LocationEntry,
    classify_locations,
)
from geoalert.core.severity import degrade, is_zone_materialized, validate_severity


@dataclass(frozen=True)
class Zone:
    """One concentric band around an epicenter.

    Attributes:
        kind: immediate, nearby or regional
        severity: Effective severity for recipients in this zone
        member_location_names: Catalog names inside the band
        radius_km: Outer radius of the band
    """
    kind: str
    severity: str
    member_location_names: frozenset[str]
    radius_km: int


def define_zones(
    epicenter: Coordinates,
    original_severity: str,
    catalog: list[LocationEntry],
) -> list[Zone]:
    """Define the alert zones for an epicenter.

    Pure function. Empty bands produce no zone, and the regional band is
    only materialized for critical alerts.

    Args:
        epicenter: Alert coordinates
        original_severity: The alert's own severity
        catalog: Known locations

    Returns:
        Zones ordered immediate, nearby, regional
    """
    validate_severity(original_severity)
    buckets = classify_locations(epicenter, catalog)

    zones = []
    for kind in ZONE_KINDS:
        members = buckets.for_kind(kind)
        if not members or not is_zone_materialized(original_severity, kind):
            continue

        zones.append(Zone(
            kind=kind,
            severity=degrade(original_severity, kind),
            member_location_names=frozenset(e.name for e in members),
            radius_km=ZONE_RADII_KM[kind],
        ))

    return zones
