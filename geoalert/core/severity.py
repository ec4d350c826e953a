"""Severity degradation policy - Pure functions.

Alert urgency is reduced as distance from the epicenter grows. The
severity scale is closed: critical > warning > info.
"""

from geoalert.core.errors import RequestError
from geoalert.core.geo import ZONE_IMMEDIATE, ZONE_KINDS, ZONE_NEARBY, ZONE_REGIONAL


SEVERITY_CRITICAL = "critical"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"

# Most severe first
SEVERITIES = (SEVERITY_CRITICAL, SEVERITY_WARNING, SEVERITY_INFO)

# One step down the scale, floored at info
_REDUCED = {
    SEVERITY_CRITICAL: SEVERITY_WARNING,
    SEVERITY_WARNING: SEVERITY_INFO,
    SEVERITY_INFO: SEVERITY_INFO,
}


def validate_severity(severity: str) -> str:
    """Reject severities outside the closed scale.

    Raises:
        RequestError: If severity is unknown
    """
    if severity not in SEVERITIES:
        raise RequestError(
            f"Unknown severity '{severity}', expected one of {', '.join(SEVERITIES)}"
        )
    return severity


def reduce_severity(severity: str) -> str:
    """Apply one degradation step (critical->warning, warning->info, info->info).

    Pure function.
    """
    return _REDUCED[severity]


def is_zone_materialized(original_severity: str, zone_kind: str) -> bool:
    """Whether a zone exists at all for an alert of this severity.

    Pure function. The regional band is only alerted for critical alerts.
    """
    if zone_kind == ZONE_REGIONAL:
        return original_severity == SEVERITY_CRITICAL
    return zone_kind in ZONE_KINDS


def degrade(severity: str, zone_kind: str) -> str:
    """Effective severity of an alert within a zone.

    Pure function. Callers must pass a validated severity and a known
    zone kind; anything else is a programming error and raises KeyError.

    Args:
        severity: Original alert severity
        zone_kind: One of immediate/nearby/regional

    Returns:
        Severity for that zone
    """
    if severity not in _REDUCED:
        raise KeyError(severity)

    if zone_kind == ZONE_IMMEDIATE:
        return severity
    if zone_kind == ZONE_NEARBY:
        return reduce_severity(severity)
    if zone_kind == ZONE_REGIONAL:
        return SEVERITY_INFO
    raise KeyError(zone_kind)
