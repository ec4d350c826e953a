"""Subscriber targeting rules - Pure functions.

This module decides which subscribers receive a zone's alert. All
functions are pure with no side effects; subscribers are read from an
already-fetched directory snapshot.
"""

from dataclasses import dataclass, field
from typing import Any

from geoalert.core.alert import BASE_LANGUAGE, Alert, Recipient
from geoalert.core.geo import (
    LocationEntry,
    locations_in_region,
    locations_in_state,
    names_match,
)
from geoalert.core.severity import SEVERITIES
from geoalert.core.zones import Zone


@dataclass(frozen=True)
class ChannelOptIns:
    """Per-channel delivery opt-ins."""
    email: bool = False
    sms: bool = False


@dataclass(frozen=True)
class Subscriber:
    """A registered alert subscriber.

    Attributes:
        id: Directory ID
        location_name: Registered city/locality (free text)
        email: Email address (optional)
        phone: Phone number (optional)
        language_preference: Preferred language code
        channel_opt_ins: Which channels the subscriber accepts
        severity_filter: Severities the subscriber wants
        type_filter: Alert types the subscriber wants
        state: Restrict alerts to this state (optional)
        region: Restrict alerts to this broad region (optional)
    """
    id: str
    location_name: str
    email: str | None = None
    phone: str | None = None
    language_preference: str = BASE_LANGUAGE
    channel_opt_ins: ChannelOptIns = field(default_factory=ChannelOptIns)
    severity_filter: frozenset[str] = frozenset()
    type_filter: frozenset[str] = frozenset()
    state: str | None = None
    region: str | None = None


def fuzzy_location_match(subscriber_location: str, zone_location: str) -> bool:
    """Location match policy between a subscriber and a zone member.

    Pure function. Bidirectional case-insensitive substring match. This
    is an approximation: "Mumbai" also matches "Navi Mumbai".
    """
    return names_match(subscriber_location, zone_location)


def matches_zone_location(subscriber: Subscriber, zone: Zone) -> bool:
    """Check if the subscriber's location is one of the zone's members.

    Pure function.
    """
    return any(
        fuzzy_location_match(subscriber.location_name, name)
        for name in sorted(zone.member_location_names)
    )


def matches_severity(subscriber: Subscriber, severity: str) -> bool:
    """Check if the subscriber wants alerts of this severity."""
    return severity in subscriber.severity_filter


def matches_alert_type(subscriber: Subscriber, alert_type: str) -> bool:
    """Check if the subscriber wants alerts of this type."""
    return alert_type in subscriber.type_filter


def has_reachable_channel(subscriber: Subscriber) -> bool:
    """Check for at least one opted-in channel with a non-empty address.

    Pure function.
    """
    opt_ins = subscriber.channel_opt_ins
    if opt_ins.email and subscriber.email:
        return True
    if opt_ins.sms and subscriber.phone:
        return True
    return False


def matches_state_or_region(
    subscriber: Subscriber,
    zone: Zone,
    catalog: list[LocationEntry],
) -> bool:
    """Apply the subscriber's optional state/region restriction.

    Pure function. Passes when no restriction is set. Otherwise at least
    one of the zone's member locations must fall under the state (or,
    with no state set, the region) in the catalog metadata. A state
    restriction takes precedence over a region restriction.

    Args:
        subscriber: Subscriber to check
        zone: Zone being targeted
        catalog: Location catalog with state/region metadata

    Returns:
        True if the subscriber's restriction is satisfied
    """
    if subscriber.state:
        allowed = locations_in_state(subscriber.state, catalog)
    elif subscriber.region:
        allowed = locations_in_region(subscriber.region, catalog)
    else:
        return True

    allowed_names = {entry.name for entry in allowed}
    return any(name in allowed_names for name in zone.member_location_names)


def matches_preferences(subscriber: Subscriber, severity: str, alert_type: str) -> bool:
    """Check severity and type preferences together.

    Pure function.
    """
    return matches_severity(subscriber, severity) and matches_alert_type(subscriber, alert_type)


def should_include(
    subscriber: Subscriber,
    zone: Zone,
    alert: Alert,
    catalog: list[LocationEntry] | None = None,
) -> bool:
    """Decide whether a subscriber receives a zone's alert.

    Pure function. A subscriber is included iff:
    - their location fuzzy-matches a zone member, AND
    - the zone's severity is in their severity filter, AND
    - the alert's type is in their type filter, AND
    - at least one opted-in channel has an address, AND
    - their optional state/region restriction holds (checked only when a
      catalog is supplied).

    Args:
        subscriber: Subscriber record
        zone: Zone being targeted
        alert: Base alert
        catalog: Location catalog for state/region restrictions

    Returns:
        True if the subscriber should receive the alert
    """
    if not matches_zone_location(subscriber, zone):
        return False

    if not matches_preferences(subscriber, zone.severity, alert.type):
        return False

    if not has_reachable_channel(subscriber):
        return False

    if catalog is not None and not matches_state_or_region(subscriber, zone, catalog):
        return False

    return True


def select_recipients(
    subscribers: list[Subscriber],
    zone: Zone,
    alert: Alert,
    catalog: list[LocationEntry] | None = None,
) -> list[Subscriber]:
    """Filter a subscriber snapshot down to a zone's recipients.

    Pure function. Snapshot order is preserved.
    """
    return [s for s in subscribers if should_include(s, zone, alert, catalog)]


def to_recipient(subscriber: Subscriber) -> Recipient | None:
    """Project a subscriber onto its deliverable addresses.

    Pure function. An address is kept only when its channel is opted in.

    Returns:
        Recipient, or None if nothing is deliverable
    """
    opt_ins = subscriber.channel_opt_ins
    email = subscriber.email if opt_ins.email and subscriber.email else None
    phone = subscriber.phone if opt_ins.sms and subscriber.phone else None

    if email is None and phone is None:
        return None

    return Recipient(
        phone=phone,
        email=email,
        language=subscriber.language_preference or BASE_LANGUAGE,
    )


# Defaults for subscriber documents that omit their filters
DEFAULT_SEVERITY_FILTER = frozenset(SEVERITIES)
DEFAULT_TYPE_FILTER = frozenset(("earthquake", "flood", "fire", "storm"))


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_subscriber(doc_id: str, data: dict[str, Any]) -> Subscriber | None:
    """Parse a directory document into a Subscriber.

    Pure function. Handles malformed documents gracefully by returning
    None for documents without a location.

    Args:
        doc_id: Directory document ID
        data: Document fields

    Returns:
        Subscriber object, or None if the document is unusable
    """
    location_name = _optional_text(data.get("location_name") or data.get("city"))
    if location_name is None:
        return None

    opt_ins = data.get("channel_opt_ins") or {}
    severities = data.get("severity_levels")
    alert_types = data.get("alert_types")

    return Subscriber(
        id=doc_id,
        location_name=location_name,
        email=_optional_text(data.get("email")),
        phone=_optional_text(data.get("phone")),
        language_preference=_optional_text(data.get("language_preference")) or BASE_LANGUAGE,
        channel_opt_ins=ChannelOptIns(
            email=bool(opt_ins.get("email", False)),
            sms=bool(opt_ins.get("sms", False)),
        ),
        severity_filter=(
            frozenset(severities) if severities is not None else DEFAULT_SEVERITY_FILTER
        ),
        type_filter=(
            frozenset(alert_types) if alert_types is not None else DEFAULT_TYPE_FILTER
        ),
        state=_optional_text(data.get("state")),
        region=_optional_text(data.get("region")),
    )
