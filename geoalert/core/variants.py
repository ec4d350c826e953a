"""Zone-specific alert variants - Pure functions.

Builds one zone-tagged, localized alert per non-empty zone and pairs it
with the zone's recipients. Translation itself is an external concern:
a Localizer maps (alert, language code) to localized content, or None
when it has nothing for that language.
"""

from dataclasses import dataclass, replace
from typing import Callable

from geoalert.core.alert import BASE_LANGUAGE, Alert, LocalizedContent, Recipient
from geoalert.core.errors import RequestError
from geoalert.core.geo import (
    ZONE_NEARBY,
    ZONE_REGIONAL,
    Coordinates,
    LocationEntry,
    find_location_coordinates,
    validate_coordinates,
)
from geoalert.core.rules import Subscriber, select_recipients, to_recipient
from geoalert.core.zones import Zone, define_zones


Localizer = Callable[[Alert, str], LocalizedContent | None]


@dataclass(frozen=True)
class ZoneDistribution:
    """A zone, its recipients, and the alert variant they receive.

    Attributes:
        zone: Targeted zone
        recipients: Deliverable recipients, in snapshot order
        alert: Zone-tagged, localized alert
    """
    zone: Zone
    recipients: tuple[Recipient, ...]
    alert: Alert


def table_localizer(alert: Alert, language: str) -> LocalizedContent | None:
    """Localizer backed by the alert's own language table."""
    return alert.languages.get(language)


def localized_content(alert: Alert, language: str) -> LocalizedContent:
    """Get an alert's content in a language, falling back to English.

    Pure function.
    """
    content = alert.languages.get(language)
    if content is not None:
        return content
    return LocalizedContent(title=alert.title, description=alert.description)


def build_zone_alert(alert: Alert, zone: Zone) -> Alert:
    """Derive a zone-tagged copy of an alert.

    Pure function. The immediate zone keeps the original wording and
    language table. Nearby and regional variants get distance framing;
    their language table is cleared because it describes the unframed
    wording, and must be filled again by localize_alert.

    Args:
        alert: Base alert (never modified)
        zone: Zone the variant is for

    Returns:
        New Alert with zone severity, zone and radius_km set
    """
    if zone.kind == ZONE_NEARBY:
        return replace(
            alert,
            title=f"Nearby Emergency Alert: {alert.title}",
            description=(
                f"Emergency situation detected {zone.radius_km}km from your location. "
                f"{alert.description} Monitor the situation and be prepared to take "
                "action if conditions change."
            ),
            severity=zone.severity,
            zone=zone.kind,
            radius_km=zone.radius_km,
            languages={},
        )

    if zone.kind == ZONE_REGIONAL:
        return replace(
            alert,
            title=f"Regional Alert: {alert.title}",
            description=(
                f"Emergency situation in your region. {alert.description} "
                "Stay informed and follow local authority guidance."
            ),
            severity=zone.severity,
            zone=zone.kind,
            radius_km=zone.radius_km,
            languages={},
        )

    return replace(
        alert,
        severity=zone.severity,
        zone=zone.kind,
        radius_km=zone.radius_km,
    )


def localize_alert(
    alert: Alert,
    languages: set[str],
    localizer: Localizer = table_localizer,
) -> Alert:
    """Fill an alert's language table for the requested languages.

    Pure function (given a pure localizer). The base language always
    carries the alert's own wording. Languages the localizer cannot
    serve are left out, so delivery falls back to English for them.

    Args:
        alert: Alert variant to localize
        languages: Recipient language codes
        localizer: Source of localized content

    Returns:
        New Alert with the language table filled in
    """
    table = {
        BASE_LANGUAGE: LocalizedContent(title=alert.title, description=alert.description),
    }

    for language in sorted(languages):
        if language == BASE_LANGUAGE:
            continue
        content = localizer(alert, language)
        if content is not None:
            table[language] = content

    return replace(alert, languages=table)


def resolve_epicenter(alert: Alert, catalog: list[LocationEntry]) -> Coordinates:
    """Get an alert's epicenter, falling back to its location text.

    Pure function.

    Raises:
        RequestError: If no coordinates are given and the location text
            matches no catalog entry
    """
    if alert.coordinates is not None:
        return validate_coordinates(alert.coordinates)

    coordinates = find_location_coordinates(alert.location, catalog)
    if coordinates is None:
        raise RequestError(f"Could not determine alert coordinates for: {alert.location}")
    return coordinates


def build_zone_distributions(
    alert: Alert,
    catalog: list[LocationEntry],
    subscribers: list[Subscriber],
    localizer: Localizer = table_localizer,
) -> list[ZoneDistribution]:
    """Plan a zoned distribution for an alert.

    Pure function. Zones with no deliverable recipients are skipped.

    Args:
        alert: Base alert
        catalog: Location catalog
        subscribers: Directory snapshot
        localizer: Source of localized content

    Returns:
        Zone distributions ordered immediate, nearby, regional

    Raises:
        RequestError: If the epicenter cannot be resolved or is invalid
    """
    epicenter = resolve_epicenter(alert, catalog)
    zones = define_zones(epicenter, alert.severity, catalog)

    distributions = []
    for zone in zones:
        selected = select_recipients(subscribers, zone, alert, catalog)
        recipients = tuple(
            r for r in (to_recipient(s) for s in selected) if r is not None
        )
        if not recipients:
            continue

        variant = build_zone_alert(alert, zone)
        variant = localize_alert(variant, {r.language for r in recipients}, localizer)

        distributions.append(ZoneDistribution(
            zone=zone,
            recipients=recipients,
            alert=variant,
        ))

    return distributions
