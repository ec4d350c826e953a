"""Unit tests for zone-specific alert variants.

Pure function tests - no mocks needed.
"""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from geoalert.core.alert import Alert, LocalizedContent, Recipient
from geoalert.core.errors import RequestError
from geoalert.core.geo import Coordinates, LocationEntry
from geoalert.core.rules import ChannelOptIns, Subscriber
from geoalert.core.variants import (
    build_zone_alert,
    build_zone_distributions,
    localize_alert,
    localized_content,
    resolve_epicenter,
)
from geoalert.core.zones import Zone


CHENNAI = Coordinates(lat=13.0827, lng=80.2707)


def north_of_chennai(km: float) -> Coordinates:
    return Coordinates(lat=CHENNAI.lat + km / 111.195, lng=CHENNAI.lng)


@pytest.fixture
def catalog():
    return [
        LocationEntry("Chennai", CHENNAI, "Tamil Nadu", "South"),
        LocationEntry("Nearby Town", north_of_chennai(12), "Tamil Nadu", "South"),
        LocationEntry("Regional Town", north_of_chennai(40), "Andhra Pradesh", "South"),
        LocationEntry("Far Town", north_of_chennai(150), "Andhra Pradesh", "South"),
    ]


@pytest.fixture
def alert():
    """Critical earthquake at Chennai with a Tamil translation."""
    return Alert(
        id="eq-001",
        title="Earthquake",
        description="Strong shaking reported",
        severity="critical",
        type="earthquake",
        location="Chennai",
        timestamp=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
        source="NCS",
        coordinates=CHENNAI,
        languages={"ta": LocalizedContent("நிலநடுக்கம்", "கடுமையான அதிர்வு")},
    )


def subscriber(sub_id: str, location: str, language: str = "en", **overrides) -> Subscriber:
    fields = dict(
        id=sub_id,
        location_name=location,
        email=f"{sub_id}@example.com",
        language_preference=language,
        channel_opt_ins=ChannelOptIns(email=True),
        severity_filter=frozenset({"critical", "warning", "info"}),
        type_filter=frozenset({"earthquake"}),
    )
    fields.update(overrides)
    return Subscriber(**fields)


def zone(kind: str, severity: str, radius: int) -> Zone:
    return Zone(kind, severity, frozenset({"Somewhere"}), radius)


class TestLocalizedContent:
    """Tests for localized_content()."""

    def test_returns_translation(self, alert):
        """Known languages return their translation."""
        assert localized_content(alert, "ta").title == "நிலநடுக்கம்"

    def test_falls_back_to_english(self, alert):
        """Unknown languages fall back to the base wording."""
        assert localized_content(alert, "hi") == LocalizedContent(
            "Earthquake", "Strong shaking reported",
        )


class TestBuildZoneAlert:
    """Tests for build_zone_alert()."""

    def test_immediate_keeps_wording(self, alert):
        """Immediate variant keeps title, description and translations."""
        variant = build_zone_alert(alert, zone("immediate", "critical", 5))

        assert variant.title == alert.title
        assert variant.description == alert.description
        assert variant.languages == alert.languages
        assert variant.zone == "immediate"
        assert variant.radius_km == 5

    def test_nearby_framing(self, alert):
        """Nearby variant is framed with the zone radius."""
        variant = build_zone_alert(alert, zone("nearby", "warning", 25))

        assert variant.title == "Nearby Emergency Alert: Earthquake"
        assert variant.description.startswith(
            "Emergency situation detected 25km from your location. Strong shaking reported"
        )
        assert variant.severity == "warning"
        assert variant.languages == {}

    def test_regional_framing(self, alert):
        """Regional variant gets regional wording."""
        variant = build_zone_alert(alert, zone("regional", "info", 100))

        assert variant.title == "Regional Alert: Earthquake"
        assert "Emergency situation in your region." in variant.description
        assert variant.severity == "info"
        assert variant.radius_km == 100

    def test_base_alert_untouched(self, alert):
        """Variants are copies; the base alert never changes."""
        build_zone_alert(alert, zone("nearby", "warning", 25))

        assert alert.title == "Earthquake"
        assert alert.severity == "critical"
        assert alert.zone is None


class TestLocalizeAlert:
    """Tests for localize_alert()."""

    def test_base_language_always_present(self, alert):
        """English carries the alert's own wording."""
        localized = localize_alert(alert, set())
        assert localized.languages["en"] == LocalizedContent(alert.title, alert.description)

    def test_keeps_served_languages(self, alert):
        """Languages the localizer serves are included."""
        localized = localize_alert(alert, {"ta", "hi"})

        assert "ta" in localized.languages
        assert "hi" not in localized.languages

    def test_custom_localizer(self, alert):
        """Any localizer callable can supply content."""
        def shouting(a, language):
            return LocalizedContent(a.title.upper(), a.description.upper())

        localized = localize_alert(alert, {"xx"}, shouting)

        assert localized.languages["xx"].title == "EARTHQUAKE"


class TestResolveEpicenter:
    """Tests for resolve_epicenter()."""

    def test_uses_alert_coordinates(self, alert, catalog):
        """Explicit coordinates win."""
        assert resolve_epicenter(alert, catalog) == CHENNAI

    def test_falls_back_to_location_text(self, alert, catalog):
        """Without coordinates the location text is looked up."""
        moved = replace(alert, coordinates=None, location="regional town")

        assert resolve_epicenter(moved, catalog) == north_of_chennai(40)

    def test_unknown_location_raises(self, alert, catalog):
        """Unresolvable location is a request error."""
        lost = replace(alert, coordinates=None, location="Atlantis")

        with pytest.raises(RequestError, match="Could not determine alert coordinates for: Atlantis"):
            resolve_epicenter(lost, catalog)


class TestBuildZoneDistributions:
    """Tests for build_zone_distributions()."""

    def test_chennai_scenario(self, alert, catalog):
        """Subscribers land in the zone matching their distance."""
        subscribers = [
            subscriber("s-chennai", "Chennai", language="ta"),
            subscriber("s-nearby", "Nearby Town"),
            subscriber("s-regional", "Regional Town"),
            subscriber("s-far", "Far Town"),
        ]

        distributions = build_zone_distributions(alert, catalog, subscribers)

        summary = [
            (d.zone.kind, d.alert.severity, [r.email for r in d.recipients])
            for d in distributions
        ]
        assert summary == [
            ("immediate", "critical", ["s-chennai@example.com"]),
            ("nearby", "warning", ["s-nearby@example.com"]),
            ("regional", "info", ["s-regional@example.com"]),
        ]

    def test_immediate_variant_localized(self, alert, catalog):
        """Immediate recipients get their translation."""
        subscribers = [subscriber("s1", "Chennai", language="ta")]

        distributions = build_zone_distributions(alert, catalog, subscribers)

        variant = distributions[0].alert
        assert variant.languages["ta"].title == "நிலநடுக்கம்"
        assert distributions[0].recipients == (
            Recipient(email="s1@example.com", language="ta"),
        )

    def test_zones_without_recipients_skipped(self, alert, catalog):
        """Zones nobody subscribes to produce no distribution."""
        subscribers = [subscriber("s1", "Regional Town")]

        distributions = build_zone_distributions(alert, catalog, subscribers)

        assert [d.zone.kind for d in distributions] == ["regional"]

    def test_severity_filter_uses_zone_severity(self, alert, catalog):
        """A critical-only subscriber in the nearby zone is skipped."""
        subscribers = [
            subscriber("s1", "Nearby Town", severity_filter=frozenset({"critical"})),
        ]
        assert build_zone_distributions(alert, catalog, subscribers) == []

    def test_unreachable_subscribers_skipped(self, alert, catalog):
        """Subscribers without a usable channel are never recipients."""
        subscribers = [subscriber("s1", "Chennai", email=None)]
        assert build_zone_distributions(alert, catalog, subscribers) == []

    def test_warning_alert_has_no_regional_distribution(self, alert, catalog):
        """Regional subscribers get nothing for a warning alert."""
        warning = replace(alert, severity="warning")

        distributions = build_zone_distributions(
            warning, catalog, [subscriber("s1", "Regional Town")],
        )

        assert distributions == []

    def test_same_inputs_same_plan(self, alert, catalog):
        """Planning is deterministic."""
        subscribers = [subscriber("a", "Chennai"), subscriber("b", "Nearby Town")]

        first = build_zone_distributions(alert, catalog, subscribers)
        second = build_zone_distributions(alert, catalog, subscribers)

        assert first == second
