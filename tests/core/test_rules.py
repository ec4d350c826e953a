"""Unit tests for subscriber targeting rules.

Pure function tests - no mocks needed.
"""

from datetime import datetime, timezone

import pytest

from geoalert.core.alert import Alert, Recipient
from geoalert.core.geo import Coordinates, LocationEntry
from geoalert.core.rules import (
    ChannelOptIns,
    Subscriber,
    fuzzy_location_match,
    has_reachable_channel,
    matches_alert_type,
    matches_preferences,
    matches_severity,
    matches_state_or_region,
    matches_zone_location,
    parse_subscriber,
    select_recipients,
    should_include,
    to_recipient,
)
from geoalert.core.zones import Zone


@pytest.fixture
def alert():
    """Base flood alert."""
    return Alert(
        id="alert-1",
        title="Flash flood",
        description="Water levels rising",
        severity="critical",
        type="flood",
        location="Chennai",
        timestamp=datetime(2024, 11, 30, 6, 0, tzinfo=timezone.utc),
        source="IMD",
    )


@pytest.fixture
def nearby_zone():
    """Nearby zone containing two localities."""
    return Zone(
        kind="nearby",
        severity="warning",
        member_location_names=frozenset({"Ambattur", "Navi Mumbai"}),
        radius_km=25,
    )


@pytest.fixture
def catalog():
    return [
        LocationEntry("Ambattur", Coordinates(13.1143, 80.1548), "Tamil Nadu", "South"),
        LocationEntry("Navi Mumbai", Coordinates(19.0330, 73.0297), "Maharashtra", "West"),
    ]


def make_subscriber(**overrides) -> Subscriber:
    """Subscriber that matches the nearby zone unless overridden."""
    fields = dict(
        id="sub-1",
        location_name="Ambattur",
        email="a@example.com",
        phone="+919800000001",
        language_preference="ta",
        channel_opt_ins=ChannelOptIns(email=True, sms=True),
        severity_filter=frozenset({"critical", "warning"}),
        type_filter=frozenset({"flood", "earthquake"}),
    )
    fields.update(overrides)
    return Subscriber(**fields)


class TestFuzzyLocationMatch:
    """Tests for fuzzy_location_match()."""

    def test_case_insensitive(self):
        """Matching ignores case."""
        assert fuzzy_location_match("AMBATTUR", "ambattur")

    def test_bidirectional_substring(self):
        """Either name may contain the other."""
        assert fuzzy_location_match("Mumbai", "Navi Mumbai")
        assert fuzzy_location_match("Navi Mumbai", "Mumbai")

    def test_no_match(self):
        """Unrelated names do not match."""
        assert not fuzzy_location_match("Chennai", "Ambattur")


class TestMatchesZoneLocation:
    """Tests for matches_zone_location()."""

    def test_subscriber_in_zone(self, nearby_zone):
        """Subscriber whose location is a zone member matches."""
        assert matches_zone_location(make_subscriber(), nearby_zone)

    def test_substring_overlap_matches(self, nearby_zone):
        """Mumbai matches the Navi Mumbai member (known approximation)."""
        assert matches_zone_location(make_subscriber(location_name="Mumbai"), nearby_zone)

    def test_subscriber_outside_zone(self, nearby_zone):
        """Subscriber elsewhere does not match."""
        assert not matches_zone_location(make_subscriber(location_name="Delhi"), nearby_zone)


class TestPreferenceFilters:
    """Tests for severity and type filters."""

    def test_matches_severity(self):
        """Severity must be in the subscriber's filter."""
        subscriber = make_subscriber()
        assert matches_severity(subscriber, "warning")
        assert not matches_severity(subscriber, "info")

    def test_matches_alert_type(self):
        """Type must be in the subscriber's filter."""
        subscriber = make_subscriber()
        assert matches_alert_type(subscriber, "flood")
        assert not matches_alert_type(subscriber, "fire")

    def test_matches_preferences_requires_both(self):
        """Both severity and type must match."""
        subscriber = make_subscriber()
        assert matches_preferences(subscriber, "critical", "flood")
        assert not matches_preferences(subscriber, "critical", "fire")
        assert not matches_preferences(subscriber, "info", "flood")


class TestHasReachableChannel:
    """Tests for has_reachable_channel()."""

    def test_email_opt_in_with_address(self):
        """Opted-in email with an address is reachable."""
        subscriber = make_subscriber(phone=None, channel_opt_ins=ChannelOptIns(email=True))
        assert has_reachable_channel(subscriber)

    def test_sms_opt_in_with_phone(self):
        """Opted-in SMS with a phone is reachable."""
        subscriber = make_subscriber(email=None, channel_opt_ins=ChannelOptIns(sms=True))
        assert has_reachable_channel(subscriber)

    def test_opt_in_without_address(self):
        """Opt-in without the matching address is unreachable."""
        subscriber = make_subscriber(email=None, channel_opt_ins=ChannelOptIns(email=True))
        assert not has_reachable_channel(subscriber)

    def test_address_without_opt_in(self):
        """Addresses without opt-ins are unreachable."""
        subscriber = make_subscriber(channel_opt_ins=ChannelOptIns())
        assert not has_reachable_channel(subscriber)


class TestMatchesStateOrRegion:
    """Tests for matches_state_or_region()."""

    def test_no_restriction_passes(self, nearby_zone, catalog):
        """Subscribers without a restriction always pass."""
        assert matches_state_or_region(make_subscriber(), nearby_zone, catalog)

    def test_state_restriction(self, nearby_zone, catalog):
        """A state restriction needs a zone member in that state."""
        assert matches_state_or_region(make_subscriber(state="Tamil Nadu"), nearby_zone, catalog)
        assert not matches_state_or_region(make_subscriber(state="Kerala"), nearby_zone, catalog)

    def test_region_restriction(self, nearby_zone, catalog):
        """A region restriction needs a zone member in that region."""
        assert matches_state_or_region(make_subscriber(region="west"), nearby_zone, catalog)
        assert not matches_state_or_region(make_subscriber(region="North"), nearby_zone, catalog)

    def test_state_takes_precedence(self, nearby_zone, catalog):
        """With both set, the state decides."""
        subscriber = make_subscriber(state="Kerala", region="South")
        assert not matches_state_or_region(subscriber, nearby_zone, catalog)


class TestShouldInclude:
    """Tests for should_include()."""

    def test_all_conditions_met(self, nearby_zone, alert):
        """Subscriber meeting every condition is included."""
        assert should_include(make_subscriber(), nearby_zone, alert)

    def test_uses_zone_severity_not_alert_severity(self, nearby_zone, alert):
        """A warning-only subscriber gets the nearby variant of a critical alert."""
        subscriber = make_subscriber(severity_filter=frozenset({"warning"}))
        assert should_include(subscriber, nearby_zone, alert)

    def test_excluded_by_location(self, nearby_zone, alert):
        """Subscriber outside the zone is excluded."""
        assert not should_include(make_subscriber(location_name="Delhi"), nearby_zone, alert)

    def test_excluded_by_type(self, nearby_zone, alert):
        """Subscriber not wanting the alert type is excluded."""
        subscriber = make_subscriber(type_filter=frozenset({"fire"}))
        assert not should_include(subscriber, nearby_zone, alert)

    def test_excluded_without_channel(self, nearby_zone, alert):
        """Subscriber with no reachable channel is excluded."""
        subscriber = make_subscriber(channel_opt_ins=ChannelOptIns())
        assert not should_include(subscriber, nearby_zone, alert)

    def test_state_checked_only_with_catalog(self, nearby_zone, alert, catalog):
        """State restrictions apply when a catalog is supplied."""
        subscriber = make_subscriber(state="Kerala")
        assert should_include(subscriber, nearby_zone, alert)
        assert not should_include(subscriber, nearby_zone, alert, catalog)

    def test_deterministic(self, nearby_zone, alert):
        """Identical inputs give identical decisions."""
        subscriber = make_subscriber()
        results = {should_include(subscriber, nearby_zone, alert) for _ in range(5)}
        assert results == {True}


class TestSelectRecipients:
    """Tests for select_recipients()."""

    def test_preserves_snapshot_order(self, nearby_zone, alert):
        """Selected subscribers keep directory order."""
        subscribers = [
            make_subscriber(id="b"),
            make_subscriber(id="x", location_name="Delhi"),
            make_subscriber(id="a", location_name="Navi Mumbai"),
        ]

        selected = select_recipients(subscribers, nearby_zone, alert)

        assert [s.id for s in selected] == ["b", "a"]


class TestToRecipient:
    """Tests for to_recipient()."""

    def test_keeps_opted_in_addresses(self):
        """Both addresses kept when both channels are opted in."""
        assert to_recipient(make_subscriber()) == Recipient(
            phone="+919800000001", email="a@example.com", language="ta",
        )

    def test_drops_address_without_opt_in(self):
        """Email is dropped when email is not opted in."""
        subscriber = make_subscriber(channel_opt_ins=ChannelOptIns(sms=True))
        recipient = to_recipient(subscriber)
        assert recipient.email is None
        assert recipient.phone == "+919800000001"

    def test_none_when_nothing_deliverable(self):
        """No deliverable address yields None."""
        assert to_recipient(make_subscriber(channel_opt_ins=ChannelOptIns())) is None


class TestParseSubscriber:
    """Tests for parse_subscriber()."""

    def test_parses_full_document(self):
        """All fields map onto the Subscriber."""
        subscriber = parse_subscriber("doc-1", {
            "location_name": "Chennai",
            "email": "a@example.com",
            "phone": "+919800000001",
            "language_preference": "hi",
            "channel_opt_ins": {"email": True, "sms": False},
            "severity_levels": ["critical"],
            "alert_types": ["flood"],
            "state": "Tamil Nadu",
        })

        assert subscriber.id == "doc-1"
        assert subscriber.location_name == "Chennai"
        assert subscriber.language_preference == "hi"
        assert subscriber.channel_opt_ins == ChannelOptIns(email=True, sms=False)
        assert subscriber.severity_filter == frozenset({"critical"})
        assert subscriber.type_filter == frozenset({"flood"})
        assert subscriber.state == "Tamil Nadu"
        assert subscriber.region is None

    def test_defaults_for_missing_fields(self):
        """Missing filters and language fall back to defaults."""
        subscriber = parse_subscriber("doc-2", {"city": "Madurai", "email": ""})

        assert subscriber.location_name == "Madurai"
        assert subscriber.email is None
        assert subscriber.language_preference == "en"
        assert subscriber.severity_filter == frozenset({"critical", "warning", "info"})
        assert "other" not in subscriber.type_filter
        assert subscriber.channel_opt_ins == ChannelOptIns()

    def test_missing_location_returns_none(self):
        """Documents without a location are unusable."""
        assert parse_subscriber("doc-3", {"email": "a@example.com"}) is None
