"""Unit tests for message formatting.

Pure function tests - no mocks needed.
"""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from geoalert.core.alert import Alert, LocalizedContent, Recipient
from geoalert.core.formatter import (
    EmailContent,
    format_email_html,
    format_email_message,
    format_email_subject,
    format_sms_message,
    format_timestamp,
    format_zone_label,
    format_zone_plan,
)
from geoalert.core.variants import ZoneDistribution
from geoalert.core.zones import Zone


@pytest.fixture
def alert():
    """Nearby-zone flood alert with a Hindi translation."""
    return Alert(
        id="flood-42",
        title="Flash flood",
        description="River <Adyar> overflowing",
        severity="warning",
        type="flood",
        location="Chennai",
        timestamp=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
        source="IMD",
        languages={"hi": LocalizedContent("अचानक बाढ़", "नदी उफान पर")},
        zone="nearby",
        radius_km=25,
    )


@pytest.fixture
def direct_alert(alert):
    """Same alert without zone tagging."""
    return replace(alert, zone=None, radius_km=None, severity="critical")


class TestFormatTimestamp:
    """Tests for format_timestamp()."""

    def test_converts_to_ist(self):
        """UTC times are shown in IST (UTC+5:30)."""
        ts = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "2024-06-01 17:30:00 IST"


class TestFormatZoneLabel:
    """Tests for format_zone_label()."""

    def test_zone_label_with_radius(self, alert):
        """Zone alerts show the zone prefix and radius."""
        assert format_zone_label(alert) == "📍 NEARBY AREA (25km)"

    def test_direct_label(self, direct_alert):
        """Untagged alerts are direct."""
        assert format_zone_label(direct_alert) == "DIRECT ALERT"


class TestFormatSmsMessage:
    """Tests for format_sms_message()."""

    def test_contains_key_fields(self, alert):
        """SMS carries header, zone, title, location, time and source."""
        text = format_sms_message(alert, "en")

        assert text.startswith("⚠️ EMERGENCY ALERT\n📍 NEARBY AREA (25km)")
        assert "🌊 Flash flood" in text
        assert "📍 Location: Chennai" in text
        assert "🕒 Time: 2024-06-01 17:30:00 IST" in text
        assert "📡 Source: IMD" in text
        assert "⚠️ MONITOR SITUATION" in text
        assert text.endswith("Reply STOP to unsubscribe.")

    def test_uses_translation(self, alert):
        """Recipients in a translated language get the translation."""
        text = format_sms_message(alert, "hi")

        assert "अचानक बाढ़" in text
        assert "नदी उफान पर" in text

    def test_falls_back_to_english(self, alert):
        """Untranslated languages get English."""
        assert "Flash flood" in format_sms_message(alert, "ta")

    def test_direct_alert(self, direct_alert):
        """Direct alerts use the severity emoji and direct label."""
        text = format_sms_message(direct_alert, "en")

        assert text.startswith("🚨 EMERGENCY ALERT\nDIRECT ALERT")
        assert "📢 STAY INFORMED" in text

    def test_raw_text_not_escaped(self, alert):
        """SMS is plain text."""
        assert "River <Adyar> overflowing" in format_sms_message(alert, "en")


class TestFormatEmail:
    """Tests for the email subject and HTML body."""

    def test_zone_subject(self, alert):
        """Subject is prefixed by zone urgency."""
        assert format_email_subject(alert, "en") == "⚠️ NEARBY ALERT: Flash flood"

    def test_direct_subject(self, direct_alert):
        """Direct alerts use the emergency prefix."""
        assert format_email_subject(direct_alert, "hi") == "🚨 EMERGENCY ALERT: अचानक बाढ़"

    def test_html_escapes_alert_text(self, alert):
        """Alert text is HTML-escaped."""
        html = format_email_html(alert, "en")

        assert "River &lt;Adyar&gt; overflowing" in html
        assert "<Adyar>" not in html

    def test_html_zone_details(self, alert):
        """Zone alerts show the zone label, pill and action box."""
        html = format_email_html(alert, "en")

        assert "📍 NEARBY AREA WARNING" in html
        assert "NEARBY (25km radius)" in html
        assert "⚠️ MONITOR SITUATION CLOSELY" in html
        assert "#f59e0b" in html

    def test_html_direct_alert(self, direct_alert):
        """Direct alerts use the severity color and direct label."""
        html = format_email_html(direct_alert, "en")

        assert "DIRECT EMERGENCY ALERT" in html
        assert "#dc2626" in html
        assert "Alert Zone" not in html

    def test_html_footer_and_contacts(self, alert):
        """Footer shows language and alert ID; contacts are listed."""
        html = format_email_html(alert, "hi")

        assert "Language: HI | Alert ID: flood-42" in html
        assert 'href="tel:112"' in html
        assert "Ambulance" in html

    def test_format_email_message(self, alert):
        """Subject and body are rendered together."""
        content = format_email_message(alert, "en")

        assert isinstance(content, EmailContent)
        assert content.subject == format_email_subject(alert, "en")
        assert content.html == format_email_html(alert, "en")


class TestFormatZonePlan:
    """Tests for format_zone_plan()."""

    def test_empty_plan(self):
        """No distributions yields a fixed message."""
        assert format_zone_plan([]) == "No zones with matching recipients."

    def test_lists_each_zone(self, alert):
        """Each zone is summarized on its own line."""
        distributions = [
            ZoneDistribution(
                zone=Zone("nearby", "warning", frozenset({"Tambaram", "Ambattur"}), 25),
                recipients=(Recipient(email="a@example.com"), Recipient(phone="+91980")),
                alert=alert,
            ),
        ]

        assert format_zone_plan(distributions) == (
            "📍 NEARBY AREA (25km) - severity warning, 2 recipient(s), "
            "locations: Ambattur, Tambaram"
        )
