"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Alert parsing
- Geo/distance calculations and zone classification
- Severity degradation policy
- Subscriber targeting rules
- Zone-specific alert variants
- Message formatting
- Delivery planning and report aggregation

All functions here are deterministic and have no I/O.
"""

from geoalert.core.alert import Alert, Recipient, parse_alert, parse_recipients
from geoalert.core.geo import calculate_distance, classify_distance, classify_locations
from geoalert.core.severity import degrade
from geoalert.core.zones import Zone, define_zones
from geoalert.core.rules import Subscriber, should_include, select_recipients
from geoalert.core.variants import ZoneDistribution, build_zone_distributions
from geoalert.core.formatter import format_sms_message, format_email_message
from geoalert.core.delivery import DeliveryReport, build_report, enumerate_tasks

__all__ = [
    # Alert
    "Alert",
    "Recipient",
    "parse_alert",
    "parse_recipients",
    # Geo
    "calculate_distance",
    "classify_distance",
    "classify_locations",
    # Severity
    "degrade",
    # Zones
    "Zone",
    "define_zones",
    # Rules
    "Subscriber",
    "should_include",
    "select_recipients",
    # Variants
    "ZoneDistribution",
    "build_zone_distributions",
    # Formatter
    "format_sms_message",
    "format_email_message",
    # Delivery
    "DeliveryReport",
    "build_report",
    "enumerate_tasks",
]
