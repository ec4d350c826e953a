#!/usr/bin/env python3
"""Send a test emergency alert.

⚠️  WARNING: Without --dry-run this script sends REAL notifications!
    - Zoned mode: every matching subscriber in the directory
    - Direct mode (--phone/--email): only the given recipient

This script creates a synthetic alert and either previews the zone plan
and rendered messages (--dry-run) or runs a real distribution using the
same code path as production. A [TEST] marker is added to the title.

Usage:
    # Preview the zone plan for an alert at Chennai (reads the directory, sends nothing)
    python scripts/send_test_alert.py --dry-run

    # Preview rendered messages for one recipient
    python scripts/send_test_alert.py --dry-run --phone +919876543210 --language ta

    # Send to one recipient only (safest real send)
    python scripts/send_test_alert.py --email ops@example.com

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml, else environment)
    GCP_PROJECT: GCP project ID for Secret Manager access
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geoalert.core.alert import Alert, Recipient
from geoalert.core.errors import RequestError
from geoalert.core.formatter import format_email_subject, format_sms_message, format_zone_plan
from geoalert.core.geo import Coordinates
from geoalert.core.variants import build_zone_distributions
from geoalert.orchestrator import Orchestrator
from geoalert.shell.config_loader import load_config
from geoalert.shell.firestore_client import DirectoryUnavailableError

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_test_alert(
    severity: str = "critical",
    alert_type: str = "earthquake",
    location: str = "Chennai",
    latitude: float | None = None,
    longitude: float | None = None,
) -> Alert:
    """Create a synthetic test alert.

    Without coordinates the epicenter is resolved from the location name.
    """
    coordinates = None
    if latitude is not None and longitude is not None:
        coordinates = Coordinates(lat=latitude, lng=longitude)

    now = datetime.now(timezone.utc)
    return Alert(
        id="test-alert-" + now.strftime("%Y%m%d%H%M%S"),
        title=f"[TEST] {alert_type.capitalize()} alert near {location}",
        description="This is a test of the emergency alert system. No action is required.",
        severity=severity,
        type=alert_type,
        location=location,
        timestamp=now,
        source="Emergency Alert System (test)",
        coordinates=coordinates,
    )


def preview_direct(alert: Alert, recipient: Recipient) -> None:
    """Log the messages one recipient would receive."""
    if recipient.phone:
        logger.info("SMS to %s:\n%s", recipient.phone, format_sms_message(alert, recipient.language))
    if recipient.email:
        logger.info("Email to %s: %s", recipient.email, format_email_subject(alert, recipient.language))


def preview_zoned(alert: Alert, orchestrator: Orchestrator) -> None:
    """Log the zone plan and one rendered SMS per zone."""
    subscribers = orchestrator.repository.list_active_subscribers()
    distributions = build_zone_distributions(
        alert,
        orchestrator.config.locations,
        subscribers,
        orchestrator.localizer,
    )

    logger.info("Zone plan (%d subscribers in directory):\n%s", len(subscribers), format_zone_plan(distributions))

    for distribution in distributions:
        logger.info(
            "Sample %s SMS:\n%s",
            distribution.zone.kind,
            format_sms_message(distribution.alert, "en"),
        )


def main():
    parser = argparse.ArgumentParser(
        description="Send a test emergency alert",
        epilog="⚠️  WARNING: This sends REAL notifications! Use --dry-run first.",
    )
    parser.add_argument("--severity", default="critical", choices=["critical", "warning", "info"])
    parser.add_argument("--type", dest="alert_type", default="earthquake",
                        choices=["earthquake", "flood", "fire", "storm", "other"])
    parser.add_argument("--location", default="Chennai", help="Location name (default: Chennai)")
    parser.add_argument("--latitude", type=float, default=None, help="Epicenter latitude")
    parser.add_argument("--longitude", type=float, default=None, help="Epicenter longitude")
    parser.add_argument("--phone", default=None, help="Direct mode: recipient phone (E.164)")
    parser.add_argument("--email", default=None, help="Direct mode: recipient email")
    parser.add_argument("--language", default="en", help="Direct mode: recipient language")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be sent without actually sending",
    )
    args = parser.parse_args()

    config = load_config()
    orchestrator = Orchestrator(config)

    alert = create_test_alert(
        severity=args.severity,
        alert_type=args.alert_type,
        location=args.location,
        latitude=args.latitude,
        longitude=args.longitude,
    )

    logger.info("")
    logger.info("Test Alert Details:")
    logger.info("  ID: %s", alert.id)
    logger.info("  Severity: %s", alert.severity)
    logger.info("  Type: %s", alert.type)
    logger.info("  Location: %s", alert.location)
    logger.info("")

    direct = bool(args.phone or args.email)
    recipient = Recipient(phone=args.phone, email=args.email, language=args.language)

    try:
        if args.dry_run:
            logger.info("DRY RUN - nothing will be sent")
            if direct:
                preview_direct(alert, recipient)
            else:
                preview_zoned(alert, orchestrator)
            return 0

        if direct:
            result = orchestrator.distribute_direct(alert, [recipient])
        else:
            result = orchestrator.distribute(alert)
    except RequestError as e:
        logger.error("Invalid test alert: %s", e)
        return 1
    except DirectoryUnavailableError as e:
        logger.error("Subscriber directory unavailable: %s", e)
        return 1

    # Summary
    logger.info("=" * 50)
    logger.info("Test Alert Summary:")
    logger.info("  %s", result.summary)

    for error in result.report.errors:
        logger.info("  ✗ %s %s: %s", error.channel, error.recipient, error.reason)

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
