"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the geoalert package.
"""

from geoalert.main import (
    distribute_alert,
    distribute_alert_pubsub,
)

__all__ = [
    "distribute_alert",
    "distribute_alert_pubsub",
]
