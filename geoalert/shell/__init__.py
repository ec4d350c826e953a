"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Twilio SMS client (HTTP)
- SMTP email client (network)
- Firestore subscriber repository (database)
- Delivery sub-service client (HTTP)
- Configuration loading (environment/files/Secret Manager)

Keep this layer thin and simple. All business logic should be in core.
"""

from geoalert.shell.sms_client import SmsClient
from geoalert.shell.email_client import EmailClient
from geoalert.shell.firestore_client import FirestoreSubscriberRepository
from geoalert.shell.delivery_service_client import DeliveryServiceClient
from geoalert.shell.config_loader import load_config, Config

__all__ = [
    "SmsClient",
    "EmailClient",
    "FirestoreSubscriberRepository",
    "DeliveryServiceClient",
    "load_config",
    "Config",
]
