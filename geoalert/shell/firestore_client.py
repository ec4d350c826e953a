"""Firestore Subscriber Repository - Imperative Shell.

This module reads the subscriber directory from Google Cloud Firestore.
Each run takes one snapshot of the active subscribers; targeting logic
is in the core module.

All I/O is contained here.
"""

import logging
from dataclasses import dataclass
from typing import Any

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from geoalert.core.rules import Subscriber, parse_subscriber


logger = logging.getLogger(__name__)


# Default collection name for subscriber documents
DEFAULT_COLLECTION = "subscribers"


class DirectoryUnavailableError(Exception):
    """The subscriber directory could not be read."""


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Firestore collection of subscriber documents
    """
    project_id: str | None = None
    database: str | None = None
    collection: str = DEFAULT_COLLECTION


class FirestoreSubscriberRepository:
    """Read-only view of the subscriber directory in Firestore.

    This is part of the imperative shell - it handles database I/O.

    Document structure:
    {
        "location_name": "Chennai",
        "email": "a@example.com",
        "phone": "+919876543210",
        "language_preference": "ta",
        "channel_opt_ins": {"email": true, "sms": true},
        "severity_levels": ["critical", "warning"],
        "alert_types": ["earthquake", "flood"],
        "state": "Tamil Nadu",          (optional)
        "region": "South",              (optional)
        "is_active": true
    }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore repository.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.project_id:
                kwargs['project'] = self.config.project_id
            if self.config.database:
                kwargs['database'] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _active_query(self) -> Any:
        return (
            self.client
            .collection(self.config.collection)
            .where(filter=FieldFilter("is_active", "==", True))
        )

    def list_active_subscribers(self) -> list[Subscriber]:
        """Fetch a snapshot of all active subscribers.

        This method performs database I/O. Malformed documents are
        skipped with a warning.

        Returns:
            Subscribers in directory order

        Raises:
            DirectoryUnavailableError: If the query fails
        """
        logger.info("Fetching active subscribers from Firestore")

        try:
            docs = list(self._active_query().stream())
        except Exception as e:
            raise DirectoryUnavailableError(f"Failed to fetch subscribers: {e}") from e

        subscribers = []
        for doc in docs:
            subscriber = parse_subscriber(doc.id, doc.to_dict() or {})
            if subscriber is None:
                logger.warning("Skipping subscriber %s: no location", doc.id)
                continue
            subscribers.append(subscriber)

        logger.info("Fetched %d active subscribers from Firestore", len(subscribers))
        return subscribers
