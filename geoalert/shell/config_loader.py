"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables, and the location catalog from its YAML file.
All I/O is contained here.

Models (Config, SmsSettings, EmailSettings) are defined in
geoalert/core/config.py to avoid information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from geoalert.core.config import DEFAULT_SMTP_PORT, Config, EmailSettings, SmsSettings
from geoalert.core.geo import Coordinates, LocationEntry
from geoalert.shell.secret_manager_client import (
    SecretManagerClient,
    SecretManagerConfig,
    resolve_env_placeholder,
)


logger = logging.getLogger(__name__)


# Bundled location catalog
DEFAULT_LOCATIONS_PATH = Path(__file__).resolve().parents[2] / "config" / "locations.yaml"


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Get a Secret Manager client.

    Returns None if no GCP project is set (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT") or os.environ.get("GOOGLE_CLOUD_PROJECT")
    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Optional[str]:
    """Resolve a value that may contain secret or env var placeholders.

    Delegates to SecretManagerClient.resolve() which handles the
    placeholder syntax. A placeholder that stays unresolved becomes None,
    so the channel gate reports the field as missing.

    Args:
        value: Value to resolve (may be a ${...} placeholder)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value, or None if empty or unresolved
    """
    if value is None:
        return None

    value = str(value)
    if secret_client:
        resolved = secret_client.resolve(value)
    else:
        resolved = resolve_env_placeholder(value)

    if not resolved or resolved.startswith("${"):
        return None
    return resolved


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _parse_location(data: dict[str, Any]) -> LocationEntry:
    """Parse a catalog entry from config data."""
    return LocationEntry(
        name=str(data["name"]),
        coordinates=Coordinates(lat=float(data["lat"]), lng=float(data["lng"])),
        state=str(data.get("state", "")),
        region=str(data.get("region", "")),
    )


def load_locations_from_list(items: list[dict[str, Any]]) -> list[LocationEntry]:
    """Parse a list of catalog entries, preserving order."""
    return [_parse_location(item) for item in items]


def load_locations(locations_path: str | Path | None = None) -> list[LocationEntry]:
    """Load the location catalog from a YAML file.

    This method performs file I/O.

    Args:
        locations_path: Path to the catalog YAML.
                        If None, uses LOCATIONS_PATH env var or the bundled catalog.

    Returns:
        Catalog entries in file order (empty if the file is missing)
    """
    if locations_path is None:
        locations_path = os.environ.get("LOCATIONS_PATH") or DEFAULT_LOCATIONS_PATH

    path = Path(locations_path)

    if not path.exists():
        logger.warning("Location catalog not found: %s", path)
        return []

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        logger.warning("Location catalog is empty: %s", path)
        return []

    locations = load_locations_from_list(data.get("locations", []))
    logger.info("Loaded %d catalog locations from %s", len(locations), path)
    return locations


def _parse_sms(data: dict[str, Any], secret_client: Optional[SecretManagerClient]) -> SmsSettings:
    return SmsSettings(
        account_sid=_resolve_value(data.get("account_sid"), secret_client),
        auth_token=_resolve_value(data.get("auth_token"), secret_client),
        from_number=_resolve_value(data.get("from_number"), secret_client),
    )


def _parse_email(data: dict[str, Any], secret_client: Optional[SecretManagerClient]) -> EmailSettings:
    return EmailSettings(
        host=_resolve_value(data.get("host"), secret_client),
        port=int(data.get("port", DEFAULT_SMTP_PORT)),
        username=_resolve_value(data.get("username"), secret_client),
        password=_resolve_value(data.get("password"), secret_client),
        from_address=_resolve_value(data.get("from_address"), secret_client),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (secret and env var expansion, and
    reading the catalog file, have side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    secret_client = _get_secret_manager_client()

    # Inline catalog wins over a catalog file
    if "locations" in data:
        locations = load_locations_from_list(data["locations"] or [])
    else:
        locations = load_locations(data.get("locations_path"))

    return Config(
        sms=_parse_sms(data.get("sms") or {}, secret_client),
        email=_parse_email(data.get("email") or {}, secret_client),
        locations=locations,
        firestore_database=data.get("firestore_database"),
        subscribers_collection=data.get("subscribers_collection", "subscribers"),
        delivery_service_url=_resolve_value(data.get("delivery_service_url"), secret_client),
        max_concurrency=_optional_int(data.get("max_concurrency")),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O. Without a config file, configuration
    is read from environment variables.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.info("Config file not found: %s, using environment", path)
        return load_config_from_env()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using environment")
        return load_config_from_env()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: %d locations, delivery %s",
        len(config.locations),
        "remote" if config.delivery_service_url else "in-process",
    )

    return config


def load_sms_settings_from_env() -> SmsSettings:
    """Read Twilio settings from TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER."""
    return SmsSettings(
        account_sid=os.environ.get("TWILIO_ACCOUNT_SID") or None,
        auth_token=os.environ.get("TWILIO_AUTH_TOKEN") or None,
        from_number=os.environ.get("TWILIO_PHONE_NUMBER") or None,
    )


def load_email_settings_from_env() -> EmailSettings:
    """Read SMTP settings from SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS and FROM_EMAIL."""
    return EmailSettings(
        host=os.environ.get("SMTP_HOST") or None,
        port=int(os.environ.get("SMTP_PORT") or DEFAULT_SMTP_PORT),
        username=os.environ.get("SMTP_USER") or None,
        password=os.environ.get("SMTP_PASS") or None,
        from_address=os.environ.get("FROM_EMAIL") or None,
    )


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Environment variables:
        TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_PHONE_NUMBER: SMS channel
        SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, FROM_EMAIL: Email channel
        FIRESTORE_DATABASE: Firestore database name
        SUBSCRIBERS_COLLECTION: Firestore collection of subscribers
        DELIVERY_SERVICE_URL: Remote delivery sub-service base URL
        LOCATIONS_PATH: Location catalog YAML
        MAX_CONCURRENCY: Cap on in-flight deliveries

    Returns:
        Config object from environment
    """
    env = os.environ

    return Config(
        sms=load_sms_settings_from_env(),
        email=load_email_settings_from_env(),
        locations=load_locations(),
        firestore_database=env.get("FIRESTORE_DATABASE") or None,
        subscribers_collection=env.get("SUBSCRIBERS_COLLECTION") or "subscribers",
        delivery_service_url=env.get("DELIVERY_SERVICE_URL") or None,
        max_concurrency=_optional_int(env.get("MAX_CONCURRENCY")),
    )
