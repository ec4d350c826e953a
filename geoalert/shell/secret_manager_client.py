"""Secret Manager Client - Imperative Shell.

This module handles reading channel credentials from Google Cloud Secret
Manager and resolving config placeholders. All I/O is contained here;
configuration models are in the core module.

Placeholder syntax:
    ${secret:NAME}   Secret Manager secret NAME (latest version)
    ${VAR}           Environment variable VAR
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Optional

from google.cloud import secretmanager


logger = logging.getLogger(__name__)


PLACEHOLDER_PATTERN = re.compile(r"^\$\{(secret:)?([A-Za-z0-9_\-]+)\}$")


@dataclass
class SecretManagerConfig:
    """Configuration for Secret Manager client.

    Attributes:
        project_id: GCP project ID (None for default)
    """
    project_id: Optional[str] = None


def resolve_env_placeholder(value: str) -> str:
    """Resolve a ${VAR} placeholder from the environment.

    Secret placeholders and plain values are returned unchanged, as are
    placeholders for unset variables.
    """
    match = PLACEHOLDER_PATTERN.match(value)
    if match is None or match.group(1):
        return value

    env_value = os.environ.get(match.group(2))
    if env_value:
        return env_value

    logger.warning("Environment variable %s not set", match.group(2))
    return value


class SecretManagerClient:
    """Client for reading secrets from Google Cloud Secret Manager.

    This is part of the imperative shell - it handles secret I/O.
    """

    def __init__(self, config: Optional[SecretManagerConfig] = None) -> None:
        """Initialize Secret Manager client.

        Args:
            config: Secret Manager configuration
        """
        self.config = config or SecretManagerConfig()
        self._client: Optional[secretmanager.SecretManagerServiceClient] = None

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy initialization of Secret Manager client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def get_secret(
        self,
        secret_name: str,
        version: str = "latest",
        project_id: Optional[str] = None,
    ) -> Optional[str]:
        """Fetch a secret value from Secret Manager.

        This method performs I/O.

        Args:
            secret_name: Name of the secret (not the full resource path)
            version: Version of the secret (default: "latest")
            project_id: GCP project ID (uses config if not provided)

        Returns:
            Secret value as string, or None if not found
        """
        project = project_id or self.config.project_id

        if not project:
            logger.error("No project ID configured for Secret Manager")
            return None

        name = f"projects/{project}/secrets/{secret_name}/versions/{version}"

        try:
            logger.info("Fetching secret: %s", secret_name)
            response = self.client.access_secret_version(request={"name": name})
            secret_value = response.payload.data.decode("UTF-8")
            logger.info("Successfully fetched secret: %s", secret_name)
            return secret_value

        except Exception as e:
            logger.error("Failed to fetch secret %s: %s", secret_name, str(e))
            return None

    def resolve(self, value: str) -> str:
        """Resolve a config value that may be a placeholder.

        ${secret:NAME} is fetched from Secret Manager and ${VAR} is read
        from the environment. Anything else is returned unchanged, and so
        is a placeholder that cannot be resolved, so that validation can
        report it.

        Args:
            value: Raw config value

        Returns:
            Resolved value
        """
        match = PLACEHOLDER_PATTERN.match(value)
        if match is None:
            return value

        if not match.group(1):
            return resolve_env_placeholder(value)

        secret_value = self.get_secret(match.group(2))
        if secret_value:
            return secret_value

        logger.warning("Secret %s could not be resolved", match.group(2))
        return value
