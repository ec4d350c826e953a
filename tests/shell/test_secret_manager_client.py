"""Tests for Secret Manager placeholder resolution.

Uses unittest.mock in place of the Secret Manager API.
"""

import os
from unittest.mock import MagicMock, patch

from geoalert.shell.secret_manager_client import (
    SecretManagerClient,
    SecretManagerConfig,
    resolve_env_placeholder,
)


def client_with_secret(value: bytes | None = None, error: Exception | None = None) -> SecretManagerClient:
    """Client whose API returns the given payload or raises."""
    api = MagicMock()
    if error is not None:
        api.access_secret_version.side_effect = error
    else:
        api.access_secret_version.return_value.payload.data = value
    client = SecretManagerClient(SecretManagerConfig(project_id="alerts-prod"))
    client._client = api
    return client


class TestResolveEnvPlaceholder:
    """Tests for resolve_env_placeholder()."""

    def test_resolves_set_variable(self):
        with patch.dict(os.environ, {"SMTP_HOST": "smtp.example.com"}):
            assert resolve_env_placeholder("${SMTP_HOST}") == "smtp.example.com"

    def test_unset_variable_unchanged(self):
        with patch.dict(os.environ, {}, clear=True):
            assert resolve_env_placeholder("${SMTP_HOST}") == "${SMTP_HOST}"

    def test_secret_and_plain_values_unchanged(self):
        assert resolve_env_placeholder("${secret:smtp-pass}") == "${secret:smtp-pass}"
        assert resolve_env_placeholder("smtp.example.com") == "smtp.example.com"


class TestSecretManagerClient:
    """Tests for SecretManagerClient."""

    def test_get_secret_builds_resource_name(self):
        """Secrets are read from the latest version in the project."""
        client = client_with_secret(b"token-value")

        assert client.get_secret("twilio-token") == "token-value"
        client._client.access_secret_version.assert_called_once_with(
            request={"name": "projects/alerts-prod/secrets/twilio-token/versions/latest"},
        )

    def test_get_secret_without_project(self):
        """No project configured returns None without calling the API."""
        client = SecretManagerClient()
        client._client = MagicMock()

        assert client.get_secret("twilio-token") is None
        client._client.access_secret_version.assert_not_called()

    def test_get_secret_error_returns_none(self):
        client = client_with_secret(error=Exception("permission denied"))
        assert client.get_secret("twilio-token") is None

    def test_resolve_secret_placeholder(self):
        client = client_with_secret(b"s3cret")
        assert client.resolve("${secret:smtp-pass}") == "s3cret"

    def test_resolve_missing_secret_unchanged(self):
        """Unresolvable secrets are returned as-is."""
        client = client_with_secret(error=Exception("not found"))
        assert client.resolve("${secret:smtp-pass}") == "${secret:smtp-pass}"

    def test_resolve_env_placeholder(self):
        client = client_with_secret(b"unused")
        with patch.dict(os.environ, {"FROM_EMAIL": "alerts@example.com"}):
            assert client.resolve("${FROM_EMAIL}") == "alerts@example.com"
        client._client.access_secret_version.assert_not_called()

    def test_resolve_plain_value(self):
        client = client_with_secret(b"unused")
        assert client.resolve("plain") == "plain"
