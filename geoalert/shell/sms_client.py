"""SMS Client via Twilio - Imperative Shell.

This module handles sending SMS messages via Twilio's Messages API.
All I/O is contained here; message formatting is in the core module.
"""

import logging
from dataclasses import dataclass

from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException

from geoalert.core.config import SmsSettings


logger = logging.getLogger(__name__)


@dataclass
class SmsResponse:
    """Response from an SMS send attempt.

    Attributes:
        success: Whether the provider accepted the message
        message_sid: Twilio message SID if successful
        error: Error message if failed
    """
    success: bool
    message_sid: str | None = None
    error: str | None = None


class SmsClient:
    """Client for sending SMS messages via Twilio.

    This is part of the imperative shell - it handles I/O. The Twilio
    REST client is created lazily and shared across sends; it is safe to
    use from the dispatcher's worker threads.
    """

    def __init__(self, settings: SmsSettings) -> None:
        """Initialize SMS client.

        Args:
            settings: Twilio credentials and sending number
        """
        self.settings = settings
        self._client: Client | None = None

    @property
    def client(self) -> Client:
        """Lazy initialization of the Twilio client."""
        if self._client is None:
            self._client = Client(self.settings.account_sid, self.settings.auth_token)
        return self._client

    def send_message(self, text: str, to_number: str) -> SmsResponse:
        """Send an SMS via Twilio.

        This method performs HTTP I/O. Provider and network failures are
        returned as an unsuccessful response, never raised.

        Args:
            text: Message body
            to_number: Recipient phone number (E.164)

        Returns:
            SmsResponse indicating success or failure
        """
        logger.info("Sending SMS via Twilio to %s", to_number)

        try:
            message = self.client.messages.create(
                body=text,
                from_=self.settings.from_number,
                to=to_number,
            )

            logger.info("SMS sent: %s", message.sid)
            return SmsResponse(
                success=True,
                message_sid=message.sid,
            )

        except TwilioRestException as e:
            logger.error("Twilio API error for %s: %s", to_number, str(e))
            return SmsResponse(
                success=False,
                error=f"SMS delivery failed: {e.status} {e.msg}",
            )
        except Exception as e:
            logger.error("SMS send failed for %s: %s", to_number, str(e))
            return SmsResponse(
                success=False,
                error=f"SMS delivery failed: {e}",
            )
