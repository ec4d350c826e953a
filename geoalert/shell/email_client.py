"""Email Client via SMTP - Imperative Shell.

This module handles sending HTML email over SMTP with STARTTLS.
All I/O is contained here; message rendering is in the core module.
"""

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from geoalert.core.config import EmailSettings


logger = logging.getLogger(__name__)


# Default timeout for SMTP connections (seconds)
DEFAULT_TIMEOUT = 30


@dataclass
class EmailResponse:
    """Response from an email send attempt.

    Attributes:
        success: Whether the server accepted the message
        error: Error message if failed
    """
    success: bool
    error: str | None = None


class EmailClient:
    """Client for sending HTML email via SMTP.

    This is part of the imperative shell - it handles network I/O.
    Each send opens its own connection, so concurrent sends from the
    dispatcher's worker threads do not share state.
    """

    def __init__(self, settings: EmailSettings, timeout: int = DEFAULT_TIMEOUT) -> None:
        """Initialize email client.

        Args:
            settings: SMTP host, credentials and sender address
            timeout: Connection timeout in seconds
        """
        self.settings = settings
        self.timeout = timeout

    def _build_message(self, to_address: str, subject: str, html: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.settings.from_address or ""
        message["To"] = to_address
        message.attach(MIMEText(html, "html", "utf-8"))
        return message

    def send_message(self, to_address: str, subject: str, html: str) -> EmailResponse:
        """Send an HTML email.

        This method performs network I/O. SMTP and socket failures are
        returned as an unsuccessful response, never raised.

        Args:
            to_address: Recipient email address
            subject: Subject line
            html: HTML body

        Returns:
            EmailResponse indicating success or failure
        """
        logger.info("Sending email to %s", to_address)

        message = self._build_message(to_address, subject, html)

        try:
            with smtplib.SMTP(self.settings.host, self.settings.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                smtp.login(self.settings.username, self.settings.password)
                smtp.sendmail(self.settings.from_address, [to_address], message.as_string())

            logger.info("Email sent to %s", to_address)
            return EmailResponse(success=True)

        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email send failed for %s: %s", to_address, str(e))
            return EmailResponse(
                success=False,
                error=f"Email delivery failed: {e}",
            )
