"""Delivery planning and aggregation - Pure functions.

This module turns zone distributions into per-channel delivery tasks,
evaluates the channel availability gates, and folds per-task outcomes
into a DeliveryReport. The concurrent sending itself lives in the
dispatcher; everything here is deterministic and free of I/O.

Task lifecycle: Pending -> Gated-Fail | Sent; Sent -> Delivered | Rejected.
There are no retries within a run.
"""

from dataclasses import dataclass
from typing import Any

from geoalert.core.alert import Alert, Recipient
from geoalert.core.config import EmailSettings, SmsSettings
from geoalert.core.errors import MalformedResponseError
from geoalert.core.variants import ZoneDistribution


CHANNEL_SMS = "SMS"
CHANNEL_EMAIL = "Email"

STATUS_DELIVERED = "delivered"
STATUS_FAILED = "failed"

# Failure kinds
ERROR_CONFIGURATION = "configuration"
ERROR_TRANSPORT = "transport"


@dataclass(frozen=True)
class ServiceStatus:
    """Availability of one channel for a distribution run.

    Attributes:
        channel: SMS or Email
        missing_fields: Required settings that are empty
    """
    channel: str
    missing_fields: tuple[str, ...] = ()

    @property
    def enabled(self) -> bool:
        return not self.missing_fields

    @property
    def reason(self) -> str:
        """Failure reason for tasks on a closed channel."""
        return f"{self.channel} service not configured: {', '.join(self.missing_fields)}"


@dataclass(frozen=True)
class DeliveryTask:
    """One unit of outbound work.

    Attributes:
        channel: SMS or Email
        recipient_address: Phone number or email address
        language: Recipient language code
        alert: Alert variant to deliver
    """
    channel: str
    recipient_address: str
    language: str
    alert: Alert


@dataclass(frozen=True)
class DeliveryOutcome:
    """Terminal state of a delivery task.

    Attributes:
        task: The task
        status: delivered or failed
        reason: Failure reason (None when delivered)
        error_kind: configuration or transport (None when delivered)
    """
    task: DeliveryTask
    status: str
    reason: str | None = None
    error_kind: str | None = None

    @property
    def delivered(self) -> bool:
        return self.status == STATUS_DELIVERED


@dataclass(frozen=True)
class DeliveryError:
    """One failed task in a report."""
    channel: str
    recipient: str
    reason: str


@dataclass(frozen=True)
class DeliveryReport:
    """Itemized accounting of a distribution run.

    Invariants: attempted == delivered + failed, len(errors) == failed.

    Attributes:
        attempted: Number of tasks
        delivered: Tasks delivered
        failed: Tasks gated or rejected
        errors: One entry per failed task, in enumeration order
        sms_enabled: Whether the SMS gate was open
        email_enabled: Whether the email gate was open
    """
    attempted: int = 0
    delivered: int = 0
    failed: int = 0
    errors: tuple[DeliveryError, ...] = ()
    sms_enabled: bool = True
    email_enabled: bool = True

    @property
    def success(self) -> bool:
        """True only when nothing failed."""
        return self.failed == 0

    @property
    def summary(self) -> str:
        """Human-readable summary."""
        return f"{self.delivered} delivered, {self.failed} failed"


def _missing(fields: list[tuple[str, str | None]]) -> tuple[str, ...]:
    return tuple(name for name, value in fields if not value)


def check_sms_config(settings: SmsSettings) -> ServiceStatus:
    """Evaluate the SMS gate: account SID, auth token and sending number.

    Pure function.
    """
    return ServiceStatus(
        channel=CHANNEL_SMS,
        missing_fields=_missing([
            ("TWILIO_ACCOUNT_SID", settings.account_sid),
            ("TWILIO_AUTH_TOKEN", settings.auth_token),
            ("TWILIO_PHONE_NUMBER", settings.from_number),
        ]),
    )


def check_email_config(settings: EmailSettings) -> ServiceStatus:
    """Evaluate the email gate: host, from-address, username and password.

    Pure function.
    """
    return ServiceStatus(
        channel=CHANNEL_EMAIL,
        missing_fields=_missing([
            ("SMTP_HOST", settings.host),
            ("FROM_EMAIL", settings.from_address),
            ("SMTP_USER", settings.username),
            ("SMTP_PASS", settings.password),
        ]),
    )


def tasks_for_recipient(recipient: Recipient, alert: Alert) -> list[DeliveryTask]:
    """Tasks for one recipient: SMS before email.

    Pure function.
    """
    tasks = []
    if recipient.phone:
        tasks.append(DeliveryTask(
            channel=CHANNEL_SMS,
            recipient_address=recipient.phone,
            language=recipient.language,
            alert=alert,
        ))
    if recipient.email:
        tasks.append(DeliveryTask(
            channel=CHANNEL_EMAIL,
            recipient_address=recipient.email,
            language=recipient.language,
            alert=alert,
        ))
    return tasks


def enumerate_direct_tasks(alert: Alert, recipients: list[Recipient]) -> list[DeliveryTask]:
    """Flatten a direct-mode recipient list into tasks, in submission order.

    Pure function.
    """
    tasks = []
    for recipient in recipients:
        tasks.extend(tasks_for_recipient(recipient, alert))
    return tasks


def enumerate_tasks(distributions: list[ZoneDistribution]) -> list[DeliveryTask]:
    """Flatten zone distributions into tasks.

    Pure function. Zones in order, recipients in submission order, SMS
    before email per recipient. This order is the report order.
    """
    tasks = []
    for distribution in distributions:
        tasks.extend(enumerate_direct_tasks(distribution.alert, list(distribution.recipients)))
    return tasks


def gate_outcome(task: DeliveryTask, status: ServiceStatus) -> DeliveryOutcome:
    """Fail a task on a closed channel without attempting delivery.

    Pure function.
    """
    return DeliveryOutcome(
        task=task,
        status=STATUS_FAILED,
        reason=status.reason,
        error_kind=ERROR_CONFIGURATION,
    )


def delivered_outcome(task: DeliveryTask) -> DeliveryOutcome:
    return DeliveryOutcome(task=task, status=STATUS_DELIVERED)


def transport_outcome(task: DeliveryTask, reason: str) -> DeliveryOutcome:
    return DeliveryOutcome(
        task=task,
        status=STATUS_FAILED,
        reason=reason,
        error_kind=ERROR_TRANSPORT,
    )


def build_report(
    outcomes: list[DeliveryOutcome],
    sms_enabled: bool = True,
    email_enabled: bool = True,
) -> DeliveryReport:
    """Fold task outcomes into a DeliveryReport.

    Pure function. Outcomes must already be in enumeration order; error
    entries keep that order.

    Args:
        outcomes: One outcome per task
        sms_enabled: SMS gate state for the run
        email_enabled: Email gate state for the run

    Returns:
        DeliveryReport
    """
    delivered = sum(1 for o in outcomes if o.delivered)
    errors = tuple(
        DeliveryError(
            channel=o.task.channel,
            recipient=o.task.recipient_address,
            reason=o.reason or "unknown error",
        )
        for o in outcomes
        if not o.delivered
    )

    return DeliveryReport(
        attempted=len(outcomes),
        delivered=delivered,
        failed=len(errors),
        errors=errors,
        sms_enabled=sms_enabled,
        email_enabled=email_enabled,
    )


def merge_reports(reports: list[DeliveryReport]) -> DeliveryReport:
    """Combine per-batch reports, keeping batch order.

    Pure function. A channel counts as enabled only if every batch had
    it enabled.
    """
    errors: list[DeliveryError] = []
    for report in reports:
        errors.extend(report.errors)

    return DeliveryReport(
        attempted=sum(r.attempted for r in reports),
        delivered=sum(r.delivered for r in reports),
        failed=sum(r.failed for r in reports),
        errors=tuple(errors),
        sms_enabled=all(r.sms_enabled for r in reports),
        email_enabled=all(r.email_enabled for r in reports),
    )


def report_to_response(report: DeliveryReport, alert: Alert) -> dict[str, Any]:
    """Convert a report to the delivery sub-service response body.

    Pure function.
    """
    zone = alert.zone or "direct"
    zone_name = alert.zone.capitalize() if alert.zone else "Direct"

    return {
        "success": report.success,
        "sent": report.delivered,
        "failed": report.failed,
        "errors": [
            {"channel": e.channel, "recipient": e.recipient, "reason": e.reason}
            for e in report.errors
        ],
        "zone": zone,
        "radius": alert.radius_km,
        "config": {
            "smsEnabled": report.sms_enabled,
            "emailEnabled": report.email_enabled,
        },
        "message": f"{zone_name} zone alert: {report.delivered} delivered, {report.failed} failed",
    }


def _count(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedResponseError(f"'{key}' must be a non-negative integer, got {value!r}")
    return value


def report_from_response(data: Any) -> DeliveryReport:
    """Parse a delivery sub-service response body into a report.

    Pure function. The body must satisfy the report invariant: one
    error entry per failed task.

    Raises:
        MalformedResponseError: If the body is not a valid report
    """
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Response body must be an object, got {type(data).__name__}")

    raw_errors = data.get("errors", [])
    if not isinstance(raw_errors, list) or not all(isinstance(e, dict) for e in raw_errors):
        raise MalformedResponseError("'errors' must be a list of objects")

    errors = tuple(
        DeliveryError(
            channel=str(e.get("channel", "")),
            recipient=str(e.get("recipient", "")),
            reason=str(e.get("reason", "")),
        )
        for e in raw_errors
    )
    delivered = _count(data, "sent", 0)
    failed = _count(data, "failed", len(errors))
    if failed != len(errors):
        raise MalformedResponseError(
            f"'failed' is {failed} but {len(errors)} errors were reported"
        )

    config = data.get("config", {})
    if not isinstance(config, dict):
        raise MalformedResponseError("'config' must be an object")

    return DeliveryReport(
        attempted=delivered + failed,
        delivered=delivered,
        failed=failed,
        errors=errors,
        sms_enabled=bool(config.get("smsEnabled", True)),
        email_enabled=bool(config.get("emailEnabled", True)),
    )
