"""Delivery Dispatcher - Concurrent fan-out over the shell clients.

This module issues every delivery task of a run concurrently, waits for
all of them to settle, and folds the outcomes into one DeliveryReport.
Planning, gating and aggregation are pure functions in
geoalert/core/delivery.py; message rendering is in geoalert/core/formatter.py.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from geoalert.core.alert import Alert, Recipient
from geoalert.core.config import EmailSettings, SmsSettings
from geoalert.core.delivery import (
    CHANNEL_SMS,
    DeliveryOutcome,
    DeliveryReport,
    DeliveryTask,
    ServiceStatus,
    build_report,
    check_email_config,
    check_sms_config,
    delivered_outcome,
    enumerate_direct_tasks,
    enumerate_tasks,
    gate_outcome,
    transport_outcome,
)
from geoalert.core.formatter import format_email_message, format_sms_message
from geoalert.core.variants import ZoneDistribution
from geoalert.shell.email_client import EmailClient
from geoalert.shell.sms_client import SmsClient


logger = logging.getLogger(__name__)


class Dispatcher:
    """Delivers tasks over SMS and email with settle-all semantics.

    Every task reaches exactly one terminal outcome. One task's failure
    never cancels or delays another, and the report lists outcomes in
    enumeration order regardless of completion order.
    """

    def __init__(
        self,
        sms_settings: SmsSettings,
        email_settings: EmailSettings,
        sms_client: SmsClient | None = None,
        email_client: EmailClient | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            sms_settings: SMS channel settings (drives the SMS gate)
            email_settings: Email channel settings (drives the email gate)
            sms_client: SMS client (created if not provided)
            email_client: Email client (created if not provided)
            max_concurrency: Cap on in-flight tasks (None = one worker per task;
                values below one run a single worker)
        """
        self.sms_settings = sms_settings
        self.email_settings = email_settings
        self.sms_client = sms_client or SmsClient(sms_settings)
        self.email_client = email_client or EmailClient(email_settings)
        self.max_concurrency = max_concurrency

    def _send(self, task: DeliveryTask) -> DeliveryOutcome:
        """Render and send one task. Runs on a worker thread."""
        if task.channel == CHANNEL_SMS:
            text = format_sms_message(task.alert, task.language)
            response = self.sms_client.send_message(text, task.recipient_address)
        else:
            content = format_email_message(task.alert, task.language)
            response = self.email_client.send_message(
                task.recipient_address, content.subject, content.html,
            )

        if response.success:
            logger.info("%s delivered to %s", task.channel, task.recipient_address)
            return delivered_outcome(task)

        logger.error(
            "%s delivery to %s failed: %s",
            task.channel, task.recipient_address, response.error,
        )
        return transport_outcome(task, response.error or f"{task.channel} delivery failed")

    def _check_gates(self) -> tuple[ServiceStatus, ServiceStatus]:
        """Evaluate both channel gates once per run."""
        sms_status = check_sms_config(self.sms_settings)
        email_status = check_email_config(self.email_settings)

        for status in (sms_status, email_status):
            if not status.enabled:
                logger.warning(
                    "%s channel disabled, missing: %s",
                    status.channel, ", ".join(status.missing_fields),
                )

        return sms_status, email_status

    def run(self, tasks: list[DeliveryTask]) -> DeliveryReport:
        """Deliver a list of tasks and wait for all of them to settle.

        Args:
            tasks: Tasks in enumeration order

        Returns:
            DeliveryReport with errors in enumeration order
        """
        sms_status, email_status = self._check_gates()

        outcomes: list[DeliveryOutcome | None] = [None] * len(tasks)
        issued: list[int] = []

        for i, task in enumerate(tasks):
            status = sms_status if task.channel == CHANNEL_SMS else email_status
            if status.enabled:
                issued.append(i)
            else:
                outcomes[i] = gate_outcome(task, status)

        if issued:
            max_workers = max(1, self.max_concurrency or len(issued))
            with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="delivery") as executor:
                futures: list[tuple[int, Future]] = [
                    (i, executor.submit(self._send, tasks[i])) for i in issued
                ]

                # Read in submission order; completion order is irrelevant
                for i, future in futures:
                    try:
                        outcomes[i] = future.result()
                    except Exception as e:
                        logger.exception("Unexpected error delivering task %d", i)
                        outcomes[i] = transport_outcome(
                            tasks[i], f"{tasks[i].channel} delivery failed: {e}",
                        )

        report = build_report(
            [o for o in outcomes if o is not None],
            sms_enabled=sms_status.enabled,
            email_enabled=email_status.enabled,
        )

        logger.info(
            "Dispatched %d tasks (%d issued): %s",
            report.attempted, len(issued), report.summary,
        )
        return report

    def dispatch(self, distributions: list[ZoneDistribution]) -> DeliveryReport:
        """Deliver every zone's alert variant to that zone's recipients.

        Args:
            distributions: Zone distributions, innermost zone first

        Returns:
            One DeliveryReport for the whole run
        """
        return self.run(enumerate_tasks(distributions))

    def dispatch_direct(self, alert: Alert, recipients: list[Recipient]) -> DeliveryReport:
        """Deliver one alert to an explicit recipient list.

        Args:
            alert: Alert to deliver (zone-tagged or not)
            recipients: Recipients in submission order

        Returns:
            DeliveryReport
        """
        return self.run(enumerate_direct_tasks(alert, recipients))
