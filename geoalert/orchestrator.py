"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components. It's the "glue" that
makes the application work.

A zoned run: resolve epicenter -> snapshot subscribers -> define zones
-> select recipients and build zone variants -> deliver -> report.
A direct run skips the geography and delivers one alert to an explicit
recipient list.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from geoalert.core.alert import Alert, Recipient
from geoalert.core.config import Config
from geoalert.core.delivery import (
    DeliveryReport,
    build_report,
    enumerate_direct_tasks,
    merge_reports,
    report_from_response,
    transport_outcome,
)
from geoalert.core.errors import MalformedResponseError
from geoalert.core.formatter import format_zone_plan
from geoalert.core.variants import (
    Localizer,
    ZoneDistribution,
    build_zone_distributions,
    resolve_epicenter,
    table_localizer,
)
from geoalert.dispatcher import Dispatcher
from geoalert.shell.delivery_service_client import DeliveryServiceClient
from geoalert.shell.firestore_client import (
    DirectoryUnavailableError,
    FirestoreConfig,
    FirestoreSubscriberRepository,
)


logger = logging.getLogger(__name__)


@dataclass
class DistributionResult:
    """Result of a distribution run.

    Attributes:
        alert: The base alert
        distributions: Zone distributions that were delivered (empty for direct runs)
        report: Delivery report for the whole run
        directory_error: Set when the subscriber directory could not be
            read and the run used an empty snapshot
    """
    alert: Alert
    distributions: list[ZoneDistribution] = field(default_factory=list)
    report: DeliveryReport = field(default_factory=DeliveryReport)
    directory_error: str | None = None

    @property
    def success(self) -> bool:
        """Returns True if the directory was read and every delivery task succeeded."""
        return self.directory_error is None and self.report.success

    @property
    def summary(self) -> str:
        """Human-readable summary of the run."""
        zones = ", ".join(d.zone.kind for d in self.distributions) or "direct"
        summary = f"Alert {self.alert.id} ({zones}): {self.report.summary}"
        if self.directory_error:
            summary += " (subscriber directory unavailable)"
        return summary


class Orchestrator:
    """Coordinates zoned and direct alert distribution.

    This class wires together:
    - Subscriber repository (directory snapshot from Firestore)
    - Core functions (zones, targeting, variants, formatting)
    - Dispatcher (in-process SMS/email fan-out), or
    - Delivery service client (remote sub-service fan-out)
    """

    def __init__(
        self,
        config: Config,
        repository: FirestoreSubscriberRepository | None = None,
        dispatcher: Dispatcher | None = None,
        delivery_service_client: DeliveryServiceClient | None = None,
        localizer: Localizer = table_localizer,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            repository: Subscriber repository (created if not provided)
            dispatcher: In-process dispatcher (created if not provided)
            delivery_service_client: Remote sub-service client (created
                if not provided and config.delivery_service_url is set)
            localizer: Source of localized alert content
        """
        self.config = config
        self.localizer = localizer
        self.repository = repository or FirestoreSubscriberRepository(
            FirestoreConfig(
                database=config.firestore_database,
                collection=config.subscribers_collection,
            )
        )
        self.dispatcher = dispatcher or Dispatcher(
            config.sms,
            config.email,
            max_concurrency=config.max_concurrency,
        )
        if delivery_service_client is None and config.delivery_service_url:
            delivery_service_client = DeliveryServiceClient(config.delivery_service_url)
        self.delivery_service_client = delivery_service_client

    def _deliver_batch_remote(self, alert: Alert, recipients: list[Recipient]) -> DeliveryReport:
        """Hand one batch to the sub-service and convert its answer."""
        response = self.delivery_service_client.send_alert(alert, recipients)

        if response.success and response.body is not None:
            try:
                return report_from_response(response.body)
            except MalformedResponseError as e:
                logger.error("Malformed delivery service response for alert %s: %s", alert.id, e)
                reason = f"Delivery service returned a malformed response: {e}"
        else:
            reason = response.error or "Delivery service unavailable"

        # Every task of the batch is a transport failure
        return build_report([
            transport_outcome(task, reason)
            for task in enumerate_direct_tasks(alert, recipients)
        ])

    def _deliver_remote(self, batches: list[tuple[Alert, list[Recipient]]]) -> DeliveryReport:
        """Send batches to the sub-service concurrently and merge the reports.

        Reports are merged in batch order.
        """
        if not batches:
            return DeliveryReport()

        with ThreadPoolExecutor(max_workers=len(batches), thread_name_prefix="delivery-service") as executor:
            reports = list(executor.map(
                lambda batch: self._deliver_batch_remote(*batch),
                batches,
            ))

        return merge_reports(reports)

    def distribute(self, alert: Alert) -> DistributionResult:
        """Run a zoned distribution for an alert.

        Args:
            alert: Base alert

        Returns:
            DistributionResult with the zone plan and delivery report

        Raises:
            RequestError: If the alert's epicenter cannot be resolved
        """
        logger.info("Starting zoned distribution for alert %s (%s)", alert.id, alert.severity)

        # Reject unresolvable epicenters before any I/O
        resolve_epicenter(alert, self.config.locations)

        directory_error = None
        try:
            subscribers = self.repository.list_active_subscribers()
        except DirectoryUnavailableError as e:
            logger.exception("Subscriber directory unavailable for alert %s", alert.id)
            directory_error = str(e)
            subscribers = []

        distributions = build_zone_distributions(
            alert,
            self.config.locations,
            subscribers,
            self.localizer,
        )

        logger.info("Zone plan for alert %s:\n%s", alert.id, format_zone_plan(distributions))

        if self.delivery_service_client is not None:
            report = self._deliver_remote([
                (d.alert, list(d.recipients)) for d in distributions
            ])
        else:
            report = self.dispatcher.dispatch(distributions)

        result = DistributionResult(
            alert=alert,
            distributions=distributions,
            report=report,
            directory_error=directory_error,
        )
        logger.info("Completed: %s", result.summary)
        return result

    def distribute_direct(self, alert: Alert, recipients: list[Recipient]) -> DistributionResult:
        """Deliver one alert to an explicit recipient list.

        Args:
            alert: Alert to deliver
            recipients: Recipients in submission order

        Returns:
            DistributionResult with the delivery report
        """
        logger.info(
            "Starting direct distribution for alert %s to %d recipients",
            alert.id, len(recipients),
        )

        if self.delivery_service_client is not None:
            report = self._deliver_remote([(alert, recipients)])
        else:
            report = self.dispatcher.dispatch_direct(alert, recipients)

        result = DistributionResult(alert=alert, report=report)
        logger.info("Completed: %s", result.summary)
        return result
