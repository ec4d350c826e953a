"""Error taxonomy for distribution runs.

Only request-level errors abort a run. Channel configuration problems and
provider failures are captured per task inside the DeliveryReport (see
geoalert/core/delivery.py) and never raised.
"""


class RequestError(ValueError):
    """The inbound distribution request is malformed.

    Raised for unparseable payloads, missing required alert fields,
    unknown severities/types, and alerts whose epicenter cannot be resolved.
    """


class InvalidCoordinatesError(RequestError):
    """Coordinates are NaN or outside the valid latitude/longitude range."""


class MalformedResponseError(ValueError):
    """A delivery sub-service answered 200 with a body that is not a valid report.

    Converted into per-task transport failures for that batch; never
    aborts a run.
    """
