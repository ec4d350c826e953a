"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from geoalert.core.geo import LocationEntry


DEFAULT_SMTP_PORT = 587


@dataclass(frozen=True)
class SmsSettings:
    """Twilio SMS credentials.

    Attributes:
        account_sid: Twilio account SID
        auth_token: Twilio auth token
        from_number: Sending phone number (E.164)
    """
    account_sid: str | None = None
    auth_token: str | None = None
    from_number: str | None = None


@dataclass(frozen=True)
class EmailSettings:
    """SMTP credentials.

    Attributes:
        host: SMTP server host
        port: SMTP server port (STARTTLS)
        username: SMTP login
        password: SMTP password
        from_address: Sender address
    """
    host: str | None = None
    port: int = DEFAULT_SMTP_PORT
    username: str | None = None
    password: str | None = None
    from_address: str | None = None


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        sms: SMS channel settings
        email: Email channel settings
        locations: Location catalog for zone classification
        firestore_database: Firestore database name (None for default)
        subscribers_collection: Firestore collection of subscribers
        delivery_service_url: Remote delivery sub-service (None sends in-process)
        max_concurrency: Cap on in-flight deliveries (None = one worker per task)
    """
    sms: SmsSettings = field(default_factory=SmsSettings)
    email: EmailSettings = field(default_factory=EmailSettings)
    locations: list[LocationEntry] = field(default_factory=list)
    firestore_database: str | None = None
    subscribers_collection: str = "subscribers"
    delivery_service_url: str | None = None
    max_concurrency: int | None = None


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lng: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lng: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lng <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lng} out of range [-180, 180]",
        ))

    return errors


def validate_locations(locations: list[LocationEntry]) -> list[ValidationError]:
    """Validate the location catalog.

    Pure function. Duplicate names (case-insensitive) are warnings: zone
    membership is keyed by name, so later duplicates are shadowed.
    """
    errors = []
    seen: dict[str, int] = {}

    for i, entry in enumerate(locations):
        field_name = f"locations[{i}]"

        if not entry.name.strip():
            errors.append(ValidationError(
                field=f"{field_name}.name",
                message="Location name must not be empty",
            ))

        errors.extend(validate_coordinates(
            entry.coordinates.lat, entry.coordinates.lng, field_name,
        ))

        key = entry.name.strip().lower()
        if key in seen:
            errors.append(ValidationError(
                field=f"{field_name}.name",
                message=f"Duplicate location '{entry.name}' (also locations[{seen[key]}])",
                severity="warning",
            ))
        else:
            seen[key] = i

    return errors


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function. Missing channel credentials are warnings, not errors:
    the run still proceeds and tasks on a closed channel fail with a
    configuration error.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors = validate_locations(config.locations)

    if not config.locations:
        errors.append(ValidationError(
            field="locations",
            message="Location catalog is empty; zoned alerts will reach nobody",
            severity="warning",
        ))

    if not 0 < config.email.port <= 65535:
        errors.append(ValidationError(
            field="email.port",
            message=f"SMTP port {config.email.port} out of range [1, 65535]",
        ))

    if config.max_concurrency is not None and config.max_concurrency < 1:
        errors.append(ValidationError(
            field="max_concurrency",
            message=f"max_concurrency must be positive, got {config.max_concurrency}",
        ))

    sms = config.sms
    if not (sms.account_sid and sms.auth_token and sms.from_number):
        errors.append(ValidationError(
            field="sms",
            message="SMS credentials incomplete; SMS deliveries will fail",
            severity="warning",
        ))

    email = config.email
    if not (email.host and email.from_address and email.username and email.password):
        errors.append(ValidationError(
            field="email",
            message="SMTP credentials incomplete; email deliveries will fail",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
