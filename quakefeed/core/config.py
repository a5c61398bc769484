"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field


# USGS summary feed: all earthquakes in the past day
DEFAULT_FEED_URL = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/all_day.geojson"

DEFAULT_POLLING_INTERVAL_SECONDS = 15
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30
DEFAULT_API_PORT = 8080
DEFAULT_FAVORITES_PATH = "data/favorites.json"


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        polling_interval_seconds: Seconds between poll cycles
        min_magnitude: Minimum magnitude admitted when parsing the feed
        sort_by_magnitude: Order each snapshot by descending magnitude
        feed_url: USGS GeoJSON feed URL
        request_timeout_seconds: Timeout for the feed request
        api_enabled: Whether to run the status endpoint
        api_host: Interface the status endpoint binds to
        api_port: Port the status endpoint listens on
        favorites_path: JSON file holding favorite event IDs
    """
    polling_interval_seconds: int = DEFAULT_POLLING_INTERVAL_SECONDS
    min_magnitude: float = 0.0
    sort_by_magnitude: bool = True
    feed_url: str = DEFAULT_FEED_URL
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    api_enabled: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = DEFAULT_API_PORT
    favorites_path: str = DEFAULT_FAVORITES_PATH


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


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if config.polling_interval_seconds <= 0:
        errors.append(ValidationError(
            field="polling_interval_seconds",
            message=f"Polling interval must be positive, got {config.polling_interval_seconds}",
        ))

    if config.request_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="request_timeout_seconds",
            message=f"Request timeout must be positive, got {config.request_timeout_seconds}",
        ))

    if not 0 <= config.api_port <= 65535:
        errors.append(ValidationError(
            field="api_port",
            message=f"Port {config.api_port} out of range [0, 65535]",
        ))

    if not config.feed_url.startswith(("http://", "https://")):
        errors.append(ValidationError(
            field="feed_url",
            message=f"Feed URL must be http(s), got {config.feed_url!r}",
        ))

    # Magnitudes outside this range never appear in the feed
    if not -2.0 <= config.min_magnitude <= 10.0:
        errors.append(ValidationError(
            field="min_magnitude",
            message=f"Minimum magnitude {config.min_magnitude} outside [-2, 10]; "
                    "snapshots may be empty or unfiltered",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
