"""Configuration error classes."""

from typing import Optional


class ConfigError(ValueError):
    """Raised when a configuration value is present but unusable.

    Attributes:
        field: Dotted config key that failed (e.g. ``stream.queue_size``)
        remediation: Hint shown to the user alongside the error
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        remediation: Optional[str] = None,
    ):
        self.field = field
        self.remediation = remediation
        super().__init__(message)


class MissingConfigError(ConfigError):
    """Raised when a setting required by the command was never provided."""
