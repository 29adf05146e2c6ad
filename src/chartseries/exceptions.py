"""Custom exceptions for the chart series pipeline.

Malformed raw points and empty datasets are recoverable and are reported as
diagnostics, not raised. Degenerate arithmetic (division by zero, zero range)
is never an exception: IEEE-754 Infinity/NaN values propagate to the caller.
"""


class ChartSeriesError(Exception):
    """Base exception for all chart series errors."""


class ConfigurationError(ChartSeriesError):
    """Raised when a dataset descriptor or request is misconfigured."""


class UnknownIndicator(ConfigurationError):
    """Raised when a study name does not map to a known indicator."""

    def __init__(self, name: object) -> None:
        self.name = name
        super().__init__(f"Unknown indicator: {name!r}")


class UnknownDisplayMode(ConfigurationError):
    """Raised when a display mode does not map to a known transform."""

    def __init__(self, mode: object) -> None:
        self.mode = mode
        super().__init__(f"Unknown display mode: {mode!r}")


class InvalidDescriptor(ConfigurationError):
    """Raised when a dataset descriptor field has an unusable type or value."""

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {value!r}")


class MissingDatasetList(ConfigurationError):
    """Raised when the pipeline is invoked without any dataset descriptors."""


class EmptySeriesError(ChartSeriesError, ValueError):
    """Raised when a computation that needs at least one point gets none."""
