# seriesview/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for all core-domain exceptions."""


# ---- Validation / construction errors ----
class InvalidSeries(CoreError):
    """Raised when a Series is constructed with invalid inputs."""


class InvalidMeasurement(CoreError):
    """Raised when a Measurement is constructed with invalid inputs."""


class InvalidMeasurementSet(CoreError):
    """Raised when a MeasurementSet is not ordered by time."""


class InvalidSelection(CoreError):
    """Raised when a SeriesSelection is built from the wrong types."""


class ConfigError(CoreError):
    """Raised when configuration values are invalid."""


# ---- Failures surfaced to the user (never thrown out of the engine) ----
class ValidationFailure(CoreError):
    """A user input (e.g. a custom time range) was rejected."""


class InvalidTimeWindow(ValidationFailure):
    """Raised when a custom time window cannot be applied."""


class LoadFailure(CoreError):
    """Raised when the series catalog (or the whole load) could not be fetched."""


class AccessError(CoreError):
    """Raised by catalog / measurement store collaborators when a call fails."""


class RenderFailure(CoreError):
    """Raised when projecting or redrawing the chart failed unexpectedly."""


# ---- Lookup errors (also behave like KeyError for dict-like APIs) ----
class SeriesNotFound(CoreError, KeyError):
    """Raised when a requested series id is not present."""
