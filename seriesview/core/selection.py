# seriesview/core/selection.py
from __future__ import annotations

from dataclasses import dataclass, field, replace

from .exceptions import InvalidSelection
from .measurements import MeasurementSet
from .series import Measurement, MeasurementId, Series, SeriesId


@dataclass(frozen=True, slots=True)
class SeriesSelection:
    """
    One series known to the engine, whether it is shown, and its measurements.

    Immutable: toggling returns a new selection so the engine can swap the
    whole collection in one assignment.
    """
    series: Series
    included: bool = False
    measurements: MeasurementSet = field(default_factory=MeasurementSet, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.series, Series):
            raise InvalidSelection("SeriesSelection.series must be a Series instance.")
        if not isinstance(self.measurements, MeasurementSet):
            raise InvalidSelection("SeriesSelection.measurements must be a MeasurementSet.")

    @property
    def series_id(self) -> SeriesId:
        return self.series.id

    def with_included(self, included: bool) -> "SeriesSelection":
        if included == self.included:
            return self
        return replace(self, included=included)


@dataclass(frozen=True, slots=True)
class Highlight:
    """The single measurement emphasized across table and chart."""
    series_id: SeriesId
    measurement_id: MeasurementId

    def matches(self, measurement: Measurement) -> bool:
        return (
            measurement.id == self.measurement_id
            and measurement.series_id == self.series_id
        )
