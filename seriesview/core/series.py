# seriesview/core/series.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Hashable

from .exceptions import CoreError, InvalidMeasurement, InvalidSeries
from .instants import parse_instant, to_epoch_ms
from .metadata import RecordMeta


SeriesId = Hashable
MeasurementId = Hashable


@dataclass(frozen=True, slots=True)
class Series:
    """
    A named, bounded numeric channel tracked over time.

    Series are produced by the catalog and are immutable for the
    lifetime of one load cycle.
    """
    id: SeriesId
    name: str
    min_value: float
    max_value: float
    color: str
    icon: str = ""
    description: str | None = None
    meta: RecordMeta = field(default_factory=RecordMeta, repr=False)

    def __post_init__(self) -> None:
        if self.id is None:
            raise InvalidSeries("Series.id must not be None.")
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidSeries("Series.name must be a non-empty string.")
        if not isinstance(self.color, str) or not self.color.strip():
            raise InvalidSeries("Series.color must be a non-empty string.")
        if not isinstance(self.meta, RecordMeta):
            raise InvalidSeries("Series.meta must be a RecordMeta instance.")

        try:
            lo = float(self.min_value)
            hi = float(self.max_value)
        except (TypeError, ValueError) as e:
            raise InvalidSeries("Series bounds must be numeric.") from e
        if not (math.isfinite(lo) and math.isfinite(hi)):
            raise InvalidSeries("Series bounds must be finite.")
        if lo >= hi:
            raise InvalidSeries(
                f"Series.min_value must be < max_value, got {lo} >= {hi}"
            )
        object.__setattr__(self, "min_value", lo)
        object.__setattr__(self, "max_value", hi)
        object.__setattr__(self, "icon", self.icon or "")

    @property
    def label(self) -> str:
        return f"{self.icon} {self.name}"

    def contains(self, value: float) -> bool:
        return self.min_value <= value <= self.max_value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Series":
        """Build a Series from the catalog's JSON representation."""
        try:
            return cls(
                id=data["id"],
                name=data["name"],
                min_value=data["minValue"],
                max_value=data["maxValue"],
                color=data["color"],
                icon=data.get("icon") or "",
                description=data.get("description"),
                meta=RecordMeta.from_dict(data),
            )
        except KeyError as e:
            raise InvalidSeries(f"Series payload is missing field {e.args[0]!r}") from e
        except InvalidSeries:
            raise
        except CoreError as e:
            raise InvalidSeries(str(e)) from e


@dataclass(frozen=True, slots=True)
class Measurement:
    """One timestamped value belonging to a Series."""
    id: MeasurementId
    series_id: SeriesId
    value: float
    timestamp: datetime
    meta: RecordMeta = field(default_factory=RecordMeta, repr=False)

    def __post_init__(self) -> None:
        if self.id is None:
            raise InvalidMeasurement("Measurement.id must not be None.")
        if self.series_id is None:
            raise InvalidMeasurement("Measurement.series_id must not be None.")
        try:
            v = float(self.value)
        except (TypeError, ValueError) as e:
            raise InvalidMeasurement("Measurement.value must be numeric.") from e
        if not math.isfinite(v):
            raise InvalidMeasurement("Measurement.value must be finite.")
        try:
            ts = parse_instant(self.timestamp)
        except CoreError as e:
            raise InvalidMeasurement(str(e)) from e
        if not isinstance(self.meta, RecordMeta):
            raise InvalidMeasurement("Measurement.meta must be a RecordMeta instance.")

        object.__setattr__(self, "value", v)
        object.__setattr__(self, "timestamp", ts)

    @property
    def epoch_ms(self) -> float:
        return to_epoch_ms(self.timestamp)

    @property
    def key(self) -> tuple[SeriesId, MeasurementId]:
        return (self.series_id, self.id)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Measurement":
        """Build a Measurement from the store's JSON representation."""
        try:
            return cls(
                id=data["id"],
                series_id=data["seriesId"],
                value=data["value"],
                timestamp=data["timestamp"],
                meta=RecordMeta.from_dict(data),
            )
        except KeyError as e:
            raise InvalidMeasurement(
                f"Measurement payload is missing field {e.args[0]!r}"
            ) from e
        except InvalidMeasurement:
            raise
        except CoreError as e:
            raise InvalidMeasurement(str(e)) from e
