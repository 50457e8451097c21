# seriesview/core/window.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta

from .exceptions import CoreError, InvalidTimeWindow
from .instants import parse_instant, to_epoch_ms, utc_now
from .measurements import MeasurementSet


class WindowKind(enum.Enum):
    LAST_24H = "24h"
    LAST_7D = "7d"
    LAST_30D = "30d"
    ALL_TIME = "all"
    CUSTOM = "custom"


_DURATIONS: dict[WindowKind, timedelta] = {
    WindowKind.LAST_24H: timedelta(hours=24),
    WindowKind.LAST_7D: timedelta(days=7),
    WindowKind.LAST_30D: timedelta(days=30),
}

_LABELS: dict[WindowKind, str] = {
    WindowKind.LAST_24H: "Last 24 Hours",
    WindowKind.LAST_7D: "Last 7 Days",
    WindowKind.LAST_30D: "Last 30 Days",
    WindowKind.ALL_TIME: "All Time",
}


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """
    Time range used to filter measurements for display.

    Presets are relative to "now", which is resolved on every call rather
    than captured at construction. Custom windows are inclusive on both ends.
    """
    kind: WindowKind = WindowKind.LAST_7D
    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, WindowKind):
            raise InvalidTimeWindow(f"Unknown window kind: {self.kind!r}")

        if self.kind is WindowKind.CUSTOM:
            if self.start is None or self.end is None:
                raise InvalidTimeWindow("Custom range needs both a start and an end date")
            try:
                object.__setattr__(self, "start", parse_instant(self.start))
                object.__setattr__(self, "end", parse_instant(self.end))
            except CoreError as e:
                raise InvalidTimeWindow(str(e)) from e
        elif self.start is not None or self.end is not None:
            raise InvalidTimeWindow("Only custom windows carry explicit bounds")

    # ---- factories ----
    @classmethod
    def last_24h(cls) -> "TimeWindow":
        return cls(WindowKind.LAST_24H)

    @classmethod
    def last_7d(cls) -> "TimeWindow":
        return cls(WindowKind.LAST_7D)

    @classmethod
    def last_30d(cls) -> "TimeWindow":
        return cls(WindowKind.LAST_30D)

    @classmethod
    def all_time(cls) -> "TimeWindow":
        return cls(WindowKind.ALL_TIME)

    @classmethod
    def custom(cls, start: datetime | str, end: datetime | str) -> "TimeWindow":
        return cls(WindowKind.CUSTOM, start, end)

    @classmethod
    def from_key(cls, key: str) -> "TimeWindow":
        """Build a preset from its short key ("24h", "7d", "30d", "all")."""
        try:
            kind = WindowKind(key)
        except ValueError as e:
            raise InvalidTimeWindow(f"Unknown window preset: {key!r}") from e
        if kind is WindowKind.CUSTOM:
            raise InvalidTimeWindow("Use TimeWindow.custom(start, end) for custom ranges")
        return cls(kind)

    # ---- queries ----
    @property
    def is_custom(self) -> bool:
        return self.kind is WindowKind.CUSTOM

    @property
    def label(self) -> str:
        if self.kind is WindowKind.CUSTOM:
            start = self.start.strftime("%Y-%m-%d %H:%M:%S")
            end = self.end.strftime("%Y-%m-%d %H:%M:%S")
            return f"Custom Range: {start} to {end}"
        return _LABELS[self.kind]

    def validate(self, now: datetime | None = None) -> None:
        """Raise InvalidTimeWindow if this window must not be applied at `now`."""
        if self.kind is not WindowKind.CUSTOM:
            return
        now = utc_now() if now is None else parse_instant(now)
        if self.start >= self.end:
            raise InvalidTimeWindow("End date must be after start date")
        if self.end > now:
            raise InvalidTimeWindow("End date cannot be in the future")

    def bounds(self, now: datetime | None = None) -> tuple[float | None, float | None]:
        """Inclusive (t_min, t_max) in epoch ms; None means unbounded."""
        if self.kind is WindowKind.ALL_TIME:
            return None, None
        if self.kind is WindowKind.CUSTOM:
            return to_epoch_ms(self.start), to_epoch_ms(self.end)
        now = utc_now() if now is None else parse_instant(now)
        return to_epoch_ms(now - _DURATIONS[self.kind]), None

    def apply(self, measurements: MeasurementSet, now: datetime | None = None) -> MeasurementSet:
        """Filter an ascending MeasurementSet down to this window.

        Raises InvalidTimeWindow for an unusable custom range; the caller is
        expected to keep its previous output in that case.
        """
        now = utc_now() if now is None else now
        self.validate(now)
        t_min, t_max = self.bounds(now)
        return measurements.slice_time(t_min, t_max, closed="both")
