# seriesview/core/measurements.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

import numpy as np

from .exceptions import InvalidMeasurementSet
from .series import Measurement


_CLOSED = {"both", "left", "right", "neither"}


@dataclass(frozen=True, slots=True)
class MeasurementSet:
    """Immutable measurements ordered by time, with a parallel epoch-ms index.

    Replaced wholesale on reload, never patched in place.
    """

    measurements: tuple[Measurement, ...] = ()
    time: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        items = tuple(self.measurements)
        for m in items:
            if not isinstance(m, Measurement):
                raise InvalidMeasurementSet("MeasurementSet items must be Measurement instances.")

        t = np.fromiter((m.epoch_ms for m in items), dtype=np.float64, count=len(items))
        if t.size > 1 and np.any(np.diff(t) < 0):
            raise InvalidMeasurementSet("Measurements must be ordered by non-decreasing timestamp.")

        object.__setattr__(self, "measurements", items)
        object.__setattr__(self, "time", t)

    @classmethod
    def from_unsorted(cls, measurements: Iterable[Measurement]) -> "MeasurementSet":
        """Sort ascending by timestamp; equal timestamps keep arrival order."""
        items = list(measurements)
        t = np.fromiter((m.epoch_ms for m in items), dtype=np.float64, count=len(items))
        order = np.argsort(t, kind="stable")
        return cls(tuple(items[i] for i in order))

    # ---- sequence API ----
    def __len__(self) -> int:
        return len(self.measurements)

    def __iter__(self) -> Iterator[Measurement]:
        return iter(self.measurements)

    def __getitem__(self, index: int) -> Measurement:
        return self.measurements[index]

    @property
    def n(self) -> int:
        return len(self.measurements)

    @property
    def values(self) -> np.ndarray:
        return np.fromiter((m.value for m in self.measurements), dtype=np.float64, count=self.n)

    @property
    def t_start(self) -> float | None:
        return None if self.n == 0 else float(self.time[0])

    @property
    def t_end(self) -> float | None:
        return None if self.n == 0 else float(self.time[-1])

    def slice_time(
        self,
        t_min: float | None = None,
        t_max: float | None = None,
        *,
        closed: str = "both",
    ) -> "MeasurementSet":
        """Return the contiguous run of measurements between `t_min` and `t_max` (epoch ms).

        Ordering is preserved. With no bounds the same instance is returned.
        """
        if closed not in _CLOSED:
            raise ValueError("closed must be one of: both, left, right, neither")

        if self.n == 0 or (t_min is None and t_max is None):
            return self

        lo = 0
        hi = self.n
        if t_min is not None:
            side = "left" if closed in {"both", "left"} else "right"
            lo = int(np.searchsorted(self.time, t_min, side=side))
        if t_max is not None:
            side = "right" if closed in {"both", "right"} else "left"
            hi = int(np.searchsorted(self.time, t_max, side=side))

        if lo == 0 and hi == self.n:
            return self
        if lo >= hi:
            return MeasurementSet()
        return MeasurementSet(self.measurements[lo:hi])
