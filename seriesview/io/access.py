# seriesview/io/access.py
from __future__ import annotations

from typing import Hashable, Iterable, Protocol, runtime_checkable

from seriesview.core import AccessError, Measurement, Series


@runtime_checkable
class SeriesCatalog(Protocol):
    """Returns the defined series. May raise AccessError."""

    async def list_series(self) -> list[Series]:
        ...


@runtime_checkable
class MeasurementStore(Protocol):
    """Returns measurements of one series, or of all series when `series_id` is None.

    May raise AccessError.
    """

    async def list_measurements(self, series_id: Hashable | None = None) -> list[Measurement]:
        ...


class InMemoryCatalog:
    """SeriesCatalog backed by a list, e.g. for embedding and tests."""

    def __init__(self, series: Iterable[Series] = ()):
        self._series = list(series)

    async def list_series(self) -> list[Series]:
        return list(self._series)


class InMemoryStore:
    """MeasurementStore backed by a list, returned in arrival order.

    Series ids listed in `failing` raise AccessError, which lets hosts and
    tests exercise partial-failure loads.
    """

    def __init__(
        self,
        measurements: Iterable[Measurement] = (),
        *,
        failing: Iterable[Hashable] = (),
    ):
        self._measurements = list(measurements)
        self._failing = set(failing)

    async def list_measurements(self, series_id: Hashable | None = None) -> list[Measurement]:
        if series_id is None:
            return list(self._measurements)
        if series_id in self._failing:
            raise AccessError(f"Measurements for series {series_id!r} are unavailable")
        return [m for m in self._measurements if m.series_id == series_id]
