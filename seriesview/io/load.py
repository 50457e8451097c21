# seriesview/io/load.py
from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Hashable, Iterable

from seriesview.core import (
    LoadFailure,
    Measurement,
    MeasurementSet,
    Series,
    SeriesSelection,
)
from seriesview.io.access import MeasurementStore, SeriesCatalog

logger = logging.getLogger(__name__)


def _resolved(series: Series, measurements: Iterable[Measurement]) -> MeasurementSet:
    """Sort one series' measurements, dropping those that reference another series."""
    kept: list[Measurement] = []
    dropped = 0
    for m in measurements:
        if m.series_id == series.id:
            kept.append(m)
        else:
            dropped += 1
    if dropped:
        logger.warning(
            "Dropped %d measurement(s) not belonging to series %r", dropped, series.id
        )
    return MeasurementSet.from_unsorted(kept)


async def _fetch_catalog(catalog: SeriesCatalog) -> list[Series]:
    try:
        return list(await catalog.list_series())
    except Exception as e:
        logger.error("Series catalog fetch failed: %s", e)
        raise LoadFailure("Failed to load series and measurements") from e


async def load_selections(
    catalog: SeriesCatalog,
    store: MeasurementStore,
) -> list[SeriesSelection]:
    """Fetch the catalog, then every series' measurements concurrently.

    - Catalog failure raises LoadFailure; nothing is built.
    - A failed per-series fetch degrades that series to an empty set.
    - Returns only after every fetch has settled.
    - Every selection starts with included=False.
    """
    series_list = await _fetch_catalog(catalog)
    if not series_list:
        return []

    results = await asyncio.gather(
        *(store.list_measurements(s.id) for s in series_list),
        return_exceptions=True,
    )

    selections: list[SeriesSelection] = []
    for series, result in zip(series_list, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                # CancelledError and friends
                raise result
            logger.warning("Measurements for series %r failed to load: %s", series.id, result)
            measurements = MeasurementSet()
        else:
            measurements = _resolved(series, result)
        selections.append(SeriesSelection(series=series, measurements=measurements))

    logger.debug("Loaded %d series", len(selections))
    return selections


def group_by_series(
    series_list: Iterable[Series],
    measurements: Iterable[Measurement],
) -> list[SeriesSelection]:
    """Build selections from one bulk measurement fetch.

    Measurements whose series_id matches no series are unresolved and dropped.
    """
    series_list = list(series_list)
    known = {s.id for s in series_list}
    by_series: dict[Hashable, list[Measurement]] = defaultdict(list)
    dangling = 0
    for m in measurements:
        if m.series_id in known:
            by_series[m.series_id].append(m)
        else:
            dangling += 1
    if dangling:
        logger.warning("Dropped %d measurement(s) with unknown series", dangling)

    return [
        SeriesSelection(series=s, measurements=MeasurementSet.from_unsorted(by_series.get(s.id, ())))
        for s in series_list
    ]


async def load_selections_bulk(
    catalog: SeriesCatalog,
    store: MeasurementStore,
) -> list[SeriesSelection]:
    """Like load_selections, but with a single all-measurements fetch.

    Here a failed measurement fetch fails the whole load.
    """
    series_list = await _fetch_catalog(catalog)
    try:
        measurements = await store.list_measurements(None)
    except Exception as e:
        logger.error("Bulk measurement fetch failed: %s", e)
        raise LoadFailure("Failed to load series and measurements") from e
    return group_by_series(series_list, measurements)
