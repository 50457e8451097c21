# seriesview/core/__init__.py
"""
Core domain objects for seriesview.

This module defines the storage-independent data model and projections:
- Series / Measurement: catalog and store records
- MeasurementSet: measurements ordered by time with a numpy time index
- TimeWindow: preset or custom time range filter
- SeriesSelection / Highlight: what is shown and what is emphasized
- table_rows / chart_datasets: pure display projections

The core layer is independent from I/O, rendering and event loops.
"""

from .instants import parse_instant, to_epoch_ms, utc_now
from .metadata import RecordMeta
from .series import Series, Measurement, SeriesId, MeasurementId
from .measurements import MeasurementSet
from .window import TimeWindow, WindowKind
from .selection import SeriesSelection, Highlight
from .projection import (
    ChartDataset,
    ChartOptions,
    HighlightStyle,
    PointStyles,
    TableRow,
    build_dataset,
    chart_datasets,
    datasets_from,
    filter_selections,
    rows_from,
    table_rows,
)
from .exceptions import (
    CoreError,
    InvalidSeries,
    InvalidMeasurement,
    InvalidMeasurementSet,
    InvalidSelection,
    ConfigError,
    ValidationFailure,
    InvalidTimeWindow,
    LoadFailure,
    AccessError,
    RenderFailure,
    SeriesNotFound,
)


__all__ = [
    # instants
    "parse_instant",
    "to_epoch_ms",
    "utc_now",

    # records
    "RecordMeta",
    "Series",
    "Measurement",
    "SeriesId",
    "MeasurementId",
    "MeasurementSet",

    # view state
    "TimeWindow",
    "WindowKind",
    "SeriesSelection",
    "Highlight",

    # projections
    "ChartDataset",
    "ChartOptions",
    "HighlightStyle",
    "PointStyles",
    "TableRow",
    "build_dataset",
    "chart_datasets",
    "datasets_from",
    "filter_selections",
    "rows_from",
    "table_rows",

    # exceptions
    "CoreError",
    "InvalidSeries",
    "InvalidMeasurement",
    "InvalidMeasurementSet",
    "InvalidSelection",
    "ConfigError",
    "ValidationFailure",
    "InvalidTimeWindow",
    "LoadFailure",
    "AccessError",
    "RenderFailure",
    "SeriesNotFound",
]
