# seriesview/core/projection.py
"""
Pure projections of engine state into display-ready data.

- table_rows: flat, newest-first list of the included series' measurements
- chart_datasets: one dataset per included series, oldest-first, with
  per-point style arrays driven by the current Highlight

Both take the same `now` so the table and the chart always show the same
filtered set.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence

import numpy as np

from .instants import utc_now
from .measurements import MeasurementSet
from .selection import Highlight, SeriesSelection
from .series import Measurement, MeasurementId, SeriesId
from .window import TimeWindow


@dataclass(frozen=True, slots=True)
class HighlightStyle:
    """Point styling for highlighted vs. normal chart points."""
    point_radius: float = 10.0
    normal_point_radius: float = 4.0
    point_background_color: str = "#FFD700"
    point_border_color: str = "#FF6B00"
    point_border_width: float = 3.0
    normal_border_width: float = 1.0
    # Hex alpha appended to the series color for the area fill only.
    background_transparency: str = "33"
    point_hover_radius: float = 6.0
    tension: float = 0.1


@dataclass(frozen=True, slots=True)
class ChartOptions:
    """Axis and legend configuration handed to the rendering surface."""
    x_title: str = "Time"
    y_title: str = "Value"
    time_unit: str = "hour"
    legend_position: str = "top"
    show_legend: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "responsive": True,
            "maintainAspectRatio": False,
            "scales": {
                "x": {
                    "type": "time",
                    "time": {"unit": self.time_unit},
                    "title": {"display": True, "text": self.x_title},
                },
                "y": {
                    "title": {"display": True, "text": self.y_title},
                    "grace": "5%",
                },
            },
            "plugins": {
                "legend": {"display": self.show_legend, "position": self.legend_position},
                "tooltip": {"mode": "index", "intersect": False},
            },
        }


@dataclass(frozen=True, slots=True)
class TableRow:
    """A measurement annotated with its series' display attributes."""
    measurement: Measurement
    series_name: str
    series_icon: str
    series_color: str
    min_value: float
    max_value: float

    @property
    def id(self) -> MeasurementId:
        return self.measurement.id

    @property
    def series_id(self) -> SeriesId:
        return self.measurement.series_id

    @property
    def value(self) -> float:
        return self.measurement.value

    @property
    def timestamp(self) -> datetime:
        return self.measurement.timestamp

    @property
    def in_range(self) -> bool:
        return self.min_value <= self.measurement.value <= self.max_value


@dataclass(frozen=True, slots=True)
class PointStyles:
    """Per-point style arrays, index-aligned with a dataset's points."""
    radius: np.ndarray
    border_width: np.ndarray
    fill_color: tuple[str, ...]
    border_color: tuple[str, ...]

    def __len__(self) -> int:
        return int(self.radius.size)


@dataclass(frozen=True, slots=True)
class ChartDataset:
    series_id: SeriesId
    label: str
    x: np.ndarray = field(repr=False)
    y: np.ndarray = field(repr=False)
    border_color: str = ""
    background_color: str = ""
    styles: PointStyles | None = field(default=None, repr=False)
    highlight_index: int | None = None
    tension: float = 0.1
    point_hover_radius: float = 6.0

    @property
    def n(self) -> int:
        return int(self.x.size)

    def to_dict(self) -> dict[str, Any]:
        """Chart.js-shaped dataset mapping."""
        styles = self.styles
        return {
            "label": self.label,
            "data": [{"x": float(x), "y": float(y)} for x, y in zip(self.x, self.y)],
            "borderColor": self.border_color,
            "backgroundColor": self.background_color,
            "tension": self.tension,
            "pointRadius": [] if styles is None else styles.radius.tolist(),
            "pointHoverRadius": self.point_hover_radius,
            "pointBackgroundColor": [] if styles is None else list(styles.fill_color),
            "pointBorderColor": [] if styles is None else list(styles.border_color),
            "pointBorderWidth": [] if styles is None else styles.border_width.tolist(),
        }


Filtered = list[tuple[SeriesSelection, MeasurementSet]]


def filter_selections(
    selections: Iterable[SeriesSelection],
    window: TimeWindow,
    *,
    now: datetime | None = None,
) -> Filtered:
    """Apply `window` to every included selection, keeping selection order."""
    now = utc_now() if now is None else now
    return [(s, window.apply(s.measurements, now)) for s in selections if s.included]


def rows_from(filtered: Filtered) -> list[TableRow]:
    """Flatten already-filtered selections into table rows, newest first.

    Equal timestamps keep their concatenation order (selection order, then
    fetch order within a series).
    """
    rows: list[TableRow] = []
    times: list[np.ndarray] = []
    for selection, measurements in filtered:
        series = selection.series
        rows.extend(
            TableRow(
                measurement=m,
                series_name=series.name,
                series_icon=series.icon,
                series_color=series.color,
                min_value=series.min_value,
                max_value=series.max_value,
            )
            for m in measurements
        )
        times.append(measurements.time)

    if not rows:
        return []

    # Negating keeps argsort stable for ties while sorting descending.
    order = np.argsort(-np.concatenate(times), kind="stable")
    return [rows[i] for i in order]


def table_rows(
    selections: Sequence[SeriesSelection],
    window: TimeWindow,
    *,
    now: datetime | None = None,
) -> list[TableRow]:
    return rows_from(filter_selections(selections, window, now=now))


def build_dataset(
    selection: SeriesSelection,
    measurements: Iterable[Measurement],
    highlight: Highlight | None,
    style: HighlightStyle = HighlightStyle(),
) -> ChartDataset:
    """Build one dataset and its point styles from a single pass over `measurements`."""
    series = selection.series
    items = list(measurements)
    n = len(items)

    x = np.empty(n, dtype=np.float64)
    y = np.empty(n, dtype=np.float64)
    radius = np.full(n, style.normal_point_radius, dtype=np.float64)
    border_width = np.full(n, style.normal_border_width, dtype=np.float64)
    fill_color = [series.color] * n
    border_color = [series.color] * n

    highlight_index: int | None = None
    for i, m in enumerate(items):
        x[i] = m.epoch_ms
        y[i] = m.value
        if highlight is not None and highlight_index is None and highlight.matches(m):
            highlight_index = i
            radius[i] = style.point_radius
            border_width[i] = style.point_border_width
            fill_color[i] = style.point_background_color
            border_color[i] = style.point_border_color

    return ChartDataset(
        series_id=series.id,
        label=series.label,
        x=x,
        y=y,
        border_color=series.color,
        background_color=f"{series.color}{style.background_transparency}",
        styles=PointStyles(
            radius=radius,
            border_width=border_width,
            fill_color=tuple(fill_color),
            border_color=tuple(border_color),
        ),
        highlight_index=highlight_index,
        tension=style.tension,
        point_hover_radius=style.point_hover_radius,
    )


def datasets_from(
    filtered: Filtered,
    highlight: Highlight | None,
    style: HighlightStyle = HighlightStyle(),
) -> list[ChartDataset]:
    return [build_dataset(selection, measurements, highlight, style) for selection, measurements in filtered]


def chart_datasets(
    selections: Sequence[SeriesSelection],
    window: TimeWindow,
    highlight: Highlight | None,
    *,
    now: datetime | None = None,
    style: HighlightStyle = HighlightStyle(),
) -> list[ChartDataset]:
    """One dataset per included series, in selection order. Empty if none is included."""
    return datasets_from(filter_selections(selections, window, now=now), highlight, style)
