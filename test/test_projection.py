# test/test_projection.py
from datetime import datetime, timedelta, timezone

import numpy as np

from seriesview.core import (
    Highlight,
    HighlightStyle,
    Measurement,
    MeasurementSet,
    Series,
    SeriesSelection,
    TimeWindow,
    chart_datasets,
    table_rows,
)

NOW = datetime(2024, 6, 1, 12, tzinfo=timezone.utc)


def _series(sid, name="S", color="#112233", icon="📈", lo=0.0, hi=100.0):
    return Series(id=sid, name=name, min_value=lo, max_value=hi, color=color, icon=icon)


def _sel(series, points, included=True):
    """points: iterable of (measurement_id, days_from_now, value)."""
    ms = MeasurementSet.from_unsorted(
        Measurement(id=mid, series_id=series.id, value=v, timestamp=NOW + timedelta(days=d))
        for mid, d, v in points
    )
    return SeriesSelection(series=series, included=included, measurements=ms)


def _fixture():
    a = _sel(_series(1, "Kitchen", "#FF0000", "🍳"), [(1, -3, 20.0), (2, -2, 21.0), (3, -1, 22.0)])
    b = _sel(_series(2, "Garage", "#0000FF", "🚗"), [(7, -2.5, 5.0), (8, -1.5, 6.0)])
    c = _sel(_series(3, "Attic", "#00FF00", "🏠"), [(9, -1, 30.0)], included=False)
    return [a, b, c]


def test_table_rows_newest_first_across_included_series():
    rows = table_rows(_fixture(), TimeWindow.all_time(), now=NOW)

    assert [(r.series_id, r.id) for r in rows] == [(1, 3), (2, 8), (1, 2), (2, 7), (1, 1)]
    assert rows[0].series_name == "Kitchen"
    assert rows[0].series_icon == "🍳"
    assert rows[0].series_color == "#FF0000"


def test_table_rows_ties_keep_selection_then_fetch_order():
    a = _sel(_series(1), [(1, -1, 1.0), (2, -1, 2.0)])
    b = _sel(_series(2), [(5, -1, 5.0)])
    rows = table_rows([a, b], TimeWindow.all_time(), now=NOW)
    assert [(r.series_id, r.id) for r in rows] == [(1, 1), (1, 2), (2, 5)]


def test_table_rows_respect_window_and_flag_out_of_range():
    a = _sel(_series(1, lo=0, hi=10), [(1, -10, 5.0), (2, -1, 50.0)])
    rows = table_rows([a], TimeWindow.last_7d(), now=NOW)
    assert [r.id for r in rows] == [2]
    assert rows[0].in_range is False


def test_table_rows_empty_when_nothing_included():
    sels = [s.with_included(False) for s in _fixture()]
    assert table_rows(sels, TimeWindow.all_time(), now=NOW) == []


def test_chart_one_dataset_per_included_series_in_order():
    datasets = chart_datasets(_fixture(), TimeWindow.all_time(), None, now=NOW)

    assert [d.series_id for d in datasets] == [1, 2]
    assert datasets[0].label == "🍳 Kitchen"
    assert datasets[0].border_color == "#FF0000"
    assert datasets[0].background_color == "#FF000033"
    assert np.all(np.diff(datasets[0].x) > 0)
    assert np.allclose(datasets[0].y, [20.0, 21.0, 22.0])


def test_chart_empty_when_nothing_included():
    sels = [s.with_included(False) for s in _fixture()]
    assert chart_datasets(sels, TimeWindow.all_time(), None, now=NOW) == []


def test_chart_default_styles_without_highlight():
    (ds, _) = chart_datasets(_fixture(), TimeWindow.all_time(), None, now=NOW)
    style = HighlightStyle()

    assert ds.highlight_index is None
    assert len(ds.styles) == ds.n == 3
    assert np.all(ds.styles.radius == style.normal_point_radius)
    assert np.all(ds.styles.border_width == style.normal_border_width)
    assert ds.styles.fill_color == ("#FF0000",) * 3
    assert ds.styles.border_color == ("#FF0000",) * 3


def test_chart_highlight_styles_exactly_one_point():
    style = HighlightStyle()
    datasets = chart_datasets(_fixture(), TimeWindow.all_time(), Highlight(1, 2), now=NOW)
    kitchen, garage = datasets

    assert kitchen.highlight_index == 1
    assert np.flatnonzero(kitchen.styles.radius == style.point_radius).tolist() == [1]
    assert kitchen.styles.fill_color == ("#FF0000", style.point_background_color, "#FF0000")
    assert kitchen.styles.border_color[1] == style.point_border_color
    assert kitchen.styles.border_width.tolist() == [1.0, 3.0, 1.0]
    # dataset-level colors never take the accent
    assert kitchen.border_color == "#FF0000"

    assert garage.highlight_index is None
    assert np.all(garage.styles.radius == style.normal_point_radius)


def test_chart_highlight_needs_matching_series_id():
    # measurement id 2 exists only in series 1
    datasets = chart_datasets(_fixture(), TimeWindow.all_time(), Highlight(2, 2), now=NOW)
    assert all(d.highlight_index is None for d in datasets)


def test_custom_style_is_applied():
    style = HighlightStyle(point_radius=12.0, background_transparency="80")
    (ds, _) = chart_datasets(_fixture(), TimeWindow.all_time(), Highlight(1, 1), now=NOW, style=style)
    assert ds.styles.radius[0] == 12.0
    assert ds.background_color == "#FF000080"


def test_table_and_chart_cover_same_filtered_points():
    window = TimeWindow.custom(NOW - timedelta(days=2.2), NOW - timedelta(days=1.2))
    sels = _fixture()
    rows = table_rows(sels, window, now=NOW)
    datasets = chart_datasets(sels, window, None, now=NOW)

    for ds in datasets:
        table_x = [r.measurement.epoch_ms for r in rows if r.series_id == ds.series_id]
        assert table_x == sorted(ds.x.tolist(), reverse=True)


def test_dataset_to_dict_is_chartjs_shaped():
    (ds, _) = chart_datasets(_fixture(), TimeWindow.all_time(), Highlight(1, 3), now=NOW)
    d = ds.to_dict()

    assert d["label"] == "🍳 Kitchen"
    assert d["data"][0] == {"x": ds.x[0], "y": 20.0}
    assert d["pointRadius"] == [4.0, 4.0, 10.0]
    assert d["pointBackgroundColor"][-1] == "#FFD700"
    assert d["pointHoverRadius"] == 6.0
    assert d["tension"] == 0.1


def test_chart_options_to_dict():
    from seriesview.core import ChartOptions

    opts = ChartOptions(y_title="Temperature Value").to_dict()
    assert opts["scales"]["x"]["type"] == "time"
    assert opts["scales"]["y"]["title"]["text"] == "Temperature Value"
    assert opts["plugins"]["legend"]["position"] == "top"
