# seriesview/engine.py
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Hashable

from seriesview.config import EngineConfig
from seriesview.core import (
    ChartDataset,
    ChartOptions,
    CoreError,
    Highlight,
    InvalidTimeWindow,
    LoadFailure,
    MeasurementSet,
    RenderFailure,
    SeriesNotFound,
    SeriesSelection,
    TableRow,
    TimeWindow,
    ValidationFailure,
    datasets_from,
    filter_selections,
    rows_from,
    utc_now,
)
from seriesview.io.access import MeasurementStore, SeriesCatalog
from seriesview.io.load import load_selections
from seriesview.io.surface import PrintTrigger, RenderSurface
from seriesview.printing import PrintSequencer, PrintState

logger = logging.getLogger(__name__)

RENDER_ERROR = "Failed to render chart. Please try again."
PRINT_ERROR = "Failed to print chart. Please try again."
PRINT_UNAVAILABLE = "Printing is not available."


class SeriesChartEngine:
    """
    Owns the view state of the multi-series chart and its derived views.

    Every mutator changes state, then recomputes the table rows and chart
    datasets before returning, so readers never see a half-applied change.
    Failures are never raised out of a mutator; they end up in `error`
    (with `error_kind`) and leave the previous state in place.
    """

    def __init__(
        self,
        catalog: SeriesCatalog,
        store: MeasurementStore,
        *,
        surface: RenderSurface | None = None,
        print_trigger: PrintTrigger | None = None,
        config: EngineConfig | None = None,
        options: ChartOptions | None = None,
        clock: Callable[[], datetime] | None = None,
        on_print_state: Callable[[PrintState], None] | None = None,
    ):
        self._catalog = catalog
        self._store = store
        self._surface = surface
        self._print_trigger = print_trigger
        self._config = config if config is not None else EngineConfig()
        self._options = options if options is not None else ChartOptions()
        self._clock = clock if clock is not None else utc_now

        self._selections: tuple[SeriesSelection, ...] = ()
        self._window: TimeWindow = self._config.window
        self._highlight: Highlight | None = None

        self._filtered: list[tuple[SeriesSelection, MeasurementSet]] = []
        self._rows: tuple[TableRow, ...] = ()
        self._datasets: tuple[ChartDataset, ...] = ()

        self._loading = False
        self._error: str | None = None
        self._error_kind: type[CoreError] | None = None
        self._printed_at: datetime | None = None

        self._load_task: asyncio.Task | None = None
        self._destroyed = False

        self._printer = PrintSequencer(
            get_highlight=lambda: self._highlight,
            set_highlight=self._apply_highlight,
            redraw=self._redraw,
            trigger=self._trigger_print,
            surface=surface,
            settle_delay=self._config.settle_delay,
            pre_print_delay=self._config.pre_print_delay,
            restore_delay=self._config.restore_delay,
            on_state=on_print_state,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def selections(self) -> tuple[SeriesSelection, ...]:
        return self._selections

    @property
    def window(self) -> TimeWindow:
        return self._window

    @property
    def highlight(self) -> Highlight | None:
        return self._highlight

    @property
    def table_rows(self) -> tuple[TableRow, ...]:
        return self._rows

    @property
    def chart_datasets(self) -> tuple[ChartDataset, ...]:
        return self._datasets

    @property
    def chart_options(self) -> ChartOptions:
        return self._options

    @property
    def window_label(self) -> str:
        return self._window.label

    @property
    def selected_series_names(self) -> str:
        names = [s.series.label for s in self._selections if s.included]
        return ", ".join(names) if names else "None"

    @property
    def selected_count(self) -> int:
        return sum(1 for s in self._selections if s.included)

    @property
    def has_selected_series(self) -> bool:
        return any(s.included for s in self._selections)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def error_kind(self) -> type[CoreError] | None:
        return self._error_kind

    @property
    def print_state(self) -> PrintState:
        return self._printer.state

    @property
    def printed_at(self) -> datetime | None:
        return self._printed_at

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def is_highlighted(self, row: TableRow) -> bool:
        h = self._highlight
        return h is not None and h.matches(row.measurement)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    async def reload(self) -> bool:
        """Fetch the catalog and all measurements, then replace every selection at once.

        Returns False when the load failed or was abandoned by `destroy()`.
        """
        if self._destroyed:
            return False

        self._loading = True
        task = asyncio.ensure_future(load_selections(self._catalog, self._store))
        self._load_task = task
        try:
            selections = await task
        except asyncio.CancelledError:
            if self._destroyed:
                logger.debug("Load abandoned after teardown")
                return False
            self._loading = False
            raise
        except LoadFailure as e:
            if not self._destroyed:
                self._loading = False
                self._set_error(LoadFailure, str(e))
            return False
        except Exception:
            logger.exception("Unexpected error while loading series")
            if not self._destroyed:
                self._loading = False
                self._set_error(LoadFailure, "Failed to load series and measurements")
            return False
        finally:
            if self._load_task is task:
                self._load_task = None

        if self._destroyed:
            logger.debug("Discarding load result after teardown")
            return False

        self._selections = tuple(selections)
        self._highlight = None
        self._loading = False
        self._clear_error(LoadFailure)
        self._refresh()
        logger.info("Loaded %d series", len(self._selections))
        return True

    load = reload

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------
    def toggle_include(self, series_id: Hashable) -> None:
        if self._destroyed:
            return
        for i, s in enumerate(self._selections):
            if s.series_id == series_id:
                index = i
                break
        else:
            raise SeriesNotFound(series_id)

        updated = list(self._selections)
        updated[index] = updated[index].with_included(not updated[index].included)
        self._selections = tuple(updated)
        self._highlight = None
        self._refresh()

    def select_all(self) -> None:
        self._set_all(True)

    def deselect_all(self) -> None:
        self._set_all(False)

    def _set_all(self, included: bool) -> None:
        if self._destroyed:
            return
        self._selections = tuple(s.with_included(included) for s in self._selections)
        self._highlight = None
        self._refresh()

    def set_window(self, window: TimeWindow | str) -> bool:
        """Switch the time window. An invalid custom range changes nothing.

        Returns True when the window was applied.
        """
        if self._destroyed:
            return False
        try:
            if isinstance(window, str):
                window = TimeWindow.from_key(window)
            window.validate(self._clock())
        except InvalidTimeWindow as e:
            logger.info("Rejected time window: %s", e)
            self._set_error(ValidationFailure, str(e))
            return False

        self._window = window
        self._highlight = None
        self._clear_error(ValidationFailure)
        self._refresh()
        return True

    def set_custom_range(self, start: datetime | str, end: datetime | str) -> bool:
        try:
            window = TimeWindow.custom(start, end)
        except InvalidTimeWindow as e:
            logger.info("Rejected custom range: %s", e)
            self._set_error(ValidationFailure, str(e))
            return False
        return self.set_window(window)

    def set_highlight(self, series_id: Hashable, measurement_id: Hashable | None = None) -> None:
        """Highlight one measurement; a None measurement id clears the highlight."""
        if self._destroyed:
            return
        if series_id is None or measurement_id is None:
            self._apply_highlight(None)
        else:
            self._apply_highlight(Highlight(series_id, measurement_id))

    def highlight_row(self, row: TableRow) -> None:
        self.set_highlight(row.series_id, row.id)

    def clear_highlight(self) -> None:
        if self._destroyed:
            return
        self._apply_highlight(None)

    # ------------------------------------------------------------------
    # Printing / teardown
    # ------------------------------------------------------------------
    async def print(self) -> bool:
        """Print the chart without highlight artifacts, then restore the highlight."""
        if self._destroyed:
            return False
        if self._print_trigger is None:
            logger.warning("print() called but no print trigger is configured")
            self._set_error(RenderFailure, PRINT_UNAVAILABLE)
            return False

        self._printed_at = self._clock()
        try:
            await self._printer.run()
        except Exception:
            logger.exception("Print sequence failed")
            if not self._destroyed:
                self._set_error(RenderFailure, PRINT_ERROR)
            return False
        if self._destroyed:
            logger.debug("Print abandoned after teardown")
            return False
        self._clear_error(RenderFailure)
        return True

    def destroy(self) -> None:
        """Abandon in-flight loads and release the rendering surface."""
        if self._destroyed:
            return
        self._destroyed = True
        self._printer.abort()
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
        self._load_task = None
        self._loading = False
        if self._surface is not None:
            try:
                self._surface.destroy()
            except Exception:
                logger.exception("Rendering surface failed to tear down")

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    def _refresh(self) -> None:
        """Refilter and rebuild both projections, then push to the surface."""
        now = self._clock()
        try:
            filtered = filter_selections(self._selections, self._window, now=now)
            rows = rows_from(filtered)
            datasets = datasets_from(filtered, self._highlight, self._config.highlight)
        except Exception:
            logger.exception("Chart projection failed")
            self._set_error(RenderFailure, RENDER_ERROR)
            self._filtered, self._rows, self._datasets = [], (), ()
        else:
            self._filtered, self._rows, self._datasets = filtered, tuple(rows), tuple(datasets)
            self._clear_error(RenderFailure)
        self._redraw(False)

    def _apply_highlight(self, highlight: Highlight | None) -> None:
        """Restyle chart points from the cached filtered sets; no refiltering."""
        if self._destroyed:
            return
        self._highlight = highlight
        try:
            datasets = datasets_from(self._filtered, highlight, self._config.highlight)
        except Exception:
            logger.exception("Chart projection failed")
            self._set_error(RenderFailure, RENDER_ERROR)
            self._datasets = ()
        else:
            self._datasets = tuple(datasets)
            self._clear_error(RenderFailure)
        self._redraw(False)

    def _redraw(self, resize: bool = False) -> None:
        if self._surface is None or self._destroyed:
            return
        try:
            if resize:
                self._surface.resize()
            self._surface.update(self._datasets, self._options)
        except Exception:
            logger.exception("Rendering surface update failed")
            self._set_error(RenderFailure, RENDER_ERROR)
            self._datasets = ()
            self._push_empty()

    def _push_empty(self) -> None:
        try:
            self._surface.update((), self._options)
        except Exception:
            logger.exception("Rendering surface rejected an empty chart")

    def _trigger_print(self) -> None:
        if self._destroyed:
            return
        self._print_trigger()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    def _set_error(self, kind: type[CoreError], message: str) -> None:
        self._error = message
        self._error_kind = kind

    def _clear_error(self, kind: type[CoreError]) -> None:
        if self._error_kind is kind:
            self._error = None
            self._error_kind = None
