# seriesview/io/surface.py
from __future__ import annotations

from typing import Callable, Protocol, Sequence, runtime_checkable

from seriesview.core.projection import ChartDataset, ChartOptions


@runtime_checkable
class RenderSurface(Protocol):
    """Structural interface of whatever draws the chart.

    The host owns the native chart and must let the engine call `destroy()`
    when its view is discarded.
    """

    def update(self, datasets: Sequence[ChartDataset], options: ChartOptions) -> None:
        """Replace the drawn datasets and redraw now."""
        ...

    def resize(self) -> None:
        ...

    def destroy(self) -> None:
        ...


@runtime_checkable
class CompletionAwareSurface(RenderSurface, Protocol):
    """A surface that can report when the last update has been painted."""

    async def wait_rendered(self) -> None:
        ...


# Opens the platform print flow; may block until the dialog is dismissed.
PrintTrigger = Callable[[], None]
