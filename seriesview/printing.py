# seriesview/printing.py
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Callable

from seriesview.core import Highlight
from seriesview.io.surface import CompletionAwareSurface, PrintTrigger, RenderSurface

logger = logging.getLogger(__name__)


class PrintState(enum.Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    RENDERED = "rendered"
    PRINTED = "printed"
    RESTORING = "restoring"


class PrintSequencer:
    """
    Clears the highlight, lets the surface repaint, prints, then restores.

    IDLE -> PREPARING -> RENDERED -> PRINTED -> RESTORING -> IDLE

    The surface repaints asynchronously. When it offers `wait_rendered()`
    that is awaited; otherwise a fixed delay stands in for it. One pass at a
    time: a second `run()` while one is in flight is not queued.
    """

    def __init__(
        self,
        *,
        get_highlight: Callable[[], Highlight | None],
        set_highlight: Callable[[Highlight | None], None],
        redraw: Callable[[bool], None],
        trigger: PrintTrigger,
        surface: RenderSurface | None = None,
        settle_delay: float = 0.4,
        pre_print_delay: float = 0.1,
        restore_delay: float = 0.15,
        on_state: Callable[[PrintState], None] | None = None,
    ):
        self._get_highlight = get_highlight
        self._set_highlight = set_highlight
        self._redraw = redraw
        self._trigger = trigger
        self._surface = surface
        self.settle_delay = settle_delay
        self.pre_print_delay = pre_print_delay
        self.restore_delay = restore_delay
        self._on_state = on_state
        self._state = PrintState.IDLE
        self._aborted = False

    @property
    def state(self) -> PrintState:
        return self._state

    def _enter(self, state: PrintState) -> None:
        logger.debug("Print sequence: %s -> %s", self._state.value, state.value)
        self._state = state
        if self._on_state is not None:
            self._on_state(state)

    def abort(self) -> None:
        """Stop an in-flight pass: no trigger, no restore. Nothing happens if idle."""
        if self._state is not PrintState.IDLE:
            self._aborted = True

    async def _settle(self, delay: float) -> None:
        if isinstance(self._surface, CompletionAwareSurface):
            await self._surface.wait_rendered()
        elif delay > 0:
            await asyncio.sleep(delay)

    async def run(self) -> None:
        """Run one full print pass. Errors from the trigger propagate after restoring.

        After `abort()` the pass stops at its next step and leaves the
        highlight alone.
        """
        if self._state is not PrintState.IDLE:
            logger.warning("Print requested while a print sequence is %s", self._state.value)

        self._aborted = False
        self._enter(PrintState.PREPARING)
        snapshot = self._get_highlight()
        try:
            self._set_highlight(None)
            await self._settle(self.settle_delay)
            if self._aborted:
                return

            self._enter(PrintState.RENDERED)
            self._redraw(True)
            await self._settle(self.settle_delay)
            if self._aborted:
                return
            self._redraw(False)
            if self.pre_print_delay > 0:
                await asyncio.sleep(self.pre_print_delay)
            if self._aborted:
                return

            self._enter(PrintState.PRINTED)
            self._trigger()
        finally:
            if self._aborted:
                logger.debug("Print sequence aborted in state %s", self._state.value)
                self._state = PrintState.IDLE
            else:
                await self._restore(snapshot)

    async def _restore(self, snapshot: Highlight | None) -> None:
        self._enter(PrintState.RESTORING)
        if snapshot is not None:
            self._set_highlight(snapshot)
        self._redraw(True)
        await self._settle(self.restore_delay)
        self._enter(PrintState.IDLE)
