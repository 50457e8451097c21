# test/test_printing.py
import asyncio

import pytest

from seriesview import PrintSequencer, PrintState
from seriesview.core import Highlight


class Host:
    """Minimal stand-in for the engine hooks the sequencer drives."""

    def __init__(self, highlight=None):
        self.highlight = highlight
        self.log = []

    def set_highlight(self, h):
        self.highlight = h
        self.log.append(("highlight", h))

    def redraw(self, resize):
        self.log.append(("redraw", resize))

    def trigger(self):
        self.log.append(("print", self.highlight))


class CompletionSurface:
    def __init__(self):
        self.waits = 0

    def update(self, datasets, options):
        pass

    def resize(self):
        pass

    def destroy(self):
        pass

    async def wait_rendered(self):
        self.waits += 1


def _sequencer(host, **kwargs):
    kwargs.setdefault("settle_delay", 0)
    kwargs.setdefault("pre_print_delay", 0)
    kwargs.setdefault("restore_delay", 0)
    return PrintSequencer(
        get_highlight=lambda: host.highlight,
        set_highlight=host.set_highlight,
        redraw=host.redraw,
        trigger=host.trigger,
        **kwargs,
    )


def test_states_run_in_order_and_end_idle():
    host = Host(Highlight(1, 7))
    states = []
    seq = _sequencer(host, on_state=states.append)

    asyncio.run(seq.run())

    assert states == [
        PrintState.PREPARING,
        PrintState.RENDERED,
        PrintState.PRINTED,
        PrintState.RESTORING,
        PrintState.IDLE,
    ]
    assert seq.state is PrintState.IDLE


def test_print_happens_without_highlight_then_restores():
    host = Host(Highlight(1, 7))
    asyncio.run(_sequencer(host).run())

    assert host.log == [
        ("highlight", None),
        ("redraw", True),
        ("redraw", False),
        ("print", None),
        ("highlight", Highlight(1, 7)),
        ("redraw", True),
    ]
    assert host.highlight == Highlight(1, 7)


def test_no_highlight_is_not_reapplied():
    host = Host(None)
    asyncio.run(_sequencer(host).run())
    assert host.log.count(("highlight", None)) == 1
    assert host.highlight is None


def test_completion_aware_surface_replaces_fixed_delays():
    host = Host()
    surface = CompletionSurface()
    # A fixed delay this long would time the test out.
    seq = _sequencer(host, surface=surface, settle_delay=60, restore_delay=60)

    asyncio.run(asyncio.wait_for(seq.run(), timeout=5))

    assert surface.waits == 3


def test_trigger_error_still_restores():
    host = Host(Highlight(2, 3))

    def broken():
        raise RuntimeError("print dialog crashed")

    seq = PrintSequencer(
        get_highlight=lambda: host.highlight,
        set_highlight=host.set_highlight,
        redraw=host.redraw,
        trigger=broken,
        settle_delay=0,
        pre_print_delay=0,
        restore_delay=0,
    )

    with pytest.raises(RuntimeError):
        asyncio.run(seq.run())

    assert host.highlight == Highlight(2, 3)
    assert seq.state is PrintState.IDLE


def test_abort_mid_sequence_skips_trigger_and_restore():
    host = Host(Highlight(1, 7))
    seq = _sequencer(host, settle_delay=0.05)

    async def scenario():
        run = asyncio.create_task(seq.run())
        await asyncio.sleep(0.01)
        seq.abort()
        await run

    asyncio.run(scenario())

    assert ("print", None) not in host.log
    assert host.log == [("highlight", None)]
    assert seq.state is PrintState.IDLE


def test_abort_when_idle_does_not_affect_next_run():
    host = Host(Highlight(1, 7))
    seq = _sequencer(host)
    seq.abort()

    asyncio.run(seq.run())

    assert ("print", None) in host.log
    assert host.highlight == Highlight(1, 7)
