# seriesview/__init__.py
"""
seriesview: multi-series time-window visualization engine.

- core: records, time windows, selections and the table / chart projections
- io: catalog and measurement store collaborators, load orchestration
- engine: the stateful SeriesChartEngine that hosts drive
"""
import logging

from seriesview.config import EngineConfig, load_config
from seriesview.engine import SeriesChartEngine
from seriesview.printing import PrintSequencer, PrintState

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "load_config",
    "SeriesChartEngine",
    "PrintSequencer",
    "PrintState",
]
