"""cfd-chart - render Cumulative Flow Diagrams as SVG.

A cumulative flow diagram stacks the number of work items in each workflow
status over time, with an optional linear projection of the completion date.
"""

from .chart import CFD, create
from .config import ChartGenerationError, ConfigError

__all__ = ["CFD", "create", "ConfigError", "ChartGenerationError"]
