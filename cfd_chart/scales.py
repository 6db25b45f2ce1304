"""Scales and domains for the CFD plot area.

Pixel coordinates follow SVG conventions: x grows to the right from the
left edge of the plot area, y grows downwards from its top edge.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
import pandas as pd

from .settings import ResolvedSettings

logger = logging.getLogger(__name__)


def _to_nanos(value):
    """Convert a date or an array-like of dates to nanoseconds since the epoch."""
    if pd.api.types.is_list_like(value):
        return (
            pd.DatetimeIndex(value)
            .to_numpy(dtype="datetime64[ns]")
            .astype(np.int64)
            .astype(float)
        )
    return float(pd.Timestamp(value).value)


class LinearScale:
    """Map numbers linearly from `domain` onto the `pixels` range.

    As with d3 scales, a zero-width domain maps every value onto the middle
    of the range.
    """

    def __init__(self, domain: Tuple[float, float], pixels: Tuple[float, float]):
        self.domain = tuple(domain)
        self.range = tuple(pixels)

    def _interpolate(self, value):
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            middle = (r0 + r1) / 2
            return np.full(np.shape(value), middle) if np.ndim(value) else middle
        return r0 + (value - d0) * (r1 - r0) / (d1 - d0)

    def __call__(self, value):
        if pd.api.types.is_list_like(value):
            value = np.asarray(value, dtype=float)
        return self._interpolate(value)

    def __repr__(self):
        return f"{type(self).__name__}(domain={self.domain}, range={self.range})"


class TimeScale(LinearScale):
    """Map dates linearly onto the `pixels` range."""

    def __init__(
        self,
        domain: Tuple[pd.Timestamp, pd.Timestamp],
        pixels: Tuple[float, float],
    ):
        super().__init__((_to_nanos(domain[0]), _to_nanos(domain[1])), pixels)
        self.dates = (pd.Timestamp(domain[0]), pd.Timestamp(domain[1]))

    def __call__(self, value):
        return self._interpolate(_to_nanos(value))

    def __repr__(self):
        return f"{type(self).__name__}(domain={self.dates}, range={self.range})"


@dataclass(frozen=True)
class Scales:
    x: TimeScale
    y: LinearScale


def stack_keys(settings: ResolvedSettings) -> List[str]:
    """Status keys in stacking order, bottom layer first.

    Done statuses sit at the bottom, then progress, then to-do. A key listed
    more than once is stacked at its first position.
    """
    keys = []
    for key in settings.done + settings.progress + settings.to_do:
        if key not in keys:
            keys.append(key)
    return keys


def time_domain(settings: ResolvedSettings) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """Earliest and latest entry date, overridden by `from_date`/`to_date`."""
    dates = settings.entries["date"]
    start, end = dates.min(), dates.max()
    if settings.from_date is not None:
        start = settings.from_date
    if settings.to_date is not None:
        end = settings.to_date
    return start, end


def value_domain(settings: ResolvedSettings) -> Tuple[float, float]:
    """Zero up to the highest stack over all entries, whatever the date range."""
    keys = stack_keys(settings)
    if not keys:
        return 0.0, 0.0
    totals = settings.entries[keys].sum(axis=1)
    return 0.0, float(totals.max())


def build_scales(settings: ResolvedSettings) -> Scales:
    """Build the x (time) and y (value) scales for the plot area."""
    x_domain = time_domain(settings)
    y_domain = value_domain(settings)
    logger.debug("CFD time domain %s to %s, value domain %s", *x_domain, y_domain)

    return Scales(
        x=TimeScale(x_domain, (0, settings.inner_width)),
        y=LinearScale(y_domain, (settings.inner_height, 0)),
    )
