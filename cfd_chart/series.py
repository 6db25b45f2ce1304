"""Date filtering and stacking of CFD entries."""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from .settings import ResolvedSettings, Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Layer:
    """One stacked band: the `[base, top]` values of a status key per date."""

    key: str
    role: Role
    dates: pd.DatetimeIndex
    base: np.ndarray
    top: np.ndarray

    @property
    def last_value(self) -> float:
        """Count of the layer's status at the last visible date."""
        return float(self.top[-1] - self.base[-1])


def visible_range(settings: ResolvedSettings) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """The visible date range: `from_date` (or the first entry) to `to_date`
    (or the last entry).
    """
    start = settings.from_date
    if start is None:
        start = settings.first_date
    end = settings.to_date
    if end is None:
        end = settings.last_date
    return start, end


def is_date_in_range(date, settings: ResolvedSettings) -> bool:
    """Whether `date` lies in the visible range, both ends included."""
    start, end = visible_range(settings)
    return start <= pd.Timestamp(date) <= end


def filter_entries(settings: ResolvedSettings) -> pd.DataFrame:
    """Entries whose date lies in the visible range."""
    entries = settings.entries
    start, end = visible_range(settings)
    visible = entries[entries["date"].between(start, end)]
    if visible.empty:
        logger.warning("No CFD entries fall between the configured dates")
    return visible


def stack_layers(
    entries: pd.DataFrame, keys: Sequence[str], roles
) -> List[Layer]:
    """Stack the counts of `keys` per entry, first key at the bottom.

    Args:
        entries: DataFrame with a `date` column and one column per key
        keys: Status keys in stacking order
        roles: Mapping of status key to its :class:`Role`

    Returns:
        One :class:`Layer` per key, in stacking order.
    """
    dates = pd.DatetimeIndex(entries["date"])
    values = entries[list(keys)].to_numpy(dtype=float)
    tops = np.cumsum(values, axis=1)
    bases = tops - values

    return [
        Layer(
            key=key,
            role=roles[key],
            dates=dates,
            base=bases[:, i],
            top=tops[:, i],
        )
        for i, key in enumerate(keys)
    ]
