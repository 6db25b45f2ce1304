"""Linear projection of the completion date.

The trend runs through the cumulative "done" count at the prediction start
and at the last entry. Where it reaches the top of the chart (everything
done) is the projected completion date. All geometry is computed in the
pixel space of the plot area so it lines up with the stacked layers.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import pandas as pd

from .scales import Scales
from .series import visible_range
from .settings import ResolvedSettings, Role

logger = logging.getLogger(__name__)

# Keep the line off the y axis at the right edge of the plot
X_TRIM = 2
LABEL_Y = -35
DATE_FORMAT = "%Y-%m-%d"
CONTINUES_HINT = " →"


@dataclass(frozen=True)
class Prediction:
    """Geometry and label of a completion projection."""

    start: Tuple[float, float]
    end: Tuple[float, float]
    crossing_x: float
    completion_date: pd.Timestamp

    @property
    def path(self) -> List[Tuple[float, float]]:
        """Trend line from start to end, then straight up to the label row."""
        return [self.start, self.end, (self.end[0], LABEL_Y)]

    @property
    def continues(self) -> bool:
        """Whether the line reaches zero beyond the drawn end."""
        return self.crossing_x - X_TRIM > self.end[0]

    @property
    def label(self) -> str:
        text = self.completion_date.strftime(DATE_FORMAT)
        return text + CONTINUES_HINT if self.continues else text


def done_total(settings: ResolvedSettings, date) -> float:
    """Sum of the done statuses on the entry dated the same day as `date`.

    Returns 0 when no entry falls on that day.
    """
    entries = settings.entries
    day = pd.Timestamp(date).normalize()
    matches = entries[entries["date"].dt.normalize() == day]
    if matches.empty:
        return 0.0

    done_keys = [key for key, role in settings.roles.items() if role == Role.DONE]
    return float(matches[done_keys].iloc[0].sum())


def predict_completion(
    settings: ResolvedSettings, scales: Scales
) -> Optional[Prediction]:
    """Project the completion date, or return None when there is nothing to draw.

    Nothing is projected unless the `predict` draw option is on, a prediction
    start is configured, and that start is before the last entry. Degenerate
    trends (vertical, flat, or not finite) are skipped with a warning.
    """
    if not settings.draws("predict") or settings.predict is None:
        return None

    predict_start = settings.predict
    current_date = settings.last_date
    if not predict_start < current_date:
        logger.debug(
            "Prediction start %s is not before the last entry %s",
            predict_start,
            current_date,
        )
        return None

    x1 = float(scales.x(predict_start))
    x2 = float(scales.x(current_date))
    y1 = float(scales.y(done_total(settings, predict_start)))
    y2 = float(scales.y(done_total(settings, current_date)))

    if x2 == x1:
        logger.warning(
            "Prediction start %s and last entry %s map to the same position, "
            "skipping prediction",
            predict_start,
            current_date,
        )
        return None

    m = (y2 - y1) / (x2 - x1)
    if m == 0 or not math.isfinite(m):
        logger.warning(
            "Done count does not change since %s, skipping prediction", predict_start
        )
        return None

    def y_from_x(x):
        return y1 + m * (x - x1)

    # The line reaches y == 0 (nothing left to do) here
    crossing_x = -y1 / m + x1

    start_date, end_date = visible_range(settings)

    x0, y0 = x1, y1
    if predict_start < start_date:
        x0 = float(scales.x(start_date))
        y0 = y_from_x(x0)

    x3 = float(scales.x(end_date)) - X_TRIM
    y3 = y_from_x(x3)
    if y3 < 0:
        x3 = crossing_x - X_TRIM
        y3 = y_from_x(x3)

    # Invert the date-to-pixel mapping of the two known points
    nanos_per_pixel = (current_date.value - predict_start.value) / (x2 - x1)
    completion_nanos = predict_start.value + (crossing_x - x1) * nanos_per_pixel
    if not math.isfinite(completion_nanos):
        logger.warning("Projected completion date is not finite, skipping prediction")
        return None

    try:
        completion_date = pd.Timestamp(round(completion_nanos)).round("s")
    except (OverflowError, ValueError) as e:
        logger.warning("Projected completion date out of range: %s", e)
        return None

    prediction = Prediction(
        start=(x0, y0),
        end=(x3, y3),
        crossing_x=crossing_x,
        completion_date=completion_date,
    )
    logger.debug("Projected completion %s from %s", prediction.label, predict_start)
    return prediction
