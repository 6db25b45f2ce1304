"""Common chart styling utilities shared by the renderer and the CLI."""

import logging

import pandas as pd
import seaborn as sns

logger = logging.getLogger(__name__)

# Keep text as <text> elements and make repeated exports byte-identical
SVG_RC_PARAMS = {
    "svg.fonttype": "none",
    "svg.hashsalt": "cfd-chart",
}


def chart_style(style="white"):
    """Seaborn axes style to draw under, usable as a context manager."""
    return sns.axes_style(style)


def set_chart_context(context):
    """Set seaborn chart context."""
    sns.set_context(context)


def format_tick_date(date) -> str:
    """Format a time-axis tick the way d3's multi-scale format does.

    Year starts show the year, month starts the month name and any other
    day the abbreviated month and day.
    """
    date = pd.Timestamp(date)
    if date != date.normalize():
        return date.strftime("%H:%M")
    if date.dayofyear == 1:
        return date.strftime("%Y")
    if date.day == 1:
        return date.strftime("%B")
    return date.strftime("%b %d")


def format_value(value) -> str:
    """Format a count without a trailing `.0` on whole numbers."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:g}"
