"""Draw a CFD onto a matplotlib figure and serialize it as SVG.

The figure is covered by a single axes whose data coordinates are the
pixel coordinates of the plot area: the origin is the top-left corner inside
the margins and y grows downwards. Every artist gets a `gid` naming what it
is (`layer`, `layer-label`, `axis`, `predict`, `marker`, `title`, `legend`),
which also ends up as the id of its group in the SVG markup.
"""

import io
import logging
import re
from typing import List, Optional

import matplotlib
import matplotlib.dates as mdates
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

from .chart_styling_utils import (
    SVG_RC_PARAMS,
    chart_style,
    format_tick_date,
    format_value,
)
from .config.exceptions import ChartGenerationError
from .prediction import DATE_FORMAT, LABEL_Y, Prediction, predict_completion
from .scales import build_scales, stack_keys
from .series import Layer, filter_entries, is_date_in_range, stack_layers
from .settings import ResolvedSettings

logger = logging.getLogger(__name__)

# One pixel per point, as in SVG user units
DPI = 72

VALUE_TICKS = 5
TICK_SIZE = 6
TICK_PADDING = 3
LEGEND_X = 5
LABEL_X_OFFSET = 50
TITLE_Y = -55
MARKER_LABEL_Y = -15
UNIT_LABELS = {"points": "Story Points"}
DEFAULT_UNIT_LABEL = "Issues"
SVG_SIZE_PATTERN = re.compile(r'(<svg\b[^>]*?)width="[^"]*" height="[^"]*"')


class Renderer:
    """Draws one resolved CFD onto its drawing surface."""

    def __init__(self, settings: ResolvedSettings):
        self.settings = settings
        self.style = settings.style
        self.scales = build_scales(settings)
        self.axes: Optional[Axes] = None

    @property
    def dy(self) -> float:
        """Baseline shift that roughly centres text on its anchor."""
        return self.style.font_size / 3

    def render(self) -> Axes:
        """Draw every part of the chart and return the plotting axes."""
        try:
            self.axes = self.prepare_surface()
            self.draw_layers()
            self.draw_prediction()
            self.draw_markers()
            self.draw_axis()
            self.draw_legend()
        except (ValueError, TypeError) as e:
            logger.error("Error drawing CFD: %s", e)
            raise ChartGenerationError(f"Failed to draw CFD: {e}") from e
        return self.axes

    def prepare_surface(self) -> Axes:
        """Size the figure and add the pixel-space axes."""
        settings = self.settings
        figure = settings.surface
        figure.set_dpi(DPI)
        figure.set_size_inches(settings.width / DPI, settings.height / DPI)
        figure.patch.set_alpha(0)

        with chart_style():
            axes = figure.add_axes((0, 0, 1, 1), frameon=False)
        axes.set_axis_off()
        axes.set_xlim(-settings.margin.left, settings.width - settings.margin.left)
        axes.set_ylim(settings.height - settings.margin.top, -settings.margin.top)
        return axes

    def _text(self, x, y, text, color, gid, ha="left", shift=True):
        return self.axes.text(
            x,
            y + self.dy if shift else y,
            text,
            color=color,
            fontsize=self.style.font_size,
            fontfamily=self.style.font_family,
            ha=ha,
            va="baseline" if shift else "center",
            gid=gid,
            parse_math=False,
            clip_on=False,
        )

    def _outlined_line(self, xs, ys, style, gid):
        """A thick background stroke under a thin foreground one."""
        for width, color in ((3, style.background_color), (1, style.color)):
            self.axes.plot(xs, ys, color=color, linewidth=width, gid=gid)

    def draw_layers(self) -> List[Layer]:
        """Stacked areas of the visible entries, with value labels."""
        settings = self.settings
        entries = filter_entries(settings)
        layers = stack_layers(entries, stack_keys(settings), settings.roles)
        if entries.empty:
            return layers

        y = self.scales.y
        xs = self.scales.x(layers[0].dates) if layers else []
        for layer in layers:
            layer_style = self.style.for_role(layer.role)
            self.axes.fill_between(
                xs,
                y(layer.base),
                y(layer.top),
                facecolor=layer_style.color,
                edgecolor=layer_style.stroke,
                linewidth=0.5,
                gid="layer",
            )

        if settings.draws("legend"):
            for layer in layers:
                top = float(y(layer.top[-1]))
                # Skip layers too thin to hold a label
                if float(y(layer.base[-1])) - top < self.style.font_size:
                    continue
                self._text(
                    settings.inner_width + LABEL_X_OFFSET,
                    top,
                    f"{format_value(layer.last_value)} {layer.key}",
                    self.style.for_role(layer.role).color,
                    "layer-label",
                )
        return layers

    def draw_prediction(self) -> Optional[Prediction]:
        prediction = predict_completion(self.settings, self.scales)
        if prediction is None:
            return None

        xs, ys = zip(*prediction.path)
        self._outlined_line(xs, ys, self.style.predict, "predict")
        self._text(
            prediction.end[0] - 5,
            LABEL_Y,
            prediction.label,
            self.style.predict.color,
            "predict",
            ha="right",
        )
        return prediction

    def draw_markers(self) -> None:
        settings = self.settings
        if not settings.draws("markers"):
            return

        for marker in settings.markers:
            if not is_date_in_range(marker.date, settings):
                logger.debug("Marker %s is outside the visible range", marker.date)
                continue
            x = float(self.scales.x(marker.date))
            self._outlined_line(
                [x, x], [settings.inner_height, 0], self.style.marker, "marker"
            )
            self._text(
                x,
                MARKER_LABEL_Y,
                marker.label or marker.date.strftime(DATE_FORMAT),
                self.style.marker.color,
                "marker",
                ha="center",
            )

    def _date_ticks(self) -> List[pd.Timestamp]:
        start, end = sorted(self.scales.x.dates)
        if start == end:
            return [start]
        values = mdates.AutoDateLocator().tick_values(
            start.to_pydatetime(), end.to_pydatetime()
        )
        ticks = [pd.Timestamp(mdates.num2date(v)).tz_localize(None) for v in values]
        return [tick for tick in ticks if start <= tick <= end]

    def _value_ticks(self) -> List[float]:
        low, high = sorted(self.scales.y.domain)
        values = MaxNLocator(nbins=VALUE_TICKS, steps=[1, 2, 5, 10]).tick_values(
            low, high
        )
        return [float(v) for v in values if low <= v <= high]

    def draw_axis(self) -> None:
        """Time axis along the bottom, value axis along the right edge."""
        settings = self.settings
        if not settings.draws("axis"):
            return

        color = self.style.axis.color
        width, height = settings.inner_width, settings.inner_height

        def line(xs, ys):
            self.axes.plot(xs, ys, color=color, linewidth=1, gid="axis")

        line(
            [0, 0, width, width],
            [height + TICK_SIZE, height, height, height + TICK_SIZE],
        )
        for tick in self._date_ticks():
            x = float(self.scales.x(tick))
            line([x, x], [height, height + TICK_SIZE])
            self.axes.text(
                x,
                height + TICK_SIZE + TICK_PADDING,
                format_tick_date(tick),
                color=color,
                fontsize=self.style.font_size,
                fontfamily=self.style.font_family,
                ha="center",
                va="top",
                gid="axis",
                clip_on=False,
            )

        line(
            [width + TICK_SIZE, width, width, width + TICK_SIZE],
            [height, height, 0, 0],
        )
        for tick in self._value_ticks():
            y = float(self.scales.y(tick))
            line([width, width + TICK_SIZE], [y, y])
            self._text(
                width + TICK_SIZE + TICK_PADDING,
                y,
                format_value(tick),
                color,
                "axis",
                shift=False,
            )

    def draw_legend(self) -> None:
        """Title, colour key and unit label."""
        settings = self.settings
        style = self.style

        if settings.draws("title") and settings.title:
            self._text(LEGEND_X, TITLE_Y, settings.title, style.color, "title")

        if not settings.draws("legend"):
            return

        rows = (
            ("To Do", style.to_do.color),
            ("In Progress", style.progress.color),
            ("Done", style.done.color),
        )
        for row, (text, color) in enumerate(rows, start=1):
            self._text(LEGEND_X, style.font_size * row, text, color, "legend")

        self._text(
            settings.inner_width + LABEL_X_OFFSET,
            LABEL_Y,
            UNIT_LABELS.get(settings.unit, DEFAULT_UNIT_LABEL),
            style.color,
            "legend",
        )


def clear(surface: Figure) -> None:
    """Remove everything drawn on the surface."""
    surface.clear()


def to_svg(surface: Figure) -> str:
    """Serialize the surface to SVG markup sized in pixels."""
    buffer = io.BytesIO()
    try:
        with matplotlib.rc_context(SVG_RC_PARAMS):
            surface.savefig(buffer, format="svg", dpi=DPI, metadata={"Date": None})
    except (ValueError, TypeError, OSError) as e:
        logger.error("Error serializing CFD: %s", e)
        raise ChartGenerationError(f"Failed to serialize CFD: {e}") from e

    # matplotlib sizes the root element in points
    width, height = surface.get_size_inches() * DPI
    return SVG_SIZE_PATTERN.sub(
        rf'\g<1>width="{format_value(round(width, 2))}" '
        rf'height="{format_value(round(height, 2))}"',
        buffer.getvalue().decode("utf-8"),
        count=1,
    )
