"""Validation and defaults for CFD settings.

Callers hand in a plain mapping (the *raw settings*). :func:`resolve` checks
its structure, fills in every missing margin, dimension, style and draw
option, and returns an immutable :class:`ResolvedSettings`. The caller's
mapping is never modified.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from matplotlib.figure import Figure

from .config.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 400
DEFAULT_MARGIN = {"top": 75, "right": 210, "bottom": 30, "left": 40}

DEFAULT_FONT_SIZE = 12
DEFAULT_FONT_FAMILY = "sans-serif"
DEFAULT_COLOR = "#222"
DEFAULT_BACKGROUND_COLOR = "#fff"
DEFAULT_TO_DO_COLOR = "#bec0c2"
DEFAULT_PROGRESS_COLOR = "#808285"
DEFAULT_DONE_COLOR = "#222"

DRAW_OPTIONS = ("title", "axis", "legend", "markers", "predict")
UNITS = ("points", "issues")


class Role(Enum):
    """Workflow role of a status key; decides the colour of its layer."""

    TO_DO = "to_do"
    PROGRESS = "progress"
    DONE = "done"


@dataclass(frozen=True)
class Margin:
    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class SeriesStyle:
    """Colours for one kind of series (a layer role, the axis, markers...)."""

    color: str
    stroke: Optional[str] = None
    background_color: Optional[str] = None


@dataclass(frozen=True)
class Style:
    font_size: float
    font_family: str
    color: str
    background_color: str
    axis: SeriesStyle
    to_do: SeriesStyle
    progress: SeriesStyle
    done: SeriesStyle
    predict: SeriesStyle
    marker: SeriesStyle

    def for_role(self, role: Role) -> SeriesStyle:
        """Return the layer style for a status role."""
        return {
            Role.TO_DO: self.to_do,
            Role.PROGRESS: self.progress,
            Role.DONE: self.done,
        }[role]


@dataclass(frozen=True)
class Marker:
    date: pd.Timestamp
    label: Optional[str] = None


@dataclass(frozen=True)
class ResolvedSettings:
    """Validated settings with every default filled in.

    `entries` holds one row per data point: a parsed `date` column followed
    by one numeric column per status key, in the order supplied.
    """

    surface: Figure = field(compare=False, repr=False)
    entries: pd.DataFrame = field(compare=False, repr=False)
    unit: str
    to_do: Tuple[str, ...]
    progress: Tuple[str, ...]
    done: Tuple[str, ...]
    roles: Dict[str, Role]
    width: float
    height: float
    margin: Margin
    inner_width: float
    inner_height: float
    style: Style
    draw_options: Tuple[str, ...]
    from_date: Optional[pd.Timestamp] = None
    to_date: Optional[pd.Timestamp] = None
    predict: Optional[pd.Timestamp] = None
    markers: Tuple[Marker, ...] = ()
    title: Optional[str] = None

    @property
    def first_date(self) -> pd.Timestamp:
        return self.entries["date"].iloc[0]

    @property
    def last_date(self) -> pd.Timestamp:
        return self.entries["date"].iloc[-1]

    def draws(self, option: str) -> bool:
        """Whether the given draw option is enabled."""
        return option in self.draw_options


def classify(key, to_do, progress, done) -> Role:
    """Classify a status key. Progress wins over done, done over to-do."""
    if key in progress:
        return Role.PROGRESS
    if key in done:
        return Role.DONE
    return Role.TO_DO


def _as_keys(value) -> List[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


def _to_timestamp(key, value) -> pd.Timestamp:
    try:
        timestamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Value `{value}` for `{key}` is not a date") from None
    if timestamp is pd.NaT:
        raise ConfigError(f"Value `{value}` for `{key}` is not a date")
    return timestamp


def validate(raw) -> None:
    """Check that the raw settings have the structure needed to draw.

    Raises:
        ConfigError: describing the first problem found.
    """
    if raw is None:
        raise ConfigError("No settings")
    if not isinstance(raw, dict):
        raise ConfigError("Settings must be a mapping")

    surface = raw.get("surface")
    if surface is None:
        raise ConfigError("No drawing surface")
    if not isinstance(surface, Figure):
        raise ConfigError("Drawing surface is not a matplotlib Figure")

    data = raw.get("data")
    if not data:
        raise ConfigError("No data")
    if not isinstance(data, dict):
        raise ConfigError("Data must be a mapping")

    entries = data.get("entries")
    if entries is None:
        raise ConfigError("No data entries")
    if not isinstance(entries, (list, tuple, pd.DataFrame)):
        raise ConfigError("Data entries not a list")
    if len(entries) == 0:
        raise ConfigError("Empty data entries")

    for key, label in (("to_do", "to do"), ("progress", "progress"), ("done", "done")):
        if data.get(key) is None:
            raise ConfigError(f"No {label} status defined")
        if not isinstance(data[key], (str, list, tuple)):
            raise ConfigError(f"Statuses for {label} must be a list of names")

    for key in ("margin", "style"):
        if raw.get(key) is not None and not isinstance(raw[key], dict):
            raise ConfigError(f"`{key}` must be a mapping")

    style = raw.get("style") or {}
    for key in ("axis", "to_do", "progress", "done", "predict", "marker"):
        if style.get(key) is not None and not isinstance(style[key], dict):
            raise ConfigError(f"`style.{key}` must be a mapping")

    draw_options = raw.get("draw_options")
    if draw_options is not None and not isinstance(draw_options, (list, tuple)):
        raise ConfigError("Draw options must be a list")

    markers = raw.get("markers")
    if markers is not None:
        if not isinstance(markers, (list, tuple)):
            raise ConfigError("Markers must be a list")
        if not all(isinstance(marker, dict) for marker in markers):
            raise ConfigError("Markers must be mappings with a `date`")


def _fill(values, defaults) -> dict:
    """Copy `values`, setting every falsy key from `defaults`."""
    filled = dict(values or {})
    for key, value in defaults.items():
        if not filled.get(key):
            filled[key] = value
    return filled


def _series_style(values) -> SeriesStyle:
    return SeriesStyle(
        color=values["color"],
        stroke=values.get("stroke"),
        background_color=values.get("background_color"),
    )


def _default_style(style) -> dict:
    style = _fill(
        style,
        {
            "font_size": DEFAULT_FONT_SIZE,
            "font_family": DEFAULT_FONT_FAMILY,
            "color": DEFAULT_COLOR,
            "background_color": DEFAULT_BACKGROUND_COLOR,
        },
    )
    background = style["background_color"]

    style["axis"] = _fill(style.get("axis"), {"color": style["color"]})
    style["to_do"] = _fill(
        style.get("to_do"), {"color": DEFAULT_TO_DO_COLOR, "stroke": background}
    )
    style["progress"] = _fill(
        style.get("progress"), {"color": DEFAULT_PROGRESS_COLOR, "stroke": background}
    )
    style["done"] = _fill(
        style.get("done"), {"color": DEFAULT_DONE_COLOR, "stroke": background}
    )
    style["predict"] = _fill(
        style.get("predict"),
        {"background_color": background, "color": style["done"]["color"]},
    )
    style["marker"] = _fill(
        style.get("marker"),
        {"background_color": background, "color": style["color"]},
    )
    return style


def apply_defaults(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of `raw` with every missing optional field filled in.

    Values that are already present are kept as they are, including inside
    nested mappings: a `style.done.color` without `style.done.stroke` only
    gets the stroke. Applying this twice gives the same result as once.
    """
    settings = dict(raw)

    margin = dict(settings.get("margin") or {})
    for key, value in DEFAULT_MARGIN.items():
        if margin.get(key) is None:
            margin[key] = value
    settings["margin"] = margin

    if settings.get("width") is None:
        settings["width"] = DEFAULT_WIDTH
    if settings.get("height") is None:
        settings["height"] = DEFAULT_HEIGHT
    settings["inner_width"] = settings["width"] - margin["left"] - margin["right"]
    settings["inner_height"] = settings["height"] - margin["top"] - margin["bottom"]

    settings["style"] = _default_style(settings.get("style"))

    if settings.get("draw_options") is None:
        settings["draw_options"] = list(DRAW_OPTIONS)

    return settings


def _entries_frame(entries, keys) -> pd.DataFrame:
    """Build the entries DataFrame, checking dates and status columns."""
    if isinstance(entries, pd.DataFrame):
        frame = entries.reset_index(drop=True)
    else:
        if not all(isinstance(entry, dict) for entry in entries):
            raise ConfigError("Data entries must be mappings")
        frame = pd.DataFrame(list(entries))

    if "date" not in frame.columns:
        raise ConfigError("Data entries have no `date`")

    missing = [key for key in keys if key not in frame.columns]
    if missing:
        raise ConfigError(f"Data entries have no count for status {', '.join(missing)}")

    try:
        dates = pd.to_datetime(frame["date"], format="mixed")
        counts = pd.DataFrame(
            {key: pd.to_numeric(frame[key]) for key in keys}, index=frame.index
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Malformed data entries: {e}") from e

    if dates.isna().any():
        raise ConfigError("Data entries have an empty `date`")
    if counts.isna().any().any():
        raise ConfigError("Data entries have empty status counts")

    counts.insert(0, "date", dates)
    return counts


def resolve(raw: Dict[str, Any]) -> ResolvedSettings:
    """Validate `raw` and build the resolved settings used for drawing.

    Raises:
        ConfigError: if the settings are missing required pieces.
    """
    validate(raw)
    settings = apply_defaults(raw)
    data = settings["data"]

    to_do = tuple(_as_keys(data["to_do"]))
    progress = tuple(_as_keys(data["progress"]))
    done = tuple(_as_keys(data["done"]))

    roles = {}
    for key in done + progress + to_do:
        roles.setdefault(key, classify(key, to_do, progress, done))

    entries = _entries_frame(data["entries"], list(roles))

    unit = data.get("unit") or "issues"
    if unit not in UNITS:
        logger.warning("Unknown unit %s, labelling values as issues", unit)

    draw_options = []
    for option in settings["draw_options"]:
        if option in DRAW_OPTIONS:
            draw_options.append(option)
        else:
            logger.warning("Ignoring unknown draw option %s", option)

    markers = []
    for marker in settings.get("markers") or []:
        if not isinstance(marker, dict) or marker.get("date") is None:
            raise ConfigError("Markers need a `date`")
        markers.append(
            Marker(
                date=_to_timestamp("markers", marker["date"]),
                label=marker.get("label"),
            )
        )

    from_date = settings.get("from_date")
    to_date = settings.get("to_date")
    predict = settings.get("predict")

    style = settings["style"]
    margin = settings["margin"]

    resolved = ResolvedSettings(
        surface=settings["surface"],
        entries=entries,
        unit=unit,
        to_do=to_do,
        progress=progress,
        done=done,
        roles=roles,
        width=settings["width"],
        height=settings["height"],
        margin=Margin(**{key: margin[key] for key in DEFAULT_MARGIN}),
        inner_width=settings["inner_width"],
        inner_height=settings["inner_height"],
        style=Style(
            font_size=style["font_size"],
            font_family=style["font_family"],
            color=style["color"],
            background_color=style["background_color"],
            axis=SeriesStyle(color=style["axis"]["color"]),
            to_do=_series_style(style["to_do"]),
            progress=_series_style(style["progress"]),
            done=_series_style(style["done"]),
            predict=_series_style(style["predict"]),
            marker=_series_style(style["marker"]),
        ),
        draw_options=tuple(draw_options),
        from_date=(
            _to_timestamp("from_date", from_date).normalize()
            if from_date is not None
            else None
        ),
        to_date=(
            _to_timestamp("to_date", to_date).normalize()
            if to_date is not None
            else None
        ),
        predict=_to_timestamp("predict", predict) if predict is not None else None,
        markers=tuple(markers),
        title=settings.get("title"),
    )

    logger.debug(
        "Resolved CFD settings: %d entries, statuses %s, draw options %s",
        len(entries),
        list(roles),
        list(resolved.draw_options),
    )
    return resolved
