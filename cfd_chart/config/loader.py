"""Configuration loader for cfd-chart.

Turns a YAML document into the raw settings mapping accepted by
:class:`cfd_chart.chart.CFD`. Keys are case-insensitive and written with
spaces where the settings use underscores, e.g. ``Font size`` for ``font_size``.

Case-insensitivity comes from :func:`.yaml_utils.ordered_load`, which builds
every YAML mapping as a pydicti ``odicti``; lookups go through :func:`_get` and
:func:`_has`, which turn setting names into their spaced form first.
"""

import logging
import os.path

import pandas as pd
import yaml

from .exceptions import ConfigError
from .type_utils import expand_key, force_date, force_int, force_list
from .yaml_utils import ordered_load

logger = logging.getLogger(__name__)

MARGIN_KEYS = ("top", "right", "bottom", "left")
STATUS_KEYS = ("to_do", "progress", "done")
STYLE_KEYS = ("font_size", "font_family", "color", "background_color")
SERIES_STYLE_KEYS = {
    "axis": ("color",),
    "to_do": ("color", "stroke"),
    "progress": ("color", "stroke"),
    "done": ("color", "stroke"),
    "predict": ("background_color", "color"),
    "marker": ("background_color", "color"),
}


def _get(mapping, key, default=None):
    return mapping.get(expand_key(key), default)


def _has(mapping, key):
    return expand_key(key) in mapping


def _parse_geometry(config, settings):
    """Parse width, height and margins."""
    for key in ("width", "height"):
        if _has(config, key):
            settings[key] = force_int(key, _get(config, key))

    if _has(config, "margin"):
        margin_config = _get(config, "margin") or {}
        settings["margin"] = {
            key: force_int(key, _get(margin_config, key))
            for key in MARGIN_KEYS
            if _has(margin_config, key)
        }


def _parse_style(config, settings):
    """Parse the style block, keeping only the keys that were given."""
    if not _has(config, "style"):
        return

    style_config = _get(config, "style") or {}
    style = {}
    for key in STYLE_KEYS:
        if _has(style_config, key):
            style[key] = _get(style_config, key)
    if "font_size" in style:
        style["font_size"] = force_int("font_size", style["font_size"])

    for series, keys in SERIES_STYLE_KEYS.items():
        if not _has(style_config, series):
            continue
        series_config = _get(style_config, series) or {}
        style[series] = {
            key: _get(series_config, key) for key in keys if _has(series_config, key)
        }

    settings["style"] = style


def _parse_markers(config, settings):
    """Parse the list of date markers."""
    if not _has(config, "markers"):
        return

    markers = []
    for marker_config in force_list(_get(config, "markers") or []):
        if isinstance(marker_config, dict):
            date = _get(marker_config, "date")
            label = _get(marker_config, "label")
        else:
            date, label = marker_config, None
        markers.append({"date": force_date("markers", date), "label": label})
    settings["markers"] = markers


def _load_entries_file(filename, cwd):
    """Load entries from a CSV file with a `Date` column and one column per status."""
    if cwd and not os.path.isabs(filename):
        filename = os.path.join(cwd, filename)

    logger.debug("Loading CFD entries from %s", filename)
    try:
        entries = pd.read_csv(filename)
    except FileNotFoundError:
        raise ConfigError(f"Entries file `{filename}` not found") from None
    except (ValueError, pd.errors.ParserError) as e:
        raise ConfigError(f"Could not read entries file `{filename}`: {e}") from e

    date_columns = [c for c in entries.columns if str(c).lower() == "date"]
    if not date_columns:
        raise ConfigError(f"Entries file `{filename}` has no `Date` column")

    return entries.rename(columns={date_columns[0]: "date"}).to_dict("records")


def _parse_data(config, settings, cwd):
    """Parse the data block: status lists, unit and entries."""
    if not _has(config, "data"):
        return

    data_config = _get(config, "data") or {}
    data = {}

    for key in STATUS_KEYS:
        if _has(data_config, key):
            data[key] = [str(v) for v in force_list(_get(data_config, key))]

    if _has(data_config, "unit"):
        data["unit"] = str(_get(data_config, "unit")).lower()

    if _has(data_config, "entries_file"):
        data["entries"] = _load_entries_file(_get(data_config, "entries_file"), cwd)
    elif _has(data_config, "entries"):
        entries = _get(data_config, "entries")
        if isinstance(entries, list):
            # Entry keys follow the case of the status names they count
            names = {"date": "date"}
            for key in STATUS_KEYS:
                names.update({str(name).lower(): name for name in data.get(key, [])})
            entries = [
                {names.get(str(k).lower(), k): v for k, v in dict(entry).items()}
                for entry in entries
            ]
        data["entries"] = entries

    settings["data"] = data


def config_to_settings(data, cwd=None):
    """Parse YAML text into a raw settings dict.

    The result still lacks a drawing surface: callers attach one under the
    `surface` key before drawing.
    """
    try:
        config = ordered_load(data, yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML configuration: {e}") from e

    if config is None:
        raise ConfigError("Configuration is empty")
    if not isinstance(config, dict):
        raise ConfigError("Configuration must be a mapping")

    if cwd is None:
        cwd = os.getcwd()

    settings = {}

    if _has(config, "title"):
        settings["title"] = _get(config, "title")

    _parse_geometry(config, settings)
    _parse_style(config, settings)

    for key in ("from_date", "to_date", "predict"):
        if _get(config, key) is not None:
            settings[key] = force_date(key, _get(config, key))

    if _get(config, "draw_options") is not None:
        settings["draw_options"] = [
            str(v).lower() for v in force_list(_get(config, "draw_options"))
        ]

    _parse_markers(config, settings)
    _parse_data(config, settings, cwd)

    return settings
