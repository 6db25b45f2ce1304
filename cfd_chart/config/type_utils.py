"""Type utilities for configuration processing.

This module provides utilities for type conversion and validation in
configuration files.
"""

import datetime

import pandas as pd

from .exceptions import ConfigError


def force_list(val) -> list:
    """
    Ensure the value is a list.
    """
    return list(val) if isinstance(val, (list, tuple)) else [val]


def force_int(key, value) -> int:
    """
    Convert value to int, raise ConfigError on failure.
    """
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(
            f"Could not convert value `{value}` for key `{expand_key(key)}` to integer"
        ) from None


def force_date(key, value) -> datetime.date:
    """
    Ensure value is a datetime.date, parsing strings, raise ConfigError otherwise.
    """
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        try:
            return pd.Timestamp(value).date()
        except ValueError:
            pass
    raise ConfigError(f"Value `{value}` for key `{expand_key(key)}` is not a date")


def expand_key(key) -> str:
    """
    Expand config key for display.
    """
    return str(key).replace("_", " ").lower()
