"""Configuration module for cfd-chart.

This module provides configuration loading and error handling utilities.
"""

from .exceptions import ChartGenerationError, ConfigError
from .loader import config_to_settings

__all__ = ["config_to_settings", "ConfigError", "ChartGenerationError"]
