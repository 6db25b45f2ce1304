"""Exceptions raised by cfd-chart.

Bad settings or configuration files raise :class:`ConfigError` before
anything is drawn; failures inside matplotlib raise
:class:`ChartGenerationError`.
"""


class ConfigError(Exception):
    """
    Exception raised for missing or malformed chart settings.
    """


class ChartGenerationError(Exception):
    """
    Exception raised when a chart cannot be drawn or serialized.

    Wraps the ValueError, TypeError and OSError raised by matplotlib while
    drawing or saving, while letting programming errors (like AttributeError
    from typos) propagate.
    """
