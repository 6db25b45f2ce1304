"""Public API: the :class:`CFD` chart object."""

import base64
import logging
from typing import Any, Dict, Optional

from .renderer import Renderer, clear, to_svg
from .settings import ResolvedSettings, resolve

logger = logging.getLogger(__name__)

DATA_URI_PREFIX = "data:image/svg+xml;base64,"


class CFD:
    """A Cumulative Flow Diagram drawn from a settings mapping.

    The settings are read, never modified: each :meth:`draw` resolves them
    afresh, so the mapping may be changed between draws. One instance should
    only be drawn from one thread at a time.

    Example:
        >>> from matplotlib.figure import Figure
        >>> chart = CFD({
        ...     "surface": Figure(),
        ...     "data": {
        ...         "entries": [{"date": "2020-01-01", "Open": 3, "Closed": 0}],
        ...         "to_do": ["Open"], "progress": [], "done": ["Closed"],
        ...     },
        ... })
        >>> uri = chart.image()
    """

    def __init__(self, settings: Dict[str, Any]):
        self.raw_settings = settings
        self._resolved: Optional[ResolvedSettings] = None

    @property
    def settings(self) -> Optional[ResolvedSettings]:
        """Settings used by the last draw, None before the first one."""
        return self._resolved

    def draw(self) -> None:
        """Validate the settings and draw the diagram, replacing any earlier one.

        Raises:
            ConfigError: if the settings are invalid; nothing is drawn.
            ChartGenerationError: if matplotlib fails while drawing.
        """
        resolved = resolve(self.raw_settings)
        self.remove()
        self._resolved = resolved
        clear(resolved.surface)
        Renderer(resolved).render()
        logger.debug("Drew CFD with %d entries", len(resolved.entries))

    def remove(self) -> None:
        """Clear the diagram. Does nothing if it was never drawn."""
        if self._resolved is not None:
            clear(self._resolved.surface)

    def svg(self) -> str:
        """Draw the diagram and return the SVG markup of the surface."""
        self.draw()
        return to_svg(self._resolved.surface)

    def image(self) -> str:
        """Draw the diagram and return it as a base64 `data:` URI.

        The result can be used as the `src` of an HTML `img` element.
        """
        encoded = base64.b64encode(self.svg().encode("utf-8")).decode("ascii")
        return DATA_URI_PREFIX + encoded


def create(settings: Dict[str, Any]) -> CFD:
    """Create a :class:`CFD` for the given settings."""
    return CFD(settings)
