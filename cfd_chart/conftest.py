"""Test configuration and fixtures for cfd-chart.

The shared data set has 20 items throughout: ten are closed between
1 and 10 January 2020, so a projection from 1 January finishes on the 19th.
"""

import pytest
from matplotlib.figure import Figure

from .settings import resolve
from .utils import extend_dict

COMMON_ENTRIES = [
    {"date": "2020-01-01", "Backlog": 20, "In Progress": 0, "Closed": 0},
    {"date": "2020-01-04", "Backlog": 15, "In Progress": 3, "Closed": 2},
    {"date": "2020-01-07", "Backlog": 10, "In Progress": 4, "Closed": 6},
    {"date": "2020-01-10", "Backlog": 6, "In Progress": 4, "Closed": 10},
]


@pytest.fixture(name="base_entries")
def entries():
    """Fresh copies of the common entries."""
    return [dict(entry) for entry in COMMON_ENTRIES]


@pytest.fixture(name="base_minimal_settings")
def minimal_settings(base_entries):
    """The smallest raw settings that can be drawn."""
    return {
        "surface": Figure(),
        "data": {
            "entries": base_entries,
            "unit": "issues",
            "to_do": ["Backlog"],
            "progress": ["In Progress"],
            "done": ["Closed"],
        },
    }


@pytest.fixture(name="base_full_settings")
def full_settings(base_minimal_settings):
    """Raw settings with a title, a prediction and markers."""
    return extend_dict(
        base_minimal_settings,
        {
            "title": "Sprint 1",
            "predict": "2020-01-01",
            "markers": [
                {"date": "2020-01-05", "label": "Demo"},
                {"date": "2020-01-07"},
                {"date": "2020-02-01", "label": "Too late"},
            ],
        },
    )


@pytest.fixture(name="resolve_with")
def resolve_with_fixture(base_minimal_settings):
    """Resolve the minimal settings extended with the given values."""

    def _resolve(**overrides):
        return resolve(extend_dict(base_minimal_settings, overrides))

    return _resolve
