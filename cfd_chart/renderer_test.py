"""Tests for drawing the CFD onto a matplotlib figure."""

import re
from unittest.mock import patch

import pytest
from matplotlib.colors import to_rgba
from matplotlib.figure import Figure

from .config.exceptions import ChartGenerationError
from .renderer import DPI, Renderer, clear, to_svg
from .settings import resolve
from .test_utils import artists_with_gid, texts_with_gid
from .utils import extend_dict

OPTIONAL_GIDS = ("axis", "legend", "layer-label", "marker", "predict", "title")


@pytest.fixture(name="render")
def render_fixture():
    """Render raw settings and return the plotting axes."""

    def _render(raw):
        return Renderer(resolve(raw)).render()

    return _render


def test_surface_geometry(render, base_minimal_settings):
    """The figure matches the chart size and the axes use pixel coordinates."""
    axes = render(extend_dict(base_minimal_settings, {"width": 600, "height": 300}))
    figure = base_minimal_settings["surface"]

    assert figure.get_dpi() == DPI
    assert tuple(figure.get_size_inches() * DPI) == pytest.approx((600, 300))
    assert axes.get_xlim() == (-40, 560)
    # y grows downwards from the top margin
    assert axes.get_ylim() == (225, -75)


def test_layers(render, base_minimal_settings):
    """One area per status, coloured by role, done at the bottom."""
    axes = render(base_minimal_settings)

    layers = artists_with_gid(axes, "layer")
    assert len(layers) == 3
    assert [tuple(layer.get_facecolor()[0]) for layer in layers] == [
        to_rgba("#222"),
        to_rgba("#808285"),
        to_rgba("#bec0c2"),
    ]
    assert tuple(layers[0].get_edgecolor()[0]) == to_rgba("#fff")
    assert layers[0].get_linewidth()[0] == 0.5


def test_progress_colour_wins(render, base_minimal_settings):
    """A status in progress and done is drawn as progress."""
    base_minimal_settings["data"]["done"] = ["Closed", "In Progress"]

    layers = artists_with_gid(render(base_minimal_settings), "layer")

    assert tuple(layers[1].get_facecolor()[0]) == to_rgba("#808285")


def test_no_draw_options(render, base_full_settings):
    """With every option off only the areas are drawn."""
    axes = render(extend_dict(base_full_settings, {"draw_options": []}))

    assert len(artists_with_gid(axes, "layer")) == 3
    for gid in OPTIONAL_GIDS:
        assert artists_with_gid(axes, gid) == [], gid


def test_all_draw_options(render, base_full_settings):
    """Every part of the chart is drawn by default."""
    axes = render(base_full_settings)

    for gid in OPTIONAL_GIDS:
        assert artists_with_gid(axes, gid), gid


def test_layer_labels(render, base_minimal_settings):
    """Each layer is labelled with its last value."""
    axes = render(base_minimal_settings)

    assert texts_with_gid(axes, "layer-label") == [
        "10 Closed",
        "4 In Progress",
        "6 Backlog",
    ]


def test_thin_layers_not_labelled(render, base_minimal_settings):
    """Layers thinner than the font size get no label."""
    # In Progress is 59px high at the last entry, Backlog 88.5px
    axes = render(extend_dict(base_minimal_settings, {"style": {"font_size": 60}}))

    assert texts_with_gid(axes, "layer-label") == ["10 Closed", "6 Backlog"]


def test_legend(render, base_minimal_settings):
    """The colour key and the unit label."""
    axes = render(base_minimal_settings)

    assert texts_with_gid(axes, "legend") == ["To Do", "In Progress", "Done", "Issues"]


def test_legend_story_points(render, base_minimal_settings):
    """Points are labelled as story points."""
    base_minimal_settings["data"]["unit"] = "points"

    assert texts_with_gid(render(base_minimal_settings), "legend")[-1] == "Story Points"


def test_title(render, base_full_settings):
    """The title is drawn above the chart."""
    axes = render(base_full_settings)

    title = [text for text in axes.texts if text.get_gid() == "title"]
    assert [text.get_text() for text in title] == ["Sprint 1"]
    assert title[0].get_position() == (5, -55 + 12 / 3)


def test_no_title(render, base_minimal_settings):
    """Nothing is drawn for a missing title."""
    assert artists_with_gid(render(base_minimal_settings), "title") == []


def test_markers(render, base_full_settings):
    """Markers in range get two strokes and a label; others are skipped."""
    axes = render(base_full_settings)

    assert texts_with_gid(axes, "marker") == ["Demo", "2020-01-07"]
    lines = [line for line in axes.lines if line.get_gid() == "marker"]
    assert len(lines) == 4
    assert [line.get_linewidth() for line in lines[:2]] == [3, 1]
    assert lines[0].get_color() == "#fff"
    assert lines[1].get_color() == "#222"
    assert list(lines[0].get_ydata()) == [295, 0]


def test_prediction(render, base_full_settings):
    """The projection is an outlined line with its date label."""
    axes = render(base_full_settings)

    lines = [line for line in axes.lines if line.get_gid() == "predict"]
    assert [line.get_linewidth() for line in lines] == [3, 1]
    assert list(lines[0].get_xdata()) == list(lines[1].get_xdata())
    assert list(lines[1].get_ydata())[-1] == -35
    assert texts_with_gid(axes, "predict") == ["2020-01-19 →"]


def test_axis(render, base_minimal_settings):
    """Both axes have tick labels."""
    axes = render(base_minimal_settings)

    labels = texts_with_gid(axes, "axis")
    assert "0" in labels
    assert "20" in labels
    assert "Jan 04" in labels


def test_render_wraps_matplotlib_errors(base_minimal_settings):
    """Errors raised while drawing become ChartGenerationError."""
    renderer = Renderer(resolve(base_minimal_settings))

    with patch.object(renderer, "draw_layers", side_effect=ValueError("bad")):
        with pytest.raises(ChartGenerationError, match="bad"):
            renderer.render()


def test_clear(render, base_minimal_settings):
    """Clearing removes the axes."""
    render(base_minimal_settings)
    figure = base_minimal_settings["surface"]

    clear(figure)

    assert figure.axes == []


def test_to_svg(render, base_full_settings):
    """SVG output keeps text and is repeatable."""
    render(base_full_settings)
    figure = base_full_settings["surface"]

    markup = to_svg(figure)

    assert markup.lstrip().startswith("<?xml")
    assert "<svg" in markup
    assert "Sprint 1" in markup
    assert "2020-01-19" in markup
    assert 'width="800" height="400"' in markup
    assert to_svg(figure) == markup


def test_to_svg_pixel_size(render, base_minimal_settings):
    """The root element has the chart size in pixels, not points."""
    render(extend_dict(base_minimal_settings, {"width": 640, "height": 320}))

    root = re.search(r"<svg\b[^>]*>", to_svg(base_minimal_settings["surface"]))

    assert 'width="640"' in root.group(0)
    assert 'height="320"' in root.group(0)
    assert 'pt"' not in root.group(0)
    assert 'viewBox="0 0 640 320"' in root.group(0)


def test_to_svg_empty_surface():
    """An empty surface still serializes."""
    assert "<svg" in to_svg(Figure())
