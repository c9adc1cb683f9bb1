"""Unit tests for save_figure(): unit conversion and format dispatch.

Static image writing is stubbed so the tests do not need a kaleido engine.
"""

from __future__ import annotations

import plotly.graph_objects as go
import pytest

from plotwalk.plotting.export import save_figure, to_pixels


@pytest.fixture
def fig():
    return go.Figure(go.Scatter(x=[1, 2, 3], y=[3, 1, 2], mode="markers"))


@pytest.fixture
def image_calls(monkeypatch):
    """Capture write_image calls instead of rendering."""
    calls = []

    def fake_write_image(self, file, **kwargs):
        calls.append({"file": file, **kwargs})

    monkeypatch.setattr(go.Figure, "write_image", fake_write_image)
    return calls


@pytest.mark.parametrize("value, units, expected", [
    (6, "in", 576),
    (2.54, "cm", 96),
    (25.4, "mm", 96),
    (800, "px", 800),
])
def test_to_pixels(value, units, expected):
    assert to_pixels(value, units) == expected


def test_to_pixels_unknown_units():
    with pytest.raises(ValueError):
        to_pixels(5, "pt")


def test_to_pixels_non_positive():
    with pytest.raises(ValueError):
        to_pixels(0, "in")


def test_png_uses_write_image_with_dpi_scale(fig, image_calls, tmp_path):
    out = save_figure(fig, tmp_path / "figs" / "plot.png", width=6, height=4, units="in", dpi=300)
    assert out == tmp_path / "figs" / "plot.png"
    assert (tmp_path / "figs").is_dir()
    assert len(image_calls) == 1
    call = image_calls[0]
    assert call["file"] == str(out)
    assert call["width"] == 576
    assert call["height"] == 384
    assert call["scale"] == pytest.approx(300 / 96)


def test_svg_ignores_dpi(fig, image_calls, tmp_path):
    save_figure(fig, tmp_path / "plot.svg", width=10, height=5, units="cm", dpi=300)
    assert image_calls[0]["scale"] == 1.0
    assert image_calls[0]["width"] == 378


def test_html_writes_file(fig, image_calls, tmp_path):
    out = save_figure(fig, tmp_path / "plot.html", width=640, height=480, units="px")
    assert out.exists()
    text = out.read_text(encoding="utf-8")
    assert "640px" in text
    assert image_calls == []


def test_unknown_suffix_raises(fig, tmp_path):
    with pytest.raises(ValueError):
        save_figure(fig, tmp_path / "plot.bmp", width=4, height=3)


def test_bad_dpi_raises(fig, tmp_path):
    with pytest.raises(ValueError):
        save_figure(fig, tmp_path / "plot.png", width=4, height=3, dpi=0)
