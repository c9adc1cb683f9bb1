"""Writing rendered figures to files.

Physical sizes (in, cm, mm) are converted to CSS pixels at 96 px per inch,
which is how Plotly lays figures out. Raster formats are then scaled by
dpi / 96 so a 6 x 4 in figure at 300 dpi comes out 1800 x 1200 pixels.

Static formats go through ``fig.write_image`` (kaleido engine); ``.html``
goes through ``fig.write_html``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import plotly.graph_objects as go

from plotwalk.utils.logging import get_logger

logger = get_logger(__name__)

CSS_DPI = 96.0

# Inches per unit
UNIT_INCHES: dict[str, float] = {
    "in": 1.0,
    "cm": 1.0 / 2.54,
    "mm": 1.0 / 25.4,
}

IMAGE_FORMATS = {".png", ".jpg", ".jpeg", ".webp", ".svg", ".pdf"}
RASTER_FORMATS = {".png", ".jpg", ".jpeg", ".webp"}


def to_pixels(value: float, units: str) -> int:
    """Convert a length to CSS pixels.

    Raises:
        ValueError: If ``units`` is unknown or ``value`` is not positive.
    """
    if value <= 0:
        raise ValueError(f"Figure size must be positive, got {value}")
    if units == "px":
        return int(round(value))
    if units not in UNIT_INCHES:
        raise ValueError(f"Unknown units {units!r}; use one of {['px', *UNIT_INCHES]}")
    return int(round(value * UNIT_INCHES[units] * CSS_DPI))


def save_figure(
    fig: go.Figure,
    path: Union[str, Path],
    *,
    width: float,
    height: float,
    units: str = "in",
    dpi: Optional[float] = None,
) -> Path:
    """Write ``fig`` to ``path`` at the given physical size.

    Args:
        fig: Rendered figure.
        path: Output file; the suffix picks the format.
        width: Figure width in ``units``.
        height: Figure height in ``units``.
        units: "in", "cm", "mm" or "px".
        dpi: Output resolution for raster formats. Defaults to 96 (scale 1).

    Returns:
        The written path.

    Raises:
        ValueError: For an unknown suffix or units, or a non-positive size or dpi.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix != ".html" and suffix not in IMAGE_FORMATS:
        raise ValueError(
            f"Unsupported output format {suffix or '(none)'!r}; use .html or one of {sorted(IMAGE_FORMATS)}"
        )
    if dpi is not None and dpi <= 0:
        raise ValueError(f"dpi must be positive, got {dpi}")

    width_px = to_pixels(width, units)
    height_px = to_pixels(height, units)
    path.parent.mkdir(parents=True, exist_ok=True)

    if suffix == ".html":
        fig.write_html(str(path), default_width=f"{width_px}px", default_height=f"{height_px}px")
    else:
        scale = (dpi / CSS_DPI) if (dpi and suffix in RASTER_FORMATS) else 1.0
        fig.write_image(str(path), width=width_px, height=height_px, scale=scale)

    logger.info(f"Saved figure to {path} ({width}x{height} {units}, {width_px}x{height_px}px, dpi={dpi})")
    return path
