"""Geometry for the 2D overlays drawn on top of the heightmap.

Pure functions so they can be tested without a display: the minimap's
sampling-window rectangle, its click-to-cell mapping, and the ruler ticks.
"""

import numpy as np

from .viewport import window_origin


def normalize_heights(array):
    """Scale *array* to ``[0, 1]``; flat or empty input maps to zeros.

    NaN cells stay NaN.
    """
    arr = np.asarray(array, dtype=np.float64)
    if arr.size == 0 or np.all(np.isnan(arr)):
        return np.zeros_like(arr)
    lo = np.nanmin(arr)
    hi = np.nanmax(arr)
    span = hi - lo
    if span == 0:
        return np.where(np.isnan(arr), np.nan, 0.0)
    return (arr - lo) / span


def window_rect(grid, center, zoom):
    """Return ``(start_x, start_y, size)`` of the sampling window on *grid*.

    Uses the same clamping as :func:`heightpan.viewport.extract_region`, so
    the minimap outline matches the region on screen exactly.
    """
    return window_origin(grid, center, zoom)


def minimap_to_grid(grid, mx, my, scale_x=1.0, scale_y=1.0):
    """Convert minimap pixel (mx, my) to a grid cell clamped to *grid*."""
    x = int(np.floor(mx / scale_x))
    y = int(np.floor(my / scale_y))
    x = max(0, min(grid.width - 1, x))
    y = max(0, min(grid.height - 1, y))
    return x, y


def ruler_ticks(center_x, zoom, ruler_width, base_spacing=20.0,
                deg_per_tick=10, major_every=3, reference_zoom=256):
    """Tick positions for the horizontal ruler.

    Spacing grows as the window narrows (``reference_zoom / zoom``) and the
    ticks slide opposite to the centre so they appear attached to the
    terrain.

    Parameters
    ----------
    center_x : float
        Window centre column.
    zoom : int
        Window size in cells.
    ruler_width : float
        Drawable ruler length in pixels; ticks are placed on
        ``[0, ruler_width]`` with the window centre at the middle.

    Returns
    -------
    list of (x, degrees, is_major)
    """
    magnification = reference_zoom / float(zoom)
    spacing = base_spacing * magnification
    offset = (center_x / reference_zoom) * spacing * 2

    half = ruler_width / 2.0
    lo = int(np.ceil((-half + offset) / spacing))
    hi = int(np.floor((half + offset) / spacing))

    ticks = []
    for index in range(lo, hi + 1):
        x = half + index * spacing - offset
        degrees = ((index * deg_per_tick + 180) % 360) - 180
        ticks.append((x, degrees, index % major_every == 0))
    return ticks
