"""Clamped square sampling window over a heightmap grid.

The viewport is a ``(center, zoom)`` pair where ``zoom`` is the side of the
square window in grid cells.  :func:`extract_region` cuts that window out of a
:class:`~heightpan.grid.HeightmapGrid`, always staying inside the grid.
"""

import math
from collections import namedtuple

import numpy as np


MIN_ZOOM = 16
DEFAULT_ZOOM = 256
ZOOM_STEP = 32


Point = namedtuple('Point', ['x', 'y'])

RegionData = namedtuple('RegionData', ['data', 'width', 'height', 'start'])
RegionData.__doc__ = """Square sub-grid cut from a heightmap.

``data`` is a read-only ``(height, width)`` array, ``start`` the ``Point`` of
its top-left cell in the full grid.
"""


def region_size(grid, zoom):
    """Side of the sampling window for *zoom* on *grid*."""
    return int(min(zoom, grid.width, grid.height))


def zoom_limits(grid):
    """Return (min_zoom, max_zoom) for *grid*."""
    max_zoom = min(grid.width, grid.height)
    return min(MIN_ZOOM, max_zoom), max_zoom


def clamp_zoom(grid, zoom):
    lo, hi = zoom_limits(grid)
    return int(max(lo, min(hi, zoom)))


def clamp_center(grid, center, zoom):
    """Clamp *center* so a window of *zoom* cells fits inside *grid*.

    Each axis is held within ``[half, dim - half]`` with
    ``half = floor(region_size / 2)``.
    """
    half = region_size(grid, zoom) // 2
    x = max(half, min(grid.width - half, center[0]))
    y = max(half, min(grid.height - half, center[1]))
    return Point(x, y)


def window_origin(grid, center, zoom):
    """Top-left cell and side of the sampling window.

    Returns
    -------
    (start_x, start_y, size) : tuple of int
    """
    size = region_size(grid, zoom)
    half = size // 2
    start_x = int(math.floor(center[0] - half))
    start_y = int(math.floor(center[1] - half))
    start_x = max(0, min(grid.width - size, start_x))
    start_y = max(0, min(grid.height - size, start_y))
    return start_x, start_y, size


def extract_region(grid, center, zoom):
    """Copy the ``size x size`` window around *center* out of *grid*.

    ``size = min(zoom, grid.width, grid.height)``.  The window start is
    clamped to the grid, so the region is always fully inside it and its size
    does not depend on *center*.  Rows the grid declares but does not hold
    are filled with NaN.

    Parameters
    ----------
    grid : HeightmapGrid
    center : Point or (x, y)
        Window centre in grid cells.
    zoom : int
        Requested window side in grid cells.

    Returns
    -------
    RegionData
    """
    start_x, start_y, size = window_origin(grid, center, zoom)
    region = np.full((size, size), np.nan, dtype=np.float64)
    stop_y = min(start_y + size, grid.rows_present)
    if stop_y > start_y:
        region[:stop_y - start_y] = grid.data[start_y:stop_y, start_x:start_x + size]
    region.setflags(write=False)
    return RegionData(region, size, size, Point(start_x, start_y))


class ViewportState:
    """Current window centre and zoom.  Only the navigation controller
    mutates it."""

    def __init__(self, center, zoom):
        self.center = Point(*center)
        self.zoom = int(zoom)

    @classmethod
    def initial(cls, grid):
        """Grid midpoint at ``min(256, width, height)``."""
        zoom = min(DEFAULT_ZOOM, grid.width, grid.height)
        return cls(Point(grid.width // 2, grid.height // 2), zoom)

    def __eq__(self, other):
        if not isinstance(other, ViewportState):
            return NotImplemented
        return self.center == other.center and self.zoom == other.zoom

    def __repr__(self):
        return f"ViewportState(center=({self.center.x}, {self.center.y}), zoom={self.zoom})"


class RegionCache:
    """Memoize :func:`extract_region` on (grid identity, center, zoom).

    Holds a reference to the last grid so its ``id`` cannot be recycled while
    the cached region is alive.
    """

    def __init__(self):
        self._grid = None
        self._key = None
        self._region = None
        self.misses = 0

    def get(self, grid, center, zoom):
        key = (id(grid), center[0], center[1], zoom)
        if self._region is None or grid is not self._grid or key != self._key:
            self._region = extract_region(grid, center, zoom)
            self._grid = grid
            self._key = key
            self.misses += 1
        return self._region

    def clear(self):
        self._grid = None
        self._key = None
        self._region = None
