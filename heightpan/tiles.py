"""Web Mercator (slippy-map) tile math.

Converts ``z/x/y`` tile indices to geographic bounding boxes and back.

Usage::

    from heightpan.tiles import tile_to_bbox
    bbox = tile_to_bbox(6, 33, 22)
    west, south, east, north = bbox.bounds
"""

import math
from collections import namedtuple


class GeoBoundingBox(namedtuple('GeoBoundingBox', ['north', 'south', 'east', 'west'])):
    """North/south/east/west rectangle in WGS84 degrees."""

    __slots__ = ()

    @property
    def bounds(self):
        """(west, south, east, north) tuple, as accepted by the fetch helpers."""
        return (self.west, self.south, self.east, self.north)


# ---------------------------------------------------------------------------
# Tile math
# ---------------------------------------------------------------------------

def validate_tile(zoom, x, y):
    """Raise ``ValueError`` unless (x, y) is a valid tile index at *zoom*."""
    if int(zoom) != zoom or zoom < 0:
        raise ValueError(f"zoom must be a non-negative integer, got {zoom!r}")
    n = 2 ** int(zoom)
    if not (0 <= x < n and 0 <= y < n):
        raise ValueError(
            f"tile ({x}, {y}) is outside the {n}x{n} grid at zoom {zoom}"
        )


def _tile_lat(y, n):
    return math.degrees(math.atan(math.sinh(math.pi * (1 - 2 * y / n))))


def tile_to_bbox(zoom, x, y):
    """Return the geographic bounding box of tile (x, y) at *zoom*.

    Indices are not validated here; see :func:`validate_tile`.

    Returns
    -------
    GeoBoundingBox
    """
    n = 2 ** zoom
    return GeoBoundingBox(
        north=_tile_lat(y, n),
        south=_tile_lat(y + 1, n),
        east=(x + 1) / n * 360.0 - 180.0,
        west=x / n * 360.0 - 180.0,
    )


def tile_to_lat_lon(x, y, zoom):
    """Geographic position of the north-west corner of a tile.

    Same corner as ``tile_to_bbox(zoom, x, y)`` reports as
    ``(north, west)``, returned as a ``(lat, lon)`` pair in degrees.
    """
    n = 2 ** zoom
    lon = x / n * 360.0 - 180.0
    return _tile_lat(y, n), lon


def lat_lon_to_tile(lat, lon, zoom):
    """Index of the tile at *zoom* that contains the point (*lat*, *lon*).

    Used to pick a heightmap tile from a coordinate.  The result is clamped
    to the valid index range, so points beyond the Web Mercator latitude
    limit land on the first or last tile row.  Returns ``(x, y)``.
    """
    n = 2 ** zoom
    mercator_y = math.asinh(math.tan(math.radians(lat)))
    fx = (lon + 180.0) / 360.0 * n
    fy = (1.0 - mercator_y / math.pi) / 2.0 * n
    return _clamp_index(fx, n), _clamp_index(fy, n)


def _clamp_index(value, n):
    return max(0, min(n - 1, int(math.floor(value))))
