"""Heightmap providers.

A provider turns a ``z/x/y`` tile index into a :class:`HeightmapGrid`.  The
provider is passed explicitly to whatever owns the navigation engine, so a
fake can be swapped in for tests or offline demos.
"""

import numpy as np

from .grid import HeightmapGrid, parse_grid
from .remote_data import DEFAULT_TIMEOUT, fetch_raster
from .tiles import tile_to_bbox, validate_tile


class HeightmapProvider:
    """Base class for anything that can load a heightmap tile."""

    def get_heightmap_tile(self, zoom, x, y):
        raise NotImplementedError


class RelayHeightmapProvider(HeightmapProvider):
    """Fetch SRTM elevation for a tile through the heightmap relay.

    Parameters
    ----------
    relay_url : str, optional
        Relay endpoint, see :func:`heightpan.remote_data.fetch_raster`.
    timeout : float
        Request timeout in seconds.
    session : requests.Session, optional
        Session reused across requests.
    quiet : bool
        Suppress progress output.
    """

    def __init__(self, relay_url=None, timeout=DEFAULT_TIMEOUT, session=None,
                 quiet=False):
        self.relay_url = relay_url
        self.timeout = timeout
        self.session = session
        self.quiet = quiet

    def get_heightmap_tile(self, zoom, x, y):
        validate_tile(zoom, x, y)
        bbox = tile_to_bbox(zoom, x, y)
        text = fetch_raster(bbox, relay_url=self.relay_url,
                            timeout=self.timeout, session=self.session,
                            quiet=self.quiet)
        grid = parse_grid(text)
        if not self.quiet:
            print(f"  Parsed {grid.width}x{grid.height} heightmap "
                  f"for tile {zoom}/{x}/{y}")
        return grid


class MockHeightmapProvider(HeightmapProvider):
    """Synthetic sine-wave heightmap, identical for every tile."""

    def __init__(self, width=64, height=64):
        self.width = width
        self.height = height

    def get_heightmap_tile(self, zoom, x, y):
        validate_tile(zoom, x, y)
        i = np.arange(self.height, dtype=np.float64)[:, None]
        j = np.arange(self.width, dtype=np.float64)[None, :]
        data = np.sin(i / 8) * np.cos(j / 8) * 100
        return HeightmapGrid(data)


def load_heightmap(provider, zoom, x, y):
    """Load tile ``zoom/x/y`` from *provider*.

    Errors from the provider (``NetworkError``, ``ParseError``,
    ``ValueError`` for bad indices) propagate unchanged.
    """
    return provider.get_heightmap_tile(zoom, x, y)
