"""Heightmap grids and the ASCII-grid (AAIGrid) text parser.

An ASCII grid is a six line header followed by whitespace separated rows::

    ncols        4
    nrows        2
    xllcorner    -122.0
    yllcorner    42.0
    cellsize     0.000277
    NODATA_value -9999
    1 2 3 4
    5 6 7 8
"""

import math
import warnings

import numpy as np


HEADER_KEYS = ('ncols', 'nrows', 'xllcorner', 'yllcorner', 'cellsize', 'NODATA_value')


class ParseError(ValueError):
    """Raised when the header of an ASCII grid cannot be read."""


class HeightmapGrid:
    """Dense, immutable grid of elevation samples.

    ``width`` and ``height`` are the dimensions declared by the source.
    ``data`` is a read-only ``(rows_present, width)`` float array in row-major
    order; ``rows_present`` can be smaller than ``height`` when the parser
    dropped malformed rows (see :func:`parse_grid`).

    Parameters
    ----------
    data : array-like
        2D array of elevations, one row per grid row.
    width, height : int, optional
        Declared dimensions.  Default to the shape of *data*.
    xllcorner, yllcorner, cellsize, nodata : float, optional
        Georeferencing metadata carried over from the ASCII-grid header.
    """

    def __init__(self, data, width=None, height=None, xllcorner=None,
                 yllcorner=None, cellsize=None, nodata=None):
        arr = np.array(data, dtype=np.float64)
        if arr.ndim == 1 and arr.size == 0:
            arr = arr.reshape(0, int(width or 0))
        if arr.ndim != 2:
            raise ValueError(f"heightmap data must be 2D, got {arr.ndim}D")

        rows, cols = arr.shape
        width = cols if width is None else int(width)
        height = rows if height is None else int(height)
        if width <= 0 or height <= 0:
            raise ValueError(
                f"heightmap dimensions must be positive, got {width}x{height}"
            )
        if cols != width:
            raise ValueError(f"row length {cols} does not match width {width}")
        if rows > height:
            raise ValueError(f"{rows} rows exceed declared height {height}")

        arr.setflags(write=False)
        self._data = arr
        self._width = width
        self._height = height
        self.xllcorner = xllcorner
        self.yllcorner = yllcorner
        self.cellsize = cellsize
        self.nodata = nodata

    @classmethod
    def from_rows(cls, rows, **kwargs):
        """Build a grid from a sequence of equally long rows."""
        return cls(np.asarray(rows, dtype=np.float64), **kwargs)

    @classmethod
    def from_array(cls, array, **kwargs):
        """Build a grid from a 2D numpy (or cupy / xarray) array."""
        if hasattr(array, 'values'):
            array = array.values
        if hasattr(array, 'get'):
            array = array.get()
        return cls(np.asarray(array), **kwargs)

    @property
    def data(self):
        return self._data

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    @property
    def shape(self):
        """Declared (height, width)."""
        return (self._height, self._width)

    @property
    def rows_present(self):
        return self._data.shape[0]

    @property
    def is_complete(self):
        """True when every declared row is present."""
        return self.rows_present == self._height

    def elevation_range(self):
        """Return (min, max) elevation ignoring NaN and nodata cells."""
        values = self._masked()
        if values.size == 0 or np.all(np.isnan(values)):
            return (math.nan, math.nan)
        return (float(np.nanmin(values)), float(np.nanmax(values)))

    def _masked(self):
        if self.nodata is None:
            return self._data
        return np.where(self._data == self.nodata, np.nan, self._data)

    def to_xarray(self, name='elevation'):
        """Return the grid as an ``xarray.DataArray``.

        Coordinates are cell centres derived from the header (north-up, row 0
        is the northernmost row).  Without a ``cellsize`` the coordinates are
        pixel indices.  Nodata cells become NaN.
        """
        try:
            import xarray as xr
        except ImportError:
            raise ImportError(
                "xarray is required for HeightmapGrid.to_xarray(). "
                "Install it with: pip install xarray"
            )

        rows = self.rows_present
        if self.cellsize is not None and self.xllcorner is not None \
                and self.yllcorner is not None:
            xs = self.xllcorner + (np.arange(self._width) + 0.5) * self.cellsize
            ys = self.yllcorner + (self._height - np.arange(rows) - 0.5) * self.cellsize
        else:
            xs = np.arange(self._width, dtype=np.float64)
            ys = np.arange(rows, dtype=np.float64)

        attrs = {'declared_height': self._height}
        if self.cellsize is not None:
            attrs['res'] = (self.cellsize, self.cellsize)
        if self.nodata is not None:
            attrs['nodata'] = self.nodata

        return xr.DataArray(
            self._masked().copy(),
            dims=('y', 'x'),
            coords={'y': ys, 'x': xs},
            name=name,
            attrs=attrs,
        )

    def __repr__(self):
        extra = ''
        if not self.is_complete:
            extra = f", rows_present={self.rows_present}"
        return f"HeightmapGrid(width={self._width}, height={self._height}{extra})"


def _to_float(token):
    try:
        return float(token)
    except ValueError:
        return math.nan


def _header_value(line):
    parts = line.split()
    if len(parts) < 2:
        return None
    value = _to_float(parts[1])
    if math.isnan(value):
        return None
    return value


def _header_dimension(line, key):
    value = _header_value(line)
    if value is None or not math.isfinite(value) or value != int(value) or value <= 0:
        raise ParseError(
            f"could not read a positive integer {key} from header line {line!r}"
        )
    return int(value)


def parse_grid(text):
    """Parse ASCII-grid text into a :class:`HeightmapGrid`.

    Blank lines are skipped.  ``ncols`` and ``nrows`` are read from the first
    two header lines; the remaining four header values are optional metadata.
    Every line after the header is split on whitespace and kept only if it
    holds exactly ``ncols`` values.  Other lines are dropped without error, so
    the returned grid can hold fewer rows than the ``nrows`` it declares.

    Raises
    ------
    ParseError
        Fewer than six header lines, or a missing/non-numeric ``ncols`` or
        ``nrows``.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < len(HEADER_KEYS):
        raise ParseError(
            f"ASCII grid needs a {len(HEADER_KEYS)} line header, got {len(lines)} line(s)"
        )

    ncols = _header_dimension(lines[0], 'ncols')
    nrows = _header_dimension(lines[1], 'nrows')
    xllcorner = _header_value(lines[2])
    yllcorner = _header_value(lines[3])
    cellsize = _header_value(lines[4])
    nodata = _header_value(lines[5])

    rows = []
    for line in lines[len(HEADER_KEYS):]:
        tokens = line.split()
        if len(tokens) == ncols:
            rows.append([_to_float(tok) for tok in tokens])

    if len(rows) != nrows:
        warnings.warn(
            f"ASCII grid declares {nrows} rows but {len(rows)} well-formed "
            f"row(s) of {ncols} values were found",
            stacklevel=2,
        )
    if len(rows) > nrows:
        rows = rows[:nrows]

    data = np.array(rows, dtype=np.float64).reshape(len(rows), ncols)
    return HeightmapGrid(
        data, width=ncols, height=nrows,
        xllcorner=xllcorner, yllcorner=yllcorner,
        cellsize=cellsize, nodata=nodata,
    )
