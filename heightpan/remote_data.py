"""Download elevation rasters from a heightmap relay.

The relay (for example a small proxy in front of the OpenTopography global
DEM API) owns the provider credential; this module only sends the bounding
box and receives ASCII-grid text back::

    GET /api/heightmap?south=<deg>&north=<deg>&west=<deg>&east=<deg>

``requests`` is an optional dependency imported lazily; a clear
``ImportError`` is raised at call time if it is missing.
"""

import os


DEFAULT_RELAY_URL = "http://localhost:4000/api/heightmap"
RELAY_URL_ENV = "HEIGHTPAN_RELAY_URL"

# Seconds to wait for the relay, including its upstream DEM round trip.
DEFAULT_TIMEOUT = 60


class NetworkError(RuntimeError):
    """Raised when the relay cannot be reached or answers with an error.

    Attributes
    ----------
    status : int or None
        HTTP status code of the failed response, ``None`` for transport
        failures (connection refused, timeout, ...).
    """

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


def resolve_relay_url(relay_url=None):
    """Return *relay_url*, else ``$HEIGHTPAN_RELAY_URL``, else the default."""
    if relay_url:
        return relay_url
    return os.environ.get(RELAY_URL_ENV) or DEFAULT_RELAY_URL


def _import_requests():
    try:
        import requests
    except ImportError:
        raise ImportError(
            "requests is required for fetch_raster(). "
            "Install it with: pip install requests"
        )
    return requests


def fetch_raster(bbox, relay_url=None, timeout=DEFAULT_TIMEOUT, session=None,
                 quiet=False):
    """Fetch the raw elevation raster covering *bbox* from the relay.

    Parameters
    ----------
    bbox : GeoBoundingBox
        Area to request (see :func:`heightpan.tiles.tile_to_bbox`).
    relay_url : str, optional
        Relay endpoint.  Defaults to ``$HEIGHTPAN_RELAY_URL`` or
        ``http://localhost:4000/api/heightmap``.
    timeout : float
        Seconds before the request is abandoned.  Must not be ``None``.
    session : requests.Session, optional
        Session to issue the request with (connection reuse, tests).
    quiet : bool
        Suppress progress output.

    Returns
    -------
    str
        Unparsed response body (ASCII-grid text).

    Raises
    ------
    NetworkError
        Transport failure, timeout, or a non-2xx response.
    """
    if timeout is None or timeout <= 0:
        raise ValueError(f"timeout must be a positive number of seconds, got {timeout!r}")

    requests = _import_requests()
    url = resolve_relay_url(relay_url)
    params = {
        "south": bbox.south,
        "north": bbox.north,
        "west": bbox.west,
        "east": bbox.east,
    }
    getter = session.get if session is not None else requests.get

    if not quiet:
        print(f"Requesting heightmap for S{bbox.south:.4f} N{bbox.north:.4f} "
              f"W{bbox.west:.4f} E{bbox.east:.4f}...")

    try:
        resp = getter(url, params=params, timeout=timeout)
    except requests.Timeout as e:
        raise NetworkError(f"Heightmap relay timed out after {timeout}s: {e}") from e
    except requests.RequestException as e:
        raise NetworkError(f"Heightmap relay request failed: {e}") from e

    if not 200 <= resp.status_code < 300:
        detail = (resp.text or "").strip()[:200]
        message = f"Heightmap relay error: {resp.status_code}"
        if detail:
            message = f"{message} ({detail})"
        raise NetworkError(message, status=resp.status_code)

    text = resp.text
    if not quiet:
        print(f"  Received {len(text)} chars")
    return text
