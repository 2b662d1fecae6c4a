from .tiles import (
    GeoBoundingBox,
    tile_to_bbox,
    tile_to_lat_lon,
    lat_lon_to_tile,
    validate_tile,
)
from .grid import HeightmapGrid, ParseError, parse_grid
from .remote_data import NetworkError, fetch_raster
from .providers import (
    HeightmapProvider,
    RelayHeightmapProvider,
    MockHeightmapProvider,
    load_heightmap,
)
from .viewport import (
    Point,
    RegionData,
    RegionCache,
    ViewportState,
    clamp_center,
    clamp_zoom,
    extract_region,
)
from .easing import Tween, lerp
from .broadcast import ViewportBroadcast, ViewportSnapshot
from .navigation import NavigationController
from .input import InputDispatcher
from .engine import HeightmapExplorer, explore

__version__ = "0.1.0"
