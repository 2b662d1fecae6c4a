"""Explore one SRTM tile fetched through the heightmap relay.

The relay (listening on http://localhost:4000/api/heightmap by default, or
$HEIGHTPAN_RELAY_URL) forwards the bounding box of the tile to the
OpenTopography global DEM API and returns an ASCII grid.

Requirements:
    pip install heightpan[viewer,remote]

Usage:
    python explore_tile.py --lat 46.55 --lon 7.98 --zoom 10
    python explore_tile.py --tile 10 534 362
    python explore_tile.py --mock
"""

import sys

from heightpan import (
    MockHeightmapProvider,
    NetworkError,
    ParseError,
    RelayHeightmapProvider,
    explore,
    lat_lon_to_tile,
)


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="heightpan tile explorer")
    parser.add_argument("--lat", type=float, default=46.55,
                        help="Latitude of a point inside the tile")
    parser.add_argument("--lon", type=float, default=7.98,
                        help="Longitude of a point inside the tile")
    parser.add_argument("--zoom", type=int, default=10, help="Tile zoom level")
    parser.add_argument("--tile", type=int, nargs=3, metavar=("Z", "X", "Y"),
                        help="Explicit tile index, overrides --lat/--lon/--zoom")
    parser.add_argument("--relay", default=None, help="Heightmap relay URL")
    parser.add_argument("--timeout", type=float, default=60.0,
                        help="Relay timeout in seconds")
    parser.add_argument("--mock", action="store_true",
                        help="Use a synthetic sine-wave heightmap (no network)")
    args = parser.parse_args()

    if args.tile is not None:
        z, x, y = args.tile
    else:
        z = args.zoom
        x, y = lat_lon_to_tile(args.lat, args.lon, z)

    if args.mock:
        provider = MockHeightmapProvider(width=512, height=512)
    else:
        provider = RelayHeightmapProvider(relay_url=args.relay, timeout=args.timeout)

    print(f"Tile {z}/{x}/{y}")
    print("\nControls:")
    print("  Drag: Pan the sampling window")
    print("  Arrow keys: Step the window")
    print("  +/-: Widen / narrow the window")
    print("  Click minimap: Fly to a point")
    print("  M: Toggle minimap")
    print("  H: Toggle help overlay")
    print("  X: Exit\n")

    try:
        explore(provider, tile=(z, x, y), width=1024, height=768)
    except (NetworkError, ParseError) as e:
        print(f"Could not load tile: {e}")
        sys.exit(1)
