"""Explore a local ESRI ASCII grid (.asc) file.

Any DEM exported as AAIGrid works, e.g. an OpenTopography download saved
to disk.  Prints a short summary and the georeferenced xarray view before
opening the explorer.

Requirements:
    pip install heightpan[viewer] xarray

Usage:
    python ascii_grid.py path/to/dem.asc
"""

from pathlib import Path

from heightpan import HeightmapExplorer, parse_grid


def load_ascii_grid(path):
    """Parse an ASCII grid file and report what was found."""
    text = Path(path).read_text()
    grid = parse_grid(text)
    lo, hi = grid.elevation_range()
    print(f"Loaded {path}: {grid.width}x{grid.height} cells, "
          f"elevation {lo:.0f}m - {hi:.0f}m")
    if not grid.is_complete:
        print(f"  Warning: only {grid.rows_present} of {grid.height} rows present")
    return grid


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="heightpan ASCII grid explorer")
    parser.add_argument("path", help="Path to an .asc file")
    parser.add_argument("--cmap", default="terrain", help="Matplotlib colormap")
    args = parser.parse_args()

    grid = load_ascii_grid(args.path)
    if grid.cellsize is not None:
        print(grid.to_xarray())

    explorer = HeightmapExplorer(grid, width=1024, height=768, cmap=args.cmap,
                                 title=Path(args.path).name)
    explorer.run()
