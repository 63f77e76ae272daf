"""
Slippy-map (Web Mercator XYZ) tile math.

Handles:
- lon/lat -> tile index at a zoom
- tile-local integer coordinates -> lon/lat
- the fixed tile grid covering the US (CONUS, Alaska, Hawaii, territories)
"""
import math
from functools import lru_cache
from typing import List, NamedTuple, Tuple


class TileCoord(NamedTuple):
    z: int
    x: int
    y: int


# Wide US bounds: west of the Aleutians to the Atlantic, Hawaii to the top of Alaska
US_BOUNDS = {
    "min_lon": -180.0,
    "max_lon": -60.0,
    "min_lat": 17.0,
    "max_lat": 72.0,
}

# 8 zoom-5 tiles covering all major US regions:
# Pacific NW, California, Southwest, Plains, Midwest, Great Lakes, Northeast, Southeast
PROBE_TILES: Tuple[TileCoord, ...] = (
    TileCoord(5, 4, 11),
    TileCoord(5, 5, 12),
    TileCoord(5, 6, 12),
    TileCoord(5, 7, 11),
    TileCoord(5, 7, 12),
    TileCoord(5, 8, 11),
    TileCoord(5, 9, 11),
    TileCoord(5, 9, 12),
)


def lon_to_tile_x(lon: float, z: int) -> int:
    n = 2 ** z
    return math.floor((lon + 180.0) / 360.0 * n)


def lat_to_tile_y(lat: float, z: int) -> int:
    n = 2 ** z
    r = math.radians(lat)
    return math.floor((1 - math.log(math.tan(r) + 1 / math.cos(r)) / math.pi) / 2 * n)


def tile_point_to_lonlat(
    px: float, py: float, extent: int, z: int, x: int, y: int
) -> Tuple[float, float]:
    """
    Convert a tile-local point (origin top-left, 0..extent) to lon/lat.

    Same transform the Mapbox vector-tile reference decoder applies in
    toGeoJSON(x, y, z).
    """
    size = extent * (2 ** z)
    x0 = extent * x
    y0 = extent * y
    lon = (px + x0) * 360.0 / size - 180.0
    y2 = 180.0 - (py + y0) * 360.0 / size
    lat = 360.0 / math.pi * math.atan(math.exp(y2 * math.pi / 180.0)) - 90.0
    return lon, lat


@lru_cache(maxsize=16)
def us_tile_grid(z: int) -> Tuple[TileCoord, ...]:
    """
    All tiles covering US_BOUNDS at zoom ``z``.

    Computed once per zoom from the tile-index formulas.
    """
    n = 2 ** z
    min_x = max(0, lon_to_tile_x(US_BOUNDS["min_lon"], z))
    max_x = min(n - 1, lon_to_tile_x(US_BOUNDS["max_lon"], z))
    min_y = max(0, lat_to_tile_y(US_BOUNDS["max_lat"], z))
    max_y = min(n - 1, lat_to_tile_y(US_BOUNDS["min_lat"], z))

    tiles: List[TileCoord] = []
    for x in range(min_x, max_x + 1):
        for y in range(min_y, max_y + 1):
            tiles.append(TileCoord(z, x, y))
    return tuple(tiles)
