"""
Geometry helpers for the coverage pipeline.

- tiles: slippy-map tile math and the fixed US tile grid
- tile_decoder: BDC vector tile -> lon/lat geometry records
- geometry_merger: cross-tile de-duplication
- topology: TopoJSON -> GeoJSON for the boundary files
"""

from hotrod.geo.geometry_merger import merge_geometry_records
from hotrod.geo.tile_decoder import decode_tile
from hotrod.geo.tiles import PROBE_TILES, TileCoord, us_tile_grid

__all__ = [
    "decode_tile",
    "merge_geometry_records",
    "PROBE_TILES",
    "TileCoord",
    "us_tile_grid",
]
