"""
Unit tests for slippy-map tile math.
"""
import pytest

from hotrod.geo.tiles import (
    PROBE_TILES,
    TileCoord,
    lat_to_tile_y,
    lon_to_tile_x,
    tile_point_to_lonlat,
    us_tile_grid,
)


@pytest.mark.unit
class TestTileIndex:

    def test_lon_to_tile_x(self):
        assert lon_to_tile_x(-180.0, 0) == 0
        assert lon_to_tile_x(0.0, 1) == 1
        assert lon_to_tile_x(-60.0, 6) == 21

    def test_lat_to_tile_y(self):
        assert lat_to_tile_y(72.0, 6) == 13
        assert lat_to_tile_y(17.0, 6) == 28
        assert lat_to_tile_y(0.0001, 1) == 0

    def test_tile_origin_to_lonlat(self):
        lon, lat = tile_point_to_lonlat(0, 0, 4096, 0, 0, 0)
        assert lon == pytest.approx(-180.0)
        assert lat == pytest.approx(85.0511, abs=1e-4)

    def test_tile_center_to_lonlat(self):
        lon, lat = tile_point_to_lonlat(2048, 2048, 4096, 0, 0, 0)
        assert lon == pytest.approx(0.0)
        assert lat == pytest.approx(0.0, abs=1e-9)

    def test_point_inside_its_tile(self):
        # Tile 6/12/24 spans roughly lon [-112.5, -106.9], lat [36.6, 41.0]
        lon, lat = tile_point_to_lonlat(100, 100, 4096, 6, 12, 24)
        assert -112.5 < lon < -106.875
        assert 36.59 < lat < 40.98


@pytest.mark.unit
class TestUsTileGrid:

    def test_grid_bounds_at_zoom_6(self):
        grid = us_tile_grid(6)
        xs = {t.x for t in grid}
        ys = {t.y for t in grid}

        assert min(xs) == 0 and max(xs) == 21
        assert min(ys) == 13 and max(ys) == 28
        assert len(grid) == 22 * 16
        assert all(t.z == 6 for t in grid)

    def test_grid_contains_scenario_tile(self):
        assert TileCoord(6, 12, 24) in us_tile_grid(6)

    def test_grid_computed_once_per_zoom(self):
        assert us_tile_grid(6) is us_tile_grid(6)

    def test_probe_tiles(self):
        assert len(PROBE_TILES) == 8
        assert all(t.z == 5 for t in PROBE_TILES)
        assert TileCoord(5, 4, 11) in PROBE_TILES
        assert TileCoord(5, 9, 12) in PROBE_TILES
