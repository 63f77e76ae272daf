"""
Unit tests for cross-tile geometry merging.
"""
import pytest

from hotrod.core.models import GeometryRecord
from hotrod.geo.geometry_merger import merge_geometry_records


def _polygon(lon, lat, **properties):
    ring = [[lon, lat], [lon + 0.1, lat], [lon + 0.1, lat + 0.1], [lon, lat]]
    return GeometryRecord(
        geometry={"type": "Polygon", "coordinates": [ring]},
        properties=properties,
    )


@pytest.mark.unit
class TestMergeGeometryRecords:

    def test_same_feature_id_in_two_tiles(self):
        """The same hexagon from adjacent tiles is kept once."""
        first = _polygon(-100.0, 40.0, featureId="850a1d3ffffffff", tile="a")
        second = _polygon(-100.00001, 40.0, featureId="850a1d3ffffffff", tile="b")

        merged = merge_geometry_records([[first], [second]])

        assert merged == [first]

    def test_h3index_preferred_over_feature_id(self):
        first = _polygon(-100.0, 40.0, h3index="85a", featureId="1")
        second = _polygon(-90.0, 30.0, h3index="85a", featureId="2")

        assert merge_geometry_records([[first, second]]) == [first]

    def test_coordinate_key_rounded_to_precision(self):
        first = _polygon(-100.00001, 40.00001)
        second = _polygon(-100.00004, 40.00004)
        third = _polygon(-100.001, 40.0)

        merged = merge_geometry_records([[first], [second, third]])

        assert merged == [first, third]

    def test_precision_is_configurable(self):
        first = _polygon(-100.00001, 40.0)
        second = _polygon(-100.00004, 40.0)

        assert len(merge_geometry_records([[first, second]], precision=5)) == 2

    def test_keyless_records_dropped(self):
        keyless = GeometryRecord(geometry={"type": "Polygon", "coordinates": []})
        keyed = _polygon(-100.0, 40.0)

        assert merge_geometry_records([[keyless, keyed]]) == [keyed]

    def test_empty_input(self):
        assert merge_geometry_records([]) == []
        assert merge_geometry_records([[], []]) == []
