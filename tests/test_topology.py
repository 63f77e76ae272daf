"""
Unit tests for TopoJSON decoding and the boundary service.
"""
import pytest
from unittest.mock import AsyncMock

from hotrod.core.api_errors import MalformedRecordError, UpstreamUnavailable
from hotrod.geo.topology import topology_to_features
from hotrod.services.boundary_service import BoundaryService


def make_topology(object_name="states"):
    """Two unit squares sharing nothing, plus one square built from two arcs."""
    return {
        "type": "Topology",
        "transform": {"scale": [1, 1], "translate": [-100, 30]},
        "arcs": [
            [[0, 0], [1, 0], [0, 1], [-1, 0], [0, -1]],
            [[2, 0], [1, 0], [0, 1]],
            [[3, 1], [-1, 0], [0, -1]],
        ],
        "objects": {
            object_name: {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Polygon", "id": "06", "arcs": [[0]], "properties": {"name": "California"}},
                    {"type": "Polygon", "id": 36, "arcs": [[-1]]},
                    {"type": "MultiPolygon", "id": "48", "arcs": [[[1, 2]]]},
                    {"type": None, "id": "72"},
                    {"type": "Point", "id": "99", "coordinates": [0, 0]},
                ],
            }
        },
    }


@pytest.mark.unit
class TestTopologyToFeatures:

    def test_quantized_arcs_are_delta_decoded(self):
        features = topology_to_features(make_topology(), "states")
        california = features[0]

        assert california["id"] == "06"
        assert california["properties"] == {"name": "California"}
        assert california["geometry"]["coordinates"] == [[
            [-100, 30], [-99, 30], [-99, 31], [-100, 31], [-100, 30],
        ]]

    def test_negative_index_reverses_arc(self):
        features = topology_to_features(make_topology(), "states")
        ring = features[1]["geometry"]["coordinates"][0]

        assert ring == [[-100, 30], [-100, 31], [-99, 31], [-99, 30], [-100, 30]]

    def test_consecutive_arcs_share_a_point(self):
        features = topology_to_features(make_topology(), "states")
        multipolygon = features[2]["geometry"]

        assert multipolygon["type"] == "MultiPolygon"
        assert multipolygon["coordinates"][0][0] == [
            [-98, 30], [-97, 30], [-97, 31], [-98, 31], [-98, 30],
        ]

    def test_null_geometry_kept_unsupported_skipped(self):
        features = topology_to_features(make_topology(), "states")

        assert [f["id"] for f in features] == ["06", 36, "48", "72"]
        assert features[3]["geometry"] is None

    def test_unknown_object_raises(self):
        with pytest.raises(KeyError):
            topology_to_features(make_topology(), "counties")

    def test_bad_transform_is_malformed_not_missing_object(self):
        topology = make_topology()
        del topology["transform"]["scale"]

        with pytest.raises(MalformedRecordError):
            topology_to_features(topology, "states")


@pytest.mark.unit
class TestBoundaryService:

    def _service(self, cache, topology):
        client = AsyncMock()
        client.SOURCE_NAME = "us_atlas"
        client.fetch_topology.return_value = topology
        return BoundaryService(client, cache), client

    @pytest.mark.asyncio
    async def test_states_by_abbreviation(self, cache):
        service, _ = self._service(cache, make_topology())

        features = await service.features_for_states(["CA", "ny", "CA", "ZZ", "TX"])

        assert [f["properties"]["fips"] for f in features] == ["06", "36", "48"]
        assert [f["properties"]["stateabbr"] for f in features] == ["CA", "NY", "TX"]
        assert features[0]["properties"]["name"] == "California"

    @pytest.mark.asyncio
    async def test_topology_loaded_once(self, cache):
        service, client = self._service(cache, make_topology())

        await service.features_for_states(["CA"])
        await service.all_states()

        client.fetch_topology.assert_awaited_once_with("states")

    @pytest.mark.asyncio
    async def test_cached_features_not_mutated(self, cache):
        service, _ = self._service(cache, make_topology())

        await service.features_for_states(["CA"])
        collection = await service.all_states()

        assert collection["type"] == "FeatureCollection"
        assert "fips" not in collection["features"][0]["properties"]

    @pytest.mark.asyncio
    async def test_counties_by_fips(self, cache):
        topology = make_topology("counties")
        topology["objects"]["counties"]["geometries"][0]["id"] = "06001"
        service, client = self._service(cache, topology)

        features = await service.features_for_counties(["06001", "06001", "99999"])

        assert [f["properties"]["fips"] for f in features] == ["06001"]
        client.fetch_topology.assert_awaited_once_with("counties")

    @pytest.mark.asyncio
    async def test_missing_object_is_upstream_error(self, cache):
        service, _ = self._service(cache, make_topology("land"))

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await service.all_states()

        assert "no 'states' object" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_bad_transform_reported_as_undecodable(self, cache):
        topology = make_topology()
        del topology["transform"]["scale"]
        service, _ = self._service(cache, topology)

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await service.all_states()

        assert "Undecodable states topology" in str(exc_info.value)
        assert "no 'states' object" not in str(exc_info.value)
