"""
Mapbox Vector Tile decoding for FCC BDC hex tiles.

A BDC tile is a protobuf-encoded MVT whose ``fixedproviderhex`` layer holds
one polygon per H3 hexagon. Decoding never raises: a zero-byte body is the
normal "no coverage here" answer, a corrupt body decodes to nothing, and a
corrupt feature is skipped on its own.
"""
import logging
from typing import Any, Dict, List, Optional

import mapbox_vector_tile

from hotrod.core.api_errors import MalformedRecordError
from hotrod.core.models import GeometryRecord
from hotrod.geo.tiles import tile_point_to_lonlat

logger = logging.getLogger(__name__)

DEFAULT_EXTENT = 4096
HEX_LAYER = "fixedproviderhex"

_GEOMETRY_DEPTH = {
    "Point": 0,
    "MultiPoint": 1,
    "LineString": 1,
    "MultiLineString": 2,
    "Polygon": 2,
    "MultiPolygon": 3,
}


def _project(coords: Any, depth: int, extent: int, z: int, x: int, y: int) -> Any:
    if depth == 0:
        if not isinstance(coords, (list, tuple)) or len(coords) < 2:
            raise MalformedRecordError("Bad position", source="tile_decoder", record=coords)
        lon, lat = tile_point_to_lonlat(coords[0], coords[1], extent, z, x, y)
        return [lon, lat]
    if not isinstance(coords, (list, tuple)):
        raise MalformedRecordError("Bad coordinate array", source="tile_decoder", record=coords)
    return [_project(c, depth - 1, extent, z, x, y) for c in coords]


def _to_record(feature: Dict[str, Any], extent: int, z: int, x: int, y: int) -> GeometryRecord:
    geometry = feature.get("geometry") or {}
    geom_type = geometry.get("type")
    depth = _GEOMETRY_DEPTH.get(geom_type)
    if depth is None:
        raise MalformedRecordError(
            f"Unsupported geometry type {geom_type!r}", source="tile_decoder"
        )

    coordinates = _project(geometry.get("coordinates"), depth, extent, z, x, y)
    properties = dict(feature.get("properties") or {})
    # 0 is the protobuf default for a feature without an id
    if feature.get("id"):
        properties.setdefault("featureId", feature["id"])

    return GeometryRecord(
        geometry={"type": geom_type, "coordinates": coordinates},
        properties=properties,
    )


def decode_tile(
    payload: bytes,
    z: int,
    x: int,
    y: int,
    layer_name: Optional[str] = HEX_LAYER,
) -> List[GeometryRecord]:
    """
    Decode one vector tile into lon/lat geometry records.

    Args:
        payload: Raw tile body
        z, x, y: Tile address the payload was fetched for
        layer_name: Layer to read (None = every layer in the tile)

    Returns:
        Geometry records; empty for an empty or undecodable payload
    """
    if not payload:
        return []

    try:
        layers = mapbox_vector_tile.decode(
            payload, default_options={"y_coord_down": True}
        )
    except Exception as e:
        logger.debug(f"Undecodable tile {z}/{x}/{y} ({len(payload)} bytes): {e}")
        return []

    if layer_name is not None:
        selected = [layers[layer_name]] if layer_name in layers else []
    else:
        selected = list(layers.values())

    records: List[GeometryRecord] = []
    skipped = 0
    for layer in selected:
        extent = layer.get("extent") or DEFAULT_EXTENT
        for feature in layer.get("features", []):
            try:
                records.append(_to_record(feature, extent, z, x, y))
            except (MalformedRecordError, TypeError, ValueError) as e:
                skipped += 1
                logger.debug(f"Skipping malformed feature in tile {z}/{x}/{y}: {e}")

    if skipped:
        logger.debug(f"Tile {z}/{x}/{y}: decoded {len(records)} features, skipped {skipped}")
    return records
