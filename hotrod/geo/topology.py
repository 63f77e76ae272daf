"""
TopoJSON -> GeoJSON conversion for the us-atlas boundary files.

A topology stores shared borders once as quantized, delta-encoded arcs;
polygons reference arcs by index, with ``~i`` (i.e. ``-i - 1``) meaning
arc ``i`` walked backwards. Only the geometry types the boundary files use
are supported; anything else is reported as a malformed record.
"""
import logging
from typing import Any, Dict, List, Optional

from hotrod.core.api_errors import MalformedRecordError

logger = logging.getLogger(__name__)


def _decode_arcs(topology: Dict[str, Any]) -> List[List[List[float]]]:
    transform = topology.get("transform")
    arcs = topology.get("arcs") or []
    if not transform:
        return [[list(map(float, p[:2])) for p in arc] for arc in arcs]

    try:
        kx, ky = transform["scale"]
        dx, dy = transform["translate"]
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedRecordError(
            f"Bad topology transform: {e!r}", source="topology", record=transform
        ) from e
    decoded = []
    for arc in arcs:
        x = y = 0
        points = []
        for position in arc:
            x += position[0]
            y += position[1]
            points.append([x * kx + dx, y * ky + dy])
        decoded.append(points)
    return decoded


def _stitch(indexes: List[int], arcs: List[List[List[float]]]) -> List[List[float]]:
    """Join arcs into one ring, dropping the shared point between consecutive arcs."""
    ring: List[List[float]] = []
    for index in indexes:
        if not isinstance(index, int):
            raise MalformedRecordError("Arc index is not an integer", source="topology", record=index)
        reverse = index < 0
        arc_index = ~index if reverse else index
        if arc_index >= len(arcs):
            raise MalformedRecordError(f"Arc {arc_index} out of range", source="topology")
        points = arcs[arc_index][::-1] if reverse else arcs[arc_index]
        if ring:
            ring.pop()
        ring.extend(list(p) for p in points)
    return ring


def _geometry(obj: Dict[str, Any], arcs: List[List[List[float]]]) -> Optional[Dict[str, Any]]:
    geom_type = obj.get("type")
    if geom_type is None:
        return None
    if geom_type == "Polygon":
        return {
            "type": "Polygon",
            "coordinates": [_stitch(ring, arcs) for ring in obj["arcs"]],
        }
    if geom_type == "MultiPolygon":
        return {
            "type": "MultiPolygon",
            "coordinates": [
                [_stitch(ring, arcs) for ring in polygon] for polygon in obj["arcs"]
            ],
        }
    raise MalformedRecordError(f"Unsupported topology geometry {geom_type!r}", source="topology")


def _feature(obj: Dict[str, Any], arcs: List[List[List[float]]]) -> Dict[str, Any]:
    feature: Dict[str, Any] = {
        "type": "Feature",
        "properties": dict(obj.get("properties") or {}),
        "geometry": _geometry(obj, arcs),
    }
    if obj.get("id") is not None:
        feature["id"] = obj["id"]
    return feature


def topology_to_features(topology: Dict[str, Any], object_name: str) -> List[Dict[str, Any]]:
    """
    Convert one named object of a topology to a list of GeoJSON features.

    Geometries that cannot be decoded are skipped and logged.

    Raises:
        KeyError: If the topology has no object called ``object_name``
        MalformedRecordError: If the quantization transform is unusable
    """
    obj = topology["objects"][object_name]
    arcs = _decode_arcs(topology)

    members = obj.get("geometries") if obj.get("type") == "GeometryCollection" else [obj]
    features = []
    for member in members or []:
        try:
            features.append(_feature(member, arcs))
        except (MalformedRecordError, KeyError, TypeError) as e:
            logger.debug(f"Skipping boundary geometry {member.get('id')!r}: {e}")
    return features
