"""
BDC hex tile endpoints.

The raw endpoint proxies the protobuf tile so map clients do not need the
browser headers the FCC host requires. The ``/features`` variant decodes
the tile server-side.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Response

from hotrod.api.v1.deps import UPSTREAM_ERROR, get_services
from hotrod.core.models import FetchStatus
from hotrod.geo.tile_decoder import decode_tile
from hotrod.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tiles/fcc", tags=["Tiles"])

TILE_CACHE_CONTROL = "public, max-age=86400"
PBF_MEDIA_TYPE = "application/x-protobuf"


async def _fetch(services: ServiceContainer, provider_id: str, tech_code: str, z: int, x: int, y: int):
    outcome = await services.bdc_client.fetch_tile(provider_id, tech_code, z, x, y)
    if outcome.status == FetchStatus.FAILED:
        logger.warning(f"Tile {provider_id}/{tech_code}/{z}/{x}/{y} failed: {outcome.cause}")
        raise HTTPException(
            status_code=502,
            detail={"error": UPSTREAM_ERROR, "detail": outcome.cause},
        )
    return outcome


@router.get("/{provider_id}/{tech_code}/{z}/{x}/{y}")
async def get_tile(
    provider_id: str,
    tech_code: str,
    z: int = Path(..., ge=0, le=22),
    x: int = Path(..., ge=0),
    y: int = Path(..., ge=0),
    services: ServiceContainer = Depends(get_services),
):
    """Raw provider hex tile (Mapbox Vector Tile); 204 when the tile is empty."""
    outcome = await _fetch(services, provider_id, tech_code, z, x, y)
    headers = {"Cache-Control": TILE_CACHE_CONTROL}
    if not outcome.has_data:
        return Response(status_code=204, headers=headers)
    return Response(content=outcome.data, media_type=PBF_MEDIA_TYPE, headers=headers)


@router.get("/{provider_id}/{tech_code}/{z}/{x}/{y}/features")
async def get_tile_features(
    provider_id: str,
    tech_code: str,
    z: int = Path(..., ge=0, le=22),
    x: int = Path(..., ge=0),
    y: int = Path(..., ge=0),
    services: ServiceContainer = Depends(get_services),
):
    """Hexagons of one tile as a GeoJSON FeatureCollection in lon/lat."""
    outcome = await _fetch(services, provider_id, tech_code, z, x, y)
    records = decode_tile(
        outcome.data if outcome.has_data else b"", z, x, y,
        layer_name=services.settings.hex_tile_layer,
    )
    return {
        "type": "FeatureCollection",
        "features": [record.to_feature() for record in records],
    }
