"""
Coverage API endpoint.
"""
import logging

from fastapi import APIRouter, Depends, Query

from hotrod.api.v1.deps import get_services, raise_upstream_error
from hotrod.core.api_errors import APIError
from hotrod.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Coverage"])


@router.get("/coverage")
async def get_coverage(
    provider_id: str = Query(..., min_length=1),
    tech_code: str = Query(..., min_length=1),
    services: ServiceContainer = Depends(get_services),
):
    """
    Merged coverage for a provider and technology as a GeoJSON FeatureCollection.

    ``source`` is ``hex`` for BDC hexagons, ``state`` / ``county`` for the
    Form 477 fallback. ``meta.unitCount`` is 0 when neither tier has data.
    """
    try:
        result = await services.coverage.get_coverage(provider_id, tech_code)
    except APIError as e:
        logger.error(f"Coverage for {provider_id}/{tech_code} failed: {e}")
        raise_upstream_error(e)

    return result.to_geojson()
