"""
Reference geography endpoints.
"""
import logging

from fastapi import APIRouter, Depends

from hotrod.api.v1.deps import get_services, raise_upstream_error
from hotrod.core.api_errors import APIError
from hotrod.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/geo", tags=["Geography"])


@router.get("/states")
async def get_states(services: ServiceContainer = Depends(get_services)):
    """All US state and territory boundaries as GeoJSON."""
    try:
        return await services.boundaries.all_states()
    except APIError as e:
        logger.error(f"Loading state boundaries failed: {e}")
        raise_upstream_error(e)
