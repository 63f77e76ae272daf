"""
Provider API endpoints.

- Provider search by name (BDC first, Form 477 fallback)
- Technologies offered by a provider
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hotrod.api.v1.deps import get_services, raise_upstream_error
from hotrod.core.api_errors import APIError
from hotrod.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/providers", tags=["Providers"])

MAX_SEARCH_LIMIT = 50


@router.get("/search")
async def search_providers(
    q: str = Query("", description="Provider name, at least 2 characters"),
    limit: int = Query(20, ge=1, description="Maximum results (capped at 50)"),
    services: ServiceContainer = Depends(get_services),
):
    """
    Search broadband providers by name.

    Ids are BDC ids when the BDC search answered, else Form 477 ids
    (``source_scheme`` tells which).

    **Example:** `GET /api/v1/providers/search?q=comcast&limit=20`
    """
    query = q.strip()
    if len(query) < 2:
        return {"providers": []}

    try:
        providers = await services.providers.search_provider_by_name(
            query, limit=min(limit, MAX_SEARCH_LIMIT)
        )
    except APIError as e:
        logger.error(f"Provider search {query!r} failed: {e}")
        raise_upstream_error(e)

    return {"providers": [p.to_dict() for p in providers]}


@router.get("/{provider_id}/technologies")
async def provider_technologies(
    provider_id: str,
    provider_name: Optional[str] = Query(None, description="Filed provider name, used to resolve a BDC id"),
    services: ServiceContainer = Depends(get_services),
):
    """
    Technology codes offered by a provider.

    Tries BDC tile probing with the given id, then with the BDC id resolved
    from ``provider_name``, then the Form 477 filing.
    """
    try:
        result = await services.providers.resolve_provider_technologies(
            provider_id, provider_name=provider_name
        )
    except APIError as e:
        logger.error(f"Technology lookup for {provider_id} failed: {e}")
        raise_upstream_error(e)

    return result.to_dict()
