"""
Client for the us-atlas reference boundary topologies.

Files (TopoJSON, 1:10m, Census cartographic boundaries):
- states-10m.json   object "states",   ids are 2-digit state FIPS
- counties-10m.json object "counties", ids are 5-digit state+county FIPS
"""
import logging
from typing import Any, Dict, Optional

from hotrod.core.api_errors import APIError, UpstreamUnavailable
from hotrod.core.config import Settings, get_settings
from hotrod.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class BoundaryClient(BaseAPIClient):
    """Fetches boundary topologies from the us-atlas CDN."""

    SOURCE_NAME = "us_atlas"
    BASE_URL = "https://cdn.jsdelivr.net/npm/us-atlas@3"

    def __init__(self, settings: Optional[Settings] = None, transport=None):
        settings = settings or get_settings()
        self.urls = {
            "states": settings.states_topology_url,
            "counties": settings.counties_topology_url,
        }
        super().__init__(
            max_concurrency=2,
            timeout=settings.boundary_timeout,
            transport=transport,
        )

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        if isinstance(data, dict) and data.get("type") == "Topology" and "objects" in data:
            return None
        return UpstreamUnavailable(
            message=f"{resource_id} is not a TopoJSON topology",
            source=self.SOURCE_NAME,
        )

    async def fetch_topology(self, level: str) -> Dict[str, Any]:
        """
        Fetch the topology for ``level`` ("states" or "counties").

        Raises:
            KeyError: For an unknown level
            UpstreamUnavailable: If the file cannot be fetched or parsed
        """
        url = self.urls[level]
        return await self.get_json(url, resource_id=f"{level}_topology")
