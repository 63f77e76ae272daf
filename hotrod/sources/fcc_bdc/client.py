"""
FCC Broadband Data Collection (BDC) map API client.

Endpoints used (same host that serves broadbandmap.fcc.gov):
- /provider/list/{processId}/{query}/{page}  provider search (JSON envelope)
- /fixed/provider/hex/tile/{processId}/{providerId}/{tech}/r/0/0/{z}/{x}/{y}
  provider hex coverage as Mapbox Vector Tiles (PBF)

The server fingerprints callers: requests without browser-like headers get
empty or rejected responses, which would make every probe look like "no
coverage". The headers below must be sent on every call.

A zero-byte tile body is the normal "no coverage in this tile" answer.
"""

import logging
from typing import Any, List, Optional
from urllib.parse import quote

from pydantic import ValidationError

from hotrod.core.api_errors import APIError, UpstreamUnavailable
from hotrod.core.config import Settings, get_settings
from hotrod.core.http_client import BaseAPIClient
from hotrod.core.models import FetchOutcome
from hotrod.sources.fcc_bdc.schemas import BDCEnvelope, BDCProviderRow, parse_provider_rows

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)

BROWSER_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://broadbandmap.fcc.gov/",
    "Origin": "https://broadbandmap.fcc.gov",
    "sec-fetch-site": "same-origin",
    "sec-fetch-mode": "cors",
    "sec-fetch-dest": "empty",
}

TILE_ACCEPT = "application/x-protobuf,*/*"


class FCCBDCClient(BaseAPIClient):
    """
    HTTP client for the FCC BDC map API (provider search + hex tiles).

    Inherits single-attempt requests and error classification from BaseAPIClient.
    """

    SOURCE_NAME = "fcc_bdc"
    BASE_URL = "https://broadbandmap.fcc.gov/nbm/map/api"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        max_concurrency: Optional[int] = None,
        transport=None,
    ):
        """
        Initialize the BDC client.

        Args:
            settings: Application settings (defaults to get_settings())
            max_concurrency: Maximum concurrent requests
            transport: Custom httpx transport (tests)
        """
        settings = settings or get_settings()
        self.process_uuid = settings.bdc_process_uuid
        self.search_timeout = settings.bdc_timeout
        self.tile_timeout = settings.tile_timeout

        super().__init__(
            max_concurrency=max_concurrency or settings.max_concurrency,
            timeout=settings.tile_timeout,
            base_url=settings.bdc_base_url,
            transport=transport,
        )

    def _build_headers(self):
        """Build request headers."""
        return {**BROWSER_HEADERS, "Accept": "application/json"}

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        """BDC wraps every payload in {status, message, data}."""
        try:
            envelope = BDCEnvelope.model_validate(data)
        except ValidationError as e:
            return UpstreamUnavailable(
                message=f"Unexpected response shape for {resource_id}: {e.error_count()} errors",
                source=self.SOURCE_NAME,
            )
        if not envelope.successful:
            return UpstreamUnavailable(
                message=f"BDC error: {envelope.message or envelope.status}",
                source=self.SOURCE_NAME,
                response_data=data,
            )
        return None

    def tile_path(self, provider_id: str, tech_code: str, z: int, x: int, y: int) -> str:
        return (
            f"fixed/provider/hex/tile/{self.process_uuid}/"
            f"{quote(str(provider_id), safe='')}/{quote(str(tech_code), safe='')}"
            f"/r/0/0/{z}/{x}/{y}"
        )

    async def search_providers(self, query: str, page: int = 1) -> List[BDCProviderRow]:
        """
        Search BDC providers by name.

        Returns:
            Validated provider rows (ids are BDC ids, usable with the tile endpoint)

        Raises:
            UpstreamUnavailable: On transport errors or a non-successful envelope
        """
        path = f"provider/list/{self.process_uuid}/{quote(query, safe='')}/{page}"
        data = await self.get_json(
            path,
            resource_id=f"provider_search_{query}",
            timeout=self.search_timeout,
        )
        envelope = BDCEnvelope.model_validate(data)
        return parse_provider_rows(envelope.data or [])

    async def fetch_tile(
        self,
        provider_id: str,
        tech_code: str,
        z: int,
        x: int,
        y: int,
        timeout: Optional[float] = None,
    ) -> FetchOutcome:
        """
        Fetch one hex coverage tile.

        Never raises for upstream problems: returns SUCCESS(bytes) for a
        non-empty body, EMPTY for a zero-byte body and FAILED(cause) for
        timeouts, transport errors and non-2xx statuses.
        """
        resource_id = f"tile_{provider_id}_{tech_code}_{z}/{x}/{y}"
        try:
            body = await self.get_bytes(
                self.tile_path(provider_id, tech_code, z, x, y),
                resource_id=resource_id,
                timeout=timeout or self.tile_timeout,
                extra_headers={"Accept": TILE_ACCEPT},
            )
        except APIError as e:
            logger.debug(f"[{self.SOURCE_NAME}] {resource_id} failed: {e}")
            return FetchOutcome.failed(str(e))

        if not body:
            return FetchOutcome.empty()
        return FetchOutcome.success(body)
