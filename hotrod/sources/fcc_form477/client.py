"""
FCC Open Data (Socrata) client for the Form 477 deployment dataset.

Dataset 4kuc-phrr: fixed broadband deployment, June 2020, one row per
(census block, provider, technology).

Used as:
- provider search fallback when the BDC search is unreachable
- technology lookup for Form 477 provider ids
- state / county coverage when the BDC hex tiles have no data

Form 477 provider ids are a different ID scheme from BDC ids; tile requests
made with them usually come back empty.

Rate limits:
- Anonymous callers are throttled per IP
- An app token (FCC_APP_TOKEN) raises the ceiling
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from hotrod.core.api_errors import APIError, UpstreamUnavailable
from hotrod.core.config import Settings, get_settings
from hotrod.core.http_client import BaseAPIClient
from hotrod.sources.fcc_form477.schemas import (
    BlockRow,
    ProviderRow,
    StateRow,
    TechRow,
    parse_rows,
)

logger = logging.getLogger(__name__)


def soql_literal(value: Any) -> str:
    """Quote a value for a SoQL $where clause."""
    return "'" + str(value).replace("'", "''") + "'"


class Form477Client(BaseAPIClient):
    """
    HTTP client for the Form 477 Socrata dataset.

    Inherits single-attempt requests and error classification from BaseAPIClient.
    """

    SOURCE_NAME = "fcc_form477"
    BASE_URL = "https://opendata.fcc.gov/resource"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        max_concurrency: Optional[int] = None,
        transport=None,
    ):
        """
        Initialize the Form 477 client.

        Args:
            settings: Application settings (defaults to get_settings())
            max_concurrency: Maximum concurrent requests
            transport: Custom httpx transport (tests)
        """
        settings = settings or get_settings()
        self.dataset_id = settings.form477_dataset
        self.app_token = settings.get_fcc_app_token()
        self.county_row_limit = settings.county_row_limit
        self.county_max_pages = settings.county_max_pages

        super().__init__(
            max_concurrency=max_concurrency or settings.max_concurrency,
            timeout=settings.socrata_timeout,
            base_url=settings.socrata_base_url,
            transport=transport,
        )

    def _build_headers(self) -> Dict[str, str]:
        """Build request headers."""
        headers = {
            "Accept": "application/json",
            "User-Agent": "hotrod/fcc_form477-client",
        }
        if self.app_token:
            headers["X-App-Token"] = self.app_token
        return headers

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        """Socrata answers errors with an object; successful queries are arrays."""
        if isinstance(data, list):
            return None
        message = "Unexpected response shape"
        if isinstance(data, dict):
            message = str(data.get("message") or data.get("error") or message)
        return UpstreamUnavailable(
            message=f"Socrata error for {resource_id}: {message}",
            source=self.SOURCE_NAME,
            response_data=data if isinstance(data, dict) else None,
        )

    async def query(self, params: Dict[str, Any], resource_id: str) -> List[Dict[str, Any]]:
        """Run a SoQL query against the dataset and return raw rows."""
        params = {k: v for k, v in params.items() if v is not None}
        return await self.get_json(
            f"{self.dataset_id}.json", params=params, resource_id=resource_id
        )

    async def search_providers(self, query: str, limit: int = 20) -> List[ProviderRow]:
        """Full-text provider search, de-duplicated by provider_id."""
        rows = await self.query(
            {
                "$q": query,
                "$select": "provider_id,providername",
                "$limit": 500,
            },
            resource_id=f"provider_search_{query}",
        )

        seen = set()
        providers = []
        for row in parse_rows(rows, ProviderRow):
            if row.provider_id in seen:
                continue
            seen.add(row.provider_id)
            providers.append(row)
            if len(providers) >= limit:
                break
        return providers

    async def get_provider_technologies(self, provider_id: str) -> List[str]:
        """
        Distinct technology codes filed for a provider.

        Fetches rows without GROUP BY (Socrata aggregation over the full
        dataset is slow) and de-duplicates locally.
        """
        rows = await self.query(
            {
                "$select": "techcode",
                "$where": f"provider_id = {soql_literal(provider_id)}",
                "$limit": 500,
            },
            resource_id=f"technologies_{provider_id}",
        )

        codes: List[str] = []
        for row in parse_rows(rows, TechRow):
            if row.techcode not in codes:
                codes.append(row.techcode)
        return codes

    async def get_state_coverage(self, provider_id: str, tech_code: str) -> List[str]:
        """State abbreviations where the provider offers ``tech_code``."""
        rows = await self.query(
            {
                "$select": "stateabbr",
                "$where": (
                    f"provider_id = {soql_literal(provider_id)} "
                    f"AND techcode = {soql_literal(tech_code)}"
                ),
                "$group": "stateabbr",
                "$order": "stateabbr ASC",
                "$limit": 60,
            },
            resource_id=f"state_coverage_{provider_id}_{tech_code}",
        )

        states: List[str] = []
        for row in parse_rows(rows, StateRow):
            if row.stateabbr not in states:
                states.append(row.stateabbr)
        return states

    async def get_county_coverage(self, provider_id: str, tech_code: str) -> Tuple[List[str], bool]:
        """
        5-digit county FIPS codes where the provider offers ``tech_code``.

        The dataset has no county column, so block codes are paged through
        (county_row_limit rows per page, at most county_max_pages pages) and
        truncated to their county prefix.

        Returns:
            (county codes, truncated) where ``truncated`` is True when the
            page cap was reached before the rows ran out
        """
        where = (
            f"provider_id = {soql_literal(provider_id)} "
            f"AND techcode = {soql_literal(tech_code)}"
        )
        counties: List[str] = []
        seen = set()
        truncated = False

        for page in range(self.county_max_pages):
            rows = await self.query(
                {
                    "$select": "blockcode",
                    "$where": where,
                    "$order": "blockcode ASC",
                    "$limit": self.county_row_limit,
                    "$offset": page * self.county_row_limit or None,
                },
                resource_id=f"county_coverage_{provider_id}_{tech_code}_p{page}",
            )
            for row in parse_rows(rows, BlockRow):
                fips = row.county_fips
                if fips not in seen:
                    seen.add(fips)
                    counties.append(fips)

            if len(rows) < self.county_row_limit:
                break
        else:
            truncated = True
            logger.warning(
                f"[{self.SOURCE_NAME}] County scan for {provider_id}/{tech_code} stopped after "
                f"{self.county_max_pages} pages of {self.county_row_limit} rows; coverage is truncated"
            )

        return counties, truncated
