"""
Wiring of clients, cache and services for one application instance.
"""
import logging
from typing import Optional

from hotrod.core.cache import TTLCache
from hotrod.core.config import Settings, get_settings
from hotrod.services.boundary_service import BoundaryService
from hotrod.services.coverage_aggregator import CoverageAggregator
from hotrod.services.name_resolver import NameResolver
from hotrod.services.provider_service import ProviderService
from hotrod.services.tech_prober import TechProber
from hotrod.sources.boundaries.client import BoundaryClient
from hotrod.sources.fcc_bdc.client import FCCBDCClient
from hotrod.sources.fcc_form477.client import Form477Client

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Owns the upstream clients and the single shared cache.

    Every service receives the same cache instance; nothing else creates one.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[TTLCache] = None,
        transport=None,
    ):
        self.settings = settings or get_settings()
        self.cache = cache or TTLCache()

        self.bdc_client = FCCBDCClient(settings=self.settings, transport=transport)
        self.form477_client = Form477Client(settings=self.settings, transport=transport)
        self.boundary_client = BoundaryClient(settings=self.settings, transport=transport)

        self.prober = TechProber(
            self.bdc_client,
            self.cache,
            ttl=self.settings.technology_ttl,
            timeout=self.settings.probe_timeout,
        )
        self.resolver = NameResolver(self.bdc_client, self.cache)
        self.boundaries = BoundaryService(self.boundary_client, self.cache)
        self.providers = ProviderService(
            self.bdc_client,
            self.form477_client,
            self.prober,
            self.resolver,
            self.cache,
            settings=self.settings,
        )
        self.coverage = CoverageAggregator(
            self.bdc_client,
            self.form477_client,
            self.boundaries,
            self.cache,
            settings=self.settings,
        )

    async def close(self) -> None:
        """Close every upstream HTTP client."""
        for client in (self.bdc_client, self.form477_client, self.boundary_client):
            await client.close()
        logger.info("Upstream clients closed")
