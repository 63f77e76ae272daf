"""
Provider search and technology resolution across the BDC and Form 477 schemes.
"""
import logging
from typing import List, Optional

from hotrod.core.api_errors import APIError, UpstreamUnavailable
from hotrod.core.cache import TTLCache
from hotrod.core.config import Settings, get_settings
from hotrod.core.models import ProviderIdentity, ProviderTechnologies, SourceScheme
from hotrod.services.name_resolver import NameResolver, normalize_name
from hotrod.services.tech_prober import TechProber
from hotrod.sources.fcc_bdc.client import FCCBDCClient
from hotrod.sources.fcc_bdc.metadata import sort_tech_codes
from hotrod.sources.fcc_form477.client import Form477Client

logger = logging.getLogger(__name__)


class ProviderService:
    """
    Entry point for provider lookups.

    BDC ids are preferred everywhere because only they work against the hex
    tiles; Form 477 is the fallback for both search and technologies.
    """

    def __init__(
        self,
        bdc_client: FCCBDCClient,
        form477_client: Form477Client,
        prober: TechProber,
        resolver: NameResolver,
        cache: TTLCache,
        settings: Optional[Settings] = None,
    ):
        self.bdc_client = bdc_client
        self.form477_client = form477_client
        self.prober = prober
        self.resolver = resolver
        self.cache = cache
        self.settings = settings or get_settings()

    async def search_provider_by_name(self, query: str, limit: int = 20) -> List[ProviderIdentity]:
        """
        Search providers by name.

        Args:
            query: Free-text provider name
            limit: Maximum number of providers returned

        Returns:
            BDC identities when the BDC search has hits, else Form 477 identities

        Raises:
            UpstreamUnavailable: If both searches failed
        """
        key = f"providers:search:{query.lower()}:{limit}"
        cached = await self.cache.get(key)
        if cached is not None:
            return list(cached)

        bdc_error: Optional[APIError] = None
        try:
            rows = await self.bdc_client.search_providers(query)
            providers = [
                ProviderIdentity(id=row.provider_id, name=row.provider_name)
                for row in rows[:limit]
            ]
            if providers:
                logger.info(
                    f"BDC provider search {query!r} -> {len(providers)} results "
                    f"(ids: {', '.join(p.id for p in providers[:3])})"
                )
                await self.cache.set(key, tuple(providers), ttl=self.settings.provider_search_ttl)
                return providers
            logger.warning(f"BDC provider search {query!r} returned nothing, trying Form 477")
        except APIError as e:
            bdc_error = e
            logger.warning(f"BDC provider search failed, falling back to Form 477: {e}")

        try:
            rows = await self.form477_client.search_providers(query, limit=limit)
        except APIError as e:
            if bdc_error is not None:
                raise UpstreamUnavailable(
                    message=f"Provider search failed on both sources: {bdc_error}; {e}",
                    source="provider_search",
                ) from e
            raise

        providers = [
            ProviderIdentity(
                id=row.provider_id,
                name=row.providername,
                source_scheme=SourceScheme.SECONDARY,
            )
            for row in rows
        ]
        logger.warning(
            f"Form 477 provider search {query!r} -> {len(providers)} results "
            f"(Form 477 ids, hex tiles may be empty for them)"
        )
        if providers:
            await self.cache.set(key, tuple(providers), ttl=self.settings.provider_search_ttl)
        return providers

    async def _probe(self, provider_id: str) -> List[str]:
        try:
            return await self.prober.probe(provider_id)
        except Exception as e:
            logger.warning(f"BDC probe for {provider_id} failed: {e}")
            return []

    async def _form477_technologies(self, provider_id: str) -> List[str]:
        key = f"providers:tech:{provider_id}"
        cached = await self.cache.get(key)
        if cached is not None:
            return list(cached)

        codes = await self.form477_client.get_provider_technologies(provider_id)
        codes = sort_tech_codes(c for c in codes if c)
        await self.cache.set(key, codes, ttl=self.settings.technology_ttl)
        return codes

    async def resolve_provider_technologies(
        self,
        provider_id: str,
        provider_name: Optional[str] = None,
    ) -> ProviderTechnologies:
        """
        Technologies offered by a provider.

        Order of attempts:
        1. Probe BDC tiles with ``provider_id`` (source "bdc")
        2. Resolve ``provider_name`` to a BDC id and probe that ("bdc_resolved")
        3. Form 477 technologies for ``provider_id`` ("form477", or
           "bdc_resolved" when step 2 found a different BDC identity)

        Raises:
            UpstreamUnavailable: If the Form 477 lookup in step 3 failed
        """
        provider_id = str(provider_id)
        key = f"providers:technologies:{provider_id}:{normalize_name(provider_name)}"
        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        result = await self._resolve(provider_id, provider_name)
        if result.technologies:
            await self.cache.set(key, result, ttl=self.settings.technology_ttl)
        return result

    async def _resolve(self, provider_id: str, provider_name: Optional[str]) -> ProviderTechnologies:
        techs = await self._probe(provider_id)
        if techs:
            return ProviderTechnologies(technologies=techs, source="bdc", provider_id=provider_id)

        resolved: Optional[ProviderIdentity] = None
        if provider_name:
            resolved = await self.resolver.resolve(provider_name)
            if resolved is not None and resolved.id == provider_id:
                resolved = None

        if resolved is not None:
            techs = await self._probe(resolved.id)
            if techs:
                return self._resolved_result(techs, resolved, provider_id)

        technologies = await self._form477_technologies(provider_id)
        if resolved is not None:
            return self._resolved_result(technologies, resolved, provider_id)

        return ProviderTechnologies(
            technologies=technologies, source="form477", provider_id=provider_id
        )

    @staticmethod
    def _resolved_result(
        technologies: List[str], resolved: ProviderIdentity, original_id: str
    ) -> ProviderTechnologies:
        logger.info(f"Provider {original_id} resolved to BDC {resolved.id} ({resolved.name})")
        return ProviderTechnologies(
            technologies=list(technologies),
            source="bdc_resolved",
            provider_id=resolved.id,
            provider_name=resolved.name,
            resolved_from_provider_id=original_id,
        )
