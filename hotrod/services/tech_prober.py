"""
Technology detection for BDC provider ids by sampling hex tiles.

The BDC API has no "technologies for provider" endpoint, so each candidate
technology is probed against 8 coarse (zoom 5) tiles spread over the major
US regions. A non-empty tile anywhere counts as evidence: one region is
enough to keep a technology, so footprint outside the sampled regions
can be over-reported but real coverage is not missed.
"""
import asyncio
import logging
from typing import List, Optional, Sequence

from hotrod.core.cache import TTLCache
from hotrod.core.models import FetchOutcome
from hotrod.geo.tiles import PROBE_TILES, TileCoord
from hotrod.sources.fcc_bdc.client import FCCBDCClient
from hotrod.sources.fcc_bdc.metadata import PROBE_TECHS, sort_tech_codes

logger = logging.getLogger(__name__)


class TechProber:
    """
    Determines which technology codes a BDC provider id has coverage for.

    Non-empty answers are cached per provider id; empty answers are not, so
    a provider whose probes failed transiently is probed again next time.
    """

    def __init__(
        self,
        client: FCCBDCClient,
        cache: TTLCache,
        ttl: float = 3600,
        timeout: float = 6.0,
        probe_tiles: Sequence[TileCoord] = PROBE_TILES,
        probe_techs: Sequence[str] = PROBE_TECHS,
    ):
        self.client = client
        self.cache = cache
        self.ttl = ttl
        self.timeout = timeout
        self.probe_tiles = tuple(probe_tiles)
        self.probe_techs = tuple(probe_techs)

    @staticmethod
    def cache_key(provider_id: str) -> str:
        return f"probe:{provider_id}"

    async def _probe_tech(self, provider_id: str, tech: str) -> Optional[str]:
        outcomes = await asyncio.gather(
            *[
                self.client.fetch_tile(provider_id, tech, t.z, t.x, t.y, timeout=self.timeout)
                for t in self.probe_tiles
            ],
            return_exceptions=True,
        )

        for tile, outcome in zip(self.probe_tiles, outcomes):
            if isinstance(outcome, BaseException):
                logger.debug(
                    f"Probe {provider_id}/{tech} tile {tile.z}/{tile.x}/{tile.y} raised: {outcome}"
                )
                continue
            if isinstance(outcome, FetchOutcome) and outcome.has_data:
                return tech
        return None

    async def probe(self, provider_id: str) -> List[str]:
        """
        Probe every candidate technology for ``provider_id``.

        Returns:
            Technology codes with evidence, ascending; empty if none
        """
        provider_id = str(provider_id)
        key = self.cache_key(provider_id)
        cached = await self.cache.get(key)
        if cached is not None:
            return list(cached)

        results = await asyncio.gather(
            *[self._probe_tech(provider_id, tech) for tech in self.probe_techs]
        )
        techs = sort_tech_codes(t for t in results if t)

        if techs:
            await self.cache.set(key, techs, ttl=self.ttl)
            logger.info(f"Probe {provider_id}: technologies {techs}")
        else:
            logger.info(
                f"Probe {provider_id}: no coverage across {len(self.probe_tiles)} sample tiles "
                f"x {len(self.probe_techs)} technologies"
            )
        return list(techs)
