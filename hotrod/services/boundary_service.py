"""
Reference boundary lookup (state / county polygons by FIPS code).

Each topology is fetched and decoded once, then kept in the shared cache
without a TTL for the life of the process.
"""
import asyncio
import logging
from typing import Any, Dict, Iterable, List

from hotrod.core.api_errors import MalformedRecordError, UpstreamUnavailable
from hotrod.core.cache import TTLCache
from hotrod.geo.topology import topology_to_features
from hotrod.sources.boundaries.client import BoundaryClient
from hotrod.sources.fcc_bdc.metadata import state_fips

logger = logging.getLogger(__name__)

# Width of the FIPS id for each boundary level
FIPS_WIDTH = {"states": 2, "counties": 5}


class BoundaryService:
    """Indexes us-atlas boundaries by zero-padded FIPS code."""

    def __init__(self, client: BoundaryClient, cache: TTLCache):
        self.client = client
        self.cache = cache
        self._locks = {level: asyncio.Lock() for level in FIPS_WIDTH}

    @staticmethod
    def cache_key(level: str) -> str:
        return f"boundaries:{level}"

    async def _load(self, level: str) -> Dict[str, Any]:
        key = self.cache_key(level)
        loaded = await self.cache.get(key)
        if loaded is not None:
            return loaded

        async with self._locks[level]:
            loaded = await self.cache.get(key)
            if loaded is not None:
                return loaded

            topology = await self.client.fetch_topology(level)
            if level not in (topology.get("objects") or {}):
                raise UpstreamUnavailable(
                    message=f"Topology has no {level!r} object",
                    source=self.client.SOURCE_NAME,
                )
            try:
                features = topology_to_features(topology, level)
            except MalformedRecordError as e:
                raise UpstreamUnavailable(
                    message=f"Undecodable {level} topology: {e.message}",
                    source=self.client.SOURCE_NAME,
                ) from e

            width = FIPS_WIDTH[level]
            index = {}
            for feature in features:
                if feature.get("id") is None:
                    continue
                index[str(feature["id"]).zfill(width)] = feature

            loaded = {"features": features, "index": index}
            await self.cache.set(key, loaded, ttl=None)
            logger.info(f"Loaded {len(index)} {level} boundaries")
            return loaded

    async def all_states(self) -> Dict[str, Any]:
        """Every state boundary as a FeatureCollection."""
        loaded = await self._load("states")
        return {"type": "FeatureCollection", "features": list(loaded["features"])}

    async def features_for_states(self, abbrs: Iterable[str]) -> List[Dict[str, Any]]:
        """State polygons for the given abbreviations; unknown ones are skipped."""
        index = (await self._load("states"))["index"]
        features = []
        seen = set()
        for abbr in abbrs:
            fips = state_fips(abbr)
            if not fips or fips in seen:
                continue
            feature = index.get(fips)
            if feature is None:
                logger.debug(f"No boundary for state {abbr} ({fips})")
                continue
            seen.add(fips)
            features.append(_tagged(feature, fips=fips, stateabbr=abbr.upper()))
        return features

    async def features_for_counties(self, fips_codes: Iterable[str]) -> List[Dict[str, Any]]:
        """County polygons for exact 5-digit FIPS matches."""
        index = (await self._load("counties"))["index"]
        features = []
        seen = set()
        for code in fips_codes:
            fips = str(code).zfill(5)
            if fips in seen:
                continue
            feature = index.get(fips)
            if feature is None:
                logger.debug(f"No boundary for county {fips}")
                continue
            seen.add(fips)
            features.append(_tagged(feature, fips=fips))
        return features


def _tagged(feature: Dict[str, Any], **properties: Any) -> Dict[str, Any]:
    """Copy of ``feature`` with extra properties; the cached feature is left untouched."""
    tagged = dict(feature)
    tagged["properties"] = {**(feature.get("properties") or {}), **properties}
    return tagged
