"""
Two-tier coverage aggregation for one (provider, technology) pair.

Tier 1 (hex): fetch every zoom-6 BDC tile over the US, decode, merge.
Tier 2 (tabular): when tier 1 has no records, list the Form 477 states or
counties for the pair and map them to boundary polygons.

A failed tile is counted and excluded without stopping the other tiles; the
fallback runs only when no tile produced a record.
"""
import asyncio
import logging
from typing import List, Optional, Tuple

from hotrod.core.cache import TTLCache
from hotrod.core.config import Settings, get_settings
from hotrod.core.models import CoverageResult, CoverageSource, FetchOutcome, FetchStatus, GeometryRecord
from hotrod.geo.geometry_merger import merge_geometry_records
from hotrod.geo.tile_decoder import decode_tile
from hotrod.geo.tiles import TileCoord, us_tile_grid
from hotrod.services.boundary_service import BoundaryService
from hotrod.sources.fcc_bdc.client import FCCBDCClient
from hotrod.sources.fcc_form477.client import Form477Client

logger = logging.getLogger(__name__)


class CoverageAggregator:
    """Builds a CoverageResult from the hex tier, falling back to Form 477."""

    def __init__(
        self,
        bdc_client: FCCBDCClient,
        form477_client: Form477Client,
        boundaries: BoundaryService,
        cache: TTLCache,
        settings: Optional[Settings] = None,
    ):
        self.bdc_client = bdc_client
        self.form477_client = form477_client
        self.boundaries = boundaries
        self.cache = cache
        self.settings = settings or get_settings()

    @staticmethod
    def cache_key(provider_id: str, tech_code: str) -> str:
        return f"coverage:{provider_id}:{tech_code}"

    async def get_coverage(self, provider_id: str, tech_code: str) -> CoverageResult:
        """
        Coverage for ``provider_id`` / ``tech_code``.

        Returns:
            A HEX result when any tile had data, else a STATE / COUNTY result,
            else an empty result tagged with the tabular tier's source

        Raises:
            UpstreamUnavailable: If the tabular tier could not be queried
        """
        provider_id = str(provider_id)
        tech_code = str(tech_code)
        key = self.cache_key(provider_id, tech_code)

        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        result = await self._hex_coverage(provider_id, tech_code)
        if result is None:
            result = await self._tabular_coverage(provider_id, tech_code)

        if not result.is_empty:
            await self.cache.set(key, result, ttl=self.settings.coverage_ttl)
        return result

    # -------------------------------------------------------------------------
    # Tier 1: hex tiles
    # -------------------------------------------------------------------------

    async def _fetch_tile(self, provider_id: str, tech_code: str, tile: TileCoord) -> FetchOutcome:
        try:
            return await self.bdc_client.fetch_tile(
                provider_id, tech_code, tile.z, tile.x, tile.y,
                timeout=self.settings.tile_timeout,
            )
        except Exception as e:
            logger.debug(f"Tile {tile.z}/{tile.x}/{tile.y} raised: {e}")
            return FetchOutcome.failed(str(e))

    async def _hex_coverage(self, provider_id: str, tech_code: str) -> Optional[CoverageResult]:
        tiles = us_tile_grid(self.settings.hex_zoom)
        outcomes = await asyncio.gather(
            *[self._fetch_tile(provider_id, tech_code, tile) for tile in tiles]
        )

        batches: List[List[GeometryRecord]] = []
        with_data = empty = errored = 0
        for tile, outcome in zip(tiles, outcomes):
            if outcome.status == FetchStatus.FAILED:
                errored += 1
                continue
            if not outcome.has_data:
                empty += 1
                continue
            records = decode_tile(
                outcome.data, tile.z, tile.x, tile.y,
                layer_name=self.settings.hex_tile_layer,
            )
            if records:
                with_data += 1
                batches.append(records)
            else:
                empty += 1

        merged = merge_geometry_records(batches, precision=self.settings.dedupe_precision)
        logger.info(
            f"Hex coverage {provider_id}/{tech_code}: {len(merged)} hexes from "
            f"{len(tiles)} tiles ({with_data} with data, {empty} empty, {errored} errored)"
        )

        if not merged:
            if errored:
                logger.warning(
                    f"Hex tier for {provider_id}/{tech_code} empty with {errored} failed tiles"
                )
            return None

        return CoverageResult.build(
            (record.to_feature() for record in merged),
            CoverageSource.HEX,
            data_date=self.settings.bdc_data_date,
            tiles_with_data=with_data,
            tiles_empty=empty,
            tiles_errored=errored,
        )

    # -------------------------------------------------------------------------
    # Tier 2: Form 477 states / counties
    # -------------------------------------------------------------------------

    async def _tabular_codes(self, provider_id: str, tech_code: str) -> Tuple[CoverageSource, List[str], bool]:
        if self.settings.coverage_granularity == "county":
            source = CoverageSource.COUNTY
        else:
            source = CoverageSource.STATE

        key = f"coverage:{source.value}:{provider_id}:{tech_code}"
        cached = await self.cache.get(key)
        if cached is not None:
            codes, truncated = cached
            return source, list(codes), truncated

        if source == CoverageSource.COUNTY:
            codes, truncated = await self.form477_client.get_county_coverage(provider_id, tech_code)
        else:
            codes, truncated = await self.form477_client.get_state_coverage(provider_id, tech_code), False
        await self.cache.set(key, (tuple(codes), truncated), ttl=self.settings.coverage_ttl)
        return source, list(codes), truncated

    async def _tabular_coverage(self, provider_id: str, tech_code: str) -> CoverageResult:
        source, codes, truncated = await self._tabular_codes(provider_id, tech_code)

        if not codes:
            features = []
        elif source == CoverageSource.COUNTY:
            features = await self.boundaries.features_for_counties(codes)
        else:
            features = await self.boundaries.features_for_states(codes)

        logger.warning(
            f"Falling back to Form 477 {source.value} coverage for {provider_id}/{tech_code}: "
            f"{len(codes)} codes, {len(features)} boundaries"
            + (" (truncated)" if truncated else "")
        )
        return CoverageResult.build(
            features,
            source,
            data_date=self.settings.form477_data_date,
            truncated=truncated,
        )
