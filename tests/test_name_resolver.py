"""
Unit tests for Form 477 name -> BDC provider resolution.
"""
import pytest
from unittest.mock import AsyncMock

from hotrod.core.api_errors import UpstreamUnavailable
from hotrod.core.models import SourceScheme
from hotrod.services.name_resolver import (
    NameResolver,
    candidate_queries,
    meaningful_tokens,
    normalize_name,
    score_name_match,
)
from hotrod.sources.fcc_bdc.schemas import BDCProviderRow


def _row(provider_id, name):
    return BDCProviderRow(provider_id=provider_id, provider_name=name)


COMCAST_HITS = [
    _row("290111", "Comcast Business Communications"),
    _row("130077", "Comcast Cable Communications LLC"),
]


# =============================================================================
# Test: name helpers
# =============================================================================

@pytest.mark.unit
class TestNameHelpers:

    def test_normalize_name(self):
        assert normalize_name("Charter Communications (Spectrum), Inc.") == "charter communications inc"
        assert normalize_name("  AT&T   Corp ") == "at t corp"
        assert normalize_name(None) == ""

    def test_meaningful_tokens_drop_stop_words_and_short_tokens(self):
        assert meaningful_tokens("Comcast Cable Communications, LLC") == ["comcast", "cable"]
        assert meaningful_tokens("AT&T Services, Inc.") == []
        assert meaningful_tokens("The Telephone Company of Ohio") == ["ohio"]

    def test_score_counts_shared_tokens(self):
        assert score_name_match("Comcast Cable Communications, LLC", "Comcast Cable Communications LLC") == 2
        assert score_name_match("Comcast Cable Communications, LLC", "Comcast Business") == 1
        assert score_name_match("LLC", "LLC") == 0

    def test_candidate_queries(self):
        assert candidate_queries(["comcast", "cable"]) == ["comcast cable", "comcast"]
        assert candidate_queries(["charter"]) == ["charter"]
        assert candidate_queries([]) == []


# =============================================================================
# Test: NameResolver
# =============================================================================

@pytest.mark.unit
class TestNameResolver:

    @pytest.mark.asyncio
    async def test_comcast_resolves_to_cable_entity(self, cache):
        client = AsyncMock()
        client.search_providers.return_value = COMCAST_HITS
        resolver = NameResolver(client, cache)

        identity = await resolver.resolve("Comcast Cable Communications, LLC")

        assert identity.id == "130077"
        assert identity.name == "Comcast Cable Communications LLC"
        assert identity.source_scheme == SourceScheme.PRIMARY
        client.search_providers.assert_awaited_once_with("comcast cable")

    @pytest.mark.asyncio
    async def test_ties_go_to_first_hit(self, cache):
        client = AsyncMock()
        client.search_providers.return_value = [
            _row("1", "Acme Fiber Holdings"),
            _row("2", "Acme Fiber"),
        ]
        resolver = NameResolver(client, cache)

        identity = await resolver.resolve("Acme Fiber Inc")

        assert identity.id == "1"

    @pytest.mark.asyncio
    async def test_next_query_tried_when_threshold_not_met(self, cache):
        client = AsyncMock()
        client.search_providers.side_effect = [
            [_row("5", "Comcast Business")],
            COMCAST_HITS,
        ]
        resolver = NameResolver(client, cache)

        identity = await resolver.resolve("Comcast Cable Communications, LLC")

        assert identity.id == "130077"
        assert [c.args[0] for c in client.search_providers.await_args_list] == [
            "comcast cable",
            "comcast",
        ]

    @pytest.mark.asyncio
    async def test_single_token_name_needs_one_match(self, cache):
        client = AsyncMock()
        client.search_providers.return_value = [_row("77", "Charter Communications")]
        resolver = NameResolver(client, cache)

        identity = await resolver.resolve("Charter Communications (Spectrum)")

        assert identity.id == "77"

    @pytest.mark.asyncio
    async def test_bare_comcast_resolves_with_one_shared_token(self, cache):
        client = AsyncMock()
        client.search_providers.return_value = [_row("130077", "Comcast Cable Communications LLC")]
        resolver = NameResolver(client, cache)

        identity = await resolver.resolve("Comcast")

        assert identity.id == "130077"
        assert identity.name == "Comcast Cable Communications LLC"
        client.search_providers.assert_awaited_once_with("comcast")

    @pytest.mark.asyncio
    async def test_no_match_is_cached(self, cache):
        client = AsyncMock()
        client.search_providers.return_value = []
        resolver = NameResolver(client, cache)

        assert await resolver.resolve("Nowhere Rural Cooperative") is None
        assert await resolver.resolve("nowhere rural cooperative") is None
        # Two queries on the first call, none on the second
        assert client.search_providers.await_count == 2

    @pytest.mark.asyncio
    async def test_match_is_cached(self, cache):
        client = AsyncMock()
        client.search_providers.return_value = COMCAST_HITS
        resolver = NameResolver(client, cache)

        first = await resolver.resolve("Comcast Cable Communications, LLC")
        second = await resolver.resolve("Comcast Cable Communications LLC")

        assert first == second
        assert client.search_providers.await_count == 1

    @pytest.mark.asyncio
    async def test_name_without_tokens_never_searches(self, cache):
        client = AsyncMock()
        resolver = NameResolver(client, cache)

        assert await resolver.resolve("LLC Inc.") is None
        client.search_providers.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upstream_failure_is_not_cached(self, cache):
        client = AsyncMock()
        client.search_providers.side_effect = UpstreamUnavailable("down", source="fcc_bdc")
        resolver = NameResolver(client, cache)

        assert await resolver.resolve("Comcast Cable") is None

        client.search_providers.side_effect = None
        client.search_providers.return_value = COMCAST_HITS
        identity = await resolver.resolve("Comcast Cable")

        assert identity.id == "130077"
