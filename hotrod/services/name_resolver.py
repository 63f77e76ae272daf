"""
Cross-scheme provider resolution: Form 477 name -> BDC provider identity.

Form 477 and BDC number providers differently, so a Form 477 id is useless
against the hex tile endpoint. The provider's filed name is the only shared
key. Names are compared as sets of "meaningful" tokens (corporate
boilerplate and short tokens removed) and a BDC hit is accepted when
enough tokens overlap.

Example:
- "Comcast Cable Communications, LLC" -> tokens {comcast, cable}
- "Charter Communications (Spectrum)" -> tokens {charter}
"""
import logging
import re
from typing import List, Optional

from hotrod.core.api_errors import APIError
from hotrod.core.cache import MISS, TTLCache
from hotrod.core.models import ProviderIdentity, SourceScheme
from hotrod.sources.fcc_bdc.client import FCCBDCClient

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset({
    "inc", "llc", "ltd", "corp", "co", "company", "corporation", "communications",
    "communication", "the", "of", "and", "wireless", "telephone", "broadband",
    "network", "networks", "services", "service", "holdings", "group",
})

MIN_TOKEN_LENGTH = 3
MAX_SEARCH_HITS = 25

_PARENTHETICAL = re.compile(r"\([^)]*\)")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: Optional[str]) -> str:
    """Lowercase, drop parentheticals and punctuation, collapse whitespace."""
    text = str(name or "").lower()
    text = _PARENTHETICAL.sub(" ", text)
    text = _NON_ALNUM.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def meaningful_tokens(name: Optional[str]) -> List[str]:
    """Tokens of the normalized name minus stop words and short tokens, in order."""
    return [
        token for token in normalize_name(name).split(" ")
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def score_name_match(source_name: str, candidate_name: str) -> int:
    """
    Count the source name's meaningful tokens present in the candidate's.

    A plain intersection count, not a similarity ratio: extra tokens on
    either side cost nothing.
    """
    left = meaningful_tokens(source_name)
    if not left:
        return 0
    right = set(meaningful_tokens(candidate_name))
    return sum(1 for token in left if token in right)


def candidate_queries(tokens: List[str]) -> List[str]:
    """Search strings to try, most specific first."""
    queries = [" ".join(tokens[:2]), tokens[0]] if tokens else []
    deduped: List[str] = []
    for query in queries:
        if query and query not in deduped:
            deduped.append(query)
    return deduped


class NameResolver:
    """
    Resolves a Form 477 provider name to a BDC ProviderIdentity.

    Decisions are cached without expiry, including "no match", keyed by the
    normalized name.
    """

    def __init__(self, client: FCCBDCClient, cache: TTLCache):
        self.client = client
        self.cache = cache

    @staticmethod
    def cache_key(normalized: str) -> str:
        return f"bdc_name:{normalized}"

    async def resolve(self, provider_name: str) -> Optional[ProviderIdentity]:
        """
        Find the best BDC match for ``provider_name``.

        Returns:
            The matched BDC identity, or None when no hit clears the threshold
        """
        normalized = normalize_name(provider_name)
        key = self.cache_key(normalized)
        cached = await self.cache.get(key, default=MISS)
        if cached is not MISS:
            return cached

        tokens = meaningful_tokens(provider_name)
        if not tokens:
            await self.cache.set(key, None)
            return None

        min_score = min(2, len(tokens))
        search_failed = False

        for query in candidate_queries(tokens):
            try:
                rows = await self.client.search_providers(query)
            except APIError as e:
                search_failed = True
                logger.warning(f"BDC name resolution search {query!r} failed: {e}")
                continue

            best = None
            best_score = 0
            for row in rows[:MAX_SEARCH_HITS]:
                score = score_name_match(provider_name, row.provider_name)
                if score > best_score:
                    best, best_score = row, score

            if best is not None and best_score >= min_score:
                identity = ProviderIdentity(
                    id=best.provider_id,
                    name=best.provider_name,
                    source_scheme=SourceScheme.PRIMARY,
                )
                logger.info(
                    f"Resolved {provider_name!r} -> BDC {identity.id} "
                    f"{identity.name!r} (score {best_score})"
                )
                await self.cache.set(key, identity)
                return identity

        if search_failed:
            # Not a decision: an upstream error may have hidden the match
            return None

        logger.info(f"No BDC match for {provider_name!r}")
        await self.cache.set(key, None)
        return None
