"""Fallback search over Nominatim.

Each search walks an ordered list of tiers. A tier decides whether it
applies, builds its query text and says whether the city allow-list is
hinted upstream and used for filtering. The first tier that yields ranked
results ends the walk; later tiers only run on an empty result. Tiers run
strictly one after another since each depends on the outcome of the last.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from address_search.core.config import settings
from address_search.core.logging_config import truncate_query
from address_search.models import AddressResult, SearchQuery
from address_search.nlp.normalizer import contains_german_chars, denormalize, normalize
from address_search.ranking.ranker import ResultRanker, to_address_result
from address_search.recall.nominatim_client import NominatimClient, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchTier:
    name: str
    # Returns the query text for this tier, or None to skip it
    build_text: Callable[[SearchQuery], Optional[str]]
    city_filtered: bool = True


def _primary_text(query: SearchQuery) -> Optional[str]:
    return query.text


def _denormalized_text(query: SearchQuery) -> Optional[str]:
    text = denormalize(query.text)
    return text if text != query.text.lower() else None


def _normalized_text(query: SearchQuery) -> Optional[str]:
    if not contains_german_chars(query.text):
        return None
    text = normalize(query.text)
    return text if text != query.text.lower() else None


def _unfiltered_text(query: SearchQuery) -> Optional[str]:
    return query.text if query.allowed_cities else None


DEFAULT_TIERS = (
    SearchTier("primary", _primary_text),
    SearchTier("denormalized", _denormalized_text),
    SearchTier("normalized", _normalized_text),
    SearchTier("city_unfiltered", _unfiltered_text, city_filtered=False),
)


@dataclass
class TierOutcome:
    tier: str
    attempted: bool
    query_text: Optional[str] = None
    raw_count: int = 0
    results: Optional[list[AddressResult]] = None
    error: Optional[str] = None


def parse_city_param(value: Union[str, Sequence[str], None]) -> Optional[list[str]]:
    """Turn a ``city`` option into an allow-list; ``None`` means no filter.

    Strings are split on commas, so "Berlin, Potsdam" hints Berlin and
    filters on both.
    """
    if value is None:
        return None
    parts = value.split(",") if isinstance(value, str) else value
    cities = [str(c).strip() for c in parts if c and str(c).strip()]
    return cities or None


class AddressSearchService:
    def __init__(
        self,
        client: Optional[NominatimClient] = None,
        ranker: Optional[ResultRanker] = None,
        tiers: Sequence[SearchTier] = DEFAULT_TIERS,
        default_limit: Optional[int] = None,
        default_country_codes: Optional[str] = None,
        min_query_length: Optional[int] = None,
    ):
        self.client = client or NominatimClient()
        self.ranker = ranker or ResultRanker()
        self.tiers = tuple(tiers)
        self.default_limit = default_limit or settings.DEFAULT_LIMIT
        self.default_country_codes = default_country_codes or settings.DEFAULT_COUNTRY_CODES
        self.min_query_length = (
            settings.MIN_QUERY_LENGTH if min_query_length is None else min_query_length
        )

    # Public API

    async def search(
        self,
        query: str,
        city: Union[str, Sequence[str], None] = None,
        limit: Optional[int] = None,
        country_codes: Optional[str] = None,
    ) -> list[AddressResult]:
        """Resolve a free-text address into ranked candidates.

        Never raises for lookup problems: anything that goes wrong is logged
        and reported as an empty list. Cancellation still propagates.
        """
        if not query or len(query.strip()) < self.min_query_length:
            return []

        try:
            search_query = SearchQuery(
                text=query,
                allowed_cities=parse_city_param(city) or [],
                limit=limit or self.default_limit,
                country_codes=country_codes or self.default_country_codes,
            )
            results = await self.resolve(search_query)
            logger.info(
                f"Search '{truncate_query(query)}' returned {len(results)} result(s) "
                f"(cities={search_query.allowed_cities})"
            )
            return results
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Address search failed for '{truncate_query(query)}'")
            return []

    async def search_by_postal_code_and_city(
        self, postal_code: str, city: str
    ) -> list[AddressResult]:
        return await self.search(f"{postal_code} {city}", limit=1)

    async def search_by_street_and_city(
        self,
        street: str,
        house_number: str,
        city: str,
        postal_code: str = "",
    ) -> list[AddressResult]:
        query = street
        if house_number:
            query += f" {house_number}"
        if city:
            query += f", {city}"
        if postal_code:
            query = f"{postal_code} {query}"
        return await self.search(query, limit=5)

    async def reverse_geocode(self, lat: float, lon: float) -> Optional[AddressResult]:
        try:
            data = await self.client.reverse(lat, lon)
            if data.get("error"):
                logger.info(f"Reverse geocode found nothing at {lat},{lon}: {data['error']}")
                return None
            return to_address_result(data)
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            logger.error(f"Reverse geocode timed out at {lat},{lon}")
            return None
        except UpstreamError as e:
            logger.warning(f"Reverse geocode failed at {lat},{lon}: {e}")
            return None
        except Exception:
            logger.exception(f"Reverse geocode crashed at {lat},{lon}")
            return None

    # Tier walk

    def api_limit(self, query: SearchQuery) -> int:
        if query.allowed_cities:
            return max(
                query.limit * settings.FILTERED_LIMIT_MULTIPLIER,
                settings.FILTERED_LIMIT_FLOOR,
            )
        return max(
            query.limit * settings.UNFILTERED_LIMIT_MULTIPLIER,
            settings.UNFILTERED_LIMIT_FLOOR,
        )

    async def resolve(self, query: SearchQuery) -> list[AddressResult]:
        api_limit = self.api_limit(query)
        for tier in self.tiers:
            try:
                outcome = await self.run_tier(tier, query, api_limit)
            except asyncio.TimeoutError:
                # A timeout ends the whole search, no further tiers
                logger.error(
                    f"[{tier.name}] Nominatim timed out after {self.client.timeout}s "
                    f"for '{truncate_query(query.text)}'; giving up"
                )
                return []
            if outcome.results:
                logger.info(
                    f"[{tier.name}] {len(outcome.results)} result(s) "
                    f"from {outcome.raw_count} candidate(s)"
                )
                return outcome.results
        return []

    async def run_tier(
        self, tier: SearchTier, query: SearchQuery, api_limit: int
    ) -> TierOutcome:
        text = tier.build_text(query)
        if text is None:
            return TierOutcome(tier=tier.name, attempted=False)

        allowed_cities = query.allowed_cities if tier.city_filtered else []
        search_text = text
        if allowed_cities:
            # Nominatim takes a single city hint; the rest only filter
            search_text = f"{text}, {allowed_cities[0]}"

        logger.info(
            f"[{tier.name}] Querying Nominatim: q='{truncate_query(search_text)}' "
            f"limit={api_limit} countrycodes={query.country_codes}"
        )
        try:
            raw = await self.client.search(
                search_text, limit=api_limit, country_codes=query.country_codes
            )
        except UpstreamError as e:
            logger.warning(
                f"[{tier.name}] Nominatim call failed for "
                f"'{truncate_query(search_text)}': {e}"
            )
            return TierOutcome(
                tier=tier.name, attempted=True, query_text=search_text, error=str(e)
            )

        results = self.ranker.rank(raw, allowed_cities, query.limit)
        return TierOutcome(
            tier=tier.name,
            attempted=True,
            query_text=search_text,
            raw_count=len(raw),
            results=results,
        )
