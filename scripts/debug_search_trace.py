import argparse
import asyncio
import os
import sys

# Add the project root directory to the python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from address_search.core.config import settings
from address_search.core.logging_config import setup_logging
from address_search.models import SearchQuery
from address_search.recall.orchestrator import AddressSearchService, parse_city_param


# Setup logging to file and console
class Tee(object):
    def __init__(self, *files):
        self.files = files

    def write(self, obj):
        for f in self.files:
            f.write(obj)
            f.flush()

    def flush(self):
        for f in self.files:
            f.flush()


async def trace_query(service: AddressSearchService, query: str, city, limit: int):
    print(f"\n{'='*60}", flush=True)
    print(f"QUERY: {query} | CITIES: {city} | LIMIT: {limit}", flush=True)
    print(f"{'='*60}", flush=True)

    search_query = SearchQuery(
        text=query,
        allowed_cities=parse_city_param(city) or [],
        limit=limit,
        country_codes=settings.DEFAULT_COUNTRY_CODES,
    )
    api_limit = service.api_limit(search_query)
    print(f"Upstream limit: {api_limit}", flush=True)

    # Every tier is run here, even after one produced results, so the
    # whole fallback chain can be inspected at once.
    for tier in service.tiers:
        print(f"\n--- [Tier] {tier.name} ---", flush=True)
        try:
            outcome = await service.run_tier(tier, search_query, api_limit)
        except asyncio.TimeoutError:
            print("  TIMEOUT (a live search stops here)", flush=True)
            break
        if not outcome.attempted:
            print("  skipped", flush=True)
            continue
        print(f"  q: {outcome.query_text}", flush=True)
        if outcome.error:
            print(f"  error: {outcome.error}", flush=True)
            continue
        print(
            f"  candidates: {outcome.raw_count} | ranked: {len(outcome.results or [])}",
            flush=True,
        )
        for i, r in enumerate(outcome.results or []):
            print(
                f"    [{i+1}] {r.display_name} (city: {r.address.city}, road: {r.has_road})",
                flush=True,
            )

    print("\n--- [Final] search() ---", flush=True)
    results = await service.search(query, city=city, limit=limit)
    for i, r in enumerate(results):
        print(f"#{i+1} {r.display_name} ({r.latitude}, {r.longitude})", flush=True)
    if not results:
        print("(no results)", flush=True)


async def main():
    parser = argparse.ArgumentParser(description="Trace the address search fallback tiers")
    parser.add_argument("query", nargs="*", default=["Uhlandstrase 5"])
    parser.add_argument("--city", default=None, help="Comma separated allow-list")
    parser.add_argument("--limit", type=int, default=settings.DEFAULT_LIMIT)
    args = parser.parse_args()

    os.makedirs(settings.LOG_DIR, exist_ok=True)
    f = open(settings.TRACE_LOG_PATH, "a")
    sys.stdout = Tee(sys.stdout, f)
    setup_logging()

    service = AddressSearchService()
    await trace_query(service, " ".join(args.query), args.city, args.limit)


if __name__ == "__main__":
    asyncio.run(main())
