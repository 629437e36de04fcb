from typing import Optional, Sequence

from address_search.models import AddressDetails, AddressResult
from address_search.nlp.city_matcher import SimilarityMatcher


def extract_city(address: dict) -> str:
    return address.get("city") or address.get("town") or address.get("village") or ""


def to_address_result(item: dict) -> AddressResult:
    address = item.get("address") or {}
    return AddressResult(
        display_name=item.get("display_name") or "",
        latitude=float(item["lat"]),
        longitude=float(item["lon"]),
        address=AddressDetails(
            street=address.get("road") or "",
            house_number=address.get("house_number") or "",
            postal_code=address.get("postcode") or "",
            city=extract_city(address),
            district=address.get("suburb") or address.get("neighbourhood") or "",
            state=address.get("state") or "",
            country=address.get("country") or "",
        ),
        type=item.get("type") or item.get("class") or "unknown",
        has_road=bool(address.get("road")),
    )


class ResultRanker:
    def __init__(self, matcher: Optional[SimilarityMatcher] = None):
        self.matcher = matcher or SimilarityMatcher()

    def rank(
        self,
        raw_candidates: Sequence[dict],
        allowed_cities: Sequence[str],
        limit: int,
    ) -> list[AddressResult]:
        with_road = []
        without_road = []

        for item in raw_candidates:
            address = item.get("address") or {}

            # 1. City filter (fuzzy), skipped entirely without an allow-list
            if allowed_cities and not self.matcher.is_match(
                extract_city(address), allowed_cities
            ):
                continue

            # 2. Partition on the street signal
            if address.get("road"):
                with_road.append(item)
            else:
                without_road.append(item)

        # 3. Selection
        if allowed_cities:
            # Partitions are never mixed while a city filter is active
            selected = with_road if with_road else without_road
        else:
            selected = with_road + without_road

        return [to_address_result(item) for item in selected[:limit]]
