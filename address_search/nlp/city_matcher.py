"""Typo tolerant city matching against a caller supplied allow-list."""

from typing import Optional, Sequence

from rapidfuzz.distance import Levenshtein

from address_search.core.config import settings


def _fold(value: str) -> str:
    return (value or "").lower().strip()


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between case-folded, trimmed strings."""
    return Levenshtein.distance(_fold(a), _fold(b))


def similarity(a: str, b: str) -> float:
    """1 - distance / longest length, so identical strings score 1.0."""
    s1, s2 = _fold(a), _fold(b)
    max_len = max(len(s1), len(s2))
    if max_len == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(s1, s2) / max_len


class SimilarityMatcher:
    def __init__(self, threshold: Optional[float] = None):
        if threshold is None:
            threshold = settings.CITY_MATCH_THRESHOLD
        self.threshold = threshold

    def _threshold(self, threshold: Optional[float]) -> float:
        return self.threshold if threshold is None else threshold

    def is_match(
        self,
        candidate: str,
        allowed_cities: Sequence[str],
        threshold: Optional[float] = None,
    ) -> bool:
        if not candidate or not allowed_cities:
            return False
        threshold = self._threshold(threshold)
        folded = _fold(candidate)

        # Exact hits win before any scoring
        if any(_fold(city) == folded for city in allowed_cities):
            return True
        return any(similarity(folded, city) >= threshold for city in allowed_cities)

    def best_match(
        self,
        candidate: str,
        allowed_cities: Sequence[str],
        threshold: Optional[float] = None,
    ) -> Optional[str]:
        """Return the allow-list entry closest to ``candidate``.

        Ties keep the earlier entry. ``None`` when nothing reaches the
        threshold.
        """
        if not candidate or not allowed_cities:
            return None
        threshold = self._threshold(threshold)
        folded = _fold(candidate)

        for city in allowed_cities:
            if _fold(city) == folded:
                return city

        best, best_score = None, 0.0
        for city in allowed_cities:
            score = similarity(folded, city)
            if score > best_score and score >= threshold:
                best, best_score = city, score
        return best

    def find_matches(
        self,
        candidate: str,
        allowed_cities: Sequence[str],
        threshold: Optional[float] = None,
    ) -> list[str]:
        if not candidate or not allowed_cities:
            return []
        threshold = self._threshold(threshold)
        folded = _fold(candidate)
        return [
            city
            for city in allowed_cities
            if _fold(city) == folded or similarity(folded, city) >= threshold
        ]
