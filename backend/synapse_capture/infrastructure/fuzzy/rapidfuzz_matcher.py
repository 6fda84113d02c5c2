"""RapidFuzz-backed FuzzyMatcher: weighted multi-field, typo-tolerant search.

Each field is scored independently against the lower-cased query. A field
counts as matched when its similarity reaches ``(1 - threshold) * 100``.
The distances of the matched fields are combined as a weighted geometric
mean, so a row is returned as soon as one field matches. The score is
reported as a similarity, ``1 - distance``, which for any match lies in
``[1 - threshold, 1]``.
"""

import logging
from collections.abc import Callable

from rapidfuzz import fuzz

from synapse_capture.application.interfaces import FuzzyMatch, FuzzyMatcher
from synapse_capture.domain.entities import ContentItem

logger = logging.getLogger(__name__)

_DEFAULT_THRESHOLD = 0.4
_EPSILON = 1e-3

# Field name → (accessor, weight)
DEFAULT_FIELD_WEIGHTS: dict[str, tuple[Callable[[ContentItem], str], float]] = {
    "title": (lambda item: item.title, 0.4),
    "content_text": (lambda item: item.content_text, 0.3),
    "segment_type": (lambda item: item.segment_type, 0.2),
    "url": (lambda item: item.url, 0.1),
}


class RapidFuzzMatcher(FuzzyMatcher):
    """FuzzyMatcher adapter over ``rapidfuzz.fuzz``."""

    def __init__(
        self,
        *,
        threshold: float = _DEFAULT_THRESHOLD,
        fields: dict[str, tuple[Callable[[ContentItem], str], float]] | None = None,
    ):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {threshold}")
        self._min_similarity = (1.0 - threshold) * 100.0
        self._fields = fields or DEFAULT_FIELD_WEIGHTS

    def search(self, corpus: list[ContentItem], query: str) -> list[FuzzyMatch]:
        needle = (query or "").strip().lower()
        if not needle:
            return []

        matches: list[FuzzyMatch] = []
        for item in corpus:
            distance = self._distance(item, needle)
            if distance is not None:
                matches.append(FuzzyMatch(item=item, score=1.0 - distance))

        # Stable: equal scores keep corpus order
        matches.sort(key=lambda m: m.score, reverse=True)
        logger.debug("Fuzzy search %r: %d/%d rows matched", needle, len(matches), len(corpus))
        return matches

    def _distance(self, item: ContentItem, needle: str) -> float | None:
        """Weighted distance over the matched fields, or None if none matched."""
        product = 1.0
        matched_weight = 0.0
        for accessor, weight in self._fields.values():
            value = (accessor(item) or "").lower()
            if not value or weight <= 0:
                continue
            similarity = self._similarity(needle, value)
            if similarity < self._min_similarity:
                continue
            field_distance = max(1.0 - similarity / 100.0, _EPSILON)
            product *= field_distance ** weight
            matched_weight += weight
        if matched_weight == 0:
            return None
        return product ** (1.0 / matched_weight)

    @staticmethod
    def _similarity(needle: str, value: str) -> float:
        # Locate the query inside longer fields; compare whole strings otherwise
        if len(needle) <= len(value):
            return fuzz.partial_ratio(needle, value)
        return fuzz.ratio(needle, value)
