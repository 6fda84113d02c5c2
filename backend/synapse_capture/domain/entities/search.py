"""Domain entities for hybrid search: time intents and ranked results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .content_item import ContentItem


class TimeIntentKind(str, Enum):
    EXACT = "exact"
    RANGE = "range"


@dataclass(frozen=True)
class TimeIntent:
    """A date reference found in a search query.

    ``date`` is set for exact intents, ``start``/``end`` for ranges.
    """

    kind: TimeIntentKind
    date: datetime | None = None
    start: datetime | None = None
    end: datetime | None = None
    has_explicit_date_context: bool = False


class ResultSource(str, Enum):
    FUZZY = "fuzzy"
    SEMANTIC = "semantic"
    BASIC = "basic"


@dataclass
class RankedResult:
    """A content row with its fused relevance score."""

    item: ContentItem
    score: float
    source: ResultSource


@dataclass
class SearchResult:
    """Response of one search call: flat top list plus per-segment grouping."""

    results: list[RankedResult] = field(default_factory=list)
    grouped_results: dict[str, list[RankedResult]] = field(default_factory=dict)
    has_semantic_results: bool = False
