"""Search service: hybrid fuzzy + semantic search over an owner's captures.

Flow:
  1. Candidate retrieval from the content store (substring match, capped).
  2. Fuzzy matching over the candidates.
  3. Semantic matching (when an embedding provider is configured): one
     embedding per candidate, fanned out concurrently with per-call timeouts
     and an overall deadline.
  4. Rank fusion: fuzzy, semantic and basic buckets re-weighted by segment
     and temporal boosts, then sorted and grouped by segment.
"""

import asyncio
import logging
import math
import time
from datetime import datetime

from synapse_capture.application.interfaces import ContentRepository, FuzzyMatch, FuzzyMatcher
from synapse_capture.application.services.embedding_service import (
    EmbeddingService,
    cosine_similarity,
)
from synapse_capture.application.services.temporal_parser import (
    get_time_boost,
    parse_time_intent,
)
from synapse_capture.domain.entities import (
    ContentItem,
    RankedResult,
    ResultSource,
    SearchResult,
    TimeIntent,
)
from synapse_capture.domain.exceptions import ValidationError
from synapse_capture.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("SearchService")

_MAX_RESULTS = 20
_MAX_SEMANTIC_RESULTS = 20
_MAX_BASIC_RESULTS = 10
_BASIC_SCORE = 0.5
_COMPOSITE_TEXT_LENGTH = 1000

_SEGMENT_MATCH_BOOST = 1.2
_SEGMENT_MISS_BOOST = 0.8


class SearchService:
    """Application service for hybrid search over captured content."""

    def __init__(
        self,
        content_repository: ContentRepository,
        fuzzy_matcher: FuzzyMatcher,
        embedding_service: EmbeddingService,
        *,
        candidate_limit: int = 500,
        embedding_concurrency: int = 8,
        embedding_timeout: float = 10.0,
        semantic_deadline: float = 25.0,
    ):
        self._repository = content_repository
        self._fuzzy_matcher = fuzzy_matcher
        self._embedding_service = embedding_service
        self._candidate_limit = candidate_limit
        self._embedding_concurrency = max(1, embedding_concurrency)
        self._embedding_timeout = embedding_timeout
        self._semantic_deadline = semantic_deadline

    async def search(
        self,
        owner_id: str,
        prompt: str,
        segments: list[str] | None = None,
        *,
        now: datetime | None = None,
    ) -> SearchResult:
        """Run a hybrid search for one owner.

        Args:
            owner_id: Whose content to search.
            prompt: Free-text query, may contain a time expression.
            segments: Optional segment filter; also drives the segment boost.
            now: Reference moment for relative time expressions.

        Raises:
            ValidationError: If the prompt is empty.
            StorageError: If candidates cannot be loaded.
        """
        if not prompt or not prompt.strip():
            raise ValidationError("prompt", "Search prompt is required")

        segment_filter = [s for s in (segments or []) if s] or None
        start = time.monotonic()
        plog.step_start(PipelineStage.SEARCH, f"Searching {prompt!r}", segments=segment_filter)

        intent = parse_time_intent(prompt, now)
        if intent is not None:
            plog.detail("time intent", kind=intent.kind.value, context=intent.has_explicit_date_context)

        candidates = await self._load_candidates(owner_id, prompt, segment_filter)
        if not candidates:
            plog.step_complete(PipelineStage.SEARCH, "No candidates")
            return SearchResult()

        with plog.timed_step(PipelineStage.FUZZY, f"Fuzzy matching {len(candidates)} candidates"):
            fuzzy_matches = self._fuzzy_matcher.search(candidates, prompt)
        plog.detail("fuzzy matches", count=len(fuzzy_matches))

        semantic_matches = await self._semantic_matches(prompt, candidates)

        results = self._fuse(candidates, fuzzy_matches, semantic_matches, intent, segment_filter)
        has_semantic = bool(semantic_matches)

        plog.stats(candidates=len(candidates), ranked=len(results), semantic=has_semantic)

        grouped: dict[str, list[RankedResult]] = {}
        for result in results:
            grouped.setdefault(result.item.segment_type, []).append(result)

        plog.step_complete(
            PipelineStage.SEARCH,
            f"{len(results)} ranked results",
            candidates=len(candidates),
            semantic=has_semantic,
            ms=int((time.monotonic() - start) * 1000),
        )
        return SearchResult(
            results=results[:_MAX_RESULTS],
            grouped_results=grouped,
            has_semantic_results=has_semantic,
        )

    # ── Private helpers ──────────────────────────────────────────────

    async def _load_candidates(
        self, owner_id: str, prompt: str, segment_filter: list[str] | None
    ) -> list[ContentItem]:
        candidates = await self._repository.search_by_owner(
            owner_id, prompt, self._candidate_limit, segment_filter
        )
        # A whole sentence rarely appears verbatim; rank the owner's recent rows instead
        if not candidates:
            logger.info("Candidate retry without query text after zero substring matches")
            candidates = await self._repository.search_by_owner(
                owner_id, None, self._candidate_limit, segment_filter
            )
        plog.detail("candidates", count=len(candidates))
        return candidates

    async def _semantic_matches(
        self, prompt: str, candidates: list[ContentItem]
    ) -> list[tuple[ContentItem, float]]:
        """Top candidates by cosine similarity to the prompt.

        Returns an empty list when embeddings are unavailable, the prompt
        embedding fails or the overall deadline is exceeded.
        """
        if not self._embedding_service.is_available:
            return []

        prompt_vector = await self._embed(prompt)
        if prompt_vector is None:
            plog.step_warning(PipelineStage.SEMANTIC, "Prompt embedding failed, skipping semantic search")
            return []

        semaphore = asyncio.Semaphore(self._embedding_concurrency)

        async def score(item: ContentItem) -> tuple[ContentItem, float] | None:
            async with semaphore:
                vector = await self._embed(_composite_text(item))
            if vector is None:
                return None
            try:
                similarity = cosine_similarity(prompt_vector, vector)
            except ValueError:
                logger.warning("Embedding dimension mismatch for content %s", item.id)
                return None
            if math.isnan(similarity):
                return None
            return item, similarity

        tasks = [asyncio.create_task(score(item)) for item in candidates]
        _, pending = await asyncio.wait(tasks, timeout=self._semantic_deadline)
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            plog.step_warning(
                PipelineStage.SEMANTIC,
                "Semantic deadline exceeded, dropping semantic results",
                pending=len(pending),
                deadline_s=self._semantic_deadline,
            )
            return []

        scored = [task.result() for task in tasks if task.result() is not None]
        scored.sort(key=lambda pair: pair[1], reverse=True)
        plog.detail("semantic matches", scored=len(scored), failed=len(tasks) - len(scored))
        return scored[:_MAX_SEMANTIC_RESULTS]

    async def _embed(self, text: str) -> list[float] | None:
        try:
            return await asyncio.wait_for(
                self._embedding_service.embed(text), timeout=self._embedding_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Embedding call timed out after %.1fs", self._embedding_timeout)
            return None

    @staticmethod
    def _fuse(
        candidates: list[ContentItem],
        fuzzy_matches: list[FuzzyMatch],
        semantic_matches: list[tuple[ContentItem, float]],
        intent: TimeIntent | None,
        segment_filter: list[str] | None,
    ) -> list[RankedResult]:
        """Merge the three buckets into one list, best first."""
        ranked: list[RankedResult] = []
        seen: set[int] = set()

        def add(item: ContentItem, base_score: float, source: ResultSource) -> None:
            weight = _segment_boost(item, segment_filter) * get_time_boost(item, intent)
            ranked.append(RankedResult(item=item, score=base_score * weight, source=source))
            seen.add(id(item))

        for match in fuzzy_matches:
            if id(match.item) not in seen:
                add(match.item, match.score, ResultSource.FUZZY)

        for item, similarity in semantic_matches:
            if id(item) not in seen:
                add(item, similarity, ResultSource.SEMANTIC)

        basic = [item for item in candidates if id(item) not in seen][:_MAX_BASIC_RESULTS]
        for item in basic:
            add(item, _BASIC_SCORE, ResultSource.BASIC)

        # Stable sort: ties keep bucket order
        ranked.sort(key=lambda r: r.score, reverse=True)
        plog.step_complete(
            PipelineStage.FUSION,
            f"{len(ranked)} fused results",
            fuzzy=sum(r.source is ResultSource.FUZZY for r in ranked),
            semantic=sum(r.source is ResultSource.SEMANTIC for r in ranked),
            basic=len(basic),
        )
        return ranked


def _segment_boost(item: ContentItem, segment_filter: list[str] | None) -> float:
    if not segment_filter:
        return 1.0
    return _SEGMENT_MATCH_BOOST if item.segment_type in segment_filter else _SEGMENT_MISS_BOOST


def _composite_text(item: ContentItem) -> str:
    return f"{item.segment_type}: {item.title} {item.content_text}"[:_COMPOSITE_TEXT_LENGTH]
