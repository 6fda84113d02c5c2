"""Pydantic schemas for the search API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from synapse_capture.domain.entities import RankedResult, SearchResult


class SearchRequest(BaseModel):
    """Request body for a hybrid search.

    An empty prompt is rejected by the service with a 400.
    """

    prompt: str = Field(default="", examples=["articles from last week about databases"])
    segments: list[str] = []


class RankedResultSchema(BaseModel):
    """A stored row plus its fused relevance score."""

    id: str | None = None
    user_id: str
    url: str
    title: str = ""
    content_text: str = ""
    content_html: str = ""
    segment_type: str
    metadata: dict[str, Any] = {}
    created_at: datetime | None = None
    score: float
    source: str

    @classmethod
    def from_entity(cls, result: RankedResult) -> "RankedResultSchema":
        item = result.item
        return cls(
            id=item.id,
            user_id=item.owner_id,
            url=item.url,
            title=item.title,
            content_text=item.content_text,
            content_html=item.content_html,
            segment_type=item.segment_type,
            metadata=item.metadata,
            created_at=item.created_at,
            score=result.score,
            source=result.source.value,
        )


class SearchResponse(BaseModel):
    results: list[RankedResultSchema] = []
    grouped_results: dict[str, list[RankedResultSchema]] = Field(
        default_factory=dict, serialization_alias="groupedResults"
    )
    has_semantic_results: bool = Field(default=False, serialization_alias="hasSemanticResults")

    @classmethod
    def from_entity(cls, result: SearchResult) -> "SearchResponse":
        return cls(
            results=[RankedResultSchema.from_entity(r) for r in result.results],
            grouped_results={
                segment: [RankedResultSchema.from_entity(r) for r in ranked]
                for segment, ranked in result.grouped_results.items()
            },
            has_semantic_results=result.has_semantic_results,
        )
