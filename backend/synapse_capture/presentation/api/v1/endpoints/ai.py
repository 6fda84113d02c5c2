"""AI endpoints: content categorization and hybrid search."""

from fastapi import APIRouter, Depends, HTTPException, status

from synapse_capture.application.schemas import (
    CategorizeResponse,
    ContentSignalsSchema,
    ContentTypeSchema,
    SearchRequest,
    SearchResponse,
)
from synapse_capture.application.services import CaptureService, SearchService
from synapse_capture.domain.exceptions import (
    NoSegmentDeterminedError,
    StorageError,
    ValidationError,
)
from synapse_capture.infrastructure.dependencies import (
    get_capture_service,
    get_current_owner_id,
    get_search_service,
)

router = APIRouter(prefix="/ai", tags=["AI"])


@router.post("/categorize", response_model=CategorizeResponse)
async def categorize(
    data: ContentSignalsSchema,
    owner_id: str = Depends(get_current_owner_id),
    service: CaptureService = Depends(get_capture_service),
) -> CategorizeResponse:
    """Classify page signals into segments without storing anything."""
    try:
        classification, resolved = await service.categorize(data.to_entity())
    except NoSegmentDeterminedError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)

    content_type = resolved.content_type
    return CategorizeResponse(
        segment_type=resolved.primary,
        segments=resolved.segments,
        title=classification.title,
        description=classification.description,
        content_type=ContentTypeSchema(
            is_educational=content_type.is_educational,
            is_technical=content_type.is_technical,
            format=content_type.format,
        ),
        source=classification.source,
    )


@router.post("/search", response_model=SearchResponse)
async def search(
    data: SearchRequest,
    owner_id: str = Depends(get_current_owner_id),
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """Hybrid fuzzy + semantic search over the owner's captures."""
    try:
        result = await service.search(owner_id, data.prompt, data.segments or None)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except StorageError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Search failed"
        )
    return SearchResponse.from_entity(result)
