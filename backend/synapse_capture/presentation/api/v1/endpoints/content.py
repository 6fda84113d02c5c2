"""Content capture endpoints: save, list and live-update stream."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from synapse_capture.application.schemas import (
    CaptureRequest,
    CaptureResponse,
    ContentItemResponse,
    ContentListResponse,
    SegmentCountResponse,
)
from synapse_capture.application.services import CaptureService, SSEManager
from synapse_capture.domain.exceptions import (
    NoSegmentDeterminedError,
    StorageError,
    ValidationError,
)
from synapse_capture.infrastructure.dependencies import (
    get_capture_service,
    get_current_owner_id,
    get_sse_manager,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/content", tags=["Content"])


@router.post("", response_model=CaptureResponse, status_code=status.HTTP_201_CREATED)
async def save_content(
    data: CaptureRequest,
    owner_id: str = Depends(get_current_owner_id),
    service: CaptureService = Depends(get_capture_service),
) -> CaptureResponse:
    """Save a capture, one row per resolved segment."""
    try:
        outcome = await service.capture(owner_id, data.to_entity())
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except NoSegmentDeterminedError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)
    except StorageError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save content"
        )

    return CaptureResponse(
        id=outcome.primary.id,
        segments=outcome.segments,
        is_multi_segment=outcome.is_multi_segment,
    )


@router.get("", response_model=ContentListResponse)
async def list_content(
    segment_type: str | None = Query(None, alias="segmentType"),
    owner_id: str = Depends(get_current_owner_id),
    service: CaptureService = Depends(get_capture_service),
) -> ContentListResponse:
    """The owner's rows, newest first, plus per-segment counts."""
    try:
        items, stats = await service.list_content(owner_id, segment_type)
    except StorageError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch content"
        )
    return ContentListResponse(
        content=[ContentItemResponse.from_entity(item) for item in items],
        stats=[SegmentCountResponse(segment_type=s.segment_type, count=s.count) for s in stats],
    )


@router.get("/stream")
async def content_stream(
    owner_id: str = Depends(get_current_owner_id),
    sse: SSEManager = Depends(get_sse_manager),
) -> StreamingResponse:
    """SSE endpoint for live content updates.

    Clients connect via EventSource and receive a 'content_update' event
    after each successful capture of their own content.
    """
    return StreamingResponse(
        sse.subscribe(owner_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
