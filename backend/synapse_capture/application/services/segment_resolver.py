"""Segment resolver: turns classifier output into the canonical segment list."""

import logging

from synapse_capture.domain.entities import (
    ClassificationResult,
    ContentType,
    ResolvedSegments,
    Segment,
)
from synapse_capture.domain.exceptions import NoSegmentDeterminedError

logger = logging.getLogger(__name__)


def apply_educational_cross_tag(labels: list[str], content_type: ContentType) -> list[str]:
    """Educational content is always also filed under Study."""
    if content_type.is_educational and Segment.STUDY.value not in labels:
        return [*labels, Segment.STUDY.value]
    return list(labels)


def valid_segments(labels: list[str]) -> list[str]:
    """Keep enumerated labels only, first occurrence wins."""
    result: list[str] = []
    for label in labels:
        if Segment.is_valid(label) and label not in result:
            result.append(label)
    return result


def resolve_segments(classification: ClassificationResult) -> ResolvedSegments:
    """Validate and normalize a classification into persistable segments.

    Accepts either response shape (single ``category`` or ``categories``
    list), applies the educational cross-tag and drops unknown labels.

    Raises:
        NoSegmentDeterminedError: If no valid segment remains.
    """
    labels = apply_educational_cross_tag(classification.categories, classification.content_type)
    segments = valid_segments(labels)

    dropped = [label for label in labels if not Segment.is_valid(label)]
    if dropped:
        logger.info("Dropped unknown segment labels: %s", dropped)

    if not segments:
        raise NoSegmentDeterminedError()

    return ResolvedSegments(
        segments=segments,
        content_type=classification.content_type,
        metadata={
            "title": classification.title,
            "description": classification.description,
            "contentType": classification.content_type.to_dict(),
        },
    )
