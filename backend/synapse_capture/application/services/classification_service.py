"""Content classification service: files captured content under segments.

Two strategies:
  1. Remote LLM analysis via the ChatProvider (may return several segments).
  2. Rule-based fallback: used when no provider is configured, the call
     fails, the answer is not JSON, or it names no known segment.
"""

import json
import logging
import time

from synapse_capture.application.interfaces import ChatProvider
from synapse_capture.application.services.segment_resolver import (
    apply_educational_cross_tag,
    valid_segments,
)
from synapse_capture.domain.entities import (
    ChatMessage,
    ClassificationResult,
    ContentSignals,
    ContentType,
    MultiCategory,
    Segment,
    SingleCategory,
)

logger = logging.getLogger(__name__)

# Max chars of page text sent to the LLM
_TEXT_PREVIEW_LENGTH = 1000

# Fallback rule thresholds
_ARTICLE_MIN_LENGTH = 1000
_PRODUCT_KEYWORDS = ("buy", "price", "$")
_BOOK_KEYWORDS = ("book", "read")

_FALLBACK_TITLE = "Untitled"
_FALLBACK_DESCRIPTION = "No description available"

_SYSTEM_PROMPT = "You are a content analysis assistant. Always respond in JSON format as instructed."

_CLASSIFICATION_PROMPT = """\
Analyze the following web content and perform TWO tasks.

1. Categorize it into ONE OR MORE of these categories, most relevant first:
- Images: Content primarily containing images or visual media
- Products: Product listings, e-commerce pages, shopping content
- Books: Book reviews, book listings, reading material
- Articles: News articles, blog posts, long-form text content
- Videos: Video content, video players, video platforms
- Study: Educational content, tutorials, study materials, documentation

2. Extract structured details depending on the category:
- Video page: the complete video title and description.
- Blog/article: the full title and a concise summary.
- Product listing: product name, short description and price if available.
- Book page: the book title and synopsis.
- Study material: the main topic and a brief summary.
- Image-based: just note "Visual content".

## Response Format (strict JSON, no markdown)

{{
  "categories": ["Articles", "Study"],
  "title": "Extracted or inferred title",
  "description": "Extracted or inferred description or summary",
  "contentType": {{"isEducational": true, "isTechnical": false, "format": "article"}}
}}

## Content details
- Text preview: {text_preview}
- Has images: {has_images}
- Has videos: {has_videos}
- Has links: {has_links}
- Element type: {element_type}
"""


def fallback_categorization(signals: ContentSignals) -> Segment:
    """Deterministic rule-based categorization. Always yields one segment."""
    text = signals.text or ""
    lowered = text.lower()

    if signals.has_images and not signals.has_videos:
        return Segment.IMAGES
    if signals.has_videos:
        return Segment.VIDEOS
    if signals.has_links and any(k in lowered for k in _PRODUCT_KEYWORDS):
        return Segment.PRODUCTS
    if len(text) > _ARTICLE_MIN_LENGTH:
        return Segment.ARTICLES
    if any(k in lowered for k in _BOOK_KEYWORDS):
        return Segment.BOOKS
    return Segment.STUDY


class ContentClassificationService:
    """Application service that classifies captured page signals.

    The chat provider is the capability switch: pass ``None`` to run on the
    rule-based fallback only.
    """

    def __init__(
        self,
        chat_provider: ChatProvider | None = None,
        *,
        model: str = "openai/gpt-4o-mini",
    ):
        self._chat_provider = chat_provider
        self._model = model

    async def classify(self, signals: ContentSignals) -> ClassificationResult:
        """Classify page signals into one or more segments plus metadata."""
        if self._chat_provider is None:
            logger.debug("No classification provider configured, using rule-based fallback")
            return self._fallback_result(signals)

        prompt = _CLASSIFICATION_PROMPT.format(
            text_preview=(signals.text or "")[:_TEXT_PREVIEW_LENGTH] or "No text",
            has_images="Yes" if signals.has_images else "No",
            has_videos="Yes" if signals.has_videos else "No",
            has_links="Yes" if signals.has_links else "No",
            element_type=signals.element_type or "unknown",
        )
        messages = [
            ChatMessage(role="system", content=_SYSTEM_PROMPT),
            ChatMessage(role="user", content=prompt),
        ]

        start = time.monotonic()
        try:
            completion = await self._chat_provider.complete(
                messages, self._model, temperature=0.3, max_tokens=300
            )
        except Exception:
            logger.exception("Remote classification failed, using rule-based fallback")
            return self._fallback_result(signals)
        duration_ms = int((time.monotonic() - start) * 1000)

        payload = extract_json_object(completion.content)
        if payload is None:
            logger.warning(
                "Failed to parse classification response: %s", completion.content[:200]
            )
            return self._fallback_result(signals)

        parsed = ClassificationResult.from_payload(payload)
        labels = valid_segments(parsed.categories)
        if not labels:
            logger.warning(
                "Classification named no known segment (%s), using rule-based fallback",
                parsed.categories,
            )
            return self._fallback_result(signals)

        labels = apply_educational_cross_tag(labels, parsed.content_type)
        logger.info(
            "Classified content as %s in %dms (model=%s, tokens=%d)",
            labels,
            duration_ms,
            completion.model or self._model,
            completion.usage.total_tokens,
        )
        return ClassificationResult(
            labels=SingleCategory(labels[0]) if len(labels) == 1 else MultiCategory(tuple(labels)),
            title=parsed.title,
            description=parsed.description,
            content_type=parsed.content_type,
            source="remote",
        )

    @staticmethod
    def _fallback_result(signals: ContentSignals) -> ClassificationResult:
        segment = fallback_categorization(signals)
        return ClassificationResult(
            labels=SingleCategory(segment.value),
            title=_FALLBACK_TITLE,
            description=_FALLBACK_DESCRIPTION,
            content_type=ContentType(),
            source="fallback",
        )


def extract_json_object(text: str) -> dict | None:
    """Parse a JSON object from an LLM answer.

    Tolerates markdown fences and prose around the object. Returns None when
    no object can be decoded.
    """
    raw = (text or "").strip()
    if raw.startswith("```"):
        lines = raw.split("\n")
        raw = "\n".join(lines[1:-1] if len(lines) > 2 else lines[1:]).strip()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        start = raw.find("{")
        end = raw.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            data = json.loads(raw[start : end + 1])
        except json.JSONDecodeError:
            return None

    return data if isinstance(data, dict) else None
