"""Domain entities for content classification results.

The classification service has historically answered in two shapes: a single
``category`` string and a ``categories`` list. Both are parsed once at the
boundary into ``SingleCategory`` / ``MultiCategory`` so callers never branch
on field presence.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SingleCategory:
    """Legacy single-label answer."""

    label: str

    @property
    def labels(self) -> tuple[str, ...]:
        return (self.label,)


@dataclass(frozen=True)
class MultiCategory:
    """Multi-label answer, primary label first."""

    labels: tuple[str, ...]


CategoryLabels = SingleCategory | MultiCategory


def category_labels_from_payload(payload: dict[str, Any]) -> CategoryLabels | None:
    """Parse either response shape into a tagged variant.

    A ``categories`` list wins over a ``category`` string. Returns None when
    neither is present.
    """
    categories = payload.get("categories")
    if isinstance(categories, list):
        return MultiCategory(labels=tuple(str(c) for c in categories if c))
    category = payload.get("category")
    if isinstance(category, str) and category:
        return SingleCategory(label=category)
    return None


@dataclass
class ContentType:
    """Structured flags describing what kind of content was captured."""

    is_educational: bool = False
    is_technical: bool = False
    format: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ContentType":
        if not isinstance(payload, dict):
            return cls()
        return cls(
            is_educational=bool(payload.get("isEducational", False)),
            is_technical=bool(payload.get("isTechnical", False)),
            format=payload.get("format"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "isEducational": self.is_educational,
            "isTechnical": self.is_technical,
            "format": self.format,
        }


@dataclass
class ClassificationResult:
    """Transient classifier output: never persisted as its own entity."""

    labels: CategoryLabels
    title: str = ""
    description: str = ""
    content_type: ContentType = field(default_factory=ContentType)
    source: str = "remote"  # "remote" | "fallback" | "client"

    @property
    def categories(self) -> list[str]:
        return list(self.labels.labels)

    @classmethod
    def from_payload(cls, payload: dict[str, Any], *, source: str = "remote") -> "ClassificationResult":
        """Build a result from a raw JSON payload in either response shape."""
        labels = category_labels_from_payload(payload) or MultiCategory(labels=())
        return cls(
            labels=labels,
            title=str(payload.get("title") or ""),
            description=str(payload.get("description") or ""),
            content_type=ContentType.from_payload(payload.get("contentType")),
            source=source,
        )


@dataclass
class ResolvedSegments:
    """Validated, ordered, de-duplicated segments ready for persistence."""

    segments: list[str]
    content_type: ContentType
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def primary(self) -> str:
        return self.segments[0]
