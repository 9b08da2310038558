"""
Per-request records passed between pipeline stages.

Nothing here is persisted by the search pipeline except AnalyticsEvent,
which is handed to the analytics sink.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .content_types import ALL_CONTENT_TYPES, ContentType


@dataclass
class SearchQuery:
    """Validated search request."""
    text: str
    content_types: List[ContentType] = field(default_factory=lambda: list(ALL_CONTENT_TYPES))
    category_id: Optional[str] = None
    limit: int = 50
    offset: int = 0
    include_related: bool = True
    include_suggestions: bool = True


@dataclass
class SearchCandidate:
    """
    One matching content record.

    ``rank`` and ``match_type`` are computed per query and never stored.
    ``title``/``body``/``secondary`` keep the raw text used for ranking.
    """
    content_type: ContentType
    id: str
    title: str
    description: str = ""
    body: str = ""
    secondary: str = ""
    author_id: Optional[str] = None
    category_id: Optional[str] = None
    view_count: int = 0
    like_count: int = 0
    created_at: Optional[str] = None
    boosted: bool = False
    rank: float = 0.0
    match_type: str = "general_match"

    @classmethod
    def from_row(cls, content_type: ContentType, row: Dict[str, Any]) -> "SearchCandidate":
        """Build a candidate from a normalized store row."""
        return cls(
            content_type=content_type,
            id=str(row['id']),
            title=row.get('title') or '',
            description=row.get('description') or '',
            body=row.get('body') or '',
            secondary=row.get('secondary') or '',
            author_id=row.get('author_id'),
            category_id=row.get('category_id'),
            view_count=int(row.get('view_count') or 0),
            like_count=int(row.get('like_count') or 0),
            created_at=row.get('created_at'),
            boosted=bool(row.get('boosted')),
        )

    def to_result(self) -> Dict[str, Any]:
        """Response shape: record fields plus relevance metadata."""
        return {
            'content_type': self.content_type.value,
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'author_id': self.author_id,
            'category_id': self.category_id,
            'view_count': self.view_count,
            'like_count': self.like_count,
            'created_at': self.created_at,
            'rank': self.rank,
            'match_type': self.match_type,
            'relevanceScore': self.rank,
            'snippet': self.description or '',
            'category': self.category_id,
        }


@dataclass
class Suggestion:
    """Autocomplete candidate."""
    text: str
    type: str
    count: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'text': self.text, 'type': self.type, 'count': self.count}


@dataclass
class AnalyticsEvent:
    """Write-once record of one authenticated search."""
    original_query: str
    expanded_query: str
    user_id: Optional[str]
    results_count: int
    response_time_ms: int
