"""
Searchable content types and their store field mappings.

Each descriptor names the table and columns the generic per-type searcher
reads. Identifiers here are trusted constants; user text never reaches them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional


class ContentType(str, Enum):
    ARTICLE = "article"
    QUESTION = "question"
    FORUM_POST = "forum_post"
    FEATURE_REQUEST = "feature_request"

    @property
    def wire_name(self) -> str:
        """Plural name used in request ``contentTypes`` lists."""
        return self.value + "s"


@dataclass(frozen=True)
class TypeDescriptor:
    """Store mapping for one content type."""
    content_type: ContentType
    table: str
    title_field: str
    body_field: str
    description_field: str
    status_field: str
    status_value: str
    status_excluded: bool          # True: status != value, False: status = value
    category_field: str = "category_id"
    author_field: str = "author_id"
    created_field: str = "created_at"
    secondary_field: Optional[str] = None
    views_field: Optional[str] = None
    engagement_field: Optional[str] = None
    boost_field: Optional[str] = None

    @property
    def text_fields(self) -> List[str]:
        """Fields searched for substring matches: title, body, secondary."""
        fields = [self.title_field, self.body_field]
        if self.secondary_field:
            fields.append(self.secondary_field)
        return fields


DESCRIPTORS: Dict[ContentType, TypeDescriptor] = {
    ContentType.ARTICLE: TypeDescriptor(
        content_type=ContentType.ARTICLE,
        table="content_articles",
        title_field="title",
        body_field="content",
        secondary_field="excerpt",
        description_field="excerpt",
        status_field="status",
        status_value="published",
        status_excluded=False,
        views_field="view_count",
        engagement_field="like_count",
        boost_field="featured",
    ),
    ContentType.QUESTION: TypeDescriptor(
        content_type=ContentType.QUESTION,
        table="questions",
        title_field="title",
        body_field="content",
        description_field="content",
        status_field="status",
        status_value="deleted",
        status_excluded=True,
        views_field="view_count",
        engagement_field="answer_count",
    ),
    ContentType.FORUM_POST: TypeDescriptor(
        content_type=ContentType.FORUM_POST,
        table="forum_posts",
        title_field="title",
        body_field="content",
        description_field="content",
        status_field="status",
        status_value="active",
        status_excluded=False,
        views_field="view_count",
        engagement_field="reply_count",
        boost_field="is_pinned",
    ),
    ContentType.FEATURE_REQUEST: TypeDescriptor(
        content_type=ContentType.FEATURE_REQUEST,
        table="feature_requests",
        title_field="title",
        body_field="description",
        description_field="description",
        status_field="status",
        status_value="rejected",
        status_excluded=True,
        engagement_field="star_count",
    ),
}

ALL_CONTENT_TYPES: List[ContentType] = list(DESCRIPTORS)

# Request names -> content type (plural wire names and singular tags)
_NAME_LOOKUP: Dict[str, ContentType] = {}
for _ct in ContentType:
    _NAME_LOOKUP[_ct.value] = _ct
    _NAME_LOOKUP[_ct.wire_name] = _ct


def parse_content_types(names: Optional[Iterable[str]]) -> List[ContentType]:
    """
    Resolve request content-type names, preserving order and dropping repeats.

    Args:
        names: Names from the request; empty or None means all types

    Returns:
        Ordered list of content types

    Raises:
        ValueError: If a name is not a known content type
    """
    if not names:
        return list(ALL_CONTENT_TYPES)

    resolved = []
    for name in names:
        key = str(name).strip().lower()
        if key not in _NAME_LOOKUP:
            raise ValueError(f"Unknown content type: {name}")
        content_type = _NAME_LOOKUP[key]
        if content_type not in resolved:
            resolved.append(content_type)

    return resolved or list(ALL_CONTENT_TYPES)


def get_descriptor(content_type: ContentType) -> TypeDescriptor:
    return DESCRIPTORS[content_type]
