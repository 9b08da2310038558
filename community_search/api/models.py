"""
Pydantic models for API requests and responses.

Wire names follow the browser client (camelCase for request options and
response envelope keys, snake_case for record fields).
"""

from typing import Optional, List, Dict, Any, Union
from pydantic import BaseModel, Field, validator


# ============================================================================
# Search Models
# ============================================================================

class SearchRequest(BaseModel):
    """Search request body (enhanced and universal search)."""

    query: Optional[str] = Field(None, description="Search query (required, non-empty after trim)")
    content_types: Optional[List[str]] = Field(
        None,
        alias="contentTypes",
        description="Content types: articles, questions, forum_posts, feature_requests (default all)"
    )
    category_id: Optional[Union[str, int]] = Field(None, alias="categoryId", description="Category filter")
    limit: int = Field(50, ge=1, le=100, description="Maximum results to return")
    offset: int = Field(0, ge=0, description="Offset for pagination")
    include_related: bool = Field(True, alias="includeRelated", description="Include related articles")
    include_suggestions: bool = Field(True, alias="includeSuggestions", description="Include suggestions")

    @validator('category_id', pre=True)
    def normalize_category_id(cls, v):
        """Category ids are compared as strings."""
        if v is None or v == "":
            return None
        return str(v)


class SearchResult(BaseModel):
    """Individual search result."""

    content_type: str = Field(..., description="article, question, forum_post or feature_request")
    id: str = Field(..., description="Record ID")
    title: str = Field(..., description="Record title")
    description: Optional[str] = Field(None, description="Excerpt or body text")
    author_id: Optional[str] = Field(None, description="Author reference")
    category_id: Optional[str] = Field(None, description="Category reference")
    view_count: int = Field(0, description="View counter")
    like_count: int = Field(0, description="Secondary engagement counter")
    created_at: Optional[str] = Field(None, description="Creation timestamp")
    rank: float = Field(..., description="Computed relevance rank")
    match_type: str = Field(..., description="Criterion that produced the rank")
    relevance_score: float = Field(..., alias="relevanceScore", description="Same as rank")
    snippet: str = Field("", description="Display snippet")
    category: Optional[str] = Field(None, description="Category reference")


class SuggestionItem(BaseModel):
    """Autocomplete suggestion."""

    text: str = Field(..., description="Suggestion text")
    type: str = Field(..., description="popular, article_title, synonym or synonym_match")
    count: float = Field(0, description="Weight within its source")


class RelatedArticle(BaseModel):
    """Article related to the top result."""

    content_type: str = Field("article", description="Always 'article'")
    id: str = Field(..., description="Article ID")
    title: str = Field(..., description="Article title")
    description: Optional[str] = Field(None, description="Article excerpt")
    category_id: Optional[str] = Field(None, description="Category reference")
    view_count: int = Field(0, description="View counter")
    created_at: Optional[str] = Field(None, description="Creation timestamp")


class EnhancedSearchData(BaseModel):
    """Enhanced search payload."""

    results: List[SearchResult] = Field(..., description="Ranked results")
    total: int = Field(..., description="Results on this page")
    query: str = Field(..., description="Original search query")
    suggestions: List[SuggestionItem] = Field(default_factory=list, description="Query suggestions")
    related_articles: List[RelatedArticle] = Field(
        default_factory=list, alias="relatedArticles", description="Articles related to the top result"
    )
    search_time: int = Field(..., alias="searchTime", description="Execution time in milliseconds")
    content_types: List[str] = Field(..., alias="contentTypes", description="Searched content types")
    has_more: bool = Field(..., alias="hasMore", description="Page was full; more results may follow")


class EnhancedSearchResponse(BaseModel):
    data: EnhancedSearchData


class UniversalSearchData(BaseModel):
    """Universal search payload."""

    results: List[SearchResult] = Field(..., description="Ranked results")
    total: int = Field(..., description="Results on this page")
    query: str = Field(..., description="Original search query")
    content_types: List[str] = Field(..., alias="contentTypes", description="Searched content types")


class UniversalSearchResponse(BaseModel):
    data: UniversalSearchData


# ============================================================================
# Autocomplete Models
# ============================================================================

class AutocompleteRequest(BaseModel):
    """Autocomplete request body."""

    query: Optional[str] = Field(None, description="Partial query")
    limit: int = Field(10, ge=1, le=50, description="Maximum suggestions")


class AutocompleteData(BaseModel):
    suggestions: List[SuggestionItem] = Field(..., description="Suggestions")
    query: str = Field(..., description="Original partial query")
    total: int = Field(..., description="Suggestions returned")


class AutocompleteResponse(BaseModel):
    data: AutocompleteData


# ============================================================================
# Health Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    store_connected: bool = Field(..., description="Content store connection status")
    identity_enabled: bool = Field(..., description="Whether bearer credentials are resolved")
    uptime_seconds: Optional[int] = Field(None, description="Service uptime in seconds")
    analytics: Dict[str, Any] = Field(default_factory=dict, description="Analytics counters")


# ============================================================================
# Error Models
# ============================================================================

class ErrorDetail(BaseModel):
    code: str = Field(..., description="Stable error code")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Error response."""

    error: ErrorDetail
