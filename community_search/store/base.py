"""
Content-store contract consumed by the search pipeline.

The store is an external collaborator: it answers filtered, ordered,
pattern-matched listings, a few suggestion lookups, and accepts
append-only analytics writes. Implementations are synchronous; the
pipeline runs them on a worker pool with a timeout.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from community_search.search.records import AnalyticsEvent
from .predicates import RecordQuery


class ContentStore(ABC):
    """Read/query access to community content plus the analytics sink."""

    @abstractmethod
    def find_records(self, query: RecordQuery) -> List[Dict[str, Any]]:
        """Rows matching ``query``, normalized column names, most viewed first."""

    @abstractmethod
    def related_articles(
        self,
        category_id: str,
        exclude_id: Optional[str],
        limit: int
    ) -> List[Dict[str, Any]]:
        """Published articles in a category, most viewed then newest first."""

    @abstractmethod
    def popular_queries(self, partial: str, limit: int) -> List[Dict[str, Any]]:
        """Logged queries containing ``partial``: ``{suggestion, search_count}``."""

    @abstractmethod
    def matching_titles(self, partial: str, limit: int) -> List[Dict[str, Any]]:
        """Distinct published article titles containing ``partial``: ``{title, view_count}``."""

    @abstractmethod
    def matching_synonyms(self, partial: str, limit: int) -> List[Dict[str, Any]]:
        """Synonym entries for ``partial``: ``{term, synonyms, weight}``."""

    @abstractmethod
    def record_search(self, event: AnalyticsEvent) -> None:
        """Append one analytics event."""

    @abstractmethod
    def ping(self) -> bool:
        """True when the store is reachable."""
