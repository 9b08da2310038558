"""
Search orchestrator: validation, term extraction, per-type search,
fallback, merging, suggestions and analytics.
"""

import asyncio
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
import logging

from community_search.config.search_config import (
    CONCURRENCY_CONFIG,
    SEARCH_CONFIG,
    SUGGESTION_CONFIG
)
from community_search.identity.client import IdentityClient
from community_search.store.base import ContentStore
from .analytics_tracker import AnalyticsRecorder
from .content_types import ContentType, parse_content_types
from .errors import QueryValidationError
from .fallback import FallbackController
from .merger import merge_results
from .ranking import RelevanceRanker
from .records import AnalyticsEvent, SearchCandidate, SearchQuery
from .searcher import PerTypeSearcher
from .store_calls import call_store
from .suggestions import SuggestionService
from .term_extractor import TermExtractor

logger = logging.getLogger('search')


@dataclass
class SearchOutcome:
    """Response payload plus the analytics event to record after responding."""
    payload: Dict[str, Any]
    event: Optional[AnalyticsEvent] = None
    terms: List[str] = field(default_factory=list)
    fallback_used: bool = False
    degraded_sources: List[str] = field(default_factory=list)


class SearchEngine:
    """
    Multi-source search across community content.

    Features:
    - Term extraction from natural-language queries
    - Concurrent per-type search with tiered relevance ranking
    - Raw-query fallback when the primary pass finds nothing
    - Rank-ordered merge across content types with pagination
    - Autocomplete suggestions and related articles
    - Best-effort analytics for authenticated callers
    """

    def __init__(
        self,
        store: ContentStore,
        identity: Optional[IdentityClient] = None,
        executor: Optional[Executor] = None,
        ranker: Optional[RelevanceRanker] = None,
        term_extractor: Optional[TermExtractor] = None,
        config: Optional[Dict] = None
    ):
        """
        Initialize search engine.

        Args:
            store: Content store
            identity: Identity client (None: every caller is anonymous)
            executor: Worker pool for store calls (created when omitted)
            ranker: Relevance ranker
            term_extractor: Term extractor
            config: Search configuration
        """
        self.store = store
        self.identity = identity
        self.config = config or SEARCH_CONFIG

        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=CONCURRENCY_CONFIG['search_thread_pool_size']
        )

        self.term_extractor = term_extractor or TermExtractor()
        self.ranker = ranker or RelevanceRanker()
        self.searcher = PerTypeSearcher(store, self.executor, self.ranker, self.config)
        self.fallback = FallbackController(store, self.executor, config=self.config)
        self.suggestions = SuggestionService(store, self.executor)
        self.analytics = AnalyticsRecorder(store, self.executor)

        self.started_at = datetime.now()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def build_query(
        self,
        text: Optional[str],
        content_types: Optional[Iterable[str]] = None,
        category_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = 0,
        include_related: bool = True,
        include_suggestions: bool = True
    ) -> SearchQuery:
        """
        Validate request parameters into a SearchQuery.

        Raises:
            QueryValidationError: On an empty or oversized query, an unknown
                content type, or an out-of-range limit/offset
        """
        if not isinstance(text, str) or not text.strip():
            raise QueryValidationError("Search query is required")

        if len(text) > self.config['max_query_length']:
            raise QueryValidationError(
                f"Search query too long (max {self.config['max_query_length']} characters)"
            )

        limit = self.config['default_limit'] if limit is None else limit
        if not 1 <= limit <= self.config['max_limit']:
            raise QueryValidationError(f"limit must be between 1 and {self.config['max_limit']}")

        offset = offset or 0
        if offset < 0:
            raise QueryValidationError("offset must not be negative")

        try:
            types = parse_content_types(content_types)
        except ValueError as e:
            raise QueryValidationError(str(e))

        return SearchQuery(
            text=text,
            content_types=types,
            category_id=category_id or None,
            limit=limit,
            offset=offset,
            include_related=include_related,
            include_suggestions=include_suggestions
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: SearchQuery,
        authorization: Optional[str] = None
    ) -> SearchOutcome:
        """
        Execute a search.

        Per-type searches, the identity lookup and the suggestion lookup
        run concurrently. Analytics are not written here: the returned
        event is recorded by the caller after responding.

        Args:
            query: Validated query
            authorization: Raw Authorization header, if any

        Returns:
            SearchOutcome with the response payload

        Raises:
            ConfigurationError: When the content store is unavailable
        """
        start_time = datetime.now()
        text = query.text.strip()

        logger.info(
            f"Executing search: query='{text}', "
            f"types={[t.value for t in query.content_types]}, "
            f"category={query.category_id}, limit={query.limit}, offset={query.offset}"
        )

        pending = []
        identity_task = None
        suggestion_task = None

        if self.identity is not None and authorization:
            identity_task = asyncio.ensure_future(self.identity.resolve(authorization))
            pending.append(identity_task)

        if query.include_suggestions and len(text) > self.config['inline_suggestion_min_length']:
            suggestion_task = asyncio.ensure_future(
                self.suggestions.suggest(text, self.config['inline_suggestion_limit'])
            )
            pending.append(suggestion_task)

        try:
            terms = self.term_extractor.extract(text)
            logger.info(f"Extracted key terms: {terms}")

            outcomes = await asyncio.gather(*[
                self.searcher.search(query, terms, content_type)
                for content_type in query.content_types
            ])

            fallback_used = False
            if FallbackController.should_run(outcomes):
                outcomes = await self.fallback.run(query)
                fallback_used = True

            degraded = [o.source for o in outcomes if o.is_degraded]
            if degraded:
                logger.warning(f"Degraded content types: {degraded}")

            page = merge_results(
                [outcome.value_or([]) for outcome in outcomes],
                limit=query.limit,
                offset=query.offset
            )

            related = []
            if query.include_related and page.results:
                related = await self.related_articles(page.results[0])

            suggestions = await suggestion_task if suggestion_task else []

            user_id = None
            if identity_task is not None:
                user_id = (await identity_task).value

        finally:
            for task in pending:
                if not task.done():
                    task.cancel()

        query_time_ms = int((datetime.now() - start_time).total_seconds() * 1000)

        payload = {
            'results': [candidate.to_result() for candidate in page.results],
            'total': len(page.results),
            'query': query.text,
            'suggestions': [s.to_dict() for s in suggestions],
            'relatedArticles': related,
            'searchTime': query_time_ms,
            'contentTypes': [t.wire_name for t in query.content_types],
            'hasMore': page.has_more,
        }

        event = None
        if user_id:
            event = AnalyticsEvent(
                original_query=query.text,
                expanded_query=" ".join(text.lower().split()),
                user_id=user_id,
                results_count=len(page.results),
                response_time_ms=query_time_ms
            )

        logger.info(
            f"Search completed: {len(page.results)} results returned"
            f"{' (fallback)' if fallback_used else ''}, {query_time_ms}ms"
        )

        return SearchOutcome(
            payload=payload,
            event=event,
            terms=terms,
            fallback_used=fallback_used,
            degraded_sources=degraded
        )

    async def related_articles(self, top: SearchCandidate) -> List[Dict[str, Any]]:
        """
        Popular published articles sharing the top result's category.

        Args:
            top: Highest-ranked result

        Returns:
            Related article rows; empty when the top result has no category
            or the lookup fails
        """
        if not top.category_id:
            return []

        exclude_id = top.id if top.content_type == ContentType.ARTICLE else None
        outcome = await call_store(
            self.executor,
            self.store.related_articles,
            top.category_id,
            exclude_id,
            self.config['related_limit'],
            timeout=CONCURRENCY_CONFIG['store_timeout_seconds'],
            source="related_articles",
            default=[],
            propagate_configuration=False
        )

        related = []
        for row in outcome.value_or([]):
            if row.get('id') is None:
                continue
            related.append({
                'content_type': row.get('content_type') or ContentType.ARTICLE.value,
                'id': str(row['id']),
                'title': row.get('title') or '',
                'description': row.get('description'),
                'category_id': str(row['category_id']) if row.get('category_id') is not None else None,
                'view_count': int(row.get('view_count') or 0),
                'created_at': str(row['created_at']) if row.get('created_at') is not None else None,
            })
        return related

    # ------------------------------------------------------------------
    # Autocomplete
    # ------------------------------------------------------------------

    async def autocomplete(self, partial: Optional[str], limit: Optional[int] = None) -> Dict[str, Any]:
        """
        Autocomplete suggestions for a partial query.

        Args:
            partial: Partial query text
            limit: Maximum suggestions

        Returns:
            Payload with suggestions, echoed query and count

        Raises:
            QueryValidationError: On an out-of-range limit
        """
        limit = SUGGESTION_CONFIG['default_limit'] if limit is None else limit
        if not 1 <= limit <= SUGGESTION_CONFIG['max_limit']:
            raise QueryValidationError(
                f"limit must be between 1 and {SUGGESTION_CONFIG['max_limit']}"
            )

        suggestions = await self.suggestions.suggest(partial or '', limit)

        return {
            'suggestions': [s.to_dict() for s in suggestions],
            'query': partial or '',
            'total': len(suggestions),
        }

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def health(self) -> Dict[str, Any]:
        """Store connectivity, uptime and analytics counters."""
        loop = asyncio.get_running_loop()
        try:
            store_connected = await asyncio.wait_for(
                loop.run_in_executor(self.executor, self.store.ping),
                timeout=CONCURRENCY_CONFIG['store_timeout_seconds']
            )
        except asyncio.TimeoutError:
            store_connected = False

        return {
            'status': "healthy" if store_connected else "degraded",
            'store_connected': store_connected,
            'identity_enabled': bool(self.identity and self.identity.enabled),
            'uptime_seconds': int((datetime.now() - self.started_at).total_seconds()),
            'analytics': self.analytics.get_stats(),
        }

    def close(self):
        """Shut down the worker pool if this engine created it."""
        if self._owns_executor:
            self.executor.shutdown(wait=True)
            logger.info("Thread pool shut down")
