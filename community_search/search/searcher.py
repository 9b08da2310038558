"""
Generic per-type searcher.

One routine serves all four content types; the type descriptor supplies
table, fields, status predicate and boost flag.
"""

from concurrent.futures import Executor
from typing import Dict, List, Optional
import logging

from community_search.common.outcome import Outcome
from community_search.config.search_config import CONCURRENCY_CONFIG, SEARCH_CONFIG
from community_search.store.base import ContentStore
from community_search.store.predicates import RecordQuery
from .content_types import ContentType, get_descriptor
from .ranking import RelevanceRanker
from .records import SearchCandidate, SearchQuery
from .store_calls import call_store

logger = logging.getLogger("search")


class PerTypeSearcher:
    """Searches one content type at a time: filter, match, rank."""

    def __init__(
        self,
        store: ContentStore,
        executor: Executor,
        ranker: Optional[RelevanceRanker] = None,
        config: Optional[Dict] = None,
        timeout: float = None
    ):
        self.store = store
        self.executor = executor
        self.ranker = ranker or RelevanceRanker()
        self.config = config or SEARCH_CONFIG
        self.timeout = timeout or CONCURRENCY_CONFIG['store_timeout_seconds']

    def build_query(
        self,
        query: SearchQuery,
        terms: List[str],
        content_type: ContentType
    ) -> RecordQuery:
        """
        Record query for one type: raw query or any term in title, body or secondary text.

        Enough rows are fetched to rank a candidate pool and still cover the
        global page window [offset, offset + limit).
        """
        patterns = [query.text.strip()]
        patterns.extend(term for term in terms if term not in patterns)

        return RecordQuery(
            descriptor=get_descriptor(content_type),
            patterns=patterns,
            category_id=query.category_id,
            limit=max(query.offset + query.limit, self.config['candidate_pool_size'])
        )

    async def search(
        self,
        query: SearchQuery,
        terms: List[str],
        content_type: ContentType
    ) -> Outcome:
        """
        Run the primary search for one content type.

        Args:
            query: Validated search query
            terms: Extracted terms in extraction order
            content_type: Type to search

        Returns:
            Outcome carrying ranked candidates (empty when degraded), at
            most offset + limit of them
        """
        record_query = self.build_query(query, terms, content_type)

        outcome = await call_store(
            self.executor,
            self.store.find_records,
            record_query,
            timeout=self.timeout,
            source=content_type.value,
            default=[]
        )
        if not outcome.is_ok:
            return Outcome.degraded([], outcome.reason, content_type.value)

        candidates = [SearchCandidate.from_row(content_type, row) for row in outcome.value]
        ranked = self.ranker.rank(candidates, query.text, terms)
        ranked = ranked[:query.offset + query.limit]

        logger.debug(f"{content_type.value}: {len(outcome.value)} rows, {len(ranked)} ranked")

        return Outcome.ok(ranked, content_type.value)
