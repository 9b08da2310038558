"""
Autocomplete suggestions from weighted sources.

Sources, queried concurrently and independently:
- popular:        logged queries containing the partial query, weight = times searched
- article_title:  published article titles containing it, weight = view count
- synonym:        synonym-table terms matching it, weight = synonym weight x 10
- synonym_match:  synonyms of those entries that contain it, weight = synonym weight x 5

Merged suggestions are de-duplicated case-insensitively (first seen wins),
ordered by source priority then weight, and capped.
"""

import asyncio
from concurrent.futures import Executor
from typing import Dict, List, Optional
import logging

from community_search.common.outcome import Outcome
from community_search.config.search_config import CONCURRENCY_CONFIG, SUGGESTION_CONFIG
from community_search.store.base import ContentStore
from .records import Suggestion
from .store_calls import call_store

logger = logging.getLogger("search")

POPULAR = "popular"
ARTICLE_TITLE = "article_title"
SYNONYM = "synonym"
SYNONYM_MATCH = "synonym_match"


def merge_suggestions(
    suggestions: List[Suggestion],
    limit: int,
    priority: Optional[Dict[str, int]] = None
) -> List[Suggestion]:
    """
    De-duplicate, order and cap suggestions.

    Args:
        suggestions: Suggestions in source order
        limit: Maximum suggestions returned
        priority: Source type -> priority, higher first

    Returns:
        Final suggestion list
    """
    priority = priority or SUGGESTION_CONFIG['source_priority']

    unique = []
    seen = set()
    for suggestion in suggestions:
        text = (suggestion.text or '').strip()
        key = text.lower()
        if not text or key in seen:
            continue
        seen.add(key)
        unique.append(suggestion)

    unique.sort(key=lambda s: (priority.get(s.type, 0), s.count or 0), reverse=True)

    return unique[:limit]


class SuggestionService:
    """Queries suggestion sources and merges their output."""

    def __init__(
        self,
        store: ContentStore,
        executor: Executor,
        config: Optional[Dict] = None,
        timeout: float = None
    ):
        self.store = store
        self.executor = executor
        self.config = config or SUGGESTION_CONFIG
        self.timeout = timeout or CONCURRENCY_CONFIG['store_timeout_seconds']

    async def _source(self, func, partial: str, limit: int, source: str) -> Outcome:
        return await call_store(
            self.executor,
            func,
            partial,
            limit,
            timeout=self.timeout,
            source=f"suggestions:{source}",
            default=[],
            propagate_configuration=False
        )

    async def suggest(self, partial: str, limit: int = None) -> List[Suggestion]:
        """
        Suggestions for a partial query.

        Args:
            partial: Partial query text
            limit: Maximum suggestions (default from config)

        Returns:
            Suggestions; empty without touching any source when the trimmed
            query is shorter than the minimum length
        """
        limit = limit or self.config['default_limit']
        partial = (partial or '').strip()

        if len(partial) < self.config['min_query_length']:
            return []

        popular, titles, synonyms = await asyncio.gather(
            self._source(self.store.popular_queries, partial, self.config['popular_limit'], POPULAR),
            self._source(self.store.matching_titles, partial, self.config['title_limit'], ARTICLE_TITLE),
            self._source(self.store.matching_synonyms, partial, self.config['synonym_limit'], SYNONYM),
        )

        for outcome in (popular, titles, synonyms):
            if outcome.is_degraded:
                logger.warning(f"Suggestion source degraded: {outcome.reason}")

        suggestions = []

        for row in popular.value_or([]):
            suggestions.append(Suggestion(
                text=row.get('suggestion') or '',
                type=POPULAR,
                count=row.get('search_count') or 0
            ))

        for row in titles.value_or([]):
            suggestions.append(Suggestion(
                text=row.get('title') or '',
                type=ARTICLE_TITLE,
                count=row.get('view_count') or 0
            ))

        needle = partial.lower()
        for row in synonyms.value_or([]):
            weight = row.get('weight') or 0
            suggestions.append(Suggestion(
                text=row.get('term') or '',
                type=SYNONYM,
                count=weight * self.config['synonym_multiplier']
            ))
            for synonym in row.get('synonyms') or []:
                if isinstance(synonym, str) and needle in synonym.lower():
                    suggestions.append(Suggestion(
                        text=synonym,
                        type=SYNONYM_MATCH,
                        count=weight * self.config['synonym_match_multiplier']
                    ))

        merged = merge_suggestions(suggestions, limit, self.config['source_priority'])
        logger.debug(f"Suggestions for '{partial}': {len(suggestions)} raw, {len(merged)} merged")

        return merged
