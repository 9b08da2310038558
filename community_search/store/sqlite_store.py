"""
SQLite implementation of the content store.
"""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from community_search.config.search_config import CONCURRENCY_CONFIG
from community_search.search.errors import ConfigurationError, UpstreamQueryError
from community_search.search.records import AnalyticsEvent
from .base import ContentStore
from .predicates import LOWER_FUNCTION, PredicateBuilder, RecordQuery, unicode_lower

logger = logging.getLogger("store")


class SqliteContentStore(ContentStore):
    """
    Content store backed by a SQLite file.

    Each call opens its own connection, so one instance can be shared by
    every worker thread. The file is opened in read-write mode without
    create; a missing database is a configuration problem, not an empty one.
    """

    def __init__(self, db_path: str, timeout: float = None):
        """
        Initialize content store.

        Args:
            db_path: Path to the SQLite database file
            timeout: Seconds to wait on a locked database
        """
        self.db_path = Path(db_path)
        self.timeout = timeout or CONCURRENCY_CONFIG['store_timeout_seconds']

    @contextmanager
    def _connect(self):
        """Yield a connection; map connection failures to ConfigurationError."""
        if not self.db_path.exists():
            raise ConfigurationError(f"Content store not found at {self.db_path}")

        try:
            conn = sqlite3.connect(
                self.db_path.resolve().as_uri() + "?mode=rw",
                uri=True,
                timeout=self.timeout,
                check_same_thread=False
            )
        except sqlite3.Error as e:
            raise ConfigurationError(f"Content store unavailable: {e}")

        conn.row_factory = sqlite3.Row
        conn.create_function(LOWER_FUNCTION, 1, unicode_lower, deterministic=True)
        try:
            yield conn
        finally:
            conn.close()

    def _fetch(self, sql: str, params: List, source: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            try:
                cursor = conn.execute(sql, params)
                return [dict(row) for row in cursor.fetchall()]
            except sqlite3.Error as e:
                logger.error(f"Store query failed ({source}): {e}")
                raise UpstreamQueryError(f"{source} query failed: {e}")

    def find_records(self, query: RecordQuery) -> List[Dict[str, Any]]:
        sql, params = PredicateBuilder.build_select(query)
        return self._fetch(sql, params, query.descriptor.table)

    def related_articles(
        self,
        category_id: str,
        exclude_id: Optional[str],
        limit: int
    ) -> List[Dict[str, Any]]:
        sql = """
            SELECT
                'article' AS content_type,
                id,
                title,
                excerpt AS description,
                category_id,
                view_count,
                created_at
            FROM content_articles
            WHERE category_id = ?
              AND id != ?
              AND status = 'published'
            ORDER BY view_count DESC, created_at DESC
            LIMIT ?
        """
        return self._fetch(sql, [category_id, exclude_id or '', int(limit)], "related_articles")

    def popular_queries(self, partial: str, limit: int) -> List[Dict[str, Any]]:
        sql = """
            SELECT
                MIN(TRIM(original_query)) AS suggestion,
                COUNT(*) AS search_count
            FROM search_analytics
            WHERE py_lower(original_query) LIKE ? ESCAPE '\\'
            GROUP BY py_lower(TRIM(original_query))
            ORDER BY search_count DESC, suggestion
            LIMIT ?
        """
        params = [PredicateBuilder.contains_pattern(partial), int(limit)]
        return self._fetch(sql, params, "popular_queries")

    def matching_titles(self, partial: str, limit: int) -> List[Dict[str, Any]]:
        sql = """
            SELECT title, MAX(view_count) AS view_count
            FROM content_articles
            WHERE status = 'published'
              AND py_lower(title) LIKE ? ESCAPE '\\'
            GROUP BY title
            ORDER BY view_count DESC
            LIMIT ?
        """
        params = [PredicateBuilder.contains_pattern(partial), int(limit)]
        return self._fetch(sql, params, "matching_titles")

    def matching_synonyms(self, partial: str, limit: int) -> List[Dict[str, Any]]:
        sql = """
            SELECT term, synonyms, weight
            FROM search_synonyms
            WHERE py_lower(term) LIKE ? ESCAPE '\\'
               OR EXISTS (
                   SELECT 1 FROM json_each(
                       CASE WHEN json_valid(search_synonyms.synonyms)
                            THEN search_synonyms.synonyms ELSE '[]' END
                   )
                   WHERE py_lower(json_each.value) = ?
               )
            ORDER BY weight DESC
            LIMIT ?
        """
        params = [PredicateBuilder.contains_pattern(partial), unicode_lower(partial), int(limit)]
        rows = self._fetch(sql, params, "matching_synonyms")

        for row in rows:
            try:
                synonyms = json.loads(row.get('synonyms') or '[]')
            except ValueError:
                logger.warning(f"Malformed synonyms for term {row.get('term')!r}")
                synonyms = []
            row['synonyms'] = synonyms if isinstance(synonyms, list) else []
            row['weight'] = row.get('weight') or 0

        return rows

    def record_search(self, event: AnalyticsEvent) -> None:
        sql = """
            INSERT INTO search_analytics
                (original_query, expanded_query, user_id, results_count, response_time_ms)
            VALUES (?, ?, ?, ?, ?)
        """
        params = [
            event.original_query,
            event.expanded_query,
            event.user_id,
            event.results_count,
            event.response_time_ms,
        ]
        with self._connect() as conn:
            try:
                conn.execute(sql, params)
                conn.commit()
            except sqlite3.Error as e:
                raise UpstreamQueryError(f"analytics write failed: {e}")

    def ping(self) -> bool:
        try:
            with self._connect() as conn:
                conn.execute("SELECT 1")
            return True
        except (ConfigurationError, sqlite3.Error) as e:
            logger.warning(f"Store ping failed: {e}")
            return False
