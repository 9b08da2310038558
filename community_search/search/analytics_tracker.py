"""
Analytics recorder for search queries.

This module:
- Writes one analytics event per authenticated search to the store
- Never raises: write failures are logged and dropped
- Keeps in-process counters for the health endpoint
"""

from concurrent.futures import Executor
from datetime import datetime, timezone
from typing import Dict, Optional
import logging

from community_search.common.outcome import Outcome
from community_search.config.search_config import CONCURRENCY_CONFIG
from community_search.store.base import ContentStore
from .errors import AnalyticsWriteError
from .records import AnalyticsEvent
from .store_calls import call_store

logger = logging.getLogger("search")


class AnalyticsRecorder:
    """
    Best-effort analytics sink writer.

    Features:
    - Fire-and-forget writes (scheduled after the response is sent)
    - Failure isolation (errors never reach the search response)
    - Running totals of recorded, failed and zero-result searches
    """

    def __init__(
        self,
        store: ContentStore,
        executor: Executor,
        timeout: float = None,
        max_no_result_queries: int = 100
    ):
        """
        Initialize analytics recorder.

        Args:
            store: Content store acting as the analytics sink
            executor: Worker pool for the blocking write
            timeout: Seconds before a write is abandoned
            max_no_result_queries: Zero-result queries kept for inspection
        """
        self.store = store
        self.executor = executor
        self.timeout = timeout or CONCURRENCY_CONFIG['analytics_timeout_seconds']
        self.max_no_result_queries = max_no_result_queries

        self.stats = {
            'total_recorded': 0,
            'total_failed': 0,
            'searches_with_no_results': [],
            'last_recorded': None,
        }

    async def record(self, event: Optional[AnalyticsEvent]) -> Outcome:
        """
        Write an analytics event.

        Anonymous searches (no user id) are not recorded.

        Args:
            event: Event to write, or None

        Returns:
            Outcome of the write; never raises
        """
        if event is None or not event.user_id:
            return Outcome.ok(None, "analytics")

        try:
            outcome = await call_store(
                self.executor,
                self.store.record_search,
                event,
                timeout=self.timeout,
                source="analytics",
                propagate_configuration=False
            )
            if not outcome.is_ok:
                raise AnalyticsWriteError(outcome.reason or "analytics write failed")

        except AnalyticsWriteError as e:
            self.stats['total_failed'] += 1
            logger.warning(f"Analytics recording failed: {e.message}")
            return Outcome.failed(e.message, "analytics")

        except Exception as e:
            self.stats['total_failed'] += 1
            logger.error(f"Error recording analytics: {e}", exc_info=True)
            return Outcome.failed(str(e), "analytics")

        self._track(event)
        return outcome

    def _track(self, event: AnalyticsEvent):
        self.stats['total_recorded'] += 1
        self.stats['last_recorded'] = datetime.now(timezone.utc).isoformat()

        if event.results_count == 0:
            no_results = self.stats['searches_with_no_results']
            no_results.append(event.original_query)
            if len(no_results) > self.max_no_result_queries:
                no_results.pop(0)

    def get_stats(self) -> Dict:
        """
        Get analytics statistics summary.

        Returns:
            Dictionary with analytics stats
        """
        return {
            'total_recorded': self.stats['total_recorded'],
            'total_failed': self.stats['total_failed'],
            'no_results_count': len(self.stats['searches_with_no_results']),
            'last_recorded': self.stats['last_recorded'],
        }
