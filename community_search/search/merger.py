"""
Merge per-type result sets into one ranked page.
"""

from dataclasses import dataclass
from typing import Iterable, List

from .records import SearchCandidate


@dataclass
class ResultPage:
    """One page of merged results."""
    results: List[SearchCandidate]
    has_more: bool


def merge_results(
    result_sets: Iterable[List[SearchCandidate]],
    limit: int,
    offset: int = 0
) -> ResultPage:
    """
    Concatenate result sets, order by rank and slice one page.

    The sort is stable, so equal ranks keep per-type insertion order.
    ``has_more`` is true when the page is full; it is a heuristic and can
    be true when nothing follows.

    Args:
        result_sets: Ranked results per content type, in request order
        limit: Page size
        offset: Results to skip

    Returns:
        ResultPage
    """
    merged = []
    for results in result_sets:
        merged.extend(results)

    merged.sort(key=lambda c: c.rank, reverse=True)
    page = merged[offset:offset + limit]

    return ResultPage(results=page, has_more=len(page) == limit)
