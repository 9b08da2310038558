"""
Parameterized SQL builder for content-store queries.

User text only ever travels as bound parameters; LIKE wildcards inside it
are escaped so a query for "50%" matches the literal text. Table and
column names come from trusted type descriptors.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging

from community_search.search.content_types import TypeDescriptor

logger = logging.getLogger("store")

LIKE_ESCAPE = "\\"

# Registered on every store connection; SQLite's own LOWER and LIKE fold ASCII only
LOWER_FUNCTION = "py_lower"


def unicode_lower(value):
    """Full Unicode lowercase, also exposed to SQL as LOWER_FUNCTION."""
    return value.lower() if isinstance(value, str) else value


@dataclass
class RecordQuery:
    """
    Filtered, pattern-matched listing of one content type.

    A record matches when its status permits public listing, it belongs to
    ``category_id`` (when given), and any of ``fields`` contains any of
    ``patterns`` as a case-insensitive substring.
    """
    descriptor: TypeDescriptor
    patterns: List[str]
    fields: List[str] = field(default_factory=list)
    category_id: Optional[str] = None
    limit: int = 50

    def __post_init__(self):
        if not self.fields:
            self.fields = list(self.descriptor.text_fields)


class PredicateBuilder:
    """Builds parameterized SELECT statements for RecordQuery objects."""

    @staticmethod
    def escape_like(value: str) -> str:
        """Escape LIKE wildcards so the value matches literally."""
        return (
            value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
            .replace("%", LIKE_ESCAPE + "%")
            .replace("_", LIKE_ESCAPE + "_")
        )

    @staticmethod
    def contains_pattern(value: str) -> str:
        """LIKE parameter matching lowercased ``value`` anywhere in a lowercased column."""
        return f"%{PredicateBuilder.escape_like(unicode_lower(value))}%"

    @staticmethod
    def contains(column: str, value: str) -> Tuple[str, List]:
        """Case-insensitive substring predicate for one column."""
        return (
            f"{LOWER_FUNCTION}({column}) LIKE ? ESCAPE '{LIKE_ESCAPE}'",
            [PredicateBuilder.contains_pattern(value)]
        )

    @staticmethod
    def status_clause(descriptor: TypeDescriptor) -> Tuple[str, List]:
        operator = "!=" if descriptor.status_excluded else "="
        return f"{descriptor.status_field} {operator} ?", [descriptor.status_value]

    @staticmethod
    def build_where_clause(query: RecordQuery) -> Tuple[str, List]:
        """
        Build the WHERE clause for a record query.

        Args:
            query: Record query

        Returns:
            Tuple of (clause without the WHERE keyword, parameters)
        """
        descriptor = query.descriptor
        conditions = []
        params: List = []

        # Public listing only
        clause, clause_params = PredicateBuilder.status_clause(descriptor)
        conditions.append(clause)
        params.extend(clause_params)

        # Category filter
        if query.category_id:
            conditions.append(f"{descriptor.category_field} = ?")
            params.append(query.category_id)

        # Any pattern in any text field
        matches = []
        for pattern in query.patterns:
            if not pattern:
                continue
            for column in query.fields:
                clause, clause_params = PredicateBuilder.contains(column, pattern)
                matches.append(clause)
                params.extend(clause_params)

        if matches:
            conditions.append("(" + " OR ".join(matches) + ")")
        else:
            # Nothing to match against
            conditions.append("0")

        where_clause = " AND ".join(conditions)
        logger.debug(f"Built WHERE clause: {where_clause} ({len(params)} params)")

        return where_clause, params

    @staticmethod
    def build_select(query: RecordQuery) -> Tuple[str, List]:
        """
        Build the full SELECT for a record query.

        Columns are normalized to: id, title, body, secondary, description,
        author_id, category_id, view_count, like_count, created_at, boosted.
        Rows come back most viewed first, then newest first.
        """
        d = query.descriptor
        where_clause, params = PredicateBuilder.build_where_clause(query)

        sql = f"""
            SELECT
                id,
                {d.title_field} AS title,
                {d.body_field} AS body,
                {d.secondary_field or "''"} AS secondary,
                {d.description_field} AS description,
                {d.author_field} AS author_id,
                {d.category_field} AS category_id,
                {d.views_field or '0'} AS view_count,
                {d.engagement_field or '0'} AS like_count,
                {d.created_field} AS created_at,
                {d.boost_field or '0'} AS boosted
            FROM {d.table}
            WHERE {where_clause}
            ORDER BY view_count DESC, created_at DESC
            LIMIT ?
        """
        params.append(int(query.limit))

        return sql, params
