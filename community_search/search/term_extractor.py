"""
Term extraction for natural-language search queries.

This module:
1. Captures the subject word of common question forms ("how do i X")
2. Splits the query into words and drops stop words and short tokens
3. Returns the union as an ordered, de-duplicated term list
"""

import re
from typing import Dict, List, Optional
import logging

from community_search.config.search_config import TERM_CONFIG

logger = logging.getLogger("search")


class TermExtractor:
    """
    Derives normalized search terms from a raw query.

    Features:
    - Interrogative pattern capture (how do i / how to / what is / where is / can i)
    - Stop-word and short-token filtering
    - First-seen order preserved, duplicates removed

    Extraction is a pure function of the query text, so the same query
    always yields the same terms.
    """

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize term extractor.

        Args:
            config: Term configuration (defaults to TERM_CONFIG)
        """
        self.config = config or TERM_CONFIG

        self.stop_words = frozenset(self.config.get('stop_words', []))
        self.min_token_length = self.config.get('min_token_length', 3)
        self.strip_chars = self.config.get('strip_chars', '')

        self.compiled_patterns = [
            re.compile(pattern) for pattern in self.config.get('patterns', [])
        ]

        logger.debug(
            f"Loaded term extractor with {len(self.compiled_patterns)} patterns, "
            f"{len(self.stop_words)} stop words"
        )

    def extract(self, query: str) -> List[str]:
        """
        Extract key terms from a query.

        Args:
            query: Raw query text

        Returns:
            Ordered list of lowercase terms; empty when the query holds
            nothing but stop words and short tokens
        """
        if not query:
            return []

        query_lower = query.lower()
        terms = []

        # Subject word of question forms
        for pattern in self.compiled_patterns:
            match = pattern.search(query_lower)
            if match and match.group(1):
                terms.append(match.group(1))

        # Remaining salient words
        for word in query_lower.split():
            word = word.strip(self.strip_chars)
            if len(word) < self.min_token_length or word in self.stop_words:
                continue
            terms.append(word)

        # dict preserves insertion order
        return list(dict.fromkeys(terms))


def extract_terms(query: str) -> List[str]:
    """
    Convenience function to extract terms with the default configuration.

    Args:
        query: Raw query text

    Returns:
        Ordered term list
    """
    return TermExtractor().extract(query)
