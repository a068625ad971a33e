"""Keyword-matching base class with the behaviour most adapters share."""

import logging
import re
from typing import Any, Callable, Dict, List, Optional

from .base import AppAdapter, Unsubscribe

logger = logging.getLogger(__name__)

EXACT_MATCH_CONFIDENCE = 0.9
PARTIAL_MATCH_CONFIDENCE = 0.3

# Phrases that ask for recommendations rather than app status
ADVICE_PATTERNS = [
    "what should", "how to", "how do i", "recommend",
    "suggestion", "advice", "tips", "help me", "guide",
    "best way", "improve", "better", "plan",
    "strategy", "method", "approach", "technique",
    "organize",
]

DEFAULT_CAPABILITIES = ["data-access", "query-response", "real-time-updates"]


class KeywordAdapter(AppAdapter):
    """
    Adapter base that scores queries by keyword overlap.

    Subclasses provide get_context_data() and get_keywords(); everything
    else has a working default.
    """

    def __init__(self):
        self._subscribers: List[Callable[[Any], None]] = []
        self._regex_cache: Dict[str, "re.Pattern[str]"] = {}

    def subscribe(self, callback: Callable[[Any], None]) -> Unsubscribe:
        """Register a change callback and return its remover."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def notify_subscribers(self, data: Any = None) -> None:
        """
        Tell every subscriber the app's state changed.

        A failing subscriber is logged and does not stop the others.
        """
        for callback in list(self._subscribers):
            try:
                callback(data)
            except Exception:
                logger.error(
                    "Error notifying subscriber in %s",
                    self.app_name,
                    exc_info=True,
                    extra={
                        "component": f"{self.app_name}Adapter",
                        "action": "notify_subscribers",
                        "app_name": self.app_name,
                    },
                )

    async def get_confidence(self, query: str) -> float:
        return self.get_keyword_confidence(query)

    def get_keyword_confidence(self, query: str) -> float:
        """
        Score a query against the adapter's keywords.

        A whole-word match scores 0.9, a match inside a longer word 0.3.

        Args:
            query: Query text

        Returns:
            Best score over all keywords
        """
        lower_query = query.lower()
        max_confidence = 0.0

        for keyword in self.get_keywords():
            keyword = keyword.lower()
            if not keyword:
                continue
            if self._keyword_regex(keyword).search(lower_query):
                max_confidence = max(max_confidence, EXACT_MATCH_CONFIDENCE)
            elif keyword in lower_query:
                max_confidence = max(max_confidence, PARTIAL_MATCH_CONFIDENCE)

        return max_confidence

    def _keyword_regex(self, keyword: str) -> "re.Pattern[str]":
        regex = self._regex_cache.get(keyword)
        if regex is None:
            regex = re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)
            self._regex_cache[keyword] = regex
        return regex

    def is_asking_for_advice(self, query: str) -> bool:
        """Check if the user wants recommendations rather than status."""
        lower_query = query.lower()
        return any(pattern in lower_query for pattern in ADVICE_PATTERNS)

    async def get_response(self, query: str) -> Optional[str]:
        """Default answer: the app's current summary. Subclasses usually override."""
        context = self.get_context_data()
        if not context.is_active or context.data is None:
            return self.get_inactive_response()
        return f"I can help you with {self.display_name}. {context.summary}".strip()

    def get_inactive_response(self) -> str:
        return f"The {self.display_name} app is not currently active or has no data available."

    def get_capabilities(self) -> List[str]:
        return list(DEFAULT_CAPABILITIES)

    @staticmethod
    def safe_get(obj: Any, path: str, default: Any = None) -> Any:
        """Follow a dotted key path through nested dicts, returning default on any miss."""
        result = obj
        for key in path.split("."):
            if isinstance(result, dict) and key in result:
                result = result[key]
            else:
                return default
        return result

    def search_in_fields(
        self,
        data: Dict[str, Any],
        query: str,
        fields: List[Dict[str, str]]
    ) -> List[Dict[str, str]]:
        """
        Case-insensitive substring search over selected fields of a record.

        Args:
            data: Record to search
            query: Search text
            fields: Dicts with 'path', 'label' and optional 'type'

        Returns:
            One hit per matching field with 'type', 'label', 'value', 'field'
        """
        lower_query = query.lower()
        results = []
        for field_spec in fields:
            value = self.safe_get(data, field_spec["path"], "")
            if value and lower_query in str(value).lower():
                results.append({
                    "type": field_spec.get("type", "field"),
                    "label": field_spec["label"],
                    "value": str(value),
                    "field": field_spec["path"],
                })
        return results
