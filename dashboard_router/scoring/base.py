"""Contract for pluggable confidence scorers."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ..models import AppContextData, ConfidenceExplanation, ConfidenceResult

# Score bands used to describe how sure a routing decision is
THRESHOLDS = {
    "HIGH": 0.85,
    "MEDIUM": 0.65,
    "LOW": 0.45,
}

ContextAccessor = Callable[[str], Optional[AppContextData]]


def threshold_label(score: float) -> str:
    """
    Name the band a score falls into.

    Returns:
        "HIGH", "MEDIUM", "LOW" or "BELOW_THRESHOLD"
    """
    for label in ("HIGH", "MEDIUM", "LOW"):
        if score >= THRESHOLDS[label]:
            return label
    return "BELOW_THRESHOLD"


class ConfidenceScorer(ABC):
    """Ranks adapters by relevance to a query."""

    THRESHOLDS = THRESHOLDS

    @abstractmethod
    async def calculate_confidence(
        self,
        query: str,
        adapters: List,
        context_accessor: ContextAccessor
    ) -> List[ConfidenceResult]:
        """
        Score every adapter for a query.

        Args:
            query: Preprocessed query text
            adapters: Registered AppAdapter instances
            context_accessor: Returns an app's AppContextData (or None) by name

        Returns:
            ConfidenceResult per adapter, most relevant first

        Raises:
            ConfidenceServiceError: If no ranking can be produced
        """
        pass

    @abstractmethod
    def explain_confidence(self, query: str, adapter_name: str) -> ConfidenceExplanation:
        """
        Explain the score an adapter received for a query.

        Raises:
            ConfidenceServiceError: If the score cannot be explained
        """
        pass

    @abstractmethod
    def clear_cache(self) -> None:
        """Drop any cached scores."""
        pass
