"""Capability interfaces every dashboard mini-app adapter implements."""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Optional, Union

from ..models import AggregateableData, AppContextData

Unsubscribe = Callable[[], None]


class AppAdapter(ABC):
    """Abstract base class for dashboard mini-app adapters."""

    app_name: str = ""
    display_name: str = ""
    icon: Optional[str] = None

    @abstractmethod
    def get_context_data(self) -> AppContextData:
        """
        Produce a fresh snapshot of the app's state.

        May raise; the registry isolates the failure.

        Returns:
            AppContextData whose app_name equals this adapter's app_name
        """
        pass

    @abstractmethod
    def get_keywords(self) -> List[str]:
        """
        Return the static keyword set used for keyword matching.

        Returns:
            List of lowercase keywords
        """
        pass

    @abstractmethod
    async def get_confidence(self, query: str) -> float:
        """
        Adapter-local relevance heuristic for a query.

        Args:
            query: Preprocessed query text

        Returns:
            Score in [0, 1]
        """
        pass

    @abstractmethod
    async def get_response(self, query: str) -> Optional[str]:
        """
        Answer a query once this adapter has been selected.

        Args:
            query: User query

        Returns:
            Natural-language answer, or None/empty when the app has nothing to say
        """
        pass

    @abstractmethod
    def subscribe(self, callback: Callable[[Any], None]) -> Unsubscribe:
        """
        Register a callback fired whenever the app's internal state changes.

        Args:
            callback: Called with the adapter's new data

        Returns:
            Function that removes the callback
        """
        pass


class SearchableAdapter(ABC):
    """Optional capability: free-text search within the app's data."""

    @abstractmethod
    async def search(self, query: str) -> List[Any]:
        """
        Search the app's data.

        Args:
            query: Search text

        Returns:
            List of opaque result items (empty when nothing matches)
        """
        pass


class AggregatingAdapter(ABC):
    """Optional capability: contribute typed counters to cross-app answers."""

    def supports_aggregation(self) -> bool:
        """Return True while the adapter has aggregation data to offer."""
        return True

    @abstractmethod
    def get_aggregate_data(self) -> Union[List[AggregateableData], Awaitable[List[AggregateableData]]]:
        """
        Return the adapter's counters, grouped by data type.

        May be a plain method or a coroutine.

        Returns:
            List of AggregateableData entries
        """
        pass


def supports_search(adapter: AppAdapter) -> bool:
    """Check whether an adapter offers search."""
    return isinstance(adapter, SearchableAdapter)


def supports_aggregation(adapter: AppAdapter) -> bool:
    """Check whether an adapter currently offers aggregation data."""
    return isinstance(adapter, AggregatingAdapter) and adapter.supports_aggregation()
