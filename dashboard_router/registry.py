"""Adapter registry: context caching, routing, search fan-out and cross-app aggregation."""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .adapters.base import AppAdapter, Unsubscribe, supports_aggregation, supports_search
from .aggregation import aggregate_entries, detect_concept, format_aggregate_response, is_cross_app_query
from .cache import ContextCache
from .config import ADAPTER_TIMEOUT, CACHE_TTL_MS, MIN_CONFIDENCE
from .exceptions import AdapterDataError, AdapterError, AdapterTimeoutError
from .models import (
    AggregateableData,
    AggregateResult,
    AppContextData,
    DashboardSnapshot,
    QueryResponse,
    RankedAdapter,
    SearchResult,
)
from .scoring import ConfidenceScorer, HybridConfidenceScorer
from .text_preprocessor import TextPreprocessor
from .utils import EventEmitter

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "apps"
CHANGE_EVENT = "change"
DASHBOARD_APP_NAME = "dashboard"
NO_ACTIVE_APPS = "No active dashboard apps"

Listener = Callable[[DashboardSnapshot], None]


class AppRegistry:
    """
    Owns the registered adapters and everything derived from them.

    One instance is constructed by the caller and passed to whatever needs
    it. All state is in-memory and owned by this object; listener callbacks
    run synchronously inside the mutation that triggered them.
    """

    def __init__(
        self,
        scorer: Optional[ConfidenceScorer] = None,
        preprocessor: Optional[TextPreprocessor] = None,
        cache_ttl_ms: int = CACHE_TTL_MS,
        min_confidence: float = MIN_CONFIDENCE,
        adapter_timeout: float = ADAPTER_TIMEOUT,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize the registry.

        Args:
            scorer: Confidence scorer (defaults to HybridConfidenceScorer)
            preprocessor: Query preprocessor (defaults to TextPreprocessor)
            cache_ttl_ms: How long an adapter's context data stays fresh
            min_confidence: Ranked adapters below this score are dropped
            adapter_timeout: Deadline in seconds for async adapter calls (0 = none)
            clock: Callable returning epoch milliseconds
        """
        self.scorer = scorer or HybridConfidenceScorer(clock=clock)
        self.preprocessor = preprocessor or TextPreprocessor()
        self.min_confidence = min_confidence
        self.adapter_timeout = adapter_timeout
        self._adapters: Dict[str, AppAdapter] = {}
        self._adapter_subscriptions: Dict[str, Unsubscribe] = {}
        self._cache = ContextCache(default_ttl=cache_ttl_ms, clock=clock)
        self._events = EventEmitter()

    # Registration

    def register_adapter(self, adapter: AppAdapter) -> None:
        """
        Register an adapter, replacing any adapter with the same app name.

        Context data cached for a previous adapter of that name is kept until
        it expires or is invalidated. Cached confidence scores are dropped
        since they hold the adapter instances they were computed for.
        """
        app_name = adapter.app_name
        unsubscribe = adapter.subscribe(lambda _data: self._on_adapter_update(app_name))
        self._drop_subscription(app_name)
        self._adapters[app_name] = adapter
        self._adapter_subscriptions[app_name] = unsubscribe
        self.scorer.clear_cache()
        logger.debug(
            "Registered adapter %s",
            app_name,
            extra={"component": "AppRegistry", "action": "register_adapter", "app_name": app_name},
        )
        self._notify_listeners()

    def unregister_adapter(self, app_name: str) -> None:
        """Remove an adapter. Unknown names are ignored."""
        if app_name in self._adapters:
            self._drop_subscription(app_name)
            del self._adapters[app_name]
            self._cache.invalidate(CACHE_NAMESPACE, app_name)
            self.scorer.clear_cache()
            logger.debug(
                "Unregistered adapter %s",
                app_name,
                extra={"component": "AppRegistry", "action": "unregister_adapter", "app_name": app_name},
            )
        self._notify_listeners()

    def get_adapter(self, app_name: str) -> Optional[AppAdapter]:
        return self._adapters.get(app_name)

    @property
    def app_names(self) -> List[str]:
        """Registered app names in registration order."""
        return list(self._adapters)

    def _drop_subscription(self, app_name: str) -> None:
        unsubscribe = self._adapter_subscriptions.pop(app_name, None)
        if unsubscribe is not None:
            unsubscribe()

    def _on_adapter_update(self, app_name: str) -> None:
        self._cache.invalidate(CACHE_NAMESPACE, app_name)
        self.scorer.clear_cache()
        self._notify_listeners()

    # Context data

    def get_app_data(self, app_name: str) -> Optional[AppContextData]:
        """
        Get an app's context data, from cache while fresh.

        Adapter failures are logged and reported as None; nothing is cached
        for a failed fetch.

        Args:
            app_name: Registered app name

        Returns:
            AppContextData, or None if the app is unknown or its adapter failed
        """
        adapter = self._adapters.get(app_name)
        if adapter is None:
            return None

        entry = self._cache.get_entry(CACHE_NAMESPACE, app_name)
        if entry is not None:
            return entry.value

        try:
            data = self._fetch_context(app_name, adapter)
        except AdapterDataError as e:
            self._log_adapter_error(e)
            return None

        self._cache.set(CACHE_NAMESPACE, app_name, data)
        return data

    def _fetch_context(self, app_name: str, adapter: AppAdapter) -> AppContextData:
        try:
            data = adapter.get_context_data()
        except Exception as e:
            raise AdapterDataError(app_name, "get_context_data", str(e)) from e

        if not isinstance(data, AppContextData):
            raise AdapterDataError(
                app_name,
                "get_context_data",
                f"Adapter returned {type(data).__name__} instead of AppContextData",
            )
        if data.app_name != app_name:
            raise AdapterDataError(
                app_name,
                "get_context_data",
                f"Adapter returned context for '{data.app_name}'",
            )
        return data

    def get_all_app_data(self) -> DashboardSnapshot:
        """
        Snapshot every registered app's context data.

        Apps whose adapter fails are left out.
        """
        apps: Dict[str, AppContextData] = {}
        active_apps: List[str] = []
        for app_name in list(self._adapters):
            data = self.get_app_data(app_name)
            if data is None:
                continue
            apps[app_name] = data
            if data.is_active:
                active_apps.append(app_name)

        return DashboardSnapshot(apps=apps, active_apps=active_apps, last_updated=self._cache.now())

    def get_all_keywords(self) -> Dict[str, List[str]]:
        return {app_name: adapter.get_keywords() for app_name, adapter in self._adapters.items()}

    def invalidate_cache(self, app_name: Optional[str] = None) -> None:
        """Drop cached context data for one app, or for every app when app_name is None."""
        self._cache.invalidate(CACHE_NAMESPACE, app_name)

    # Routing

    async def get_apps_with_confidence(self, query: str) -> List[RankedAdapter]:
        """
        Rank registered adapters for a query.

        Scorer failures propagate to the caller.

        Args:
            query: Raw user query

        Returns:
            Adapters scoring at least min_confidence, in the scorer's order
        """
        normalized = self.preprocessor.preprocess(query).normalized
        scores = await self.scorer.calculate_confidence(
            normalized,
            list(self._adapters.values()),
            self.get_app_data,
        )
        return [
            RankedAdapter(adapter=score.adapter, confidence=score.total_score, result=score)
            for score in scores
            if score.total_score >= self.min_confidence
        ]

    async def explain_confidence(self, query: str, app_name: str) -> Optional[str]:
        """
        Describe how an app's score for a query was produced.

        Returns:
            Multi-line explanation, or None if the app is unknown or scoring fails
        """
        if app_name not in self._adapters:
            return None

        normalized = self.preprocessor.preprocess(query).normalized
        try:
            await self.scorer.calculate_confidence(
                normalized,
                list(self._adapters.values()),
                self.get_app_data,
            )
            explanation = self.scorer.explain_confidence(normalized, app_name)
        except Exception:
            logger.warning(
                "Could not explain confidence for %s",
                app_name,
                exc_info=True,
                extra={"component": "AppRegistry", "action": "explain_confidence", "app_name": app_name},
            )
            return None

        return explanation.to_text()

    async def get_response_for_query(self, query: str) -> Optional[QueryResponse]:
        """
        Answer a query from the dashboard.

        Cross-app queries with aggregation data are answered as the
        "dashboard" app. Otherwise the ranked adapters are asked in order and
        the first non-empty response wins.

        Args:
            query: Raw user query

        Returns:
            QueryResponse, or None if no adapter could answer
        """
        aggregate = await self.aggregate(query)
        if aggregate is not None and not aggregate.is_empty:
            return QueryResponse(
                app_name=DASHBOARD_APP_NAME,
                response=format_aggregate_response(aggregate),
                confidence=1.0,
            )

        for ranked in await self.get_apps_with_confidence(query):
            app_name = ranked.adapter.app_name
            try:
                response = await self._call_adapter(app_name, "get_response", ranked.adapter.get_response(query))
            except AdapterError as e:
                self._log_adapter_error(e)
                continue
            if response:
                return QueryResponse(app_name=app_name, response=response, confidence=ranked.confidence)

        return None

    # Fan-out

    async def search_all_apps(self, query: str) -> List[SearchResult]:
        """
        Search every searchable app concurrently.

        Failing adapters and adapters with no hits are left out; results
        follow registration order.
        """
        searchable = [(name, adapter) for name, adapter in self._adapters.items() if supports_search(adapter)]
        outcomes = await asyncio.gather(
            *(self._call_adapter(name, "search", adapter.search(query)) for name, adapter in searchable),
            return_exceptions=True,
        )

        results = []
        for (app_name, _), outcome in zip(searchable, outcomes):
            if isinstance(outcome, AdapterError):
                self._log_adapter_error(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome:
                results.append(SearchResult(app_name=app_name, results=list(outcome)))
        return results

    async def get_aggregated_data(self) -> Dict[str, List[AggregateableData]]:
        """
        Collect aggregation entries from every aggregating app concurrently.

        Returns:
            Dict of app_name -> entries, in registration order
        """
        names = list(self._adapters)
        outcomes = await asyncio.gather(
            *(
                self._call_adapter(name, "get_aggregate_data", self._collect_aggregate(self._adapters[name]))
                for name in names
            ),
            return_exceptions=True,
        )

        collected: Dict[str, List[AggregateableData]] = {}
        for app_name, outcome in zip(names, outcomes):
            if isinstance(outcome, AdapterError):
                self._log_adapter_error(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome is not None:
                collected[app_name] = outcome
        return collected

    @staticmethod
    async def _collect_aggregate(adapter: AppAdapter) -> Optional[List[AggregateableData]]:
        if not supports_aggregation(adapter):
            return None
        data = adapter.get_aggregate_data()
        if inspect.isawaitable(data):
            data = await data
        return list(data)

    async def aggregate(self, query: str) -> Optional[AggregateResult]:
        """
        Sum aggregation counters for a cross-app query.

        Returns:
            AggregateResult, or None if the query is not a cross-app query
        """
        normalized = self.preprocessor.preprocess(query).normalized
        if not is_cross_app_query(normalized):
            return None

        data = await self.get_aggregated_data()
        entries = [entry for app_entries in data.values() for entry in app_entries]
        return aggregate_entries(normalized, entries, detect_concept(normalized))

    async def _call_adapter(self, app_name: str, action: str, awaitable: Awaitable[Any]) -> Any:
        """Await an adapter call under the registry deadline, converting failures to AdapterError."""
        try:
            if self.adapter_timeout > 0:
                return await asyncio.wait_for(awaitable, timeout=self.adapter_timeout)
            return await awaitable
        except asyncio.TimeoutError as e:
            raise AdapterTimeoutError(
                app_name, action, f"{action} timed out after {self.adapter_timeout}s"
            ) from e
        except Exception as e:
            raise AdapterDataError(app_name, action, str(e)) from e

    # Context text

    def get_context_summary(self) -> str:
        """One line per active app that has a summary."""
        snapshot = self.get_all_app_data()
        lines = []
        for app_name in snapshot.active_apps:
            data = snapshot.apps[app_name]
            if data.summary:
                lines.append(f"{data.display_name}: {data.summary}")

        if not lines:
            return NO_ACTIVE_APPS
        return "Dashboard Apps:\n" + "\n".join(lines)

    def get_detailed_context(self, app_names: Optional[List[str]] = None) -> str:
        """
        Verbose status block per app.

        Args:
            app_names: Apps to describe (defaults to every registered app)

        Returns:
            Text with one block per app that returned context data
        """
        blocks = []
        for app_name in app_names if app_names is not None else list(self._adapters):
            data = self.get_app_data(app_name)
            if data is None:
                continue
            lines = [
                f"{data.display_name.upper()}:",
                f"- Status: {'Active' if data.is_active else 'Inactive'}",
            ]
            if data.summary:
                lines.append(f"- {data.summary}")
            if data.capabilities:
                lines.append(f"- Can help with: {', '.join(data.capabilities)}")
            blocks.append("\n".join(lines))

        return "\n\n".join(blocks)

    # Listeners

    def subscribe(self, callback: Listener) -> Unsubscribe:
        """
        Listen for registry changes.

        The callback is called once immediately with the current snapshot.
        If that first call raises, the callback is removed and the exception
        propagates to the caller.

        Returns:
            Function that removes the callback
        """
        unsubscribe = self._events.on(CHANGE_EVENT, callback)
        try:
            callback(self.get_all_app_data())
        except Exception:
            unsubscribe()
            raise
        return unsubscribe

    def _notify_listeners(self) -> None:
        if self._events.listener_count(CHANGE_EVENT):
            self._events.emit(CHANGE_EVENT, self.get_all_app_data())

    def destroy(self) -> None:
        """Drop every adapter, cached entry and listener, and clear the scorer's cache."""
        for app_name in list(self._adapter_subscriptions):
            self._drop_subscription(app_name)
        self._adapters.clear()
        self._cache.invalidate_all()
        self._events.remove_all_listeners()
        self.scorer.clear_cache()

    def _log_adapter_error(self, error: AdapterError) -> None:
        logger.error(
            "Adapter %s failed during %s: %s",
            error.app_name,
            error.action,
            error,
            exc_info=error,
            extra={"component": "AppRegistry", "action": error.action, "app_name": error.app_name},
        )
