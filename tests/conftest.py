"""Shared fixtures: controllable clock and configurable fake adapters."""

import asyncio
from typing import Any, List, Optional

import pytest

from dashboard_router.adapters import AggregatingAdapter, AppAdapter, SearchableAdapter
from dashboard_router.models import AggregateableData, AppContextData


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeAdapter(AppAdapter):
    """Adapter whose every answer is set by the test."""

    def __init__(
        self,
        app_name: str,
        display_name: Optional[str] = None,
        keywords: Optional[List[str]] = None,
        is_active: bool = False,
        summary: str = "",
        capabilities: Optional[List[str]] = None,
        last_used: int = 0,
        confidence: float = 0.0,
        response: Any = None,
        context_error: Optional[Exception] = None,
        context_app_name: Optional[str] = None,
    ):
        self.app_name = app_name
        self.display_name = display_name or app_name.title()
        self.keywords = keywords or []
        self.is_active = is_active
        self.summary = summary
        self.capabilities = capabilities or []
        self.last_used = last_used
        self.confidence = confidence
        self.response = response
        self.context_error = context_error
        self.context_app_name = context_app_name or app_name
        self.context_calls = 0
        self.callbacks = []

    def get_context_data(self) -> AppContextData:
        self.context_calls += 1
        if self.context_error is not None:
            raise self.context_error
        return AppContextData(
            app_name=self.context_app_name,
            display_name=self.display_name,
            is_active=self.is_active,
            last_used=self.last_used,
            data={"calls": self.context_calls},
            summary=self.summary,
            capabilities=list(self.capabilities),
        )

    def get_keywords(self) -> List[str]:
        return list(self.keywords)

    async def get_confidence(self, query: str) -> float:
        return self.confidence

    async def get_response(self, query: str) -> Optional[str]:
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    def subscribe(self, callback):
        self.callbacks.append(callback)

        def unsubscribe():
            if callback in self.callbacks:
                self.callbacks.remove(callback)

        return unsubscribe

    def push_update(self, data: Any = None) -> None:
        for callback in list(self.callbacks):
            callback(data)


class FakeSearchAdapter(FakeAdapter, SearchableAdapter):
    """Fake adapter with search; results may be a list or an exception."""

    def __init__(self, app_name: str, results: Any = None, delay: float = 0.0, **kwargs):
        super().__init__(app_name, **kwargs)
        self.results = results if results is not None else []
        self.delay = delay

    async def search(self, query: str) -> List[Any]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.results, Exception):
            raise self.results
        return list(self.results)


class FakeAggregatingAdapter(FakeAdapter, AggregatingAdapter):
    """Fake adapter contributing fixed aggregation entries."""

    def __init__(self, app_name: str, entries: Any = None, enabled: bool = True, **kwargs):
        super().__init__(app_name, **kwargs)
        self.entries = entries if entries is not None else []
        self.enabled = enabled

    def supports_aggregation(self) -> bool:
        return self.enabled

    def get_aggregate_data(self) -> List[AggregateableData]:
        if isinstance(self.entries, Exception):
            raise self.entries
        return list(self.entries)


class AsyncAggregatingAdapter(FakeAggregatingAdapter):
    """Aggregating adapter whose get_aggregate_data is a coroutine."""

    async def get_aggregate_data(self) -> List[AggregateableData]:
        await asyncio.sleep(0)
        return list(self.entries)


@pytest.fixture
def clock():
    return FakeClock()
