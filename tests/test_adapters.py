"""Tests for the keyword adapter base and the collection adapter."""

import logging
from typing import List
from unittest.mock import Mock

import pytest

from dashboard_router.adapters import (
    CollectionAdapter,
    KeywordAdapter,
    supports_aggregation,
    supports_search,
)
from dashboard_router.models import AppContextData


class NotesAdapter(KeywordAdapter):
    app_name = "notes"
    display_name = "Notes"

    def __init__(self, is_active: bool = True, data=None):
        super().__init__()
        self.is_active = is_active
        self.data = data

    def get_context_data(self) -> AppContextData:
        return AppContextData(
            app_name=self.app_name,
            display_name=self.display_name,
            is_active=self.is_active,
            data=self.data,
            summary="3 notes",
            capabilities=self.get_capabilities(),
        )

    def get_keywords(self) -> List[str]:
        return ["note", "notes", "memo"]


class TestKeywordAdapter:

    @pytest.fixture
    def adapter(self):
        return NotesAdapter(data={"count": 3})

    @pytest.mark.parametrize("query,expected", [
        ("show my notes", 0.9),
        ("NOTES please", 0.9),
        ("open my notebook", 0.3),
        ("what's the weather", 0.0),
    ])
    def test_keyword_confidence(self, adapter, query, expected):
        assert adapter.get_keyword_confidence(query) == expected

    @pytest.mark.asyncio
    async def test_get_confidence_uses_keywords(self, adapter):
        assert await adapter.get_confidence("any memo?") == 0.9

    def test_advice_detection(self, adapter):
        assert adapter.is_asking_for_advice("How do I organize my notes")
        assert adapter.is_asking_for_advice("any tips for writing")
        assert not adapter.is_asking_for_advice("show my notes")

    @pytest.mark.asyncio
    async def test_default_response(self, adapter):
        assert await adapter.get_response("notes") == "I can help you with Notes. 3 notes"

    @pytest.mark.asyncio
    async def test_inactive_response(self):
        adapter = NotesAdapter(is_active=False, data={"count": 3})
        assert await adapter.get_response("notes") == (
            "The Notes app is not currently active or has no data available."
        )

    def test_default_capabilities(self, adapter):
        assert adapter.get_capabilities() == ["data-access", "query-response", "real-time-updates"]

    def test_subscribe_and_unsubscribe(self, adapter):
        callback = Mock()
        unsubscribe = adapter.subscribe(callback)
        adapter.notify_subscribers("first")
        unsubscribe()
        adapter.notify_subscribers("second")

        callback.assert_called_once_with("first")

    def test_failing_subscriber_does_not_stop_others(self, adapter, caplog):
        after = Mock()
        adapter.subscribe(Mock(side_effect=RuntimeError("boom")))
        adapter.subscribe(after)

        with caplog.at_level(logging.ERROR, logger="dashboard_router.adapters.keyword"):
            adapter.notify_subscribers({"count": 4})

        after.assert_called_once_with({"count": 4})
        assert "Error notifying subscriber in notes" in caplog.text

    def test_search_in_fields(self, adapter):
        record = {"title": "Groceries", "meta": {"tags": "shopping list"}}
        fields = [
            {"path": "title", "label": "Title"},
            {"path": "meta.tags", "label": "Tags", "type": "tag"},
            {"path": "missing.path", "label": "Missing"},
        ]

        assert adapter.search_in_fields(record, "LIST", fields) == [
            {"type": "tag", "label": "Tags", "value": "shopping list", "field": "meta.tags"},
        ]

    def test_safe_get(self):
        data = {"a": {"b": {"c": 1}}}
        assert KeywordAdapter.safe_get(data, "a.b.c") == 1
        assert KeywordAdapter.safe_get(data, "a.x", "default") == "default"


class TestCollectionAdapter:

    @pytest.fixture
    def camera(self, clock):
        return CollectionAdapter(
            app_name="camera",
            display_name="Camera",
            keywords=["Camera", "photos"],
            item_type="image",
            records=[
                {"title": "Beach sunset", "description": "Golden hour", "favorite": True},
                {"title": "Birthday cake", "description": "Chocolate"},
            ],
            clock=clock,
        )

    def test_capabilities_are_explicit(self, camera):
        assert supports_search(camera)
        assert supports_aggregation(camera)
        assert not supports_search(NotesAdapter())

    def test_context_data(self, camera, clock):
        context = camera.get_context_data()
        assert context.app_name == "camera"
        assert context.is_active
        assert context.last_used == clock.now
        assert context.summary == "2 images saved, 1 marked as favorite"
        assert context.data == {"count": 2, "favorites": 1}

    def test_keywords_lowercased(self, camera):
        assert camera.get_keywords() == ["camera", "photos"]

    def test_add_and_remove_notify(self, camera, clock):
        callback = Mock()
        camera.subscribe(callback)
        clock.advance(5000)

        camera.add_record({"title": "Mountain"})
        assert camera.get_context_data().last_used == clock.now
        removed = camera.remove_record(0)

        assert removed["title"] == "Beach sunset"
        assert callback.call_count == 2
        assert len(camera.records) == 2

    @pytest.mark.asyncio
    async def test_search(self, camera):
        results = await camera.search("sunset")
        assert results == [{"type": "field", "label": "Title", "value": "Beach sunset", "field": "title"}]
        assert await camera.search("nothing here") == []

    def test_aggregate_data(self, camera):
        [entry] = camera.get_aggregate_data()
        assert entry.type == "image"
        assert entry.count == 2
        assert entry.app_name == "camera"
        assert entry.metadata == {"favorites": 1}

    def test_empty_collection_does_not_aggregate(self):
        adapter = CollectionAdapter("gifs", "GIFs", ["gif"], "gif")
        assert not adapter.supports_aggregation()
        assert adapter.get_context_data().summary == ""

    @pytest.mark.asyncio
    async def test_responses(self, camera):
        assert await camera.get_response("show favorites") == "Your favorite images in Camera: Beach sunset."
        assert await camera.get_response("photos") == "Camera: 2 images saved, 1 marked as favorite."

        camera.set_active(False)
        assert "not currently active" in await camera.get_response("photos")

    def test_from_dict(self):
        adapter = CollectionAdapter.from_dict({
            "app_name": "notes",
            "display_name": "Notes",
            "item_type": "document",
            "keywords": ["notes"],
            "records": [{"title": "Groceries"}],
        })
        assert adapter.app_name == "notes"
        assert adapter.get_aggregate_data()[0].count == 1

    def test_from_dict_requires_keys(self):
        with pytest.raises(ValueError, match="item_type"):
            CollectionAdapter.from_dict({"app_name": "notes", "display_name": "Notes"})
