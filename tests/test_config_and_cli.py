"""Tests for configuration, the apps file loader and the CLI query handler."""

import json

import pytest

from dashboard_router.app_collections import build_adapters, load_collections
from dashboard_router.config import Config
from dashboard_router.main import handle_query
from dashboard_router.registry import AppRegistry


class TestConfig:

    def test_defaults(self, monkeypatch):
        for name in ("CACHE_TTL_MS", "MIN_CONFIDENCE", "API_PORT", "APPS_PATH", "LOG_LEVEL"):
            monkeypatch.delenv(f"DASHBOARD_ROUTER_{name}", raising=False)

        config = Config()

        assert config.cache_ttl_ms == 30000
        assert config.min_confidence == 0.1
        assert config.api_port == 8770
        assert config.apps_path is None
        assert config.log_level == "INFO"

    @pytest.mark.parametrize("name,value", [
        ("DASHBOARD_ROUTER_CACHE_TTL_MS", "0"),
        ("DASHBOARD_ROUTER_MIN_CONFIDENCE", "1.5"),
        ("DASHBOARD_ROUTER_ADAPTER_TIMEOUT", "-1"),
        ("DASHBOARD_ROUTER_LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values_rejected(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError):
            Config()


class TestAppCollections:

    @pytest.fixture
    def apps_file(self, tmp_path):
        path = tmp_path / "apps.json"
        path.write_text(json.dumps({
            "apps": [
                {
                    "app_name": "notes",
                    "display_name": "Notes",
                    "item_type": "document",
                    "keywords": ["notes"],
                    "records": [{"title": "Groceries", "description": "milk and eggs"}],
                },
                {"app_name": "broken", "display_name": "Broken"},
                "not an object",
            ]
        }))
        return str(path)

    def test_invalid_entries_skipped(self, apps_file):
        entries = load_collections(apps_file)
        assert [entry["app_name"] for entry in entries] == ["notes"]

    def test_missing_or_malformed_file(self, tmp_path):
        assert load_collections(str(tmp_path / "missing.json")) == []
        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        assert load_collections(str(bad)) == []

    def test_build_adapters(self, apps_file):
        [adapter] = build_adapters(apps_file)
        assert adapter.app_name == "notes"
        assert adapter.get_keywords() == ["notes"]


class TestHandleQuery:

    @pytest.fixture
    def registry(self, tmp_path, clock):
        path = tmp_path / "apps.json"
        path.write_text(json.dumps({"apps": [{
            "app_name": "notes",
            "display_name": "Notes",
            "item_type": "note",
            "keywords": ["notes"],
            "records": [{"title": "Groceries", "description": "milk and eggs"}],
        }]}))
        registry = AppRegistry(clock=clock)
        for adapter in build_adapters(str(path)):
            registry.register_adapter(adapter)
        yield registry
        registry.destroy()

    @pytest.mark.asyncio
    async def test_routes_query(self, registry, capsys):
        await handle_query(registry, "show my notes")
        out = capsys.readouterr().out
        assert "[notes] Notes: 1 notes saved." in out

    @pytest.mark.asyncio
    async def test_search_command(self, registry, capsys):
        await handle_query(registry, ":search eggs")
        assert "[notes] 1 match(es)" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_explain_command(self, registry, capsys):
        await handle_query(registry, ":explain notes show my notes")
        assert "Confidence for 'notes'" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_context_command(self, registry, capsys):
        await handle_query(registry, ":context")
        out = capsys.readouterr().out
        assert "Dashboard Apps:\nNotes: 1 notes saved" in out
        assert "NOTES:" in out
