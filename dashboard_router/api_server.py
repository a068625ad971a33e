"""Lightweight local HTTP API over the app registry."""

import asyncio
import threading
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request

from .config import API_PORT, RATE_LIMIT_MAX_REQUESTS, RATE_LIMIT_WINDOW_MS
from .exceptions import ConfidenceServiceError, RateLimitExceededError
from .models import DashboardSnapshot, RankedAdapter
from .registry import AppRegistry
from .utils import RateLimiter


_server_thread: Optional[threading.Thread] = None


def _snapshot_to_dict(snapshot: DashboardSnapshot) -> Dict[str, Any]:
	return {
		"apps": {name: data.to_dict() for name, data in snapshot.apps.items()},
		"active_apps": snapshot.active_apps,
		"last_updated": snapshot.last_updated,
	}


def _ranked_to_dict(ranked: RankedAdapter) -> Dict[str, Any]:
	entry = {
		"app_name": ranked.adapter.app_name,
		"display_name": ranked.adapter.display_name,
		"confidence": round(ranked.confidence, 4),
	}
	if ranked.result is not None:
		entry["breakdown"] = asdict(ranked.result.breakdown)
		entry["cache_hit"] = ranked.result.metadata.cache_hit
	return entry


async def _route(registry: AppRegistry, query: str) -> Dict[str, Any]:
	ranked: List[RankedAdapter] = await registry.get_apps_with_confidence(query)
	answer = await registry.get_response_for_query(query)
	return {
		"query": query,
		"ranked": [_ranked_to_dict(r) for r in ranked],
		"response": asdict(answer) if answer else None,
	}


def create_app(registry: AppRegistry, rate_limiter: Optional[RateLimiter] = None) -> Flask:
	"""
	Build the Flask app.

	Args:
		registry: Registry answering every request
		rate_limiter: Limiter applied to /route (defaults to the configured limits)

	Returns:
		Flask application
	"""
	app = Flask("dashboard_router_api")
	limiter = rate_limiter or RateLimiter(RATE_LIMIT_MAX_REQUESTS, RATE_LIMIT_WINDOW_MS)

	@app.errorhandler(RateLimitExceededError)
	def rate_limited(error: RateLimitExceededError):
		reset_time = error.reset_time.isoformat() if error.reset_time else None
		return jsonify({"status": "error", "message": str(error), "reset_time": reset_time}), 429

	# Basic CORS for the local dashboard client
	@app.after_request
	def add_cors_headers(response):
		response.headers["Access-Control-Allow-Origin"] = "*"
		response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
		response.headers["Access-Control-Allow-Headers"] = "Content-Type"
		return response

	@app.get("/health")
	def health():
		return jsonify({"status": "ok", "apps": registry.app_names})

	@app.route("/preprocess", methods=["GET", "OPTIONS"])
	def preprocess():
		if request.method == "OPTIONS":
			return ("", 204)
		result = registry.preprocessor.preprocess(request.args.get("q", "") or "")
		return jsonify(asdict(result))

	@app.route("/route", methods=["GET", "OPTIONS"])
	def route():
		if request.method == "OPTIONS":
			return ("", 204)
		if not limiter.check_limit():
			raise RateLimitExceededError(reset_time=limiter.get_reset_time())
		query = (request.args.get("q", "") or "").strip()
		if not query:
			return jsonify({"status": "error", "message": "empty query"}), 400
		try:
			return jsonify(asyncio.run(_route(registry, query)))
		except ConfidenceServiceError as e:
			return jsonify({"status": "error", "message": str(e)}), 503

	@app.route("/explain", methods=["GET", "OPTIONS"])
	def explain():
		if request.method == "OPTIONS":
			return ("", 204)
		query = request.args.get("q", "") or ""
		app_name = request.args.get("app", "") or ""
		explanation = asyncio.run(registry.explain_confidence(query, app_name))
		if explanation is None:
			return jsonify({"status": "error", "message": f"no explanation for '{app_name}'"}), 404
		return jsonify({"app_name": app_name, "explanation": explanation})

	@app.route("/search", methods=["GET", "OPTIONS"])
	def search():
		if request.method == "OPTIONS":
			return ("", 204)
		query = (request.args.get("q", "") or "").strip()
		if not query:
			return jsonify({"results": []})
		results = asyncio.run(registry.search_all_apps(query))
		return jsonify({"results": [asdict(r) for r in results]})

	@app.route("/context", methods=["GET", "OPTIONS"])
	def context():
		if request.method == "OPTIONS":
			return ("", 204)
		payload = {
			"summary": registry.get_context_summary(),
			"snapshot": _snapshot_to_dict(registry.get_all_app_data()),
		}
		apps = request.args.get("apps")
		if apps:
			payload["detailed"] = registry.get_detailed_context([name.strip() for name in apps.split(",") if name.strip()])
		return jsonify(payload)

	return app


def start_api_server(registry: AppRegistry, port: int = API_PORT) -> threading.Thread:
	"""
	Start the local API server in a background thread.
	Only binds to 127.0.0.1. Requests are served one at a time.
	"""
	global _server_thread
	if _server_thread and _server_thread.is_alive():
		return _server_thread
	app = create_app(registry)

	def run():
		app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False, threaded=False)

	_server_thread = threading.Thread(target=run, daemon=True)
	_server_thread.start()
	return _server_thread
