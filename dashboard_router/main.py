"""Main entry point for the dashboard router."""

import argparse
import asyncio
import sys
from typing import Optional

from .api_server import start_api_server
from .app_collections import build_adapters
from .config import API_PORT, LOG_LEVEL
from .exceptions import ConfidenceServiceError
from .log import configure_logging
from .registry import AppRegistry
from .scoring import threshold_label


def print_help(registry: AppRegistry):
    """Print welcome message and help text."""
    print("=" * 60)
    print("Dashboard Router")
    print("=" * 60)
    apps = registry.app_names
    print(f"\nRegistered apps: {', '.join(apps) if apps else 'none'}")
    print("\nCommands:")
    print("  - Any question, e.g. 'show my favorite photos'")
    print("  - Cross-app questions, e.g. 'how many images across all apps'")
    print("  - ':search <text>' to search every app")
    print("  - ':explain <app> <query>' to see how a score was produced")
    print("  - ':context' for the dashboard summary")
    print("  - 'quit' or 'exit' to stop")
    print("=" * 60 + "\n")


async def handle_query(registry: AppRegistry, text: str) -> None:
    """Route one line of input and print the outcome."""
    if text.startswith(":search "):
        results = await registry.search_all_apps(text[len(":search "):])
        if not results:
            print("No matches.")
        for result in results:
            print(f"[{result.app_name}] {len(result.results)} match(es)")
            for item in result.results:
                print(f"  - {item}")
        return

    if text.startswith(":explain "):
        parts = text[len(":explain "):].split(" ", 1)
        if len(parts) < 2:
            print("Usage: :explain <app> <query>")
            return
        explanation = await registry.explain_confidence(parts[1], parts[0])
        print(explanation or f"No explanation available for '{parts[0]}'.")
        return

    if text == ":context":
        print(registry.get_context_summary())
        print(registry.get_detailed_context())
        return

    try:
        ranked = await registry.get_apps_with_confidence(text)
        answer = await registry.get_response_for_query(text)
    except ConfidenceServiceError as e:
        print(f"Routing failed: {e}")
        return

    for item in ranked[:3]:
        print(f"  {item.adapter.app_name:<12} {item.confidence:.2f} {threshold_label(item.confidence)}")
    if answer:
        print(f"\n[{answer.app_name}] {answer.response}\n")
    else:
        print("\nNo app could answer that.\n")


def main(argv: Optional[list] = None):
    """Load the configured apps, then serve the API or read queries from stdin."""
    parser = argparse.ArgumentParser(prog="dashboard-router", description=__doc__)
    parser.add_argument("--serve", action="store_true", help="run the local HTTP API")
    parser.add_argument("--port", type=int, default=API_PORT, help="API port (default: %(default)s)")
    parser.add_argument("--apps", default=None, help="JSON file describing the apps to register")
    args = parser.parse_args(argv)

    configure_logging(LOG_LEVEL)

    registry = AppRegistry()
    for adapter in build_adapters(args.apps):
        registry.register_adapter(adapter)

    if args.serve:
        server_thread = start_api_server(registry, port=args.port)
        print(f"Local API server started on http://127.0.0.1:{args.port}\n")
        try:
            server_thread.join()
        except KeyboardInterrupt:
            print("\n\nInterrupted. Goodbye!")
        finally:
            registry.destroy()
        return

    print_help(registry)
    while True:
        try:
            text = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            break
        if not text:
            continue
        if text.lower() in ("quit", "exit"):
            print("Goodbye!")
            break
        try:
            asyncio.run(handle_query(registry, text))
        except Exception as e:
            print(f"Error: {e}\n", file=sys.stderr)

    registry.destroy()


if __name__ == "__main__":
    main()
