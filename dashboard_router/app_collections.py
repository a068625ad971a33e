"""Load collection-backed mini-apps from a JSON file."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .adapters import CollectionAdapter
from .config import APPS_PATH

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("app_name", "display_name", "item_type")


def _get_apps_file_path() -> str:
    """
    Get the path to the apps file.

    Priority:
    1. DASHBOARD_ROUTER_APPS_PATH environment variable
    2. ~/.dashboard_router_apps.json (user home directory)
    3. apps.json in project root

    Returns:
        Path to the apps file
    """
    if APPS_PATH:
        return APPS_PATH

    home_apps = os.path.expanduser("~/.dashboard_router_apps.json")
    if os.path.exists(home_apps):
        return home_apps

    project_root = Path(__file__).parent.parent
    return str(project_root / "apps.json")


def _validate_collection(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    if any(not isinstance(entry.get(key), str) or not entry.get(key) for key in REQUIRED_KEYS):
        return False
    if not isinstance(entry.get("keywords", []), list):
        return False
    return isinstance(entry.get("records", []), list)


def load_collections(path: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Load collection descriptions from JSON.

    The file holds {"apps": [...]}, each entry with app_name, display_name,
    item_type and optional keywords, records, icon, is_active.

    Args:
        path: File to read (defaults to the configured apps file)

    Returns:
        Valid descriptions; empty if the file is missing or unreadable
    """
    apps_file = path or _get_apps_file_path()
    if not os.path.exists(apps_file):
        return []

    try:
        with open(apps_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read apps file %s: %s", apps_file, e)
        return []

    valid = []
    for entry in data.get("apps", []) if isinstance(data, dict) else []:
        if _validate_collection(entry):
            valid.append(entry)
        else:
            logger.warning("Skipping invalid app entry: %r", entry)
    return valid


def build_adapters(path: Optional[str] = None) -> List[CollectionAdapter]:
    """Create one CollectionAdapter per valid description in the apps file."""
    return [CollectionAdapter.from_dict(entry) for entry in load_collections(path)]
