"""Global settings storage for better-agents.

Settings are persisted to ~/.better-agents/settings.json. The same directory
holds the skills cache, the anonymous machine id and the debug log.
"""

import json
import os
from pathlib import Path
from typing import Any

from better_agents.constants import GLOBAL_DIR_NAME


def get_home_dir() -> Path:
    """Return the current user's home directory."""
    return Path(os.path.expanduser("~"))


def get_global_dir() -> Path:
    """Return the global better-agents directory (~/.better-agents/)."""
    return get_home_dir() / GLOBAL_DIR_NAME


def get_global_settings_path() -> Path:
    """Return the path to the global settings file (~/.better-agents/settings.json)."""
    return get_global_dir() / "settings.json"


def get_skills_cache_path() -> Path:
    return get_global_dir() / "skills-cache.json"


def get_log_path() -> Path:
    return get_global_dir() / "better-agents.log"


def load_settings() -> dict[str, Any]:
    """Load settings from the global settings file.

    A missing or corrupt file yields an empty dict.
    """
    path = get_global_settings_path()
    if not path.exists():
        return {}
    try:
        content = path.read_text(encoding="utf-8")
        result: dict[str, Any] = json.loads(content)
        return result
    except (json.JSONDecodeError, OSError):
        return {}


def save_settings(settings: dict[str, Any]) -> None:
    """Persist settings to the global settings file."""
    path = get_global_settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(settings, indent=2) + "\n",
        encoding="utf-8",
    )
