"""Credential and environment file resolution for better-agents.

Priority order for every secret:
  1. Environment variables (possibly populated from a .env file)
  2. Values typed into interactive prompts

The LangWatch endpoint may additionally come from the ``langwatch_endpoint``
field in ~/.better-agents/settings.json.
"""

import os
from pathlib import Path
from typing import Iterable, Optional

import dotenv

from better_agents.settings import get_global_dir, load_settings

LANGWATCH_API_KEY_VAR = "LANGWATCH_API_KEY"
LANGWATCH_ENDPOINT_VAR = "LANGWATCH_ENDPOINT"
_ENDPOINT_SETTINGS_KEY = "langwatch_endpoint"


def read_env(names: Iterable[str]) -> Optional[str]:
    """Return the first non-blank value among the given environment variables."""
    for name in names:
        value = os.environ.get(name)
        if value and value.strip():
            return value.strip()
    return None


def load_langwatch_api_key() -> Optional[str]:
    return read_env([LANGWATCH_API_KEY_VAR])


def load_langwatch_endpoint(cli_value: Optional[str] = None) -> Optional[str]:
    """Resolve a custom LangWatch endpoint.

    Checks the CLI flag, then LANGWATCH_ENDPOINT, then global settings.
    Returns None when the default hosted endpoint should be used.
    """
    if cli_value and cli_value.strip():
        return cli_value.strip()
    from_env = read_env([LANGWATCH_ENDPOINT_VAR])
    if from_env:
        return from_env
    stored: Optional[str] = load_settings().get(_ENDPOINT_SETTINGS_KEY)
    if stored and stored.strip():
        return stored.strip()
    return None


def load_env_file(workspace_dir: Optional[str] = None) -> None:
    """Load environment variables from a .env file, if one is found.

    Search order:
      1. <workspace_dir>/.env
      2. ~/.better-agents/.env

    Variables already set in the environment are not overwritten.
    """
    candidates: list[Path] = []

    if workspace_dir:
        candidates.append(Path(workspace_dir) / ".env")

    candidates.append(get_global_dir() / ".env")

    for candidate in candidates:
        if candidate.is_file():
            # override=False means existing env vars are not overwritten
            dotenv.load_dotenv(candidate, override=False)
            break
