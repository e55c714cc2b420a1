from pathlib import Path
from typing import Iterator
from unittest.mock import patch

import pytest

from better_agents import analytics

_ENV_VARS = (
    "LANGWATCH_API_KEY",
    "LANGWATCH_ENDPOINT",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_API_KEY",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_REGION",
    "OPENROUTER_API_KEY",
    "XAI_API_KEY",
    "POSTHOG_API_KEY",
    "POSTHOG_HOST",
    "BETTER_AGENTS_TELEMETRY",
    "BETTER_AGENTS_DEBUG",
    "GITHUB_TOKEN",
    "GH_TOKEN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests never see credentials or telemetry settings from the real environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    analytics.reset_client()


@pytest.fixture()
def home(tmp_path: Path) -> Iterator[Path]:
    """A fake home directory; ~/.better-agents lives under it."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    with patch("better_agents.settings.os.path.expanduser", return_value=str(fake_home)):
        yield fake_home
