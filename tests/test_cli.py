import json
import os
from pathlib import Path
from typing import Iterator
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from better_agents.collect import ConfigurationError, SetupCancelled
from better_agents.main import cli
from better_agents.project_config import CLIOptions
from better_agents.skills.models import SkillMetadata


@pytest.fixture(autouse=True)
def isolated(home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.chdir(tmp_path)
    with patch("better_agents.main.setup_logging"):
        yield


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "better-agents" in result.output
    assert "init" in result.output
    assert "skills" in result.output
    assert "config" in result.output


def test_cli_version() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "better-agents" in result.output


def test_init_help_lists_choices() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["init", "--help"])
    assert result.exit_code == 0
    assert "--coding-assistant" in result.output
    assert "langgraph-py" in result.output


def test_no_args_runs_init() -> None:
    runner = CliRunner()
    with patch("better_agents.main.init_project", new=AsyncMock()) as mock_init:
        result = runner.invoke(cli, [])
    assert result.exit_code == 0
    mock_init.assert_awaited_once_with(".", CLIOptions())


def test_path_without_command_runs_init() -> None:
    runner = CliRunner()
    with patch("better_agents.main.init_project", new=AsyncMock()) as mock_init:
        result = runner.invoke(cli, ["my-agent", "--language", "python"])
    assert result.exit_code == 0
    path, options = mock_init.call_args.args
    assert path == "my-agent"
    assert options.language == "python"


def test_init_passes_every_option() -> None:
    runner = CliRunner()
    with patch("better_agents.main.init_project", new=AsyncMock()) as mock_init:
        result = runner.invoke(
            cli,
            [
                "init",
                "my-agent",
                "--language",
                "python",
                "--framework",
                "agno",
                "--coding-assistant",
                "claude-code",
                "--llm-provider",
                "bedrock",
                "--goal",
                "Answer billing questions",
                "--aws-region",
                "eu-west-1",
                "--skills",
                "hubspot,slack",
                "--langwatch-endpoint",
                "https://lw.example.com",
                "--refresh-skills",
            ],
        )
    assert result.exit_code == 0
    mock_init.assert_awaited_once_with(
        "my-agent",
        CLIOptions(
            language="python",
            framework="agno",
            coding_assistant="claude-code",
            llm_provider="bedrock",
            goal="Answer billing questions",
            aws_region="eu-west-1",
            skills="hubspot,slack",
            langwatch_endpoint="https://lw.example.com",
            refresh_skills=True,
        ),
    )


def test_init_rejects_unknown_language() -> None:
    runner = CliRunner()
    with patch("better_agents.main.init_project", new=AsyncMock()) as mock_init:
        result = runner.invoke(cli, ["init", "--language", "rust"])
    assert result.exit_code == 2
    assert "rust" in result.output
    mock_init.assert_not_awaited()


def test_init_configuration_error_exits_1() -> None:
    runner = CliRunner()
    error = ConfigurationError("Missing required environment variable: LANGWATCH_API_KEY")
    with patch("better_agents.main.init_project", new=AsyncMock(side_effect=error)):
        result = runner.invoke(cli, ["init"])
    assert result.exit_code == 1
    assert "Error: Missing required environment variable: LANGWATCH_API_KEY" in result.output


def test_init_cancelled_exits_0() -> None:
    runner = CliRunner()
    with patch(
        "better_agents.main.init_project", new=AsyncMock(side_effect=SetupCancelled())
    ):
        result = runner.invoke(cli, ["init"])
    assert result.exit_code == 0


def test_init_unexpected_error_exits_1() -> None:
    runner = CliRunner()
    with patch(
        "better_agents.main.init_project",
        new=AsyncMock(side_effect=RuntimeError("disk on fire")),
    ):
        result = runner.invoke(cli, ["init"])
    assert result.exit_code == 1
    assert "disk on fire" in result.output


def test_init_loads_workspace_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # Registered as set so the value loaded from .env is removed afterwards.
    monkeypatch.setenv("LANGWATCH_API_KEY", "placeholder")
    monkeypatch.delenv("LANGWATCH_API_KEY")
    (tmp_path / ".env").write_text("LANGWATCH_API_KEY=sk-lw-from-file\n")
    seen: dict[str, str] = {}

    async def fake_init(path: str, options: CLIOptions) -> None:
        seen["key"] = os.environ.get("LANGWATCH_API_KEY", "")

    runner = CliRunner()
    with patch("better_agents.main.init_project", new=fake_init):
        result = runner.invoke(cli, ["init"])
    assert result.exit_code == 0
    assert seen["key"] == "sk-lw-from-file"


def test_config_set_get_list(home: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "list"])
    assert result.exit_code == 0
    assert "No settings found." in result.output

    result = runner.invoke(cli, ["config", "set", "default_llm_provider", "anthropic"])
    assert result.exit_code == 0
    assert "Set default_llm_provider to anthropic" in result.output

    result = runner.invoke(cli, ["config", "get", "default_llm_provider"])
    assert result.output.strip() == "anthropic"

    result = runner.invoke(cli, ["config", "list"])
    assert "default_llm_provider: anthropic" in result.output

    settings = json.loads((home / ".better-agents" / "settings.json").read_text())
    assert settings == {"default_llm_provider": "anthropic"}


def test_config_get_missing_key() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["config", "get", "nope"])
    assert result.exit_code == 0
    assert "Key 'nope' not found." in result.output


def test_skills_list() -> None:
    catalog = [
        SkillMetadata(
            name="hubspot",
            description="HubSpot CRM",
            required_mcp_server="nango",
            tags=("crm",),
        ),
        SkillMetadata(name="slack", description="Slack messages"),
    ]
    runner = CliRunner()
    with patch(
        "better_agents.cli.skills.fetch_skills", new=AsyncMock(return_value=catalog)
    ) as mock_fetch:
        result = runner.invoke(cli, ["skills", "list", "--refresh"])
    assert result.exit_code == 0
    assert "hubspot" in result.output
    assert "nango" in result.output
    assert "slack" in result.output
    mock_fetch.assert_awaited_once_with(force_refresh=True, show_status=True)


def test_skills_list_empty() -> None:
    runner = CliRunner()
    with patch("better_agents.cli.skills.fetch_skills", new=AsyncMock(return_value=[])):
        result = runner.invoke(cli, ["skills", "list"])
    assert result.exit_code == 0
    assert "No skills found." in result.output


def test_skills_clear_cache() -> None:
    runner = CliRunner()
    with patch("better_agents.cli.skills.clear_skills_cache", new=AsyncMock()) as mock_clear:
        result = runner.invoke(cli, ["skills", "clear-cache"])
    assert result.exit_code == 0
    assert "Skills cache cleared." in result.output
    mock_clear.assert_awaited_once()


def test_config_set_validates_known_keys(home: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "set", "default_llm_provider", "mistral"])
    assert result.exit_code == 2
    assert "Must be one of" in result.output
    assert not (home / ".better-agents" / "settings.json").exists()

    result = runner.invoke(cli, ["config", "set", "langwatch_endpoint", "not-a-url"])
    assert result.exit_code == 2


def test_config_set_parses_json_and_unset(home: Path) -> None:
    runner = CliRunner()
    runner.invoke(cli, ["config", "set", "retries", "3"])

    settings = json.loads((home / ".better-agents" / "settings.json").read_text())
    assert settings == {"retries": 3}

    result = runner.invoke(cli, ["config", "unset", "retries"])
    assert result.exit_code == 0
    assert "Removed retries." in result.output
    result = runner.invoke(cli, ["config", "unset", "retries"])
    assert "Key 'retries' not found." in result.output


def test_skills_list_cached_does_not_fetch() -> None:
    catalog = [SkillMetadata(name="hubspot", description="HubSpot CRM")]
    runner = CliRunner()
    with (
        patch(
            "better_agents.cli.skills.get_cached_skills", new=AsyncMock(return_value=catalog)
        ),
        patch("better_agents.cli.skills.fetch_skills", new=AsyncMock()) as mock_fetch,
    ):
        result = runner.invoke(cli, ["skills", "list", "--cached"])
    assert result.exit_code == 0
    assert "hubspot" in result.output
    mock_fetch.assert_not_awaited()


def test_skills_list_cached_without_snapshot(home: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["skills", "list", "--cached"])
    assert result.exit_code == 0
    assert "No cached skills list." in result.output

    result = runner.invoke(cli, ["skills", "list", "--cached", "--refresh"])
    assert result.exit_code == 2
