"""Tests for better_agents.providers.coding_assistants module."""

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from better_agents.project_config import ProjectConfig
from better_agents.providers.base import LaunchContext, SetupContext
from better_agents.providers.coding_assistants import (
    AntigravityProvider,
    ClaudeCodeProvider,
    CrushProvider,
    CursorProvider,
    GeminiCliProvider,
    KilocodeProvider,
    merge_mcp_servers,
    to_crush_servers,
)

MCP_CONFIG: dict[str, Any] = {
    "mcpServers": {
        "langwatch": {"command": "npx", "args": ["-y", "@langwatch/mcp-server"]},
        "agno": {"type": "stdio", "command": "uvx", "args": ["--from", "mcpdoc"]},
    }
}

CONFIG = ProjectConfig(
    language="python",
    framework="agno",
    coding_assistant="claude-code",
    llm_provider="openai",
    llm_api_key="sk-openai",
    langwatch_api_key="sk-lw-key",
    project_goal="Answer billing questions",
)


def _context(project_path: Path) -> SetupContext:
    return SetupContext(project_path=project_path, config=CONFIG, mcp_config=MCP_CONFIG)


def test_merge_keeps_existing_servers(tmp_path: Path) -> None:
    path = tmp_path / ".mcp.json"
    path.write_text(json.dumps({"mcpServers": {"mine": {"command": "x"}}, "other": 1}))

    merge_mcp_servers(path, MCP_CONFIG)

    data = json.loads(path.read_text())
    assert set(data["mcpServers"]) == {"mine", "langwatch", "agno"}
    assert data["other"] == 1


def test_merge_replaces_unreadable_config(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "mcp.json"
    path.parent.mkdir()
    path.write_text("{broken")

    merge_mcp_servers(path, MCP_CONFIG)

    assert set(json.loads(path.read_text())["mcpServers"]) == {"langwatch", "agno"}


@pytest.mark.asyncio
async def test_claude_code_setup(tmp_path: Path) -> None:
    await ClaudeCodeProvider().setup(_context(tmp_path))

    assert json.loads((tmp_path / ".mcp.json").read_text()) == MCP_CONFIG
    assert (tmp_path / "CLAUDE.md").read_text() == "@AGENTS.md\n"


@pytest.mark.asyncio
async def test_claude_code_setup_keeps_existing_claude_md(tmp_path: Path) -> None:
    (tmp_path / "CLAUDE.md").write_text("custom\n")

    await ClaudeCodeProvider().setup(_context(tmp_path))

    assert (tmp_path / "CLAUDE.md").read_text() == "custom\n"


@pytest.mark.asyncio
async def test_cursor_setup(tmp_path: Path) -> None:
    await CursorProvider().setup(_context(tmp_path))
    assert json.loads((tmp_path / ".cursor" / "mcp.json").read_text()) == MCP_CONFIG


@pytest.mark.asyncio
async def test_gemini_cli_setup_writes_home_settings(tmp_path: Path, home: Path) -> None:
    await GeminiCliProvider().setup(_context(tmp_path / "project"))

    settings = json.loads((home / ".gemini" / "settings.json").read_text())
    assert set(settings["mcpServers"]) == {"langwatch", "agno"}


@pytest.mark.asyncio
async def test_antigravity_setup_writes_home_config(tmp_path: Path, home: Path) -> None:
    await AntigravityProvider().setup(_context(tmp_path))

    path = home / ".gemini" / "antigravity" / "mcp_config.json"
    assert set(json.loads(path.read_text())["mcpServers"]) == {"langwatch", "agno"}


@pytest.mark.asyncio
async def test_crush_setup(tmp_path: Path) -> None:
    await CrushProvider().setup(_context(tmp_path))

    data = json.loads((tmp_path / "crush.json").read_text())
    assert data["$schema"] == "https://charm.land/crush.json"
    assert data["mcp"]["langwatch"] == {
        "type": "stdio",
        "command": "npx",
        "args": ["-y", "@langwatch/mcp-server"],
        "env": {},
    }
    assert data["projectContext"]["framework"] == "agno"


def test_to_crush_servers_http() -> None:
    servers = to_crush_servers(
        {"mcpServers": {"remote": {"type": "http", "url": "https://mcp.example.com"}}}
    )
    assert servers == {
        "remote": {"type": "http", "transport": "http", "url": "https://mcp.example.com"}
    }


@pytest.mark.asyncio
async def test_is_available() -> None:
    provider = ClaudeCodeProvider()

    with patch("better_agents.providers.coding_assistants.shutil.which", return_value=None):
        missing = await provider.is_available()
    with patch(
        "better_agents.providers.coding_assistants.shutil.which", return_value="/bin/claude"
    ):
        found = await provider.is_available()

    assert not missing.installed
    assert missing.install_command == "npm install -g @anthropic-ai/claude-code"
    assert found.installed


@pytest.mark.asyncio
async def test_ide_assistant_always_available() -> None:
    assert (await CursorProvider().is_available()).installed


def test_terminal_commands(tmp_path: Path) -> None:
    context = LaunchContext(project_path=tmp_path, target_path="my-agent", prompt="Go")

    claude = ClaudeCodeProvider().terminal_command(context)
    gemini = GeminiCliProvider().terminal_command(context)
    kilocode = KilocodeProvider().terminal_command(context)
    crush = CrushProvider().terminal_command(context)

    assert (claude.command, claude.args, claude.cwd) == ("claude", ("Go",), tmp_path)
    assert gemini.args == ("-i", "Go")
    assert not kilocode.replace_process
    assert crush.args == ()


def test_manual_commands() -> None:
    assert ClaudeCodeProvider().manual_command("Go") == 'claude "Go"'
    assert GeminiCliProvider().manual_command("Go") == 'gemini -i "Go"'
    assert CursorProvider().manual_command("Go") == "cursor ."


def test_cursor_launch_prints_instructions(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    context = LaunchContext(project_path=tmp_path, target_path="my-agent", prompt="Go")

    CursorProvider().launch(context)

    out = capsys.readouterr().out
    assert "Open the project in Cursor" in out
    assert "cursor my-agent" in out
