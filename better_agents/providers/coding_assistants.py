"""Coding assistant providers.

Each assistant knows how to detect itself, where it reads MCP configuration
from, and how to take over the terminal once the project is generated.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Optional

from better_agents import console
from better_agents.process import TerminalCommand
from better_agents.providers.base import (
    Availability,
    Capability,
    LaunchContext,
    Provider,
    SetupContext,
)
from better_agents.settings import get_home_dir

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> dict[str, Any]:
    """Existing JSON object at path, or an empty dict when absent or unreadable."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def merge_mcp_servers(path: Path, mcp_config: dict[str, Any], key: str = "mcpServers") -> None:
    """Add our servers to the JSON config at path, keeping everything else."""
    data = _read_json(path)
    servers = data.get(key)
    if not isinstance(servers, dict):
        servers = {}
    servers.update(json.loads(json.dumps(mcp_config.get("mcpServers", {}))))
    data[key] = servers
    _write_json(path, data)


def to_crush_servers(mcp_config: dict[str, Any]) -> dict[str, Any]:
    """Crush wants an explicit type per server and an env mapping for stdio."""
    servers: dict[str, Any] = {}
    for name, server in mcp_config.get("mcpServers", {}).items():
        if server.get("type") == "http":
            servers[name] = {
                "type": "http",
                "transport": server.get("transport", "http"),
                "url": server.get("url"),
            }
        else:
            servers[name] = {
                "type": "stdio",
                "command": server.get("command"),
                "args": list(server.get("args", [])),
                "env": dict(server.get("env", {})),
            }
    return servers


class CodingAssistantProvider(Provider):
    """A coding assistant.

    ``command`` is the executable used for availability checks and for the
    manual command shown when a launch fails. Assistants without a CLI
    leave it empty and are always considered available.
    """

    capabilities = frozenset(
        {Capability.SETUP, Capability.AVAILABILITY, Capability.LAUNCH}
    )
    command: str = ""
    install_command: Optional[str] = None
    # Environment variable the assistant itself needs to run.
    required_env_var: Optional[str] = None

    async def is_available(self) -> Availability:
        if not self.command:
            return Availability(installed=True)
        try:
            found = shutil.which(self.command) is not None
        except OSError as e:
            logger.debug("Could not probe for %s: %s", self.command, e)
            found = False
        if found:
            return Availability(installed=True)
        return Availability(installed=False, install_command=self.install_command)

    def terminal_command(self, context: LaunchContext) -> TerminalCommand:
        return TerminalCommand(self.command, (context.prompt,), context.project_path)

    def manual_command(self, prompt: str) -> str:
        return f'{self.command} "{prompt}"'

    def launch(self, context: LaunchContext) -> None:
        self.terminal_command(context).run()


class ClaudeCodeProvider(CodingAssistantProvider):
    id = "claude-code"
    display_name = "Claude Code"
    command = "claude"
    install_command = "npm install -g @anthropic-ai/claude-code"

    async def setup(self, context: SetupContext) -> None:
        merge_mcp_servers(context.project_path / ".mcp.json", context.mcp_config)
        claude_md = context.project_path / "CLAUDE.md"
        if not claude_md.exists():
            claude_md.write_text("@AGENTS.md\n", encoding="utf-8")


def _print_ide_instructions(app_name: str, open_command: str, chat_hint: str, target_path: str) -> None:
    where = "the current folder" if target_path == "." else "the project"
    console.plain("")
    console.plain(f"To get started with {app_name}:")
    console.plain("")
    console.plain(f"  1. Open {where} in {app_name}:")
    console.plain("")
    console.plain(f"     {open_command} {target_path}")
    console.plain("")
    console.plain(f"  2. {chat_hint}")
    console.plain("")
    console.plain("  3. Copy and paste the prompt above to start building your agent")
    console.plain("")


class CursorProvider(CodingAssistantProvider):
    id = "cursor"
    display_name = "Cursor"
    command = ""

    async def setup(self, context: SetupContext) -> None:
        merge_mcp_servers(context.project_path / ".cursor" / "mcp.json", context.mcp_config)

    def manual_command(self, prompt: str) -> str:
        return "cursor ."

    def launch(self, context: LaunchContext) -> None:
        # Cursor is an IDE; the user opens it themselves.
        _print_ide_instructions(
            "Cursor", "cursor", "Open Cursor Composer (Cmd+I or Ctrl+I)", context.target_path
        )


class KilocodeProvider(CodingAssistantProvider):
    id = "kilocode"
    display_name = "Kilocode CLI"
    command = "kilocode"
    install_command = "npm install -g @kilocode/cli"

    async def setup(self, context: SetupContext) -> None:
        merge_mcp_servers(context.project_path / ".mcp.json", context.mcp_config)

    def terminal_command(self, context: LaunchContext) -> TerminalCommand:
        return TerminalCommand(
            self.command, (context.prompt,), context.project_path, replace_process=False
        )


class AntigravityProvider(CodingAssistantProvider):
    id = "antigravity"
    display_name = "Antigravity"
    command = ""

    async def setup(self, context: SetupContext) -> None:
        # Antigravity only reads MCP servers from the user's home config.
        config_path = get_home_dir() / ".gemini" / "antigravity" / "mcp_config.json"
        merge_mcp_servers(config_path, context.mcp_config)

    def manual_command(self, prompt: str) -> str:
        return "antigravity ."

    def launch(self, context: LaunchContext) -> None:
        _print_ide_instructions(
            "Antigravity", "antigravity", "Open the Agent Manager panel", context.target_path
        )


class GeminiCliProvider(CodingAssistantProvider):
    id = "gemini-cli"
    display_name = "Gemini CLI"
    command = "gemini"
    install_command = "npm install -g @google/gemini-cli"
    required_env_var = "GEMINI_API_KEY"

    async def setup(self, context: SetupContext) -> None:
        merge_mcp_servers(get_home_dir() / ".gemini" / "settings.json", context.mcp_config)

    def terminal_command(self, context: LaunchContext) -> TerminalCommand:
        return TerminalCommand(self.command, ("-i", context.prompt), context.project_path)

    def manual_command(self, prompt: str) -> str:
        return f'{self.command} -i "{prompt}"'


class CrushProvider(CodingAssistantProvider):
    id = "crush"
    display_name = "Crush"
    command = "crush"
    install_command = "npm install -g @charmland/crush"

    async def setup(self, context: SetupContext) -> None:
        config_path = context.project_path / "crush.json"
        data = _read_json(config_path) or {"$schema": "https://charm.land/crush.json"}
        servers = data.get("mcp")
        if not isinstance(servers, dict):
            servers = {}
        servers.update(to_crush_servers(context.mcp_config))
        data["mcp"] = servers
        data.setdefault(
            "projectContext",
            {
                "framework": context.config.framework,
                "language": context.config.language,
                "goal": context.config.project_goal,
            },
        )
        _write_json(config_path, data)

    def terminal_command(self, context: LaunchContext) -> TerminalCommand:
        # Crush takes no initial prompt on its command line.
        return TerminalCommand(self.command, (), context.project_path)

    def manual_command(self, prompt: str) -> str:
        return self.command


class QwenCodeProvider(CodingAssistantProvider):
    id = "qwen-code"
    display_name = "Qwen Code"
    command = "qwen"
    install_command = "npm install -g @qwen-code/qwen-code"

    async def setup(self, context: SetupContext) -> None:
        # Qwen Code is a Gemini CLI fork and shares its settings file.
        merge_mcp_servers(get_home_dir() / ".gemini" / "settings.json", context.mcp_config)

    def terminal_command(self, context: LaunchContext) -> TerminalCommand:
        return TerminalCommand(self.command, ("-i", context.prompt), context.project_path)

    def manual_command(self, prompt: str) -> str:
        return f'{self.command} -i "{prompt}"'


class NoneProvider(CodingAssistantProvider):
    """For users who set up the project and prompt their assistant themselves."""

    id = "none"
    display_name = "None - I will prompt it myself"
    command = ""
    capabilities = frozenset({Capability.SETUP, Capability.AVAILABILITY})

    async def setup(self, context: SetupContext) -> None:
        merge_mcp_servers(context.project_path / ".mcp.json", context.mcp_config)


CODING_ASSISTANTS: list[CodingAssistantProvider] = [
    ClaudeCodeProvider(),
    CursorProvider(),
    KilocodeProvider(),
    AntigravityProvider(),
    GeminiCliProvider(),
    CrushProvider(),
    QwenCodeProvider(),
    NoneProvider(),
]
