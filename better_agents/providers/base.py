"""Capability interface shared by every selectable provider.

A provider is a named strategy object for one language, agent framework,
coding assistant or LLM provider. Orchestration code never branches on
provider identifiers; it asks a provider whether it ``supports`` a
capability and then calls it.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from better_agents.project_config import ProjectConfig


class Capability(str, Enum):
    KNOWLEDGE = "knowledge"
    MCP_CONFIG = "mcp_config"
    SETUP = "setup"
    AVAILABILITY = "availability"
    LAUNCH = "launch"


@dataclass(frozen=True)
class Availability:
    """Result of probing the environment for an external tool."""

    installed: bool
    install_command: Optional[str] = None


@dataclass(frozen=True)
class SetupContext:
    project_path: Path
    config: ProjectConfig
    mcp_config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LaunchContext:
    project_path: Path
    # The path as the user typed it, used in printed instructions.
    target_path: str
    prompt: str


class Provider:
    """Base class for all providers.

    Subclasses set ``id``, ``display_name`` and ``capabilities`` and
    override the operations they declare. Undeclared operations keep the
    inert defaults below.
    """

    id: str = ""
    display_name: str = ""
    capabilities: frozenset[Capability] = frozenset({Capability.KNOWLEDGE})

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def get_knowledge(self, config: ProjectConfig) -> Any:
        """Static knowledge about this provider. Pure, never fails."""
        return None

    def get_mcp_config(self) -> Optional[dict[str, Any]]:
        """MCP server entry contributed to the project, if any."""
        return None

    async def setup(self, context: SetupContext) -> None:
        """First-time project setup. Must be safe to run again."""
        return None

    async def is_available(self) -> Availability:
        """Check whether the external tool is installed. Never raises."""
        return Availability(installed=True)

    def launch(self, context: LaunchContext) -> None:
        """Hand terminal control to the external program."""
        raise NotImplementedError(f"Provider '{self.id}' cannot be launched.")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"
