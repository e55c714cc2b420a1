"""The MCP server configuration shared by every coding assistant."""

from typing import Any, Optional

from better_agents.project_config import ProjectConfig
from better_agents.providers.base import Capability
from better_agents.registry import ProviderRegistry, get_registry


def langwatch_server(endpoint: Optional[str] = None) -> dict[str, Any]:
    server: dict[str, Any] = {
        "command": "npx",
        "args": ["-y", "@langwatch/mcp-server"],
    }
    if endpoint:
        server["env"] = {"LANGWATCH_ENDPOINT": endpoint}
    return server


def build_mcp_config(
    config: ProjectConfig, registry: Optional[ProviderRegistry] = None
) -> dict[str, Any]:
    """``{"mcpServers": {...}}`` with LangWatch plus the framework's server."""
    registry = registry or get_registry()
    servers: dict[str, Any] = {"langwatch": langwatch_server(config.langwatch_endpoint)}

    framework = registry.framework(config.framework)
    if framework.supports(Capability.MCP_CONFIG):
        framework_server = framework.get_mcp_config()
        if framework_server:
            servers[framework.id] = framework_server
    return {"mcpServers": servers}
