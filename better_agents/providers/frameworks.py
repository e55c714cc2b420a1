"""Agent framework providers.

Every framework targets one language, contributes a documentation MCP
server, and supplies the framework-specific section of AGENTS.md.
"""

from dataclasses import dataclass
from typing import Any, Callable

from better_agents.project_config import ProjectConfig
from better_agents.providers.base import Capability, Provider
from better_agents.providers.llm_providers import model_example_for


@dataclass(frozen=True)
class FrameworkKnowledge:
    setup_instructions: str
    tooling_instructions: str
    agents_guide_section: str
    resources_line: str


def _mcpdoc_server(label: str, url: str) -> dict[str, Any]:
    return {
        "type": "stdio",
        "command": "uvx",
        "args": [
            "--from",
            "mcpdoc",
            "mcpdoc",
            "--urls",
            f"{label}:{url}",
            "--transport",
            "stdio",
        ],
    }


class FrameworkProvider(Provider):
    capabilities = frozenset({Capability.KNOWLEDGE, Capability.MCP_CONFIG})

    def __init__(
        self,
        id: str,
        display_name: str,
        language: str,
        knowledge: Callable[[ProjectConfig], FrameworkKnowledge],
        mcp_config: dict[str, Any],
    ):
        self.id = id
        self.display_name = display_name
        self.language = language
        self._knowledge = knowledge
        self._mcp_config = mcp_config

    def get_knowledge(self, config: ProjectConfig) -> FrameworkKnowledge:
        return self._knowledge(config)

    def get_mcp_config(self) -> dict[str, Any]:
        # Callers may mutate the result.
        return {**self._mcp_config, "args": list(self._mcp_config.get("args", []))}


_AGNO_MODEL_CLASSES = {
    "anthropic": ("from agno.models.anthropic import Claude", "Claude"),
    "gemini": ("from agno.models.google import Gemini", "Gemini"),
    "bedrock": ("from agno.models.aws import AwsBedrock", "AwsBedrock"),
    "grok": ("from agno.models.xai import xAI", "xAI"),
}


def _agno_knowledge(config: ProjectConfig) -> FrameworkKnowledge:
    model_id = model_example_for(config.llm_provider)
    model_import, model_class = _AGNO_MODEL_CLASSES.get(
        config.llm_provider, ("from agno.models.openai import OpenAIChat", "OpenAIChat")
    )
    if config.llm_provider == "openrouter":
        model_init = (
            f'OpenAIChat(id="{model_id}", base_url="https://openrouter.ai/api/v1", '
            'api_key=os.getenv("OPENROUTER_API_KEY"))'
        )
    else:
        model_init = f'{model_class}(id="{model_id}")'

    section = f"""## Framework-Specific Guidelines

### Agno Framework

**Always use the Agno MCP for learning:**

- The Agno MCP server provides real-time documentation
- Ask it questions about Agno APIs and best practices
- Follow Agno's recommended patterns for agent development

**Core Rules:**
- NEVER create agents in loops - reuse them for performance
- Always use output_schema for structured responses
- PostgreSQL in production, SQLite for dev only
- Start with a single agent, scale up only when needed

**Basic Agent:**
```python
import os
from agno.agent import Agent
{model_import}

agent = Agent(
    model={model_init},
    instructions="You are a helpful assistant",
    markdown=True,
)
agent.print_response("Your query", stream=True)
```

**Structured Output:**
```python
from pydantic import BaseModel

class Result(BaseModel):
    summary: str
    findings: list[str]

agent = Agent(model={model_init}, output_schema=Result)
result: Result = agent.run(query).content
```

**Common Mistakes to Avoid:**
- Creating agents in loops (massive performance hit)
- Using Team when a single agent would work
- Forgetting search_knowledge=True with knowledge
- Using SQLite in production

---
"""
    return FrameworkKnowledge(
        setup_instructions="Python w/uv + pytest",
        tooling_instructions="Use the Agno MCP to learn about Agno and how to build agents",
        agents_guide_section=section,
        resources_line="- **Agno Documentation**: https://docs.agno.com/",
    )


def _langgraph_py_knowledge(config: ProjectConfig) -> FrameworkKnowledge:
    section = """## Framework-Specific Guidelines

### LangGraph (Python)

**Always use the LangGraph MCP for learning:**

- The LangGraph MCP server serves the current LangGraph and LangChain docs
- Ask it how to model state, nodes and edges before writing a graph
- Prefer the prebuilt agents (`create_react_agent`) for simple tool-calling agents

**Core Rules:**
- Keep graph state in a typed `TypedDict` or Pydantic model
- Compile the graph once and reuse it across invocations
- Use a checkpointer when the agent needs conversation memory
- Read the model configuration from `.env`; never hardcode API keys

---
"""
    return FrameworkKnowledge(
        setup_instructions="Python w/uv + pytest",
        tooling_instructions="Use the LangGraph MCP to learn about LangGraph and how to build agents",
        agents_guide_section=section,
        resources_line="- **LangGraph/LangChain Documentation**: Use the LangGraph MCP for up-to-date docs",
    )


def _google_adk_knowledge(config: ProjectConfig) -> FrameworkKnowledge:
    section = """## Framework-Specific Guidelines

### Google ADK

**Always use the Google ADK MCP for learning:**

- The Google ADK MCP server serves the current ADK documentation
- Ask it about `LlmAgent`, tools, sessions and runners before implementing them

**Core Rules:**
- Define the root agent once in `app/agent.py` and expose it as `root_agent`
- Give every tool a clear docstring; ADK uses it as the tool description
- Use `adk web` for local exploration, Scenario tests for verification

---
"""
    return FrameworkKnowledge(
        setup_instructions="Python w/uv + pytest",
        tooling_instructions="Use the Google ADK MCP to learn about Google ADK and how to build agents",
        agents_guide_section=section,
        resources_line="- **Google ADK Documentation**: Use the Google ADK MCP for up-to-date docs",
    )


def _mastra_knowledge(config: ProjectConfig) -> FrameworkKnowledge:
    section = """## Framework-Specific Guidelines

### Mastra Framework

**Always use the Mastra MCP for learning:**

- The Mastra MCP server provides real-time documentation
- Ask it questions about Mastra APIs and best practices
- Follow Mastra's recommended patterns for agent development

**LLM Provider:**
- Check the `.env` file for the configured LLM provider and API keys
- Use the appropriate AI SDK provider (e.g., `openai`, `anthropic`, `google`)
- If using OpenRouter, use the `openai` provider with `baseURL: "https://openrouter.ai/api/v1"` and the `OPENROUTER_API_KEY`

**Initial setup:**
1. Use `pnpx mastra init --default` right after `pnpm init`, before setting up the rest of the project
2. Explore the setup it created and remove what is not needed
3. Implement the requested agent and test it
4. Open the UI for the user using `pnpx mastra dev`

---
"""
    return FrameworkKnowledge(
        setup_instructions="TypeScript w/pnpm + vitest",
        tooling_instructions="Use the Mastra MCP to learn about Mastra and how to build agents",
        agents_guide_section=section,
        resources_line="- **Mastra Documentation**: Use the Mastra MCP for up-to-date docs",
    )


def _langgraph_ts_knowledge(config: ProjectConfig) -> FrameworkKnowledge:
    section = """## Framework-Specific Guidelines

### LangGraph (TypeScript)

**Always use the LangGraph MCP for learning:**

- The LangGraph MCP server serves the current LangGraph.js documentation
- Ask it how to define `Annotation`-based state and compile graphs

**Core Rules:**
- Compile graphs once and reuse them
- Keep prompts out of the code; fetch them from LangWatch
- Read provider configuration from `.env`

---
"""
    return FrameworkKnowledge(
        setup_instructions="TypeScript w/pnpm + vitest",
        tooling_instructions="Use the LangGraph MCP to learn about LangGraph.js and how to build agents",
        agents_guide_section=section,
        resources_line="- **LangGraph.js Documentation**: Use the LangGraph MCP for up-to-date docs",
    )


def _vercel_ai_knowledge(config: ProjectConfig) -> FrameworkKnowledge:
    section = """## Framework-Specific Guidelines

### Vercel AI SDK Framework

**Always use the AI SDK MCP for learning:**

- The AI SDK MCP server provides real-time documentation for the Vercel AI SDK
- Ask it questions about `generateText`, `streamText` and tool definitions

**Tool Definition Best Practices:**
- Define tools with `tool()` and a Zod `inputSchema`
- Keep tool descriptions short and specific
- Use `stopWhen` to bound multi-step tool loops

**LLM Provider:**
- Use the provider package matching the `.env` configuration
- Enable `experimental_telemetry` in every LLM call

---
"""
    return FrameworkKnowledge(
        setup_instructions="TypeScript w/pnpm + vitest",
        tooling_instructions="Use the AI SDK MCP to learn about the Vercel AI SDK and how to build agents",
        agents_guide_section=section,
        resources_line="- **AI SDK Documentation**: Use the AI SDK MCP for up-to-date docs",
    )


AGNO = FrameworkProvider(
    "agno",
    "Agno",
    "python",
    _agno_knowledge,
    _mcpdoc_server("Agno", "https://docs.agno.com/llms.txt"),
)

LANGGRAPH_PY = FrameworkProvider(
    "langgraph-py",
    "LangGraph (Python)",
    "python",
    _langgraph_py_knowledge,
    _mcpdoc_server("LangGraph", "https://langchain-ai.github.io/langgraph/llms.txt"),
)

GOOGLE_ADK = FrameworkProvider(
    "google-adk",
    "Google ADK",
    "python",
    _google_adk_knowledge,
    _mcpdoc_server(
        "Google-Adk", "https://github.com/google/adk-python/blob/main/llms.txt"
    ),
)

MASTRA = FrameworkProvider(
    "mastra",
    "Mastra",
    "typescript",
    _mastra_knowledge,
    {"type": "stdio", "command": "npx", "args": ["-y", "@mastra/mcp-docs-server"]},
)

LANGGRAPH_TS = FrameworkProvider(
    "langgraph-ts",
    "LangGraph (TypeScript)",
    "typescript",
    _langgraph_ts_knowledge,
    _mcpdoc_server("LangGraphJS", "https://langchain-ai.github.io/langgraphjs/llms.txt"),
)

VERCEL_AI = FrameworkProvider(
    "vercel-ai",
    "Vercel AI SDK",
    "typescript",
    _vercel_ai_knowledge,
    _mcpdoc_server("AI-SDK", "https://ai-sdk.dev/llms.txt"),
)

FRAMEWORKS = [AGNO, LANGGRAPH_PY, GOOGLE_ADK, MASTRA, LANGGRAPH_TS, VERCEL_AI]
