"""AGENTS.md generation.

The guide is assembled from ordered sections: overview, skills, core
principles, the framework's own section and finally the project structure
and workflow reference. Skills come right after the overview so they stay
visible to the assistant.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from better_agents.constants import (
    DEFAULT_LANGWATCH_ENDPOINT,
    SKILLS_INSTALL_DIR,
    SKILLS_REPO_URL,
)
from better_agents.project_config import ProjectConfig
from better_agents.registry import ProviderRegistry, get_registry
from better_agents.skills.models import SkillMetadata

logger = logging.getLogger(__name__)


def build_overview_section(config: ProjectConfig, registry: ProviderRegistry) -> str:
    framework = registry.framework(config.framework).display_name
    language = registry.language(config.language).display_name
    return f"""# Agent Development Guidelines

**IMPORTANT**: Prefer retrieval-led reasoning over pre-training-led reasoning. Always consult the documentation in this file and installed skills before implementing features. This project may use APIs, patterns, or tools that differ from your training data.

## Project Overview

**Goal:** {config.project_goal}

**Framework:** {framework}
**Language:** {language}

This project follows the Better Agents standard for building production-ready AI agents.

---
"""


def _describe(name: str, metadata: dict[str, SkillMetadata]) -> str:
    meta = metadata.get(name)
    if meta and meta.description:
        return meta.description
    return name.replace("-", " ")


def build_skills_index(
    skills: Sequence[str], metadata: Optional[Sequence[SkillMetadata]] = None
) -> str:
    """Compressed one-line index followed by a readable list.

    Index entries look like ``|name:{SKILL.md}|description|tags:a,b|mcp:server``
    where the tags and mcp parts only appear when known.
    """
    by_name = {meta.name: meta for meta in metadata or ()}
    parts = [f"[Skills Index]|root:{SKILLS_INSTALL_DIR}"]
    for name in skills:
        entry = f"|{name}:{{SKILL.md}}|{_describe(name, by_name)}"
        meta = by_name.get(name)
        if meta and meta.tags:
            entry += f"|tags:{','.join(meta.tags)}"
        if meta and meta.required_mcp_server:
            entry += f"|mcp:{meta.required_mcp_server}"
        parts.append(entry)

    readable = "\n".join(
        f"- **{name}**: `{SKILLS_INSTALL_DIR}/{name}/SKILL.md` - {_describe(name, by_name)}"
        for name in skills
    )
    return f"{''.join(parts)}\n\n{readable}"


def build_skills_discovery_section() -> str:
    return f"""## Skills (None Installed)

This project does not have any skills installed yet. Skills provide specialized knowledge, patterns, and workflows for specific domains.

### Why Use Skills?

Skills give you:
- **Expert patterns** for complex integrations (MCP servers, OAuth, external APIs)
- **Battle-tested workflows** that follow security best practices
- **Consistent architecture** across different capabilities

### Browse Available Skills

```bash
npx skills add {SKILLS_REPO_URL} --list
```

### Install a Skill

```bash
npx skills add {SKILLS_REPO_URL} --skill <skill-name>
```

After installing a skill, its documentation will appear in `{SKILLS_INSTALL_DIR}/<skill-name>/SKILL.md`.

---
"""


def build_skills_section(
    skills: Sequence[str], metadata: Optional[Sequence[SkillMetadata]] = None
) -> str:
    if not skills:
        return build_skills_discovery_section()
    return f"""## Installed Skills

**IMPORTANT**: Prefer retrieval-led reasoning over pre-training-led reasoning for any tasks involving installed skills. Always read the skill's SKILL.md file before implementing related features.

{build_skills_index(skills, metadata)}

### Skill Usage Protocol

When working on tasks related to installed skills:

1. **Read First**: Open and read the skill's `SKILL.md` cover-to-cover before writing any code
2. **Follow Exactly**: Adhere strictly to patterns, tools, and architectural decisions in the skill
3. **Use Recommended Tools**: Skills define specific MCP tools or libraries that MUST be used
4. **Verify Compliance**: After implementation, re-check the skill docs to ensure full compliance

If unsure about implementation, the skill documentation is the source of truth.

### Adding More Skills

```bash
npx skills add {SKILLS_REPO_URL} --skill <skill-name>
```

After installing, read the new SKILL.md immediately before proceeding.

---
"""


def build_principles_section(config: ProjectConfig) -> str:
    return """## Core Principles

### 1. Scenario Agent Testing

Scenario tests simulate real users talking to your agent and judge the outcome. Every feature gets at least one scenario test before it is considered done.

- Write scenarios for the happy path and for known failure modes
- Run them often; they are the source of truth for agent behaviour
- Learn the Scenario APIs through the LangWatch MCP

### 2. Prompt Management

Prompts are versioned YAML files managed with the LangWatch Prompt CLI, never strings in code.

- Create prompts with `langwatch prompt create <name>`
- Fetch them at runtime with `langwatch.prompts.get()`
- Keep `prompts.json` and the `prompts/` directory in sync with `langwatch prompt sync`

### 3. Evaluations

Probabilistic components (retrieval, classification, extraction) are measured with evaluation notebooks in `tests/evaluations/` before they are optimised.

### 4. Observability

Instrument the agent with LangWatch from the first commit so every run produces a trace.

---
"""


def build_workflow_section(
    config: ProjectConfig, registry: ProviderRegistry
) -> str:
    language = registry.language(config.language).get_knowledge()
    framework = registry.framework(config.framework).get_knowledge(config)
    src_dir = language.source_dir
    dashboard = config.langwatch_endpoint or f"{DEFAULT_LANGWATCH_ENDPOINT}/"
    return f"""## Project Structure

This project follows a standardized structure for production-ready agents:

```
|__ {src_dir}/           # Main application code
|__ prompts/          # Versioned prompt files (YAML)
|_____ *.yaml
|__ tests/
|_____ evaluations/   # Jupyter notebooks for component evaluation
|________ *.ipynb
|_____ scenarios/     # End-to-end scenario tests
|________ {language.scenario_pattern}
|__ prompts.json      # Prompt registry
|__ .env              # Environment variables (never commit!)
```

---

## Development Workflow

### When Starting a New Feature:

1. **Read Relevant SKILL.md Files First**: Check `{SKILLS_INSTALL_DIR}/` before writing any code
2. **Understand Requirements**: Clarify what the agent should do
3. **Design the Approach**: Plan which components and skills you'll need
4. **Implement with Prompts**: Use the LangWatch Prompt CLI to create and manage prompts
5. **Write Unit Tests**: Test deterministic components
6. **Create Evaluations**: Build evaluation notebooks for probabilistic components
7. **Write Scenario Tests**: Create end-to-end tests using Scenario
8. **Run Tests**: Verify everything works before moving on

### Always:

- Read SKILL.md files before implementing related features
- Fetch prompts from LangWatch using `langwatch.prompts.get()`
- Version control your prompts using `langwatch prompt sync`
- Write Scenario tests for new features using `scenario.run()`
- Verify traces appear in the LangWatch dashboard after running tests

### Never:

- Hardcode prompts in application code
- Skip testing new features
- Commit API keys or sensitive data
- Optimize without measuring (use evaluations first)

---

## Using LangWatch MCP

The LangWatch MCP server provides expert guidance on prompt management, Scenario tests, evaluations and agent development best practices. For Scenario specifically, always navigate its documentation through the LangWatch MCP.

---

## Getting Started

1. **Set up your environment**: Copy `.env.example` to `.env` and fill in your API keys
2. **Learn the tools**: Ask the LangWatch MCP about prompt management and testing
3. **Start building**: Implement your agent in the `{src_dir}/` directory
4. **Write tests**: Create scenario tests for your agent's capabilities
5. **Iterate**: Use evaluations to improve your agent's performance

---

## Resources

- **Scenario Documentation**: https://scenario.langwatch.ai/
- **Agent Testing Pyramid**: https://scenario.langwatch.ai/best-practices/the-agent-testing-pyramid
- **LangWatch Dashboard**: {dashboard}
{framework.resources_line}
"""


def render_agents_guide(
    config: ProjectConfig,
    skills_metadata: Optional[Sequence[SkillMetadata]] = None,
    registry: Optional[ProviderRegistry] = None,
) -> str:
    registry = registry or get_registry()
    framework = registry.framework(config.framework).get_knowledge(config)
    sections = [
        build_overview_section(config, registry),
        build_skills_section(config.skills, skills_metadata),
        build_principles_section(config),
        framework.agents_guide_section,
        build_workflow_section(config, registry),
    ]
    return "\n".join(sections)


def build_agents_guide(
    project_path: Path,
    config: ProjectConfig,
    skills_metadata: Optional[Sequence[SkillMetadata]] = None,
    registry: Optional[ProviderRegistry] = None,
) -> Path:
    """Write AGENTS.md into the project and return its path."""
    path = project_path / "AGENTS.md"
    path.write_text(
        render_agents_guide(config, skills_metadata, registry), encoding="utf-8"
    )
    logger.debug("Wrote %s", path)
    return path
