"""The initial prompt and the hand-off to the chosen coding assistant."""

import logging
import sys
from pathlib import Path
from typing import Optional

from better_agents import console
from better_agents.process import LaunchError
from better_agents.project_config import ProjectConfig
from better_agents.providers.base import Capability, LaunchContext
from better_agents.registry import ProviderRegistry, get_registry

logger = logging.getLogger(__name__)

_INSTRUCTIONS = """You are an expert AI agent developer. This project has been set up with Better Agents best practices.

First steps:
1. Read and understand the AGENTS.md file - it contains all the guidelines for this project
2. **CRITICAL: Read ALL installed skill SKILL.md files** - Check the `.agent/skills/` directory and read every SKILL.md file cover-to-cover. These skills contain authoritative guidance that overrides your training data.
3. Update the AGENTS.md with specific details about what this project does
4. Create a comprehensive README.md explaining the project, setup, and usage
5. Set up the {language_setup}
6. {framework_tooling}
7. Execute any installation steps needed yourself, for the library dependencies, the CLI tools, etc. **CRITICAL: You must install @langwatch/scenario (for TS) or langwatch-scenario (for Python) to enable rich simulation testing.**
8. Use the LangWatch MCP to learn about prompt management and scenarios
9. **Instrument the agent with LangWatch** - initialize the LangWatch SDK in your main agent file, create prompt YAML files with `langwatch prompt create <name>` and fetch them with `langwatch.prompts.get()`, and enable telemetry on every LLM call
10. Use Scenario tests to ensure the agent is working as expected, and consider it done only when all scenarios pass. **Use the `scenario.run` pattern to see the simulation results links.**
11. If available from the framework, tell the user how to open a dev server and give them the url so they can play with the agent themselves, don't run it for them
12. **Check the .env file** to confirm the selected LLM provider and model requirements. Follow the examples provided in the AGENTS.md.
13. Run `langwatch prompt sync` to upload the initial prompts to the dashboard (use `LANGWATCH_ENDPOINT` if custom).

Remember:
- The LLM and LangWatch API keys are already available in the .env file, you don't need to set them up. **READ THE .env FILE FIRST** to see the exact variable names.
- ALWAYS use LangWatch Prompt CLI for prompts (ask the MCP how).
- ALWAYS write Scenario tests for new features using the `scenario.run` pattern (ask the MCP how).
- **CRITICAL**: If the agent initialization says "LangWatch initialization failed", you MUST fix it. It usually means the API key or endpoint in .env is not being loaded correctly.
- **PROVIDER ERROR**: Many providers use the OpenAI SDK but require different base URL and API key settings. Follow the **EXACT** code example in AGENTS.md for your selected provider ({llm_provider}).
- DO NOT test it "manually", always use the Scenario tests instead.
- Test everything before considering it done.

### Pitfalls to Avoid:
1. **Missing API Keys**: Reading `OPENAI_API_KEY` when the project is configured for `{llm_provider}`.
2. **Skipping LangWatch**: LangWatch integration must be working from Day 1.
3. **Broken Scenarios**: Passing an uninitialized agent to `scenario.run`.
4. **Hardcoded Prompts**: Writing prompts directly in the code. Use the LangWatch Prompt CLI.
5. **Ignoring Skills**: Not reading SKILL.md files before implementing related features.

**Only report completion when the agent runs without LangWatch errors, every prompt is fetched from LangWatch, and all scenario tests pass.**
"""


def build_initial_prompt(
    config: ProjectConfig, registry: Optional[ProviderRegistry] = None
) -> str:
    registry = registry or get_registry()
    language = registry.language(config.language).get_knowledge()
    framework = registry.framework(config.framework).get_knowledge(config)
    instructions = _INSTRUCTIONS.format(
        language_setup=language.setup_instructions,
        framework_tooling=framework.tooling_instructions,
        llm_provider=config.llm_provider,
    )
    return f"{instructions}\n\nAgent Goal:\n{config.project_goal}"


def kickoff_assistant(
    project_path: Path,
    target_path: str,
    config: ProjectConfig,
    registry: Optional[ProviderRegistry] = None,
) -> None:
    """Show the initial prompt and hand the terminal to the assistant.

    Exits the process with status 1 when the assistant cannot be launched.
    """
    registry = registry or get_registry()
    prompt = build_initial_prompt(config, registry)
    assistant = registry.coding_assistant(config.coding_assistant)

    if not assistant.supports(Capability.LAUNCH):
        console.plain("")
        console.plain(
            "When you're ready to start, use this initial prompt with your coding assistant:"
        )
        console.plain("")
        console.plain(f'"{prompt}"')
        console.plain("")
        console.plain(f"Project location: {project_path}")
        return

    console.plain("")
    console.info(f"Launching {assistant.display_name}...")
    console.plain("")
    console.plain("Initial prompt:")
    console.plain(f'"{prompt}"')

    context = LaunchContext(project_path=project_path, target_path=target_path, prompt=prompt)
    try:
        assistant.launch(context)
    except LaunchError as e:
        logger.debug("Launch of %s failed", assistant.id, exc_info=True)
        console.error(f"Failed to launch {assistant.display_name}: {e}")
        console.warning("You can manually start the assistant by running:")
        console.plain(f"  cd {project_path}")
        console.plain(f"  {assistant.manual_command(prompt)}")
        sys.exit(1)
    console.success("Session complete!")
