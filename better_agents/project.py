"""The ``init`` flow: collect choices, write the project, hand off."""

import logging
import time
from pathlib import Path
from typing import Optional

from better_agents import analytics, console
from better_agents.agents_guide import build_agents_guide
from better_agents.collect import SetupCancelled, collect_config
from better_agents.kickoff import kickoff_assistant
from better_agents.mcp_config import build_mcp_config
from better_agents.project_config import CLIOptions, ProjectConfig
from better_agents.providers.base import Capability, SetupContext
from better_agents.registry import ProviderRegistry, get_registry
from better_agents.scaffolding import create_project_structure, ensure_gitignore
from better_agents.skills.fetcher import fetch_skills
from better_agents.skills.installer import install_skills

logger = logging.getLogger(__name__)

BANNER = """
▗▄▄▖ ▗▄▄▄▖▗▄▄▄▖▗▄▄▄▖▗▄▄▄▖▗▄▄▖
▐▌ ▐▌▐▌     █    █  ▐▌   ▐▌ ▐▌
▐▛▀▚▖▐▛▀▀▘  █    █  ▐▛▀▀▘▐▛▀▚▖
▐▙▄▞▘▐▙▄▄▖  █    █  ▐▙▄▄▖▐▌ ▐▌

 ▗▄▖  ▗▄▄▖▗▄▄▄▖▗▖  ▗▖▗▄▄▄▖▗▄▄▖
▐▌ ▐▌▐▌   ▐▌   ▐▛▚▖▐▌  █ ▐▌
▐▛▀▜▌▐▌▝▜▌▐▛▀▀▘▐▌ ▝▜▌  █  ▝▀▚▖
▐▌ ▐▌▝▚▄▞▘▐▙▄▄▖▐▌  ▐▌  █ ▗▄▄▞▘
"""


async def setup_project(
    project_path: Path,
    config: ProjectConfig,
    registry: ProviderRegistry,
) -> None:
    """Write every generated file. Each step runs after the previous one."""
    with console.console.status("Setting up your agent project...") as status:
        project_path.mkdir(parents=True, exist_ok=True)

        await create_project_structure(project_path, config, registry)
        status.update("Project structure created")

        framework = registry.framework(config.framework)
        if framework.supports(Capability.SETUP):
            await framework.setup(SetupContext(project_path=project_path, config=config))
        status.update("Framework configuration set up")

        # After framework setup, which may write its own .gitignore.
        ensure_gitignore(project_path)

        if config.skills:
            status.update("Installing selected skills...")
            await install_skills(config.skills, project_path, status=status)

        mcp_config = build_mcp_config(config, registry)
        assistant = registry.coding_assistant(config.coding_assistant)
        if assistant.supports(Capability.SETUP):
            await assistant.setup(
                SetupContext(project_path=project_path, config=config, mcp_config=mcp_config)
            )
        status.update("Editor configurations set up")

        skills_metadata = None
        if config.skills:
            # The cache was primed during collection, so this is normally a read.
            catalog = await fetch_skills()
            skills_metadata = [skill for skill in catalog if skill.name in config.skills]
        build_agents_guide(project_path, config, skills_metadata, registry)
        status.update("AGENTS.md generated")

    console.success("Project setup complete!")


async def init_project(
    target_path: str,
    options: CLIOptions,
    registry: Optional[ProviderRegistry] = None,
) -> None:
    """Run the full init flow for ``target_path``.

    Failures are reported to analytics and re-raised for the CLI to turn into
    an exit status.
    """
    registry = registry or get_registry()
    started = time.monotonic()

    console.plain(BANNER)
    analytics.show_telemetry_notice()
    analytics.track_event(
        "cli_init_started", {"pathType": "current" if target_path == "." else "new"}
    )

    try:
        config = await collect_config(options, registry)
    except SetupCancelled:
        console.warning("Setup cancelled by user")
        _track_failure("config-collection", "cancelled", started)
        raise
    except Exception as e:
        _track_failure("config-collection", type(e).__name__, started)
        raise

    project_path = (Path.cwd() / target_path).resolve()
    logger.debug(
        "Initializing %s (language=%s framework=%s assistant=%s llm=%s)",
        project_path,
        config.language,
        config.framework,
        config.coding_assistant,
        config.llm_provider,
    )

    try:
        await setup_project(project_path, config, registry)
    except Exception as e:
        console.error("Failed to set up project")
        _track_failure("project-setup", type(e).__name__, started, config)
        raise

    console.success("Your agent project is ready!")
    console.info(f"Project location: {project_path}")
    analytics.shutdown()

    kickoff_assistant(project_path, target_path, config, registry)


def _track_failure(
    step: str,
    error_type: str,
    started: float,
    config: Optional[ProjectConfig] = None,
) -> None:
    properties: dict[str, object] = {
        "step": step,
        "errorType": error_type,
        "durationSec": time.monotonic() - started,
        "success": False,
    }
    if config is not None:
        properties.update(
            {
                "language": config.language,
                "framework": config.framework,
                "codingAssistant": config.coding_assistant,
                "llmProvider": config.llm_provider,
            }
        )
    analytics.track_event("cli_init_failed", properties)
    analytics.shutdown()
