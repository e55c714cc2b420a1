"""Writing the generated project's directories and starter files."""

import json
import logging
from pathlib import Path
from typing import Optional

import yaml

from better_agents.constants import GLOBAL_DIR_NAME
from better_agents.credentials import LANGWATCH_API_KEY_VAR, LANGWATCH_ENDPOINT_VAR
from better_agents.project_config import ProjectConfig
from better_agents.providers.base import Capability, SetupContext
from better_agents.registry import ProviderRegistry, get_registry

logger = logging.getLogger(__name__)

GITIGNORE_ENTRIES = (".env", GLOBAL_DIR_NAME)


def project_directories(source_dir: str) -> list[str]:
    return [
        source_dir,
        "prompts",
        "tests/evaluations",
        "tests/scenarios",
    ]


def render_sample_prompt(config: ProjectConfig, model: str) -> str:
    prompt = {
        "model": model,
        "temperature": 0.7,
        "messages": [
            {
                "role": "system",
                "content": (
                    "You are a helpful AI assistant.\n\n"
                    f"Your goal is: {config.project_goal}\n"
                ),
            }
        ],
    }
    body = yaml.safe_dump(prompt, sort_keys=False, allow_unicode=True)
    return "# Sample prompt for your agent\n" + body


def render_env_file(config: ProjectConfig, env_lines: tuple[str, ...]) -> str:
    lines = ["# LLM Provider", *env_lines, "", "# LangWatch"]
    lines.append(f"{LANGWATCH_API_KEY_VAR}={config.langwatch_api_key}")
    if config.langwatch_endpoint:
        lines.append(f"{LANGWATCH_ENDPOINT_VAR}={config.langwatch_endpoint}")
    return "\n".join(lines) + "\n"


def render_env_example(env_lines: tuple[str, ...]) -> str:
    """The .env file with every value replaced by a placeholder."""
    lines = ["# LLM Provider"]
    for line in env_lines:
        name = line.split("=", 1)[0]
        lines.append(f"{name}=your_{name.lower()}_here")
    lines += [
        "",
        "# LangWatch",
        f"{LANGWATCH_API_KEY_VAR}=your_langwatch_api_key_here",
        f"# {LANGWATCH_ENDPOINT_VAR}=https://your-langwatch-instance.example.com",
    ]
    return "\n".join(lines) + "\n"


async def create_project_structure(
    project_path: Path,
    config: ProjectConfig,
    registry: Optional[ProviderRegistry] = None,
) -> None:
    registry = registry or get_registry()
    language = registry.language(config.language)
    llm = registry.llm_provider(config.llm_provider).get_knowledge(config)

    for directory in project_directories(language.get_knowledge().source_dir):
        (project_path / directory).mkdir(parents=True, exist_ok=True)

    (project_path / "prompts" / "sample_prompt.yaml").write_text(
        render_sample_prompt(config, llm.model_example), encoding="utf-8"
    )
    (project_path / "prompts.json").write_text(
        json.dumps({"prompts": []}, indent=2), encoding="utf-8"
    )
    (project_path / ".env").write_text(
        render_env_file(config, llm.env_lines), encoding="utf-8"
    )
    (project_path / ".env.example").write_text(
        render_env_example(llm.env_lines), encoding="utf-8"
    )

    if language.supports(Capability.SETUP):
        await language.setup(SetupContext(project_path=project_path, config=config))
    logger.debug("Created project structure in %s", project_path)


def ensure_gitignore(project_path: Path) -> None:
    """Make sure .gitignore lists the secrets and local state we write.

    Existing content is kept; missing entries are appended once.
    """
    path = project_path / ".gitignore"
    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    present = {line.strip() for line in existing.splitlines()}
    missing = [entry for entry in GITIGNORE_ENTRIES if entry not in present]
    if not missing:
        return

    content = existing
    if content and not content.endswith("\n"):
        content += "\n"
    content += "\n".join(missing) + "\n"
    path.write_text(content, encoding="utf-8")
    logger.debug("Added %s to %s", missing, path)
