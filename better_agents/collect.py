"""Building a ``ProjectConfig`` from CLI flags, the environment and prompts.

When language, framework, coding assistant, LLM provider and goal are all
given on the command line the run is non-interactive: secrets must then be
present in the environment. Otherwise the user is prompted for whatever is
missing.
"""

import logging
import os
import shlex
import subprocess
import time
from typing import Any, Optional, Sequence, TypeVar
from urllib.parse import urlparse

import click

from better_agents import analytics, console
from better_agents.constants import DEFAULT_LANGWATCH_ENDPOINT, SKILLS_REPO_URL
from better_agents.credentials import (
    LANGWATCH_API_KEY_VAR,
    load_langwatch_api_key,
    load_langwatch_endpoint,
    read_env,
)
from better_agents.project_config import CLIOptions, ProjectConfig
from better_agents.providers.base import Capability
from better_agents.providers.coding_assistants import CodingAssistantProvider
from better_agents.providers.llm_providers import LLMProvider, require_min_length
from better_agents.registry import ProviderCategory, ProviderRegistry, get_registry
from better_agents.settings import load_settings
from better_agents.skills.fetcher import fetch_skills
from better_agents.skills.models import SkillMetadata

logger = logging.getLogger(__name__)

T = TypeVar("T")

GEMINI_API_KEY_URL = "https://aistudio.google.com/app/apikey"


class ConfigurationError(Exception):
    """The supplied choices or environment cannot produce a valid project."""


class SetupCancelled(Exception):
    """The user aborted an interactive prompt."""


def validate_langwatch_key(value: str) -> Optional[str]:
    if not value or not value.strip():
        return "LangWatch API key is required"
    if not value.strip().startswith("sk-lw-"):
        return "LangWatch API keys start with 'sk-lw-'"
    return None


def validate_project_goal(value: str) -> Optional[str]:
    if not value or len(value.strip()) < 10:
        return "Please describe your agent's goal in at least 10 characters"
    return None


def validate_url(value: str) -> Optional[str]:
    if not value or not value.strip():
        return "LangWatch endpoint URL is required"
    parsed = urlparse(value.strip())
    if not parsed.scheme or not parsed.netloc:
        return "Please enter a valid URL (e.g., https://langwatch.example.com)"
    return None


def validate_framework_language(
    registry: ProviderRegistry, language: str, framework: str
) -> None:
    compatible = registry.frameworks_for_language(language)
    if framework not in [f.id for f in compatible]:
        language_name = registry.language(language).display_name
        raise ConfigurationError(
            f'Framework "{framework}" is not compatible with {language_name}. '
            f"Use: {', '.join(f.id for f in compatible)}"
        )


def parse_skills_option(value: str) -> list[str]:
    """Split a comma-separated ``--skills`` value, dropping blanks."""
    return [name.strip() for name in value.split(",") if name.strip()]


def apply_skills_prefix(goal: str, skills: Sequence[str]) -> str:
    """Prefix the goal with the skills chosen interactively.

    Goals that already start with "using the" are left alone.
    """
    if not skills or goal.lower().startswith("using the"):
        return goal
    quoted = ", ".join(f'"{skill}"' for skill in skills)
    noun = "skills" if len(skills) > 1 else "skill"
    return f"Using the {quoted} {noun}, {goal[:1].lower()}{goal[1:]}"


def _missing_env_error(missing: list[str]) -> ConfigurationError:
    plural = "s" if len(missing) > 1 else ""
    return ConfigurationError(
        f"Missing required environment variable{plural}: {', '.join(missing)}. "
        "See 'better-agents init --help' for setup."
    )


def _cli_credential_overrides(options: CLIOptions) -> dict[str, Optional[str]]:
    return {"aws_region": options.aws_region}


def _credentials_from_env(
    provider: LLMProvider, options: CLIOptions
) -> tuple[Optional[str], dict[str, str], list[str]]:
    """API key, extra credentials and the names of anything missing."""
    missing: list[str] = []
    api_key = read_env(provider.api_key_env_vars)
    if not api_key:
        missing.append(" or ".join(provider.api_key_env_vars))

    overrides = _cli_credential_overrides(options)
    extras: dict[str, str] = {}
    for credential in provider.additional_credentials:
        value = read_env(credential.env_vars) or overrides.get(credential.key) or credential.default
        if value:
            extras[credential.key] = value
        else:
            missing.append(credential.env_vars[0])
    return api_key, extras, missing


async def _resolve_skills_option(value: str) -> tuple[str, ...]:
    if value.strip() == "all":
        # collect_config has already primed or refreshed the cache.
        skills = await fetch_skills()
        if not skills:
            console.warning("Failed to fetch skills list. Skipping skill installation.")
        return tuple(skill.name for skill in skills)
    return tuple(parse_skills_option(value))


async def _collect_non_interactive(
    options: CLIOptions, registry: ProviderRegistry
) -> ProjectConfig:
    language = options.language
    framework = options.framework
    coding_assistant = options.coding_assistant
    llm_provider = options.llm_provider
    goal = options.goal
    if not (language and framework and coding_assistant and llm_provider and goal):
        raise ConfigurationError(
            "Non-interactive mode requires --language, --framework, "
            "--coding-assistant, --llm-provider and --goal."
        )

    registry.language(language)
    registry.framework(framework)
    assistant = registry.coding_assistant(coding_assistant)
    provider = registry.llm_provider(llm_provider)
    validate_framework_language(registry, language, framework)

    langwatch_endpoint = load_langwatch_endpoint(options.langwatch_endpoint)
    langwatch_api_key = load_langwatch_api_key()
    if not langwatch_api_key:
        base_url = langwatch_endpoint or DEFAULT_LANGWATCH_ENDPOINT
        raise ConfigurationError(
            f"Missing required environment variable: {LANGWATCH_API_KEY_VAR}\n\n"
            f"When using Better Agents, you must set the {LANGWATCH_API_KEY_VAR} "
            "environment variable.\n\n"
            f"Get your LangWatch API key at: {base_url}/authorize"
        )

    llm_api_key, extras, missing = _credentials_from_env(provider, options)
    if missing or not llm_api_key:
        raise _missing_env_error(missing or [provider.api_key_env_vars[0]])

    if assistant.required_env_var and not read_env([assistant.required_env_var]):
        raise _missing_env_error([assistant.required_env_var])

    skills: tuple[str, ...] = ()
    if options.skills:
        skills = await _resolve_skills_option(options.skills)

    return ProjectConfig(
        language=language,
        framework=framework,
        coding_assistant=coding_assistant,
        llm_provider=llm_provider,
        llm_api_key=llm_api_key,
        langwatch_api_key=langwatch_api_key,
        project_goal=goal,
        llm_additional_inputs=extras,
        langwatch_endpoint=langwatch_endpoint,
        skills=skills,
    )


def _validated(validator: Any) -> Any:
    """Adapt an error-string validator to click's ``value_proc``."""

    def value_proc(value: str) -> str:
        value = value.strip()
        problem = validator(value)
        if problem:
            raise click.UsageError(problem)
        return value

    return value_proc


def prompt_text(message: str, validator: Any = None, default: Optional[str] = None) -> str:
    return click.prompt(
        message,
        default=default,
        value_proc=_validated(validator) if validator else None,
    )


def prompt_secret(message: str, validator: Any = require_min_length) -> str:
    return click.prompt(message, hide_input=True, value_proc=_validated(validator))


def select(message: str, choices: Sequence[tuple[T, str]], default: Optional[T] = None) -> T:
    """Numbered single-choice prompt returning the chosen value."""
    click.echo(message)
    for index, (_, label) in enumerate(choices, start=1):
        click.echo(f"  {index}. {label}")
    values = [value for value, _ in choices]
    default_index = values.index(default) + 1 if default in values else None
    picked = click.prompt(
        "Enter a number", type=click.IntRange(1, len(choices)), default=default_index
    )
    return values[picked - 1]


def _parse_selection(raw: str, count: int) -> list[int]:
    if not raw.strip():
        return []
    picked: list[int] = []
    for part in raw.replace(" ", ",").split(","):
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= count:
            raise click.UsageError(f"'{part}' is not a number between 1 and {count}")
        if int(part) not in picked:
            picked.append(int(part))
    return picked


def multi_select(message: str, choices: Sequence[tuple[T, str]]) -> list[T]:
    """Numbered multi-choice prompt; an empty answer selects nothing."""
    click.echo(message)
    for index, (_, label) in enumerate(choices, start=1):
        click.echo(f"  {index}. {label}")
    picked = click.prompt(
        "Enter numbers separated by commas (leave empty to skip)",
        default="",
        show_default=False,
        value_proc=lambda raw: _parse_selection(raw, len(choices)),
    )
    return [choices[i - 1][0] for i in picked]


def skill_choice_label(skill: SkillMetadata) -> str:
    return f"{skill.name} - {skill.description}" if skill.description else skill.name


def _run_install_command(command: str) -> None:
    console.info("Installing...")
    try:
        completed = subprocess.run(shlex.split(command))
    except OSError as e:
        console.error(f"Installation failed: {e}")
        console.info("Please try installing manually.")
        return
    if completed.returncode != 0:
        console.error(f"Installation failed with exit code {completed.returncode}")
        console.info("Please try installing manually.")


async def _ensure_assistant_available(assistant: CodingAssistantProvider) -> None:
    if not assistant.supports(Capability.AVAILABILITY):
        return
    availability = await assistant.is_available()
    if availability.installed or not availability.install_command:
        return

    console.warning(f"{assistant.display_name} is not installed.")
    console.info("To install it, run:")
    console.info(availability.install_command)
    if not click.confirm("Would you like me to install it for you?", default=True):
        return

    _run_install_command(availability.install_command)
    if (await assistant.is_available()).installed:
        console.success(f"{assistant.display_name} installed successfully!")
    else:
        console.error("Installation may have failed. Please try installing manually.")


async def _select_skills(options: CLIOptions) -> list[str]:
    if not options.refresh_skills and click.confirm(
        "Would you like to refresh the skills list from GitHub to ensure you have "
        "the latest available skills?",
        default=False,
    ):
        await fetch_skills(force_refresh=True, show_status=True)

    available = await fetch_skills(show_status=True)
    logger.debug("Fetched %d skills", len(available))
    if not available:
        console.warning("No skills available to select")
        console.info(
            f"You can add skills later with: npx skills add {SKILLS_REPO_URL} "
            "--skill <skill-name>"
        )
        return []
    return multi_select(
        "Select skills to install (optional):",
        [(skill.name, skill_choice_label(skill)) for skill in available],
    )


async def _collect_interactive(
    options: CLIOptions, registry: ProviderRegistry, started: float
) -> ProjectConfig:
    settings = load_settings()
    console.info("Setting up your agent project following the Better Agent Structure.")
    console.plain("")

    language = options.language
    if not language and options.framework:
        language = registry.framework(options.framework).language
    if language:
        registry.language(language)
    else:
        language = select(
            "What programming language do you want to use?",
            [(p.id, p.display_name) for p in registry.providers(ProviderCategory.LANGUAGE)],
        )

    framework = options.framework or select(
        "What agent framework do you want to use?",
        [(f.id, f.display_name) for f in registry.frameworks_for_language(language)],
    )
    validate_framework_language(registry, language, framework)

    llm_provider_id = options.llm_provider or select(
        "What LLM provider is your agent going to use?",
        [(p.id, p.display_name) for p in registry.providers(ProviderCategory.LLM_PROVIDER)],
        default=settings.get("default_llm_provider"),
    )
    provider = registry.llm_provider(llm_provider_id)

    llm_api_key = read_env(provider.api_key_env_vars)
    if not llm_api_key:
        console.info(f"To get your {provider.display_name} API key, visit:")
        console.info(provider.api_key_url)
        llm_api_key = prompt_secret(
            f"Enter your {provider.display_name} API key", provider.validate_api_key
        )

    overrides = _cli_credential_overrides(options)
    extras: dict[str, str] = {}
    for credential in provider.additional_credentials:
        value = read_env(credential.env_vars) or overrides.get(credential.key)
        if not value:
            if credential.secret:
                value = prompt_secret(f"Enter your {credential.label}")
            else:
                value = prompt_text(
                    f"Enter your {credential.label}",
                    require_min_length if credential.default is None else None,
                    default=credential.default,
                )
        extras[credential.key] = value

    langwatch_endpoint = load_langwatch_endpoint(options.langwatch_endpoint)
    if not langwatch_endpoint and click.confirm(
        "Are you using a private LangWatch installation?", default=False
    ):
        langwatch_endpoint = prompt_text(
            "Enter your LangWatch endpoint URL",
            validate_url,
            default=DEFAULT_LANGWATCH_ENDPOINT,
        )

    langwatch_api_key = load_langwatch_api_key()
    if not langwatch_api_key:
        console.info("To get your LangWatch API key, visit:")
        console.info(f"{langwatch_endpoint or DEFAULT_LANGWATCH_ENDPOINT}/authorize")
        langwatch_api_key = prompt_secret(
            "Enter your LangWatch API key (for prompt management, scenarios, "
            "evaluations and observability)",
            validate_langwatch_key,
        )

    coding_assistant = options.coding_assistant
    if coding_assistant:
        assistant = registry.coding_assistant(coding_assistant)
    else:
        coding_assistant = select(
            "What is your preferred coding assistant for building the agent?",
            [(a.id, a.display_name) for a in registry.providers(ProviderCategory.CODING_ASSISTANT)],
            default=settings.get("default_coding_assistant"),
        )
        assistant = registry.coding_assistant(coding_assistant)
        await _ensure_assistant_available(assistant)
        console.info("Your coding assistant will finish setup later if needed")
        console.plain("")

    if assistant.required_env_var and not read_env([assistant.required_env_var]):
        console.info(
            f"When using {assistant.display_name}, you must specify the "
            f"{assistant.required_env_var} environment variable."
        )
        console.info(f"Get your Gemini API key at: {GEMINI_API_KEY_URL}")
        os.environ[assistant.required_env_var] = prompt_secret(
            f"Enter your {assistant.required_env_var}"
        )
        console.info(f"{assistant.required_env_var} has been set for this session.")

    selected_skills: list[str] = []
    skills: tuple[str, ...] = ()
    if options.skills:
        skills = await _resolve_skills_option(options.skills)
    else:
        selected_skills = await _select_skills(options)
        skills = tuple(selected_skills)

    goal = options.goal or prompt_text(
        "What is your agent going to do?", validate_project_goal
    )
    if not options.goal:
        goal = apply_skills_prefix(goal, selected_skills)

    analytics.track_event(
        "cli_prompt_shown",
        {
            "language": language,
            "framework": framework,
            "codingAssistant": coding_assistant,
            "llmProvider": llm_provider_id,
            "durationSec": time.monotonic() - started,
        },
    )

    return ProjectConfig(
        language=language,
        framework=framework,
        coding_assistant=coding_assistant,
        llm_provider=llm_provider_id,
        llm_api_key=llm_api_key,
        langwatch_api_key=langwatch_api_key,
        project_goal=goal,
        llm_additional_inputs=extras,
        langwatch_endpoint=langwatch_endpoint,
        skills=skills,
    )


async def collect_config(
    options: CLIOptions, registry: Optional[ProviderRegistry] = None
) -> ProjectConfig:
    """Resolve every project choice.

    Raises ``ConfigurationError`` or ``UnknownProviderError`` for invalid
    input and ``SetupCancelled`` when the user aborts a prompt.
    """
    registry = registry or get_registry()
    started = time.monotonic()

    # Prime the cache so the selection prompt is instant later on.
    await fetch_skills(
        force_refresh=options.refresh_skills, show_status=options.refresh_skills
    )

    if options.is_non_interactive():
        return await _collect_non_interactive(options, registry)
    try:
        return await _collect_interactive(options, registry, started)
    except (click.Abort, KeyboardInterrupt):
        raise SetupCancelled() from None

