import asyncio
import logging
import os
import sys
from typing import Any, List, Optional

import click
from click import Command

from better_agents import console
from better_agents.analytics import cli_version
from better_agents.cli.config import config as config_group
from better_agents.cli.skills import skills as skills_group
from better_agents.collect import ConfigurationError, SetupCancelled
from better_agents.credentials import load_env_file
from better_agents.project import init_project
from better_agents.project_config import CLIOptions
from better_agents.registry import ProviderCategory, UnknownProviderError, get_registry
from better_agents.settings import get_log_path

logger = logging.getLogger(__name__)

DEBUG_ENV_VAR = "BETTER_AGENTS_DEBUG"


class DefaultGroup(click.Group):
    """A Click group that invokes a default command if no subcommand is matched."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.default_command = kwargs.pop("default_command", None)
        super().__init__(*args, **kwargs)

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        # A bare invocation runs the default command.
        if not args and self.default_command:
            args = [self.default_command]
        return super().parse_args(ctx, args)

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, Command | None, list[str]]:
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError:
            if self.default_command:
                new_args = [self.default_command] + args
                return super().resolve_command(ctx, new_args)
            raise


def _debug_from_env() -> bool:
    return os.environ.get(DEBUG_ENV_VAR, "").strip().lower() in ("1", "true", "yes", "on")


def setup_logging(debug: bool) -> None:
    """Configures logging for better-agents.

    Logs never go to the terminal; they are appended to
    ~/.better-agents/better-agents.log.
    """
    level = logging.DEBUG if debug else logging.WARNING
    log_file = get_log_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        filename=str(log_file),
        filemode="a",
        force=True,
    )
    # Suppress noisy external libraries even in debug mode
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    if debug:
        logger.info("Logging initialized at DEBUG level.")


@click.group(
    cls=DefaultGroup,
    default_command="init",
    context_settings={"ignore_unknown_options": True},
)
@click.version_option(version=cli_version(), prog_name="better-agents")
@click.option(
    "--debug",
    is_flag=True,
    help="Write debug logs to ~/.better-agents/better-agents.log.",
)
def cli(debug: bool) -> None:
    """better-agents: scaffold agent projects that follow best practices."""
    setup_logging(debug or _debug_from_env())


_registry = get_registry()


@cli.command()
@click.argument("path", default=".")
@click.option(
    "--language",
    type=click.Choice(_registry.identifiers(ProviderCategory.LANGUAGE)),
    help="Programming language.",
)
@click.option(
    "--framework",
    type=click.Choice(_registry.identifiers(ProviderCategory.FRAMEWORK)),
    help="Agent framework.",
)
@click.option(
    "--coding-assistant",
    type=click.Choice(_registry.identifiers(ProviderCategory.CODING_ASSISTANT)),
    help="Coding assistant to hand off to.",
)
@click.option(
    "--llm-provider",
    type=click.Choice(_registry.identifiers(ProviderCategory.LLM_PROVIDER)),
    help="LLM provider the agent will use. Its API key is read from the environment.",
)
@click.option("--goal", help="What the agent is going to do.")
@click.option("--aws-region", help="AWS region for the bedrock provider.")
@click.option("--skills", help="Comma-separated skill names to install, or 'all'.")
@click.option("--langwatch-endpoint", help="URL of a private LangWatch installation.")
@click.option(
    "--refresh-skills",
    is_flag=True,
    help="Ignore the cached skills list and fetch it from GitHub.",
)
@click.option("--debug", is_flag=True, help="Enable debug logging.")
def init(
    path: str,
    language: Optional[str],
    framework: Optional[str],
    coding_assistant: Optional[str],
    llm_provider: Optional[str],
    goal: Optional[str],
    aws_region: Optional[str],
    skills: Optional[str],
    langwatch_endpoint: Optional[str],
    refresh_skills: bool,
    debug: bool,
) -> None:
    """Initialize an agent project in PATH (default: current directory).

    The run is non-interactive when --language, --framework,
    --coding-assistant, --llm-provider and --goal are all given. API keys are
    then read from the environment: LANGWATCH_API_KEY plus the provider's own
    variable (e.g. OPENAI_API_KEY).
    """
    if debug:
        setup_logging(True)
    load_env_file(os.getcwd())

    options = CLIOptions(
        language=language,
        framework=framework,
        coding_assistant=coding_assistant,
        llm_provider=llm_provider,
        goal=goal,
        aws_region=aws_region,
        skills=skills,
        langwatch_endpoint=langwatch_endpoint,
        refresh_skills=refresh_skills,
    )
    try:
        asyncio.run(init_project(path, options))
    except SetupCancelled:
        sys.exit(0)
    except (ConfigurationError, UnknownProviderError) as e:
        console.error(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception("init failed")
        console.error(f"Error: {e}")
        sys.exit(1)


cli.add_command(skills_group)
cli.add_command(config_group)


def main(args: Optional[List[str]] = None) -> None:
    if args is None:
        args = sys.argv[1:]
    cli(args=args)


if __name__ == "__main__":
    main()
