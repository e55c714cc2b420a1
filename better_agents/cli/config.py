import json
from typing import Any, Callable, Optional

import click

from better_agents.collect import validate_url
from better_agents.registry import ProviderCategory, get_registry
from better_agents.settings import get_global_settings_path, load_settings, save_settings


def _one_of(category: ProviderCategory) -> Callable[[Any], Optional[str]]:
    def check(value: Any) -> Optional[str]:
        valid = get_registry().identifiers(category)
        if value not in valid:
            return f"Must be one of: {', '.join(valid)}"
        return None

    return check


def _url(value: Any) -> Optional[str]:
    return validate_url(value) if isinstance(value, str) else "Must be a URL"


# Keys read by init as prompt defaults. Unknown keys are stored as given.
KNOWN_KEYS: dict[str, Callable[[Any], Optional[str]]] = {
    "default_coding_assistant": _one_of(ProviderCategory.CODING_ASSISTANT),
    "default_llm_provider": _one_of(ProviderCategory.LLM_PROVIDER),
    "langwatch_endpoint": _url,
}


@click.group()
def config() -> None:
    """Manage global settings in ~/.better-agents/settings.json."""
    pass


@config.command(name="list")
def list_config_cmd() -> None:
    """List global settings."""
    settings = load_settings()
    if not settings:
        click.echo("No settings found.")
        click.echo(f"Known keys: {', '.join(KNOWN_KEYS)}")
        return
    for k, v in settings.items():
        click.echo(f"{k}: {v}")


@config.command(name="get")
@click.argument("key")
def get_config_cmd(key: str) -> None:
    """Print the value stored for KEY."""
    settings = load_settings()
    if key in settings:
        click.echo(settings[key])
    else:
        click.echo(f"Key '{key}' not found.")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
def set_config_cmd(key: str, value: str) -> None:
    """Store VALUE under KEY.

    Values that parse as JSON are stored as JSON, anything else as a string.
    Known keys are validated before saving.
    """
    try:
        parsed_value = json.loads(value)
    except ValueError:
        parsed_value = value

    check = KNOWN_KEYS.get(key)
    problem = check(parsed_value) if check else None
    if problem:
        raise click.BadParameter(problem, param_hint=f"'{key}'")

    settings = load_settings()
    settings[key] = parsed_value
    save_settings(settings)
    click.echo(f"Set {key} to {value} in {get_global_settings_path()}")


@config.command(name="unset")
@click.argument("key")
def unset_config_cmd(key: str) -> None:
    """Remove KEY from the global settings."""
    settings = load_settings()
    if settings.pop(key, None) is None:
        click.echo(f"Key '{key}' not found.")
        return
    save_settings(settings)
    click.echo(f"Removed {key}.")
