import asyncio

import click
from rich.table import Table

from better_agents.console import console
from better_agents.skills.fetcher import clear_skills_cache, fetch_skills, get_cached_skills


@click.group()
def skills() -> None:
    """Browse the remote skills catalog."""
    pass


@skills.command(name="list")
@click.option("--refresh", is_flag=True, help="Ignore the cache and fetch from GitHub.")
@click.option(
    "--cached", is_flag=True, help="Show the cached list without contacting GitHub."
)
def list_skills_cmd(refresh: bool, cached: bool) -> None:
    """List available skills."""
    if refresh and cached:
        raise click.UsageError("--refresh and --cached cannot be used together.")

    if cached:
        catalog = asyncio.run(get_cached_skills())
        if catalog is None:
            click.echo("No cached skills list. Run 'better-agents skills list' to fetch one.")
            return
    else:
        catalog = asyncio.run(fetch_skills(force_refresh=refresh, show_status=True))
    if not catalog:
        click.echo("No skills found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("NAME")
    table.add_column("DESCRIPTION")
    table.add_column("MCP SERVER")
    table.add_column("TAGS")
    for skill in catalog:
        table.add_row(
            skill.name,
            skill.description,
            skill.required_mcp_server or "",
            ", ".join(skill.tags),
        )
    console.print(table)


@skills.command(name="clear-cache")
def clear_cache_cmd() -> None:
    """Delete the cached skills list."""
    asyncio.run(clear_skills_cache())
    click.echo("Skills cache cleared.")
