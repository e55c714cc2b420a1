"""Parsing of remote SKILL.md documents into ``SkillMetadata``.

A catalog SKILL.md typically looks like::

    ---
    tags: [crm, oauth]
    ---
    # Skill Summary: HubSpot

    Manage HubSpot contacts.

    ## Metadata
    **Name:** hubspot
    **Created:** 2025-01-10
    **Required MCP Server:** nango
    **Authentication:** OAuth via Nango

    ## Purpose
    Read and update HubSpot CRM records.

Every field is optional. Parsing never fails: whatever cannot be found is
left out of the descriptor.
"""

import logging
import re
from typing import Any

import yaml

from better_agents.skills.models import SkillMetadata, to_str_tuple

logger = logging.getLogger(__name__)

_METADATA_BLOCK = re.compile(r"## Metadata\s+([\s\S]*?)(?=\n##|$)")
_PURPOSE_BLOCK = re.compile(r"## Purpose\s+([\s\S]*?)(?=\n##|$)")
_SUMMARY_HEADING = "# Skill Summary:"

_FIELDS = {
    "name": re.compile(r"\*\*Name:\*\*\s*(.+)"),
    "created": re.compile(r"\*\*Created:\*\*\s*(.+)"),
    "required_mcp_server": re.compile(r"\*\*Required MCP Server:\*\*\s*(.+)"),
    "authentication": re.compile(r"\*\*Authentication:\*\*\s*(.+)"),
}


def _frontmatter(content: str, skill_name: str) -> dict[str, Any]:
    if not content.startswith("---"):
        return {}
    parts = content.split("---", 2)
    if len(parts) < 3:
        return {}
    try:
        data = yaml.safe_load(parts[1]) or {}
    except yaml.YAMLError as e:
        logger.debug("Ignoring malformed frontmatter in %s: %s", skill_name, e)
        return {}
    return data if isinstance(data, dict) else {}


def _list_field(frontmatter: dict[str, Any], *keys: str) -> tuple[str, ...]:
    for key in keys:
        if key in frontmatter:
            try:
                return to_str_tuple(frontmatter[key])
            except TypeError:
                return ()
    return ()


def _summary_description(content: str) -> str:
    lines = content.split("\n")
    for index, line in enumerate(lines):
        if _SUMMARY_HEADING in line:
            # The summary heading is followed by a blank line, then the text.
            if index + 2 < len(lines):
                return lines[index + 2].strip()
            break
    return ""


def parse_skill_metadata(skill_name: str, content: str) -> SkillMetadata:
    """Extract a descriptor from the raw text of a skill's SKILL.md."""
    fields: dict[str, str] = {}
    metadata_match = _METADATA_BLOCK.search(content)
    if metadata_match:
        block = metadata_match.group(1)
        for key, pattern in _FIELDS.items():
            match = pattern.search(block)
            if match:
                fields[key] = match.group(1).strip()

    description = ""
    purpose_match = _PURPOSE_BLOCK.search(content)
    if purpose_match:
        description = purpose_match.group(1).strip().split("\n")[0].strip()
    if not description:
        description = _summary_description(content)
    if not description:
        description = skill_name.replace("-", " ")

    frontmatter = _frontmatter(content, skill_name)
    required_server = fields.get("required_mcp_server")
    mcp_servers = _list_field(frontmatter, "mcp_servers", "mcpServers")
    if required_server and required_server not in mcp_servers:
        mcp_servers = (required_server, *mcp_servers)

    return SkillMetadata(
        name=fields.get("name", skill_name),
        description=description,
        created=fields.get("created"),
        required_mcp_server=required_server,
        authentication=fields.get("authentication"),
        mcp_servers=mcp_servers,
        depends_on=_list_field(frontmatter, "depends_on", "dependsOn"),
        tags=_list_field(frontmatter, "tags"),
    )
