"""Skill descriptors and catalog snapshots."""

from dataclasses import dataclass
from typing import Any, Optional


def to_str_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"Expected a list of strings, got {type(value).__name__}")
    return tuple(str(item) for item in value)


@dataclass(frozen=True)
class SkillMetadata:
    """What the catalog knows about one remote skill."""

    name: str
    description: str
    created: Optional[str] = None
    required_mcp_server: Optional[str] = None
    authentication: Optional[str] = None
    mcp_servers: tuple[str, ...] = ()
    depends_on: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """JSON form used by the cache file. Absent fields are omitted."""
        data: dict[str, Any] = {"name": self.name, "description": self.description}
        if self.created:
            data["created"] = self.created
        if self.required_mcp_server:
            data["requiredMCPServer"] = self.required_mcp_server
        if self.authentication:
            data["authentication"] = self.authentication
        if self.mcp_servers:
            data["mcpServers"] = list(self.mcp_servers)
        if self.depends_on:
            data["dependsOn"] = list(self.depends_on)
        if self.tags:
            data["tags"] = list(self.tags)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "SkillMetadata":
        """Inverse of ``to_dict``.

        Raises ``ValueError`` or ``TypeError`` when the data is not a valid
        descriptor.
        """
        if not isinstance(data, dict):
            raise TypeError("Skill entry must be an object")
        name = data.get("name")
        description = data.get("description")
        if not isinstance(name, str) or not name:
            raise ValueError("Skill entry is missing 'name'")
        if not isinstance(description, str):
            raise ValueError(f"Skill '{name}' is missing 'description'")
        return cls(
            name=name,
            description=description,
            created=data.get("created"),
            required_mcp_server=data.get("requiredMCPServer"),
            authentication=data.get("authentication"),
            mcp_servers=to_str_tuple(data.get("mcpServers")),
            depends_on=to_str_tuple(data.get("dependsOn")),
            tags=to_str_tuple(data.get("tags")),
        )


@dataclass(frozen=True)
class CatalogSnapshot:
    """Skills captured by one successful fetch.

    ``timestamp`` is in epoch milliseconds, matching the cache file format.
    An empty ``skills`` tuple means the fetch returned nothing.
    """

    timestamp: int
    skills: tuple[SkillMetadata, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "skills": [skill.to_dict() for skill in self.skills],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "CatalogSnapshot":
        if not isinstance(data, dict):
            raise TypeError("Snapshot must be an object")
        timestamp = data.get("timestamp")
        skills = data.get("skills")
        if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool):
            raise ValueError("Snapshot is missing a numeric 'timestamp'")
        if not isinstance(skills, list):
            raise ValueError("Snapshot is missing a 'skills' list")
        return cls(
            timestamp=int(timestamp),
            skills=tuple(SkillMetadata.from_dict(entry) for entry in skills),
        )
