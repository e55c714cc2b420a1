"""The resolved choices of a single better-agents run."""

from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass(frozen=True)
class ProjectConfig:
    """User choices, built once per run and passed to every consumer."""

    language: str
    framework: str
    coding_assistant: str
    llm_provider: str
    llm_api_key: str
    langwatch_api_key: str
    project_goal: str
    llm_additional_inputs: Mapping[str, str] = field(default_factory=dict)
    langwatch_endpoint: Optional[str] = None
    skills: tuple[str, ...] = ()


@dataclass
class CLIOptions:
    """Flags supplied on the command line.

    When every required choice is present the run is non-interactive.
    """

    language: Optional[str] = None
    framework: Optional[str] = None
    coding_assistant: Optional[str] = None
    llm_provider: Optional[str] = None
    goal: Optional[str] = None
    aws_region: Optional[str] = None
    # Comma-separated skill names, or "all".
    skills: Optional[str] = None
    langwatch_endpoint: Optional[str] = None
    refresh_skills: bool = False

    def is_non_interactive(self) -> bool:
        return all(
            (
                self.language,
                self.framework,
                self.coding_assistant,
                self.llm_provider,
                self.goal,
            )
        )
