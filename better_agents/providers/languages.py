"""Programming language providers."""

from dataclasses import dataclass
from typing import Optional

from better_agents.project_config import ProjectConfig
from better_agents.providers.base import Capability, Provider, SetupContext

_PYTHON_SCENARIO = '''"""
Sample scenario test for your agent.
Follow the Agent Testing Pyramid: use Scenario for end-to-end agentic tests,
but always access Scenario and its docs strictly via the LangWatch MCP.

To run this test, you must first install the scenario library:
uv add langwatch-scenario
"""

import pytest
import scenario
from dotenv import load_dotenv

# from app.agent import my_agent  # Import your agent here


@pytest.mark.asyncio
async def test_sample_scenario():
    load_dotenv()
    await scenario.run(
        id="sample-scenario",
        name="Sample Scenario",
        # agents=[my_agent, scenario.UserSimulatorAgent()],
        script=[
            scenario.user("What can you do?"),
            scenario.agent(),
            scenario.succeed("Goal reached"),
        ],
    )
'''

_TYPESCRIPT_SCENARIO = """/**
 * Sample scenario test for your agent.
 * Follow the Agent Testing Pyramid: use Scenario for end-to-end agentic tests,
 * but always access Scenario and its docs strictly via the LangWatch MCP.
 *
 * To run this test, you must first install the scenario library:
 * pnpm add @langwatch/scenario
 */

import { it } from "vitest";
import * as scenario from "@langwatch/scenario";
// import { myAgent } from "../../src/agent"; // Import your agent here

it("should handle sample request", async () => {
  try {
    const dotenv = await import("dotenv");
    dotenv.config();
  } catch {
    // dotenv not installed yet
  }

  await scenario.run({
    id: "sample-scenario",
    name: "Sample Scenario",
    // agents: [myAgent],
    script: [
      scenario.user("What can you do?"),
      scenario.agent(),
      scenario.succeed("Goal reached"),
    ],
  });
});
"""


@dataclass(frozen=True)
class LanguageKnowledge:
    setup_instructions: str
    source_dir: str
    scenario_pattern: str
    scenario_file_name: str
    scenario_content: str


class LanguageProvider(Provider):
    capabilities = frozenset({Capability.KNOWLEDGE, Capability.SETUP})

    def __init__(self, id: str, display_name: str, knowledge: LanguageKnowledge):
        self.id = id
        self.display_name = display_name
        self._knowledge = knowledge

    def get_knowledge(self, config: Optional[ProjectConfig] = None) -> LanguageKnowledge:
        return self._knowledge

    async def setup(self, context: SetupContext) -> None:
        """Writes the sample scenario test unless the user already has one."""
        scenarios_dir = context.project_path / "tests" / "scenarios"
        scenarios_dir.mkdir(parents=True, exist_ok=True)
        target = scenarios_dir / self._knowledge.scenario_file_name
        if target.exists():
            return
        target.write_text(self._knowledge.scenario_content, encoding="utf-8")


PYTHON = LanguageProvider(
    "python",
    "Python",
    LanguageKnowledge(
        setup_instructions="Python w/uv + pytest",
        source_dir="app",
        scenario_pattern="test_*.py",
        scenario_file_name="test_example_scenario.py",
        scenario_content=_PYTHON_SCENARIO,
    ),
)

TYPESCRIPT = LanguageProvider(
    "typescript",
    "TypeScript",
    LanguageKnowledge(
        setup_instructions="TypeScript w/pnpm + vitest",
        source_dir="src",
        scenario_pattern="*.test.ts",
        scenario_file_name="example_scenario.test.ts",
        scenario_content=_TYPESCRIPT_SCENARIO,
    ),
)

LANGUAGES = [PYTHON, TYPESCRIPT]
