"""Installs catalog skills into a project with the ``skills`` CLI.

Skills are installed one at a time. A failing skill never stops the
remaining ones; the caller gets back which skills made it and which did not.
"""

import asyncio
import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from rich.status import Status

from better_agents import console
from better_agents.constants import SKILL_INSTALL_TIMEOUT_SECONDS, SKILLS_REPO_URL

logger = logging.getLogger(__name__)

CommandBuilder = Callable[[str], list[str]]


class SkillInstallError(Exception):
    def __init__(self, skill: str, reason: str):
        super().__init__(f"{skill}: {reason}")
        self.skill = skill
        self.reason = reason


@dataclass
class InstallReport:
    installed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def install_command(skill: str) -> list[str]:
    return ["npx", "skills", "add", SKILLS_REPO_URL, "--skill", skill, "-y"]


def manual_install_command(skill: str = "<skill-name>") -> str:
    return f"npx skills add {SKILLS_REPO_URL} --skill {skill}"


async def _spawn(argv: list[str], cwd: Path) -> asyncio.subprocess.Process:
    if os.name == "nt":
        # npx is a .cmd shim on Windows and needs a shell to resolve.
        return await asyncio.create_subprocess_shell(
            subprocess.list2cmdline(argv),
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    return await asyncio.create_subprocess_exec(
        *argv,
        cwd=str(cwd),
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )


async def install_skill(
    skill: str,
    project_path: Path,
    timeout: float = SKILL_INSTALL_TIMEOUT_SECONDS,
    command_builder: CommandBuilder = install_command,
) -> None:
    """Install one skill, raising ``SkillInstallError`` on any failure."""
    argv = command_builder(skill)
    logger.debug("Installing skill %s: %s", skill, argv)
    try:
        process = await _spawn(argv, project_path)
    except OSError as e:
        raise SkillInstallError(skill, f"could not start installer: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise SkillInstallError(skill, f"timed out after {timeout:g}s") from None

    if process.returncode != 0:
        output = (stderr or stdout or b"").decode("utf-8", errors="replace").strip()
        raise SkillInstallError(
            skill, f"exited with code {process.returncode}: {output}"
        )
    logger.debug("Installed skill %s", skill)


async def install_skills(
    skills: Sequence[str],
    project_path: Path,
    status: Optional[Status] = None,
    timeout: float = SKILL_INSTALL_TIMEOUT_SECONDS,
    command_builder: CommandBuilder = install_command,
) -> InstallReport:
    report = InstallReport()
    for skill in skills:
        if status is not None:
            status.update(f"Installing skill {skill}...")
        try:
            await install_skill(
                skill, project_path, timeout=timeout, command_builder=command_builder
            )
        except SkillInstallError as e:
            logger.debug("Failed to install skill %s", e)
            report.failed.append(skill)
        else:
            report.installed.append(skill)

    if report.failed:
        console.warning(f"Some skills failed to install: {', '.join(report.failed)}")
        console.plain(
            f"You can install them manually later with: {manual_install_command()}"
        )
    return report
