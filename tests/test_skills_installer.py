"""Tests for better_agents.skills.installer module."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from better_agents.skills.installer import (
    SkillInstallError,
    install_command,
    install_skill,
    install_skills,
    manual_install_command,
)


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def _builder_failing_on(*failing: str):
    def build(skill: str) -> list[str]:
        if skill in failing:
            return _python(f"import sys; sys.stderr.write('boom {skill}'); sys.exit(3)")
        # Leave a marker so the test can see which skills ran and where.
        return _python(f"open('installed-{skill}', 'w').close()")

    return build


def test_install_command() -> None:
    assert install_command("hubspot") == [
        "npx",
        "skills",
        "add",
        "https://github.com/contextware/skills",
        "--skill",
        "hubspot",
        "-y",
    ]
    assert manual_install_command() == (
        "npx skills add https://github.com/contextware/skills --skill <skill-name>"
    )


@pytest.mark.asyncio
async def test_install_skill_runs_in_project_dir(tmp_path: Path) -> None:
    await install_skill("hubspot", tmp_path, command_builder=_builder_failing_on())
    assert (tmp_path / "installed-hubspot").exists()


@pytest.mark.asyncio
async def test_install_skill_nonzero_exit(tmp_path: Path) -> None:
    with pytest.raises(SkillInstallError) as exc_info:
        await install_skill("slack", tmp_path, command_builder=_builder_failing_on("slack"))

    assert exc_info.value.skill == "slack"
    assert "exited with code 3" in exc_info.value.reason
    assert "boom slack" in exc_info.value.reason


@pytest.mark.asyncio
async def test_install_skill_timeout(tmp_path: Path) -> None:
    def build(skill: str) -> list[str]:
        return _python("import time; time.sleep(30)")

    with pytest.raises(SkillInstallError) as exc_info:
        await install_skill("slow", tmp_path, timeout=0.5, command_builder=build)

    assert "timed out" in exc_info.value.reason


@pytest.mark.asyncio
async def test_install_skill_missing_executable(tmp_path: Path) -> None:
    def build(skill: str) -> list[str]:
        return [str(tmp_path / "does-not-exist")]

    with pytest.raises(SkillInstallError) as exc_info:
        await install_skill("ghost", tmp_path, command_builder=build)

    assert "could not start installer" in exc_info.value.reason


@pytest.mark.asyncio
async def test_install_skills_continues_after_failure(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    status = MagicMock()

    report = await install_skills(
        ["a", "b", "c"],
        tmp_path,
        status=status,
        command_builder=_builder_failing_on("b"),
    )

    assert report.installed == ["a", "c"]
    assert report.failed == ["b"]
    assert not report.ok
    assert (tmp_path / "installed-a").exists()
    assert (tmp_path / "installed-c").exists()
    assert [c.args[0] for c in status.update.call_args_list] == [
        "Installing skill a...",
        "Installing skill b...",
        "Installing skill c...",
    ]
    captured = capsys.readouterr()
    assert "Some skills failed to install: b" in captured.err
    assert "install them manually" in captured.out


@pytest.mark.asyncio
async def test_install_skills_all_succeed(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    report = await install_skills(["a"], tmp_path, command_builder=_builder_failing_on())

    assert report.ok
    assert report.installed == ["a"]
    assert capsys.readouterr().err == ""


@pytest.mark.asyncio
async def test_install_skills_empty(tmp_path: Path) -> None:
    report = await install_skills([], tmp_path, command_builder=_builder_failing_on())
    assert report.ok
    assert report.installed == []
