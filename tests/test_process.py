"""Tests for better_agents.process module."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from better_agents.process import LaunchError, TerminalCommand


def test_display_quotes_arguments() -> None:
    command = TerminalCommand("claude", ("Build an agent",))
    assert command.display() == "claude 'Build an agent'"


def test_spawn_and_wait_success(tmp_path: Path) -> None:
    command = TerminalCommand(
        sys.executable,
        ("-c", "open('ran', 'w').close()"),
        tmp_path,
        replace_process=False,
    )

    command.run()

    assert (tmp_path / "ran").exists()


def test_spawn_nonzero_exit(tmp_path: Path) -> None:
    command = TerminalCommand(
        sys.executable, ("-c", "raise SystemExit(4)"), tmp_path, replace_process=False
    )

    with pytest.raises(LaunchError, match="exited with code 4"):
        command.run()


def test_spawn_missing_program(tmp_path: Path) -> None:
    command = TerminalCommand(
        str(tmp_path / "no-such-assistant"), (), tmp_path, replace_process=False
    )

    with pytest.raises(LaunchError, match="Failed to execute"):
        command.run()


def test_failed_exec_falls_back_to_spawn(tmp_path: Path) -> None:
    command = TerminalCommand(sys.executable, ("-c", "open('ran', 'w').close()"), tmp_path)

    with (
        patch("better_agents.process.supports_process_replacement", return_value=True),
        patch("better_agents.process.os.chdir") as chdir,
        patch("better_agents.process.os.execvp", side_effect=OSError("nope")) as execvp,
    ):
        command.run()

    chdir.assert_called_once_with(tmp_path)
    execvp.assert_called_once_with(
        sys.executable, [sys.executable, "-c", "open('ran', 'w').close()"]
    )
    assert (tmp_path / "ran").exists()


def test_no_replacement_support_spawns(tmp_path: Path) -> None:
    command = TerminalCommand(sys.executable, ("-c", "pass"), tmp_path)

    with (
        patch("better_agents.process.supports_process_replacement", return_value=False),
        patch("better_agents.process.os.execvp") as execvp,
    ):
        command.run()

    execvp.assert_not_called()
