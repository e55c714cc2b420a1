"""Handing terminal control to an external program.

Where the platform supports it, the better-agents process is replaced by
the external program (like POSIX ``execvp``) so the assistant owns the
terminal completely. Elsewhere the program is spawned with inherited standard
streams and we block until it exits.
"""

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


class LaunchError(RuntimeError):
    """The external program could not be started or exited with an error."""


def supports_process_replacement() -> bool:
    return os.name == "posix" and hasattr(os, "execvp")


@dataclass(frozen=True)
class TerminalCommand:
    """The final command of a run."""

    command: str
    args: tuple[str, ...] = field(default_factory=tuple)
    cwd: Path = field(default_factory=Path.cwd)
    # False forces spawn-and-wait even where replacement is possible.
    replace_process: bool = True

    def display(self) -> str:
        """The command line as a user could retype it."""
        return shlex.join([self.command, *self.args])

    def run(self) -> None:
        if self.replace_process and supports_process_replacement():
            self._exec()
        self._spawn_and_wait()

    def _exec(self) -> None:
        logger.debug("Replacing process with: %s (cwd=%s)", self.display(), self.cwd)
        try:
            os.chdir(self.cwd)
            # Does not return on success.
            os.execvp(self.command, [self.command, *self.args])
        except OSError as e:
            logger.debug("Process replacement failed, falling back to spawn: %s", e)

    def _spawn_and_wait(self) -> None:
        executable = shutil.which(self.command) or self.command
        logger.debug("Spawning: %s (cwd=%s)", self.display(), self.cwd)
        try:
            completed = subprocess.run([executable, *self.args], cwd=self.cwd)
        except OSError as e:
            raise LaunchError(f"Failed to execute {self.command}: {e}") from e
        if completed.returncode != 0:
            raise LaunchError(
                f"{self.command} exited with code {completed.returncode}"
            )
