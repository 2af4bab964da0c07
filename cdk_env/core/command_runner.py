"""
Thin abstraction over external command execution.

Every interaction with node, npm, aws, tsc, cdk and friends goes through a
CommandRunner so that checks and install steps can run against a fake in tests.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence, Union


class CommandResult(NamedTuple):
    """Captured output and exit status of one command."""
    output: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner:
    """Interface for looking up and running executables."""

    def which(self, command: str) -> Optional[str]:
        """Return the resolved path of `command`, or None if it is not on PATH."""
        raise NotImplementedError

    def exists(self, command: str) -> bool:
        return self.which(command) is not None

    def run(self,
            args: Sequence[str],
            cwd: Optional[Union[str, Path]] = None,
            merge_stderr: bool = False,
            timeout: Optional[float] = None) -> CommandResult:
        """
        Run a command and capture its output.

        Args:
            args: Command and arguments
            cwd: Working directory
            merge_stderr: Capture stderr into the same stream as stdout
            timeout: Seconds before the command is abandoned

        Returns:
            Command output and exit code
        """
        raise NotImplementedError


class SubprocessRunner(CommandRunner):
    """Runs commands on the local host with subprocess."""

    def __init__(self, default_timeout: Optional[float] = None):
        self.logger = logging.getLogger(__name__)
        self.default_timeout = default_timeout

    def which(self, command: str) -> Optional[str]:
        # PATH is read on every lookup so session PATH updates are honoured
        return shutil.which(command, path=os.environ.get("PATH"))

    def run(self,
            args: Sequence[str],
            cwd: Optional[Union[str, Path]] = None,
            merge_stderr: bool = False,
            timeout: Optional[float] = None) -> CommandResult:
        cmd: List[str] = [str(a) for a in args]
        timeout = timeout if timeout is not None else self.default_timeout
        self.logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                text=True,
                errors="replace",
                timeout=timeout
            )
        except FileNotFoundError:
            self.logger.debug(f"Executable not found: {cmd[0]}")
            return CommandResult(output="", exit_code=127)
        except subprocess.TimeoutExpired:
            self.logger.warning(f"Command timed out after {timeout} seconds: {' '.join(cmd)}")
            return CommandResult(output="", exit_code=124)

        if result.returncode != 0:
            self.logger.debug(
                f"Command exited {result.returncode}: {' '.join(cmd)}\n{result.stderr or ''}"
            )
        return CommandResult(output=result.stdout or "", exit_code=result.returncode)
