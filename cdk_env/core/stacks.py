"""
Opaque `cdk` stack commands: check the CLI is present, run, report.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..integrations.cdk_cli import CdkCli
from ..utils.console import Reporter
from .command_runner import CommandRunner
from .exceptions import InstallStepError, MissingToolError


class StackCommands:
    """Runs list / synth / diff / deploy / destroy inside a CDK app directory."""

    def __init__(self,
                 runner: CommandRunner,
                 app_dir: Optional[Path] = None,
                 reporter: Optional[Reporter] = None):
        self.logger = logging.getLogger(__name__)
        self.cdk = CdkCli(runner, app_dir=app_dir)
        self.reporter = reporter or Reporter()

    def run(self, command: str, stacks: Sequence[str] = (), force: bool = False) -> str:
        """
        Run a stack command and return its output.

        `cdk diff` exits 1 when differences exist, so for diff only exit codes
        above 1 count as failure.

        Raises:
            MissingToolError: cdk is not on PATH
            InstallStepError: the command failed
        """
        if not self.cdk.is_available():
            raise MissingToolError("AWS CDK is not installed.", hint="npm install -g aws-cdk")

        self.reporter.info(f"Running cdk {command} {' '.join(stacks)}".rstrip())
        result = self.cdk.run_stack_command(command, stacks, force=force)
        if result.output:
            self.reporter.detail(result.output.rstrip())

        failed = result.exit_code > 1 if command == "diff" else not result.ok
        if failed:
            raise InstallStepError(
                f"cdk {command} failed (exit code {result.exit_code})",
                output=result.output,
                hint="Run the command from the CDK app directory (the one with cdk.json)"
            )
        self.reporter.success(f"cdk {command} completed")
        return result.output
