"""
AWS CDK CLI integration.

Subcommands are invoked opaquely; callers only look at the exit code and,
for `--version`, the first field of the output.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..core.command_runner import CommandResult, CommandRunner


STACK_COMMANDS = ("list", "synth", "diff", "deploy", "destroy")


class CdkCli:
    """Wraps the `cdk` executable."""

    def __init__(self,
                 runner: CommandRunner,
                 executable: str = "cdk",
                 app_dir: Optional[Union[str, Path]] = None):
        self.logger = logging.getLogger(__name__)
        self.runner = runner
        self.executable = executable
        self.app_dir = app_dir

    def is_available(self) -> bool:
        return self.runner.exists(self.executable)

    def _run(self, args: Sequence[str]) -> CommandResult:
        self.logger.info(f"cdk {' '.join(args)}")
        return self.runner.run([self.executable, *args], cwd=self.app_dir, merge_stderr=True)

    def version(self) -> str:
        result = self._run(["--version"])
        lines = result.output.strip().splitlines()
        return lines[0] if lines else ""

    def list(self) -> CommandResult:
        return self._run(["list"])

    def synth(self, stacks: Sequence[str] = ()) -> CommandResult:
        return self._run(["synth", *stacks])

    def diff(self, stacks: Sequence[str] = ()) -> CommandResult:
        return self._run(["diff", *stacks])

    def deploy(self, stacks: Sequence[str] = (), require_approval: Optional[str] = None) -> CommandResult:
        args: List[str] = ["deploy", *stacks]
        if require_approval:
            args += ["--require-approval", require_approval]
        return self._run(args)

    def destroy(self, stacks: Sequence[str] = (), force: bool = False) -> CommandResult:
        args: List[str] = ["destroy", *stacks]
        if force:
            args.append("--force")
        return self._run(args)

    def bootstrap(self, account: str, region: str, verbose: bool = True) -> CommandResult:
        args = ["bootstrap", f"aws://{account}/{region}"]
        if verbose:
            args.append("--verbose")
        return self._run(args)

    def run_stack_command(self, command: str, stacks: Sequence[str] = (), force: bool = False) -> CommandResult:
        """Dispatch one of STACK_COMMANDS."""
        if command not in STACK_COMMANDS:
            raise ValueError(f"Unsupported cdk command: {command}")
        if command == "list":
            return self.list()
        if command == "synth":
            return self.synth(stacks)
        if command == "diff":
            return self.diff(stacks)
        if command == "deploy":
            return self.deploy(stacks, require_approval="never" if force else None)
        return self.destroy(stacks, force=force)
