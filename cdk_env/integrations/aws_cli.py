"""
AWS CLI integration: identity, configuration, CloudFormation and Lambda queries.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..core.command_runner import CommandResult, CommandRunner
from ..models.aws import CallerIdentity, LambdaFunction


class AwsCli:
    """Wraps the `aws` executable. Output is parsed as JSON where the CLI offers it."""

    def __init__(self, runner: CommandRunner, executable: str = "aws"):
        self.logger = logging.getLogger(__name__)
        self.runner = runner
        self.executable = executable

    def is_available(self) -> bool:
        return self.runner.exists(self.executable)

    def _run(self, *args: str, **kwargs) -> CommandResult:
        return self.runner.run([self.executable, *args], **kwargs)

    def _run_json(self, *args: str) -> Optional[Any]:
        result = self._run(*args, "--output", "json")
        if not result.ok:
            return None
        try:
            return json.loads(result.output)
        except ValueError as e:
            self.logger.warning(f"Unparseable JSON from aws {' '.join(args)}: {e}")
            return None

    def version(self) -> str:
        """Raw `aws --version` line; older releases print it on stderr."""
        result = self._run("--version", merge_stderr=True)
        lines = result.output.strip().splitlines()
        return lines[0] if lines else ""

    def caller_identity(self) -> Optional[CallerIdentity]:
        """
        Query STS for the active principal.

        Returns:
            The identity, or None if the credentials are missing or rejected
        """
        data = self._run_json("sts", "get-caller-identity")
        if data is None:
            return None
        try:
            return CallerIdentity.model_validate(data)
        except ValidationError as e:
            self.logger.warning(f"Unexpected get-caller-identity payload: {e}")
            return None

    def configured_region(self) -> Optional[str]:
        result = self._run("configure", "get", "region")
        region = result.output.strip()
        return region if result.ok and region else None

    def describe_stack(self, stack_name: str, region: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Return the CloudFormation description of a stack, or None when it does not exist."""
        args = ["cloudformation", "describe-stacks", "--stack-name", stack_name]
        if region:
            args += ["--region", region]
        data = self._run_json(*args)
        if not data or not data.get("Stacks"):
            return None
        return data["Stacks"][0]

    def stack_exists(self, stack_name: str, region: Optional[str] = None) -> bool:
        return self.describe_stack(stack_name, region) is not None

    @staticmethod
    def stack_parameter(stack: Dict[str, Any], key: str) -> Optional[str]:
        for param in stack.get("Parameters") or []:
            if param.get("ParameterKey") == key:
                return param.get("ParameterValue")
        return None

    def list_functions(self, name_contains: Optional[str] = None) -> List[LambdaFunction]:
        """List Lambda functions, optionally those whose name contains a substring."""
        data = self._run_json(
            "lambda", "list-functions",
            "--query", "Functions[].{Name:FunctionName,Runtime:Runtime,Handler:Handler}"
        )
        functions = [LambdaFunction.model_validate(item) for item in data or []]
        if name_contains:
            functions = [f for f in functions if name_contains in f.name]
        return functions

    def invoke(self,
               function_name: str,
               response_file: Path,
               payload_file: Optional[Path] = None) -> CommandResult:
        args = ["lambda", "invoke", "--function-name", function_name]
        if payload_file:
            args += ["--payload", f"file://{payload_file}", "--cli-binary-format", "raw-in-base64-out"]
        args.append(str(response_file))
        return self._run(*args, merge_stderr=True)
