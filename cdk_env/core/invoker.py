"""
Lambda invocation helpers for deployed CDK stacks.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from ..integrations.aws_cli import AwsCli
from ..models.aws import LambdaFunction
from ..utils.console import Reporter
from .command_runner import CommandRunner
from .exceptions import InvokeError, MissingToolError


def default_stack_name(app_dir: Path) -> str:
    """CDK apps created with `cdk init` name their stack `<DirName>Stack`."""
    return f"{Path(app_dir).resolve().name}Stack"


def render_json(text: str) -> str:
    """Pretty-print JSON, or return the text unchanged when it is not JSON."""
    try:
        return json.dumps(json.loads(text), indent=2)
    except ValueError:
        return text


class LambdaInvoker:
    """Finds a stack's functions and invokes one of them."""

    def __init__(self,
                 runner: CommandRunner,
                 reporter: Optional[Reporter] = None,
                 prompt: Callable[[str], str] = input):
        self.logger = logging.getLogger(__name__)
        self.aws = AwsCli(runner)
        self.reporter = reporter or Reporter()
        self.prompt = prompt

    def _require_aws(self):
        if not self.aws.is_available():
            raise MissingToolError("AWS CLI is not installed.", hint="Run 'cdk-env setup' first")

    def discover(self, stack_name: str) -> List[LambdaFunction]:
        self._require_aws()
        self.reporter.info(f"Looking for Lambda functions in stack: {stack_name}")
        functions = self.aws.list_functions(name_contains=stack_name)
        if not functions:
            available = ", ".join(f.name for f in self.aws.list_functions()) or "none"
            raise InvokeError(
                f"No Lambda functions found for stack: {stack_name}",
                hint=f"Available functions: {available}"
            )
        self.reporter.success(f"Found {len(functions)} Lambda function(s):")
        for function in functions:
            self.reporter.detail(f"  - {function.name} ({function.runtime}, {function.handler})")
        return functions

    def choose(self, functions: List[LambdaFunction]) -> LambdaFunction:
        if len(functions) == 1:
            return functions[0]

        self.reporter.detail("Multiple functions found. Please select:")
        for index, function in enumerate(functions, start=1):
            self.reporter.detail(f"{index}. {function.name}")
        selection = self.prompt(f"Enter function number (1-{len(functions)}): ").strip()
        if not selection.isdigit() or not 1 <= int(selection) <= len(functions):
            raise InvokeError(f"Invalid selection: {selection!r}")
        return functions[int(selection) - 1]

    def invoke(self,
               function_name: str,
               payload_file: Optional[Path] = None,
               response_file: Optional[Path] = None) -> str:
        """
        Invoke a function and return its (pretty-printed) response.

        Raises:
            InvokeError: payload file missing or invocation failed
        """
        self._require_aws()
        if payload_file is not None and not Path(payload_file).is_file():
            raise InvokeError(f"Payload file not found: {payload_file}")

        response_file = Path(
            response_file or f"response-{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        )

        self.reporter.info(f"Invoking Lambda function: {function_name}")
        if payload_file is not None:
            self.reporter.detail(f"Using payload file: {payload_file}")
            self.reporter.detail(render_json(Path(payload_file).read_text(encoding="utf-8")))
        else:
            self.reporter.detail("No payload provided, using empty payload")

        result = self.aws.invoke(function_name, response_file, payload_file)
        if not result.ok:
            raise InvokeError(
                f"Function invocation failed: {function_name}",
                hint=result.output.strip().splitlines()[-1] if result.output.strip() else None
            )

        self.reporter.success("Function invoked successfully!")
        response = render_json(response_file.read_text(encoding="utf-8")) if response_file.is_file() else ""
        self.reporter.detail(response)
        self.reporter.detail(f"Raw response saved to: {response_file}")

        log_group = f"/aws/lambda/{function_name}"
        self.reporter.info(f"CloudWatch log group: {log_group}")
        self.reporter.detail(f"  aws logs tail {log_group} --follow", style="dim")
        self.reporter.detail(f"  aws logs tail {log_group} --since 5m", style="dim")
        return response

    def invoke_from_stack(self,
                          stack_name: str,
                          payload_file: Optional[Path] = None,
                          response_file: Optional[Path] = None) -> str:
        function = self.choose(self.discover(stack_name))
        self.reporter.info(f"Selected function: {function.name}")
        return self.invoke(function.name, payload_file, response_file)
