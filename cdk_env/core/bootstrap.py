"""
CDK bootstrap: provisions the toolkit stack in the current account and region.
"""

import logging
from typing import Callable, Optional

from config.settings import Settings
from ..integrations.aws_cli import AwsCli
from ..integrations.cdk_cli import CdkCli
from ..models.aws import BootstrapResult
from ..utils.console import Reporter
from .command_runner import CommandRunner
from .exceptions import CredentialsError, InstallStepError, MissingToolError


def ask_yes_no(question: str,
               prompt: Callable[[str], str] = input,
               reporter: Optional[Reporter] = None,
               default: bool = False) -> bool:
    """Ask until the answer is yes, no or empty (the default)."""
    reporter = reporter or Reporter()
    while True:
        answer = prompt(f"{question} [{'Y/n' if default else 'y/N'}]: ").strip().lower()
        if not answer:
            return default
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        reporter.warning("Please answer yes (y) or no (n).")


class CdkBootstrapper:
    """Bootstraps the CDK toolkit stack, asking before updating an existing one."""

    def __init__(self,
                 settings: Settings,
                 runner: CommandRunner,
                 reporter: Optional[Reporter] = None,
                 prompt: Callable[[str], str] = input,
                 assume_yes: bool = False):
        self.logger = logging.getLogger(__name__)
        self.settings = settings
        self.reporter = reporter or Reporter()
        self.prompt = prompt
        self.assume_yes = assume_yes
        self.aws = AwsCli(runner)
        self.cdk = CdkCli(runner)
        self.stack_name = settings.bootstrap.toolkit_stack_name

    def check_prerequisites(self):
        self.reporter.info("Checking prerequisites...")
        if not self.aws.is_available():
            raise MissingToolError("AWS CLI is not installed.", hint="Run 'cdk-env setup' first")
        if not self.cdk.is_available():
            raise MissingToolError("AWS CDK is not installed.", hint="Run 'cdk-env setup' first")

    def _stack_state(self, region: str):
        stack = self.aws.describe_stack(self.stack_name, region)
        if stack is None:
            return None, None
        version = AwsCli.stack_parameter(stack, "BootstrapVersion") or "Unknown"
        return version, stack.get("StackStatus")

    def run(self) -> BootstrapResult:
        """
        Bootstrap if needed.

        Raises:
            MissingToolError: aws or cdk is not on PATH
            CredentialsError: STS rejects the configured credentials
            InstallStepError: `cdk bootstrap` exited non-zero
        """
        self.check_prerequisites()

        identity = self.aws.caller_identity()
        if identity is None:
            raise CredentialsError(
                "AWS credentials are not configured or invalid.",
                hint="Run 'aws configure' or 'cdk-env setup'"
            )
        self.reporter.success("Prerequisites check passed!")

        region = self.aws.configured_region() or self.settings.aws.region
        self.reporter.info("Getting AWS account information...")
        self.reporter.detail(f"  Account ID: {identity.account}")
        self.reporter.detail(f"  Region: {region}")
        self.reporter.detail(f"  User ARN: {identity.arn}")

        self.reporter.info(f"Checking if CDK is already bootstrapped in {region}...")
        version, status = self._stack_state(region)
        if status is not None:
            self.reporter.warning(f"CDK is already bootstrapped in region {region}")
            self.reporter.info(f"Current bootstrap version: {version}")
            perform = self.assume_yes or ask_yes_no(
                "Would you like to update the bootstrap stack?", self.prompt, self.reporter
            )
            if not perform:
                self.reporter.info("Skipping bootstrap update.")
        else:
            self.reporter.info(f"CDK is not bootstrapped in region {region}. Proceeding with bootstrap...")
            perform = True

        if perform:
            version, status = self._bootstrap(identity.account, region)

        result = BootstrapResult(
            account=identity.account,
            region=region,
            bootstrapped=status is not None,
            performed=perform,
            bootstrap_version=version,
            stack_status=status
        )
        self._report(result)
        return result

    def _bootstrap(self, account: str, region: str):
        self.reporter.info(f"Bootstrapping CDK in account {account}, region {region}...")
        self.reporter.detail("This may take a few minutes...")
        result = self.cdk.bootstrap(account, region, verbose=self.settings.bootstrap.verbose)
        if result.output:
            self.logger.debug(result.output)
        if not result.ok:
            raise InstallStepError(
                "CDK bootstrap failed!",
                output=result.output,
                hint=f"Run 'cdk bootstrap aws://{account}/{region} --verbose' to see the error"
            )
        self.reporter.success("CDK bootstrap completed successfully!")

        self.reporter.info("Verifying bootstrap...")
        version, status = self._stack_state(region)
        if status is None:
            self.reporter.warning("Could not verify bootstrap stack, but bootstrap command succeeded.")
        else:
            self.reporter.success("Bootstrap verification passed!")
            self.reporter.detail(f"  Bootstrap Version: {version}")
            self.reporter.detail(f"  Stack Status: {status}")
        return version, status

    def _report(self, result: BootstrapResult):
        self.reporter.heading("CDK Bootstrap Summary")
        self.reporter.success(f"Account: {result.account}")
        self.reporter.success(f"Region: {result.region}")
        if result.performed:
            self.reporter.success("Bootstrap: Completed")
        else:
            self.reporter.success("Bootstrap: Already exists (no changes made)")
