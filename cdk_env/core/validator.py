"""
Environment validator: read-only checks over the CDK toolchain with a
PASS / WARN / FAIL verdict.
"""

import logging
import os
from typing import Dict, Mapping, Optional

from config.settings import Settings
from ..integrations.aws_cli import AwsCli
from ..integrations.cdk_cli import CdkCli
from ..models.tool import ToolRequirement
from ..models.validation import CheckResult, CheckStatus, ValidationSummary
from ..utils.console import Reporter
from .checks import (
    ValidationSession,
    check_credentials_file,
    check_path_contains,
    check_region_configured,
    check_tool,
    npm_global_bin,
)
from .command_runner import CommandRunner
from .requirements import build_requirements


class EnvironmentValidator:
    """Runs every environment check in order and reports a verdict."""

    def __init__(self,
                 settings: Settings,
                 runner: CommandRunner,
                 reporter: Optional[Reporter] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Initialize the validator.

        Args:
            settings: Application settings (paths, minimum versions)
            runner: Command runner used for every external call
            reporter: Console reporter
            environ: Environment to inspect for PATH, defaults to os.environ
        """
        self.logger = logging.getLogger(__name__)
        self.settings = settings
        self.runner = runner
        self.reporter = reporter or Reporter()
        self.environ = environ if environ is not None else os.environ
        self.requirements: Dict[str, ToolRequirement] = build_requirements(settings.tools)
        self.aws = AwsCli(runner)
        self.cdk = CdkCli(runner)

    def run(self) -> ValidationSummary:
        """
        Run all checks.

        Returns:
            The summary for this run; `summary.exit_code` is the process exit status
        """
        session = ValidationSession(self.reporter, ValidationSummary())

        self.reporter.detail("AWS CDK Environment Validation", style="bold")
        self.reporter.detail("=" * 30)

        self._check_system_prerequisites(session)
        self._check_aws_tools(session)
        self._check_development_tools(session)
        self._check_environment_variables(session)
        self._check_cdk_functionality(session)

        self._report(session.summary)
        self.logger.info(
            f"Validation finished: {session.summary.verdict.value} "
            f"({session.summary.passed} passed, {session.summary.warned} warnings, "
            f"{session.summary.failed} failed)"
        )
        return session.summary

    def _check_tool(self, session: ValidationSession, name: str) -> CheckResult:
        requirement = self.requirements[name]
        self.reporter.check(f"Checking {requirement.display_name} installation...")
        return session.record(check_tool(requirement, self.runner))

    def _check_system_prerequisites(self, session: ValidationSession):
        self.reporter.heading("Checking System Prerequisites...", "-")
        self._check_tool(session, "node")
        self._check_tool(session, "npm")

    def _check_aws_tools(self, session: ValidationSession):
        aws_settings = self.settings.aws
        self.reporter.heading("Checking AWS Tools...", "-")
        self._check_tool(session, "aws")

        self.reporter.check("Checking AWS credentials configuration...")
        session.record(check_credentials_file(aws_settings.credentials_file))

        self.reporter.check("Checking AWS config file...")
        if aws_settings.config_file.is_file():
            session.record(CheckResult.passed(
                "aws:config", f"AWS config file exists ({aws_settings.config_file})"
            ))
            session.record(check_region_configured(aws_settings.config_file))
        else:
            session.record(CheckResult.failed(
                "aws:config",
                f"AWS config file not found ({aws_settings.config_file})",
                "Run 'cdk-env setup' or 'aws configure'"
            ))

        self.reporter.check("Testing AWS credentials...")
        identity = self.aws.caller_identity() if self.aws.is_available() else None
        if identity:
            session.record(CheckResult.passed("aws:identity", "AWS credentials are valid"))
            self.reporter.info(f"Account ID: {identity.account}")
            self.reporter.info(f"User ARN: {identity.arn}")
        else:
            session.record(CheckResult.failed(
                "aws:identity",
                "AWS credentials test failed",
                "Run 'aws configure' or re-run 'cdk-env setup'"
            ))

    def _check_development_tools(self, session: ValidationSession):
        self.reporter.heading("Checking Development Tools...", "-")
        self._check_tool(session, "tsc")
        self._check_tool(session, "cdk")

    def _check_environment_variables(self, session: ValidationSession):
        self.reporter.heading("Checking Environment Variables...", "-")
        path_env = self.environ.get("PATH", "")

        self.reporter.check("Checking PATH configuration...")
        session.record(check_path_contains("/usr/local/bin", path_env, "path:usr-local-bin"))

        if self.runner.exists("npm"):
            npm_bin = npm_global_bin(self.runner, str(self.settings.installer.default_npm_bin))
            session.record(check_path_contains(
                npm_bin, path_env, "path:npm-global-bin", label="npm global bin directory: "
            ))

    def _check_cdk_functionality(self, session: ValidationSession):
        self.reporter.heading("Testing CDK Functionality...", "-")
        cdk_available = self.cdk.is_available()

        self.reporter.check("Testing CDK list command...")
        if cdk_available and self.cdk.list().ok:
            session.record(CheckResult.passed("cdk:list", "CDK list command works"))
        elif cdk_available:
            # cdk list fails outside a CDK app, which is expected
            session.record(CheckResult.passed("cdk:list", "CDK command is functional"))
        else:
            session.record(CheckResult.failed(
                "cdk:list", "CDK command test failed", "npm install -g aws-cdk"
            ))

        self.reporter.check("Checking CDK bootstrap status...")
        stack_name = self.settings.bootstrap.toolkit_stack_name
        if self.aws.is_available() and cdk_available:
            if self.aws.stack_exists(stack_name):
                session.record(CheckResult.passed(
                    "cdk:bootstrap", "CDK is bootstrapped in current region"
                ))
            else:
                session.record(CheckResult.warned(
                    "cdk:bootstrap",
                    "CDK is not bootstrapped",
                    "Run 'cdk-env bootstrap' before deploying"
                ))
        else:
            session.record(CheckResult.warned(
                "cdk:bootstrap",
                "Cannot check bootstrap status - AWS CLI or CDK not available"
            ))

    def _report(self, summary: ValidationSummary):
        self.reporter.heading("Validation Summary")
        self.reporter.detail(f"Total checks: {summary.total}")
        self.reporter.detail(f"Passed: {summary.passed}", style="bold green")
        if summary.warned > 0:
            self.reporter.detail(f"Warnings: {summary.warned}", style="bold yellow")
        if summary.failed > 0:
            self.reporter.detail(f"Failed: {summary.failed}", style="bold red")
        self.reporter.blank()

        verdict = summary.verdict
        if verdict == CheckStatus.PASS:
            self.reporter.detail(
                "Environment validation PASSED! Your AWS CDK environment is ready.",
                style="bold green"
            )
            self.reporter.blank()
            self.reporter.detail("Ready for:")
            self.reporter.detail("- Creating CDK projects: cdk init app --language typescript")
            self.reporter.detail("- Bootstrap (if needed): cdk-env bootstrap")
            self.reporter.detail("- Building projects: npm run build")
            self.reporter.detail("- Deploying stacks: cdk-env stack deploy")
        elif verdict == CheckStatus.WARN:
            self.reporter.detail(
                "Environment validation completed with WARNINGS.", style="bold yellow"
            )
            self.reporter.detail(
                "Your environment should work, but consider addressing the warnings above."
            )
        else:
            self.reporter.detail("Environment validation FAILED!", style="bold red")
            self.reporter.detail("Please address the failed checks above before using AWS CDK.")
            self.reporter.blank()
            self.reporter.detail("Quick fixes:")
            self.reporter.detail("- Missing tools: run 'cdk-env setup'")
            self.reporter.detail("- AWS credentials: run 'aws configure'")
            self.reporter.detail("- PATH issues: restart terminal or run 'source ~/.bashrc'")
