"""
Environment installer: ensures the CDK toolchain exists, configures AWS
credentials and PATH, then hands over to the validator.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Dict, Iterable, List, MutableMapping, Optional

from config.settings import Settings
from ..integrations.aws_cli import AwsCli
from ..integrations.cdk_cli import CdkCli
from ..models.tool import ToolRequirement
from ..models.validation import ValidationSummary
from ..utils.console import Reporter
from .checks import npm_global_bin
from .command_runner import CommandRunner
from .credentials import CredentialSource, configure_credentials, default_sources
from .exceptions import InstallStepError, MissingToolError, PostInstallVerificationError
from .profile import extend_session_path, update_path
from .requirements import build_requirements
from .validator import EnvironmentValidator


class EnvironmentInstaller:
    """Installs the AWS CLI, TypeScript and AWS CDK on top of an existing Node.js."""

    def __init__(self,
                 settings: Settings,
                 runner: CommandRunner,
                 reporter: Optional[Reporter] = None,
                 credential_sources: Optional[Iterable[CredentialSource]] = None,
                 environ: Optional[MutableMapping[str, str]] = None,
                 validator_factory: Optional[Callable[[], EnvironmentValidator]] = None):
        """
        Initialize the installer.

        Args:
            settings: Application settings
            runner: Command runner used for every external call
            reporter: Console reporter
            credential_sources: Override the CSV-then-prompt credential sources
            environ: Process environment whose PATH is extended after installs
            validator_factory: Builds the validator run as the final step
        """
        self.logger = logging.getLogger(__name__)
        self.settings = settings
        self.runner = runner
        self.reporter = reporter or Reporter()
        self.environ = environ if environ is not None else os.environ
        self.credential_sources = credential_sources
        self.validator_factory = validator_factory or (
            lambda: EnvironmentValidator(settings, runner, self.reporter, self.environ)
        )
        self.requirements: Dict[str, ToolRequirement] = build_requirements(settings.tools)
        self.aws = AwsCli(runner)
        self.cdk = CdkCli(runner)

    def run(self) -> int:
        """
        Run the full setup sequence.

        Returns:
            Exit code of the final validation (0 if validation is disabled)

        Raises:
            MissingToolError: Node.js or npm is absent
            InstallStepError: An install command failed
            PostInstallVerificationError: A tool is still missing after installing it
        """
        self.reporter.detail("Starting AWS CDK Prerequisites Installation...", style="bold")
        self.reporter.detail("=" * 48)

        self.require_node()
        self.install_aws_cli()
        self.install_npm_package("tsc", "typescript")
        self.install_npm_package("cdk", "aws-cdk")

        self._print_installation_summary()
        npm_bin = npm_global_bin(self.runner, str(self.settings.installer.default_npm_bin))
        extend_session_path([str(self.settings.installer.aws_bin_dir), npm_bin], self.environ)
        self.reporter.success("All prerequisites installed successfully!")

        if self.settings.installer.configure_credentials:
            self.reporter.info("Setting up AWS configuration...")
            sources = self.credential_sources
            if sources is None:
                sources = default_sources(self.settings.aws, self.reporter)
            configure_credentials(self.settings.aws, sources, self.reporter)

        self.verify_identity()

        self.reporter.heading("Environment Setup Complete!")
        self.reporter.success("Restart your terminal or run 'source ~/.bashrc' to update your PATH.")
        self._print_next_steps()

        if not self.settings.installer.run_validation:
            return 0

        self.reporter.info("Running final environment validation...")
        summary: ValidationSummary = self.validator_factory().run()
        return summary.exit_code

    def _require(self, name: str) -> str:
        requirement = self.requirements[name]
        if not self.runner.exists(name):
            raise MissingToolError(
                f"{requirement.display_name} is not installed. "
                f"Please install {requirement.display_name} first.",
                hint=requirement.hint
            )
        result = self.runner.run([name, *requirement.version_args])
        version = result.output.strip()
        self.reporter.success(f"{requirement.display_name} is installed: {version}")
        return version

    def require_node(self):
        """Node.js and npm are preconditions; nothing else is attempted without them."""
        self.reporter.info("Checking Node.js installation...")
        self._require("node")
        self._require("npm")

    def _step(self, description: str, args: List[str], cwd: Optional[Path] = None):
        self.reporter.info(description)
        result = self.runner.run(
            args, cwd=cwd, merge_stderr=True, timeout=self.settings.installer.command_timeout
        )
        if not result.ok:
            self.logger.error(f"{' '.join(args)} exited {result.exit_code}:\n{result.output}")
            raise InstallStepError(
                f"{description.rstrip('.')} failed (exit code {result.exit_code})",
                output=result.output,
                hint=f"Re-run the command manually to see the error: {' '.join(args)}"
            )
        return result

    def _verify_installed(self, name: str):
        requirement = self.requirements[name]
        if not self.runner.exists(name):
            raise PostInstallVerificationError(
                f"{requirement.display_name} installation failed: '{name}' is still not on PATH",
                hint=requirement.hint
            )
        version = self._tool_version(name)
        self.reporter.success(f"{requirement.display_name} installed successfully: {version}")

    def _tool_version(self, name: str) -> str:
        if name == "aws":
            return self.aws.version()
        if name == "cdk":
            return self.cdk.version()
        requirement = self.requirements[name]
        result = self.runner.run(
            [name, *requirement.version_args], merge_stderr=requirement.merge_stderr
        )
        lines = result.output.strip().splitlines()
        return lines[0] if lines else ""

    def install_aws_cli(self):
        """Download and install AWS CLI v2 unless `aws` is already on PATH."""
        installer = self.settings.installer
        self.reporter.info("Installing AWS CLI v2...")
        if self.runner.exists("aws"):
            self.reporter.success(f"AWS CLI is already installed: {self._tool_version('aws')}")
            return

        with tempfile.TemporaryDirectory(prefix="awscli-") as work_dir:
            work_path = Path(work_dir)
            self._step("Downloading AWS CLI v2...",
                       ["curl", "-fsSL", installer.aws_cli_url, "-o", "awscliv2.zip"],
                       cwd=work_path)
            self._step("Extracting AWS CLI...", ["unzip", "-q", "awscliv2.zip"], cwd=work_path)

            install_cmd = [
                "./aws/install",
                "--bin-dir", str(installer.aws_bin_dir),
                "--install-dir", str(installer.aws_install_dir),
                "--update"
            ]
            if installer.use_sudo:
                install_cmd.insert(0, "sudo")
            self._step("Installing AWS CLI...", install_cmd, cwd=work_path)

            for profile_file in update_path(str(installer.aws_bin_dir), self.settings.profile.files):
                self.reporter.info(f"Added {installer.aws_bin_dir} to {profile_file}")
            self.reporter.info("Cleaning up...")

        extend_session_path([str(installer.aws_bin_dir)], self.environ)
        self._verify_installed("aws")

    def install_npm_package(self, command: str, package: str):
        """Install an npm package globally unless its command is already on PATH."""
        requirement = self.requirements[command]
        self.reporter.info(f"Installing {requirement.display_name} globally...")
        if self.runner.exists(command):
            self.reporter.success(
                f"{requirement.display_name} is already installed: {self._tool_version(command)}"
            )
            return

        self._step(f"Running npm install -g {package}...", ["npm", "install", "-g", package])

        npm_bin = npm_global_bin(self.runner, str(self.settings.installer.default_npm_bin))
        for profile_file in update_path(npm_bin, self.settings.profile.files):
            self.reporter.info(f"Added {npm_bin} to {profile_file}")
        extend_session_path([npm_bin], self.environ)
        self._verify_installed(command)

    def _print_installation_summary(self):
        self.reporter.heading("Installation Summary")
        for name in ("aws", "tsc", "cdk"):
            self.reporter.detail(
                f"{self.requirements[name].display_name}: {self._tool_version(name)}"
            )

    def _print_next_steps(self):
        self.reporter.heading("Next Steps")
        steps = [
            ("Verify installation", "aws --version && cdk --version && tsc --version"),
            ("Create a new CDK project",
             "mkdir my-cdk-app && cd my-cdk-app && cdk init app --language typescript"),
            ("Bootstrap CDK (first time only)", "cdk-env bootstrap"),
            ("Build and deploy", "npm run build && cdk deploy"),
        ]
        for number, (title, command) in enumerate(steps, start=1):
            self.reporter.detail(f"{number}. {title}:")
            self.reporter.detail(f"   {command}", style="dim")

    def verify_identity(self):
        """Confirm the configured credentials are accepted by STS. Failure only warns."""
        if not self.settings.aws.credentials_file.is_file():
            return
        self.reporter.info("Verifying AWS credentials...")
        identity = self.aws.caller_identity()
        if identity is None:
            self.reporter.warning(
                "AWS credentials verification failed. Please check your configuration.",
                hint="aws sts get-caller-identity"
            )
            return
        self.reporter.success("AWS credentials verified successfully!")
        self.reporter.detail(f"  Account ID: {identity.account}")
        self.reporter.detail(f"  User ARN: {identity.arn}")
        if identity.user_id:
            self.reporter.detail(f"  User ID: {identity.user_id}")
